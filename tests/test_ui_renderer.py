import numpy as np

from config import UI_COLORS
from conftest import VERTICAL, draw, make_points
from demo_playback import DemoPlayback
from drawing_session import DrawingSession
from ui_renderer import AnimationManager, UIRenderer


def test_render_draws_finished_strokes(two_stroke_template):
    renderer = UIRenderer()
    session = DrawingSession(two_stroke_template)
    draw(session, VERTICAL)

    frame = renderer.render_session(session)
    assert frame.shape == (400, 400, 3)
    # vertical stroke scored 87 -> drawn in the "correct" colour
    assert tuple(frame[250, 200]) == UI_COLORS["correct_green"]


def test_render_shows_pending_hint(two_stroke_template):
    renderer = UIRenderer()
    session = DrawingSession(two_stroke_template)
    draw(session, VERTICAL)

    frame = renderer.render_session(session)
    # second template stroke starts at (150, 170): numbered hint dot
    assert tuple(frame[170, 143]) == UI_COLORS["hint_dot"]


def test_demo_replaces_session_view(two_stroke_template):
    renderer = UIRenderer()
    session = DrawingSession(two_stroke_template)
    playback = DemoPlayback(two_stroke_template)

    frame = renderer.render_session(session, playback, elapsed_ms=100, panel_height=120)
    assert frame.shape == (520, 400, 3)
    assert tuple(frame[280, 200]) == UI_COLORS["demo_stroke"]
    # horizontal stroke not revealed yet
    assert tuple(frame[170, 240]) != UI_COLORS["demo_stroke"]


def test_ui_panel_and_progress_bar():
    renderer = UIRenderer()
    frame = renderer.new_canvas(520)
    renderer.draw_ui_panel(frame, "ko kai - chicken", "Stroke 1 / 2", ["Stroke 1 correct!"])
    renderer.draw_progress_bar(frame, 0.5, 10, 480, width=100)

    assert tuple(frame[510, 5]) == UI_COLORS["panel_bg"]
    assert tuple(frame[487, 30]) == UI_COLORS["correct_green"]


def test_arrow_ignores_degenerate_strokes():
    renderer = UIRenderer()
    canvas = renderer.new_canvas()
    before = canvas.copy()
    renderer.draw_animated_arrow(canvas, make_points([(10, 10)]), 0.5)
    renderer.draw_animated_arrow(canvas, make_points([(10, 10), (10, 10)]), 0.5)
    assert np.array_equal(canvas, before)

    renderer.draw_animated_arrow(canvas, make_points([(50, 200), (350, 200)]), 0.5)
    assert not np.array_equal(canvas, before)


def test_animation_manager_uses_clock():
    now = [10.0]
    anim = AnimationManager(clock=lambda: now[0])
    now[0] = 11.25
    assert anim.elapsed_ms() == 1250.0
    anim.reset()
    assert anim.elapsed_ms() == 0.0

import pytest

from characters import fallback_demo_strokes
from conftest import make_expected
from demo_playback import DemoPlayback


@pytest.fixture
def playback():
    strokes = [
        make_expected([(200, 100), (200, 300)], 1, "vertical"),
        make_expected([(150, 170), (250, 170)], 2, "horizontal"),
        make_expected([(150, 280), (250, 280)], 3, "horizontal"),
    ]
    return DemoPlayback(strokes, stroke_interval_ms=1500, hold_ms=1000)


def test_duration(playback):
    assert playback.duration_ms == 5500


@pytest.mark.parametrize("elapsed, count", [
    (-1, 0), (0, 1), (1499, 1), (1500, 2), (3000, 3), (5499, 3), (5500, 0),
])
def test_strokes_revealed_over_time(playback, elapsed, count):
    assert playback.revealed_count(elapsed) == count
    assert len(playback.visible_strokes(elapsed)) == count


def test_progress(playback):
    assert playback.progress(0) == pytest.approx(1 / 3)
    assert playback.progress(3200) == pytest.approx(1.0)
    assert playback.progress(6000) == 0.0


def test_active_stroke_fraction(playback):
    stroke, fraction = playback.active_stroke(2250)
    assert stroke.order == 2
    assert fraction == pytest.approx(0.5)

    stroke, fraction = playback.active_stroke(5000)
    assert stroke.order == 3
    assert fraction == 1.0

    assert playback.active_stroke(5500) is None


def test_finished(playback):
    assert not playback.is_finished(5499)
    assert playback.is_finished(5500)


def test_empty_playback():
    empty = DemoPlayback([])
    assert empty.duration_ms == 1000
    assert empty.visible_strokes(10) == []
    assert empty.progress(10) == 0.0
    assert empty.active_stroke(10) is None


def test_generic_demo_plays_two_strokes():
    demo = DemoPlayback(fallback_demo_strokes())
    assert demo.duration_ms == 4000
    assert [e.direction for e in demo.visible_strokes(1600)] == ["vertical", "horizontal"]

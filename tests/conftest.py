import pytest

from stroke_engine import ExpectedStroke, Stroke, StrokePoint


def make_points(coords, step_ms=100):
    """StrokePoints at evenly spaced times from (x, y) pairs."""
    return [StrokePoint(float(x), float(y), i * step_ms) for i, (x, y) in enumerate(coords)]


def make_stroke(coords, stroke_id="s", step_ms=100):
    return Stroke(stroke_id, make_points(coords, step_ms))


def make_expected(coords, order, direction, stroke_id=None):
    return ExpectedStroke(stroke_id or f"stroke-{order}", make_points(coords), order, direction)


def draw(session, coords, t0=0, step_ms=100):
    """Feed one stroke through the session's pointer API."""
    pts = [StrokePoint(float(x), float(y), t0 + i * step_ms) for i, (x, y) in enumerate(coords)]
    session.start_stroke(pts[0])
    for p in pts[1:]:
        session.add_point(p)
    return session.end_stroke()


@pytest.fixture
def two_stroke_template():
    # vertical from the top, then a horizontal crossing near the midline
    return [
        make_expected([(200, 100), (200, 300)], 1, "vertical"),
        make_expected([(150, 170), (250, 170)], 2, "horizontal"),
    ]


VERTICAL = [(200, 100), (200, 200), (200, 300)]
HORIZONTAL = [(150, 170), (200, 170), (250, 170)]

"""
Stroke Analysis Engine
- Classifies finished strokes (direction, positional order, accuracy)
- Matches strokes against a character's expected stroke template
- Validates stroke order and scores a whole attempt
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Tuple, Optional, Sequence

import numpy as np

from config import (
    AnalysisSettings,
    DEFAULT_SETTINGS,
    DEFAULT_STROKE_COLOR,
    STROKE_WIDTH_USER,
)

logger = logging.getLogger(__name__)

DIRECTIONS = ("horizontal", "vertical", "diagonal", "curve")
UNKNOWN_DIRECTION = "unknown"


class TemplateError(ValueError):
    """Raised when a character's stroke template is malformed."""


# ===============================
# Data Model
# ===============================

@dataclass(frozen=True)
class StrokePoint:
    """One pointer sample in canvas pixels; timestamp in ms from stroke start."""
    x: float
    y: float
    timestamp_ms: float = 0.0


@dataclass(frozen=True)
class Stroke:
    """A finished pen-down to pen-up motion."""
    id: str
    points: Tuple[StrokePoint, ...]
    color: str = DEFAULT_STROKE_COLOR
    width: float = STROKE_WIDTH_USER

    def __post_init__(self):
        object.__setattr__(self, "points", tuple(self.points))


@dataclass(frozen=True)
class ExpectedStroke:
    """One entry of a character's stroke-order template."""
    stroke_id: str
    points: Tuple[StrokePoint, ...]
    order: int
    direction: str
    start_region: str = ""
    end_region: str = ""

    def __post_init__(self):
        object.__setattr__(self, "points", tuple(self.points))


@dataclass(frozen=True)
class StrokeClassification:
    order: int
    direction: str
    accuracy: int


UNDETECTABLE = StrokeClassification(order=0, direction=UNKNOWN_DIRECTION, accuracy=0)


@dataclass(frozen=True)
class StrokeMatch:
    """Outcome of comparing one drawn stroke with one expected stroke."""
    is_correct: bool
    reason: str
    detected: StrokeClassification
    start_distance: float
    end_distance: float
    tolerance: float
    position_score: float
    shape_similarity: float


@dataclass(frozen=True)
class SequenceValidation:
    is_valid: bool
    expected_order: List[int]
    actual_order: List[int]


@dataclass(frozen=True)
class AccuracyBreakdown:
    stroke_count_accuracy: float
    shape_accuracy: float
    correct_strokes: int
    accuracy: int


# ===============================
# Geometry Utils
# ===============================

def _points_of(stroke) -> Sequence[StrokePoint]:
    return stroke.points if hasattr(stroke, "points") else stroke


def _coords(points: Sequence[StrokePoint]) -> np.ndarray:
    """(n, 2) float array of the x/y coordinates."""
    if len(points) == 0:
        return np.zeros((0, 2), dtype=np.float64)
    return np.array([(p.x, p.y) for p in points], dtype=np.float64)


def dist(a: StrokePoint, b: StrokePoint) -> float:
    """Euclidean distance between two points."""
    return math.hypot(b.x - a.x, b.y - a.y)


def polyline_length(points: Sequence[StrokePoint]) -> float:
    """Total length of a polyline."""
    arr = _coords(points)
    if len(arr) < 2:
        return 0.0
    return float(np.sum(np.linalg.norm(np.diff(arr, axis=0), axis=1)))


def _line_deviation(prev: StrokePoint, curr: StrokePoint, nxt: StrokePoint) -> float:
    """Perpendicular distance of curr from the line through prev and nxt."""
    sx, sy = nxt.x - prev.x, nxt.y - prev.y
    seg_len = math.hypot(sx, sy)
    if seg_len < 1e-9:
        return dist(prev, curr)
    return abs(sx * (curr.y - prev.y) - sy * (curr.x - prev.x)) / seg_len


def calculate_curvature(points: Sequence[StrokePoint], degrees: bool = False) -> float:
    """
    Mean absolute turning angle between consecutive segments.

    By default turns are raw heading differences in radians. With degrees=True
    each turn is converted to degrees and wrapped to [0, 180].
    """
    arr = _coords(points)
    if len(arr) < 3:
        return 0.0
    seg = np.diff(arr, axis=0)
    headings = np.arctan2(seg[:, 1], seg[:, 0])
    turns = np.abs(np.diff(headings))
    if degrees:
        turns = np.degrees(turns)
        turns = np.where(turns > 180.0, 360.0 - turns, turns)
    return float(np.mean(turns))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _score(value: float, low: int = 0, high: int = 100) -> int:
    """Round a 0-100 score and clamp it; non-finite values score zero."""
    if not math.isfinite(value):
        return low
    return max(low, min(high, _round_half_up(value)))


# ===============================
# Geometric Classifier
# ===============================

def classify_direction(angle: float, tolerance: float = DEFAULT_SETTINGS.direction_tolerance_deg) -> str:
    """Map a start-to-end angle (degrees, -180..180) to a direction class."""
    def near(*targets):
        return any(abs(angle - t) < tolerance for t in targets)

    if near(0.0, 180.0, -180.0):
        return "horizontal"
    if near(90.0, -90.0):
        return "vertical"
    if near(45.0, -45.0, 135.0, -135.0):
        return "diagonal"
    return "curve"


def positional_order(start_y: float, settings: AnalysisSettings = DEFAULT_SETTINGS) -> int:
    """Coarse order class from where the stroke starts relative to the midline."""
    if start_y < settings.order_midline_y - settings.order_band_px:
        return 1
    if start_y < settings.order_midline_y + settings.order_band_px:
        return 2
    return 3


class LiveStrokeTracker:
    """
    Running classifier for a stroke that is still being drawn.

    Each add() is O(1): the start/end chord, the summed interior deviation and
    the velocity sums are maintained incrementally, so classification() on the
    points seen so far is identical to classify_stroke on the same points.
    """

    def __init__(self, settings: Optional[AnalysisSettings] = None):
        self.settings = settings or DEFAULT_SETTINGS
        self.reset()

    def reset(self):
        self.count = 0
        self._start = None
        self._prev = None
        self._last = None
        self._total_deviation = 0.0
        self._speed_count = 0
        self._speed_sum = 0.0
        self._speed_sq_sum = 0.0

    def add(self, point: StrokePoint):
        if self._last is None:
            self._start = point
        else:
            dt = point.timestamp_ms - self._last.timestamp_ms
            speed = dist(self._last, point) / dt if dt > 0 else 0.0
            self._speed_count += 1
            self._speed_sum += speed
            self._speed_sq_sum += speed * speed
            if self._prev is not None:
                self._total_deviation += _line_deviation(self._prev, self._last, point)
        self._prev = self._last
        self._last = point
        self.count += 1

    def smoothness(self) -> float:
        if self.count <= 2:
            return 1.0
        scale = self.count * self.settings.smoothness_scale
        return max(0.0, 1.0 - self._total_deviation / scale)

    def speed_consistency(self) -> float:
        if self.count <= 2:
            return 1.0
        mean = self._speed_sum / self._speed_count
        if not mean > 0:
            return 1.0
        variance = max(0.0, self._speed_sq_sum / self._speed_count - mean * mean)
        return max(0.0, 1.0 - math.sqrt(variance) / mean)

    def classification(self) -> StrokeClassification:
        if self.count < 2:
            return UNDETECTABLE

        s = self.settings
        dx = self._last.x - self._start.x
        dy = self._last.y - self._start.y
        angle = math.degrees(math.atan2(dy, dx))

        direction = classify_direction(angle, s.direction_tolerance_deg)
        order = positional_order(self._start.y, s)

        chord = math.hypot(dx, dy)
        expected = s.expected_stroke_length
        length_fidelity = max(0.0, 1.0 - abs(chord - expected) / expected) if expected > 0 else 0.0

        blended = (
            length_fidelity * s.length_weight
            + self.smoothness() * s.smoothness_weight
            + self.speed_consistency() * s.speed_weight
        )
        return StrokeClassification(order=order, direction=direction, accuracy=_score(blended * 100))


def classify_stroke(stroke, settings: Optional[AnalysisSettings] = None) -> StrokeClassification:
    """
    Derive (order, direction, accuracy) from a stroke's points.
    Strokes with fewer than 2 points are undetectable.
    """
    tracker = LiveStrokeTracker(settings)
    for point in _points_of(stroke):
        tracker.add(point)
    return tracker.classification()


# ===============================
# Template Matching
# ===============================

def _position_tolerance(stroke_len: float, expected_len: float, settings: AnalysisSettings) -> float:
    if expected_len < 1e-6:
        factor = 1.0
    else:
        factor = min(stroke_len / expected_len, settings.max_tolerance_factor)
    return settings.base_position_tolerance * factor


def compare_stroke(
    stroke,
    expected: ExpectedStroke,
    settings: Optional[AnalysisSettings] = None
) -> StrokeMatch:
    """
    Compare a drawn stroke with an expected template stroke.

    The stroke is correct only if its detected order and direction equal the
    template's, both endpoints lie within the length-scaled tolerance, its
    accuracy clears the threshold and its curvature is similar enough.
    """
    s = settings or DEFAULT_SETTINGS
    points = _points_of(stroke)
    detected = classify_stroke(points, s)

    if len(points) < 2 or len(expected.points) < 2:
        return StrokeMatch(False, "too_few_points", detected,
                           math.inf, math.inf, 0.0, 0.0, 0.0)

    start_distance = dist(points[0], expected.points[0])
    end_distance = dist(points[-1], expected.points[-1])
    tolerance = _position_tolerance(polyline_length(points), polyline_length(expected.points), s)
    position_ok = start_distance < tolerance and end_distance < tolerance
    if tolerance > 0:
        position_score = max(0.0, 1.0 - max(start_distance, end_distance) / tolerance)
    else:
        position_score = 0.0

    shape_similarity = 1.0
    if len(points) > 2 and len(expected.points) > 2:
        degrees = s.curvature_in_degrees
        diff = abs(calculate_curvature(points, degrees) - calculate_curvature(expected.points, degrees))
        shape_similarity = max(0.0, 1.0 - diff / s.curvature_scale)

    if detected.order != expected.order:
        reason = "wrong_order"
    elif detected.direction != expected.direction:
        reason = "wrong_direction"
    elif not position_ok:
        reason = "position"
    elif not detected.accuracy > s.stroke_accuracy_threshold:
        reason = "low_accuracy"
    elif not shape_similarity > s.shape_similarity_threshold:
        reason = "shape"
    else:
        reason = "ok"

    match = StrokeMatch(
        is_correct=reason == "ok",
        reason=reason,
        detected=detected,
        start_distance=start_distance,
        end_distance=end_distance,
        tolerance=tolerance,
        position_score=position_score,
        shape_similarity=shape_similarity,
    )
    logger.debug("Stroke vs %s: %s (%s)", expected.stroke_id, reason, detected)
    return match


def is_stroke_correct(stroke, expected: ExpectedStroke, settings: Optional[AnalysisSettings] = None) -> bool:
    return compare_stroke(stroke, expected, settings).is_correct


# ===============================
# Stroke Order Validation & Scoring
# ===============================

def validate_stroke_sequence(
    strokes: Sequence,
    template: Sequence[ExpectedStroke],
    strict: bool = False,
    settings: Optional[AnalysisSettings] = None
) -> SequenceValidation:
    """
    Compare the template's order values with the classified orders of the
    drawn strokes.

    By default both lists are sorted, so only the multiset of order classes
    is checked and drawing the strokes in reverse still validates. With
    strict=True the drawn orders are compared in the sequence they were drawn.
    """
    expected_order = sorted(e.order for e in template)
    actual_order = [classify_stroke(stroke, settings).order for stroke in strokes]
    if not strict:
        actual_order.sort()

    return SequenceValidation(
        is_valid=expected_order == actual_order,
        expected_order=expected_order,
        actual_order=actual_order,
    )


def score_attempt(
    strokes: Sequence,
    template: Sequence[ExpectedStroke],
    settings: Optional[AnalysisSettings] = None
) -> AccuracyBreakdown:
    """
    Score an attempt from stroke-count fidelity and per-stroke correctness.
    Drawn stroke i is compared with template stroke i.
    """
    s = settings or DEFAULT_SETTINGS
    actual_count = len(strokes)
    if actual_count == 0:
        return AccuracyBreakdown(0.0, 0.0, 0, 0)

    expected_count = len(template)
    if expected_count > 0:
        count_accuracy = max(0.0, 1.0 - abs(expected_count - actual_count) / expected_count)
    else:
        count_accuracy = 0.0

    correct = sum(
        1 for i, stroke in enumerate(strokes)
        if i < expected_count and is_stroke_correct(stroke, template[i], s)
    )
    shape_accuracy = correct / actual_count

    total = (count_accuracy * s.stroke_count_weight + shape_accuracy * s.shape_weight) * 100
    return AccuracyBreakdown(
        stroke_count_accuracy=count_accuracy,
        shape_accuracy=shape_accuracy,
        correct_strokes=correct,
        accuracy=_score(total),
    )


def calculate_accuracy(
    strokes: Sequence,
    template: Sequence[ExpectedStroke],
    settings: Optional[AnalysisSettings] = None
) -> int:
    """Final 0-100 accuracy for an attempt; 0 when nothing was drawn."""
    return score_attempt(strokes, template, settings).accuracy


def validate_template(template: Sequence[ExpectedStroke]):
    """Raise TemplateError unless orders are 1..N and every stroke is usable."""
    orders = sorted(e.order for e in template)
    if orders != list(range(1, len(template) + 1)):
        raise TemplateError(f"stroke orders must be 1..{len(template)}, got {orders}")
    for e in template:
        if e.direction not in DIRECTIONS:
            raise TemplateError(f"{e.stroke_id}: unknown direction {e.direction!r}")
        if len(e.points) < 2:
            raise TemplateError(f"{e.stroke_id}: needs at least 2 points")


if __name__ == "__main__":
    line = Stroke("demo", [StrokePoint(200, 100, 0), StrokePoint(200, 200, 100), StrokePoint(200, 300, 200)])
    print(classify_stroke(line))
    expected = ExpectedStroke("stroke-1", [StrokePoint(200, 100), StrokePoint(200, 300)], 1, "vertical")
    print(compare_stroke(line, expected))
    print(f"Accuracy: {calculate_accuracy([line], [expected])}")

"""
Drawing Session
- Captures pointer samples into strokes (one stroke in flight at a time)
- Keeps an undo/redo history of canvas snapshots
- Produces live and end-of-stroke feedback and scores attempts
"""

import itertools
import logging
import time
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from config import (
    ADVISORY_ACCURACY_THRESHOLD,
    DEFAULT_SETTINGS,
    DEFAULT_STROKE_COLOR,
    FEEDBACK_MESSAGES,
    FEEDBACK_WINDOW,
    LIVE_CORRECT_THRESHOLD,
    LIVE_WARNING_THRESHOLD,
    STROKE_WIDTH_USER,
    AnalysisSettings,
)
from stroke_engine import (
    AccuracyBreakdown,
    ExpectedStroke,
    LiveStrokeTracker,
    SequenceValidation,
    Stroke,
    StrokeClassification,
    StrokeMatch,
    StrokePoint,
    classify_stroke,
    compare_stroke,
    score_attempt,
    validate_stroke_sequence,
)

logger = logging.getLogger(__name__)


class SessionState(Enum):
    IDLE = "idle"
    DRAWING = "drawing"
    STROKE_COMPLETE = "stroke_complete"
    CHECKED = "checked"


@dataclass(frozen=True)
class FeedbackPoint:
    x: float
    y: float
    kind: str  # correct | warning | incorrect


@dataclass(frozen=True)
class StrokeFeedback:
    """Advisory result computed when a stroke is finished."""
    stroke: Stroke
    classification: StrokeClassification
    match: Optional[StrokeMatch]
    validation: SequenceValidation
    messages: List[str]


@dataclass(frozen=True)
class AttemptResult:
    accuracy: int
    breakdown: AccuracyBreakdown
    attempt: int
    best_accuracy: int
    average_accuracy: float
    elapsed_ms: float


@dataclass
class SessionStats:
    total_attempts: int = 0
    best_accuracy: int = 0
    average_accuracy: float = 0.0


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


def live_feedback_kind(accuracy: int) -> str:
    if accuracy > LIVE_CORRECT_THRESHOLD:
        return "correct"
    if accuracy > LIVE_WARNING_THRESHOLD:
        return "warning"
    return "incorrect"


class DrawingSession:
    """
    Practice state for one character, owned by a single practice view.

    Stray pointer events (add_point / end_stroke with no stroke in flight)
    are ignored. history[history_index] is always the current canvas;
    history_index == -1 means the canvas is empty.
    """

    def __init__(
        self,
        template: Sequence[ExpectedStroke] = (),
        settings: Optional[AnalysisSettings] = None,
        strict_order: bool = False,
        stroke_color: str = DEFAULT_STROKE_COLOR,
        stroke_width: float = STROKE_WIDTH_USER,
        feedback_window: int = FEEDBACK_WINDOW,
        clock: Callable[[], float] = _monotonic_ms,
    ):
        self.template = list(template)
        self.settings = settings or DEFAULT_SETTINGS
        self.strict_order = strict_order
        self.stroke_color = stroke_color
        self.stroke_width = stroke_width
        self.clock = clock

        self.strokes: Tuple[Stroke, ...] = ()
        self.history: List[Tuple[Stroke, ...]] = []
        self.history_index = -1
        self.current_points: List[StrokePoint] = []
        self.feedback_points = deque(maxlen=feedback_window)
        self.stroke_feedback: List[str] = []
        self.last_feedback: Optional[StrokeFeedback] = None
        self.last_result: Optional[AttemptResult] = None
        self.stats = SessionStats()

        self._tracker = LiveStrokeTracker(self.settings)
        self._ids = itertools.count(1)
        self._stroke_t0 = 0.0
        self._drawing = False
        self._state = SessionState.IDLE
        self._attempt_started = self.clock()

    # ----------------------------
    # State
    # ----------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_drawing(self) -> bool:
        return self._drawing

    @property
    def can_undo(self) -> bool:
        return self.history_index >= 0

    @property
    def can_redo(self) -> bool:
        return self.history_index < len(self.history) - 1

    def _settle(self):
        self._state = SessionState.STROKE_COMPLETE if self.strokes else SessionState.IDLE

    # ----------------------------
    # Stroke Capture
    # ----------------------------

    def _relative(self, point: StrokePoint) -> StrokePoint:
        return StrokePoint(point.x, point.y, point.timestamp_ms - self._stroke_t0)

    def start_stroke(self, point: StrokePoint) -> bool:
        """Begin a stroke at point. Ignored while drawing or after check()."""
        if self._drawing or self._state is SessionState.CHECKED:
            logger.debug("Ignoring start_stroke in state %s", self._state.value)
            return False

        self._drawing = True
        self._state = SessionState.DRAWING
        self._stroke_t0 = point.timestamp_ms
        first = self._relative(point)
        self.current_points = [first]
        self._tracker.reset()
        self._tracker.add(first)
        return True

    def add_point(self, point: StrokePoint):
        if not self._drawing:
            return

        p = self._relative(point)
        self.current_points.append(p)
        self._tracker.add(p)
        if self._tracker.count >= 2:
            kind = live_feedback_kind(self._tracker.classification().accuracy)
            self.feedback_points.append(FeedbackPoint(p.x, p.y, kind))

    def live_classification(self) -> Optional[StrokeClassification]:
        """Classification of the stroke in flight, None when not drawing."""
        if not self._drawing:
            return None
        return self._tracker.classification()

    def end_stroke(self) -> Optional[StrokeFeedback]:
        """Finish the stroke in flight, push a history snapshot and return feedback."""
        if not self._drawing:
            return None

        self._drawing = False
        points = self.current_points
        self.current_points = []
        self._tracker.reset()

        if not points:
            self._settle()
            return None

        stroke = Stroke(
            id=f"stroke-{next(self._ids)}",
            points=points,
            color=self.stroke_color,
            width=self.stroke_width,
        )
        previous = self.strokes
        self.strokes = previous + (stroke,)
        self.history = self.history[:self.history_index + 1] + [self.strokes]
        self.history_index += 1
        self._state = SessionState.STROKE_COMPLETE

        feedback = self._stroke_feedback(previous, stroke)
        self.last_feedback = feedback
        self.stroke_feedback = feedback.messages
        return feedback

    def _stroke_feedback(self, previous: Tuple[Stroke, ...], stroke: Stroke) -> StrokeFeedback:
        stroke_num = len(previous) + 1
        classification = classify_stroke(stroke, self.settings)
        messages = []

        if classification.order != stroke_num:
            messages.append(FEEDBACK_MESSAGES["wrong_order"].format(
                expected=stroke_num, drawn=classification.order))
        if classification.accuracy < ADVISORY_ACCURACY_THRESHOLD:
            messages.append(FEEDBACK_MESSAGES["low_accuracy"].format(
                accuracy=classification.accuracy))

        match = None
        if self.template:
            if stroke_num <= len(self.template):
                match = compare_stroke(stroke, self.template[stroke_num - 1], self.settings)
                key = "correct_stroke" if match.is_correct else "incorrect_stroke"
                messages.append(FEEDBACK_MESSAGES[key].format(stroke_num=stroke_num))
            else:
                messages.append(FEEDBACK_MESSAGES["extra_stroke"].format(
                    expected=len(self.template)))

        validation = validate_stroke_sequence(
            previous + (stroke,), self.template, self.strict_order, self.settings)
        # order is only judged once the attempt has as many strokes as the
        # template; partial attempts never get this message
        if self.template and stroke_num >= len(self.template) and not validation.is_valid:
            messages.append(FEEDBACK_MESSAGES["order_incorrect"])

        logger.debug("Stroke %d: %s, %d message(s)", stroke_num, classification, len(messages))
        return StrokeFeedback(stroke, classification, match, validation, messages)

    # ----------------------------
    # History
    # ----------------------------

    def undo(self) -> bool:
        if self._state is SessionState.CHECKED or not self.can_undo:
            return False
        self.history_index -= 1
        self.strokes = self.history[self.history_index] if self.history_index >= 0 else ()
        self.feedback_points.clear()
        if not self._drawing:
            self._settle()
        return True

    def redo(self) -> bool:
        if self._state is SessionState.CHECKED or not self.can_redo:
            return False
        self.history_index += 1
        self.strokes = self.history[self.history_index]
        self.feedback_points.clear()
        if not self._drawing:
            self._settle()
        return True

    def clear(self):
        """Wipe strokes and history and start a fresh attempt."""
        self.strokes = ()
        self.history = []
        self.history_index = -1
        self.current_points = []
        self.feedback_points.clear()
        self.stroke_feedback = []
        self.last_feedback = None
        self.last_result = None
        self._tracker.reset()
        self._drawing = False
        self._state = SessionState.IDLE
        self._attempt_started = self.clock()

    # ----------------------------
    # Analysis
    # ----------------------------

    def pending_strokes(self) -> List[ExpectedStroke]:
        """Template strokes not yet drawn, for start-point hints."""
        return self.template[len(self.strokes):]

    def validate_sequence(self) -> SequenceValidation:
        return validate_stroke_sequence(self.strokes, self.template, self.strict_order, self.settings)

    def calculate_accuracy(self) -> int:
        return score_attempt(self.strokes, self.template, self.settings).accuracy

    def check(self) -> AttemptResult:
        """Score the attempt. Repeated calls return the same result until clear()."""
        if self._state is SessionState.CHECKED and self.last_result is not None:
            return self.last_result
        if self._drawing:
            self.end_stroke()

        breakdown = score_attempt(self.strokes, self.template, self.settings)
        stats = self.stats
        stats.average_accuracy = (
            (stats.average_accuracy * stats.total_attempts + breakdown.accuracy)
            / (stats.total_attempts + 1)
        )
        stats.total_attempts += 1
        stats.best_accuracy = max(stats.best_accuracy, breakdown.accuracy)

        self.last_result = AttemptResult(
            accuracy=breakdown.accuracy,
            breakdown=breakdown,
            attempt=stats.total_attempts,
            best_accuracy=stats.best_accuracy,
            average_accuracy=stats.average_accuracy,
            elapsed_ms=self.clock() - self._attempt_started,
        )
        self._state = SessionState.CHECKED
        logger.info("Attempt %d checked: %d%% with %d stroke(s)",
                    stats.total_attempts, breakdown.accuracy, len(self.strokes))
        return self.last_result

"""
Demo playback of a character's template strokes.

Strokes are revealed one at a time, the first immediately and the rest every
stroke_interval_ms; the finished demo stays visible for hold_ms and then
clears. All queries take the elapsed time since playback started, so the
schedule is driven by whatever clock the host uses.
"""

from typing import List, Optional, Sequence, Tuple

from config import DEMO_HOLD_MS, DEMO_STROKE_INTERVAL_MS
from stroke_engine import ExpectedStroke


class DemoPlayback:

    def __init__(
        self,
        strokes: Sequence[ExpectedStroke],
        stroke_interval_ms: float = DEMO_STROKE_INTERVAL_MS,
        hold_ms: float = DEMO_HOLD_MS
    ):
        self.strokes = list(strokes)
        self.stroke_interval_ms = stroke_interval_ms
        self.hold_ms = hold_ms

    @property
    def duration_ms(self) -> float:
        return len(self.strokes) * self.stroke_interval_ms + self.hold_ms

    def is_finished(self, elapsed_ms: float) -> bool:
        return elapsed_ms >= self.duration_ms

    def revealed_count(self, elapsed_ms: float) -> int:
        if not self.strokes or elapsed_ms < 0 or self.is_finished(elapsed_ms):
            return 0
        return min(len(self.strokes), int(elapsed_ms // self.stroke_interval_ms) + 1)

    def visible_strokes(self, elapsed_ms: float) -> List[ExpectedStroke]:
        return self.strokes[:self.revealed_count(elapsed_ms)]

    def progress(self, elapsed_ms: float) -> float:
        """Fraction of strokes revealed (0 once the demo has finished)."""
        if not self.strokes:
            return 0.0
        return self.revealed_count(elapsed_ms) / len(self.strokes)

    def active_stroke(self, elapsed_ms: float) -> Optional[Tuple[ExpectedStroke, float]]:
        """Most recently revealed stroke and how far through its slot we are (0-1)."""
        count = self.revealed_count(elapsed_ms)
        if count == 0:
            return None
        idx = count - 1
        fraction = (elapsed_ms - idx * self.stroke_interval_ms) / self.stroke_interval_ms
        return self.strokes[idx], max(0.0, min(1.0, fraction))

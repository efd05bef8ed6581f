"""
UI and Rendering Layer
- Draws the practice canvas, template hints and user strokes
- Colours strokes and feedback points by live classification
- Animates demo playback with a direction arrow
"""

import time
from typing import Callable, List, Optional, Sequence, Tuple

import cv2
import numpy as np

from config import (
    CANVAS_HEIGHT,
    CANVAS_WIDTH,
    ORDER_BAND_PX,
    ORDER_MIDLINE_Y,
    STROKE_WIDTH_DEMO,
    STROKE_WIDTH_HINT,
    STROKE_WIDTH_USER,
    UI_COLORS,
)
from demo_playback import DemoPlayback
from drawing_session import DrawingSession, FeedbackPoint, live_feedback_kind
from stroke_engine import ExpectedStroke, Stroke, StrokePoint, classify_stroke

FEEDBACK_COLORS = {
    "correct": UI_COLORS["correct_green"],
    "warning": UI_COLORS["warning_yellow"],
    "incorrect": UI_COLORS["error_red"],
}


def _pixel_points(points: Sequence[StrokePoint]) -> np.ndarray:
    return np.array([(int(round(p.x)), int(round(p.y))) for p in points], dtype=np.int32)


class UIRenderer:
    """Main UI rendering class."""

    def __init__(self, width: int = CANVAS_WIDTH, height: int = CANVAS_HEIGHT):
        self.width = width
        self.height = height

    def new_canvas(self, height: Optional[int] = None) -> np.ndarray:
        canvas = np.zeros((height or self.height, self.width, 3), dtype=np.uint8)
        canvas[:] = UI_COLORS["background"]
        return canvas

    def draw_guides(self, canvas: np.ndarray) -> np.ndarray:
        """Border, centre cross and the order bands around the midline."""
        w, h = self.width, self.height
        cx = w // 2
        cv2.line(canvas, (cx, 0), (cx, h), UI_COLORS["guide_line"], 1)
        for y in (ORDER_MIDLINE_Y - ORDER_BAND_PX, ORDER_MIDLINE_Y, ORDER_MIDLINE_Y + ORDER_BAND_PX):
            cv2.line(canvas, (0, y), (w, y), UI_COLORS["guide_line"], 1)
        cv2.rectangle(canvas, (1, 1), (w - 2, h - 2), UI_COLORS["guide_border"], 2)
        return canvas

    def draw_template_hints(
        self,
        canvas: np.ndarray,
        pending: Sequence[ExpectedStroke]
    ) -> np.ndarray:
        """Faint outline and numbered start dot for each stroke still to draw."""
        for expected in pending:
            pts = _pixel_points(expected.points)
            if len(pts) == 0:
                continue
            if len(pts) >= 2:
                cv2.polylines(canvas, [pts], False, UI_COLORS["template_hint"], STROKE_WIDTH_HINT)
            start = tuple(int(v) for v in pts[0])
            cv2.circle(canvas, start, 10, UI_COLORS["hint_dot"], -1)
            cv2.putText(canvas, str(expected.order), (start[0] - 5, start[1] + 5),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.45, UI_COLORS["text_white"], 1)
        return canvas

    def stroke_color(self, stroke: Stroke) -> Tuple[int, int, int]:
        """Colour a finished stroke by its classified accuracy."""
        if len(stroke.points) < 2:
            return UI_COLORS["error_red"]
        return FEEDBACK_COLORS[live_feedback_kind(classify_stroke(stroke).accuracy)]

    def draw_strokes(
        self,
        canvas: np.ndarray,
        strokes: Sequence[Stroke],
        colors: Optional[List[Tuple[int, int, int]]] = None,
        thickness: Optional[int] = None
    ) -> np.ndarray:
        """Draw finished strokes; a single-point stroke is drawn as a dot."""
        if colors is None:
            colors = [self.stroke_color(s) for s in strokes]

        for stroke, color in zip(strokes, colors):
            width = int(thickness or stroke.width)
            pts = _pixel_points(stroke.points)
            if len(pts) >= 2:
                cv2.polylines(canvas, [pts], False, color, width)
            elif len(pts) == 1:
                cv2.circle(canvas, tuple(int(v) for v in pts[0]), max(1, width // 2), color, -1)
        return canvas

    def draw_user_stroke(
        self,
        canvas: np.ndarray,
        points: Sequence[StrokePoint],
        color: Tuple[int, int, int] = UI_COLORS["active_stroke"],
        thickness: int = STROKE_WIDTH_USER
    ) -> np.ndarray:
        """Draw the stroke currently in flight."""
        if len(points) < 2:
            return canvas
        cv2.polylines(canvas, [_pixel_points(points)], False, color, thickness)
        return canvas

    def draw_feedback_points(self, canvas: np.ndarray, points: Sequence[FeedbackPoint]) -> np.ndarray:
        for fp in points:
            cv2.circle(canvas, (int(fp.x), int(fp.y)), 4, FEEDBACK_COLORS[fp.kind], -1)
        return canvas

    def draw_animated_arrow(
        self,
        canvas: np.ndarray,
        points: Sequence[StrokePoint],
        animation_progress: float = 0.5,
        color: Tuple[int, int, int] = UI_COLORS["arrow_orange"]
    ) -> np.ndarray:
        """
        Draw animated arrow showing stroke direction.
        animation_progress: 0 = start, 1 = end
        """
        if len(points) < 2:
            return canvas

        pts = [np.array([p.x, p.y], dtype=np.float32) for p in points]
        seg_lens = [float(np.linalg.norm(pts[i + 1] - pts[i])) for i in range(len(pts) - 1)]
        target_len = sum(seg_lens) * max(0.0, min(1.0, animation_progress))

        cumulative = 0.0
        for i, seg_len in enumerate(seg_lens):
            if seg_len == 0:
                continue
            if cumulative + seg_len >= target_len or i == len(seg_lens) - 1:
                alpha = min(1.0, (target_len - cumulative) / seg_len)
                direction = (pts[i + 1] - pts[i]) / seg_len
                head = pts[i] + alpha * (pts[i + 1] - pts[i])
                tail = head - direction * 25

                head_px = tuple(map(int, head))
                cv2.line(canvas, tuple(map(int, tail)), head_px, color, 3)

                angle = np.arctan2(direction[1], direction[0])
                for da in (-np.pi / 6, np.pi / 6):
                    hx = int(head[0] - 12 * np.cos(angle + da))
                    hy = int(head[1] - 12 * np.sin(angle + da))
                    cv2.line(canvas, head_px, (hx, hy), color, 3)
                cv2.circle(canvas, head_px, 6, color, -1)
                break
            cumulative += seg_len

        return canvas

    def draw_demo(self, canvas: np.ndarray, playback: DemoPlayback, elapsed_ms: float) -> np.ndarray:
        """Revealed demo strokes plus an arrow travelling along the newest one."""
        shown = playback.visible_strokes(elapsed_ms)
        for expected in shown:
            cv2.polylines(canvas, [_pixel_points(expected.points)], False,
                          UI_COLORS["demo_stroke"], STROKE_WIDTH_DEMO)

        active = playback.active_stroke(elapsed_ms)
        if active is not None:
            expected, fraction = active
            self.draw_animated_arrow(canvas, expected.points, fraction)
        return canvas

    def draw_ui_panel(
        self,
        canvas: np.ndarray,
        title: str = "",
        status: str = "",
        feedback: Optional[List[str]] = None
    ) -> np.ndarray:
        """Draw text panel below the drawing area."""
        h, w = canvas.shape[:2]
        top = self.height

        cv2.rectangle(canvas, (0, top), (w, h), UI_COLORS["panel_bg"], -1)
        cv2.putText(canvas, title, (10, top + 22),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.6, UI_COLORS["text_white"], 1)

        if status:
            cv2.putText(canvas, status, (10, top + 46),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.5, UI_COLORS["text_gray"], 1)

        if feedback:
            y_pos = top + 68
            for line in feedback[-3:]:
                cv2.putText(canvas, line, (10, y_pos),
                            cv2.FONT_HERSHEY_SIMPLEX, 0.4, UI_COLORS["text_gray"], 1)
                y_pos += 16

        return canvas

    def draw_progress_bar(
        self,
        canvas: np.ndarray,
        progress: float,
        x: int,
        y: int,
        width: int = 200,
        height: int = 14
    ) -> np.ndarray:
        """Draw progress bar (0.0 to 1.0)."""
        progress = max(0.0, min(1.0, progress))

        cv2.rectangle(canvas, (x, y), (x + width, y + height), (50, 50, 50), -1)
        filled_width = int(width * progress)
        cv2.rectangle(canvas, (x, y), (x + filled_width, y + height), UI_COLORS["correct_green"], -1)
        cv2.rectangle(canvas, (x, y), (x + width, y + height), (100, 100, 100), 1)

        return canvas

    def render_session(
        self,
        session: DrawingSession,
        playback: Optional[DemoPlayback] = None,
        elapsed_ms: float = 0.0,
        panel_height: int = 0
    ) -> np.ndarray:
        """Compose a full frame for the session state."""
        canvas = self.new_canvas(self.height + panel_height)
        self.draw_guides(canvas)

        if playback is not None and not playback.is_finished(elapsed_ms):
            self.draw_demo(canvas, playback, elapsed_ms)
            if panel_height:
                self.draw_progress_bar(canvas, playback.progress(elapsed_ms),
                                       self.width - 210, self.height + 10)
            return canvas

        self.draw_template_hints(canvas, session.pending_strokes())
        self.draw_strokes(canvas, session.strokes)
        self.draw_user_stroke(canvas, session.current_points)
        self.draw_feedback_points(canvas, session.feedback_points)
        return canvas


class AnimationManager:
    """Track elapsed time of a running animation."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self.start_time = self.clock()

    def elapsed_ms(self) -> float:
        return (self.clock() - self.start_time) * 1000.0

    def reset(self):
        self.start_time = self.clock()


if __name__ == "__main__":
    from characters import fallback_demo_strokes

    renderer = UIRenderer()
    session = DrawingSession(fallback_demo_strokes())
    frame = renderer.render_session(session, DemoPlayback(session.template), 1600, panel_height=120)
    renderer.draw_ui_panel(frame, "Demo", "Stroke 2 / 2")

    cv2.imshow("Test", frame)
    cv2.waitKey(0)
    cv2.destroyAllWindows()

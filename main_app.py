"""
Thai Stroke Tutor - Main Application

Practice writing Thai characters with the mouse (or a touch screen mapped to
mouse events). Each finished stroke is classified and matched against the
character's stroke template; SPACE scores the attempt and records it.

Keys: SPACE check, C clear, U undo, R redo, D demo, N next character, Q quit.
"""

import argparse
import logging
import sys
import time
from typing import Optional

import cv2

from characters import DEFAULT_DB_PATH, CharacterDatabase
from config import (
    APP_NAME,
    CANVAS_HEIGHT,
    DEBUG_MODE,
    FEEDBACK_MESSAGES,
    KEYBOARD_LAYOUT,
    PROGRESS_FILE_PATH,
    SHOW_SCORES,
    WINDOW_HEIGHT,
)
from demo_playback import DemoPlayback
from drawing_session import DrawingSession, SessionState
from progress_store import ProgressStore, ProgressStoreError
from stroke_engine import StrokePoint
from ui_renderer import AnimationManager, UIRenderer

logger = logging.getLogger(__name__)

PANEL_HEIGHT = WINDOW_HEIGHT - CANVAS_HEIGHT


def _now_ms() -> float:
    return time.monotonic() * 1000.0


class PracticeApp:
    def __init__(self, db: CharacterDatabase, store: Optional[ProgressStore], char_id: Optional[str] = None):
        self.db = db
        self.store = store
        self.renderer = UIRenderer()
        self.animation = AnimationManager()

        # Character state
        self.char_id = None
        self.char_info = None
        self.session = None

        # Demo
        self.playback = None

        self.status = ""
        self.select_character(char_id or db.next_character_id(None))

    # ----------------------------
    # Character Management
    # ----------------------------

    def select_character(self, char_id: Optional[str]):
        """Start a fresh session for char_id."""
        self.char_id = char_id
        self.char_info = self.db.get_character(char_id) if char_id else None
        template = self.db.get_template(char_id) if char_id else []
        self.session = DrawingSession(template)
        self.playback = None
        self.status = "" if template else FEEDBACK_MESSAGES["no_template"]

    def title(self) -> str:
        if not self.char_info:
            return APP_NAME
        return f"{self.char_info['name']} - {self.char_info['meaning']}"

    # ----------------------------
    # Input Handling
    # ----------------------------

    def on_mouse(self, event, x, y, flags, param):
        if y >= CANVAS_HEIGHT:
            if event == cv2.EVENT_LBUTTONUP:
                self.session.end_stroke()
            return

        point = StrokePoint(float(x), float(y), _now_ms())
        if event == cv2.EVENT_LBUTTONDOWN:
            self.playback = None
            self.session.start_stroke(point)
        elif event == cv2.EVENT_MOUSEMOVE and flags & cv2.EVENT_FLAG_LBUTTON:
            self.session.add_point(point)
        elif event == cv2.EVENT_LBUTTONUP:
            self.session.end_stroke()

    def check(self):
        result = self.session.check()
        self.status = FEEDBACK_MESSAGES["attempt_score"].format(
            accuracy=result.accuracy, best=result.best_accuracy)
        print(f"Attempt {result.attempt}: {result.accuracy}% "
              f"(count {result.breakdown.stroke_count_accuracy:.2f}, "
              f"shape {result.breakdown.shape_accuracy:.2f})")

        if self.store is not None and self.char_id:
            try:
                self.store.record_attempt(self.char_id, result.accuracy)
            except OSError as e:
                logger.error("Could not save progress: %s", e)

    def handle_key(self, key: int) -> bool:
        """Handle keyboard input. Returns False to quit."""
        if key == ord(KEYBOARD_LAYOUT["check"]):
            self.check()
        elif key == ord(KEYBOARD_LAYOUT["clear"]):
            self.session.clear()
            self.status = ""
        elif key == ord(KEYBOARD_LAYOUT["undo"]):
            self.session.undo()
        elif key == ord(KEYBOARD_LAYOUT["redo"]):
            self.session.redo()
        elif key == ord(KEYBOARD_LAYOUT["demo"]):
            self.playback = DemoPlayback(self.db.demo_strokes(self.char_id) if self.char_id else [])
            self.animation.reset()
        elif key == ord(KEYBOARD_LAYOUT["next"]):
            self.select_character(self.db.next_character_id(self.char_id))
        elif key == ord(KEYBOARD_LAYOUT["quit"]):
            return False
        return True

    # ----------------------------
    # Rendering
    # ----------------------------

    def render(self):
        elapsed = self.animation.elapsed_ms()
        if self.playback is not None and self.playback.is_finished(elapsed):
            self.playback = None

        frame = self.renderer.render_session(self.session, self.playback, elapsed, PANEL_HEIGHT)

        session = self.session
        if session.state is SessionState.CHECKED:
            status = self.status
        else:
            status = f"Stroke {len(session.strokes) + 1} / {len(session.template) or '?'}"
            if SHOW_SCORES and session.is_drawing:
                status += f"  live {session.live_classification().accuracy}%"
            if self.status:
                status += f"  {self.status}"

        self.renderer.draw_ui_panel(frame, self.title(), status, session.stroke_feedback)
        return frame

    # ----------------------------
    # Main Loop
    # ----------------------------

    def run(self):
        """Main application loop."""
        cv2.namedWindow(APP_NAME, cv2.WINDOW_AUTOSIZE)
        cv2.setMouseCallback(APP_NAME, self.on_mouse)

        running = True
        while running:
            cv2.imshow(APP_NAME, self.render())

            key = cv2.waitKey(30) & 0xFF
            if key != 255:
                running = self.handle_key(key)

        cv2.destroyAllWindows()


def main(argv=None):
    parser = argparse.ArgumentParser(description=APP_NAME)
    parser.add_argument("character", nargs="?", help="character id to practise (default: first)")
    parser.add_argument("--characters", default=DEFAULT_DB_PATH, help="stroke template JSON")
    parser.add_argument("--progress", default=PROGRESS_FILE_PATH, help="progress file")
    parser.add_argument("--no-progress", action="store_true", help="do not record attempts")
    parser.add_argument("--debug", action="store_true", help="verbose logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if (args.debug or DEBUG_MODE) else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    db = CharacterDatabase(args.characters)
    if not db.characters:
        print(f"Error: no characters loaded from {args.characters}")
        return 1
    if args.character and db.get_character(args.character) is None:
        print(f"Error: unknown character {args.character!r}")
        return 1

    store = None
    if not args.no_progress:
        store = ProgressStore(args.progress)
        try:
            store.load()
        except ProgressStoreError as e:
            print(f"Warning: {e} - progress will not be saved")
            store = None

    PracticeApp(db, store, args.character).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())

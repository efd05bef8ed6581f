"""
Configuration file for Thai Stroke Tutor
Heuristic constants for stroke analysis, display settings and feedback text.
Every analysis constant can be overridden per session through AnalysisSettings.
"""

from dataclasses import dataclass, replace

# ===============================
# CANVAS & DISPLAY
# ===============================

# Practice canvas dimensions (pixels)
CANVAS_WIDTH = 400
CANVAS_HEIGHT = 400

# Window around the canvas (status panel lives below it)
WINDOW_WIDTH = 400
WINDOW_HEIGHT = 520

# UI Color scheme (B, G, R in OpenCV)
UI_COLORS = {
    "background": (250, 250, 250),
    "panel_bg": (50, 50, 50),
    "text_white": (255, 255, 255),
    "text_gray": (200, 200, 200),
    "guide_line": (235, 231, 229),
    "guide_border": (219, 213, 209),
    "template_hint": (200, 200, 200),
    "hint_dot": (246, 130, 59),
    "user_stroke": (246, 130, 59),
    "active_stroke": (246, 130, 59),
    "demo_stroke": (129, 185, 16),
    "arrow_orange": (0, 100, 255),
    "correct_green": (94, 197, 34),
    "warning_yellow": (8, 179, 234),
    "error_red": (68, 68, 239),
}

# Stroke widths
STROKE_WIDTH_USER = 3
STROKE_WIDTH_DEMO = 4
STROKE_WIDTH_HINT = 2

# Default stroke colour recorded on captured strokes (hex, as hosts store it)
DEFAULT_STROKE_COLOR = "#3B82F6"

# ===============================
# DIRECTION CLASSIFICATION
# ===============================

# Half-width of the angle window around 0/90/45 degree axes
DIRECTION_TOLERANCE_DEG = 20

# ===============================
# POSITIONAL ORDER HEURISTIC
# ===============================

# Strokes starting above MIDLINE - BAND are order 1, below MIDLINE + BAND order 3
ORDER_MIDLINE_Y = 200
ORDER_BAND_PX = 50

# ===============================
# STROKE ACCURACY
# ===============================

# Reference chord length for length fidelity (pixels)
EXPECTED_STROKE_LENGTH = 150

# Total interior deviation is divided by (point_count * SMOOTHNESS_SCALE)
SMOOTHNESS_SCALE = 10

LENGTH_WEIGHT = 0.4
SMOOTHNESS_WEIGHT = 0.3
SPEED_WEIGHT = 0.3

# ===============================
# TEMPLATE MATCHING
# ===============================

# Start/end distance tolerance before length scaling (pixels)
BASE_POSITION_TOLERANCE = 50
MAX_TOLERANCE_FACTOR = 2

# Curvature difference that drives shape similarity to zero
CURVATURE_SCALE = 100

# Measure turning angles in wrapped degrees instead of raw radians
CURVATURE_IN_DEGREES = False

# A stroke matches only if accuracy > this AND similarity > the next
STROKE_ACCURACY_THRESHOLD = 60
SHAPE_SIMILARITY_THRESHOLD = 0.7

# ===============================
# AGGREGATE SCORING
# ===============================

STROKE_COUNT_WEIGHT = 0.4
SHAPE_WEIGHT = 0.6

# ===============================
# LIVE FEEDBACK
# ===============================

# Live accuracy above these marks a feedback point correct / warning
LIVE_CORRECT_THRESHOLD = 80
LIVE_WARNING_THRESHOLD = 50

# End-of-stroke accuracy below this produces a precision hint
ADVISORY_ACCURACY_THRESHOLD = 70

# Number of live feedback points kept on screen
FEEDBACK_WINDOW = 5

# ===============================
# DEMO ANIMATION
# ===============================

# Delay between revealing consecutive template strokes
DEMO_STROKE_INTERVAL_MS = 1500

# Time the finished demo stays on screen
DEMO_HOLD_MS = 1000

# Generic demo used when a character has no template: (points, direction)
FALLBACK_DEMO_STROKES = [
    ([(200, 100), (200, 300)], "vertical"),
    ([(150, 150), (250, 150)], "horizontal"),
]

# ===============================
# CHARACTER DATABASE
# ===============================

CHARACTER_DB_PATH = "characters.json"

# Sampling density for SVG path templates (points per pixel of arc length)
TEMPLATE_PATH_DENSITY = 0.05

# Time assigned to one template stroke when timestamps are synthesized
TEMPLATE_STROKE_DURATION_MS = 1000

# ===============================
# PROGRESS STORE
# ===============================

PROGRESS_FILE_PATH = "progress.json"

# Attempts kept per character in the history list
PROGRESS_HISTORY_LIMIT = 20

# ===============================
# FEEDBACK MESSAGES
# ===============================

FEEDBACK_MESSAGES = {
    "wrong_order": "Expected stroke {expected}, but drew stroke {drawn}",
    "low_accuracy": "Stroke accuracy: {accuracy}% - try to be more precise",
    "order_incorrect": "Stroke order is incorrect",
    "correct_stroke": "Stroke {stroke_num} correct!",
    "incorrect_stroke": "Stroke {stroke_num} incorrect. Try again!",
    "extra_stroke": "Too many strokes! Expected {expected}",
    "no_template": "No stroke guide for this character",
    "attempt_score": "Accuracy: {accuracy}% (best {best}%)",
}

# ===============================
# KEYBOARD LAYOUT
# ===============================

KEYBOARD_LAYOUT = {
    "check": " ",  # SPACE
    "clear": "c",
    "undo": "u",
    "redo": "r",
    "demo": "d",
    "next": "n",
    "quit": "q",
}

# ===============================
# DEBUG & DEVELOPMENT
# ===============================

# Enable debug logging
DEBUG_MODE = False

# Show live accuracy of the stroke in flight
SHOW_SCORES = False

# ===============================
# SYSTEM SETTINGS
# ===============================

APP_NAME = "Thai Stroke Tutor"
APP_VERSION = "1.0.0"


@dataclass(frozen=True)
class AnalysisSettings:
    """Heuristic constants used by the stroke engine, overridable per session."""

    direction_tolerance_deg: float = DIRECTION_TOLERANCE_DEG
    order_midline_y: float = ORDER_MIDLINE_Y
    order_band_px: float = ORDER_BAND_PX
    expected_stroke_length: float = EXPECTED_STROKE_LENGTH
    smoothness_scale: float = SMOOTHNESS_SCALE
    length_weight: float = LENGTH_WEIGHT
    smoothness_weight: float = SMOOTHNESS_WEIGHT
    speed_weight: float = SPEED_WEIGHT
    base_position_tolerance: float = BASE_POSITION_TOLERANCE
    max_tolerance_factor: float = MAX_TOLERANCE_FACTOR
    curvature_scale: float = CURVATURE_SCALE
    curvature_in_degrees: bool = CURVATURE_IN_DEGREES
    stroke_accuracy_threshold: float = STROKE_ACCURACY_THRESHOLD
    shape_similarity_threshold: float = SHAPE_SIMILARITY_THRESHOLD
    stroke_count_weight: float = STROKE_COUNT_WEIGHT
    shape_weight: float = SHAPE_WEIGHT

    def with_overrides(self, **overrides) -> "AnalysisSettings":
        """Return a copy with some constants replaced."""
        return replace(self, **overrides)


DEFAULT_SETTINGS = AnalysisSettings()


def get_config(key: str, default=None):
    """Get configuration value by key."""
    parts = key.split(".")
    obj = globals()

    for part in parts:
        if isinstance(obj, dict):
            obj = obj.get(part, default)
        else:
            return default

    return obj if obj is not None else default


if __name__ == "__main__":
    # Print all configuration
    print(f"{APP_NAME} Configuration")
    print("=" * 50)
    print(f"Canvas: {CANVAS_WIDTH}x{CANVAS_HEIGHT}")
    print(f"Character DB: {CHARACTER_DB_PATH}")
    print(f"Progress file: {PROGRESS_FILE_PATH}")
    print(f"Direction tolerance: {DIRECTION_TOLERANCE_DEG} deg")
    print(f"Position tolerance: {BASE_POSITION_TOLERANCE} px")
    print(f"Debug Mode: {DEBUG_MODE}")

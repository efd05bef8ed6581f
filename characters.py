"""
Character data module for Thai Stroke Tutor.

Loads per-character stroke templates from characters.json and provides:
- CharacterDatabase for looking up templates by character id
- SVG path sampling for templates stored as path data
- The generic two-stroke demo used when a character has no template
"""

import json
import logging
import os
from typing import Dict, List, Optional, Tuple

from svg.path import parse_path

from config import (
    CHARACTER_DB_PATH,
    FALLBACK_DEMO_STROKES,
    TEMPLATE_PATH_DENSITY,
    TEMPLATE_STROKE_DURATION_MS,
)
from stroke_engine import ExpectedStroke, StrokePoint, TemplateError, validate_template

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), CHARACTER_DB_PATH)


# ==============================
# SVG / Path Helpers
# ==============================

def points_from_path(path_d: str, density: float = TEMPLATE_PATH_DENSITY) -> List[Tuple[float, float]]:
    """Sample an SVG path d string evenly along its arc length."""
    path = parse_path(path_d)
    length = path.length()
    n = max(2, int(length * density) + 1)
    pts = []
    for i in range(n):
        pos = path.point(i / (n - 1))
        pts.append((pos.real, pos.imag))
    return pts


def timed_points(xy: List[Tuple[float, float]], duration_ms: float = TEMPLATE_STROKE_DURATION_MS) -> List[StrokePoint]:
    """Attach evenly spaced timestamps to reference coordinates."""
    last = max(1, len(xy) - 1)
    return [
        StrokePoint(float(x), float(y), duration_ms * i / last)
        for i, (x, y) in enumerate(xy)
    ]


def parse_expected_stroke(raw: Dict, index: int) -> ExpectedStroke:
    """Build an ExpectedStroke from one JSON stroke entry."""
    if "path" in raw:
        xy = points_from_path(raw["path"])
    else:
        xy = [(p[0], p[1]) for p in raw.get("points", [])]

    return ExpectedStroke(
        stroke_id=raw.get("id", f"stroke-{index + 1}"),
        points=timed_points(xy),
        order=int(raw.get("order", index + 1)),
        direction=raw.get("direction", "curve"),
        start_region=raw.get("start_region", ""),
        end_region=raw.get("end_region", ""),
    )


def fallback_demo_strokes() -> List[ExpectedStroke]:
    """Generic demo shown for characters without a template."""
    return [
        ExpectedStroke(
            stroke_id=f"demo-stroke-{i + 1}",
            points=timed_points(xy),
            order=i + 1,
            direction=direction,
        )
        for i, (xy, direction) in enumerate(FALLBACK_DEMO_STROKES)
    ]


# ==============================
# Data Loading
# ==============================

class CharacterDatabase:
    """Load and manage character stroke templates."""

    def __init__(self, json_path: str = DEFAULT_DB_PATH):
        self.json_path = json_path
        self.characters = []
        self.templates = {}
        self.load_characters()

    def load_characters(self):
        """Load characters from JSON."""
        if not os.path.exists(self.json_path):
            logger.warning("Character database %s not found", self.json_path)
            return

        with open(self.json_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        self.characters = data.get("characters", [])
        for char_data in self.characters:
            char_id = char_data["id"]
            try:
                template = [
                    parse_expected_stroke(raw, i)
                    for i, raw in enumerate(char_data.get("strokes", []))
                ]
                validate_template(template)
            except (TemplateError, KeyError, TypeError, ValueError, IndexError) as e:
                logger.warning("Skipping stroke template for %s: %s", char_id, e)
                continue
            self.templates[char_id] = sorted(template, key=lambda e: e.order)

        logger.info("Loaded %d characters (%d with templates) from %s",
                    len(self.characters), len(self.templates), self.json_path)

    def get_character(self, char_id: str) -> Optional[Dict]:
        """Get character metadata by id."""
        for char_data in self.characters:
            if char_data["id"] == char_id:
                return char_data
        return None

    def get_template(self, char_id: str) -> List[ExpectedStroke]:
        """Expected strokes in order; empty when the character has no template."""
        template = self.templates.get(char_id)
        if template is None:
            logger.warning("No stroke template for character %s", char_id)
            return []
        return list(template)

    def demo_strokes(self, char_id: str) -> List[ExpectedStroke]:
        """Strokes for demo playback, falling back to the generic demo."""
        return self.get_template(char_id) or fallback_demo_strokes()

    def next_character_id(self, char_id: Optional[str]) -> Optional[str]:
        """Id of the character after char_id, wrapping around."""
        if not self.characters:
            return None
        ids = [c["id"] for c in self.characters]
        if char_id not in ids:
            return ids[0]
        return ids[(ids.index(char_id) + 1) % len(ids)]


if __name__ == "__main__":
    db = CharacterDatabase()
    print(f"Loaded {len(db.characters)} characters")

    for char in db.characters:
        template = db.get_template(char["id"])
        print(f"{char['char']} ({char['name']}) - {char['meaning']}: {len(template)} strokes")

"""
Progress Store
Persists checked practice attempts per character as versioned JSON.
Older files are upgraded through one migration function per schema version.
"""

import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from typing import Dict, Optional

from config import PROGRESS_FILE_PATH, PROGRESS_HISTORY_LIMIT

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 2
ENTRY_KEYS = {"attempts", "best_accuracy", "last_accuracy", "last_practiced", "history"}


class ProgressStoreError(Exception):
    """Progress file is unreadable or from a newer schema."""


# ===============================
# Schema Migrations
# ===============================

def _migrate_v1_to_v2(data: Dict) -> Dict:
    """v2 adds the last score and a bounded attempt history per character."""
    characters = {}
    for char_id, entry in data.get("characters", {}).items():
        characters[char_id] = {
            "attempts": int(entry.get("attempts", 0)),
            "best_accuracy": int(entry.get("best_accuracy", 0)),
            "last_accuracy": None,
            "last_practiced": entry.get("last_practiced"),
            "history": [],
        }
    return {"version": 2, "characters": characters}


MIGRATIONS = {
    1: _migrate_v1_to_v2,
}


def empty_progress() -> Dict:
    return {"version": SCHEMA_VERSION, "characters": {}}


def migrate(data: Dict) -> Dict:
    """Upgrade a loaded document to SCHEMA_VERSION. Unversioned files are v1."""
    version = data.get("version", 1)
    if not isinstance(version, int) or version > SCHEMA_VERSION:
        raise ProgressStoreError(f"unsupported progress schema version {version!r}")

    while version < SCHEMA_VERSION:
        try:
            data = MIGRATIONS[version](data)
        except (AttributeError, TypeError, ValueError) as e:
            raise ProgressStoreError(f"cannot migrate progress data from v{version}: {e}") from e
        logger.info("Migrated progress data from v%d to v%d", version, data["version"])
        version = data["version"]

    _check_shape(data)
    return data


def _check_shape(data: Dict):
    characters = data.get("characters")
    if not isinstance(characters, dict):
        raise ProgressStoreError("progress data has no 'characters' object")
    for char_id, entry in characters.items():
        if (not isinstance(entry, dict) or not ENTRY_KEYS <= entry.keys()
                or not isinstance(entry["history"], list)):
            raise ProgressStoreError(f"malformed progress entry for {char_id!r}")


# ===============================
# Store
# ===============================

class ProgressStore:
    """Per-character attempt records backed by a JSON file."""

    def __init__(self, path: str = PROGRESS_FILE_PATH, history_limit: int = PROGRESS_HISTORY_LIMIT):
        self.path = path
        self.history_limit = history_limit
        self.data = empty_progress()

    def load(self) -> Dict:
        if not os.path.exists(self.path):
            self.data = empty_progress()
            return self.data

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ProgressStoreError(f"cannot read {self.path}: {e}") from e
        if not isinstance(raw, dict):
            raise ProgressStoreError(f"{self.path}: expected a JSON object")

        self.data = migrate(raw)
        return self.data

    def save(self):
        """Write atomically so an interrupted save keeps the old file."""
        directory = os.path.dirname(os.path.abspath(self.path))
        fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self.data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            os.unlink(tmp_path)
            raise

    def get(self, character_id: str) -> Optional[Dict]:
        return self.data["characters"].get(character_id)

    def record_attempt(self, character_id: str, accuracy: int, timestamp: Optional[datetime] = None) -> Dict:
        """Record one checked attempt and save."""
        when = (timestamp or datetime.now(timezone.utc)).isoformat()
        entry = self.data["characters"].setdefault(character_id, {
            "attempts": 0,
            "best_accuracy": 0,
            "last_accuracy": None,
            "last_practiced": None,
            "history": [],
        })
        entry["attempts"] += 1
        entry["best_accuracy"] = max(entry["best_accuracy"], accuracy)
        entry["last_accuracy"] = accuracy
        entry["last_practiced"] = when
        entry["history"].append({"accuracy": accuracy, "timestamp": when})
        del entry["history"][:-self.history_limit]

        self.save()
        logger.info("Saved attempt for %s: %d%% (attempt %d)",
                    character_id, accuracy, entry["attempts"])
        return entry

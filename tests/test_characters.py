import json
import logging

import pytest

from characters import (
    CharacterDatabase,
    fallback_demo_strokes,
    points_from_path,
    timed_points,
)
from stroke_engine import Stroke, calculate_accuracy


@pytest.fixture(scope="module")
def db():
    return CharacterDatabase()


def write_db(tmp_path, characters):
    path = tmp_path / "characters.json"
    path.write_text(json.dumps({"characters": characters}), encoding="utf-8")
    return str(path)


def test_points_from_path_samples_evenly():
    pts = points_from_path("M 0 0 L 100 0")
    assert len(pts) == 6
    assert pts[0] == pytest.approx((0.0, 0.0))
    assert pts[-1] == pytest.approx((100.0, 0.0))
    assert pts[1] == pytest.approx((20.0, 0.0))


def test_timed_points_spread_over_duration():
    pts = timed_points([(0, 0), (1, 1), (2, 2)], duration_ms=1000)
    assert [p.timestamp_ms for p in pts] == [0, 500, 1000]


def test_bundled_database_loads(db):
    assert [c["id"] for c in db.characters] == ["ko-kai", "ro-ruea", "lo-ling", "ho-nokhuk"]
    template = db.get_template("ko-kai")
    assert [e.order for e in template] == [1, 2]
    assert [e.direction for e in template] == ["horizontal", "vertical"]
    assert template[0].start_region == "top-left"


def test_svg_path_template(db):
    curve = db.get_template("ro-ruea")[1]
    assert curve.direction == "curve"
    assert len(curve.points) > 2
    assert (curve.points[0].x, curve.points[0].y) == pytest.approx((160, 160))
    assert (curve.points[-1].x, curve.points[-1].y) == pytest.approx((210, 290))


@pytest.mark.parametrize("char_id", ["ko-kai", "lo-ling"])
def test_tracing_a_template_scores_full_marks(db, char_id):
    template = db.get_template(char_id)
    traced = [Stroke(e.stroke_id, e.points) for e in template]
    assert calculate_accuracy(traced, template) == 100


def test_missing_character_has_empty_template(db, caplog):
    with caplog.at_level(logging.WARNING):
        assert db.get_template("no-such-char") == []
    assert "no-such-char" in caplog.text


def test_demo_falls_back_to_generic_strokes(db):
    assert len(db.demo_strokes("ko-kai")) == 2
    demo = db.demo_strokes("ho-nokhuk")
    assert [e.stroke_id for e in demo] == ["demo-stroke-1", "demo-stroke-2"]
    assert [e.direction for e in demo] == ["vertical", "horizontal"]
    assert (demo[0].points[0].x, demo[0].points[0].y) == (200, 100)


def test_fallback_demo_is_a_valid_template():
    demo = fallback_demo_strokes()
    assert [e.order for e in demo] == [1, 2]
    assert demo[0].points[-1].timestamp_ms == 1000


def test_next_character_wraps(db):
    assert db.next_character_id(None) == "ko-kai"
    assert db.next_character_id("ko-kai") == "ro-ruea"
    assert db.next_character_id("ho-nokhuk") == "ko-kai"


def test_missing_file_gives_empty_database(tmp_path, caplog):
    with caplog.at_level(logging.WARNING):
        empty = CharacterDatabase(str(tmp_path / "absent.json"))
    assert empty.characters == []
    assert empty.next_character_id(None) is None
    assert len(empty.demo_strokes("ko-kai")) == 2
    assert "not found" in caplog.text


def test_malformed_template_is_skipped(tmp_path, caplog):
    path = write_db(tmp_path, [
        {"id": "good", "char": "ก", "name": "good", "meaning": "",
         "strokes": [{"order": 1, "direction": "vertical", "points": [[0, 0], [0, 10]]}]},
        {"id": "gap", "char": "ข", "name": "gap", "meaning": "",
         "strokes": [{"order": 1, "direction": "vertical", "points": [[0, 0], [0, 10]]},
                     {"order": 3, "direction": "vertical", "points": [[5, 0], [5, 10]]}]},
        {"id": "bad-points", "char": "ค", "name": "bad", "meaning": "",
         "strokes": [{"order": 1, "direction": "vertical", "points": [[0]]}]},
    ])
    with caplog.at_level(logging.WARNING):
        loaded = CharacterDatabase(path)

    assert len(loaded.characters) == 3
    assert len(loaded.get_template("good")) == 1
    assert loaded.get_template("gap") == []
    assert loaded.get_template("bad-points") == []
    assert "gap" in caplog.text


def test_template_is_sorted_by_order(tmp_path):
    path = write_db(tmp_path, [
        {"id": "x", "char": "x", "name": "x", "meaning": "", "strokes": [
            {"id": "b", "order": 2, "direction": "horizontal", "points": [[0, 0], [10, 0]]},
            {"id": "a", "order": 1, "direction": "vertical", "points": [[0, 0], [0, 10]]},
        ]},
    ])
    template = CharacterDatabase(path).get_template("x")
    assert [e.stroke_id for e in template] == ["a", "b"]

from __future__ import annotations
import json
from pathlib import Path
from transition_roster.logging.error_log import ErrorLogBuffer, ErrorRecord

KEYS = {"timestamp", "source", "student_id", "error_type", "message"}


def test_error_record_creation_and_json_line():
    rec = ErrorRecord.create("row_builder", 111111, "PER_STUDENT_COMPUTATION", "bad placement")
    data = json.loads(rec.to_json_line())
    assert data["source"] == "row_builder"
    assert data["student_id"] == 111111
    assert data["error_type"] == "PER_STUDENT_COMPUTATION"
    assert data["timestamp"].endswith("Z")
    assert set(data.keys()) == KEYS


def test_error_log_buffer_flush(temp_workdir: Path):
    buf = ErrorLogBuffer()
    buf.add("row_builder", 1, "PER_STUDENT_DATA", "no entry date")
    buf.add("withdrawn", -1, "MISSING_SOURCE", "sheet 'Withdrawn' not found")
    path = buf.flush()
    assert path.parent == Path("logs")
    assert path.name.startswith("errors-") and path.suffix == ".log"
    lines = path.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) == 2
    for raw in lines:
        assert set(json.loads(raw).keys()) == KEYS
    assert len(buf) == 0


def test_error_log_buffer_multiple_flushes(temp_workdir: Path):
    buf = ErrorLogBuffer()
    buf.add("row_builder", 1, "PER_STUDENT_DATA", "a")
    path = buf.flush()
    buf.add("row_builder", 2, "PER_STUDENT_DATA", "b")
    assert buf.flush() == path
    assert len(path.read_text(encoding="utf-8").splitlines()) == 2


def test_empty_buffer_writes_nothing(temp_workdir: Path):
    assert ErrorLogBuffer().flush() is None
    assert list((temp_workdir / "logs").iterdir()) == []

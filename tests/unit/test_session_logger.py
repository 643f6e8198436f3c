"""Tests for the markdown session logger and structured logging."""

import json
import logging

from tabibi.infrastructure.logging.logger import JSONFormatter, StructuredLogger
from tabibi.infrastructure.logging.session_logger import SessionLogger


def test_disabled_logger_writes_nothing(tmp_path):
    logger = SessionLogger(base_dir=str(tmp_path), enabled=False)

    assert logger.start_session("u1", "سؤال") is None
    logger.log_phase_output("planning", "raw")
    logger.end_session(True, "done")

    assert list(tmp_path.iterdir()) == []


def test_session_files(tmp_path):
    logger = SessionLogger(base_dir=str(tmp_path))

    session_dir = logger.start_session("u1", "كام مريض؟")
    logger.log_phase_output(
        "planning",
        raw_response='{"requests": []}',
        parsed_response={"requests": []},
        input_text="كام مريض؟",
        system_prompt="plan please",
        execution_time_ms=12.5,
        provider="cerebras",
    )
    logger.log_phase_output("reading", raw_response="تحليل")
    logger.end_session(success=True, final_message="رد")

    files = sorted(p.name for p in tmp_path.joinpath(session_dir).iterdir())
    assert files == ["00_run.md", "01_planning.md", "02_reading.md", "99_result.md"]
    planning = tmp_path.joinpath(session_dir, "01_planning.md").read_text(encoding="utf-8")
    assert "12.50 ms" in planning
    assert "plan please" in planning
    assert "## Output (structured)" in planning
    assert "- provider: cerebras" in planning
    assert planning.startswith("# 1. planning (بخطط...)")
    reading = tmp_path.joinpath(session_dir, "02_reading.md").read_text(encoding="utf-8")
    assert "- provider: static fallback" in reading
    assert "كام مريض؟" in tmp_path.joinpath(session_dir, "00_run.md").read_text(encoding="utf-8")
    assert logger.session_dir is None


def test_json_formatter():
    record = logging.LogRecord("tabibi", logging.INFO, __file__, 1, "مرحبا %s", ("x",), None)
    payload = json.loads(JSONFormatter().format(record))
    assert payload["message"] == "مرحبا x"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "tabibi"


def test_structured_logger_step(caplog):
    caplog.set_level(logging.INFO, logger="tabibi.test")
    StructuredLogger("tabibi.test").log_step("planning", {"provider": "cerebras"}, duration_ms=12.345)

    payload = json.loads(caplog.records[-1].getMessage())
    assert payload["step"] == "planning"
    assert payload["state"] == {"provider": "cerebras"}
    assert payload["duration_ms"] == 12.35

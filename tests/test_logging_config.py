from __future__ import annotations

import io
import json
import logging
from pathlib import Path

from structlog.contextvars import bind_contextvars, reset_contextvars

from kspipe.config import KspipeSettings
from kspipe.logging_config import configure_logging


def test_file_log_is_json_with_bound_context(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "kspipe.log"
    stream = io.StringIO()
    logger = configure_logging(KspipeSettings(log_file=log_file), stream=stream)

    tokens = bind_contextvars(pipeline_namespace="team-a")
    try:
        logging.getLogger("kspipe.executor").info("pipeline deleted name=%s", "build-1")
    finally:
        reset_contextvars(**tokens)
    for handler in logger.handlers:
        handler.flush()

    record = json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
    assert record["event"] == "pipeline deleted name=build-1"
    assert record["pipeline_namespace"] == "team-a"
    assert record["level"] == "info"
    assert record["logger"] == "kspipe.executor"
    assert stream.getvalue() == ""


def test_console_level_follows_settings() -> None:
    stream = io.StringIO()
    configure_logging(KspipeSettings(log_level="debug"), stream=stream)

    logging.getLogger("kspipe.locator").debug("no pipelines found namespace=%s", "team-a")

    assert "no pipelines found namespace=team-a" in stream.getvalue()


def test_unknown_level_falls_back_to_warning() -> None:
    stream = io.StringIO()
    configure_logging(KspipeSettings(log_level="chatty"), stream=stream)

    logging.getLogger("kspipe.locator").info("quiet")
    logging.getLogger("kspipe.locator").warning("loud")

    output = stream.getvalue()
    assert "quiet" not in output
    assert "loud" in output

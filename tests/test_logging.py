"""Tests for structured logging setup (logging.py)."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator

import pytest

from vidmerge.logging import setup_logging


@pytest.fixture()
def restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


class TestSetupLogging:
    def test_emits_json_with_extra_fields(
        self, restore_root_logger: None, capsys: pytest.CaptureFixture[str],
    ) -> None:
        setup_logging("INFO")
        logging.getLogger("vidmerge.test").info("Starting download", extra={"job_id": "abc"})

        record = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert record["message"] == "Starting download"
        assert record["levelname"] == "INFO"
        assert record["name"] == "vidmerge.test"
        assert record["job_id"] == "abc"

    def test_level_is_applied(self, restore_root_logger: None) -> None:
        root = setup_logging("WARNING")
        assert root.level == logging.WARNING
        assert logging.getLogger("uvicorn.access").propagate is False

# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for logging configuration."""

import json
import logging
from collections.abc import Iterator

import pytest

from academy_lms.core.config import JWTSettings, Settings
from academy_lms.utils.logging import bind_context, clear_context, setup_logging


@pytest.fixture(autouse=True)
def _restore_app_logger() -> Iterator[None]:
    app_logger = logging.getLogger("academy_lms")
    handlers, propagate, level = list(app_logger.handlers), app_logger.propagate, app_logger.level
    yield
    clear_context()
    app_logger.handlers[:] = handlers
    app_logger.propagate = propagate
    app_logger.setLevel(level)


class TestSetupLogging:
    def test_json_lines_carry_request_context(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test that context bound for a request appears on application log lines."""
        settings = Settings(
            environment="production",
            debug=False,
            jwt=JWTSettings(secret_key="a-real-secret"),
        )
        setup_logging(settings)

        bind_context(request_id="req-1", user_id="u1")
        logging.getLogger("academy_lms.domains.course").info("Course created: id=%s", "c1")

        line = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert line["event"] == "Course created: id=c1"
        assert line["request_id"] == "req-1"
        assert line["user_id"] == "u1"
        assert line["level"] == "info"
        assert line["logger"] == "academy_lms.domains.course"

    def test_clear_context_drops_fields(self, capsys: pytest.CaptureFixture[str]) -> None:
        settings = Settings(
            environment="production",
            debug=False,
            jwt=JWTSettings(secret_key="a-real-secret"),
        )
        setup_logging(settings)

        bind_context(request_id="req-1")
        clear_context()
        logging.getLogger("academy_lms").warning("after")

        line = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert "request_id" not in line

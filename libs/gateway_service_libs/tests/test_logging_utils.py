"""Tests for logging_utils processors and helpers."""

import os
from typing import Any
from unittest.mock import Mock

from gateway_service_libs.logging_utils import (
    add_service_context,
    bind_request_logger,
    truncate_for_log,
)


class TestAddServiceContext:
    """Tests for the add_service_context processor."""

    def test_adds_service_fields_from_env(self) -> None:
        os.environ["SERVICE_NAME"] = "test_service"
        os.environ["ENVIRONMENT"] = "testing"
        event_dict: dict[str, Any] = {"event": "test message", "request_id": "abc-123"}

        result = add_service_context(None, "", event_dict)

        assert result["service.name"] == "test_service"
        assert result["deployment.environment"] == "testing"
        assert result["request_id"] == "abc-123"


class TestTruncateForLog:
    def test_short_text_is_unchanged(self) -> None:
        assert truncate_for_log("hello", limit=10) == "hello"

    def test_long_text_is_cut_at_limit(self) -> None:
        assert truncate_for_log("x" * 50, limit=10) == "x" * 10

    def test_bytes_are_decoded_leniently(self) -> None:
        assert truncate_for_log(b"ok \xff", limit=10) == "ok �"

    def test_none_is_empty(self) -> None:
        assert truncate_for_log(None) == ""


def test_bind_request_logger_binds_request_id_and_context() -> None:
    logger = Mock()

    bind_request_logger(logger, "req-1", endpoint="workout-plan")

    logger.bind.assert_called_once_with(request_id="req-1", endpoint="workout-plan")

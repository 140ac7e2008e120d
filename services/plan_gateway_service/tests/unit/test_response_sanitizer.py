"""Unit tests for ResponseSanitizer."""

from __future__ import annotations

import json

import pytest
from gateway_service_libs.error_handling import GatewayError

from services.plan_gateway_service.implementations.response_sanitizer import ResponseSanitizer
from services.plan_gateway_service.tests.payloads import WORKOUT_PLAN, fenced

REQUEST_ID = "req-sanitizer-1"


@pytest.fixture
def sanitizer() -> ResponseSanitizer:
    return ResponseSanitizer("plan-gateway-service-test", max_excerpt_chars=50)


def test_plain_json_parses_directly(sanitizer: ResponseSanitizer) -> None:
    assert sanitizer.sanitize(json.dumps(WORKOUT_PLAN), REQUEST_ID) == WORKOUT_PLAN


@pytest.mark.parametrize("language", ["json", "JSON", ""])
def test_fenced_json_round_trips(sanitizer: ResponseSanitizer, language: str) -> None:
    assert sanitizer.sanitize(fenced(WORKOUT_PLAN, language), REQUEST_ID) == WORKOUT_PLAN


def test_fence_with_surrounding_whitespace(sanitizer: ResponseSanitizer) -> None:
    raw = "\n\n  ```json\n{ \"name\": \"x\" }\n```  \n"

    assert sanitizer.sanitize(raw, REQUEST_ID) == {"name": "x"}


def test_bytes_are_decoded(sanitizer: ResponseSanitizer) -> None:
    assert sanitizer.sanitize(b'{"a": 1}', REQUEST_ID) == {"a": 1}


def test_non_object_json_is_returned_as_is(sanitizer: ResponseSanitizer) -> None:
    assert sanitizer.sanitize("[1, 2]", REQUEST_ID) == [1, 2]


def test_clean_strips_fence_and_brace_whitespace() -> None:
    assert ResponseSanitizer.clean('```json\n{\n  "a": 1\n}\n```') == '{"a": 1}'


def test_unrecoverable_text_raises_parse_error_with_bounded_excerpt(
    sanitizer: ResponseSanitizer,
) -> None:
    raw = "Sure! Here is your plan: " + "x" * 200

    with pytest.raises(GatewayError) as exc_info:
        sanitizer.sanitize(raw, REQUEST_ID)

    error = exc_info.value
    assert error.error_code == "parse_error"
    assert error.status_code == 400
    assert error.request_id == REQUEST_ID
    assert error.error_detail.message.startswith("Invalid JSON format returned from upstream")
    assert error.error_detail.details == raw[:50]


def test_empty_text_raises_parse_error(sanitizer: ResponseSanitizer) -> None:
    with pytest.raises(GatewayError) as exc_info:
        sanitizer.sanitize("   \n", REQUEST_ID)

    assert exc_info.value.error_code == "parse_error"
    assert exc_info.value.error_detail.message == "Empty response received from upstream"


def test_strict_mode_does_not_strip_fences(sanitizer: ResponseSanitizer) -> None:
    with pytest.raises(GatewayError) as exc_info:
        sanitizer.sanitize(fenced({"a": 1}), REQUEST_ID, strip_fences=False, status_code=500)

    assert exc_info.value.error_code == "parse_error"
    assert exc_info.value.status_code == 500

"""Recovery of JSON values from upstream text.

Models asked for JSON sometimes answer with a fenced markdown block or with
stray whitespace around the object. The sanitizer tries a strict parse
first and falls back to stripping exactly those artifacts.
"""

from __future__ import annotations

import json
import re
from typing import Any, NoReturn

from gateway_service_libs.error_handling import raise_parse_error
from gateway_service_libs.logging_utils import create_service_logger, truncate_for_log

logger = create_service_logger("plan_gateway.response_sanitizer")

# Pre-compiled patterns for the fallback cleanup
LEADING_FENCE_PATTERN = re.compile(r"^```[A-Za-z0-9_+\-]*[ \t]*\r?\n?")
TRAILING_FENCE_PATTERN = re.compile(r"\s*```$")
OBJECT_START_PATTERN = re.compile(r"^\s*\{\s*")
OBJECT_END_PATTERN = re.compile(r"\s*\}\s*$")


class ResponseSanitizer:
    """Turns raw upstream text into a parsed JSON value."""

    def __init__(self, service_name: str, max_excerpt_chars: int = 1000) -> None:
        self._service_name = service_name
        self._max_excerpt_chars = max_excerpt_chars

    def sanitize(
        self,
        raw_text: str | bytes,
        request_id: str,
        *,
        strip_fences: bool = True,
        status_code: int | None = None,
    ) -> Any:
        """Parse ``raw_text``, tolerating code fences and surrounding whitespace.

        Args:
            raw_text: Upstream text (the envelope, or a message's content)
            request_id: Identity of the request, carried into any error
            strip_fences: When False only the strict parse is attempted; used
                for the chat-completion envelope, which the upstream always
                sends as plain JSON
            status_code: HTTP status for the parse_error; defaults to the
                taxonomy status (400)

        Returns:
            The parsed JSON value

        Raises:
            GatewayError: parse_error when no JSON can be recovered
        """
        if isinstance(raw_text, bytes):
            raw_text = raw_text.decode("utf-8", errors="replace")

        if not raw_text or not raw_text.strip():
            raise_parse_error(
                service=self._service_name,
                operation="sanitize_response",
                message="Empty response received from upstream",
                request_id=request_id,
                details="Upstream returned no content",
                status_code=status_code,
            )

        try:
            return json.loads(raw_text)
        except json.JSONDecodeError as first_error:
            if not strip_fences:
                self._fail(raw_text, request_id, first_error, status_code)

        cleaned = self.clean(raw_text)
        try:
            return json.loads(cleaned)
        except json.JSONDecodeError as e:
            self._fail(raw_text, request_id, e, status_code)

    @staticmethod
    def clean(raw_text: str) -> str:
        """Strip one layer of fence and brace whitespace."""
        text = raw_text.strip()
        text = LEADING_FENCE_PATTERN.sub("", text, count=1)
        text = TRAILING_FENCE_PATTERN.sub("", text, count=1)
        text = text.strip()
        text = OBJECT_START_PATTERN.sub("{", text, count=1)
        text = OBJECT_END_PATTERN.sub("}", text, count=1)
        return text

    def _fail(
        self,
        raw_text: str,
        request_id: str,
        error: json.JSONDecodeError,
        status_code: int | None = None,
    ) -> NoReturn:
        excerpt = truncate_for_log(raw_text, self._max_excerpt_chars)
        logger.warning(
            "Failed to parse upstream response",
            request_id=request_id,
            error=str(error),
            original_text=excerpt,
        )
        raise_parse_error(
            service=self._service_name,
            operation="sanitize_response",
            message=f"Invalid JSON format returned from upstream: {error.msg}",
            request_id=request_id,
            details=excerpt,
            status_code=status_code,
            position=error.pos,
        )

"""Translation between specialized plan endpoints and chat completions.

Specialized endpoints are presented to callers as first-class APIs, but
each one is served by a single canonical chat-completion call upstream.
Endpoints without a TranslationRule pass through unchanged in both
directions.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from gateway_service_libs.error_handling import GatewayError, raise_translation_error
from gateway_service_libs.logging_utils import create_service_logger

from services.plan_gateway_service.config import Settings
from services.plan_gateway_service.endpoint_registry import (
    CANONICAL_PATH,
    TranslationRule,
    resolve_endpoint,
)
from services.plan_gateway_service.implementations.response_sanitizer import ResponseSanitizer

logger = create_service_logger("plan_gateway.endpoint_translator")


class EndpointTranslator:
    """Maps specialized requests onto chat completions and back."""

    def __init__(
        self,
        settings: Settings,
        sanitizer: ResponseSanitizer,
        rules: Mapping[str, TranslationRule],
    ) -> None:
        self._settings = settings
        self._sanitizer = sanitizer
        self._rules = rules

    def _rule_for(self, logical_path: str) -> TranslationRule | None:
        spec = resolve_endpoint(logical_path, self._settings.PROXY_PATH_PREFIX)
        if spec is None:
            return None
        return self._rules.get(spec.key)

    def forward(
        self, logical_path: str, request_body: dict[str, Any]
    ) -> tuple[str, dict[str, Any]]:
        """Build the canonical call for ``logical_path``.

        Returns:
            ``(canonical_path, canonical_body)``; the input itself when the
            endpoint has no rule
        """
        rule = self._rule_for(logical_path)
        if rule is None:
            return logical_path, request_body

        prompt = request_body.get("prompt") or self._settings.PLAN_DEFAULT_PROMPT
        max_tokens = request_body.get("max_tokens") or self._settings.PLAN_DEFAULT_MAX_TOKENS

        canonical_body = {
            "model": self._settings.PLAN_MODEL,
            "messages": [
                {"role": "system", "content": rule.system_prompt},
                {"role": "user", "content": rule.render_user_prompt(prompt)},
            ],
            "temperature": self._settings.PLAN_TEMPERATURE,
            "max_tokens": max_tokens,
            "response_format": {"type": "json_object"},
        }
        return f"{self._settings.PROXY_PATH_PREFIX}{CANONICAL_PATH}", canonical_body

    def backward(
        self, logical_path: str, canonical_response: dict[str, Any], request_id: str
    ) -> Any:
        """Map the upstream reply back to what the caller asked for.

        For specialized endpoints the first choice's content is returned on
        its own, without the chat-completion envelope. The content may be an
        already structured object or JSON text, fenced or not.

        Raises:
            GatewayError: translation_error when there is no choice or the
                content is not an object
        """
        if self._rule_for(logical_path) is None:
            return canonical_response

        choices = canonical_response.get("choices")
        if not isinstance(choices, list) or not choices:
            raise_translation_error(
                service=self._settings.SERVICE_NAME,
                operation="translate_backward",
                message="Failed to parse special endpoint response",
                request_id=request_id,
                details="Upstream response contains no choices",
                path=logical_path,
            )

        first_choice = choices[0]
        message = first_choice.get("message") if isinstance(first_choice, dict) else None
        content = message.get("content") if isinstance(message, dict) else None

        if isinstance(content, str):
            try:
                content = self._sanitizer.sanitize(content, request_id)
            except GatewayError as e:
                raise_translation_error(
                    service=self._settings.SERVICE_NAME,
                    operation="translate_backward",
                    message="Failed to parse special endpoint response",
                    request_id=request_id,
                    details=e.error_detail.details or e.error_detail.message,
                    path=logical_path,
                )

        if not isinstance(content, dict):
            raise_translation_error(
                service=self._settings.SERVICE_NAME,
                operation="translate_backward",
                message="Failed to parse special endpoint response",
                request_id=request_id,
                details=f"Message content must be an object, got {type(content).__name__}",
                path=logical_path,
            )

        logger.debug("Unwrapped specialized response", request_id=request_id, path=logical_path)
        return content

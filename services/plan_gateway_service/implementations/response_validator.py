"""Response validation for Plan Gateway Service.

One validator serves every endpoint: the field sets come from the
endpoint's EndpointSpec, and the chat-completion envelope additionally has
each choice checked against a pydantic model.
"""

from __future__ import annotations

from typing import Any, NoReturn

from gateway_service_libs.error_handling import raise_validation_error
from gateway_service_libs.logging_utils import create_service_logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from services.plan_gateway_service.endpoint_registry import EndpointSpec

logger = create_service_logger("plan_gateway.response_validator")


class ChatMessage(BaseModel):
    """Message of one chat-completion choice."""

    model_config = ConfigDict(extra="allow")

    role: str = Field(min_length=1)
    content: Any = Field(description="Text, or an already structured value")


class ChatChoice(BaseModel):
    """One entry of the ``choices`` collection."""

    model_config = ConfigDict(extra="allow")

    message: ChatMessage


class ResponseValidator:
    """Rejects malformed replies with a precise reason."""

    def __init__(self, service_name: str) -> None:
        self._service_name = service_name

    def validate(self, value: Any, spec: EndpointSpec, request_id: str) -> None:
        """Check ``value`` against ``spec``.

        Raises:
            GatewayError: validation_error naming the first violated rule
        """
        if not isinstance(value, dict):
            self._reject(
                spec,
                request_id,
                f"response for {spec.key} must be an object, got {type(value).__name__}",
            )

        for field_name in sorted(spec.required_response_fields):
            field_value = value.get(field_name)
            if field_value is None:
                self._reject(spec, request_id, f"missing field {field_name}")
            if _is_blank(field_value):
                self._reject(spec, request_id, f"field {field_name} must be non-empty")

        if spec.collection_field is not None:
            collection = value[spec.collection_field]
            if not isinstance(collection, list):
                self._reject(
                    spec,
                    request_id,
                    f"collection field {spec.collection_field} must be an array",
                )
            if not collection:
                self._reject(
                    spec,
                    request_id,
                    f"collection field {spec.collection_field} must be non-empty",
                )

        if not spec.specialized:
            self._validate_choices(value["choices"], spec, request_id)

    def _validate_choices(self, choices: list[Any], spec: EndpointSpec, request_id: str) -> None:
        for index, choice in enumerate(choices):
            try:
                parsed = ChatChoice.model_validate(choice)
            except ValidationError as e:
                self._reject(spec, request_id, format_validation_errors(e, ("choices", index)))
            content = parsed.message.content
            if content is None:
                self._reject(
                    spec, request_id, f"missing field choices -> {index} -> message -> content"
                )
            if _is_blank(content):
                self._reject(
                    spec,
                    request_id,
                    f"field choices -> {index} -> message -> content must be non-empty",
                )

    def _reject(self, spec: EndpointSpec, request_id: str, reason: str) -> NoReturn:
        logger.warning(
            f"Response validation failed: {reason}",
            request_id=request_id,
            endpoint=spec.key,
        )
        raise_validation_error(
            service=self._service_name,
            operation="validate_response",
            message=f"Invalid response structure for {spec.key}",
            request_id=request_id,
            details=reason,
            endpoint=spec.key,
        )


def _is_blank(value: Any) -> bool:
    return isinstance(value, str) and not value.strip()


def format_validation_errors(e: ValidationError, prefix: tuple[Any, ...] = ()) -> str:
    """Render pydantic errors as 'loc -> loc: message' pairs."""
    messages = []
    for error in e.errors():
        location = " -> ".join(str(loc) for loc in (*prefix, *error["loc"]))
        if error["type"] == "missing":
            messages.append(f"missing field {location}")
        else:
            messages.append(f"{location}: {error['msg']}")
    return "; ".join(messages)

"""Unit tests for EndpointTranslator."""

from __future__ import annotations

import json

import pytest
from gateway_service_libs.error_handling import GatewayError

from services.plan_gateway_service.config import Settings
from services.plan_gateway_service.endpoint_registry import (
    MEAL_PLAN,
    TRANSLATION_RULES,
    WORKOUT_PLAN,
)
from services.plan_gateway_service.implementations.endpoint_translator import EndpointTranslator
from services.plan_gateway_service.implementations.response_sanitizer import ResponseSanitizer
from services.plan_gateway_service.tests.payloads import (
    MEAL_PLAN as MEAL_PLAN_BODY,
)
from services.plan_gateway_service.tests.payloads import (
    WORKOUT_PLAN as WORKOUT_PLAN_BODY,
)
from services.plan_gateway_service.tests.payloads import chat_completion, fenced

REQUEST_ID = "req-translator-1"
CHAT_PATH = "/openai/v1/chat/completions"
WORKOUT_PATH = "/openai/v1/workout-plan"
MEAL_PATH = "/openai/v1/meal-plan"


@pytest.fixture
def translator(test_settings: Settings) -> EndpointTranslator:
    sanitizer = ResponseSanitizer(test_settings.SERVICE_NAME)
    return EndpointTranslator(test_settings, sanitizer, TRANSLATION_RULES)


class TestForward:
    def test_chat_completion_passes_through(self, translator: EndpointTranslator) -> None:
        body = {"model": "gpt-4o", "messages": [{"role": "user", "content": "hi"}], "n": 1}

        path, forwarded = translator.forward(CHAT_PATH, body)

        assert path == CHAT_PATH
        assert forwarded is body

    def test_workout_plan_becomes_chat_completion(self, translator: EndpointTranslator) -> None:
        path, body = translator.forward(
            WORKOUT_PATH, {"prompt": "3 days, dumbbells", "max_tokens": 500}
        )

        assert path == CHAT_PATH
        assert body["model"] == "gpt-3.5-turbo"
        assert body["temperature"] == 0.7
        assert body["max_tokens"] == 500
        assert body["response_format"] == {"type": "json_object"}
        system, user = body["messages"]
        assert system["role"] == "system"
        assert system["content"] == TRANSLATION_RULES[WORKOUT_PLAN].system_prompt
        assert user["role"] == "user"
        assert "3 days, dumbbells" in user["content"]

    def test_defaults_apply_when_fields_are_absent(self, translator: EndpointTranslator) -> None:
        _, body = translator.forward(MEAL_PATH, {})

        assert body["max_tokens"] == 2000
        assert body["messages"][0]["content"] == TRANSLATION_RULES[MEAL_PLAN].system_prompt
        assert "Create a general plan" in body["messages"][1]["content"]

    def test_trailing_slash_still_resolves(self, translator: EndpointTranslator) -> None:
        path, _ = translator.forward(f"{WORKOUT_PATH}/", {})

        assert path == CHAT_PATH


class TestBackward:
    def test_chat_completion_is_identity(self, translator: EndpointTranslator) -> None:
        completion = chat_completion("hello")

        assert translator.backward(CHAT_PATH, completion, REQUEST_ID) is completion

    def test_structured_content_is_unwrapped(self, translator: EndpointTranslator) -> None:
        result = translator.backward(WORKOUT_PATH, chat_completion(WORKOUT_PLAN_BODY), REQUEST_ID)

        assert result == WORKOUT_PLAN_BODY

    def test_json_text_content_is_parsed(self, translator: EndpointTranslator) -> None:
        completion = chat_completion(json.dumps(MEAL_PLAN_BODY))

        assert translator.backward(MEAL_PATH, completion, REQUEST_ID) == MEAL_PLAN_BODY

    def test_fenced_json_content_is_parsed(self, translator: EndpointTranslator) -> None:
        completion = chat_completion(fenced(WORKOUT_PLAN_BODY))

        assert translator.backward(WORKOUT_PATH, completion, REQUEST_ID) == WORKOUT_PLAN_BODY

    def test_missing_choices_raise_translation_error(self, translator: EndpointTranslator) -> None:
        with pytest.raises(GatewayError) as exc_info:
            translator.backward(WORKOUT_PATH, {"id": "x", "choices": []}, REQUEST_ID)

        assert exc_info.value.error_code == "translation_error"
        assert exc_info.value.status_code == 500
        assert exc_info.value.error_detail.message == "Failed to parse special endpoint response"

    def test_unparseable_content_raises_translation_error(
        self, translator: EndpointTranslator
    ) -> None:
        with pytest.raises(GatewayError) as exc_info:
            translator.backward(WORKOUT_PATH, chat_completion("Here is a plan!"), REQUEST_ID)

        assert exc_info.value.error_code == "translation_error"
        assert exc_info.value.request_id == REQUEST_ID
        assert exc_info.value.error_detail.details == "Here is a plan!"

    def test_non_object_content_raises_translation_error(
        self, translator: EndpointTranslator
    ) -> None:
        with pytest.raises(GatewayError) as exc_info:
            translator.backward(MEAL_PATH, chat_completion("[1, 2, 3]"), REQUEST_ID)

        assert exc_info.value.error_code == "translation_error"
        assert "got list" in exc_info.value.error_detail.details


@pytest.mark.parametrize("content", [WORKOUT_PLAN_BODY, json.dumps(WORKOUT_PLAN_BODY)])
def test_forward_backward_composition(translator: EndpointTranslator, content: object) -> None:
    path, _ = translator.forward(WORKOUT_PATH, {"prompt": "strength"})
    assert path == CHAT_PATH

    result = translator.backward(WORKOUT_PATH, chat_completion(content), REQUEST_ID)
    assert result == WORKOUT_PLAN_BODY

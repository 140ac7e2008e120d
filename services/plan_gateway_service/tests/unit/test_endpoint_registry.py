"""Unit tests for the endpoint tables."""

from __future__ import annotations

import pytest

from common_core.config_enums import EndpointKind
from services.plan_gateway_service.endpoint_registry import (
    CHAT_COMPLETION,
    ENDPOINT_SPECS,
    MEAL_PLAN,
    TRANSLATION_RULES,
    WORKOUT_PLAN,
    get_endpoint_spec,
    resolve_endpoint,
)


def test_every_specialized_endpoint_has_a_rule() -> None:
    specialized = {key for key, spec in ENDPOINT_SPECS.items() if spec.specialized}

    assert specialized == set(TRANSLATION_RULES) == {WORKOUT_PLAN, MEAL_PLAN}
    assert CHAT_COMPLETION not in TRANSLATION_RULES


def test_collection_fields_are_keyed_per_endpoint() -> None:
    assert get_endpoint_spec(CHAT_COMPLETION).collection_field == "choices"
    assert get_endpoint_spec(WORKOUT_PLAN).collection_field == "days"
    assert get_endpoint_spec(MEAL_PLAN).collection_field == "meals"
    assert get_endpoint_spec(CHAT_COMPLETION).kind is EndpointKind.CANONICAL


def test_tables_are_read_only() -> None:
    with pytest.raises(TypeError):
        ENDPOINT_SPECS["other"] = get_endpoint_spec(MEAL_PLAN)  # type: ignore[index]


@pytest.mark.parametrize(
    ("logical_path", "expected_key"),
    [
        ("/openai/v1/chat/completions", CHAT_COMPLETION),
        ("/openai/v1/workout-plan", WORKOUT_PLAN),
        ("/openai/v1/meal-plan/", MEAL_PLAN),
    ],
)
def test_resolve_endpoint_strips_prefix(logical_path: str, expected_key: str) -> None:
    spec = resolve_endpoint(logical_path, "/openai")

    assert spec is not None
    assert spec.key == expected_key


def test_resolve_unknown_path_returns_none() -> None:
    assert resolve_endpoint("/openai/v1/embeddings", "/openai") is None


def test_user_prompt_embeds_caller_prompt() -> None:
    rule = TRANSLATION_RULES[MEAL_PLAN]

    assert "vegetarian, 1800 kcal" in rule.render_user_prompt("vegetarian, 1800 kcal")

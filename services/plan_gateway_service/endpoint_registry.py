"""Process-wide endpoint tables for Plan Gateway Service.

``ENDPOINT_SPECS`` describes every public endpoint and the response shape it
must produce; ``TRANSLATION_RULES`` holds the prompts for the specialized
endpoints. Both are built once at import time and exposed read-only, so
request tasks can share them without locking. Adding a specialized endpoint
means adding one EndpointSpec and one TranslationRule here; routes, the
translator and the validator pick it up from these tables.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from common_core.config_enums import EndpointKind

CHAT_COMPLETION = "chat-completion"
WORKOUT_PLAN = "workout-plan"
MEAL_PLAN = "meal-plan"

CANONICAL_PATH = "/v1/chat/completions"


@dataclass(frozen=True)
class EndpointSpec:
    """Shape contract for one logical endpoint."""

    key: str
    path: str
    kind: EndpointKind
    required_response_fields: frozenset[str]
    optional_response_fields: frozenset[str] = field(default_factory=frozenset)
    collection_field: str | None = None

    @property
    def specialized(self) -> bool:
        return self.kind is EndpointKind.SPECIALIZED


@dataclass(frozen=True)
class TranslationRule:
    """How a specialized request is phrased as a chat completion."""

    system_prompt: str
    user_prompt_template: Callable[[str], str]

    def render_user_prompt(self, prompt: str) -> str:
        return self.user_prompt_template(prompt)


def _workout_user_prompt(prompt: str) -> str:
    return (
        f"Create a workout plan with the following requirements: {prompt}. "
        "Return the response as a JSON object with fields: name (string), "
        "description (string), and days (array of workout days)."
    )


def _meal_user_prompt(prompt: str) -> str:
    return (
        f"Create a meal plan with the following requirements: {prompt}. "
        "Return the response as a JSON object with fields: name (string), "
        "description (string), and meals (array of meals)."
    )


ENDPOINT_SPECS: Mapping[str, EndpointSpec] = MappingProxyType(
    {
        CHAT_COMPLETION: EndpointSpec(
            key=CHAT_COMPLETION,
            path=CANONICAL_PATH,
            kind=EndpointKind.CANONICAL,
            required_response_fields=frozenset({"id", "choices"}),
            optional_response_fields=frozenset({"object", "created", "model", "usage"}),
            collection_field="choices",
        ),
        WORKOUT_PLAN: EndpointSpec(
            key=WORKOUT_PLAN,
            path="/v1/workout-plan",
            kind=EndpointKind.SPECIALIZED,
            required_response_fields=frozenset({"name", "description", "days"}),
            optional_response_fields=frozenset({"duration", "difficulty", "equipment"}),
            collection_field="days",
        ),
        MEAL_PLAN: EndpointSpec(
            key=MEAL_PLAN,
            path="/v1/meal-plan",
            kind=EndpointKind.SPECIALIZED,
            required_response_fields=frozenset({"name", "description", "meals"}),
            optional_response_fields=frozenset({"calories", "duration", "dietaryRestrictions"}),
            collection_field="meals",
        ),
    }
)

TRANSLATION_RULES: Mapping[str, TranslationRule] = MappingProxyType(
    {
        WORKOUT_PLAN: TranslationRule(
            system_prompt=(
                "You are a professional fitness trainer. Create detailed, structured workout "
                "plans that include warmup, exercises, and cooldown. Always return responses "
                "in valid JSON format with name, description, and days fields."
            ),
            user_prompt_template=_workout_user_prompt,
        ),
        MEAL_PLAN: TranslationRule(
            system_prompt=(
                "You are a professional nutritionist. Create detailed, structured meal plans "
                "that are healthy and balanced. Always return responses in valid JSON format "
                "with name, description, and meals fields."
            ),
            user_prompt_template=_meal_user_prompt,
        ),
    }
)


def get_endpoint_spec(key: str) -> EndpointSpec:
    """Spec for ``key``; raises KeyError for unknown endpoints."""
    return ENDPOINT_SPECS[key]


def resolve_endpoint(logical_path: str, prefix: str = "") -> EndpointSpec | None:
    """Find the spec whose public path matches ``logical_path``.

    ``logical_path`` is the path as the client sent it, including the
    gateway's public prefix (``/openai/v1/meal-plan``).
    """
    path = logical_path.rstrip("/")
    if prefix and path.startswith(prefix):
        path = path[len(prefix) :]
    for spec in ENDPOINT_SPECS.values():
        if spec.path == path:
            return spec
    return None

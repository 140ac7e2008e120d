"""Mock upstream for local development without API calls."""

from __future__ import annotations

import asyncio
import hashlib
import json
import time
from typing import Any

from gateway_service_libs.logging_utils import create_service_logger

from services.plan_gateway_service.config import Settings
from services.plan_gateway_service.internal_models import UpstreamRequest, UpstreamResponse

logger = create_service_logger("plan_gateway.mock_upstream")

_WORKOUT_PLAN = {
    "name": "Mock Full Body Plan",
    "description": "Three full body sessions per week",
    "duration": "4 weeks",
    "difficulty": "beginner",
    "days": [
        {"day": "Monday", "focus": "Full body", "exercises": ["Squats", "Push-ups", "Rows"]},
        {"day": "Wednesday", "focus": "Full body", "exercises": ["Lunges", "Dips", "Plank"]},
        {"day": "Friday", "focus": "Full body", "exercises": ["Deadlifts", "Presses", "Curls"]},
    ],
}

_MEAL_PLAN = {
    "name": "Mock Balanced Day",
    "description": "Three balanced meals with a snack",
    "calories": 2200,
    "meals": [
        {"meal": "Breakfast", "items": ["Oatmeal", "Berries", "Greek yogurt"]},
        {"meal": "Lunch", "items": ["Chicken salad", "Whole grain bread"]},
        {"meal": "Snack", "items": ["Apple", "Almonds"]},
        {"meal": "Dinner", "items": ["Salmon", "Quinoa", "Broccoli"]},
    ],
}


class MockUpstreamClient:
    """Answers chat completions in-process with canned content.

    Plan requests (recognised by their system prompt) get a plan wrapped in a
    ```json fence, the way real models often answer, so the sanitizer path is
    exercised locally too.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    async def send(
        self,
        upstream_request: UpstreamRequest,
        *,
        request_id: str,
        timeout: float,
    ) -> UpstreamResponse:
        started = time.monotonic()
        latency = self._settings.MOCK_UPSTREAM_LATENCY_SECONDS
        if latency > 0:
            await asyncio.sleep(latency)

        body = upstream_request.body
        messages = body.get("messages") or []
        content = self._content_for(messages)
        prompt_text = json.dumps(messages, sort_keys=True, default=str)
        digest = hashlib.sha256(prompt_text.encode("utf-8")).hexdigest()

        completion: dict[str, Any] = {
            "id": f"chatcmpl-mock-{digest[:24]}",
            "object": "chat.completion",
            "created": int(time.time()),
            "model": body.get("model") or self._settings.PLAN_MODEL,
            "choices": [
                {
                    "index": 0,
                    "message": {"role": "assistant", "content": content},
                    "finish_reason": "stop",
                }
            ],
            "usage": {
                "prompt_tokens": len(prompt_text) // 4,
                "completion_tokens": len(content) // 4,
                "total_tokens": (len(prompt_text) + len(content)) // 4,
            },
        }

        logger.debug("Mock upstream generated response", request_id=request_id)
        return UpstreamResponse(
            status_code=200,
            text=json.dumps(completion),
            elapsed_seconds=time.monotonic() - started,
        )

    @staticmethod
    def _content_for(messages: list[Any]) -> str:
        system_prompt = ""
        for message in messages:
            if isinstance(message, dict) and message.get("role") == "system":
                system_prompt = str(message.get("content", "")).lower()
                break

        if "fitness trainer" in system_prompt:
            return f"```json\n{json.dumps(_WORKOUT_PLAN, indent=2)}\n```"
        if "nutritionist" in system_prompt:
            return f"```json\n{json.dumps(_MEAL_PLAN, indent=2)}\n```"
        return "This is a mock response from the plan gateway."

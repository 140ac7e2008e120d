"""Inbound request models for Plan Gateway Service.

Bodies are validated against these models but forwarded as the client sent
them; unknown fields are allowed so chat-completion options reach the
upstream untouched.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr


class ChatCompletionRequest(BaseModel):
    """Body of ``POST /openai/v1/chat/completions``."""

    model_config = ConfigDict(extra="allow")

    messages: list[Any] = Field(description="Ordered conversation, forwarded verbatim")


class PlanGenerationRequest(BaseModel):
    """Body of the specialized plan endpoints."""

    model_config = ConfigDict(extra="allow")

    prompt: StrictStr | None = Field(default=None, description="Free-text plan requirements")
    max_tokens: StrictInt | None = Field(default=None, gt=0)

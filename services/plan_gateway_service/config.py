"""
Configuration for Plan Gateway Service.

Uses Pydantic settings for environment-based configuration of the
upstream connection, the request deadline and the plan generation defaults.
"""

from __future__ import annotations

from common_core.config_enums import Environment
from gateway_service_libs.config import SecureServiceSettings
from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import SettingsConfigDict


class Settings(SecureServiceSettings):
    """Configuration settings for Plan Gateway Service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="PLAN_GATEWAY_",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Service identity
    SERVICE_NAME: str = "plan-gateway-service"

    ENVIRONMENT: Environment = Field(
        default=Environment.DEVELOPMENT,
        validation_alias="ENVIRONMENT",  # Read from global ENVIRONMENT var
        description="Runtime environment for the service",
    )

    # HTTP server configuration
    HOST: str = Field(default="0.0.0.0", description="HTTP server host")
    PORT: int = Field(
        default=3000,
        validation_alias=AliasChoices("PLAN_GATEWAY_PORT", "PORT"),
        description="HTTP server port",
    )

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    MAX_LOG_EXCERPT_CHARS: int = Field(
        default=1000, description="Upper bound on payload characters written to logs"
    )

    # CORS configuration
    CORS_ORIGINS: list[str] = Field(default=["*"], description="Allowed CORS origins")
    CORS_ALLOW_CREDENTIALS: bool = Field(
        default=False, description="Allow credentials in CORS requests"
    )
    CORS_ALLOW_METHODS: list[str] = Field(
        default=["GET", "POST", "OPTIONS"], description="Allowed HTTP methods for CORS"
    )
    CORS_ALLOW_HEADERS: list[str] = Field(
        default=["*"], description="Allowed headers for CORS requests"
    )

    # Upstream chat-completion API
    UPSTREAM_BASE_URL: str = Field(
        default="https://api.openai.com",
        validation_alias=AliasChoices("PLAN_GATEWAY_UPSTREAM_BASE_URL", "OPENAI_BASE_URL"),
        description="Base URL of the upstream chat-completion API (without /v1)",
    )
    UPSTREAM_API_KEY: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=AliasChoices(
            "PLAN_GATEWAY_UPSTREAM_API_KEY",  # Prefixed (Docker container)
            "OPENAI_API_KEY",  # Unprefixed
        ),
        description="Bearer token sent to the upstream API",
    )
    PROXY_PATH_PREFIX: str = Field(
        default="/openai",
        description="Public path prefix stripped before forwarding to the upstream",
    )
    USE_MOCK_UPSTREAM: bool = Field(
        default=False,
        description="Answer from an in-process mock instead of calling the upstream API",
    )
    MOCK_UPSTREAM_LATENCY_SECONDS: float = Field(
        default=0.0, ge=0.0, description="Simulated latency of the mock upstream"
    )

    # Deadline
    REQUEST_TIMEOUT_SECONDS: float = Field(
        default=120.0,
        gt=0,
        description="Wall-clock deadline for the whole client exchange",
    )
    HTTP_CLIENT_CONNECT_TIMEOUT_SECONDS: float = Field(
        default=10.0, description="Upstream connection timeout in seconds"
    )

    # Plan generation defaults
    PLAN_MODEL: str = Field(default="gpt-3.5-turbo", description="Model used for plan endpoints")
    PLAN_TEMPERATURE: float = Field(default=0.7, ge=0.0, le=2.0)
    PLAN_DEFAULT_MAX_TOKENS: int = Field(default=2000, gt=0)
    PLAN_DEFAULT_PROMPT: str = Field(default="Create a general plan")

    def upstream_url(self, upstream_path: str) -> str:
        return f"{self.UPSTREAM_BASE_URL.rstrip('/')}{upstream_path}"


# Global settings instance
settings = Settings()

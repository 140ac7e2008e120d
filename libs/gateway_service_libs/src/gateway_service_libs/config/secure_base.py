"""Base settings class shared by gateway services."""

from __future__ import annotations

from common_core.config_enums import Environment
from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class SecureServiceSettings(BaseSettings):
    """Environment-aware settings base.

    Services subclass this and add their own fields; the environment helpers
    and secret handling live here so every service answers
    ``is_development()`` the same way.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    ENVIRONMENT: Environment = Field(
        default=Environment.DEVELOPMENT,
        validation_alias="ENVIRONMENT",
        description="Runtime environment for the service",
    )

    def is_development(self) -> bool:
        return self.ENVIRONMENT == Environment.DEVELOPMENT

    @staticmethod
    def reveal(secret: SecretStr | None) -> str:
        """Plain value of a secret, empty string when unset."""
        if secret is None:
            return ""
        return secret.get_secret_value()

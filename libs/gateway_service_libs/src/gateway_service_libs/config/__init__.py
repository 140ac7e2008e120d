"""Configuration utilities for gateway services."""

from .secure_base import SecureServiceSettings

__all__ = ["SecureServiceSettings"]

"""Shared pydantic models."""

from .error_models import ErrorDetail

__all__ = ["ErrorDetail"]

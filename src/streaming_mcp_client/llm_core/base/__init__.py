"""Base classes for model endpoints."""

from .base import StreamingLLM

__all__ = ["StreamingLLM"]

from .base import SessionRegistry

__all__ = ["SessionRegistry"]

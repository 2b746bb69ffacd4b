"""Project token rotation."""

from preview_env.tokens.service import TokenRotator

__all__ = ["TokenRotator"]

from fastapi import Request

from app.db import get_db
from app.services.normalization_provider import NormalizationMode


def get_normalization_mode(request: Request) -> NormalizationMode:
    """Normalization mode resolved at startup.

    Falls back to ``unavailable`` when startup provisioning never ran, so text
    matching degrades to case-insensitive instead of calling a missing SQL
    function.
    """
    return getattr(request.app.state, "normalization_mode", NormalizationMode.unavailable)


__all__ = [
    "get_db",
    "get_normalization_mode",
]

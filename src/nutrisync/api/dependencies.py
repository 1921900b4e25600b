"""Shared FastAPI dependencies."""

from __future__ import annotations

from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import HTTPException, Request, status

if TYPE_CHECKING:
    from nutrisync.containers import AppContainer


def resolve_timezone(request: Request, timezone: str | None = None) -> str:
    """Return the requested IANA timezone or the configured default."""
    container: AppContainer = request.app.state.container
    resolved = timezone or container.settings.default_timezone
    if not _is_valid_timezone(resolved):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Unknown timezone: {resolved}",
        )
    return resolved


def _is_valid_timezone(value: str) -> bool:
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True

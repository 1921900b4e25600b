"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from nutrisync.api.dependencies import resolve_timezone

if TYPE_CHECKING:
    from nutrisync.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health() -> dict[str, str]:
    """Admin health check endpoint."""
    return {"status": "ok"}


@router.post("/users/{user_id}/recalculate", dependencies=[Depends(require_admin)])
def recalculate_scores(
    user_id: UUID,
    request: Request,
    days_back: int | None = None,
    tz: str = Depends(resolve_timezone),
) -> dict[str, object]:
    """Rescore a user's recent days and persist the results."""
    container: AppContainer = request.app.state.container
    settings = container.settings
    resolved_days = settings.recalc_days_back if days_back is None else days_back
    if resolved_days < 0 or resolved_days > settings.max_recalc_days_back:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"days_back must be between 0 and {settings.max_recalc_days_back}",
        )
    results = container.score_service.recalculate(
        user_id,
        resolved_days,
        timezone_name=tz,
    )
    return {
        "success": True,
        "message": f"Recalculated scores for {len(results)} days",
        "data": [
            {"date": result.day.isoformat(), "score": result.breakdown.total}
            for result in results
        ],
    }

"""
Admin dashboard APIs.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from auth.dependencies import TokenClaims, require_admin, get_db_session
from services.analytics_service import AnalyticsService


router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/analytics")
async def analytics(
    current_user: TokenClaims = Depends(require_admin),
    db: Session = Depends(get_db_session)
):
    """
    Case statistics, recent cases and distributions.
    Admin only.
    """
    return AnalyticsService.dashboard(db)

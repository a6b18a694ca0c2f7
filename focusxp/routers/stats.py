from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from focusxp.database import get_db
from focusxp.dependencies import get_current_user
from focusxp.models.user import User
from focusxp.schemas.stats import ProductivityDay, StatsResponse
from focusxp.services import stats_service

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("", response_model=StatsResponse)
async def get_stats(
    period: str = Query(default="weekly", pattern="^(daily|weekly|monthly)$"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await stats_service.get_stats(db, user.id, period=period)


@router.get("/productivity", response_model=list[ProductivityDay])
async def get_productivity(
    days: int = Query(default=7, ge=1, le=365),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await stats_service.get_productivity_stats(db, user.id, days=days)

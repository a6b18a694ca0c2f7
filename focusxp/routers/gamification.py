from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from focusxp.database import get_db
from focusxp.dependencies import get_current_user
from focusxp.models.user import User
from focusxp.schemas.gamification import (
    AchievementCheckResponse,
    BadgeCatalogResponse,
    GamificationStatsResponse,
    LeaderboardResponse,
    ProfileResponse,
)
from focusxp.services import gamification_service

router = APIRouter(prefix="/gamification", tags=["gamification"])


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await gamification_service.get_profile(db, user.id)


@router.get("/badges", response_model=BadgeCatalogResponse)
async def get_badges(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await gamification_service.get_badges(db, user.id)


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def get_leaderboard(
    metric: str = Query(default="xp", pattern="^(xp|focus-time|tasks|streak)$"),
    limit: int | None = Query(default=None, ge=5, le=100),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await gamification_service.get_leaderboard(db, user.id, metric=metric, limit=limit)


@router.post("/check-achievements", response_model=AchievementCheckResponse)
async def check_achievements(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await gamification_service.check_achievements(db, user.id)


@router.get("/stats", response_model=GamificationStatsResponse)
async def get_stats(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await gamification_service.get_stats(db, user.id)

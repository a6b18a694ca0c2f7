import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from focusxp.database import get_db
from focusxp.dependencies import get_current_user
from focusxp.models.user import User
from focusxp.schemas.session import (
    DistractionCreate,
    SessionComplete,
    SessionCompleteResponse,
    SessionCreate,
    SessionResponse,
    SessionStatusField,
    SessionTaskUpdate,
    SessionTypeField,
    TodaySessionsResponse,
)
from focusxp.services import session_service
from focusxp.services.session_service import ActiveSessionExists

router = APIRouter(prefix="/sessions", tags=["sessions"])


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")


def _conflict(exc: ActiveSessionExists) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail={
            "message": str(exc),
            "active_session_id": str(exc.session_id) if exc.session_id else None,
        },
    )


@router.get("", response_model=list[SessionResponse])
async def list_sessions(
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    session_status: SessionStatusField | None = Query(default=None, alias="status"),
    session_type: SessionTypeField | None = Query(default=None, alias="type"),
    start_date: datetime | None = Query(default=None),
    end_date: datetime | None = Query(default=None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await session_service.get_sessions(
        db, user.id, limit=limit, offset=offset,
        status=session_status, session_type=session_type,
        start_date=start_date, end_date=end_date,
    )


@router.get("/active", response_model=SessionResponse | None)
async def get_active_session(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await session_service.get_active_session(db, user.id)


@router.get("/today", response_model=TodaySessionsResponse)
async def get_today_sessions(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await session_service.get_today_sessions(db, user)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    session = await session_service.get_session(db, user.id, session_id)
    if session is None:
        raise _not_found()
    return session


@router.post("", response_model=SessionResponse, status_code=201)
async def create_session(
    data: SessionCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await session_service.create_session(db, user.id, data.model_dump())
    except ActiveSessionExists as exc:
        raise _conflict(exc)


async def _transition(db: AsyncSession, user: User, session_id: uuid.UUID, name: str, **payload):
    try:
        result = await session_service.transition_session(db, user.id, session_id, name, **payload)
    except ActiveSessionExists as exc:
        raise _conflict(exc)
    if result is None:
        raise _not_found()
    return result


@router.post("/{session_id}/start", response_model=SessionResponse)
async def start_session(
    session_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    session, _ = await _transition(db, user, session_id, "start")
    return session


@router.post("/{session_id}/pause", response_model=SessionResponse)
async def pause_session(
    session_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    session, _ = await _transition(db, user, session_id, "pause")
    return session


@router.post("/{session_id}/resume", response_model=SessionResponse)
async def resume_session(
    session_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    session, _ = await _transition(db, user, session_id, "resume")
    return session


@router.post("/{session_id}/complete", response_model=SessionCompleteResponse)
async def complete_session(
    session_id: uuid.UUID,
    data: SessionComplete | None = None,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    payload = data.model_dump(exclude_none=True) if data else {}
    session, update = await _transition(db, user, session_id, "complete", **payload)
    return {
        "session": session,
        "xp_gained": update.xp_gained,
        "level_up": update.level_up,
        "new_level": update.new_level,
        "new_badges": list(update.new_badges),
    }


@router.post("/{session_id}/cancel", response_model=SessionResponse)
async def cancel_session(
    session_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    session, _ = await _transition(db, user, session_id, "cancel")
    return session


@router.post("/{session_id}/distractions", response_model=SessionResponse, status_code=201)
async def log_distraction(
    session_id: uuid.UUID,
    data: DistractionCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    session = await session_service.log_distraction(db, user.id, session_id, data.model_dump())
    if session is None:
        raise _not_found()
    return session


@router.post("/{session_id}/tasks", response_model=SessionResponse)
async def record_task_time(
    session_id: uuid.UUID,
    data: SessionTaskUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    session = await session_service.record_task_time(db, user.id, session_id, data.model_dump())
    if session is None:
        raise _not_found()
    return session

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from focusxp.database import get_db
from focusxp.dependencies import get_current_user
from focusxp.models.user import User
from focusxp.schemas.task import (
    TaskCategoryField,
    TaskCreate,
    TaskResponse,
    TaskStatusField,
    TaskUpdate,
    TaskUpdateResponse,
)
from focusxp.services import task_service

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("", response_model=list[TaskResponse])
async def list_tasks(
    task_status: TaskStatusField | None = Query(default=None, alias="status"),
    category: TaskCategoryField | None = Query(default=None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await task_service.get_tasks(db, user.id, status=task_status, category=category)


@router.post("", response_model=TaskResponse, status_code=201)
async def create_task(
    data: TaskCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await task_service.create_task(db, user.id, data.model_dump())


@router.patch("/{task_id}", response_model=TaskUpdateResponse)
async def update_task(
    task_id: uuid.UUID,
    data: TaskUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await task_service.update_task(
        db, user.id, task_id, data.model_dump(exclude_unset=True)
    )
    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    task, update = result
    completion = None
    if update is not None:
        completion = {
            "xp_gained": update.xp_gained,
            "level_up": update.level_up,
            "new_level": update.new_level,
            "new_badges": list(update.new_badges),
        }
    return {"task": task, "completion": completion}


@router.delete("/{task_id}", status_code=204)
async def delete_task(
    task_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if not await task_service.delete_task(db, user.id, task_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return Response(status_code=204)

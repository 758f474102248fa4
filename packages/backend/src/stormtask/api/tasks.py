"""Task API routes.

Learn: These routes are the HTTP interface to tasks. Ownership is checked
through the task's group before anything is written; moving a task to
another group additionally requires owning the target group.
Routes just translate HTTP to service calls and handle error responses.
"""

from fastapi import APIRouter, Depends, HTTPException

from stormtask.auth.dependencies import (
    get_current_user,
    get_guard,
    get_task_service,
    require_access,
)
from stormtask.auth.guard import OwnershipGuard
from stormtask.auth.jwt import Claims
from stormtask.schemas.task import TaskCreate, TaskRead, TaskUpdate
from stormtask.services.errors import InvalidReferenceError
from stormtask.services.task_service import TaskService

router = APIRouter()


@router.post("/task", response_model=TaskRead)
async def create_task(
    body: TaskCreate,
    claims: Claims = Depends(get_current_user),
    svc: TaskService = Depends(get_task_service),
    guard: OwnershipGuard = Depends(get_guard),
):
    """Create a task in one of the caller's groups."""
    require_access(await guard.authorize_group(claims.user_id, body.group_id), "Group")
    try:
        return await svc.create_task(
            name=body.name,
            description=body.description,
            is_finished=body.is_finished,
            is_archived=body.is_archived,
            group_id=body.group_id,
        )
    except InvalidReferenceError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/task/{task_id}", response_model=TaskRead)
async def get_task(
    task_id: int,
    claims: Claims = Depends(get_current_user),
    svc: TaskService = Depends(get_task_service),
    guard: OwnershipGuard = Depends(get_guard),
):
    require_access(await guard.authorize_task(claims.user_id, task_id), "Task")
    task = await svc.get_task(task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


@router.put("/task/{task_id}", response_model=TaskRead)
async def update_task(
    task_id: int,
    body: TaskUpdate,
    claims: Claims = Depends(get_current_user),
    svc: TaskService = Depends(get_task_service),
    guard: OwnershipGuard = Depends(get_guard),
):
    """Replace every field of a task, including its group."""
    require_access(await guard.authorize_task(claims.user_id, task_id), "Task")
    require_access(await guard.authorize_group(claims.user_id, body.group_id), "Group")

    task = await svc.update_task(
        task_id=task_id,
        name=body.name,
        description=body.description,
        is_finished=body.is_finished,
        is_archived=body.is_archived,
        group_id=body.group_id,
    )
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


@router.delete("/task/{task_id}")
async def delete_task(
    task_id: int,
    claims: Claims = Depends(get_current_user),
    svc: TaskService = Depends(get_task_service),
    guard: OwnershipGuard = Depends(get_guard),
):
    require_access(await guard.authorize_task(claims.user_id, task_id), "Task")
    await svc.delete_task(task_id)
    return {"deleted": True}

"""Group API routes.

Learn: Every route that names a group id runs the OwnershipGuard first
and only then touches the service. 404 means "no such group", 401 means
"that group isn't yours".
"""

from fastapi import APIRouter, Depends, HTTPException

from stormtask.auth.dependencies import (
    get_current_user,
    get_group_service,
    get_guard,
    get_task_service,
    require_access,
)
from stormtask.auth.guard import OwnershipGuard
from stormtask.auth.jwt import Claims
from stormtask.schemas.group import GroupCreate, GroupRead, GroupRename
from stormtask.schemas.task import TaskRead
from stormtask.services.errors import ConflictError, InvalidReferenceError
from stormtask.services.group_service import GroupService
from stormtask.services.task_service import TaskService

router = APIRouter()


@router.post("/group", response_model=GroupRead)
async def create_group(
    body: GroupCreate,
    claims: Claims = Depends(get_current_user),
    svc: GroupService = Depends(get_group_service),
):
    """Create a group owned by the caller."""
    try:
        return await svc.create_group(claims.user_id, body.name)
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except InvalidReferenceError as e:
        # Token outlived its user.
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/groups", response_model=list[GroupRead])
async def list_groups(
    claims: Claims = Depends(get_current_user),
    svc: GroupService = Depends(get_group_service),
):
    """List the caller's groups."""
    return await svc.list_groups_by_owner(claims.user_id)


@router.get("/group/{group_id}", response_model=GroupRead)
async def get_group(
    group_id: int,
    claims: Claims = Depends(get_current_user),
    svc: GroupService = Depends(get_group_service),
    guard: OwnershipGuard = Depends(get_guard),
):
    require_access(await guard.authorize_group(claims.user_id, group_id), "Group")
    group = await svc.get_group(group_id)
    if not group:
        raise HTTPException(status_code=404, detail="Group not found")
    return group


@router.put("/group/{group_id}", response_model=GroupRead)
async def rename_group(
    group_id: int,
    body: GroupRename,
    claims: Claims = Depends(get_current_user),
    svc: GroupService = Depends(get_group_service),
    guard: OwnershipGuard = Depends(get_guard),
):
    """Rename a group. The new name must be free among the caller's groups."""
    require_access(await guard.authorize_group(claims.user_id, group_id), "Group")
    try:
        group = await svc.rename_group(group_id, body.name)
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    if not group:
        raise HTTPException(status_code=404, detail="Group not found")
    return group


@router.delete("/group/{group_id}")
async def delete_group(
    group_id: int,
    claims: Claims = Depends(get_current_user),
    svc: GroupService = Depends(get_group_service),
    guard: OwnershipGuard = Depends(get_guard),
):
    """Delete a group and every task in it."""
    require_access(await guard.authorize_group(claims.user_id, group_id), "Group")
    await svc.delete_group(group_id)
    return {"deleted": True}


@router.get("/group/{group_id}/tasks", response_model=list[TaskRead])
async def list_group_tasks(
    group_id: int,
    claims: Claims = Depends(get_current_user),
    tasks: TaskService = Depends(get_task_service),
    guard: OwnershipGuard = Depends(get_guard),
):
    """List the tasks of one of the caller's groups."""
    require_access(await guard.authorize_group(claims.user_id, group_id), "Group")
    return await tasks.list_tasks_by_group(group_id)

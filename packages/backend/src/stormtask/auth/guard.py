"""Ownership guard — may this user touch that group or task?

Learn: Authorization here is pure ownership. A task belongs to a group,
a group belongs to a user, and only that user may read or change either.
The guard walks the chain and answers with one of three outcomes:

    OK         → go ahead
    NOT_FOUND  → the resource doesn't exist (404)
    FORBIDDEN  → it exists but belongs to someone else (401)

The check always runs before the mutation, as its own step, so the
handler can tell "missing" from "not yours".
"""

import enum

from stormtask.services.group_service import GroupService
from stormtask.services.task_service import TaskService


class Access(enum.Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"


class OwnershipGuard:
    """Checks the Task → Group → User ownership chain."""

    def __init__(self, groups: GroupService, tasks: TaskService):
        self.groups = groups
        self.tasks = tasks

    async def authorize_group(self, user_id: int, group_id: int) -> Access:
        group = await self.groups.get_group(group_id)
        if not group:
            return Access.NOT_FOUND
        if group.owner_id != user_id:
            return Access.FORBIDDEN
        return Access.OK

    async def authorize_task(self, user_id: int, task_id: int) -> Access:
        task = await self.tasks.get_task(task_id)
        if not task:
            return Access.NOT_FOUND
        return await self.authorize_group(user_id, task.group_id)

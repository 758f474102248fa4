"""Task service — tasks inside a user's groups.

Learn: A task always belongs to an existing group. The group check runs
before the insert so the common mistake surfaces as a clean
InvalidReferenceError; the foreign key on tasks.group_id still backs it
up if a concurrent request deletes the group in between.

Ownership is not checked here — the OwnershipGuard does that before any
of these methods is called.
"""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from stormtask.db.models import Group, Task
from stormtask.db.records import RecordMapper
from stormtask.services.errors import InvalidReferenceError


class TaskService:
    """Business logic for task CRUD."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.records = RecordMapper(db, Task)
        self.groups = RecordMapper(db, Group)

    # ─── Create ──────────────────────────────────────────

    async def create_task(
        self,
        name: str,
        description: str = "",
        is_finished: bool = False,
        is_archived: bool = False,
        group_id: Optional[int] = None,
    ) -> Task:
        if group_id is None or not await self.groups.get(group_id):
            raise InvalidReferenceError(f"Group {group_id} does not exist")

        task = await self.records.insert(
            name=name,
            description=description,
            is_finished=is_finished,
            is_archived=is_archived,
            group_id=group_id,
        )
        await self.db.commit()
        return task

    # ─── Read ────────────────────────────────────────────

    async def get_task(self, task_id: int) -> Optional[Task]:
        return await self.records.get(task_id)

    async def list_tasks_by_group(self, group_id: int) -> list[Task]:
        return await self.records.find_all(group_id=group_id)

    # ─── Update ──────────────────────────────────────────

    async def update_task(
        self,
        task_id: int,
        name: str,
        description: str,
        is_finished: bool,
        is_archived: bool,
        group_id: int,
    ) -> Optional[Task]:
        """Replace every field of a task, possibly moving it to another group.

        Returns None if either the task or the target group doesn't exist.
        """
        task = await self.get_task(task_id)
        if not task:
            return None
        if group_id != task.group_id and not await self.groups.get(group_id):
            return None

        await self.records.update(
            task,
            name=name,
            description=description,
            is_finished=is_finished,
            is_archived=is_archived,
            group_id=group_id,
        )
        await self.db.commit()
        return task

    # ─── Delete ──────────────────────────────────────────

    async def delete_task(self, task_id: int) -> bool:
        deleted = await self.records.delete(task_id)
        await self.db.commit()
        return deleted > 0

    async def delete_tasks_by_group(self, group_id: int) -> int:
        deleted = await self.remove_tasks_by_group(group_id)
        await self.db.commit()
        return deleted

    async def remove_tasks_by_group(self, group_id: int) -> int:
        """Cascade step: delete a group's tasks without committing.

        Used by GroupService so the whole cascade lands in one transaction.
        """
        return await self.records.delete_where(group_id=group_id)

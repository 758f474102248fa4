"""Group service — business logic for a user's task groups.

Learn: Group names are unique per owner, not globally: alice and bob can
both have a "Home" group, but alice can't have two. The check runs in
Python first for a clear error, and the uq_groups_owner_name constraint
settles any race between two concurrent creates.

Deleting a group walks the cascade by hand: its tasks go first, then the
group row. Nothing relies on ON DELETE CASCADE in the database.
"""

from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from stormtask.db.models import Group, User
from stormtask.db.records import RecordMapper
from stormtask.services.errors import ConflictError, InvalidReferenceError
from stormtask.services.task_service import TaskService

logger = structlog.get_logger()


class GroupService:
    """Business logic for group management."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.records = RecordMapper(db, Group)
        self.users = RecordMapper(db, User)
        self.tasks = TaskService(db)

    # ─── Create ──────────────────────────────────────────

    async def create_group(self, owner_id: int, name: str) -> Group:
        if not await self.users.get(owner_id):
            raise InvalidReferenceError(f"User {owner_id} does not exist")
        if await self.get_group_by_owner_and_name(owner_id, name):
            raise ConflictError(f"Group {name!r} already exists for user {owner_id}")

        group = await self.records.insert(owner_id=owner_id, name=name)
        await self.db.commit()
        return group

    # ─── Read ────────────────────────────────────────────

    async def get_group(self, group_id: int) -> Optional[Group]:
        return await self.records.get(group_id)

    async def get_group_by_owner_and_name(
        self, owner_id: int, name: str
    ) -> Optional[Group]:
        return await self.records.find_one(owner_id=owner_id, name=name)

    async def list_groups_by_owner(self, owner_id: int) -> list[Group]:
        return await self.records.find_all(owner_id=owner_id)

    # ─── Update ──────────────────────────────────────────

    async def rename_group(self, group_id: int, name: str) -> Optional[Group]:
        """Rename a group. Returns None if it doesn't exist."""
        group = await self.get_group(group_id)
        if not group:
            return None
        if group.name == name:
            return group

        clash = await self.get_group_by_owner_and_name(group.owner_id, name)
        if clash:
            raise ConflictError(f"Group {name!r} already exists for user {group.owner_id}")

        await self.records.update(group, name=name)
        await self.db.commit()
        return group

    # ─── Delete ──────────────────────────────────────────

    async def delete_group(self, group_id: int) -> bool:
        deleted = await self.remove_group(group_id)
        await self.db.commit()
        return deleted

    async def delete_groups_by_owner(self, owner_id: int) -> int:
        deleted = await self.remove_groups_by_owner(owner_id)
        await self.db.commit()
        return deleted

    async def remove_group(self, group_id: int) -> bool:
        """Cascade step: tasks first, then the group. Does not commit."""
        tasks_deleted = await self.tasks.remove_tasks_by_group(group_id)
        deleted = await self.records.delete(group_id) > 0
        logger.info(
            "group.removed",
            group_id=group_id,
            found=deleted,
            tasks_deleted=tasks_deleted,
        )
        return deleted

    async def remove_groups_by_owner(self, owner_id: int) -> int:
        """Cascade step: remove every group of a user one by one.

        Learn: Each group goes through remove_group rather than one bulk
        DELETE, so every group's tasks are cleared before the group row.
        """
        groups = await self.list_groups_by_owner(owner_id)
        for group in groups:
            await self.remove_group(group.id)
        return len(groups)

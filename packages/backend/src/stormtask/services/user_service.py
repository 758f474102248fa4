"""User service — accounts and credential checks.

Learn: Passwords never touch the database in clear text. They are hashed
with bcrypt at the configured work factor on create and on every update,
and compared with bcrypt's constant-time check on login.

verify_credentials() returns None both for an unknown email and for a
wrong password, so the caller can't tell which one it was,
not even from how long the call took.
"""

from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from stormtask.auth.password import (
    DEFAULT_ROUNDS,
    hash_password_async,
    verify_against_dummy_async,
    verify_password_async,
)
from stormtask.db.models import User
from stormtask.db.records import RecordMapper
from stormtask.services.errors import ConflictError
from stormtask.services.group_service import GroupService

logger = structlog.get_logger()


class UserService:
    """Business logic for user accounts."""

    def __init__(self, db: AsyncSession, bcrypt_cost: int = DEFAULT_ROUNDS):
        self.db = db
        self.bcrypt_cost = bcrypt_cost
        self.records = RecordMapper(db, User)
        self.groups = GroupService(db)

    # ─── Create ──────────────────────────────────────────

    async def create_user(
        self,
        email: str,
        name: str,
        password: str,
        is_admin: bool = False,
    ) -> User:
        if await self.get_user_by_email(email):
            raise ConflictError("Email already registered")

        password_hash = await hash_password_async(password, self.bcrypt_cost)
        user = await self.records.insert(
            email=email,
            name=name,
            password_hash=password_hash,
            is_admin=is_admin,
        )
        await self.db.commit()
        logger.info("user.created", user_id=user.id, is_admin=is_admin)
        return user

    # ─── Read ────────────────────────────────────────────

    async def get_user_by_email(self, email: str) -> Optional[User]:
        return await self.records.find_one(email=email)

    async def get_user_by_id(self, user_id: int) -> Optional[User]:
        return await self.records.get(user_id)

    async def verify_credentials(self, email: str, password: str) -> Optional[User]:
        """Return the user if email and password match, else None."""
        user = await self.get_user_by_email(email)
        if not user:
            # Same bcrypt cost as a real mismatch, so timing stays flat
            await verify_against_dummy_async(password, self.bcrypt_cost)
            return None
        if not await verify_password_async(password, user.password_hash):
            return None
        return user

    # ─── Update ──────────────────────────────────────────

    async def update_user(
        self,
        user_id: int,
        email: str,
        name: str,
        password: str,
    ) -> Optional[User]:
        """Replace a user's email, name and password.

        Returns None if the user doesn't exist. Raises ConflictError if
        the new email belongs to someone else.
        """
        user = await self.get_user_by_id(user_id)
        if not user:
            return None
        if email != user.email and await self.get_user_by_email(email):
            raise ConflictError("Email already registered")

        password_hash = await hash_password_async(password, self.bcrypt_cost)
        await self.records.update(
            user,
            email=email,
            name=name,
            password_hash=password_hash,
        )
        await self.db.commit()
        logger.info("user.updated", user_id=user_id)
        return user

    # ─── Delete ──────────────────────────────────────────

    async def delete_user(self, user_id: int) -> bool:
        """Delete a user together with all their groups and tasks.

        Learn: Groups are removed first (each one clearing its tasks), then
        the user row — all inside one transaction. If any step fails the
        error propagates and nothing is committed.
        """
        groups_deleted = await self.groups.remove_groups_by_owner(user_id)
        deleted = await self.records.delete(user_id) > 0
        await self.db.commit()
        logger.info(
            "user.deleted",
            user_id=user_id,
            found=deleted,
            groups_deleted=groups_deleted,
        )
        return deleted

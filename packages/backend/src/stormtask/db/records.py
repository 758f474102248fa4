"""Generic record mapper — one place for the query/flush boilerplate.

Learn: Users, groups and tasks are all "integer id + a few columns" rows.
Rather than hand-writing the same select/insert/update/delete blocks per
entity, each service wraps its model in a RecordMapper and only keeps
the logic that is actually specific to that entity (uniqueness checks,
cascades, password hashing).

The mapper also owns error translation: IntegrityError is split into
ConflictError (unique violation) and InvalidReferenceError (foreign key
violation); any other SQLAlchemy failure, other integrity errors such as
NOT NULL included, becomes StorageError. Every failure rolls the session
back before it propagates, so the pending cascade is never half-committed.
Nothing is retried or swallowed.
"""

from contextlib import asynccontextmanager
from typing import Any, Generic, Optional, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from stormtask.db.models import Base
from stormtask.services.errors import (
    ConflictError,
    InvalidReferenceError,
    StorageError,
)

ModelT = TypeVar("ModelT", bound=Base)


def is_foreign_key_violation(exc: IntegrityError) -> bool:
    """True if the driver reported a foreign key failure.

    SQLite, PostgreSQL and MySQL all mention "foreign key" in the message.
    """
    return "foreign key" in str(exc.orig).lower()


def is_unique_violation(exc: IntegrityError) -> bool:
    """True if the driver reported a unique constraint failure.

    SQLite says "UNIQUE constraint failed", PostgreSQL "duplicate key value
    violates unique constraint", MySQL "Duplicate entry".
    """
    message = str(exc.orig).lower()
    return "unique" in message or "duplicate" in message


class RecordMapper(Generic[ModelT]):
    """CRUD over a single mapped table, keyed by its integer `id`."""

    def __init__(self, db: AsyncSession, model: type[ModelT]):
        self.db = db
        self.model = model

    @asynccontextmanager
    async def translate_errors(self):
        try:
            yield
        except IntegrityError as e:
            await self.db.rollback()
            if is_foreign_key_violation(e):
                raise InvalidReferenceError(str(e.orig)) from e
            if is_unique_violation(e):
                raise ConflictError(str(e.orig)) from e
            # NOT NULL, CHECK: a bug in the caller, not a data conflict
            raise StorageError(str(e.orig)) from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StorageError(str(e)) from e

    def _clauses(self, filters: dict[str, Any]) -> list:
        return [getattr(self.model, column) == value for column, value in filters.items()]

    # ─── Read ────────────────────────────────────────────

    async def get(self, record_id: int) -> Optional[ModelT]:
        return await self.find_one(id=record_id)

    async def find_one(self, **filters: Any) -> Optional[ModelT]:
        async with self.translate_errors():
            result = await self.db.execute(
                select(self.model).where(*self._clauses(filters))
            )
            return result.scalars().first()

    async def find_all(self, **filters: Any) -> list[ModelT]:
        """All matching rows, oldest first."""
        async with self.translate_errors():
            result = await self.db.execute(
                select(self.model)
                .where(*self._clauses(filters))
                .order_by(self.model.id)
            )
            return list(result.scalars().all())

    # ─── Write ───────────────────────────────────────────

    async def insert(self, **values: Any) -> ModelT:
        record = self.model(**values)
        async with self.translate_errors():
            self.db.add(record)
            await self.db.flush()  # get the auto-generated id
        return record

    async def update(self, record: ModelT, **values: Any) -> ModelT:
        for column, value in values.items():
            setattr(record, column, value)
        async with self.translate_errors():
            await self.db.flush()
        return record

    async def delete(self, record_id: int) -> int:
        return await self.delete_where(id=record_id)

    async def delete_where(self, **filters: Any) -> int:
        """Delete matching rows, returning how many went away."""
        async with self.translate_errors():
            result = await self.db.execute(
                delete(self.model).where(*self._clauses(filters))
            )
            return result.rowcount

"""SQLAlchemy ORM models — single source of truth for the database schema.

Learn: Declarative ORM mapping with SQLAlchemy 2.0 style (Mapped[] + mapped_column).
Each class = one table. Constraints live here so the database itself
enforces them, whatever the service layer checks beforehand.

Key concepts:
- Integer autoincrement primary keys
- Composite unique constraint: a user can't own two groups with the same name
- Foreign keys without ON DELETE CASCADE — cascades are walked explicitly by
  the services (tasks before group, groups before user)
"""

from sqlalchemy import (
    Boolean,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    false,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class User(Base):
    """An account. Owns groups, which own tasks."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    is_admin: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r}>"


class Group(Base):
    """A named bucket of tasks belonging to exactly one user."""

    __tablename__ = "groups"
    __table_args__ = (
        UniqueConstraint("owner_id", "name", name="uq_groups_owner_name"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    owner_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True
    )

    def __repr__(self) -> str:
        return f"<Group id={self.id} owner_id={self.owner_id} name={self.name!r}>"


class Task(Base):
    """A unit of work inside a group.

    Learn: is_finished and is_archived are independent flags — a task can
    be finished without being archived, and archived while still open.
    """

    __tablename__ = "tasks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    is_finished: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    is_archived: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    group_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("groups.id"), nullable=False, index=True
    )

    def __repr__(self) -> str:
        return f"<Task id={self.id} group_id={self.group_id} name={self.name!r}>"

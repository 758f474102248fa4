"""Pydantic schemas for tasks.

Learn: TaskCreate and TaskUpdate mirror each other; an update is a full
replacement, including group_id (moving the task to another group the
caller owns).
"""

from pydantic import BaseModel, Field


class TaskCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(default="")
    is_finished: bool = False
    is_archived: bool = False
    group_id: int


class TaskUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(default="")
    is_finished: bool = False
    is_archived: bool = False
    group_id: int


class TaskRead(BaseModel):
    id: int
    name: str
    description: str
    is_finished: bool
    is_archived: bool
    group_id: int

    model_config = {"from_attributes": True}

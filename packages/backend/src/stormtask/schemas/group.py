"""Pydantic schemas for groups."""

from pydantic import BaseModel, Field


class GroupCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class GroupRename(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class GroupRead(BaseModel):
    id: int
    name: str
    owner_id: int

    model_config = {"from_attributes": True}

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ..core.constants import MAX_TITLE_LENGTH
from ..core.enums import RequestCategory, RequestStatus


class CreateRequestBody(BaseModel):
    category: RequestCategory
    title: str = Field(min_length=1, max_length=MAX_TITLE_LENGTH)
    description: str = Field(min_length=1)


class UpdateRequestBody(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=MAX_TITLE_LENGTH)
    description: Optional[str] = Field(default=None, min_length=1)
    status: Optional[RequestStatus] = None
    assigned_to: Optional[int] = None
    version: Optional[int] = None

    @field_validator("assigned_to", mode="before")
    @classmethod
    def blank_means_unassigned(cls, v):
        return None if v == "" else v


class CommentBody(BaseModel):
    comment: str = Field(min_length=1)

"""Library Store Backend - Genre Schemas."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from library_api.schemas.common import CamelModel, PageQuery, SortOrder


class GenreWrite(CamelModel):
    """Body for both create and rename: only the name is writable."""

    name: str = Field(min_length=1, max_length=100)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("Genre name is required")
        return stripped


class GenreQuery(PageQuery):
    order_by_name: Optional[SortOrder] = None


class GenreItem(CamelModel):
    id: uuid.UUID
    name: str


class GenreDetail(CamelModel):
    id: uuid.UUID
    name: str
    created_at: datetime
    updated_at: datetime

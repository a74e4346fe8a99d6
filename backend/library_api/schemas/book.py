"""
Library Store Backend - Book Schemas
=====================================

What:  Request bodies, typed list query and response shapes for the book catalog.

Update rules:
    Only description, price and stockQuantity may be changed after creation.
    `BookUpdate` forbids any other key, and accepts stockQuantity in either
    camelCase or snake_case.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from library_api.models.book import BookCondition
from library_api.schemas.common import CamelModel, PageQuery, SortOrder


class BookCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    writer: str = Field(min_length=1, max_length=255)
    publisher: str = Field(min_length=1, max_length=255)
    publication_year: int = Field(ge=0)
    description: Optional[str] = None
    cover_image: Optional[str] = None
    price: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    stock_quantity: int = Field(ge=0)
    condition: BookCondition = BookCondition.NEW
    genre_id: uuid.UUID

    @field_validator("title", "writer", "publisher")
    @classmethod
    def strip_text(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("must not be blank")
        return stripped


class BookUpdate(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )

    description: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    stock_quantity: Optional[int] = Field(default=None, ge=0)


class BookQuery(PageQuery):
    """Recognised filters and sort keys for book listings."""

    order_by_title: Optional[SortOrder] = None
    order_by_publish_date: Optional[SortOrder] = None
    condition: Optional[BookCondition] = None


class BookCreated(CamelModel):
    id: uuid.UUID
    title: str
    created_at: datetime


class BookDetail(CamelModel):
    id: uuid.UUID
    title: str
    writer: str
    publisher: str
    publication_year: int
    description: Optional[str] = None
    cover_image: Optional[str] = None
    price: float
    stock_quantity: int
    condition: BookCondition
    # Genre name, not the nested object.
    genre: str


class BookUpdated(CamelModel):
    id: uuid.UUID
    title: str
    updated_at: datetime
    price: float
    stock_quantity: int

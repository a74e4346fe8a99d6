"""
Library Store Backend - Shared Pydantic Schemas
================================================

What:  Response envelopes, pagination metadata, the error body, the typed
       page query, and the camelCase base model used by resource schemas.
Who:   Every route module and service.

JSON conventions:
    Resource bodies use camelCase keys (stockQuantity, createdAt, ...), the
    shape the web client consumes. `CamelModel` generates those aliases
    while Python code keeps snake_case attribute names. Envelope fields
    (success, message, data, meta) and pagination keys stay snake_case.
"""

import enum
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base for resource schemas: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class SortOrder(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"


# ══════════════════════════════════════════════════════════════════════════
# Query Parameter Models
# ══════════════════════════════════════════════════════════════════════════


class PageQuery(BaseModel):
    """
    Offset pagination shared by every list endpoint.

    page:  1-based page number
    limit: items per page (1-100)
    """

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)
    search: Optional[str] = Field(default=None, max_length=255)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


# ══════════════════════════════════════════════════════════════════════════
# Response Envelopes
# ══════════════════════════════════════════════════════════════════════════


class PaginationMeta(BaseModel):
    page: int
    limit: int
    total: int
    next_page: Optional[int] = None
    prev_page: Optional[int] = None

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "PaginationMeta":
        return cls(
            page=page,
            limit=limit,
            total=total,
            next_page=page + 1 if total > page * limit else None,
            prev_page=page - 1 if page > 1 else None,
        )


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class DataResponse(BaseModel, Generic[T]):
    success: bool = True
    message: str
    data: T


class ListResponse(BaseModel, Generic[T]):
    success: bool = True
    message: str
    data: List[T]
    meta: PaginationMeta


class ErrorResponse(BaseModel):
    """
    Error body returned for every failure.

    Example:
        {
            "success": false,
            "message": "Invalid checkout request",
            "errors": ["books[1].quantity must be a positive integer"]
        }
    """

    success: bool = False
    message: str = Field(description="Human-readable error description")
    errors: Optional[List[str]] = Field(default=None, description="Per-item problems")


class HealthResponse(BaseModel):
    success: bool = Field(description="True when the database is reachable")
    message: str
    version: str
    database: str = Field(description="Database connectivity: connected, disconnected")
    date: str = Field(description="Server date, e.g. 'Mon Oct 19 2026'")
    uptime_seconds: float

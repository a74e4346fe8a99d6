"""
Library Store Backend - Genre Model
====================================

What:  ORM model for the `genres` table.

Genres are soft-deleted (deleted_at set) rather than removed so historical
books keep a valid reference. Names stay unique across deleted rows too.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import DateTime, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from library_api.database import Base, utcnow

if TYPE_CHECKING:
    from library_api.models.book import Book


class Genre(Base):
    __tablename__ = "genres"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    # NULL while active; set once by soft delete.
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    books: Mapped[List["Book"]] = relationship(back_populates="genre")

    def __repr__(self) -> str:
        return f"<Genre(id={self.id}, name='{self.name}')>"

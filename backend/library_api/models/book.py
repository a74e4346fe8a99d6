"""
Library Store Backend - Book Model
===================================

What:  ORM model for the `books` table plus the BookCondition enum.
Who:   BookService (catalog CRUD) and TransactionService (stock checks and
       decrements at checkout).

Column notes:
    - price:           NUMERIC(12, 2), read back as Decimal; totals are summed in Decimal
    - stock_quantity:  only checkout (decrement) and catalog update (set) change it
    - deleted_at:      soft-delete marker; every read path filters on IS NULL

Check constraints keep price and stock non-negative at the database level,
independently of the guarded decrement in the transaction service.
"""

import enum
import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from library_api.database import Base, utcnow

if TYPE_CHECKING:
    from library_api.models.genre import Genre
    from library_api.models.transaction import TransactionBook


class BookCondition(str, enum.Enum):
    NEW = "NEW"
    LIKE_NEW = "LIKE_NEW"
    USED = "USED"


class Book(Base):
    """
    A catalog entry with price and on-hand stock.

    Query Patterns:
        - Catalog listing: WHERE deleted_at IS NULL ORDER BY created_at DESC
        - Checkout batch fetch: WHERE id IN (...) AND deleted_at IS NULL FOR UPDATE
        - Genre listing: WHERE genre_id = :id AND deleted_at IS NULL
    """

    __tablename__ = "books"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    writer: Mapped[str] = mapped_column(String(255), nullable=False)
    publisher: Mapped[str] = mapped_column(String(255), nullable=False)
    publication_year: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    cover_image: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    stock_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    condition: Mapped[BookCondition] = mapped_column(
        Enum(BookCondition, name="book_condition"),
        nullable=False,
        default=BookCondition.NEW,
    )

    genre_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("genres.id"),
        nullable=False,
    )

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
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    genre: Mapped["Genre"] = relationship(back_populates="books")
    transaction_lines: Mapped[List["TransactionBook"]] = relationship(back_populates="book")

    __table_args__ = (
        CheckConstraint("price >= 0", name="price_non_negative"),
        CheckConstraint("stock_quantity >= 0", name="stock_non_negative"),
        Index("idx_books_genre_id", "genre_id"),
        Index("idx_books_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return (
            f"<Book(id={self.id}, title='{self.title}', "
            f"stock={self.stock_quantity}, price={self.price})>"
        )

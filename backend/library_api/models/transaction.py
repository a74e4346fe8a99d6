"""
Library Store Backend - Transaction Models
===========================================

What:  ORM models for `transactions` (checkout header) and `transaction_books`
       (line items).
Who:   TransactionService.

Lifecycle:
    1. Created at checkout, together with its line items, in one flush
    2. Never updated or cancelled afterwards

Line items do not snapshot the book price. `total_price` on the header holds
the price at purchase time; detail views re-join to the current Book.price.
Line items use a surrogate key because one checkout may contain the same
book on several lines.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, List

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from library_api.database import Base, utcnow

if TYPE_CHECKING:
    from library_api.models.book import Book
    from library_api.models.user import User


class Transaction(Base):
    __tablename__ = "transactions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id"),
        nullable=False,
    )
    # Sum of price * quantity over the lines, at purchase time.
    total_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    # Sum of line quantities.
    total_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    user: Mapped["User"] = relationship(back_populates="transactions")
    books: Mapped[List["TransactionBook"]] = relationship(
        back_populates="transaction",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("idx_transactions_user_id", "user_id"),
        Index("idx_transactions_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return (
            f"<Transaction(id={self.id}, total_amount={self.total_amount}, "
            f"total_price={self.total_price})>"
        )


class TransactionBook(Base):
    __tablename__ = "transaction_books"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    transaction_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("transactions.id", ondelete="CASCADE"),
        nullable=False,
    )
    book_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("books.id"),
        nullable=False,
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    transaction: Mapped["Transaction"] = relationship(back_populates="books")
    book: Mapped["Book"] = relationship(back_populates="transaction_lines")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="quantity_positive"),
        Index("idx_transaction_books_transaction_id", "transaction_id"),
        Index("idx_transaction_books_book_id", "book_id"),
    )

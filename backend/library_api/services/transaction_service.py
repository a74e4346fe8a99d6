"""
Library Store Backend - Transaction Service (Checkout Orchestrator)
====================================================================

What:  Creates purchase transactions atomically and answers the transaction
       list, detail and statistics queries.
Who:   Called by the /api/transactions route handlers.

Checkout Flow (POST /api/transactions):
    ┌───────────┐   ┌────────────┐   ┌──────────────┐   ┌────────────┐   ┌────────┐
    │ Validate  │──▶│ Load user  │──▶│ Lock books   │──▶│ Check and  │──▶│ Insert │
    │ items     │   │            │   │ FOR UPDATE   │   │ total      │   │ + dec. │
    └───────────┘   └────────────┘   └──────────────┘   └────────────┘   └────────┘

    All storage work happens in the caller's session and is committed here.
    Any failure rolls the session back: no line item, no transaction row and
    no stock decrement survives a failed checkout.

Stock safety:
    1. Per-line check against the locked snapshot (clear error message)
    2. Guarded decrement:
           UPDATE books SET stock_quantity = stock_quantity - :q
           WHERE id = :id AND stock_quantity >= :q
       A row count other than 1 means another writer got there first, or
       duplicate lines of the same book add up to more than the stock.
"""

import logging
import uuid
from decimal import Decimal
from typing import Dict, List, Sequence, Tuple

from sqlalchemy import String, asc, cast, desc, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from library_api.database import utcnow
from library_api.exceptions import (
    ConflictError,
    DatabaseError,
    LibraryError,
    NotFoundError,
    ValidationError,
)
from library_api.models import Book, Genre, Transaction, TransactionBook, User
from library_api.schemas.auth import UserSummary
from library_api.schemas.common import SortOrder
from library_api.schemas.transaction import (
    BookOrderItem,
    CheckoutResponse,
    TransactionBookRef,
    TransactionDetail,
    TransactionDetailBookRef,
    TransactionDetailLine,
    TransactionItem,
    TransactionLine,
    TransactionQuery,
    TransactionStatistics,
)

logger = logging.getLogger(__name__)

OrderLine = Tuple[uuid.UUID, int]


def _insufficient_stock(book: Book, available: int, requested: int) -> ConflictError:
    return ConflictError(
        f"Insufficient stock for book: {book.title}. "
        f"Available: {available}, Requested: {requested}",
        context={"book_id": str(book.id)},
    )


def _direction(order: SortOrder, column):
    return asc(column) if order == SortOrder.ASC else desc(column)


class TransactionService:
    """
    Business logic for purchase transactions.

    Responsibilities:
        - validate_items():      shape checks, before any storage access
        - create_transaction():  atomic checkout
        - list_transactions():   paginated, searchable, sortable listing
        - get_transaction():     detail with user and line items
        - get_statistics():      totals and best/worst selling genre
    """

    # ── Checkout ──────────────────────────────────────────────────────────

    @staticmethod
    def validate_items(items: Sequence[BookOrderItem]) -> List[OrderLine]:
        """
        Check every requested line and parse its book id.

        Returns:
            (book_id, quantity) pairs in request order, duplicates kept

        Raises:
            ValidationError: empty list, or one entry per offending item in `errors`
        """
        if not items:
            raise ValidationError(
                "books must be a non-empty array",
                errors=["books: at least one item is required"],
                field="books",
            )

        errors: List[str] = []
        lines: List[OrderLine] = []
        for index, item in enumerate(items):
            raw_id = (item.book_id or "").strip()
            quantity = item.quantity
            book_id = None

            if not raw_id:
                errors.append(f"books[{index}].bookId is required")
            else:
                try:
                    book_id = uuid.UUID(raw_id)
                except ValueError:
                    errors.append(f"books[{index}].bookId is not a valid id")

            # bool is an int subclass; reject it explicitly.
            if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
                errors.append(f"books[{index}].quantity must be a positive integer")
                continue

            if book_id is not None:
                lines.append((book_id, quantity))

        if errors:
            raise ValidationError(
                f"Invalid checkout request: {errors[0]}",
                errors=errors,
                field="books",
            )
        return lines

    async def _lock_books(
        self, db: AsyncSession, book_ids: Sequence[uuid.UUID]
    ) -> Dict[uuid.UUID, Book]:
        """
        Fetch live books in one query, row-locked until the session ends.

        populate_existing: books already in the identity map get fresh stock.
        """
        result = await db.execute(
            select(Book)
            .where(Book.id.in_(book_ids), Book.deleted_at.is_(None))
            .order_by(Book.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return {book.id: book for book in result.scalars().all()}

    async def create_transaction(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        items: Sequence[BookOrderItem],
    ) -> CheckoutResponse:
        """
        Purchase the requested books for `user_id` as one atomic unit.

        Prices are read at checkout time; the transaction total is the sum of
        current price times quantity over every line.

        Raises:
            ValidationError: malformed items (nothing touched)
            NotFoundError:   unknown user, or unknown/removed book ids
            ConflictError:   a line exceeds the available stock
            DatabaseError:   unexpected storage failure
        """
        if not user_id:
            raise ValidationError("User id is required", field="user_id")
        lines = self.validate_items(items)

        try:
            user = await db.get(User, user_id)
            if user is None:
                raise NotFoundError("User not found", resource="user", resource_id=str(user_id))

            # Distinct ids, request order preserved.
            requested_ids = list(dict.fromkeys(book_id for book_id, _ in lines))
            books = await self._lock_books(db, requested_ids)

            missing = [str(book_id) for book_id in requested_ids if book_id not in books]
            if missing:
                raise NotFoundError(
                    f"Book(s) not found: {', '.join(missing)}",
                    resource="book",
                    context={"missing": missing},
                )

            total_price = Decimal("0")
            total_quantity = 0
            for book_id, quantity in lines:
                book = books[book_id]
                if book.stock_quantity < quantity:
                    raise _insufficient_stock(book, book.stock_quantity, quantity)
                total_price += book.price * quantity
                total_quantity += quantity

            transaction = Transaction(
                user_id=user.id,
                total_price=total_price,
                total_amount=total_quantity,
                books=[TransactionBook(book_id=book_id, quantity=quantity) for book_id, quantity in lines],
            )
            db.add(transaction)
            await db.flush()

            now = utcnow()
            for book_id, quantity in lines:
                result = await db.execute(
                    update(Book)
                    .where(Book.id == book_id, Book.stock_quantity >= quantity)
                    .values(stock_quantity=Book.stock_quantity - quantity, updated_at=now)
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount != 1:
                    available = await db.scalar(
                        select(Book.stock_quantity).where(Book.id == book_id)
                    )
                    raise _insufficient_stock(books[book_id], available or 0, quantity)

            await db.commit()

        except LibraryError:
            await db.rollback()
            raise
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Checkout failed for user %s: %s", user_id, e, exc_info=True)
            raise DatabaseError(
                message="Could not complete the transaction. Please try again.",
                context={"user_id": str(user_id), "original_error": type(e).__name__},
            )

        logger.info(
            "Transaction %s created: user=%s quantity=%d total=%s",
            transaction.id, user_id, total_quantity, total_price,
        )
        return CheckoutResponse(
            transaction_id=transaction.id,
            total_quantity=total_quantity,
            total_price=float(total_price),
        )

    # ── Queries ───────────────────────────────────────────────────────────

    async def list_transactions(
        self, db: AsyncSession, query: TransactionQuery
    ) -> Tuple[List[TransactionItem], int]:
        """
        One page of transactions plus the total matching count.

        Search compares against the id with dashes removed, so the same
        query text matches on PostgreSQL (dashed text form) and SQLite
        (hex storage).
        """
        stmt = select(Transaction).options(
            selectinload(Transaction.user),
            selectinload(Transaction.books).selectinload(TransactionBook.book),
        )
        count_stmt = select(func.count(Transaction.id))

        if query.search:
            needle = query.search.replace("-", "").strip()
            condition = func.replace(cast(Transaction.id, String), "-", "", type_=String).icontains(
                needle, autoescape=True
            )
            stmt = stmt.where(condition)
            count_stmt = count_stmt.where(condition)

        ordering = []
        if query.order_by_id:
            ordering.append(_direction(query.order_by_id, Transaction.id))
        if query.order_by_amount:
            ordering.append(_direction(query.order_by_amount, Transaction.total_amount))
        if query.order_by_price:
            ordering.append(_direction(query.order_by_price, Transaction.total_price))
        if not ordering:
            ordering = [desc(Transaction.created_at)]
        if not query.order_by_id:
            ordering.append(desc(Transaction.id))

        stmt = stmt.order_by(*ordering).offset(query.offset).limit(query.limit)

        try:
            total = (await db.execute(count_stmt)).scalar_one()
            transactions = (await db.execute(stmt)).scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing transactions: %s", e, exc_info=True)
            raise DatabaseError(message="Could not retrieve transactions. Please try again.")

        items = [
            TransactionItem(
                id=t.id,
                total_price=float(t.total_price),
                total_amount=t.total_amount,
                created_at=t.created_at,
                user=UserSummary.model_validate(t.user),
                books=[
                    TransactionLine(
                        quantity=line.quantity,
                        book=TransactionBookRef(
                            id=line.book.id,
                            title=line.book.title,
                            price=float(line.book.price),
                        ),
                    )
                    for line in t.books
                ],
            )
            for t in transactions
        ]
        return items, total

    async def get_transaction(
        self, db: AsyncSession, transaction_id: uuid.UUID
    ) -> TransactionDetail:
        """
        Raises:
            NotFoundError: no transaction with this id (→ 404)
        """
        try:
            result = await db.execute(
                select(Transaction)
                .where(Transaction.id == transaction_id)
                .options(
                    selectinload(Transaction.user),
                    selectinload(Transaction.books).selectinload(TransactionBook.book),
                )
            )
            transaction = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching transaction %s: %s", transaction_id, e)
            raise DatabaseError(
                message="Could not retrieve the transaction. Please try again.",
                context={"transaction_id": str(transaction_id)},
            )

        if transaction is None:
            raise NotFoundError(
                "Transaction not found",
                resource="transaction",
                resource_id=str(transaction_id),
            )

        return TransactionDetail(
            id=transaction.id,
            total_price=float(transaction.total_price),
            total_amount=transaction.total_amount,
            created_at=transaction.created_at,
            user=UserSummary.model_validate(transaction.user),
            books=[
                TransactionDetailLine(
                    quantity=line.quantity,
                    book=TransactionDetailBookRef(
                        id=line.book.id,
                        title=line.book.title,
                        writer=line.book.writer,
                        price=float(line.book.price),
                    ),
                )
                for line in transaction.books
            ],
        )

    async def get_statistics(self, db: AsyncSession) -> TransactionStatistics:
        """
        Totals plus the genres with the most and fewest sold line items.

        Genre ranking counts line items over books that are not soft-deleted;
        ties go to the alphabetically first genre name.
        """
        try:
            totals = (
                await db.execute(
                    select(func.count(Transaction.id), func.avg(Transaction.total_price))
                )
            ).one()
            genre_sales = (
                await db.execute(
                    select(Genre.name, func.count(TransactionBook.id).label("sales"))
                    .join(Book, Book.genre_id == Genre.id)
                    .join(TransactionBook, TransactionBook.book_id == Book.id)
                    .where(Book.deleted_at.is_(None))
                    .group_by(Genre.name)
                )
            ).all()
        except SQLAlchemyError as e:
            logger.error("Database error computing statistics: %s", e, exc_info=True)
            raise DatabaseError(message="Could not compute transaction statistics.")

        count, average = totals
        most = min(genre_sales, key=lambda row: (-row.sales, row.name), default=None)
        fewest = min(genre_sales, key=lambda row: (row.sales, row.name), default=None)

        return TransactionStatistics(
            total_transactions=count or 0,
            average_transaction_amount=round(float(average or 0), 2),
            most_book_sales_genre=most.name if most else None,
            fewest_book_sales_genre=fewest.name if fewest else None,
        )


# Module-level singleton
transaction_service = TransactionService()

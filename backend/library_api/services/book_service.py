"""
Library Store Backend - Book Service
=====================================

What:  Book catalog: create, list (all or per genre), detail, partial
       update of description/price/stock, soft delete.
Who:   Called by the /api/books route handlers.

Stock ownership:
    Besides checkout, `update_book` is the only writer of stock_quantity
    (an administrative set, not a relative change).
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy import asc, desc, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from library_api.database import utcnow
from library_api.exceptions import ConflictError, DatabaseError, NotFoundError, ValidationError
from library_api.models import Book, Genre
from library_api.schemas.book import (
    BookCreate,
    BookCreated,
    BookDetail,
    BookQuery,
    BookUpdate,
    BookUpdated,
)
from library_api.schemas.common import SortOrder

logger = logging.getLogger(__name__)


def _to_detail(book: Book) -> BookDetail:
    return BookDetail(
        id=book.id,
        title=book.title,
        writer=book.writer,
        publisher=book.publisher,
        publication_year=book.publication_year,
        description=book.description,
        cover_image=book.cover_image,
        price=float(book.price),
        stock_quantity=book.stock_quantity,
        condition=book.condition,
        genre=book.genre.name,
    )


class BookService:
    async def _live_genre(self, db: AsyncSession, genre_id: uuid.UUID) -> Genre:
        genre = await db.scalar(
            select(Genre).where(Genre.id == genre_id, Genre.deleted_at.is_(None))
        )
        if genre is None:
            raise NotFoundError("Genre not found", resource="genre", resource_id=str(genre_id))
        return genre

    async def _live_book(self, db: AsyncSession, book_id: uuid.UUID, message: str) -> Book:
        book = await db.scalar(
            select(Book)
            .where(Book.id == book_id, Book.deleted_at.is_(None))
            .options(selectinload(Book.genre))
        )
        if book is None:
            raise NotFoundError(message, resource="book", resource_id=str(book_id))
        return book

    async def create_book(self, db: AsyncSession, payload: BookCreate) -> BookCreated:
        """
        Raises:
            ValidationError: publication year in the future
            NotFoundError:   genre unknown or removed
            ConflictError:   a book with this title exists
        """
        current_year = datetime.now(timezone.utc).year
        if payload.publication_year > current_year:
            raise ValidationError(
                f"Publication year cannot be later than {current_year}",
                field="publicationYear",
            )

        genre = await self._live_genre(db, payload.genre_id)
        duplicate = ConflictError(f'Book with title "{payload.title}" already exists')

        try:
            if await db.scalar(select(Book.id).where(Book.title == payload.title)) is not None:
                raise duplicate
            book = Book(
                title=payload.title,
                writer=payload.writer,
                publisher=payload.publisher,
                publication_year=payload.publication_year,
                description=payload.description,
                cover_image=payload.cover_image,
                price=payload.price,
                stock_quantity=payload.stock_quantity,
                condition=payload.condition,
                genre_id=genre.id,
            )
            db.add(book)
            await db.flush()
        except IntegrityError:
            await db.rollback()
            raise duplicate
        except SQLAlchemyError as e:
            logger.error("Database error creating book: %s", e, exc_info=True)
            raise DatabaseError(message="Could not create the book. Please try again.")

        logger.info("Book created: %s (%s)", book.title, book.id)
        return BookCreated.model_validate(book)

    async def list_books(
        self,
        db: AsyncSession,
        query: BookQuery,
        genre_id: Optional[uuid.UUID] = None,
    ) -> Tuple[List[BookDetail], int]:
        """
        One page of live books plus the total count.

        Raises:
            NotFoundError: `genre_id` given but unknown or removed
        """
        conditions = [Book.deleted_at.is_(None)]
        if genre_id is not None:
            await self._live_genre(db, genre_id)
            conditions.append(Book.genre_id == genre_id)
        if query.search:
            conditions.append(Book.title.icontains(query.search, autoescape=True))
        if query.condition:
            conditions.append(Book.condition == query.condition)

        ordering = []
        if query.order_by_title:
            ordering.append(
                asc(Book.title) if query.order_by_title == SortOrder.ASC else desc(Book.title)
            )
        if query.order_by_publish_date:
            ordering.append(
                asc(Book.publication_year)
                if query.order_by_publish_date == SortOrder.ASC
                else desc(Book.publication_year)
            )
        if not ordering:
            ordering = [desc(Book.created_at)]
        ordering.append(desc(Book.id))

        try:
            total = await db.scalar(select(func.count(Book.id)).where(*conditions))
            books = (
                await db.execute(
                    select(Book)
                    .where(*conditions)
                    .options(selectinload(Book.genre))
                    .order_by(*ordering)
                    .offset(query.offset)
                    .limit(query.limit)
                )
            ).scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing books: %s", e, exc_info=True)
            raise DatabaseError(message="Could not retrieve books. Please try again.")

        return [_to_detail(b) for b in books], total or 0

    async def get_book(self, db: AsyncSession, book_id: uuid.UUID) -> BookDetail:
        return _to_detail(await self._live_book(db, book_id, "Book not found"))

    async def update_book(
        self, db: AsyncSession, book_id: uuid.UUID, payload: BookUpdate
    ) -> BookUpdated:
        """
        Apply the non-null fields of `payload`.

        Raises:
            ValidationError: nothing to update
            NotFoundError:   unknown or removed book
        """
        changes = payload.model_dump(exclude_none=True)
        if not changes:
            raise ValidationError(
                "At least one of description, price or stockQuantity must be provided"
            )

        book = await self._live_book(db, book_id, "Book not found")
        for field, value in changes.items():
            setattr(book, field, value)
        book.updated_at = utcnow()

        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating book %s: %s", book_id, e, exc_info=True)
            raise DatabaseError(message="Could not update the book. Please try again.")

        logger.info("Book %s updated: %s", book_id, sorted(changes))
        return BookUpdated(
            id=book.id,
            title=book.title,
            updated_at=book.updated_at,
            price=float(book.price),
            stock_quantity=book.stock_quantity,
        )

    async def delete_book(self, db: AsyncSession, book_id: uuid.UUID) -> None:
        book = await self._live_book(db, book_id, "Book not found or already removed")
        book.deleted_at = utcnow()
        await db.flush()
        logger.info("Book soft-deleted: %s", book_id)


book_service = BookService()

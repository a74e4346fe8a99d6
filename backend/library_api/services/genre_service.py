"""
Library Store Backend - Genre Service
======================================

What:  Genre CRUD with soft delete, plus the idempotent default-genre seed.
Who:   /api/genre route handlers and the `library_api.seed` command.

Soft delete:
    Removing a genre sets `deleted_at`; removed genres disappear from every
    read. A genre still referenced by live books cannot be removed.
"""

import logging
import uuid
from typing import Iterable, List, Tuple

from sqlalchemy import asc, desc, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from library_api.database import utcnow
from library_api.exceptions import ConflictError, DatabaseError, NotFoundError, ValidationError
from library_api.models import Book, Genre
from library_api.schemas.common import SortOrder
from library_api.schemas.genre import GenreDetail, GenreItem, GenreQuery, GenreWrite

logger = logging.getLogger(__name__)


def _duplicate(name: str) -> ConflictError:
    return ConflictError(f'Genre "{name}" already exists')


class GenreService:
    async def _get_live(self, db: AsyncSession, genre_id: uuid.UUID) -> Genre:
        genre = await db.scalar(
            select(Genre).where(Genre.id == genre_id, Genre.deleted_at.is_(None))
        )
        if genre is None:
            raise NotFoundError("Genre not found", resource="genre", resource_id=str(genre_id))
        return genre

    async def _name_taken(self, db: AsyncSession, name: str, exclude_id=None) -> bool:
        stmt = select(Genre.id).where(func.lower(Genre.name) == name.lower())
        if exclude_id is not None:
            stmt = stmt.where(Genre.id != exclude_id)
        return await db.scalar(stmt) is not None

    async def create_genre(self, db: AsyncSession, payload: GenreWrite) -> GenreItem:
        """
        Raises:
            ConflictError: a genre with this name exists (removed ones included,
                           the name column is unique)
        """
        try:
            if await self._name_taken(db, payload.name):
                raise _duplicate(payload.name)
            genre = Genre(name=payload.name)
            db.add(genre)
            await db.flush()
        except IntegrityError:
            await db.rollback()
            raise _duplicate(payload.name)
        except SQLAlchemyError as e:
            logger.error("Database error creating genre: %s", e, exc_info=True)
            raise DatabaseError(message="Could not create the genre. Please try again.")

        logger.info("Genre created: %s (%s)", genre.name, genre.id)
        return GenreItem.model_validate(genre)

    async def list_genres(
        self, db: AsyncSession, query: GenreQuery
    ) -> Tuple[List[GenreItem], int]:
        conditions = [Genre.deleted_at.is_(None)]
        if query.search:
            conditions.append(Genre.name.icontains(query.search, autoescape=True))

        if query.order_by_name:
            ordering = [asc(Genre.name) if query.order_by_name == SortOrder.ASC else desc(Genre.name)]
        else:
            ordering = [desc(Genre.created_at)]
        ordering.append(desc(Genre.id))

        try:
            total = await db.scalar(select(func.count(Genre.id)).where(*conditions))
            genres = (
                await db.execute(
                    select(Genre)
                    .where(*conditions)
                    .order_by(*ordering)
                    .offset(query.offset)
                    .limit(query.limit)
                )
            ).scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing genres: %s", e, exc_info=True)
            raise DatabaseError(message="Could not retrieve genres. Please try again.")

        return [GenreItem.model_validate(g) for g in genres], total or 0

    async def get_genre(self, db: AsyncSession, genre_id: uuid.UUID) -> GenreDetail:
        return GenreDetail.model_validate(await self._get_live(db, genre_id))

    async def update_genre(
        self, db: AsyncSession, genre_id: uuid.UUID, payload: GenreWrite
    ) -> GenreDetail:
        genre = await self._get_live(db, genre_id)
        try:
            if await self._name_taken(db, payload.name, exclude_id=genre.id):
                raise _duplicate(payload.name)
            genre.name = payload.name
            genre.updated_at = utcnow()
            await db.flush()
        except IntegrityError:
            await db.rollback()
            raise _duplicate(payload.name)
        except SQLAlchemyError as e:
            logger.error("Database error updating genre %s: %s", genre_id, e, exc_info=True)
            raise DatabaseError(message="Could not update the genre. Please try again.")

        return GenreDetail.model_validate(genre)

    async def delete_genre(self, db: AsyncSession, genre_id: uuid.UUID) -> None:
        """
        Soft-delete a genre.

        Raises:
            NotFoundError:   unknown or already removed
            ValidationError: live books still reference the genre
        """
        genre = await db.scalar(
            select(Genre).where(Genre.id == genre_id, Genre.deleted_at.is_(None))
        )
        if genre is None:
            raise NotFoundError(
                "Genre not found or already removed",
                resource="genre",
                resource_id=str(genre_id),
            )

        in_use = await db.scalar(
            select(func.count(Book.id)).where(Book.genre_id == genre.id, Book.deleted_at.is_(None))
        )
        if in_use:
            raise ValidationError(
                "Cannot delete genre while it is still associated with some books.",
                context={"genre_id": str(genre_id), "books": in_use},
            )

        genre.deleted_at = utcnow()
        await db.flush()
        logger.info("Genre soft-deleted: %s", genre_id)

    async def seed_genres(self, db: AsyncSession, names: Iterable[str]) -> int:
        """
        Insert every name not already present (removed genres are revived).

        Returns:
            Number of genres inserted or revived
        """
        changed = 0
        for name in names:
            genre = await db.scalar(select(Genre).where(Genre.name == name))
            if genre is None:
                db.add(Genre(name=name))
                changed += 1
            elif genre.deleted_at is not None:
                genre.deleted_at = None
                genre.updated_at = utcnow()
                changed += 1
        await db.commit()
        return changed


genre_service = GenreService()

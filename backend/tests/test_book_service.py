"""
Library Store Backend - Book Service Tests
===========================================

What we test:
    ✅ Create: genre must exist, titles are unique, no future publication year
    ✅ List: soft-deleted books hidden, search/condition filters, sorting, per-genre
    ✅ Search matches % and _ literally; ties on the sort key page stably
    ✅ Update: only the provided fields change; empty updates rejected
    ✅ Delete: soft delete, second delete is NOT_FOUND
"""

from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest
from pydantic import ValidationError as SchemaValidationError
from sqlalchemy import select

from library_api.exceptions import ConflictError, NotFoundError, ValidationError
from library_api.models import Book, BookCondition
from library_api.schemas.book import BookCreate, BookQuery, BookUpdate
from library_api.schemas.common import SortOrder
from library_api.services.book_service import book_service


def new_book(genre_id, **overrides) -> BookCreate:
    data = dict(
        title="Foundation",
        writer="Isaac Asimov",
        publisher="Gnome Press",
        publication_year=1951,
        price=Decimal("12.99"),
        stock_quantity=7,
        genre_id=genre_id,
    )
    data.update(overrides)
    return BookCreate(**data)


class TestCreateBook:
    @pytest.mark.asyncio
    async def test_create_book(self, db_session, seed):
        created = await book_service.create_book(db_session, new_book(seed.fiction_id))

        assert created.title == "Foundation"
        stored = await db_session.get(Book, created.id)
        assert stored.condition == BookCondition.NEW
        assert stored.stock_quantity == 7

    @pytest.mark.asyncio
    async def test_unknown_genre(self, db_session, seed):
        with pytest.raises(NotFoundError):
            await book_service.create_book(db_session, new_book(uuid4()))

    @pytest.mark.asyncio
    async def test_duplicate_title(self, db_session, seed):
        with pytest.raises(ConflictError):
            await book_service.create_book(db_session, new_book(seed.fiction_id, title="Dune"))

    @pytest.mark.asyncio
    async def test_future_publication_year(self, db_session, seed):
        next_year = datetime.now(timezone.utc).year + 1
        with pytest.raises(ValidationError):
            await book_service.create_book(
                db_session, new_book(seed.fiction_id, publication_year=next_year)
            )

    def test_camel_case_payload_accepted(self, seed):
        payload = BookCreate.model_validate(
            {
                "title": "Solaris",
                "writer": "Stanislaw Lem",
                "publisher": "MON",
                "publicationYear": 1961,
                "price": 9.5,
                "stockQuantity": 3,
                "condition": "LIKE_NEW",
                "genreId": str(seed.fiction_id),
            }
        )
        assert payload.stock_quantity == 3
        assert payload.condition == BookCondition.LIKE_NEW


class TestListBooks:
    @pytest.mark.asyncio
    async def test_list_hides_deleted(self, db_session, seed):
        await book_service.delete_book(db_session, seed.cosmos_id)

        books, total = await book_service.list_books(db_session, BookQuery())

        assert total == 1
        assert [b.title for b in books] == ["Dune"]
        assert books[0].genre == "Fiction"
        assert books[0].price == pytest.approx(10.50)

    @pytest.mark.asyncio
    async def test_search_and_condition_filters(self, db_session, seed):
        books, total = await book_service.list_books(db_session, BookQuery(search="dUn"))
        assert total == 1 and books[0].title == "Dune"

        books, total = await book_service.list_books(
            db_session, BookQuery(condition=BookCondition.USED)
        )
        assert total == 1 and books[0].title == "Cosmos"

    @pytest.mark.asyncio
    async def test_sort_by_title_and_publish_date(self, db_session, seed):
        books, _ = await book_service.list_books(
            db_session, BookQuery(order_by_title=SortOrder.ASC)
        )
        assert [b.title for b in books] == ["Cosmos", "Dune"]

        books, _ = await book_service.list_books(
            db_session, BookQuery(order_by_publish_date=SortOrder.DESC)
        )
        assert [b.publication_year for b in books] == [1980, 1965]

    @pytest.mark.asyncio
    async def test_search_wildcards_match_literally(self, db_session, seed):
        for needle in ("%", "_"):
            books, total = await book_service.list_books(db_session, BookQuery(search=needle))
            assert total == 0 and books == []

        await book_service.create_book(db_session, new_book(seed.fiction_id, title="100% Cotton_Candy"))

        books, total = await book_service.list_books(db_session, BookQuery(search="0% c"))
        assert total == 1 and books[0].title == "100% Cotton_Candy"
        books, total = await book_service.list_books(db_session, BookQuery(search="_"))
        assert total == 1

    @pytest.mark.asyncio
    async def test_equal_sort_keys_page_without_overlap(self, db_session, seed):
        for title in ("Alpha", "Beta", "Gamma"):
            await book_service.create_book(
                db_session, new_book(seed.fiction_id, title=title, publication_year=2001)
            )
        query = dict(limit=2, order_by_publish_date=SortOrder.DESC)

        first, total = await book_service.list_books(db_session, BookQuery(page=1, **query))
        second, _ = await book_service.list_books(db_session, BookQuery(page=2, **query))

        assert total == 5
        titles = [b.title for b in first + second]
        assert len(set(titles)) == 4
        assert set(titles) == {"Alpha", "Beta", "Gamma", "Cosmos"}

    @pytest.mark.asyncio
    async def test_list_by_genre(self, db_session, seed):
        books, total = await book_service.list_books(
            db_session, BookQuery(), genre_id=seed.science_id
        )
        assert total == 1
        assert books[0].title == "Cosmos"

        with pytest.raises(NotFoundError):
            await book_service.list_books(db_session, BookQuery(), genre_id=uuid4())


class TestUpdateAndDelete:
    @pytest.mark.asyncio
    async def test_partial_update(self, db_session, seed):
        updated = await book_service.update_book(
            db_session, seed.dune_id, BookUpdate.model_validate({"stockQuantity": 12})
        )

        assert updated.stock_quantity == 12
        assert updated.price == pytest.approx(10.50)

    def test_snake_case_stock_key_accepted(self):
        assert BookUpdate.model_validate({"stock_quantity": 4}).stock_quantity == 4

    def test_other_keys_rejected(self):
        with pytest.raises(SchemaValidationError):
            BookUpdate.model_validate({"title": "Renamed"})

    @pytest.mark.asyncio
    async def test_empty_update_rejected(self, db_session, seed):
        with pytest.raises(ValidationError):
            await book_service.update_book(db_session, seed.dune_id, BookUpdate())

    @pytest.mark.asyncio
    async def test_get_unknown_book(self, db_session, seed):
        with pytest.raises(NotFoundError) as exc_info:
            await book_service.get_book(db_session, uuid4())
        assert exc_info.value.message == "Book not found"

    @pytest.mark.asyncio
    async def test_soft_delete(self, db_session, seed):
        await book_service.delete_book(db_session, seed.dune_id)

        deleted_at = await db_session.scalar(
            select(Book.deleted_at).where(Book.id == seed.dune_id)
        )
        assert deleted_at is not None

        with pytest.raises(NotFoundError) as exc_info:
            await book_service.delete_book(db_session, seed.dune_id)
        assert exc_info.value.message == "Book not found or already removed"

        with pytest.raises(NotFoundError):
            await book_service.get_book(db_session, seed.dune_id)

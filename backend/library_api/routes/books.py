"""
Library Store Backend - Book Route Handlers
============================================

What:  Catalog endpoints under /api/books. All require a bearer token.

Query parameters (list endpoints):
    page, limit, search (title substring), orderByTitle, orderByPublishDate
    (asc|desc) and condition (NEW|LIKE_NEW|USED). Unknown values are
    rejected with 400.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from library_api.config import settings
from library_api.database import get_db_session
from library_api.models.book import BookCondition
from library_api.schemas.book import (
    BookCreate,
    BookCreated,
    BookDetail,
    BookQuery,
    BookUpdate,
    BookUpdated,
)
from library_api.schemas.common import (
    DataResponse,
    ErrorResponse,
    ListResponse,
    MessageResponse,
    PaginationMeta,
    SortOrder,
)
from library_api.security import get_current_user
from library_api.services.book_service import book_service

router = APIRouter(
    prefix="/api/books",
    tags=["Books"],
    dependencies=[Depends(get_current_user)],
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
)


def book_query(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size),
    search: Optional[str] = Query(default=None, max_length=255, description="Title substring"),
    order_by_title: Optional[SortOrder] = Query(default=None, alias="orderByTitle"),
    order_by_publish_date: Optional[SortOrder] = Query(default=None, alias="orderByPublishDate"),
    condition: Optional[BookCondition] = Query(default=None),
) -> BookQuery:
    return BookQuery(
        page=page,
        limit=limit,
        search=search,
        order_by_title=order_by_title,
        order_by_publish_date=order_by_publish_date,
        condition=condition,
    )


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=DataResponse[BookCreated],
    responses={
        400: {"description": "Invalid book data", "model": ErrorResponse},
        404: {"description": "Genre not found", "model": ErrorResponse},
        409: {"description": "Duplicate title", "model": ErrorResponse},
    },
    summary="Add a book to the catalog",
)
async def create_book(
    payload: BookCreate,
    db: AsyncSession = Depends(get_db_session),
) -> DataResponse[BookCreated]:
    book = await book_service.create_book(db, payload)
    return DataResponse(message="Book added successfully", data=book)


@router.get("", response_model=ListResponse[BookDetail], summary="List books")
async def list_books(
    query: BookQuery = Depends(book_query),
    db: AsyncSession = Depends(get_db_session),
) -> ListResponse[BookDetail]:
    books, total = await book_service.list_books(db, query)
    return ListResponse(
        message="Get all book successfully",
        data=books,
        meta=PaginationMeta.build(query.page, query.limit, total),
    )


@router.get(
    "/genre/{genre_id}",
    response_model=ListResponse[BookDetail],
    responses={404: {"description": "Genre not found", "model": ErrorResponse}},
    summary="List books of one genre",
)
async def list_books_by_genre(
    genre_id: UUID,
    query: BookQuery = Depends(book_query),
    db: AsyncSession = Depends(get_db_session),
) -> ListResponse[BookDetail]:
    books, total = await book_service.list_books(db, query, genre_id=genre_id)
    return ListResponse(
        message="Get all book by genre successfully",
        data=books,
        meta=PaginationMeta.build(query.page, query.limit, total),
    )


@router.get(
    "/{book_id}",
    response_model=DataResponse[BookDetail],
    responses={404: {"description": "Book not found", "model": ErrorResponse}},
    summary="Get one book",
)
async def get_book(
    book_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> DataResponse[BookDetail]:
    book = await book_service.get_book(db, book_id)
    return DataResponse(message="Get book detail successfully", data=book)


@router.patch(
    "/{book_id}",
    response_model=DataResponse[BookUpdated],
    responses={
        400: {"description": "Empty body or non-updatable field", "model": ErrorResponse},
        404: {"description": "Book not found", "model": ErrorResponse},
    },
    summary="Update description, price or stock",
)
async def update_book(
    book_id: UUID,
    payload: BookUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> DataResponse[BookUpdated]:
    book = await book_service.update_book(db, book_id, payload)
    return DataResponse(message="Book updated successfully", data=book)


@router.delete(
    "/{book_id}",
    response_model=MessageResponse,
    responses={404: {"description": "Book not found or already removed", "model": ErrorResponse}},
    summary="Remove a book (soft delete)",
)
async def delete_book(
    book_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await book_service.delete_book(db, book_id)
    return MessageResponse(message="Book removed successfully")

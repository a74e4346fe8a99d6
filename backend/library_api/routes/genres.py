"""
Library Store Backend - Genre Route Handlers
=============================================

What:  Genre endpoints under /api/genre. All require a bearer token.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from library_api.config import settings
from library_api.database import get_db_session
from library_api.schemas.common import (
    DataResponse,
    ErrorResponse,
    ListResponse,
    MessageResponse,
    PaginationMeta,
    SortOrder,
)
from library_api.schemas.genre import GenreDetail, GenreItem, GenreQuery, GenreWrite
from library_api.security import get_current_user
from library_api.services.genre_service import genre_service

router = APIRouter(
    prefix="/api/genre",
    tags=["Genres"],
    dependencies=[Depends(get_current_user)],
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
)


def genre_query(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size),
    search: Optional[str] = Query(default=None, max_length=255),
    order_by_name: Optional[SortOrder] = Query(default=None, alias="orderByName"),
) -> GenreQuery:
    return GenreQuery(page=page, limit=limit, search=search, order_by_name=order_by_name)


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=DataResponse[GenreItem],
    responses={409: {"description": "Duplicate genre name", "model": ErrorResponse}},
    summary="Create a genre",
)
async def create_genre(
    payload: GenreWrite,
    db: AsyncSession = Depends(get_db_session),
) -> DataResponse[GenreItem]:
    genre = await genre_service.create_genre(db, payload)
    return DataResponse(message="Genre created successfully", data=genre)


@router.get("", response_model=ListResponse[GenreItem], summary="List genres")
async def list_genres(
    query: GenreQuery = Depends(genre_query),
    db: AsyncSession = Depends(get_db_session),
) -> ListResponse[GenreItem]:
    genres, total = await genre_service.list_genres(db, query)
    return ListResponse(
        message="Get all genre successfully",
        data=genres,
        meta=PaginationMeta.build(query.page, query.limit, total),
    )


@router.get(
    "/{genre_id}",
    response_model=DataResponse[GenreDetail],
    responses={404: {"description": "Genre not found", "model": ErrorResponse}},
    summary="Get one genre",
)
async def get_genre(
    genre_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> DataResponse[GenreDetail]:
    genre = await genre_service.get_genre(db, genre_id)
    return DataResponse(message="Get genre detail successfully", data=genre)


@router.patch(
    "/{genre_id}",
    response_model=DataResponse[GenreDetail],
    responses={
        404: {"description": "Genre not found", "model": ErrorResponse},
        409: {"description": "Duplicate genre name", "model": ErrorResponse},
    },
    summary="Rename a genre",
)
async def update_genre(
    genre_id: UUID,
    payload: GenreWrite,
    db: AsyncSession = Depends(get_db_session),
) -> DataResponse[GenreDetail]:
    genre = await genre_service.update_genre(db, genre_id, payload)
    return DataResponse(message="Genre updated successfully", data=genre)


@router.delete(
    "/{genre_id}",
    response_model=MessageResponse,
    responses={
        400: {"description": "Genre still has books", "model": ErrorResponse},
        404: {"description": "Genre not found or already removed", "model": ErrorResponse},
    },
    summary="Remove a genre (soft delete)",
)
async def delete_genre(
    genre_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await genre_service.delete_genre(db, genre_id)
    return MessageResponse(message="Genre removed successfully")

"""
Library Store Backend - Transaction Route Handlers
===================================================

What:  Checkout (POST /api/transactions) and transaction queries.

The purchasing user always comes from the bearer token, never from the
request body.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from library_api.config import settings
from library_api.database import get_db_session
from library_api.models.user import User
from library_api.schemas.common import (
    DataResponse,
    ErrorResponse,
    ListResponse,
    PaginationMeta,
    SortOrder,
)
from library_api.schemas.transaction import (
    CheckoutRequest,
    CheckoutResponse,
    TransactionDetail,
    TransactionItem,
    TransactionQuery,
    TransactionStatistics,
)
from library_api.security import get_current_user
from library_api.services.transaction_service import transaction_service

router = APIRouter(
    prefix="/api/transactions",
    tags=["Transactions"],
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
)


def transaction_query(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size),
    search: Optional[str] = Query(default=None, max_length=255, description="Transaction id substring"),
    order_by_id: Optional[SortOrder] = Query(default=None, alias="orderById"),
    order_by_amount: Optional[SortOrder] = Query(default=None, alias="orderByAmount"),
    order_by_price: Optional[SortOrder] = Query(default=None, alias="orderByPrice"),
) -> TransactionQuery:
    return TransactionQuery(
        page=page,
        limit=limit,
        search=search,
        order_by_id=order_by_id,
        order_by_amount=order_by_amount,
        order_by_price=order_by_price,
    )


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=CheckoutResponse,
    responses={
        400: {"description": "Malformed items", "model": ErrorResponse},
        404: {"description": "Unknown user or book", "model": ErrorResponse},
        409: {"description": "Insufficient stock", "model": ErrorResponse},
    },
    summary="Purchase books",
    description=(
        "Creates a transaction for the authenticated user. Either every line is "
        "purchased and stock decremented, or nothing changes."
    ),
)
async def create_transaction(
    payload: CheckoutRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> CheckoutResponse:
    return await transaction_service.create_transaction(db, current_user.id, payload.books)


@router.get("", response_model=ListResponse[TransactionItem], summary="List transactions")
async def list_transactions(
    query: TransactionQuery = Depends(transaction_query),
    _: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ListResponse[TransactionItem]:
    items, total = await transaction_service.list_transactions(db, query)
    return ListResponse(
        message="Get all transaction successfully",
        data=items,
        meta=PaginationMeta.build(query.page, query.limit, total),
    )


@router.get(
    "/statistics",
    response_model=TransactionStatistics,
    summary="Transaction totals and genre sales ranking",
)
async def get_statistics(
    _: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> TransactionStatistics:
    return await transaction_service.get_statistics(db)


@router.get(
    "/{transaction_id}",
    response_model=DataResponse[TransactionDetail],
    responses={404: {"description": "Transaction not found", "model": ErrorResponse}},
    summary="Get one transaction",
)
async def get_transaction(
    transaction_id: UUID,
    _: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> DataResponse[TransactionDetail]:
    detail = await transaction_service.get_transaction(db, transaction_id)
    return DataResponse(message="Get transaction detail successfully", data=detail)

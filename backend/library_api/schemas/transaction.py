"""
Library Store Backend - Transaction Schemas
============================================

What:  Checkout request/response, the typed list query, list/detail shapes
       and the statistics object.

Wire format:
    Checkout request:  {"books": [{"bookId": "<uuid>", "quantity": 2}, ...]}
    Checkout response: {"transaction_id": "...", "total_quantity": 2, "total_price": 31.5}
    The checkout response and the statistics object keep snake_case keys;
    list/detail rows use camelCase like the other resources.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, StrictInt

from library_api.schemas.auth import UserSummary
from library_api.schemas.common import CamelModel, PageQuery, SortOrder


# ══════════════════════════════════════════════════════════════════════════
# Checkout
# ══════════════════════════════════════════════════════════════════════════


class BookOrderItem(CamelModel):
    """One requested line. Content rules (non-empty id, quantity > 0) live in the service."""

    book_id: str = Field(max_length=64)
    quantity: StrictInt


class CheckoutRequest(BaseModel):
    books: List[BookOrderItem]


class CheckoutResponse(BaseModel):
    transaction_id: uuid.UUID
    total_quantity: int
    total_price: float


# ══════════════════════════════════════════════════════════════════════════
# Query
# ══════════════════════════════════════════════════════════════════════════


class TransactionQuery(PageQuery):
    """
    Recognised options for GET /api/transactions.

    search:           case-insensitive substring of the transaction id
    order_by_*:       applied in the order id, amount, price;
                      created_at DESC when none is given
    """

    order_by_id: Optional[SortOrder] = None
    order_by_amount: Optional[SortOrder] = None
    order_by_price: Optional[SortOrder] = None


# ══════════════════════════════════════════════════════════════════════════
# Read models
# ══════════════════════════════════════════════════════════════════════════


class TransactionBookRef(CamelModel):
    id: uuid.UUID
    title: str
    price: float


class TransactionLine(CamelModel):
    quantity: int
    book: TransactionBookRef


class TransactionItem(CamelModel):
    id: uuid.UUID
    total_price: float
    total_amount: int
    created_at: datetime
    user: UserSummary
    books: List[TransactionLine]


class TransactionDetailBookRef(TransactionBookRef):
    writer: str


class TransactionDetailLine(CamelModel):
    quantity: int
    book: TransactionDetailBookRef


class TransactionDetail(CamelModel):
    id: uuid.UUID
    total_price: float
    total_amount: int
    created_at: datetime
    user: UserSummary
    books: List[TransactionDetailLine]


class TransactionStatistics(BaseModel):
    total_transactions: int
    average_transaction_amount: float
    fewest_book_sales_genre: Optional[str] = None
    most_book_sales_genre: Optional[str] = None

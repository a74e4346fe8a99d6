"""
ORM models. Importing this package registers every table on Base.metadata
(used by Alembic autogenerate and by Database.create_all()).
"""

from library_api.models.user import User
from library_api.models.genre import Genre
from library_api.models.book import Book, BookCondition
from library_api.models.transaction import Transaction, TransactionBook

__all__ = [
    "User",
    "Genre",
    "Book",
    "BookCondition",
    "Transaction",
    "TransactionBook",
]

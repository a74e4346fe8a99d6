"""Create users, genres, books, transactions and transaction_books

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Initial schema for the library store.
How:   Portable column types (sa.Uuid, Numeric(12, 2), timezone-aware
       DateTime) so the same revision runs on PostgreSQL and SQLite.
       Constraint names follow Base.metadata's naming convention.

Rollback: downgrade() drops every table and the book_condition enum (destructive).
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

book_condition = sa.Enum("NEW", "LIKE_NEW", "USED", name="book_condition")


def _timestamps():
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password", sa.String(255), nullable=False),
        sa.Column("username", sa.String(100), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "genres",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_genres"),
        sa.UniqueConstraint("name", name="uq_genres_name"),
    )

    op.create_table(
        "books",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("writer", sa.String(255), nullable=False),
        sa.Column("publisher", sa.String(255), nullable=False),
        sa.Column("publication_year", sa.Integer(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("cover_image", sa.Text(), nullable=True),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("stock_quantity", sa.Integer(), nullable=False),
        sa.Column("condition", book_condition, nullable=False),
        sa.Column("genre_id", sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_books"),
        sa.UniqueConstraint("title", name="uq_books_title"),
        sa.ForeignKeyConstraint(["genre_id"], ["genres.id"], name="fk_books_genre_id_genres"),
        sa.CheckConstraint("price >= 0", name="ck_books_price_non_negative"),
        sa.CheckConstraint("stock_quantity >= 0", name="ck_books_stock_non_negative"),
    )
    op.create_index("idx_books_genre_id", "books", ["genre_id"])
    op.create_index("idx_books_created_at", "books", [sa.text("created_at DESC")])

    op.create_table(
        "transactions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("total_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("total_amount", sa.Integer(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_transactions"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_transactions_user_id_users"),
    )
    op.create_index("idx_transactions_user_id", "transactions", ["user_id"])
    op.create_index("idx_transactions_created_at", "transactions", [sa.text("created_at DESC")])

    op.create_table(
        "transaction_books",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("transaction_id", sa.Uuid(), nullable=False),
        sa.Column("book_id", sa.Uuid(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_transaction_books"),
        sa.ForeignKeyConstraint(
            ["transaction_id"],
            ["transactions.id"],
            name="fk_transaction_books_transaction_id_transactions",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(["book_id"], ["books.id"], name="fk_transaction_books_book_id_books"),
        sa.CheckConstraint("quantity > 0", name="ck_transaction_books_quantity_positive"),
    )
    op.create_index("idx_transaction_books_transaction_id", "transaction_books", ["transaction_id"])
    op.create_index("idx_transaction_books_book_id", "transaction_books", ["book_id"])


def downgrade() -> None:
    op.drop_table("transaction_books")
    op.drop_table("transactions")
    op.drop_table("books")
    op.drop_table("genres")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    book_condition.drop(op.get_bind(), checkfirst=True)

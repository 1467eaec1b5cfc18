"""Create catalog tables (authors, genres, books, book instances) and audit events.

Revision ID: a1c4e7b2d9f0
Revises:
Create Date: 2026-10-17
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "a1c4e7b2d9f0"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "audit_events",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("request_id", sa.String(64), nullable=True),
        sa.Column("client_ip", sa.String(64), nullable=True),
        sa.Column("action", sa.String(128), nullable=False),
        sa.Column("entity_type", sa.String(128), nullable=True),
        sa.Column("entity_id", sa.String(128), nullable=True),
        sa.Column("reason", sa.String(512), nullable=True),
        sa.Column("metadata_json", sa.Text(), nullable=True),
    )

    op.create_table(
        "authors",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("family_name", sa.String(100), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("date_of_death", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("idx_authors_family_name", "authors", ["family_name"])

    op.create_table(
        "genres",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("idx_genres_name", "genres", ["name"])

    op.create_table(
        "books",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("author_id", sa.Integer(), nullable=False),
        sa.Column("summary", sa.Text(), nullable=False),
        sa.Column("isbn", sa.String(32), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["author_id"], ["authors.id"], ondelete="RESTRICT"),
    )
    op.create_index("idx_books_title", "books", ["title"])
    op.create_index("idx_books_author", "books", ["author_id"])

    op.create_table(
        "book_genres",
        sa.Column("book_id", sa.Integer(), primary_key=True),
        sa.Column("genre_id", sa.Integer(), primary_key=True),
        sa.ForeignKeyConstraint(["book_id"], ["books.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["genre_id"], ["genres.id"], ondelete="RESTRICT"),
    )

    op.create_table(
        "book_instances",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("book_id", sa.Integer(), nullable=False),
        sa.Column("imprint", sa.String(255), nullable=False),
        sa.Column("status", sa.String(32), nullable=False, server_default="Maintenance"),
        sa.Column("due_back", sa.Date(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["book_id"], ["books.id"], ondelete="RESTRICT"),
    )
    op.create_index("idx_book_instances_book", "book_instances", ["book_id"])
    op.create_index("idx_book_instances_status", "book_instances", ["status"])


def downgrade() -> None:
    op.drop_index("idx_book_instances_status", table_name="book_instances")
    op.drop_index("idx_book_instances_book", table_name="book_instances")
    op.drop_table("book_instances")
    op.drop_table("book_genres")
    op.drop_index("idx_books_author", table_name="books")
    op.drop_index("idx_books_title", table_name="books")
    op.drop_table("books")
    op.drop_index("idx_genres_name", table_name="genres")
    op.drop_table("genres")
    op.drop_index("idx_authors_family_name", table_name="authors")
    op.drop_table("authors")
    op.drop_table("audit_events")

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import func, select

from app.library.audit import apply_changes, record_event
from app.library.utils import clean, parse_id

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.library.modules.book_instances.models import BookInstance
    from app.library.modules.books.models import Book
    from app.library.modules.genres.models import Genre

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 255
ISBN_MAX_LENGTH = 32


def _genre_values(payload: dict) -> list[str]:
    """A form may send no genre, a single value, or many values."""
    raw = payload.get("genre")
    if raw is None:
        return []
    if isinstance(raw, (list, tuple)):
        return list(raw)
    return [raw]


def selected_genre_ids(payload: dict) -> list[int]:
    """
    Normalize the multi-select genre field to a list of ids for saving and for
    re-checking boxes. Values that are not ids are left to validate_book_payload.
    """
    ids: list[int] = []
    for v in _genre_values(payload):
        gid = parse_id(v)
        if gid is not None and gid not in ids:
            ids.append(gid)
    return ids


def validate_book_payload(s: "Session", payload: dict) -> list[str]:
    """Validate book creation/update payload. Returns list of errors."""
    from app.library.modules.authors.models import Author
    from app.library.modules.genres.models import Genre

    errors = []
    title = clean(payload.get("title"))
    if not title:
        errors.append("Title must not be empty.")
    elif len(title) > TITLE_MAX_LENGTH:
        errors.append(f"Title must be at most {TITLE_MAX_LENGTH} characters.")

    raw_author = clean(payload.get("author"))
    if not raw_author:
        errors.append("Author must not be empty.")
    else:
        author_id = parse_id(raw_author)
        if author_id is None or s.get(Author, author_id) is None:
            errors.append("Author not found.")

    if not clean(payload.get("summary")):
        errors.append("Summary must not be empty.")

    isbn = clean(payload.get("isbn"))
    if not isbn:
        errors.append("ISBN must not be empty")
    elif len(isbn) > ISBN_MAX_LENGTH:
        errors.append(f"ISBN must be at most {ISBN_MAX_LENGTH} characters.")

    genre_ids = selected_genre_ids(payload)
    if any(parse_id(v) is None for v in _genre_values(payload)):
        errors.append("Genre not found.")
    elif genre_ids:
        found = s.scalar(select(func.count()).select_from(Genre).where(Genre.id.in_(genre_ids)))
        if found != len(genre_ids):
            errors.append("Genre not found.")
    return errors


def book_from_payload(payload: dict, book_id: int | None = None) -> "Book":
    """Unsaved Book carrying the submitted values, for re-rendering the form."""
    from app.library.modules.books.models import Book

    return Book(
        id=book_id,
        title=clean(payload.get("title")),
        author_id=parse_id(payload.get("author")),
        summary=clean(payload.get("summary")),
        isbn=clean(payload.get("isbn")),
    )


def _load_genres(s: "Session", genre_ids: list[int]) -> list["Genre"]:
    from app.library.modules.genres.models import Genre

    if not genre_ids:
        return []
    return s.query(Genre).filter(Genre.id.in_(genre_ids)).order_by(Genre.name.asc()).all()


def list_books(s: "Session") -> list["Book"]:
    from app.library.modules.books.models import Book

    return s.query(Book).order_by(Book.title.asc()).all()


def instances_of_book(s: "Session", book_id: int) -> list["BookInstance"]:
    from app.library.modules.book_instances.models import BookInstance

    return s.query(BookInstance).filter(BookInstance.book_id == book_id).order_by(BookInstance.id.asc()).all()


def catalog_counts(s: "Session") -> dict[str, int]:
    """Record counts shown on the catalog home page."""
    from app.library.modules.authors.models import Author
    from app.library.modules.book_instances.models import BookInstance
    from app.library.modules.books.models import Book
    from app.library.modules.genres.models import Genre

    def _count(model, *criteria) -> int:
        stmt = select(func.count()).select_from(model)
        if criteria:
            stmt = stmt.where(*criteria)
        return s.scalar(stmt) or 0

    return {
        "book_count": _count(Book),
        "book_instance_count": _count(BookInstance),
        "book_instance_available_count": _count(BookInstance, BookInstance.status == "Available"),
        "author_count": _count(Author),
        "genre_count": _count(Genre),
    }


def create_book(s: "Session", payload: dict) -> "Book":
    from app.library.modules.books.models import Book

    now = datetime.utcnow()
    book = Book(
        title=clean(payload.get("title")),
        author_id=parse_id(payload.get("author")),
        summary=clean(payload.get("summary")),
        isbn=clean(payload.get("isbn")),
        genres=_load_genres(s, selected_genre_ids(payload)),
        created_at=now,
        updated_at=now,
    )
    s.add(book)
    s.flush()

    record_event(
        s,
        action="book.create",
        entity_type="Book",
        entity_id=str(book.id),
        metadata={"title": book.title, "author_id": book.author_id, "genre_ids": [g.id for g in book.genres]},
    )
    logger.info("Book created id=%s title=%s", book.id, book.title)
    return book


def update_book(s: "Session", book: "Book", payload: dict) -> "Book":
    changes = apply_changes(
        book,
        {
            "title": clean(payload.get("title")),
            "author_id": parse_id(payload.get("author")),
            "summary": clean(payload.get("summary")),
            "isbn": clean(payload.get("isbn")),
        },
    )

    new_genres = _load_genres(s, selected_genre_ids(payload))
    old_ids = sorted(g.id for g in book.genres)
    new_ids = sorted(g.id for g in new_genres)
    if old_ids != new_ids:
        changes["genre_ids"] = {"old": old_ids, "new": new_ids}
        book.genres = new_genres

    book.updated_at = datetime.utcnow()

    record_event(
        s,
        action="book.edit",
        entity_type="Book",
        entity_id=str(book.id),
        metadata={"title": book.title, "changes": changes},
    )
    return book


def delete_book(s: "Session", book: "Book") -> None:
    """Delete a book. Refuses while any copy of it still exists."""
    if instances_of_book(s, book.id):
        raise ValueError(f"Book {book.id} still has copies.")

    record_event(
        s,
        action="book.delete",
        entity_type="Book",
        entity_id=str(book.id),
        metadata={"title": book.title},
    )
    s.delete(book)
    logger.info("Book deleted id=%s", book.id)

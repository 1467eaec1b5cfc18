from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING

from app.library.audit import apply_changes, record_event
from app.library.utils import clean, date_or_raw, is_alphanumeric, parse_date

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.library.modules.authors.models import Author
    from app.library.modules.books.models import Book

logger = logging.getLogger(__name__)

NAME_MAX_LENGTH = 100


def _validate_name(value: str, label: str) -> str | None:
    if not value:
        return f"{label} must be specified."
    if len(value) > NAME_MAX_LENGTH:
        return f"{label} must be at most {NAME_MAX_LENGTH} characters."
    if not is_alphanumeric(value):
        return f"{label} has non-alphanumeric characters."
    return None


def validate_author_payload(payload: dict) -> list[str]:
    """Validate author creation/update payload. Returns list of errors."""
    errors = []
    for field, label in (("first_name", "First name"), ("family_name", "Family name")):
        err = _validate_name(clean(payload.get(field)), label)
        if err:
            errors.append(err)
    for field, message in (("date_of_birth", "Invalid date of birth"), ("date_of_death", "Invalid date of death")):
        try:
            parse_date(payload.get(field))
        except ValueError:
            errors.append(message)
    return errors


def author_from_payload(payload: dict, author_id: int | None = None) -> "Author":
    """Unsaved Author carrying the submitted values, for re-rendering the form."""
    from app.library.modules.authors.models import Author

    return Author(
        id=author_id,
        first_name=clean(payload.get("first_name")),
        family_name=clean(payload.get("family_name")),
        date_of_birth=date_or_raw(payload.get("date_of_birth")),
        date_of_death=date_or_raw(payload.get("date_of_death")),
    )


def list_authors(s: "Session") -> list["Author"]:
    from app.library.modules.authors.models import Author

    return s.query(Author).order_by(Author.family_name.asc(), Author.first_name.asc()).all()


def books_by_author(s: "Session", author_id: int) -> list["Book"]:
    from app.library.modules.books.models import Book

    return s.query(Book).filter(Book.author_id == author_id).order_by(Book.title.asc()).all()


def create_author(s: "Session", payload: dict) -> "Author":
    """Create a new author."""
    from app.library.modules.authors.models import Author

    now = datetime.utcnow()
    author = Author(
        first_name=clean(payload.get("first_name")),
        family_name=clean(payload.get("family_name")),
        date_of_birth=parse_date(payload.get("date_of_birth")),
        date_of_death=parse_date(payload.get("date_of_death")),
        created_at=now,
        updated_at=now,
    )
    s.add(author)
    s.flush()

    record_event(
        s,
        action="author.create",
        entity_type="Author",
        entity_id=str(author.id),
        metadata={"name": author.name},
    )
    logger.info("Author created id=%s name=%s", author.id, author.name)
    return author


def update_author(s: "Session", author: "Author", payload: dict) -> "Author":
    """Update an existing author."""
    changes = apply_changes(
        author,
        {
            "first_name": clean(payload.get("first_name")),
            "family_name": clean(payload.get("family_name")),
            "date_of_birth": parse_date(payload.get("date_of_birth")),
            "date_of_death": parse_date(payload.get("date_of_death")),
        },
    )

    author.updated_at = datetime.utcnow()

    record_event(
        s,
        action="author.edit",
        entity_type="Author",
        entity_id=str(author.id),
        metadata={"name": author.name, "changes": changes},
    )
    return author


def delete_author(s: "Session", author: "Author") -> None:
    """Delete an author. Refuses while any book still references them."""
    if books_by_author(s, author.id):
        raise ValueError(f"Author {author.id} still has books.")

    record_event(
        s,
        action="author.delete",
        entity_type="Author",
        entity_id=str(author.id),
        metadata={"name": author.name},
    )
    s.delete(author)
    logger.info("Author deleted id=%s", author.id)

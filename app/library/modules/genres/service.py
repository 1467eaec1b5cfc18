from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import func

from app.library.audit import apply_changes, record_event
from app.library.utils import clean

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.library.modules.books.models import Book
    from app.library.modules.genres.models import Genre

logger = logging.getLogger(__name__)

NAME_MIN_LENGTH = 3
NAME_MAX_LENGTH = 100


def validate_genre_payload(payload: dict) -> list[str]:
    errors = []
    name = clean(payload.get("name"))
    if len(name) < NAME_MIN_LENGTH:
        errors.append(f"Genre name must contain at least {NAME_MIN_LENGTH} characters")
    elif len(name) > NAME_MAX_LENGTH:
        errors.append(f"Genre name must be at most {NAME_MAX_LENGTH} characters")
    return errors


def find_genre_by_name(s: "Session", name: str, exclude_id: int | None = None) -> "Genre | None":
    """Case-insensitive lookup by name."""
    from app.library.modules.genres.models import Genre

    q = s.query(Genre).filter(func.lower(Genre.name) == clean(name).lower())
    if exclude_id is not None:
        q = q.filter(Genre.id != exclude_id)
    return q.order_by(Genre.id.asc()).first()


def list_genres(s: "Session") -> list["Genre"]:
    from app.library.modules.genres.models import Genre

    return s.query(Genre).order_by(Genre.name.asc()).all()


def books_in_genre(s: "Session", genre_id: int) -> list["Book"]:
    from app.library.modules.books.models import Book
    from app.library.modules.genres.models import Genre

    return s.query(Book).filter(Book.genres.any(Genre.id == genre_id)).order_by(Book.title.asc()).all()


def create_genre(s: "Session", payload: dict) -> "Genre":
    from app.library.modules.genres.models import Genre

    now = datetime.utcnow()
    genre = Genre(name=clean(payload.get("name")), created_at=now, updated_at=now)
    s.add(genre)
    s.flush()

    record_event(
        s,
        action="genre.create",
        entity_type="Genre",
        entity_id=str(genre.id),
        metadata={"name": genre.name},
    )
    logger.info("Genre created id=%s name=%s", genre.id, genre.name)
    return genre


def update_genre(s: "Session", genre: "Genre", payload: dict) -> "Genre":
    changes = apply_changes(genre, {"name": clean(payload.get("name"))})
    genre.updated_at = datetime.utcnow()

    record_event(
        s,
        action="genre.edit",
        entity_type="Genre",
        entity_id=str(genre.id),
        metadata={"changes": changes},
    )
    return genre


def delete_genre(s: "Session", genre: "Genre") -> None:
    """Delete a genre. Refuses while any book is still tagged with it."""
    if books_in_genre(s, genre.id):
        raise ValueError(f"Genre {genre.id} still has books.")

    record_event(
        s,
        action="genre.delete",
        entity_type="Genre",
        entity_id=str(genre.id),
        metadata={"name": genre.name},
    )
    s.delete(genre)
    logger.info("Genre deleted id=%s", genre.id)

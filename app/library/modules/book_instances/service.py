from __future__ import annotations

import logging
from datetime import date, datetime
from typing import TYPE_CHECKING

from app.library.audit import apply_changes, record_event
from app.library.utils import clean, date_or_raw, parse_date, parse_id

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.library.modules.book_instances.models import BookInstance

logger = logging.getLogger(__name__)

VALID_STATUSES = ("Available", "Maintenance", "Loaned", "Reserved")
DEFAULT_STATUS = "Maintenance"
IMPRINT_MAX_LENGTH = 255


def validate_book_instance_payload(s: "Session", payload: dict) -> list[str]:
    from app.library.modules.books.models import Book

    errors = []
    raw_book = clean(payload.get("book"))
    if not raw_book:
        errors.append("Book must be specified")
    else:
        book_id = parse_id(raw_book)
        if book_id is None or s.get(Book, book_id) is None:
            errors.append("Book not found")

    imprint = clean(payload.get("imprint"))
    if not imprint:
        errors.append("Imprint must be specified")
    elif len(imprint) > IMPRINT_MAX_LENGTH:
        errors.append(f"Imprint must be at most {IMPRINT_MAX_LENGTH} characters")

    status = clean(payload.get("status"))
    if status and status not in VALID_STATUSES:
        errors.append(f"Invalid status. Must be one of: {', '.join(VALID_STATUSES)}")

    try:
        parse_date(payload.get("due_back"))
    except ValueError:
        errors.append("Invalid date")
    return errors


def _due_back(payload: dict) -> date:
    return parse_date(payload.get("due_back")) or date.today()


def book_instance_from_payload(payload: dict, instance_id: int | None = None) -> "BookInstance":
    """Unsaved BookInstance carrying the submitted values, for re-rendering the form."""
    from app.library.modules.book_instances.models import BookInstance

    return BookInstance(
        id=instance_id,
        book_id=parse_id(payload.get("book")),
        imprint=clean(payload.get("imprint")),
        status=clean(payload.get("status")) or DEFAULT_STATUS,
        due_back=date_or_raw(payload.get("due_back")),
    )


def list_book_instances(s: "Session") -> list["BookInstance"]:
    from app.library.modules.book_instances.models import BookInstance
    from app.library.modules.books.models import Book

    return (
        s.query(BookInstance)
        .join(Book, BookInstance.book_id == Book.id)
        .order_by(Book.title.asc(), BookInstance.id.asc())
        .all()
    )


def create_book_instance(s: "Session", payload: dict) -> "BookInstance":
    from app.library.modules.book_instances.models import BookInstance

    now = datetime.utcnow()
    instance = BookInstance(
        book_id=parse_id(payload.get("book")),
        imprint=clean(payload.get("imprint")),
        status=clean(payload.get("status")) or DEFAULT_STATUS,
        due_back=_due_back(payload),
        created_at=now,
        updated_at=now,
    )
    s.add(instance)
    s.flush()

    record_event(
        s,
        action="book_instance.create",
        entity_type="BookInstance",
        entity_id=str(instance.id),
        metadata={"book_id": instance.book_id, "status": instance.status},
    )
    logger.info("BookInstance created id=%s book_id=%s", instance.id, instance.book_id)
    return instance


def update_book_instance(s: "Session", instance: "BookInstance", payload: dict) -> "BookInstance":
    changes = apply_changes(
        instance,
        {
            "book_id": parse_id(payload.get("book")),
            "imprint": clean(payload.get("imprint")),
            "status": clean(payload.get("status")) or DEFAULT_STATUS,
            "due_back": _due_back(payload),
        },
    )

    instance.updated_at = datetime.utcnow()

    record_event(
        s,
        action="book_instance.edit",
        entity_type="BookInstance",
        entity_id=str(instance.id),
        metadata={"changes": changes},
    )
    return instance


def delete_book_instance(s: "Session", instance: "BookInstance") -> None:
    record_event(
        s,
        action="book_instance.delete",
        entity_type="BookInstance",
        entity_id=str(instance.id),
        metadata={"book_id": instance.book_id, "imprint": instance.imprint},
    )
    s.delete(instance)
    logger.info("BookInstance deleted id=%s", instance.id)

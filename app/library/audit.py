import json
from typing import Any

from flask import g, has_request_context, request
from sqlalchemy.orm import Session

from app.library.models import AuditEvent


def apply_changes(obj: Any, values: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """
    Assign each value that differs from the current attribute and return
    {attr: {"old": ..., "new": ...}} for the edit event's metadata.
    """
    changes: dict[str, dict[str, Any]] = {}
    for attr, new in values.items():
        old = getattr(obj, attr)
        if new != old:
            changes[attr] = {"old": old, "new": new}
            setattr(obj, attr, new)
    return changes


def record_event(
    s: Session,
    *,
    action: str,
    entity_type: str | None = None,
    entity_id: str | None = None,
    reason: str | None = None,
    metadata: dict[str, Any] | None = None,
    request_id: str | None = None,
) -> AuditEvent:
    """
    Append a catalog audit row (e.g. action="book.edit").

    Outside a request (populate_db, release scripts) there is no client IP and
    the request id is only what the caller passes in.
    """
    if has_request_context():
        rid = request_id or getattr(g, "request_id", None)
        client_ip = request.remote_addr
    else:
        rid, client_ip = request_id, None
    ev = AuditEvent(
        request_id=rid,
        client_ip=client_ip,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        reason=reason,
        # dates in change sets are serialized as ISO strings
        metadata_json=json.dumps(metadata, sort_keys=True, default=str) if metadata else None,
    )
    s.add(ev)
    return ev

import logging
import secrets

from flask import Flask, g, render_template, request, session

logger = logging.getLogger(__name__)

UNSAFE_METHODS = ("POST", "PUT", "PATCH", "DELETE")
EXEMPT_PREFIXES = ("/static/", "/health")


def ensure_csrf_token() -> str:
    """Return the session's CSRF token, minting one on first use."""
    token = session.get("csrf_token")
    if not token:
        token = secrets.token_urlsafe(32)
        session["csrf_token"] = token
    return token


def csrf_token_valid() -> bool:
    submitted = request.form.get("csrf_token") or request.headers.get("X-CSRF-Token")
    expected = session.get("csrf_token")
    return bool(submitted and expected and secrets.compare_digest(submitted, expected))


def init_csrf(app: Flask) -> None:
    """
    Every catalog form posts a hidden csrf_token; a state-changing request
    without a matching token gets the 400 page and is never handled.
    """

    @app.context_processor
    def _inject_csrf() -> dict:
        return {"csrf_token": ensure_csrf_token()}

    @app.before_request
    def _csrf_guard():
        if request.path.startswith(EXEMPT_PREFIXES):
            return None
        ensure_csrf_token()
        if request.method in UNSAFE_METHODS and not csrf_token_valid():
            logger.warning("CSRF rejected path=%s request_id=%s", request.path, getattr(g, "request_id", None))
            return render_template("errors/400.html", message="CSRF token missing or invalid."), 400
        return None

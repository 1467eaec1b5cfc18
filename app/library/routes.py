from flask import Blueprint, current_app, redirect, url_for

bp = Blueprint("routes", __name__)


@bp.get("/")
def index():
    return redirect(url_for("books.index"))


@bp.get("/health")
def health():
    """JSON health report; `schema_ok` turns true once every catalog table exists."""
    return {"ok": True, "schema_ok": bool(current_app.config.get("_schema_health_ok"))}


@bp.get("/healthz")
def healthz():
    # liveness probe: no DB access
    return "ok", 200

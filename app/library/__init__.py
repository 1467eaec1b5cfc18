import logging
import uuid

from flask import Flask, g, render_template, request
from dotenv import load_dotenv
from sqlalchemy import inspect as sa_inspect

from app.library.config import load_config
from app.library.db import init_db, teardown_db_session
from app.library.security import init_csrf
from app.library import models  # noqa: F401  (Base must exist before any module model imports it)
from app.library.routes import bp as routes_bp
from app.library.users import bp as users_bp
from app.library.modules.authors.routes import bp as authors_bp
from app.library.modules.books.routes import bp as books_bp
from app.library.modules.genres.routes import bp as genres_bp
from app.library.modules.book_instances.routes import bp as book_instances_bp

CATALOG_TABLES = ("authors", "genres", "books", "book_genres", "book_instances", "audit_events")


def create_app() -> Flask:
    load_dotenv()
    app = Flask(__name__, template_folder="templates", static_folder="static")
    app.config.from_mapping(load_config())
    app.logger.setLevel(app.config["LOG_LEVEL"])

    @app.template_filter("dateformat")
    def _dateformat_filter(value, format: str = "%Y-%m-%d") -> str:
        if value is None:
            return ""
        if hasattr(value, "strftime"):
            return value.strftime(format)
        return str(value)

    @app.before_request
    def _assign_request_id():
        if not getattr(g, "request_id", None):
            g.request_id = uuid.uuid4().hex

    init_csrf(app)

    # Production guardrails (fail fast with clear logs)
    env = (app.config.get("ENV") or "").strip().lower()
    if env in ("prod", "production"):
        if not app.config.get("DATABASE_URL") or str(app.config["DATABASE_URL"]).strip() == "":
            raise RuntimeError("DATABASE_URL is required in production.")
        if str(app.config["DATABASE_URL"]).startswith("sqlite"):
            raise RuntimeError("DATABASE_URL must be Postgres in production (not sqlite).")
        if not app.config.get("SECRET_KEY") or str(app.config["SECRET_KEY"]) in ("", "change-me"):
            raise RuntimeError("SECRET_KEY must be set to a strong value in production (not default).")

    init_db(app)

    def _dispose_engine_on_fork() -> None:
        import os
        if hasattr(os, "register_at_fork"):
            def _after_fork_child():
                engine = app.extensions.get("sqlalchemy_engine")
                if engine:
                    engine.dispose()
                    app.logger.info("Disposed DB engine after fork (pid=%s)", os.getpid())

            os.register_at_fork(after_in_child=_after_fork_child)

    _dispose_engine_on_fork()

    app.register_blueprint(routes_bp)
    app.register_blueprint(users_bp, url_prefix="/users")
    app.register_blueprint(books_bp, url_prefix="/catalog")
    app.register_blueprint(authors_bp, url_prefix="/catalog")
    app.register_blueprint(genres_bp, url_prefix="/catalog")
    app.register_blueprint(book_instances_bp, url_prefix="/catalog")

    app.teardown_appcontext(teardown_db_session)

    # Schema health: catalog pages need every table; re-checked until it passes.
    app.config.setdefault("_schema_health_ok", False)
    app.config.setdefault("_schema_health_missing", [])
    app.config.setdefault("_schema_health_logged", False)

    def _run_schema_health_check() -> bool:
        missing: list[str] = []
        try:
            engine = app.extensions.get("sqlalchemy_engine")
            if engine is None:
                raise RuntimeError("sqlalchemy_engine not initialized")
            insp = sa_inspect(engine)
            for table in CATALOG_TABLES:
                if not insp.has_table(table):
                    missing.append(f"{table} (table)")
        except Exception as e:
            app.logger.exception("Schema health check failed: %s", e)
            missing.append("(inspection failed)")

        app.config["_schema_health_missing"] = missing
        if missing and not app.config.get("_schema_health_logged"):
            app.config["_schema_health_logged"] = True
            app.logger.error("DB schema out of date; run `alembic upgrade head`. Missing: %s", ", ".join(missing))
        app.config["_schema_health_ok"] = not missing
        return not missing

    _run_schema_health_check()

    @app.before_request
    def _schema_health_guardrail():  # type: ignore[no-redef]
        if app.config.get("_schema_health_ok"):
            return None
        if not request.path.startswith("/catalog"):
            return None
        if _run_schema_health_check():
            return None
        return render_template("errors/schema_out_of_date.html", missing=app.config.get("_schema_health_missing") or []), 500

    @app.errorhandler(404)
    def _err_404(e):  # type: ignore[no-redef]
        return render_template("errors/404.html", message=getattr(e, "description", None)), 404

    @app.errorhandler(500)
    def _err_500(e):  # type: ignore[no-redef]
        app.logger.exception("Unhandled 500 (request_id=%s)", getattr(g, "request_id", None))
        return render_template("errors/500.html"), 500

    logging.getLogger(__name__).info("create_app() complete; app ready to serve")

    return app

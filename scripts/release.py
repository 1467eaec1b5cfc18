"""
Release-phase helper.

Goal:
- Fail fast if DATABASE_URL is missing (avoid silently using SQLite in prod).
- Run alembic migrations.
- Optionally load the sample library (SEED_SAMPLE_DATA=1; idempotent).

Usage:
  python scripts/release.py
"""

from __future__ import annotations

import os
import sys
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def _require_env(name: str) -> str:
    v = (os.environ.get(name) or "").strip()
    if not v:
        raise RuntimeError(f"Missing required environment variable {name}.")
    return v


def run_release(seed: bool | None = None) -> None:
    """Migrate to head; load the sample library when `seed` (default: SEED_SAMPLE_DATA=1)."""
    db_url = _require_env("DATABASE_URL")
    # Guardrail: prevent accidental prod deploys against SQLite.
    env = (os.environ.get("ENV") or "").strip().lower()
    if env in ("prod", "production") and db_url.startswith("sqlite"):
        raise RuntimeError("Refusing to run release on sqlite DATABASE_URL in production. Set DATABASE_URL to Postgres.")

    print("=== LocalLibrary release start ===", flush=True)
    print(f"ENV={env or '(unset)'}", flush=True)
    print("Running Alembic migrations...", flush=True)

    from alembic import command
    from alembic.config import Config

    cfg = Config(str(ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(ROOT / "migrations"))
    cfg.set_main_option("sqlalchemy.url", db_url)
    command.upgrade(cfg, "head")
    print("Migrations complete.", flush=True)

    if seed is None:
        seed = (os.environ.get("SEED_SAMPLE_DATA") or "").strip() == "1"
    if seed:
        print("Loading sample library (idempotent)...", flush=True)
        from scripts import populate_db

        created = populate_db.populate(database_url=db_url)
        print(f"Sample library loaded: {created}", flush=True)
    print("=== LocalLibrary release done ===", flush=True)


def main() -> None:
    run_release()


if __name__ == "__main__":
    main()

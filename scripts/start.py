#!/usr/bin/env python3
"""
Serve the catalog with gunicorn, after migrating the database.

Usage:
    python scripts/start.py                  # release step, then serve on $PORT (default 8080)
    python scripts/start.py --seed           # also load the sample library
    python scripts/start.py --skip-release --workers 4

WEB_CONCURRENCY sets the default worker count, as on most PaaS runtimes.
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from gunicorn.app.base import BaseApplication  # noqa: E402


class CatalogApplication(BaseApplication):
    """Embedded gunicorn running app.wsgi:app in this process."""

    def __init__(self, options: dict):
        self.options = options
        super().__init__()

    def load_config(self):
        for key, value in self.options.items():
            if key in self.cfg.settings and value is not None:
                self.cfg.set(key, value)

    def load(self):
        from app.wsgi import app

        return app


def port_number(raw: str) -> int:
    try:
        port = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid port {raw!r}") from None
    if not 1 <= port <= 65535:
        raise argparse.ArgumentTypeError(f"port {port} out of range 1-65535")
    return port


def gunicorn_options(port: int, workers: int) -> dict:
    return {
        "bind": f"0.0.0.0:{port}",
        "workers": workers,
        "timeout": 60,
        # create_app() runs once in the master and disposes its engine in each forked worker
        "preload_app": True,
        "accesslog": "-",
        "errorlog": "-",
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Migrate and serve the LocalLibrary catalog.")
    parser.add_argument("--port", type=port_number, default=os.environ.get("PORT") or "8080")
    parser.add_argument("--workers", type=int, default=int(os.environ.get("WEB_CONCURRENCY") or 2))
    parser.add_argument("--skip-release", action="store_true", help="serve without running migrations")
    parser.add_argument("--seed", action="store_true", help="load the sample library during the release step")
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    if not args.skip_release:
        from scripts.release import run_release

        try:
            run_release(seed=True if args.seed else None)
        except Exception as e:
            print(f"Release failed: {e}", flush=True)
            sys.exit(1)

    print(f"=== Serving catalog on 0.0.0.0:{args.port} ({args.workers} workers) ===", flush=True)
    CatalogApplication(gunicorn_options(args.port, args.workers)).run()


if __name__ == "__main__":
    main()

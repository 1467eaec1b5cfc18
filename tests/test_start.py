"""Tests for the gunicorn startup script's option handling."""
import argparse

import pytest

from scripts.start import build_parser, gunicorn_options, port_number


def test_port_number_range():
    assert port_number("8080") == 8080
    for raw in ("0", "65536", "http"):
        with pytest.raises(argparse.ArgumentTypeError):
            port_number(raw)


def test_parser_defaults_from_environment(monkeypatch):
    monkeypatch.setenv("PORT", "5005")
    monkeypatch.setenv("WEB_CONCURRENCY", "3")
    args = build_parser().parse_args([])
    assert args.port == 5005
    assert args.workers == 3
    assert args.skip_release is False
    assert args.seed is False


def test_parser_rejects_bad_port(monkeypatch):
    monkeypatch.delenv("PORT", raising=False)
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--port", "99999"])


def test_gunicorn_options_bind_all_interfaces():
    opts = gunicorn_options(8000, 4)
    assert opts["bind"] == "0.0.0.0:8000"
    assert opts["workers"] == 4
    assert opts["preload_app"] is True

"""Tests for the Genres module."""
import pytest

from app.library import create_app
from app.library.db import session_scope
from app.library.models import Base
from app.library.modules.authors.models import Author
from app.library.modules.books.models import Book
from app.library.modules.genres.models import Genre
from app.library.modules.genres.service import validate_genre_payload

CSRF = "test-csrf-token"


@pytest.fixture()
def client(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    monkeypatch.setenv("ENV", "test")

    app = create_app()
    engine = app.extensions["sqlalchemy_engine"]
    Base.metadata.create_all(bind=engine)

    with session_scope(app) as s:
        author = Author(first_name="Ben", family_name="Bova")
        scifi = Genre(name="Science Fiction")
        poetry = Genre(name="French Poetry")
        s.add_all([author, scifi, poetry])
        s.flush()
        s.add(Book(title="Apes and Angels", author_id=author.id, summary="Radiation.", isbn="9780765379528", genres=[scifi]))

    client = app.test_client()
    with client.session_transaction() as sess:
        sess["csrf_token"] = CSRF
    return client


def _genre_id(client, name: str) -> int | None:
    with session_scope(client.application) as s:
        g = s.query(Genre).filter(Genre.name == name).one_or_none()
        return g.id if g else None


def test_validate_genre_payload():
    assert validate_genre_payload({"name": " ab "}) == ["Genre name must contain at least 3 characters"]
    assert validate_genre_payload({"name": "x" * 101}) == ["Genre name must be at most 100 characters"]
    assert validate_genre_payload({"name": "Fantasy"}) == []


def test_genre_list_sorted_by_name(client):
    r = client.get("/catalog/genres")
    assert r.status_code == 200
    assert r.data.index(b"French Poetry") < r.data.index(b"Science Fiction")


def test_genre_detail_lists_books(client):
    r = client.get(f"/catalog/genre/{_genre_id(client, 'Science Fiction')}")
    assert r.status_code == 200
    assert b"Genre: Science Fiction" in r.data
    assert b"Apes and Angels" in r.data


def test_genre_detail_missing_is_404(client):
    r = client.get("/catalog/genre/9999")
    assert r.status_code == 404
    assert b"Genre not found" in r.data


def test_genre_create_redirects_to_detail(client):
    r = client.post("/catalog/genre/create", data={"csrf_token": CSRF, "name": "  Fantasy "})
    assert r.status_code == 302
    genre_id = _genre_id(client, "Fantasy")
    assert genre_id is not None
    assert r.headers["Location"].endswith(f"/catalog/genre/{genre_id}")


def test_genre_create_duplicate_redirects_to_existing(client):
    existing = _genre_id(client, "Science Fiction")
    r = client.post("/catalog/genre/create", data={"csrf_token": CSRF, "name": "science fiction"})
    assert r.status_code == 302
    assert r.headers["Location"].endswith(f"/catalog/genre/{existing}")
    with session_scope(client.application) as s:
        assert s.query(Genre).count() == 2


def test_genre_create_too_short_rerenders(client):
    r = client.post("/catalog/genre/create", data={"csrf_token": CSRF, "name": "SF"})
    assert r.status_code == 200
    assert b"Genre name must contain at least 3 characters" in r.data
    assert b'value="SF"' in r.data


def test_genre_delete_refused_while_books_exist(client):
    genre_id = _genre_id(client, "Science Fiction")
    r = client.post(f"/catalog/genre/{genre_id}/delete", data={"csrf_token": CSRF, "genreid": genre_id})
    assert r.status_code == 200
    assert b"Delete the following books before attempting to delete this genre." in r.data
    assert _genre_id(client, "Science Fiction") == genre_id


def test_genre_delete_without_books(client):
    genre_id = _genre_id(client, "French Poetry")
    r = client.get(f"/catalog/genre/{genre_id}/delete")
    assert b"Do you really want to delete this Genre?" in r.data

    r = client.post(f"/catalog/genre/{genre_id}/delete", data={"csrf_token": CSRF, "genreid": genre_id})
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/catalog/genres")
    assert _genre_id(client, "French Poetry") is None


def test_genre_update(client):
    genre_id = _genre_id(client, "French Poetry")
    r = client.post(f"/catalog/genre/{genre_id}/update", data={"csrf_token": CSRF, "name": "Poetry"})
    assert r.status_code == 302
    assert r.headers["Location"].endswith(f"/catalog/genre/{genre_id}")
    assert _genre_id(client, "Poetry") == genre_id


def test_genre_update_to_existing_name_rejected(client):
    genre_id = _genre_id(client, "French Poetry")
    r = client.post(f"/catalog/genre/{genre_id}/update", data={"csrf_token": CSRF, "name": "SCIENCE FICTION"})
    assert r.status_code == 200
    assert b"Another genre already has this name" in r.data
    assert _genre_id(client, "French Poetry") == genre_id


def test_genre_update_missing_is_404(client):
    assert client.get("/catalog/genre/9999/update").status_code == 404

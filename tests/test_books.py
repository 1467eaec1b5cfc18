"""Tests for the Books module and the catalog home page."""
from datetime import date

import pytest

from app.library import create_app
from app.library.db import session_scope
from app.library.models import AuditEvent, Base, BookGenre
from app.library.modules.authors.models import Author
from app.library.modules.book_instances.models import BookInstance
from app.library.modules.books.models import Book
from app.library.modules.books.service import selected_genre_ids
from app.library.modules.genres.models import Genre

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
        rothfuss = Author(first_name="Patrick", family_name="Rothfuss", date_of_birth=date(1973, 6, 6))
        billings = Author(first_name="Bob", family_name="Billings")
        fantasy = Genre(name="Fantasy")
        scifi = Genre(name="Science Fiction")
        s.add_all([rothfuss, billings, fantasy, scifi])
        s.flush()
        wind = Book(
            title="The Name of the Wind",
            author_id=rothfuss.id,
            summary="Kvothe's story.",
            isbn="9781473211896",
            genres=[fantasy],
        )
        s.add_all(
            [
                wind,
                Book(title="Test Book 2", author_id=billings.id, summary="Summary of test book 2", isbn="ISBN222222"),
            ]
        )
        s.flush()
        s.add_all(
            [
                BookInstance(book_id=wind.id, imprint="London Gollancz, 2014.", status="Available", due_back=date.today()),
                BookInstance(book_id=wind.id, imprint="Gollancz, 2011.", status="Loaned", due_back=date(2030, 1, 15)),
            ]
        )

    client = app.test_client()
    with client.session_transaction() as sess:
        sess["csrf_token"] = CSRF
    return client


def _ids(client) -> dict[str, int]:
    with session_scope(client.application) as s:
        ids = {a.family_name: a.id for a in s.query(Author).all()}
        ids.update({g.name: g.id for g in s.query(Genre).all()})
        ids.update({b.title: b.id for b in s.query(Book).all()})
        return ids


def test_selected_genre_ids_normalizes_single_and_many():
    assert selected_genre_ids({}) == []
    assert selected_genre_ids({"genre": None}) == []
    assert selected_genre_ids({"genre": "3"}) == [3]
    assert selected_genre_ids({"genre": ["2", "2", " 5 "]}) == [2, 5]


def test_catalog_home_counts(client):
    r = client.get("/catalog/")
    assert r.status_code == 200
    assert b"<strong>Books:</strong> 2" in r.data
    assert b"<strong>Copies:</strong> 2" in r.data
    assert b"<strong>Copies available:</strong> 1" in r.data
    assert b"<strong>Authors:</strong> 2" in r.data
    assert b"<strong>Genres:</strong> 2" in r.data


def test_book_list_sorted_by_title_with_author(client):
    r = client.get("/catalog/books")
    assert r.status_code == 200
    assert r.data.index(b"Test Book 2") < r.data.index(b"The Name of the Wind")
    assert b"(Rothfuss, Patrick)" in r.data


def test_book_detail_shows_genres_and_copies(client):
    ids = _ids(client)
    r = client.get(f"/catalog/book/{ids['The Name of the Wind']}")
    assert r.status_code == 200
    assert b"Title: The Name of the Wind" in r.data
    assert b"Rothfuss, Patrick" in r.data
    assert b"Fantasy" in r.data
    assert b"London Gollancz, 2014." in r.data
    assert b"Due back:</strong> Jan 15, 2030" in r.data


def test_book_detail_missing_is_404(client):
    r = client.get("/catalog/book/9999")
    assert r.status_code == 404
    assert b"Book not found" in r.data


def test_book_create_form_lists_authors_and_genres(client):
    r = client.get("/catalog/book/create")
    assert r.status_code == 200
    assert r.data.index(b"Billings, Bob") < r.data.index(b"Rothfuss, Patrick")
    assert b"Science Fiction" in r.data


def test_book_create_with_genres_redirects_to_detail(client):
    ids = _ids(client)
    r = client.post(
        "/catalog/book/create",
        data={
            "csrf_token": CSRF,
            "title": "The Wise Man's Fear",
            "author": str(ids["Rothfuss"]),
            "summary": "Day two.",
            "isbn": "9788401352836",
            "genre": [str(ids["Fantasy"]), str(ids["Science Fiction"])],
        },
    )
    assert r.status_code == 302
    with session_scope(client.application) as s:
        book = s.query(Book).filter(Book.title == "The Wise Man's Fear").one()
        assert r.headers["Location"].endswith(f"/catalog/book/{book.id}")
        assert sorted(g.name for g in book.genres) == ["Fantasy", "Science Fiction"]
        assert book.author.family_name == "Rothfuss"
        assert s.query(AuditEvent).filter(AuditEvent.action == "book.create").count() == 1


def test_book_create_without_genres(client):
    ids = _ids(client)
    r = client.post(
        "/catalog/book/create",
        data={"csrf_token": CSRF, "title": "Test Book 1", "author": str(ids["Billings"]), "summary": "S", "isbn": "ISBN111111"},
    )
    assert r.status_code == 302
    with session_scope(client.application) as s:
        assert s.query(Book).filter(Book.title == "Test Book 1").one().genres == []


def test_book_create_invalid_keeps_selected_genres_checked(client):
    ids = _ids(client)
    scifi = ids["Science Fiction"]
    r = client.post(
        "/catalog/book/create",
        data={"csrf_token": CSRF, "title": "  ", "author": str(ids["Billings"]), "summary": "", "isbn": "X1", "genre": str(scifi)},
    )
    assert r.status_code == 200
    assert b"Title must not be empty." in r.data
    assert b"Summary must not be empty." in r.data
    assert b'value="%d" checked' % scifi in r.data
    assert b'value="%d" checked' % ids["Fantasy"] not in r.data
    assert b'value="%d" selected' % ids["Billings"] in r.data
    with session_scope(client.application) as s:
        assert s.query(Book).count() == 2


def test_book_create_unknown_author_or_genre_rejected(client):
    r = client.post(
        "/catalog/book/create",
        data={"csrf_token": CSRF, "title": "T", "author": "9999", "summary": "S", "isbn": "I", "genre": "8888"},
    )
    assert r.status_code == 200
    assert b"Author not found." in r.data
    assert b"Genre not found." in r.data

    r = client.post("/catalog/book/create", data={"csrf_token": CSRF, "title": "T", "summary": "S", "isbn": "I"})
    assert b"Author must not be empty." in r.data


@pytest.mark.parametrize("bad_id", ["x", "\u00b2", "-1", "9" * 25])
def test_book_create_malformed_author_or_genre_rejected(client, bad_id):
    ids = _ids(client)
    r = client.post(
        "/catalog/book/create",
        data={"csrf_token": CSRF, "title": "T", "author": bad_id, "summary": "S", "isbn": "I"},
    )
    assert r.status_code == 200
    assert b"Author not found." in r.data

    # one bad value among valid genres still rejects the whole submission
    r = client.post(
        "/catalog/book/create",
        data={
            "csrf_token": CSRF,
            "title": "T",
            "author": str(ids["Billings"]),
            "summary": "S",
            "isbn": "I",
            "genre": [str(ids["Fantasy"]), bad_id],
        },
    )
    assert r.status_code == 200
    assert b"Genre not found." in r.data
    with session_scope(client.application) as s:
        assert s.query(Book).count() == 2


def test_book_out_of_range_id_is_missing(client):
    huge = "9" * 25
    assert client.get(f"/catalog/book/{huge}").status_code == 404
    assert client.get(f"/catalog/book/{huge}/update").status_code == 404
    r = client.get(f"/catalog/book/{huge}/delete")
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/catalog/books")
    r = client.post(f"/catalog/book/{huge}/delete", data={"csrf_token": CSRF})
    assert r.status_code == 302


def test_book_delete_refused_while_copies_exist(client):
    book_id = _ids(client)["The Name of the Wind"]
    r = client.get(f"/catalog/book/{book_id}/delete")
    assert r.status_code == 200
    assert b"Delete the following copies before attempting to delete this Book." in r.data

    r = client.post(f"/catalog/book/{book_id}/delete", data={"csrf_token": CSRF, "bookid": book_id})
    assert r.status_code == 200
    assert b"Delete the following copies" in r.data
    with session_scope(client.application) as s:
        assert s.get(Book, book_id) is not None


def test_book_delete_without_copies(client):
    book_id = _ids(client)["Test Book 2"]
    r = client.post(f"/catalog/book/{book_id}/delete", data={"csrf_token": CSRF, "bookid": book_id})
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/catalog/books")
    with session_scope(client.application) as s:
        assert s.get(Book, book_id) is None
        assert s.query(BookGenre).filter(BookGenre.book_id == book_id).count() == 0


def test_book_delete_missing_redirects_to_list(client):
    r = client.get("/catalog/book/9999/delete")
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/catalog/books")


def test_book_update_form_prefilled(client):
    ids = _ids(client)
    r = client.get(f"/catalog/book/{ids['The Name of the Wind']}/update")
    assert r.status_code == 200
    assert b"Update Book" in r.data
    assert b'value="%d" checked' % ids["Fantasy"] in r.data
    assert b'value="%d" selected' % ids["Rothfuss"] in r.data


def test_book_update_changes_author_and_genres(client):
    ids = _ids(client)
    book_id = ids["The Name of the Wind"]
    r = client.post(
        f"/catalog/book/{book_id}/update",
        data={
            "csrf_token": CSRF,
            "title": "The Name of the Wind",
            "author": str(ids["Billings"]),
            "summary": "Kvothe's story.",
            "isbn": "9781473211896",
            "genre": [str(ids["Science Fiction"])],
        },
    )
    assert r.status_code == 302
    assert r.headers["Location"].endswith(f"/catalog/book/{book_id}")
    with session_scope(client.application) as s:
        book = s.get(Book, book_id)
        assert book.author.family_name == "Billings"
        assert [g.name for g in book.genres] == ["Science Fiction"]


def test_book_update_missing_is_404(client):
    assert client.get("/catalog/book/9999/update").status_code == 404

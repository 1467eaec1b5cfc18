from __future__ import annotations

from flask import Blueprint, flash, redirect, render_template, request, url_for

from app.library.db import db_session, find_record, get_or_404
from app.library.modules.authors.service import list_authors
from app.library.modules.books.models import Book
from app.library.modules.books.service import (
    book_from_payload,
    catalog_counts,
    create_book,
    delete_book,
    instances_of_book,
    list_books,
    selected_genre_ids,
    update_book,
    validate_book_payload,
)
from app.library.modules.genres.service import list_genres

bp = Blueprint("books", __name__)


def _book_payload() -> dict:
    return {
        "title": request.form.get("title"),
        "author": request.form.get("author"),
        "summary": request.form.get("summary"),
        "isbn": request.form.get("isbn"),
        "genre": request.form.getlist("genre"),
    }


def _render_form(title: str, **context):
    """Book form with the author and genre choices."""
    s = db_session()
    context.setdefault("selected_genre_ids", [])
    return render_template(
        "catalog/book_form.html",
        title=title,
        authors=list_authors(s),
        genres=list_genres(s),
        **context,
    )


# ---------- Home ----------
@bp.get("/")
def index():
    s = db_session()
    return render_template("catalog/index.html", title="Local Library Home", **catalog_counts(s))


# ---------- List ----------
@bp.get("/books")
def book_list():
    s = db_session()
    return render_template("catalog/book_list.html", title="Book List", book_list=list_books(s))


# ---------- Create ----------
@bp.get("/book/create")
def book_create_get():
    return _render_form("Create Book")


@bp.post("/book/create")
def book_create_post():
    s = db_session()
    payload = _book_payload()

    errors = validate_book_payload(s, payload)
    if errors:
        return _render_form(
            "Create Book",
            book=book_from_payload(payload),
            selected_genre_ids=selected_genre_ids(payload),
            errors=errors,
        )

    book = create_book(s, payload)
    s.commit()

    flash("Book created.", "success")
    return redirect(book.url)


# ---------- Detail ----------
@bp.get("/book/<int:book_id>")
def book_detail(book_id: int):
    s = db_session()
    book = get_or_404(s, Book, book_id, "Book not found")

    return render_template(
        "catalog/book_detail.html",
        title=book.title,
        book=book,
        book_instances=instances_of_book(s, book_id),
    )


# ---------- Delete ----------
@bp.get("/book/<int:book_id>/delete")
def book_delete_get(book_id: int):
    s = db_session()
    book = find_record(s, Book, book_id)
    if not book:
        return redirect(url_for("books.book_list"))

    return render_template(
        "catalog/book_delete.html",
        title="Delete Book",
        book=book,
        book_instances=instances_of_book(s, book_id),
    )


@bp.post("/book/<int:book_id>/delete")
def book_delete_post(book_id: int):
    s = db_session()
    book = find_record(s, Book, book_id)
    if not book:
        return redirect(url_for("books.book_list"))

    try:
        delete_book(s, book)
    except ValueError:
        # Book has copies. Render in the same way as for GET.
        return render_template(
            "catalog/book_delete.html",
            title="Delete Book",
            book=book,
            book_instances=instances_of_book(s, book_id),
        )
    s.commit()

    flash("Book deleted.", "success")
    return redirect(url_for("books.book_list"))


# ---------- Update ----------
@bp.get("/book/<int:book_id>/update")
def book_update_get(book_id: int):
    s = db_session()
    book = get_or_404(s, Book, book_id, "Book not found")

    return _render_form(
        "Update Book",
        book=book,
        selected_genre_ids=[g.id for g in book.genres],
    )


@bp.post("/book/<int:book_id>/update")
def book_update_post(book_id: int):
    s = db_session()
    book = get_or_404(s, Book, book_id, "Book not found")

    payload = _book_payload()
    errors = validate_book_payload(s, payload)
    if errors:
        return _render_form(
            "Update Book",
            book=book_from_payload(payload, book_id=book_id),
            selected_genre_ids=selected_genre_ids(payload),
            errors=errors,
        )

    update_book(s, book, payload)
    s.commit()

    flash("Book updated.", "success")
    return redirect(book.url)

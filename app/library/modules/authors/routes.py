from __future__ import annotations

from flask import Blueprint, flash, redirect, render_template, request, url_for

from app.library.db import db_session, find_record, get_or_404
from app.library.modules.authors.models import Author
from app.library.modules.authors.service import (
    author_from_payload,
    books_by_author,
    create_author,
    delete_author,
    list_authors,
    update_author,
    validate_author_payload,
)

bp = Blueprint("authors", __name__)


def _author_payload() -> dict:
    return {
        "first_name": request.form.get("first_name"),
        "family_name": request.form.get("family_name"),
        "date_of_birth": request.form.get("date_of_birth"),
        "date_of_death": request.form.get("date_of_death"),
    }


# ---------- List ----------
@bp.get("/authors")
def author_list():
    s = db_session()
    return render_template("catalog/author_list.html", title="Author List", author_list=list_authors(s))


# ---------- Create ----------
@bp.get("/author/create")
def author_create_get():
    return render_template("catalog/author_form.html", title="Create Author")


@bp.post("/author/create")
def author_create_post():
    s = db_session()
    payload = _author_payload()

    errors = validate_author_payload(payload)
    if errors:
        return render_template(
            "catalog/author_form.html",
            title="Create Author",
            author=author_from_payload(payload),
            errors=errors,
        )

    author = create_author(s, payload)
    s.commit()

    flash("Author created.", "success")
    return redirect(author.url)


# ---------- Detail ----------
@bp.get("/author/<int:author_id>")
def author_detail(author_id: int):
    s = db_session()
    author = get_or_404(s, Author, author_id, "Author not found")

    return render_template(
        "catalog/author_detail.html",
        title="Author Detail",
        author=author,
        author_books=books_by_author(s, author_id),
    )


# ---------- Delete ----------
@bp.get("/author/<int:author_id>/delete")
def author_delete_get(author_id: int):
    s = db_session()
    author = find_record(s, Author, author_id)
    if not author:
        return redirect(url_for("authors.author_list"))

    return render_template(
        "catalog/author_delete.html",
        title="Delete Author",
        author=author,
        author_books=books_by_author(s, author_id),
    )


@bp.post("/author/<int:author_id>/delete")
def author_delete_post(author_id: int):
    s = db_session()
    author = find_record(s, Author, author_id)
    if not author:
        return redirect(url_for("authors.author_list"))

    try:
        delete_author(s, author)
    except ValueError:
        # Author has books. Render in the same way as for GET.
        return render_template(
            "catalog/author_delete.html",
            title="Delete Author",
            author=author,
            author_books=books_by_author(s, author_id),
        )
    s.commit()

    flash("Author deleted.", "success")
    return redirect(url_for("authors.author_list"))


# ---------- Update ----------
@bp.get("/author/<int:author_id>/update")
def author_update_get(author_id: int):
    s = db_session()
    author = get_or_404(s, Author, author_id, "Author not found")
    return render_template("catalog/author_form.html", title="Update Author", author=author)


@bp.post("/author/<int:author_id>/update")
def author_update_post(author_id: int):
    s = db_session()
    author = get_or_404(s, Author, author_id, "Author not found")

    payload = _author_payload()
    errors = validate_author_payload(payload)
    if errors:
        return render_template(
            "catalog/author_form.html",
            title="Update Author",
            author=author_from_payload(payload, author_id=author_id),
            errors=errors,
        )

    update_author(s, author, payload)
    s.commit()

    flash("Author updated.", "success")
    return redirect(author.url)

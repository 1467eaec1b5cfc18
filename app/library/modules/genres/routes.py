from __future__ import annotations

from flask import Blueprint, flash, redirect, render_template, request, url_for

from app.library.db import db_session, find_record, get_or_404
from app.library.modules.genres.models import Genre
from app.library.modules.genres.service import (
    books_in_genre,
    create_genre,
    delete_genre,
    find_genre_by_name,
    list_genres,
    update_genre,
    validate_genre_payload,
)
from app.library.utils import clean

bp = Blueprint("genres", __name__)


@bp.get("/genres")
def genre_list():
    s = db_session()
    return render_template("catalog/genre_list.html", title="Genre List", genre_list=list_genres(s))


@bp.get("/genre/create")
def genre_create_get():
    return render_template("catalog/genre_form.html", title="Create Genre")


@bp.post("/genre/create")
def genre_create_post():
    s = db_session()
    payload = {"name": request.form.get("name")}

    errors = validate_genre_payload(payload)
    if errors:
        return render_template(
            "catalog/genre_form.html",
            title="Create Genre",
            genre=Genre(name=clean(payload["name"])),
            errors=errors,
        )

    # Same name (ignoring case) already catalogued: go to it instead of duplicating.
    existing = find_genre_by_name(s, payload["name"])
    if existing:
        return redirect(existing.url)

    genre = create_genre(s, payload)
    s.commit()

    flash("Genre created.", "success")
    return redirect(genre.url)


@bp.get("/genre/<int:genre_id>")
def genre_detail(genre_id: int):
    s = db_session()
    genre = get_or_404(s, Genre, genre_id, "Genre not found")

    return render_template(
        "catalog/genre_detail.html",
        title="Genre Detail",
        genre=genre,
        genre_books=books_in_genre(s, genre_id),
    )


@bp.get("/genre/<int:genre_id>/delete")
def genre_delete_get(genre_id: int):
    s = db_session()
    genre = find_record(s, Genre, genre_id)
    if not genre:
        return redirect(url_for("genres.genre_list"))

    return render_template(
        "catalog/genre_delete.html",
        title="Delete Genre",
        genre=genre,
        genre_books=books_in_genre(s, genre_id),
    )


@bp.post("/genre/<int:genre_id>/delete")
def genre_delete_post(genre_id: int):
    s = db_session()
    genre = find_record(s, Genre, genre_id)
    if not genre:
        return redirect(url_for("genres.genre_list"))

    try:
        delete_genre(s, genre)
    except ValueError:
        return render_template(
            "catalog/genre_delete.html",
            title="Delete Genre",
            genre=genre,
            genre_books=books_in_genre(s, genre_id),
        )
    s.commit()

    flash("Genre deleted.", "success")
    return redirect(url_for("genres.genre_list"))


@bp.get("/genre/<int:genre_id>/update")
def genre_update_get(genre_id: int):
    s = db_session()
    genre = get_or_404(s, Genre, genre_id, "Genre not found")
    return render_template("catalog/genre_form.html", title="Update Genre", genre=genre)


@bp.post("/genre/<int:genre_id>/update")
def genre_update_post(genre_id: int):
    s = db_session()
    genre = get_or_404(s, Genre, genre_id, "Genre not found")

    payload = {"name": request.form.get("name")}
    errors = validate_genre_payload(payload)
    if not errors and find_genre_by_name(s, payload["name"], exclude_id=genre_id):
        errors.append("Another genre already has this name")
    if errors:
        return render_template(
            "catalog/genre_form.html",
            title="Update Genre",
            genre=Genre(id=genre_id, name=clean(payload["name"])),
            errors=errors,
        )

    update_genre(s, genre, payload)
    s.commit()

    flash("Genre updated.", "success")
    return redirect(genre.url)

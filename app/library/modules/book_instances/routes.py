from __future__ import annotations

from flask import Blueprint, flash, redirect, render_template, request, url_for

from app.library.db import db_session, find_record, get_or_404
from app.library.modules.book_instances.models import BookInstance
from app.library.modules.book_instances.service import (
    VALID_STATUSES,
    book_instance_from_payload,
    create_book_instance,
    delete_book_instance,
    list_book_instances,
    update_book_instance,
    validate_book_instance_payload,
)
from app.library.modules.books.service import list_books

bp = Blueprint("book_instances", __name__)


def _book_instance_payload() -> dict:
    return {
        "book": request.form.get("book"),
        "imprint": request.form.get("imprint"),
        "status": request.form.get("status"),
        "due_back": request.form.get("due_back"),
    }


def _render_form(title: str, **context):
    s = db_session()
    return render_template(
        "catalog/bookinstance_form.html",
        title=title,
        book_list=list_books(s),
        statuses=VALID_STATUSES,
        **context,
    )


@bp.get("/bookinstances")
def bookinstance_list():
    s = db_session()
    return render_template(
        "catalog/bookinstance_list.html",
        title="Book Instance List",
        bookinstance_list=list_book_instances(s),
    )


@bp.get("/bookinstance/create")
def bookinstance_create_get():
    return _render_form("Create BookInstance")


@bp.post("/bookinstance/create")
def bookinstance_create_post():
    s = db_session()
    payload = _book_instance_payload()

    errors = validate_book_instance_payload(s, payload)
    if errors:
        return _render_form(
            "Create BookInstance",
            bookinstance=book_instance_from_payload(payload),
            errors=errors,
        )

    instance = create_book_instance(s, payload)
    s.commit()

    flash("Book copy created.", "success")
    return redirect(instance.url)


@bp.get("/bookinstance/<int:instance_id>")
def bookinstance_detail(instance_id: int):
    s = db_session()
    instance = get_or_404(s, BookInstance, instance_id, "Book copy not found")

    return render_template(
        "catalog/bookinstance_detail.html",
        title=f"Book: {instance.book.title}",
        bookinstance=instance,
    )


@bp.get("/bookinstance/<int:instance_id>/delete")
def bookinstance_delete_get(instance_id: int):
    s = db_session()
    instance = find_record(s, BookInstance, instance_id)
    if not instance:
        return redirect(url_for("book_instances.bookinstance_list"))

    return render_template(
        "catalog/bookinstance_delete.html",
        title="Delete BookInstance",
        bookinstance=instance,
    )


@bp.post("/bookinstance/<int:instance_id>/delete")
def bookinstance_delete_post(instance_id: int):
    s = db_session()
    instance = find_record(s, BookInstance, instance_id)
    if instance:
        delete_book_instance(s, instance)
        s.commit()
        flash("Book copy deleted.", "success")
    return redirect(url_for("book_instances.bookinstance_list"))


@bp.get("/bookinstance/<int:instance_id>/update")
def bookinstance_update_get(instance_id: int):
    s = db_session()
    instance = get_or_404(s, BookInstance, instance_id, "Book copy not found")
    return _render_form("Update BookInstance", bookinstance=instance)


@bp.post("/bookinstance/<int:instance_id>/update")
def bookinstance_update_post(instance_id: int):
    s = db_session()
    instance = get_or_404(s, BookInstance, instance_id, "Book copy not found")

    payload = _book_instance_payload()
    errors = validate_book_instance_payload(s, payload)
    if errors:
        return _render_form(
            "Update BookInstance",
            bookinstance=book_instance_from_payload(payload, instance_id=instance_id),
            errors=errors,
        )

    update_book_instance(s, instance, payload)
    s.commit()

    flash("Book copy updated.", "success")
    return redirect(instance.url)

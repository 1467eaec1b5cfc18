from flask import Blueprint

bp = Blueprint("users", __name__)


@bp.get("/")
def users_list():
    return "respond with a resource", 200, {"Content-Type": "text/plain; charset=utf-8"}


@bp.get("/cool/")
def users_cool():
    return "You're so cool", 200, {"Content-Type": "text/plain; charset=utf-8"}

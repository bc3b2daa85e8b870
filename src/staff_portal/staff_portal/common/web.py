from __future__ import annotations

from functools import wraps

from flask import flash, redirect, render_template, session, url_for

from ..core.enums import Role
from ..users.model import Actor


def session_actor() -> Actor:
    return Actor(
        user_id=int(session["user_id"]),
        role=Role(session.get("role")),
        full_name=session.get("name", ""),
    )


def forbidden():
    current_user = {"full_name": session.get("name"), "role": session.get("role")}
    return render_template("403.html", current_user=current_user), 403


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            flash("Please sign in to continue.", "warning")
            return redirect(url_for("login"))
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: Role):
    allowed = {r.value for r in roles}

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return redirect(url_for("login"))
            if session.get("role") not in allowed:
                return forbidden()
            return view(*args, **kwargs)

        return wrapper

    return decorator

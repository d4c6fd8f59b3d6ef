from functools import wraps

from flask import flash, g, redirect, url_for


def login_required(fn):
    """Reject anonymous visitors; pass the session identity in as ``identity``."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        identity = g.identity
        if not identity.is_authenticated:
            flash("Please login first")
            return redirect(url_for("auth.login_form"))
        kwargs["identity"] = identity
        return fn(*args, **kwargs)

    return wrapper


def role_required(*roles, message="Insufficient permission", endpoint="views.home"):
    """Only let *roles* through; everyone else is flashed *message* and sent to *endpoint*."""
    def deco(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            if g.identity.role not in roles:
                flash(message, "warning")
                return redirect(url_for(endpoint))
            return fn(*args, **kwargs)

        return wrapper

    return deco

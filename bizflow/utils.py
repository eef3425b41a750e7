import uuid
from datetime import datetime, timezone
from functools import wraps

from flask import abort
from flask_login import current_user

from bizflow.errors import InvalidRequestError


def utcnow() -> datetime:
    # Naive UTC, matching what the DateTime columns store
    return datetime.now(timezone.utc).replace(tzinfo=None)


def admin_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if not current_user.is_authenticated:
            abort(401)
        if not getattr(current_user, "is_admin", False):
            abort(403)
        return fn(*args, **kwargs)
    return wrapper


def new_payment_reference(prefix: str = "SUB") -> str:
    return f"{prefix}_{uuid.uuid4().hex}"


def validate_or_400(form):
    """Run a Flask-WTF form against the current request body or raise InvalidRequestError."""
    if not form.validate_on_submit():
        raise InvalidRequestError("Invalid request parameters", errors=form.errors)
    return form

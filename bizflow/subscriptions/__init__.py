from flask import Blueprint

subscription_bp = Blueprint("subscriptions", __name__, url_prefix="/subscriptions")

from . import routes  # noqa: E402,F401

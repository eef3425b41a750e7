from flask import Blueprint, current_app, jsonify

from bizflow.extensions import db, login_manager
from bizflow.models import User

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")

from . import routes  # noqa: E402,F401  (ensures routes are imported)


@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, user_id)


@login_manager.request_loader
def load_user_from_request(request):
    # The identity provider has authenticated the caller; trust its user id.
    user_id = (request.headers.get(current_app.config["AUTH_USER_ID_HEADER"]) or "").strip()
    if not user_id:
        return None
    return db.session.get(User, user_id)


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({"success": False, "error": "unauthorized", "message": "Authentication required"}), 401

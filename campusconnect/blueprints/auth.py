"""
Identity wiring.

Login, logout and identity issuance belong to the upstream auth provider.
It forwards the authenticated identity in X-Auth-User-* headers; the request
loader below turns those into a User (creating or refreshing the row).

GET /api/auth/user   – the current user and their profile (401 if anonymous)
"""
from flask import Blueprint, current_app, jsonify
from flask_login import login_required, current_user

from campusconnect.extensions import login_manager
from campusconnect.utils.profile_service import ensure_user
from campusconnect.utils.serializers import serialize_profile, serialize_user

auth_bp = Blueprint("auth", __name__)

_HEADER_FIELDS = {
    "Id":         "id",
    "Email":      "email",
    "First-Name": "first_name",
    "Last-Name":  "last_name",
    "Avatar":     "profile_image_url",
}


@login_manager.request_loader
def load_user_from_request(req):
    if not current_app.config.get("TRUST_IDENTITY_HEADERS"):
        return None
    prefix = current_app.config.get("IDENTITY_HEADER_PREFIX", "X-Auth-User-")
    identity = {
        key: (req.headers.get(prefix + suffix) or "").strip() or None
        for suffix, key in _HEADER_FIELDS.items()
    }
    if not identity["id"]:
        return None
    return ensure_user(identity)


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify(message="Unauthorized"), 401


@auth_bp.route("/api/auth/user")
@login_required
def get_current_user():
    data = serialize_user(current_user)
    profile = current_user.profile
    data["profile"] = serialize_profile(profile) if profile else None
    return jsonify(data)

"""
Profiles blueprint.

GET /api/profiles/<user_id>   – a user's profile
PUT /api/profiles/<user_id>   – partial update, creating the profile on first use (self only)
"""
from flask import Blueprint, jsonify
from flask_login import login_required, current_user

from campusconnect.forms.base import bind_json, validate_or_raise
from campusconnect.forms.profiles import ProfileForm
from campusconnect.utils.decorators import self_only
from campusconnect.utils.profile_service import get_profile, upsert_profile
from campusconnect.utils.serializers import serialize_profile

profiles_bp = Blueprint("profiles", __name__)


@profiles_bp.route("/api/profiles/<user_id>")
def show(user_id):
    return jsonify(serialize_profile(get_profile(user_id)))


@profiles_bp.route("/api/profiles/<user_id>", methods=["PUT"])
@login_required
@self_only("user_id")
def update(user_id):
    form = validate_or_raise(bind_json(ProfileForm))
    profile = upsert_profile(current_user.id, form.supplied(), actor=current_user)
    return jsonify(serialize_profile(profile))

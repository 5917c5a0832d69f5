"""
Resources & events blueprint.

GET  /api/resources   – study resources, newest first (?category= exact match)
POST /api/resources   – share a resource
GET  /api/events      – events by scheduled date, latest first
POST /api/events      – announce an event
"""
import logging

from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user

from campusconnect.extensions import db
from campusconnect.forms.base import bind_json, validate_or_raise
from campusconnect.forms.campus import EventForm, ResourceForm
from campusconnect.models.event import Event
from campusconnect.models.resource import Resource
from campusconnect.utils import aggregation
from campusconnect.utils.serializers import serialize_event, serialize_resource

log = logging.getLogger(__name__)
campus_bp = Blueprint("campus", __name__)


@campus_bp.route("/api/resources")
def list_resources():
    category = request.args.get("category") or None
    return jsonify(aggregation.list_resources(category=category))


@campus_bp.route("/api/resources", methods=["POST"])
@login_required
def create_resource():
    form = validate_or_raise(bind_json(ResourceForm))
    resource = Resource(
        title       = form.title.data.strip(),
        description = (form.description.data or "").strip() or None,
        category    = form.category.data.strip(),
        file_url    = form.fileUrl.data.strip(),
        author_id   = current_user.id,
    )
    db.session.add(resource)
    db.session.commit()
    log.info("Resource %s [%s] shared by %s", resource.id, resource.category, current_user.id)
    return jsonify(serialize_resource(resource)), 201


@campus_bp.route("/api/events")
def list_events():
    return jsonify(aggregation.list_events())


@campus_bp.route("/api/events", methods=["POST"])
@login_required
def create_event():
    form = validate_or_raise(bind_json(EventForm))
    event = Event(
        title       = form.title.data.strip(),
        description = form.description.data.strip(),
        date        = form.date.data,
        location    = form.location.data.strip(),
        author_id   = current_user.id,
    )
    db.session.add(event)
    db.session.commit()
    log.info("Event %s on %s announced by %s", event.id, event.date.date(), current_user.id)
    return jsonify(serialize_event(event)), 201

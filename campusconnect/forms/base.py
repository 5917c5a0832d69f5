"""
Shared pieces for the JSON API forms.

The API receives JSON bodies, so forms are bound to the decoded object
instead of request.form, and CSRF is off (identity arrives in headers, not
cookies).  Lists arrive as one form value per element.
"""
from datetime import datetime, timezone

from flask import request
from flask_wtf import FlaskForm
from werkzeug.datastructures import ImmutableMultiDict
from wtforms import Field, StringField

from campusconnect.errors import ValidationError


class ApiForm(FlaskForm):
    class Meta:
        csrf = False

    def supplied(self) -> dict:
        """{name: data} for the fields present in the request body."""
        return {f.name: f.data for f in self if f.raw_data}


class TextField(StringField):
    """StringField that refuses non-string JSON values instead of coercing them."""

    def process_formdata(self, valuelist):
        if valuelist:
            # A JSON array arrives as several values
            if len(valuelist) > 1:
                raise ValueError("Expected a string.")
            value = valuelist[0]
            if value is not None and not isinstance(value, str):
                raise ValueError("Expected a string.")
            self.data = value


class StringListField(Field):
    """A JSON array of strings.  Blank entries are dropped; null means empty."""

    def __init__(self, label=None, validators=None, **kwargs):
        kwargs.setdefault("default", list)
        super().__init__(label, validators, **kwargs)

    def process_formdata(self, valuelist):
        if not valuelist:
            return
        values = [v for v in valuelist if v is not None]
        if any(not isinstance(v, str) for v in values):
            raise ValueError("Expected a list of strings.")
        self.data = [v.strip() for v in values if v.strip()]


class IsoDateTimeField(Field):
    """ISO-8601 timestamp; aware values are normalised to naive UTC."""

    def process_formdata(self, valuelist):
        if not valuelist or valuelist[0] is None:
            return
        raw = valuelist[0]
        if len(valuelist) > 1 or not isinstance(raw, str):
            raise ValueError("Not a valid datetime value.")
        raw = raw.strip()
        if raw.endswith(("Z", "z")):
            raw = raw[:-1] + "+00:00"
        try:
            value = datetime.fromisoformat(raw)
        except ValueError:
            raise ValueError("Not a valid datetime value.") from None
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        self.data = value


def bind_json(form_cls):
    """Instantiate *form_cls* from the request's JSON object body."""
    payload = request.get_json(silent=True)
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return form_cls(formdata=ImmutableMultiDict(payload))


def validate_or_raise(form):
    """Validate *form*; raise ValidationError naming the first bad field."""
    if form.validate():
        return form
    for field in form:
        if field.errors:
            raise ValidationError(field.errors[0], field=field.name)
    raise ValidationError()

# routes/forms.py: request bodies validated at the boundary
from flask import request
from flask_wtf import FlaskForm
from werkzeug.datastructures import ImmutableMultiDict
from wtforms import StringField
from wtforms.validators import DataRequired, InputRequired, Length, Optional

from errors import BadRequest


def _text(value):
    return "" if value is None else str(value)


def _stripped(value):
    return "" if value is None else str(value).strip()


class ApiForm(FlaskForm):
    """JSON body form; CSRF is off because the session cookie is SameSite=Lax."""

    class Meta:
        csrf = False

    def first_error(self):
        for field in self:
            if field.errors:
                return field.errors[0]
        return None


class CredentialsForm(ApiForm):
    username = StringField(
        filters=[_stripped],
        validators=[DataRequired(message="Missing username or password"), Length(max=80)],
    )
    password = StringField(
        filters=[_text],
        validators=[InputRequired(message="Missing username or password")],
    )


class SignupForm(CredentialsForm):
    fullName = StringField(filters=[_stripped], validators=[Optional(), Length(max=120)])


class UploadForm(ApiForm):
    # bound from the body's "data" key; Form.data is taken by WTForms
    image = StringField(filters=[_stripped], validators=[DataRequired(message="Missing base64 data")])
    filename = StringField(filters=[_stripped], validators=[Optional(), Length(max=255)])


def json_body():
    """Request body as a dict; an empty body counts as {}."""
    if not request.get_data(cache=True):
        return {}
    payload = request.get_json(force=True, silent=True)
    if not isinstance(payload, dict):
        raise BadRequest("Invalid JSON body")
    return payload


def load_form(form_class, payload=None):
    """Bind and validate ``form_class`` against the JSON body, raising on the first bad field."""
    if payload is None:
        payload = json_body()
    payload = {k: v for k, v in payload.items() if v is not None}
    form = form_class(formdata=ImmutableMultiDict(payload))
    if not form.validate():
        raise BadRequest(form.first_error())
    return form

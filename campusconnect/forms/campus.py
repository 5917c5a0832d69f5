from wtforms.validators import DataRequired, Length, Optional

from campusconnect.forms.base import ApiForm, IsoDateTimeField, TextField


class ResourceForm(ApiForm):
    title       = TextField("Title",       validators=[DataRequired(), Length(1, 200)])
    description = TextField("Description", validators=[Optional(), Length(0, 2000)])
    category    = TextField("Category",    validators=[DataRequired(), Length(1, 100)])
    fileUrl     = TextField("File URL",    validators=[DataRequired(), Length(1, 1000)])


class EventForm(ApiForm):
    title       = TextField("Title",       validators=[DataRequired(), Length(1, 200)])
    description = TextField("Description", validators=[DataRequired(), Length(1, 5000)])
    date        = IsoDateTimeField("Date", validators=[DataRequired()])
    location    = TextField("Location",    validators=[DataRequired(), Length(1, 200)])

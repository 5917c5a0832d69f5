from wtforms.validators import AnyOf, DataRequired, Length, Optional

from campusconnect.forms.base import ApiForm, StringListField, TextField
from campusconnect.models.feed import POST_TYPES


class PostForm(ApiForm):
    content   = TextField("Content", validators=[DataRequired(), Length(1, 5000)])
    type      = TextField("Type", default="text", validators=[Optional(), AnyOf(POST_TYPES)])
    mediaUrls = StringListField("Media URLs")
    tags      = StringListField("Tags")


class CommentForm(ApiForm):
    content = TextField("Comment", validators=[DataRequired(), Length(1, 2000)])

from wtforms.validators import Length, Optional, StopValidation

from campusconnect.forms.base import ApiForm, TextField
from campusconnect.models.profile import PROFILE_ROLES


class ProfileForm(ApiForm):
    """Partial profile update; every field is optional."""
    bio     = TextField("Bio",     validators=[Optional(), Length(0, 2000)])
    college = TextField("College", validators=[Optional(), Length(0, 200)])
    course  = TextField("Course",  validators=[Optional(), Length(0, 200)])
    year    = TextField("Year",    validators=[Optional(), Length(0, 50)])
    role    = TextField("Role")

    def validate_role(self, field):
        # Absent leaves the role unchanged; a blank value is rejected
        if field.raw_data and field.data not in PROFILE_ROLES:
            raise StopValidation(f"Role must be one of: {', '.join(PROFILE_ROLES)}")

from flask_wtf import FlaskForm
from wtforms import StringField, TextAreaField
from wtforms.validators import DataRequired


def _as_text(value):
    return value if value is None else str(value)


class ResumeRequestForm(FlaskForm):
    """Submit payload; accepts JSON bodies as well as form posts."""

    class Meta:
        csrf = False

    name = StringField("Full Name", validators=[DataRequired()], filters=[_as_text])
    email = StringField("Email", validators=[DataRequired()], filters=[_as_text])
    reason = TextAreaField("Reason", validators=[DataRequired()], filters=[_as_text])

    def missing_fields(self):
        missing = []
        for name in ("name", "email", "reason"):
            data = self[name].data
            if data is None or not data.strip():
                missing.append(name)
        return missing

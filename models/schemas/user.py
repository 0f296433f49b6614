from marshmallow import Schema, fields, validates, ValidationError, EXCLUDE


def _not_blank(value, field_name):
    if not value or not value.strip():
        raise ValidationError(f"{field_name} must not be empty.")
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        raise ValidationError(f"{field_name} must be valid UTF-8.")


class CredentialsSchema(Schema):
    """Body of signup and login. Email is kept exactly as sent."""

    class Meta:
        unknown = EXCLUDE

    email = fields.String(required=True)
    password = fields.String(required=True, load_only=True)

    @validates("email")
    def validate_email(self, value, **kwargs):
        _not_blank(value, "Email")

    @validates("password")
    def validate_password(self, value, **kwargs):
        _not_blank(value, "Password")


class UserOutSchema(Schema):
    id = fields.String(allow_none=False)
    email = fields.String(allow_none=False)
    created_at = fields.DateTime()

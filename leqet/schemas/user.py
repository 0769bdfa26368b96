from marshmallow import fields, validate, pre_load, EXCLUDE

from leqet.extensions import ma
from leqet.roles import ROLE_VALUES


class UserSchema(ma.Schema):
    """Admin-facing view of a user with assignment ids."""

    id = fields.Integer()
    name = fields.String(attribute="full_name")
    email = fields.String()
    role = fields.String()
    avatar = fields.String(allow_none=True)
    isActivated = fields.Boolean(attribute="is_activated")
    joinDate = fields.DateTime(attribute="created_at")
    trainerId = fields.Integer(attribute="trainer_id", allow_none=True)
    nutritionistId = fields.Integer(attribute="nutritionist_id", allow_none=True)


class InviteUserSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    full_name = fields.String(required=True, validate=validate.Length(min=1, max=150))
    email = fields.Email(required=True)
    role = fields.String(required=True, validate=validate.OneOf(ROLE_VALUES, error="Invalid role"))

    @pre_load
    def strip_strings(self, data, **kwargs):
        if not isinstance(data, dict):
            return data
        cleaned = dict(data)
        for key in ("full_name", "email", "role"):
            if isinstance(cleaned.get(key), str):
                cleaned[key] = cleaned[key].strip()
        if isinstance(cleaned.get("email"), str):
            cleaned["email"] = cleaned["email"].lower()
        return cleaned


class UpdateUserSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    role = fields.String(validate=validate.OneOf(ROLE_VALUES, error="Invalid role"))
    trainerId = fields.Integer(allow_none=True, strict=False)
    nutritionistId = fields.Integer(allow_none=True, strict=False)

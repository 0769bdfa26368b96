from marshmallow import fields, validate, EXCLUDE, pre_load

from leqet.extensions import ma
from leqet.models.schedules import SESSION_TYPES


def _blank_to_none(data, keys):
    cleaned = dict(data)
    for key in keys:
        value = cleaned.get(key)
        if isinstance(value, str):
            value = value.strip()
            cleaned[key] = value or None
    return cleaned


class ProfileSchema(ma.Schema):
    """Body of PUT /api/members/<id>/profile (snake_case keys)."""

    class Meta:
        unknown = EXCLUDE

    age = fields.Integer(allow_none=True, strict=False, validate=validate.Range(min=0, max=150))
    gender = fields.String(allow_none=True)
    weight_kg = fields.Float(allow_none=True, validate=validate.Range(min=0))
    height_cm = fields.Float(allow_none=True, validate=validate.Range(min=0))
    goal = fields.String(allow_none=True)
    activity_level = fields.String(allow_none=True)
    trainer_intake = fields.Dict(allow_none=True)
    nutrition_intake = fields.Dict(allow_none=True)
    is_private = fields.Boolean(allow_none=True)
    bmr = fields.Float(allow_none=True)
    tdee = fields.Float(allow_none=True)
    target_calories = fields.Float(allow_none=True)
    weekly_calorie_goal = fields.Float(allow_none=True, validate=validate.Range(min=0))
    weekly_workout_minutes = fields.Float(allow_none=True, validate=validate.Range(min=0))
    daily_steps_goal = fields.Integer(allow_none=True, strict=False, validate=validate.Range(min=0))
    daily_water_liters = fields.Float(allow_none=True, validate=validate.Range(min=0))

    @pre_load
    def blanks_to_none(self, data, **kwargs):
        if not isinstance(data, dict):
            return data
        return _blank_to_none(data, [name for name in self.fields if name not in ("trainer_intake", "nutrition_intake")])


class CheckInSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    adherence = fields.Float(allow_none=True, validate=validate.Range(min=0, max=100))
    fatigue = fields.Float(allow_none=True, validate=validate.Range(min=0, max=10))
    pain = fields.Float(allow_none=True, validate=validate.Range(min=0, max=10))
    weightKg = fields.Float(allow_none=True, attribute="weight_kg", validate=validate.Range(min=0, min_inclusive=False))
    notes = fields.String(allow_none=True)

    @pre_load
    def blanks_to_none(self, data, **kwargs):
        if not isinstance(data, dict):
            return data
        return _blank_to_none(data, ("adherence", "fatigue", "pain", "weightKg", "notes"))


class ScheduleSessionSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    member_id = fields.Integer(required=True, strict=False, validate=validate.Range(min=1))
    session_type = fields.String(
        required=True,
        validate=validate.OneOf(SESSION_TYPES, error="Valid session_type is required"),
    )
    session_date = fields.Date(required=True)
    session_time = fields.Time(required=True)


class FoodSchema(ma.Schema):
    """Body of POST /api/foods; per-100g values, negatives clamp to zero."""

    class Meta:
        unknown = EXCLUDE

    name = fields.String(required=True, validate=validate.Length(min=1, max=200))
    name_amharic = fields.String(allow_none=True)
    category = fields.String(allow_none=True)
    calories = fields.Float(load_default=0)
    protein = fields.Float(load_default=0)
    carbs = fields.Float(load_default=0)
    fat = fields.Float(load_default=0)
    fiber = fields.Float(allow_none=True)

    @pre_load
    def clean(self, data, **kwargs):
        if not isinstance(data, dict):
            return data
        cleaned = _blank_to_none(data, ("name", "name_amharic", "category"))
        if cleaned.get("name") is None:
            cleaned.pop("name", None)
        for key in ("calories", "protein", "carbs", "fat", "fiber"):
            value = cleaned.get(key)
            if value in (None, ""):
                cleaned.pop(key, None)
                continue
            try:
                cleaned[key] = max(0.0, float(value))
            except (TypeError, ValueError):
                pass
        return cleaned

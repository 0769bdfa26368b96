from .user import UserSchema, InviteUserSchema, UpdateUserSchema
from .member import ProfileSchema, CheckInSchema, ScheduleSessionSchema, FoodSchema

__all__ = [
    "UserSchema", "InviteUserSchema", "UpdateUserSchema",
    "ProfileSchema", "CheckInSchema", "ScheduleSessionSchema", "FoodSchema",
]

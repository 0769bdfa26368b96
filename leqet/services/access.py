from leqet.extensions import db
from leqet.models import User, TrainerAssignment, NutritionistAssignment
from leqet.roles import Role


class AccessDenied(Exception):
    """Raised when a user may not act on a member's data."""

    def __init__(self, msg="Forbidden"):
        super().__init__(msg)
        self.msg = msg


def is_assigned_trainer(trainer_id, member_id):
    return db.session.query(TrainerAssignment.member_id).filter_by(
        member_id=member_id, trainer_id=trainer_id
    ).first() is not None


def is_assigned_nutritionist(nutritionist_id, member_id):
    return db.session.query(NutritionistAssignment.member_id).filter_by(
        member_id=member_id, nutritionist_id=nutritionist_id
    ).first() is not None


def can_view_member(user, member_id):
    """Self, any assigned coach, or an admin."""
    role = Role.parse(user.role)
    if role is Role.MEMBER:
        return user.id == member_id
    if role is Role.TRAINER:
        return is_assigned_trainer(user.id, member_id)
    if role is Role.NUTRITIONIST:
        return is_assigned_nutritionist(user.id, member_id)
    return role is Role.ADMIN


def can_access_diet(user, member_id):
    """Self, the assigned nutritionist, or an admin."""
    role = Role.parse(user.role)
    if role is Role.MEMBER:
        return user.id == member_id
    if role is Role.NUTRITIONIST:
        return is_assigned_nutritionist(user.id, member_id)
    return role is Role.ADMIN


def can_access_workout(user, member_id):
    """Self, the assigned trainer, or an admin."""
    role = Role.parse(user.role)
    if role is Role.MEMBER:
        return user.id == member_id
    if role is Role.TRAINER:
        return is_assigned_trainer(user.id, member_id)
    return role is Role.ADMIN


def can_log_for_member(user, member_id):
    """Members may only log for themselves; staff may log on a member's behalf."""
    if Role.parse(user.role) is Role.MEMBER:
        return user.id == member_id
    return can_view_member(user, member_id)


def ensure(allowed, msg="Forbidden"):
    if not allowed:
        raise AccessDenied(msg)


def get_member_or_none(member_id):
    member = db.session.get(User, member_id)
    if member is None or member.role != Role.MEMBER.value:
        return None
    return member

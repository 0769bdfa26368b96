from leqet.extensions import db
from leqet.models import Notification, User, TrainerAssignment, NutritionistAssignment
from leqet.roles import Role


def plan_label(plan_type):
    return "diet plan" if plan_type == "diet" else "workout plan"


def _assigned_coach(plan_type, member_id):
    if plan_type == "workout":
        row = TrainerAssignment.query.filter_by(member_id=member_id).first()
        return row.trainer_id if row else None
    row = NutritionistAssignment.query.filter_by(member_id=member_id).first()
    return row.nutritionist_id if row else None


def notify_plan_message(message, sender_id):
    """Queue notifications for a new plan message; the caller commits.

    A member's message goes to the coach assigned for that plan type, a staff
    message goes to the member. Every other admin always gets an overview
    notification.
    """
    label = plan_label(message.plan_type)
    notifications = []

    if message.sender_role == Role.MEMBER.value:
        coach_id = _assigned_coach(message.plan_type, message.member_id)
        if coach_id:
            notifications.append(Notification(
                user_id=coach_id, message=f"New message from member about their {label}",
            ))
    else:
        notifications.append(Notification(
            user_id=message.member_id, message=f"New message about your {label}",
        ))

    admins = User.query.filter(User.role == Role.ADMIN.value, User.id != sender_id).all()
    for admin in admins:
        notifications.append(Notification(
            user_id=admin.id,
            message=f"New {message.plan_type} plan message for member #{message.member_id}",
        ))

    db.session.add_all(notifications)
    return notifications

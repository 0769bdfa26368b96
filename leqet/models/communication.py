from datetime import datetime
from leqet.extensions import db

PLAN_TYPES = ("diet", "workout")


class PlanMessage(db.Model):
    __tablename__ = "member_plan_messages"

    id = db.Column(db.Integer, primary_key=True)
    member_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    coach_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    sender_role = db.Column(
        db.String(20),
        db.CheckConstraint("sender_role IN ('member','trainer','nutritionist','admin')"),
        nullable=False,
    )
    plan_type = db.Column(
        db.String(10),
        db.CheckConstraint("plan_type IN ('diet','workout')"),
        nullable=False,
    )
    message = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    member = db.relationship("User", foreign_keys=[member_id], back_populates="plan_messages")

    __table_args__ = (
        db.Index("idx_plan_messages_thread", "member_id", "plan_type", "created_at"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "member_id": self.member_id,
            "coach_id": self.coach_id,
            "sender_role": self.sender_role,
            "plan_type": self.plan_type,
            "message": self.message,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class Notification(db.Model):
    __tablename__ = "notifications"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    message = db.Column(db.Text, nullable=False)
    is_read = db.Column(db.Boolean, default=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    user = db.relationship("User", back_populates="notifications")

    def mark_as_read(self):
        """Mark notification as read"""
        self.is_read = True

    def to_dict(self):
        return {
            "id": self.id,
            "message": self.message,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "isRead": bool(self.is_read),
        }


class TrainerFeedback(db.Model):
    __tablename__ = "trainer_feedback"

    id = db.Column(db.Integer, primary_key=True)
    trainer_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    member_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    content = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)


class NutritionistFeedback(db.Model):
    __tablename__ = "nutritionist_feedback"

    id = db.Column(db.Integer, primary_key=True)
    nutritionist_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    member_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    content = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

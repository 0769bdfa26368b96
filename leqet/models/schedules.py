from datetime import datetime
from leqet.extensions import db

SESSION_TYPES = ("personal", "online", "group")
SESSION_STATUSES = ("scheduled", "completed", "cancelled")


class ScheduleSession(db.Model):
    __tablename__ = "schedules"

    id = db.Column(db.Integer, primary_key=True)
    trainer_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    member_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    session_type = db.Column(
        db.String(20),
        db.CheckConstraint("session_type IN ('personal','online','group')"),
        nullable=False,
    )
    session_date = db.Column(db.Date, nullable=False)
    session_time = db.Column(db.Time, nullable=False)
    status = db.Column(
        db.String(20),
        db.CheckConstraint("status IN ('scheduled','completed','cancelled')"),
        default="scheduled",
        nullable=False,
    )
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    trainer = db.relationship("User", foreign_keys=[trainer_id])
    member = db.relationship("User", foreign_keys=[member_id])

    __table_args__ = (
        db.Index("idx_schedules_trainer_date", "trainer_id", "session_date"),
        db.Index("idx_schedules_member_date", "member_id", "session_date"),
    )

    @property
    def starts_at(self):
        return datetime.combine(self.session_date, self.session_time)

    def to_dict(self, counterpart=None):
        data = {
            "id": self.id,
            "trainer_id": self.trainer_id,
            "member_id": self.member_id,
            "session_type": self.session_type,
            "session_date": self.session_date.isoformat(),
            "session_time": self.session_time.strftime("%H:%M:%S"),
            "status": self.status,
        }
        if counterpart == "member":
            data["member_name"] = self.member.full_name if self.member else None
        elif counterpart == "trainer":
            data["trainer_name"] = self.trainer.full_name if self.trainer else None
        return data


class SystemLog(db.Model):
    __tablename__ = "system_logs"

    id = db.Column(db.Integer, primary_key=True)
    log_type = db.Column(
        db.String(20),
        db.CheckConstraint("log_type IN ('info','warning','error','backup')"),
        nullable=False,
        index=True,
    )
    message = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    def to_dict(self):
        return {
            "id": self.id,
            "log_type": self.log_type,
            "message": self.message,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

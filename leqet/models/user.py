from datetime import datetime
from werkzeug.security import generate_password_hash, check_password_hash
from leqet.extensions import db

USERS_TABLE = "users"


class User(db.Model):
    __tablename__ = USERS_TABLE

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    full_name = db.Column(db.String(150), nullable=False)
    password_hash = db.Column(db.String(255), nullable=True)
    role = db.Column(
        db.String(20),
        db.CheckConstraint("role IN ('member','trainer','nutritionist','admin')"),
        nullable=False,
        index=True,
    )
    status = db.Column(
        db.String(20),
        db.CheckConstraint("status IN ('pending','active','suspended')"),
        default="pending",
        nullable=False,
    )
    avatar = db.Column(db.String(255), nullable=True)

    # Activation OTP and password reset code, stored hashed
    activation_otp_hash = db.Column(db.String(255), nullable=True)
    activation_otp_expires = db.Column(db.DateTime, nullable=True)
    activation_otp_attempts = db.Column(db.Integer, default=0, nullable=False)
    reset_token = db.Column(db.String(255), nullable=True)
    reset_token_expires = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    profile = db.relationship("MemberProfile", uselist=False, back_populates="user", cascade="all, delete-orphan")
    goals = db.relationship("MemberGoals", uselist=False, back_populates="member", cascade="all, delete-orphan")
    trainer_assignment = db.relationship(
        "TrainerAssignment",
        foreign_keys="[TrainerAssignment.member_id]",
        uselist=False,
        back_populates="member",
        cascade="all, delete-orphan",
    )
    nutritionist_assignment = db.relationship(
        "NutritionistAssignment",
        foreign_keys="[NutritionistAssignment.member_id]",
        uselist=False,
        back_populates="member",
        cascade="all, delete-orphan",
    )
    notifications = db.relationship("Notification", back_populates="user", lazy="dynamic", cascade="all, delete-orphan")
    meal_logs = db.relationship("MealLog", back_populates="member", lazy="dynamic", cascade="all, delete-orphan")
    workout_logs = db.relationship("WorkoutLog", back_populates="member", lazy="dynamic", cascade="all, delete-orphan")
    weight_logs = db.relationship("WeightLog", back_populates="member", lazy="dynamic", cascade="all, delete-orphan")
    check_ins = db.relationship("CheckIn", back_populates="member", lazy="dynamic", cascade="all, delete-orphan")
    diet_plans = db.relationship(
        "DietPlan", foreign_keys="[DietPlan.member_id]", back_populates="member",
        lazy="dynamic", cascade="all, delete-orphan"
    )
    workout_plans = db.relationship(
        "WorkoutPlan", foreign_keys="[WorkoutPlan.member_id]", back_populates="member",
        lazy="dynamic", cascade="all, delete-orphan"
    )
    plan_messages = db.relationship(
        "PlanMessage", foreign_keys="[PlanMessage.member_id]", back_populates="member",
        lazy="dynamic", cascade="all, delete-orphan"
    )

    __table_args__ = (
        db.Index("idx_users_role_created", "role", "created_at"),
    )

    # Helpers
    def set_password(self, password: str):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    @property
    def is_admin(self):
        return self.role == "admin"

    @property
    def is_member(self):
        return self.role == "member"

    @property
    def is_activated(self):
        return self.status == "active" and self.password_hash is not None

    @property
    def trainer_id(self):
        return self.trainer_assignment.trainer_id if self.trainer_assignment else None

    @property
    def nutritionist_id(self):
        return self.nutritionist_assignment.nutritionist_id if self.nutritionist_assignment else None

    def to_session_dict(self):
        return {
            "id": self.id,
            "full_name": self.full_name,
            "email": self.email,
            "role": self.role,
        }

    def __repr__(self):
        return f"<User {self.email} ({self.role})>"


class TrainerAssignment(db.Model):
    __tablename__ = "trainer_assignments"

    member_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    trainer_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    assigned_at = db.Column(db.DateTime, default=datetime.utcnow)

    member = db.relationship("User", foreign_keys=[member_id], back_populates="trainer_assignment")
    trainer = db.relationship("User", foreign_keys=[trainer_id])


class NutritionistAssignment(db.Model):
    __tablename__ = "nutritionist_assignments"

    member_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    nutritionist_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    assigned_at = db.Column(db.DateTime, default=datetime.utcnow)

    member = db.relationship("User", foreign_keys=[member_id], back_populates="nutritionist_assignment")
    nutritionist = db.relationship("User", foreign_keys=[nutritionist_id])

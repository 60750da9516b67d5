from models.db import db
from utils.timeutil import utcnow


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)

    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    full_name = db.Column(db.String(120), nullable=True)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    role_binding = db.relationship(
        "UserRole", uselist=False, back_populates="user", cascade="all, delete-orphan"
    )

    @property
    def role(self):
        return self.role_binding.role if self.role_binding else "user"


class UserRole(db.Model):
    __tablename__ = "user_roles"

    # one row per user: a user holds exactly one role at a time
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), primary_key=True)
    role = db.Column(db.String(20), nullable=False, default="user")  # user, parking_staff, admin

    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = db.relationship("User", back_populates="role_binding")

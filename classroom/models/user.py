from flask_login import UserMixin
from ..extensions import db
from ..utils import utcnow

class Profile(UserMixin, db.Model):
    __tablename__ = "profiles"
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)
    full_name = db.Column(db.String(128), nullable=False)
    role = db.Column(db.String(16), nullable=False, default="student")
    avatar_url = db.Column(db.String(512))
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    __table_args__ = (
        db.CheckConstraint("role IN ('admin', 'teacher', 'student')", name="ck_profile_role"),
    )

    classes = db.relationship("Classroom", back_populates="teacher")
    memberships = db.relationship("ClassMember", back_populates="student",
                                  cascade="all, delete-orphan")

from ..extensions import db
from ..utils import utcnow

class Classroom(db.Model):
    __tablename__ = "classes"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False)
    section = db.Column(db.String(64))
    description = db.Column(db.Text, nullable=False, default="")
    code = db.Column(db.String(6), unique=True, nullable=False)  # join code, A-Z0-9
    teacher_id = db.Column(db.Integer, db.ForeignKey("profiles.id"), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    teacher = db.relationship("Profile", back_populates="classes")
    members = db.relationship("ClassMember", back_populates="classroom",
                              cascade="all, delete-orphan")
    assignments = db.relationship("Assignment", back_populates="classroom",
                                  cascade="all, delete-orphan")
    announcements = db.relationship("Announcement", back_populates="classroom",
                                    cascade="all, delete-orphan")

class ClassMember(db.Model):
    __tablename__ = "class_members"
    id = db.Column(db.Integer, primary_key=True)
    class_id = db.Column(db.Integer, db.ForeignKey("classes.id"), nullable=False)
    student_id = db.Column(db.Integer, db.ForeignKey("profiles.id"), nullable=False)
    joined_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    __table_args__ = (
        db.UniqueConstraint("class_id", "student_id", name="uq_class_student"),
    )

    classroom = db.relationship("Classroom", back_populates="members")
    student = db.relationship("Profile", back_populates="memberships")

class Announcement(db.Model):
    __tablename__ = "announcements"
    id = db.Column(db.Integer, primary_key=True)
    class_id = db.Column(db.Integer, db.ForeignKey("classes.id"), nullable=False)
    title = db.Column(db.String(200), nullable=False)
    message = db.Column(db.Text, nullable=False)
    created_by = db.Column(db.Integer, db.ForeignKey("profiles.id"), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    classroom = db.relationship("Classroom", back_populates="announcements")

class Lecture(db.Model):
    __tablename__ = "lectures"
    id = db.Column(db.Integer, primary_key=True)
    class_id = db.Column(db.Integer, db.ForeignKey("classes.id"))  # null = visible to everyone
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False, default="")
    video_url = db.Column(db.String(512), nullable=False)
    teacher_id = db.Column(db.Integer, db.ForeignKey("profiles.id"), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

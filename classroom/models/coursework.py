from ..extensions import db
from ..utils import utcnow

class Assignment(db.Model):
    __tablename__ = "assignments"
    id = db.Column(db.Integer, primary_key=True)
    class_id = db.Column(db.Integer, db.ForeignKey("classes.id"), nullable=False)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False, default="")
    due_date = db.Column(db.DateTime, nullable=False)
    max_score = db.Column(db.Float, nullable=False, default=100.0)
    created_by = db.Column(db.Integer, db.ForeignKey("profiles.id"), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    __table_args__ = (
        db.CheckConstraint("max_score > 0", name="ck_assignment_max_score"),
    )

    classroom = db.relationship("Classroom", back_populates="assignments")
    # submissions are removed explicitly in delete_assignment, inside one transaction
    submissions = db.relationship("Submission", back_populates="assignment")

class Submission(db.Model):
    __tablename__ = "submissions"
    id = db.Column(db.Integer, primary_key=True)
    assignment_id = db.Column(db.Integer, db.ForeignKey("assignments.id"), nullable=False)
    student_id = db.Column(db.Integer, db.ForeignKey("profiles.id"), nullable=False)
    content = db.Column(db.Text, nullable=False, default="")
    file_url = db.Column(db.String(512))
    submitted_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    score = db.Column(db.Float)
    feedback = db.Column(db.Text)
    status = db.Column(db.String(16), nullable=False, default="submitted")  # submitted|late|graded
    graded_at = db.Column(db.DateTime)
    graded_by = db.Column(db.Integer, db.ForeignKey("profiles.id"))
    version = db.Column(db.Integer, nullable=False)
    __table_args__ = (
        db.UniqueConstraint("assignment_id", "student_id", name="uq_assignment_student"),
        db.CheckConstraint("status IN ('submitted', 'late', 'graded')", name="ck_submission_status"),
    )
    __mapper_args__ = {"version_id_col": version}

    assignment = db.relationship("Assignment", back_populates="submissions")

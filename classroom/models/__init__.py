from ..extensions import db
from .user import Profile
from .classes import Classroom, ClassMember, Announcement, Lecture
from .coursework import Assignment, Submission

__all__ = [
    "Profile", "Classroom", "ClassMember", "Announcement", "Lecture",
    "Assignment", "Submission",
]

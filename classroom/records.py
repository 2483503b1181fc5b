"""Typed records returned by the data gateway.

Rows never leave :mod:`classroom.gateway` as ORM objects; they are copied into
these frozen dataclasses so the workflow layer works on plain values that stay
valid after the session is closed.
"""
from dataclasses import dataclass, fields
from datetime import datetime
from typing import Optional


class Record:
    @classmethod
    def from_row(cls, row):
        return cls(**{f.name: getattr(row, f.name) for f in fields(cls)})


@dataclass(frozen=True)
class Profile(Record):
    id: int
    email: str
    full_name: str
    role: str
    avatar_url: Optional[str]
    created_at: datetime

    @property
    def initial(self) -> str:
        return (self.full_name or "?")[:1].upper()


@dataclass(frozen=True)
class Class(Record):
    id: int
    name: str
    section: Optional[str]
    description: str
    code: str
    teacher_id: int
    created_at: datetime


@dataclass(frozen=True)
class ClassMember(Record):
    id: int
    class_id: int
    student_id: int
    joined_at: datetime


@dataclass(frozen=True)
class Member:
    """A class membership joined with the student's profile."""
    class_id: int
    joined_at: datetime
    student: Profile


@dataclass(frozen=True)
class Assignment(Record):
    id: int
    class_id: int
    title: str
    description: str
    due_date: datetime
    max_score: float
    created_by: int
    created_at: datetime


@dataclass(frozen=True)
class Submission(Record):
    id: int
    assignment_id: int
    student_id: int
    content: str
    file_url: Optional[str]
    submitted_at: datetime
    score: Optional[float]
    feedback: Optional[str]
    status: str
    graded_at: Optional[datetime]
    graded_by: Optional[int]
    version: int


@dataclass(frozen=True)
class Announcement(Record):
    id: int
    class_id: int
    title: str
    message: str
    created_by: int
    created_at: datetime


@dataclass(frozen=True)
class Lecture(Record):
    id: int
    class_id: Optional[int]
    title: str
    description: str
    video_url: str
    teacher_id: int
    created_at: datetime

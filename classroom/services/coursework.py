"""Assignments, submissions, grading and announcements.

Submission status moves ``submitted|late -> graded``. Which dashboard bucket
an assignment lands in is never stored; :func:`derive_submission_view` works
it out from the assignment, the student's submission (if any) and ``now``.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from ..errors import ConflictError, NotFoundError, OperationError, ValidationError
from ..logger import get_logger
from ..records import Assignment, Class, Member, Submission
from ..utils import parse_datetime, utcnow
from .membership import (classes_for_student, classes_for_teacher,
                         get_class_for_teacher, is_member)

log = get_logger(__name__)

UPCOMING = "upcoming"
PAST_DUE = "past_due"
COMPLETED = "completed"

SUBMITTED = "submitted"
LATE = "late"
GRADED = "graded"

DEFAULT_MAX_SCORE = 100.0

STUDENT_FILTERS = ("all", "pending", "submitted", "graded")
TEACHER_FILTERS = ("all", "active", "past")


@dataclass(frozen=True)
class SubmissionView:
    bucket: str
    badge: str
    tone: str
    score_display: Optional[str] = None
    editable: bool = True


@dataclass(frozen=True)
class SubmissionStats:
    submitted: int
    total: int
    percent: int


@dataclass(frozen=True)
class AssignmentItem:
    assignment: Assignment
    submission: Optional[Submission]
    view: SubmissionView


@dataclass(frozen=True)
class ClassAssignments:
    cls: Class
    items: List[AssignmentItem]


@dataclass(frozen=True)
class AssignmentProgress:
    assignment: Assignment
    stats: SubmissionStats


@dataclass(frozen=True)
class ClassProgress:
    cls: Class
    items: List[AssignmentProgress]
    student_count: int = 0


@dataclass(frozen=True)
class RosterRow:
    member: Member
    submission: Optional[Submission]
    view: SubmissionView


@dataclass(frozen=True)
class AssignmentDetail:
    assignment: Assignment
    cls: Class
    roster: List[RosterRow]
    stats: SubmissionStats


def format_score(score, max_score):
    return f"{score:g} / {max_score:g}"


def submission_status(due_date: datetime, now: datetime) -> str:
    """``late`` only when strictly past the due date."""
    return LATE if now > due_date else SUBMITTED


def due_label(due: datetime, now: Optional[datetime] = None) -> str:
    """Human due-date text; overdue exactly when a submission now would be late."""
    now = now or utcnow()
    if submission_status(due, now) == LATE:
        days = (now.date() - due.date()).days
        if days == 0:
            return "Overdue"
        return f"Overdue by {days} day{'s' if days != 1 else ''}"
    days = (due.date() - now.date()).days
    if days == 0:
        return "Due today"
    if days == 1:
        return "Due tomorrow"
    if days <= 7:
        return f"Due in {days} days"
    return due.strftime("%b %d, %Y")


def derive_submission_view(assignment: Assignment, submission: Optional[Submission],
                           now: datetime) -> SubmissionView:
    if submission is None:
        if submission_status(assignment.due_date, now) == LATE:
            return SubmissionView(PAST_DUE, "Missing", "red")
        return SubmissionView(UPCOMING, "Pending", "gray")
    if submission.status == GRADED:
        score = format_score(submission.score, assignment.max_score) \
            if submission.score is not None else None
        return SubmissionView(COMPLETED, "Graded", "green", score, editable=False)
    if submission.status == LATE:
        return SubmissionView(COMPLETED, "Submitted (Late)", "orange")
    return SubmissionView(COMPLETED, "Submitted", "blue")


def submission_stats(submitted: int, total: int) -> SubmissionStats:
    percent = round(submitted * 100 / total) if total else 0
    return SubmissionStats(submitted, total, percent)


def _require_role(profile, role):
    if profile is None or profile.role != role:
        raise ValidationError(f"Only a {role} can do that")


def _parse_score(value, field="Score"):
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float((value or "").strip())
    except ValueError:
        raise ValidationError(f"{field} must be a number") from None


def _parse_version(value):
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConflictError("This submission changed while you were grading. Reload and try again.") from None


# ---------- assignments ----------
def create_assignment(gateway, teacher, class_id, title, description="",
                      due_date=None, max_score=DEFAULT_MAX_SCORE):
    _require_role(teacher, "teacher")
    get_class_for_teacher(gateway, teacher, class_id)
    title = (title or "").strip()
    if not title:
        raise ValidationError("Please enter an assignment title")
    if not isinstance(due_date, datetime):
        due_date = parse_datetime(due_date)
    if due_date is None:
        raise ValidationError("Please choose a due date")
    if max_score in (None, ""):
        max_score = DEFAULT_MAX_SCORE
    max_score = _parse_score(max_score, "Points")
    if max_score <= 0:
        raise ValidationError("Points must be greater than 0")
    a = gateway.insert(
        "assignments", class_id=class_id, title=title,
        description=(description or "").strip(), due_date=due_date,
        max_score=max_score, created_by=teacher.id,
    )
    log.info("teacher %s created assignment %s in class %s", teacher.id, a.id, class_id)
    return a


def get_assignment_for_teacher(gateway, teacher, assignment_id):
    a = gateway.get("assignments", assignment_id)
    if a is None:
        raise NotFoundError("Assignment not found")
    cls = get_class_for_teacher(gateway, teacher, a.class_id)
    return a, cls


def get_assignment_for_student(gateway, student, assignment_id):
    a = gateway.get("assignments", assignment_id)
    if a is None or not is_member(gateway, student.id, a.class_id):
        raise NotFoundError("Assignment not found")
    return a, gateway.get("classes", a.class_id)


def delete_assignment(gateway, teacher, assignment_id):
    """Remove an assignment and its submissions together; returns submissions removed."""
    _require_role(teacher, "teacher")
    a, _ = get_assignment_for_teacher(gateway, teacher, assignment_id)
    try:
        with gateway.transaction():
            removed = gateway.delete("submissions", eq={"assignment_id": a.id})
            gateway.delete("assignments", eq={"id": a.id})
    except OperationError:
        raise OperationError("Failed to delete assignment") from None
    log.info("teacher %s deleted assignment %s (%d submissions)", teacher.id, a.id, removed)
    return removed


# ---------- submissions ----------
def find_submission(gateway, assignment_id, student_id):
    return gateway.single("submissions",
                          eq={"assignment_id": assignment_id, "student_id": student_id})


def submit(gateway, student, assignment_id, text, now=None, file_url=None):
    _require_role(student, "student")
    text = (text or "").strip()
    if not text:
        raise ValidationError("Please write your answer before submitting")
    a, _ = get_assignment_for_student(gateway, student, assignment_id)
    now = now or utcnow()
    values = {"content": text, "submitted_at": now,
              "status": submission_status(a.due_date, now)}
    if file_url:
        values["file_url"] = file_url
    try:
        sub = gateway.insert("submissions", assignment_id=a.id, student_id=student.id, **values)
        log.info("student %s submitted assignment %s (%s)", student.id, a.id, sub.status)
        return sub
    except ConflictError:
        pass
    existing = find_submission(gateway, a.id, student.id)
    if existing is None:
        raise OperationError("Failed to submit. Please try again.")
    if existing.status == GRADED:
        raise ConflictError("This assignment has been graded and can no longer be changed")
    sub = gateway.update("submissions", existing.id, **values)
    log.info("student %s resubmitted assignment %s (%s)", student.id, a.id, sub.status)
    return sub


def grade(gateway, teacher, submission_id, score, feedback="", expected_version=None, now=None):
    _require_role(teacher, "teacher")
    sub = gateway.get("submissions", submission_id)
    if sub is None:
        raise NotFoundError("Submission not found")
    a, _ = get_assignment_for_teacher(gateway, teacher, sub.assignment_id)
    score = _parse_score(score)
    if not 0 <= score <= a.max_score:
        raise ValidationError(f"Score must be between 0 and {a.max_score:g}")
    expected_version = _parse_version(expected_version)
    if expected_version is not None and expected_version != sub.version:
        raise ConflictError("This submission changed while you were grading. Reload and try again.")
    graded = gateway.update(
        "submissions", sub.id, score=score, feedback=(feedback or "").strip() or None,
        status=GRADED, graded_at=now or utcnow(), graded_by=teacher.id,
    )
    log.info("teacher %s graded submission %s: %g", teacher.id, sub.id, score)
    return graded


# ---------- listings ----------
def _items(assignments, submissions_by_assignment, now):
    return [AssignmentItem(a, submissions_by_assignment.get(a.id),
                           derive_submission_view(a, submissions_by_assignment.get(a.id), now))
            for a in assignments]


def _student_filter(item, which):
    sub = item.submission
    if which == "pending":
        return sub is None
    if which == "submitted":
        return sub is not None and sub.score is None
    if which == "graded":
        return sub is not None and sub.score is not None
    return True


def assignments_for_student(gateway, student, now=None, which="all"):
    now = now or utcnow()
    if which not in STUDENT_FILTERS:
        which = "all"
    classes = classes_for_student(gateway, student.id)
    assignments = gateway.select("assignments", in_={"class_id": [c.id for c in classes]},
                                 order_by="due_date")
    subs = {s.assignment_id: s for s in gateway.select(
        "submissions", eq={"student_id": student.id},
        in_={"assignment_id": [a.id for a in assignments]})}
    groups = []
    for cls in classes:
        items = [i for i in _items([a for a in assignments if a.class_id == cls.id], subs, now)
                 if _student_filter(i, which)]
        if items:
            groups.append(ClassAssignments(cls, items))
    return groups


def upcoming_for_student(gateway, student, now=None, limit=5):
    now = now or utcnow()
    items = [i for g in assignments_for_student(gateway, student, now) for i in g.items
             if i.view.bucket == UPCOMING]
    items.sort(key=lambda i: i.assignment.due_date)
    return items[:limit]


def class_assignments_for_student(gateway, student, class_id, now=None):
    now = now or utcnow()
    assignments = gateway.select("assignments", eq={"class_id": class_id}, order_by="due_date")
    subs = {s.assignment_id: s for s in gateway.select(
        "submissions", eq={"student_id": student.id},
        in_={"assignment_id": [a.id for a in assignments]})}
    return _items(assignments, subs, now)


def assignments_for_teacher(gateway, teacher, now=None, which="all"):
    now = now or utcnow()
    if which not in TEACHER_FILTERS:
        which = "all"
    classes = classes_for_teacher(gateway, teacher.id)
    class_ids = [c.id for c in classes]
    assignments = gateway.select("assignments", in_={"class_id": class_ids}, order_by="due_date")
    if which == "active":
        assignments = [a for a in assignments if a.due_date >= now]
    elif which == "past":
        assignments = [a for a in assignments if a.due_date < now]
    student_counts = gateway.count_by("class_members", "class_id", in_={"class_id": class_ids})
    submission_counts = gateway.count_by("submissions", "assignment_id",
                                         in_={"assignment_id": [a.id for a in assignments]})
    groups = []
    for cls in classes:
        total = student_counts.get(cls.id, 0)
        items = [AssignmentProgress(a, submission_stats(submission_counts.get(a.id, 0), total))
                 for a in assignments if a.class_id == cls.id]
        if items:
            groups.append(ClassProgress(cls, items, total))
    return groups


def assignment_detail_for_teacher(gateway, teacher, assignment_id, now=None):
    now = now or utcnow()
    a, cls = get_assignment_for_teacher(gateway, teacher, assignment_id)
    members = gateway.members_with_profiles(cls.id)
    subs = {s.student_id: s for s in gateway.select("submissions", eq={"assignment_id": a.id})}
    roster = [RosterRow(m, subs.get(m.student.id),
                        derive_submission_view(a, subs.get(m.student.id), now))
              for m in members]
    submitted = sum(1 for r in roster if r.submission is not None)
    return AssignmentDetail(a, cls, roster, submission_stats(submitted, len(roster)))


# ---------- announcements ----------
def post_announcement(gateway, teacher, class_id, title, message):
    _require_role(teacher, "teacher")
    get_class_for_teacher(gateway, teacher, class_id)
    title = (title or "").strip()
    message = (message or "").strip()
    if not title or not message:
        raise ValidationError("Title and message are required")
    ann = gateway.insert("announcements", class_id=class_id, title=title,
                         message=message, created_by=teacher.id)
    log.info("teacher %s posted announcement %s to class %s", teacher.id, ann.id, class_id)
    return ann


def list_announcements(gateway, class_id):
    return gateway.select("announcements", eq={"class_id": class_id},
                          order_by="created_at", descending=True)

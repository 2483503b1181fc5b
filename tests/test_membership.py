import random
import re

import pytest

from classroom.errors import ConflictError, NotFoundError, ValidationError
from classroom.services import membership
from tests.helpers import make_user


@pytest.fixture
def people(gw):
    return {
        "teacher": make_user(gw, "t@example.com", "teacher", "Tess"),
        "student": make_user(gw, "s@example.com", "student", "Sam"),
        "other": make_user(gw, "o@example.com", "student", "Olly"),
    }


def test_generate_class_code_shape():
    rng = random.Random(7)
    for _ in range(50):
        assert re.fullmatch(r"[A-Z0-9]{6}", membership.generate_class_code(rng))


def test_create_class_persists_code(gw, people):
    cls = membership.create_class(gw, people["teacher"], "Biology", "Period 2", "Cells")
    assert re.fullmatch(r"[A-Z0-9]{6}", cls.code)
    assert gw.get("classes", cls.id).code == cls.code
    assert cls.section == "Period 2"


def test_create_class_requires_teacher_and_name(gw, people):
    with pytest.raises(ValidationError):
        membership.create_class(gw, people["student"], "Biology")
    with pytest.raises(ValidationError):
        membership.create_class(gw, people["teacher"], "   ")


def test_create_class_retries_on_code_collision(gw, people):
    class Rigged:
        """First six picks collide with an existing code, then a fresh one."""
        def __init__(self):
            self.values = iter("AAAAAA" + "AAAAAA" + "BBBBBB")

        def choice(self, _):
            return next(self.values)

    gw.insert("classes", name="Old", code="AAAAAA", teacher_id=people["teacher"].id,
              description="")
    cls = membership.create_class(gw, people["teacher"], "New", rng=Rigged())
    assert cls.code == "BBBBBB"


def test_join_with_lowercase_code_succeeds_once(gw, people):
    cls = membership.create_class(gw, people["teacher"], "Chemistry")
    joined = membership.join_class(gw, people["student"], f"  {cls.code.lower()} ")
    assert joined.id == cls.id

    with pytest.raises(ConflictError):
        membership.join_class(gw, people["student"], cls.code)
    assert gw.count("class_members",
                    eq={"class_id": cls.id, "student_id": people["student"].id}) == 1


def test_join_unknown_code_creates_nothing(gw, people):
    membership.create_class(gw, people["teacher"], "Chemistry")
    with pytest.raises(NotFoundError):
        membership.join_class(gw, people["student"], "ZZZZZZ")
    assert gw.count("class_members") == 0


def test_join_empty_code(gw, people):
    with pytest.raises(ValidationError):
        membership.join_class(gw, people["student"], "  ")


def test_teacher_cannot_join(gw, people):
    cls = membership.create_class(gw, people["teacher"], "Chemistry")
    with pytest.raises(ValidationError):
        membership.join_class(gw, people["teacher"], cls.code)


def test_leave_class(gw, people):
    cls = membership.create_class(gw, people["teacher"], "History")
    membership.join_class(gw, people["student"], cls.code)
    membership.leave_class(gw, people["student"], cls.id)
    assert not membership.is_member(gw, people["student"].id, cls.id)
    with pytest.raises(NotFoundError):
        membership.leave_class(gw, people["student"], cls.id)


def test_list_members_and_class_access(gw, people):
    cls = membership.create_class(gw, people["teacher"], "Art")
    membership.join_class(gw, people["student"], cls.code)
    membership.join_class(gw, people["other"], cls.code)

    names = [m.student.full_name for m in membership.list_class_members_with_profiles(gw, cls.id)]
    assert names == ["Olly", "Sam"]
    assert [c.id for c in membership.classes_for_student(gw, people["student"].id)] == [cls.id]
    assert membership.get_class_for_student(gw, people["student"], cls.id).id == cls.id

    outsider = make_user(gw, "x@example.com", "student")
    with pytest.raises(NotFoundError):
        membership.get_class_for_student(gw, outsider, cls.id)
    other_teacher = make_user(gw, "t2@example.com", "teacher")
    with pytest.raises(NotFoundError):
        membership.get_class_for_teacher(gw, other_teacher, cls.id)

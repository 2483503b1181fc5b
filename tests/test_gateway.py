import pytest

from classroom import records
from classroom.errors import ConflictError, OperationError
from tests.helpers import make_user


def test_insert_returns_typed_record(gw):
    p = make_user(gw, "a@example.com", "student", "Alice")
    assert isinstance(p, records.Profile)
    assert p.full_name == "Alice"
    assert not hasattr(p, "password_hash")


def test_select_filters_orders_and_limits(gw):
    for name in ("Cara", "Bob", "Abe"):
        make_user(gw, f"{name.lower()}@example.com", "student", name)
    make_user(gw, "t@example.com", "teacher", "Tina")

    names = [p.full_name for p in gw.select("profiles", eq={"role": "student"}, order_by="full_name")]
    assert names == ["Abe", "Bob", "Cara"]

    top = gw.select("profiles", eq={"role": "student"}, order_by="full_name",
                    descending=True, limit=1)
    assert [p.full_name for p in top] == ["Cara"]


def test_select_with_empty_membership_set_is_empty(gw):
    make_user(gw, "a@example.com", "student")
    assert gw.select("profiles", in_={"id": []}) == []
    assert gw.count("profiles", in_={"id": []}) == 0


def test_unknown_collection_and_field(gw):
    with pytest.raises(OperationError):
        gw.select("grades")
    with pytest.raises(OperationError):
        gw.select("profiles", eq={"nickname": "x"})


def test_unique_violation_is_conflict(gw):
    make_user(gw, "dup@example.com", "student")
    with pytest.raises(ConflictError):
        make_user(gw, "dup@example.com", "teacher")
    # session is usable afterwards
    assert gw.count("profiles") == 1


def test_delete_requires_filter(gw):
    with pytest.raises(OperationError):
        gw.delete("profiles")


def test_transaction_rolls_back_every_write(gw):
    t = make_user(gw, "t@example.com", "teacher")
    with pytest.raises(ConflictError):
        with gw.transaction():
            gw.insert("classes", name="One", code="AAAAAA", teacher_id=t.id, description="")
            gw.insert("classes", name="Two", code="AAAAAA", teacher_id=t.id, description="")
    assert gw.count("classes") == 0


def test_count_by_groups_rows(gw):
    make_user(gw, "a@example.com", "student")
    make_user(gw, "b@example.com", "student")
    make_user(gw, "c@example.com", "teacher")
    assert gw.count_by("profiles", "role") == {"student": 2, "teacher": 1}


def test_members_with_profiles_joins_in_one_call(gw):
    t = make_user(gw, "t@example.com", "teacher")
    s1 = make_user(gw, "zed@example.com", "student", "Zed")
    s2 = make_user(gw, "amy@example.com", "student", "Amy")
    cls = gw.insert("classes", name="Math", code="MATH01", teacher_id=t.id, description="")
    gw.insert("class_members", class_id=cls.id, student_id=s1.id)
    gw.insert("class_members", class_id=cls.id, student_id=s2.id)

    members = gw.members_with_profiles(cls.id)
    assert [m.student.full_name for m in members] == ["Amy", "Zed"]
    assert all(isinstance(m, records.Member) for m in members)

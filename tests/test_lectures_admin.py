import io

import pytest

from classroom.errors import NotFoundError, ValidationError
from classroom.services import admin, lectures, membership
from tests.helpers import make_user


@pytest.mark.parametrize("url,expected", [
    ("https://www.youtube.com/watch?v=dQw4w9WgXcQ", "https://www.youtube.com/embed/dQw4w9WgXcQ"),
    ("https://youtu.be/dQw4w9WgXcQ", "https://www.youtube.com/embed/dQw4w9WgXcQ"),
    ("https://cdn.example.com/video.mp4", None),
])
def test_embed_url(url, expected):
    assert lectures.embed_url(url) == expected


@pytest.fixture
def teacher(gw):
    return make_user(gw, "t@example.com", "teacher")


def test_create_lecture_from_link(gw, teacher):
    lec = lectures.create_lecture(gw, teacher, "Intro", "Week 1",
                                  video_url="https://youtu.be/abcdefgh")
    assert lec.class_id is None
    assert lectures.lectures_for_teacher(gw, teacher.id)[0].id == lec.id


def test_create_lecture_from_file(gw, teacher, app):
    lec = lectures.create_lecture(gw, teacher, "Recorded", video_file=io.BytesIO(b"data"),
                                  filename="lesson one.mp4")
    assert lec.video_url.startswith("/uploads/lecture-videos/")
    name = lec.video_url.rsplit("/", 1)[1]
    assert name.startswith(f"{teacher.id}-") and name.endswith(".mp4")


@pytest.mark.parametrize("kwargs", [
    {},
    {"video_url": "https://x.example.com/v.mp4", "video_file": io.BytesIO(b"x"), "filename": "v.mp4"},
    {"video_url": "ftp://example.com/v.mp4"},
])
def test_create_lecture_needs_exactly_one_valid_source(gw, teacher, kwargs):
    with pytest.raises(ValidationError):
        lectures.create_lecture(gw, teacher, "Bad", **kwargs)


def test_upload_rejects_unexpected_file_type(gw, teacher):
    with pytest.raises(ValidationError):
        lectures.create_lecture(gw, teacher, "Bad", video_file=io.BytesIO(b"x"), filename="x.exe")


def test_delete_lecture_only_by_owner(gw, teacher):
    lec = lectures.create_lecture(gw, teacher, "Intro", video_url="https://example.com/v.mp4")
    other = make_user(gw, "t2@example.com", "teacher")
    with pytest.raises(NotFoundError):
        lectures.delete_lecture(gw, other, lec.id)
    lectures.delete_lecture(gw, teacher, lec.id)
    assert gw.count("lectures") == 0


def test_student_sees_global_and_enrolled_class_lectures(gw, teacher):
    student = make_user(gw, "s@example.com", "student")
    mine = membership.create_class(gw, teacher, "Mine")
    theirs = membership.create_class(gw, teacher, "Theirs")
    membership.join_class(gw, student, mine.code)
    url = "https://example.com/v.mp4"
    lectures.create_lecture(gw, teacher, "Everyone", video_url=url)
    lectures.create_lecture(gw, teacher, "Mine only", class_id=mine.id, video_url=url)
    lectures.create_lecture(gw, teacher, "Not mine", class_id=theirs.id, video_url=url)

    titles = {l.title for l in lectures.lectures_for_student(gw, student.id)}
    assert titles == {"Everyone", "Mine only"}


def test_admin_stats_and_overview(gw, teacher):
    boss = make_user(gw, "a@example.com", "admin")
    student = make_user(gw, "s@example.com", "student")
    cls = membership.create_class(gw, teacher, "Music")
    membership.join_class(gw, student, cls.code)

    stats = admin.dashboard_stats(gw)
    assert stats == {"users": 3, "admins": 1, "teachers": 1, "students": 1, "classes": 1}

    (row,) = admin.class_overview(gw)
    assert row.cls.id == cls.id
    assert row.teacher.id == teacher.id
    assert (row.members, row.assignments, row.announcements) == (1, 0, 0)
    assert [u.id for u in admin.list_users(gw)].count(boss.id) == 1


def test_change_role(gw, teacher):
    boss = make_user(gw, "a@example.com", "admin")
    student = make_user(gw, "s@example.com", "student")
    assert admin.change_role(gw, boss, student.id, "teacher").role == "teacher"
    with pytest.raises(ValidationError):
        admin.change_role(gw, boss, student.id, "overlord")
    with pytest.raises(ValidationError):
        admin.change_role(gw, boss, boss.id, "student")
    with pytest.raises(ValidationError):
        admin.change_role(gw, teacher, student.id, "admin")
    with pytest.raises(NotFoundError):
        admin.change_role(gw, boss, 999, "student")

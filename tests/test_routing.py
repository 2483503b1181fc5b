import pytest

from classroom import records
from classroom.services.routing import (ROLES, is_permitted, landing_route, navigation)
from classroom.utils import utcnow


def profile(role):
    return records.Profile(id=1, email="x@example.com", full_name="X", role=role,
                           avatar_url=None, created_at=utcnow())


@pytest.mark.parametrize("role,path", [
    ("admin", "/admin/dashboard"),
    ("teacher", "/teacher/dashboard"),
    ("student", "/student/dashboard"),
])
def test_landing_route_per_role(role, path):
    assert landing_route(profile(role)) == path


def test_landing_route_without_profile_is_login():
    assert landing_route(None) == "/auth/login"


def test_navigation_per_role():
    assert [i.path for i in navigation(None)] == ["/", "/about", "/auth/login", "/auth/register"]
    teacher_paths = [i.path for i in navigation(profile("teacher"))]
    assert "/teacher/lectures" in teacher_paths
    assert "/profile" in teacher_paths
    assert not any(p.startswith("/admin") for p in teacher_paths)


@pytest.mark.parametrize("role", ROLES)
def test_role_only_reaches_its_own_area(role):
    for other in ROLES:
        allowed = is_permitted(role, f"/{other}/dashboard")
        assert allowed is (other == role)
    assert is_permitted(role, "/profile")
    assert is_permitted(role, "/")


def test_anonymous_only_public():
    assert is_permitted(None, "/auth/login")
    assert not is_permitted(None, "/profile")
    assert not is_permitted(None, "/admin/users")
    assert is_permitted(None, "/uploads/avatars/7-1700000000000.png")
    assert not is_permitted(None, "/uploadsx")

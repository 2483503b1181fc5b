import io

import pytest
from flask_login import current_user

from classroom.errors import AuthenticationError, ConflictError, ValidationError
from classroom.services.identity import IdentitySession, get_identity, validate_password
from tests.helpers import PASSWORD, make_user


@pytest.fixture
def session(gw):
    return IdentitySession(gw)


def test_sign_in_returns_role_and_logs_in(session, gw):
    make_user(gw, "t@example.com", "teacher")
    assert session.sign_in("T@Example.com ", PASSWORD) == "teacher"
    assert session.is_authenticated
    assert session.role == "teacher"
    assert current_user.is_authenticated


@pytest.mark.parametrize("email,password", [
    ("t@example.com", "wrong-password"),
    ("nobody@example.com", PASSWORD),
])
def test_sign_in_rejects_bad_credentials(session, gw, email, password):
    make_user(gw, "t@example.com", "teacher")
    with pytest.raises(AuthenticationError):
        session.sign_in(email, password)
    assert not session.is_authenticated


def test_sign_up_creates_profile(session, gw):
    p = session.sign_up("new@example.com", "abcdef", "New Person", "student", confirm="abcdef")
    assert p.role == "student"
    assert gw.single("profiles", eq={"email": "new@example.com"}).full_name == "New Person"


def test_sign_up_cannot_self_assign_admin(session):
    with pytest.raises(ValidationError):
        session.sign_up("boss@example.com", "abcdef", "Boss", "admin")


def test_sign_up_duplicate_email(session, gw):
    make_user(gw, "dup@example.com", "student")
    with pytest.raises(ConflictError, match="already exists"):
        session.sign_up("dup@example.com", "abcdef", "Dup", "teacher")


@pytest.mark.parametrize("password,confirm,message", [
    ("abc", None, "at least 6"),
    ("abcdef", "abcdeg", "do not match"),
])
def test_validate_password(password, confirm, message):
    with pytest.raises(ValidationError, match=message):
        validate_password(password, confirm)


def test_sign_out_clears_principal(session, gw):
    make_user(gw, "s@example.com", "student")
    session.sign_in("s@example.com", PASSWORD)
    session.sign_out()
    assert not session.is_authenticated
    assert session.profile is None


def test_refresh_profile_sees_role_change(session, gw):
    s = make_user(gw, "s@example.com", "student")
    session.sign_in("s@example.com", PASSWORD)
    gw.update("profiles", s.id, role="teacher")
    assert session.role == "student"
    assert session.refresh_profile().role == "teacher"
    assert session.role == "teacher"


def test_update_profile_and_avatar(session, gw):
    make_user(gw, "s@example.com", "student")
    session.sign_in("s@example.com", PASSWORD)
    assert session.update_profile("  Sam Smith ").full_name == "Sam Smith"
    with pytest.raises(ValidationError):
        session.update_profile("   ")

    p = session.update_avatar(io.BytesIO(b"\x89PNG"), "me.png")
    assert p.avatar_url.startswith("/uploads/avatars/")
    assert p.avatar_url.endswith(".png")


def test_change_password(session, gw):
    make_user(gw, "s@example.com", "student")
    session.sign_in("s@example.com", PASSWORD)
    with pytest.raises(AuthenticationError):
        session.change_password("nope", "newpass1", "newpass1")
    session.change_password(PASSWORD, "newpass1", "newpass1")
    session.sign_out()
    assert session.sign_in("s@example.com", "newpass1") == "student"


def test_get_identity_is_cached_per_request(ctx):
    assert get_identity() is get_identity()
    assert not get_identity().is_authenticated

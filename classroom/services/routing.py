"""Role-based navigation and the view guard."""
from collections import namedtuple
from functools import wraps

from flask import redirect, request, url_for

from ..logger import get_logger
from .identity import get_identity

log = get_logger(__name__)

ROLES = ("admin", "teacher", "student")

LANDING = {
    "admin": "/admin/dashboard",
    "teacher": "/teacher/dashboard",
    "student": "/student/dashboard",
}
LOGIN_PATH = "/auth/login"

PUBLIC_PATHS = ("/", "/about", "/auth/login", "/auth/register", "/uploads/")
AUTHENTICATED_PATHS = ("/profile", "/auth/logout")

NavItem = namedtuple("NavItem", "label path")

NAVIGATION = {
    None: [
        NavItem("Home", "/"),
        NavItem("About", "/about"),
        NavItem("Sign in", "/auth/login"),
        NavItem("Register", "/auth/register"),
    ],
    "admin": [
        NavItem("Dashboard", "/admin/dashboard"),
        NavItem("Users", "/admin/users"),
        NavItem("Classes", "/admin/classes"),
    ],
    "teacher": [
        NavItem("Dashboard", "/teacher/dashboard"),
        NavItem("Assignments", "/teacher/assignments"),
        NavItem("Lectures", "/teacher/lectures"),
    ],
    "student": [
        NavItem("Dashboard", "/student/dashboard"),
        NavItem("Assignments", "/student/assignments"),
        NavItem("Join class", "/student/join-class"),
        NavItem("Lectures", "/student/lectures"),
    ],
}


def landing_route(profile):
    if profile is None:
        return LOGIN_PATH
    return LANDING.get(profile.role, LOGIN_PATH)


def navigation(profile):
    if profile is None:
        return list(NAVIGATION[None])
    return NAVIGATION.get(profile.role, []) + [NavItem("Profile", "/profile")]


def _matches(path, paths):
    return path in paths or any(path.startswith(p) for p in paths if p.endswith("/") and p != "/")


def is_permitted(role, path):
    if _matches(path, PUBLIC_PATHS):
        return True
    if role not in ROLES:
        return False
    if _matches(path, AUTHENTICATED_PATHS):
        return True
    prefix = f"/{role}/"
    return path.startswith(prefix) or path == prefix.rstrip("/")


def role_required(*roles):
    """Guard a view: send strangers to login and other roles to their own dashboard."""
    def deco(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            identity = get_identity()
            if not identity.is_authenticated:
                return redirect(url_for("auth.login", next=request.full_path.rstrip("?")))
            if roles and identity.role not in roles:
                log.info("redirecting %s away from %s", identity.role, request.path)
                return redirect(landing_route(identity.profile))
            return f(*args, **kwargs)
        return wrapper
    return deco

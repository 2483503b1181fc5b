from collections import namedtuple

from ..errors import NotFoundError, ValidationError
from ..logger import get_logger
from .routing import ROLES

log = get_logger(__name__)

ClassOverview = namedtuple("ClassOverview", "cls teacher members assignments announcements")


def dashboard_stats(gateway):
    by_role = gateway.count_by("profiles", "role")
    return {
        "users": sum(by_role.values()),
        "admins": by_role.get("admin", 0),
        "teachers": by_role.get("teacher", 0),
        "students": by_role.get("student", 0),
        "classes": gateway.count("classes"),
    }


def list_users(gateway):
    return gateway.select("profiles", order_by="created_at", descending=True)


def change_role(gateway, admin, user_id, role):
    if admin is None or admin.role != "admin":
        raise ValidationError("Only an admin can change roles")
    if role not in ROLES:
        raise ValidationError("Unknown role")
    if user_id == admin.id and role != "admin":
        raise ValidationError("You cannot remove your own admin role")
    updated = gateway.update("profiles", user_id, role=role)
    if updated is None:
        raise NotFoundError("User not found")
    log.info("admin %s set user %s role to %s", admin.id, user_id, role)
    return updated


def class_overview(gateway):
    classes = gateway.select("classes", order_by="created_at", descending=True)
    ids = [c.id for c in classes]
    members = gateway.count_by("class_members", "class_id", in_={"class_id": ids})
    assignments = gateway.count_by("assignments", "class_id", in_={"class_id": ids})
    announcements = gateway.count_by("announcements", "class_id", in_={"class_id": ids})
    teachers = {p.id: p for p in gateway.select(
        "profiles", in_={"id": {c.teacher_id for c in classes}})}
    return [ClassOverview(c, teachers.get(c.teacher_id), members.get(c.id, 0),
                          assignments.get(c.id, 0), announcements.get(c.id, 0))
            for c in classes]

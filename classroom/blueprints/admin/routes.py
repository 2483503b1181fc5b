from flask import render_template, request, redirect, url_for, flash
from flask_login import login_required
from ...errors import ClassroomError
from ...gateway import get_gateway
from ...logger import get_logger
from ...services import admin as admin_svc
from ...services.identity import get_identity
from ...services.routing import ROLES, role_required
from . import bp

log = get_logger(__name__)

@bp.get("/dashboard")
@login_required
@role_required("admin")
def dashboard():
    try:
        stats = admin_svc.dashboard_stats(get_gateway())
    except ClassroomError:
        log.exception("failed to load admin stats")
        stats = {"users": 0, "admins": 0, "teachers": 0, "students": 0, "classes": 0}
    return render_template("admin/dashboard.html", stats=stats)

@bp.get("/users")
@login_required
@role_required("admin")
def users():
    try:
        items = admin_svc.list_users(get_gateway())
    except ClassroomError:
        log.exception("failed to load users")
        items = []
    return render_template("admin/users.html", items=items, roles=ROLES)

@bp.post("/users/<int:uid>/role")
@login_required
@role_required("admin")
def change_role(uid):
    identity = get_identity()
    try:
        updated = admin_svc.change_role(get_gateway(), identity.profile, uid,
                                        request.form.get("role", ""))
        flash(f"{updated.full_name} is now a {updated.role}", "success")
    except ClassroomError as e:
        flash(e.message, "error")
    return redirect(url_for("admin.users"))

@bp.get("/classes")
@login_required
@role_required("admin")
def classes():
    try:
        items = admin_svc.class_overview(get_gateway())
    except ClassroomError:
        log.exception("failed to load class statistics")
        flash("Failed to load class statistics", "error")
        items = []
    return render_template("admin/classes.html", items=items)

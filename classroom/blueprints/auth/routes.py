from urllib.parse import urlsplit

from flask import render_template, request, redirect, url_for, flash
from flask_login import login_required
from ...errors import ClassroomError
from ...services.identity import SELF_SERVICE_ROLES, get_identity
from ...services.routing import is_permitted, landing_route
from . import bp

def _safe_next(target, role):
    if not target:
        return None
    parts = urlsplit(target)
    if parts.scheme or parts.netloc or not parts.path.startswith("/"):
        return None
    return target if is_permitted(role, parts.path) and parts.path != "/" else None

@bp.route("/login", methods=["GET", "POST"])
def login():
    identity = get_identity()
    if identity.is_authenticated:
        return redirect(landing_route(identity.profile))
    if request.method == "POST":
        email = request.form.get("email", "").strip()
        password = request.form.get("password", "")
        try:
            role = identity.sign_in(email, password, remember=bool(request.form.get("remember")))
        except ClassroomError as e:
            flash(e.message, "error")
            return render_template("login.html", email=email), 401
        return redirect(_safe_next(request.args.get("next"), role)
                        or landing_route(identity.profile))
    return render_template("login.html")

@bp.route("/register", methods=["GET", "POST"])
def register():
    identity = get_identity()
    form = {}
    if request.method == "POST":
        form = {
            "email": request.form.get("email", "").strip(),
            "full_name": request.form.get("full_name", "").strip(),
            "role": request.form.get("role", "student"),
        }
        try:
            identity.sign_up(form["email"], request.form.get("password", ""),
                             form["full_name"], form["role"],
                             confirm=request.form.get("confirm_password", ""))
        except ClassroomError as e:
            flash(e.message, "error")
            return render_template("register.html", form=form, roles=SELF_SERVICE_ROLES), 400
        flash("Account created. You can sign in now.", "success")
        return redirect(url_for("auth.login"))
    return render_template("register.html", form=form, roles=SELF_SERVICE_ROLES)

@bp.get("/logout")
@login_required
def logout():
    get_identity().sign_out()
    return redirect(url_for("auth.login"))

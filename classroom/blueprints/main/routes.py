from flask import (abort, current_app, flash, redirect, render_template, request,
                   send_from_directory, url_for)
from flask_login import login_required
from ...errors import ClassroomError
from ...services.identity import get_identity
from ...services.routing import landing_route, navigation
from ...storage import BUCKETS
from . import bp

@bp.app_context_processor
def inject_identity():
    identity = get_identity()
    return {"identity": identity, "nav_items": navigation(identity.profile)}

@bp.get("/")
def index():
    identity = get_identity()
    if identity.is_authenticated:
        return redirect(landing_route(identity.profile))
    return render_template("home.html")

@bp.get("/about")
def about():
    return render_template("about.html")

@bp.route("/profile", methods=["GET", "POST"])
@login_required
def profile():
    identity = get_identity()
    if request.method == "POST":
        action = request.form.get("action", "details")
        try:
            if action == "avatar":
                f = request.files.get("avatar")
                if not f or not f.filename:
                    flash("Choose an image to upload", "error")
                    return redirect(url_for("main.profile"))
                identity.update_avatar(f.stream, f.filename)
                flash("Profile picture updated successfully!", "success")
            elif action == "password":
                identity.change_password(request.form.get("old_password", ""),
                                         request.form.get("new_password", ""),
                                         request.form.get("confirm_password", ""))
                flash("Password updated", "success")
            else:
                identity.update_profile(request.form.get("full_name", ""))
                flash("Profile updated successfully!", "success")
        except ClassroomError as e:
            flash(e.message, "error")
        return redirect(url_for("main.profile"))
    return render_template("profile.html", profile=identity.profile)

@bp.get("/uploads/<bucket>/<path:name>")
def uploaded_file(bucket, name):
    if bucket not in BUCKETS:
        abort(404)
    folder = f"{current_app.config['UPLOAD_FOLDER']}/{bucket}"
    return send_from_directory(folder, name)

@bp.app_errorhandler(404)
def not_found(e):
    return render_template("404.html"), 404

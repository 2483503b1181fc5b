from flask import render_template, request, redirect, url_for, flash, abort
from flask_login import login_required
from ...errors import ClassroomError, NotFoundError
from ...gateway import get_gateway
from ...logger import get_logger
from ...services import coursework, lectures as lecture_svc, membership
from ...services.identity import get_identity
from ...services.routing import role_required
from . import bp

log = get_logger(__name__)

def get_current_teacher():
    return get_identity().profile

@bp.get("/dashboard")
@login_required
@role_required("teacher")
def dashboard():
    gw = get_gateway()
    t = get_current_teacher()
    try:
        classes = membership.classes_for_teacher(gw, t.id)
        counts = gw.count_by("class_members", "class_id",
                             in_={"class_id": [c.id for c in classes]})
    except ClassroomError:
        log.exception("failed to load classes for teacher %s", t.id)
        classes, counts = [], {}
    return render_template("teacher/dashboard.html", classes=classes, counts=counts)

@bp.post("/classes")
@login_required
@role_required("teacher")
def create_class():
    try:
        cls = membership.create_class(
            get_gateway(), get_current_teacher(), request.form.get("name"),
            request.form.get("section"), request.form.get("description"))
        flash(f'Class "{cls.name}" created successfully with code: {cls.code}', "success")
    except ClassroomError as e:
        flash(e.message, "error")
    return redirect(url_for("teacher.dashboard"))

@bp.get("/class/<int:cid>")
@login_required
@role_required("teacher")
def class_page(cid):
    gw = get_gateway()
    try:
        cls = membership.get_class_for_teacher(gw, get_current_teacher(), cid)
    except NotFoundError:
        abort(404)
    try:
        assignments = gw.select("assignments", eq={"class_id": cid}, order_by="due_date")
        announcements = coursework.list_announcements(gw, cid)
        members = membership.list_class_members_with_profiles(gw, cid)
    except ClassroomError:
        log.exception("failed to load class %s", cid)
        assignments, announcements, members = [], [], []
    return render_template("teacher/class.html", cls=cls, assignments=assignments,
                           announcements=announcements, members=members)

@bp.post("/class/<int:cid>/assignments")
@login_required
@role_required("teacher")
def create_assignment(cid):
    try:
        coursework.create_assignment(
            get_gateway(), get_current_teacher(), cid, request.form.get("title"),
            request.form.get("description"), request.form.get("due_date"),
            request.form.get("max_score"))
        flash("Assignment created successfully!", "success")
    except ClassroomError as e:
        flash(e.message, "error")
    return redirect(url_for("teacher.class_page", cid=cid))

@bp.post("/class/<int:cid>/announcements")
@login_required
@role_required("teacher")
def post_announcement(cid):
    try:
        coursework.post_announcement(get_gateway(), get_current_teacher(), cid,
                                     request.form.get("title"), request.form.get("message"))
        flash("Announcement posted", "success")
    except ClassroomError as e:
        flash(e.message, "error")
    return redirect(url_for("teacher.class_page", cid=cid))

@bp.get("/class/<int:cid>/assignment/<int:aid>")
@login_required
@role_required("teacher")
def assignment_detail(cid, aid):
    try:
        detail = coursework.assignment_detail_for_teacher(get_gateway(), get_current_teacher(), aid)
    except NotFoundError:
        abort(404)
    if detail.cls.id != cid:
        return redirect(url_for("teacher.assignment_detail", cid=detail.cls.id, aid=aid))
    back = request.args.get("from")
    return render_template("teacher/assignment_detail.html", detail=detail, back=back)

@bp.post("/submissions/<int:sid>/grade")
@login_required
@role_required("teacher")
def grade(sid):
    gw = get_gateway()
    try:
        graded = coursework.grade(gw, get_current_teacher(), sid, request.form.get("score"),
                                  request.form.get("feedback"),
                                  expected_version=request.form.get("version"))
        flash("Grade saved", "success")
        a = gw.get("assignments", graded.assignment_id)
        return redirect(url_for("teacher.assignment_detail", cid=a.class_id, aid=a.id))
    except NotFoundError:
        abort(404)
    except ClassroomError as e:
        flash(e.message, "error")
    sub = gw.get("submissions", sid)
    a = gw.get("assignments", sub.assignment_id) if sub else None
    if a is None:
        return redirect(url_for("teacher.assignments"))
    return redirect(url_for("teacher.assignment_detail", cid=a.class_id, aid=a.id))

@bp.route("/assignments", methods=["GET", "POST"])
@login_required
@role_required("teacher")
def assignments():
    gw = get_gateway()
    t = get_current_teacher()
    if request.method == "POST":
        class_id = request.form.get("class_id", type=int)
        if not class_id:
            flash("Please select a class", "error")
            return redirect(url_for("teacher.assignments"))
        try:
            coursework.create_assignment(gw, t, class_id, request.form.get("title"),
                                         request.form.get("description"),
                                         request.form.get("due_date"),
                                         request.form.get("max_score"))
            flash("Assignment created successfully!", "success")
        except ClassroomError as e:
            flash(e.message, "error")
        return redirect(url_for("teacher.assignments"))

    which = request.args.get("filter", "all")
    try:
        groups = coursework.assignments_for_teacher(gw, t, which=which)
        classes = membership.classes_for_teacher(gw, t.id)
    except ClassroomError:
        log.exception("failed to load assignments for teacher %s", t.id)
        groups, classes = [], []
    return render_template("teacher/assignments.html", groups=groups, classes=classes,
                           which=which, filters=coursework.TEACHER_FILTERS)

@bp.route("/assignments/<int:aid>/delete", methods=["GET", "POST"])
@login_required
@role_required("teacher")
def delete_assignment(aid):
    gw = get_gateway()
    t = get_current_teacher()
    try:
        a, cls = coursework.get_assignment_for_teacher(gw, t, aid)
    except NotFoundError:
        abort(404)
    if request.method == "GET":
        return render_template(
            "confirm.html", title="Delete assignment",
            message="Are you sure you want to delete this assignment? This action cannot be "
                    "undone and will also delete all student submissions.",
            cancel_url=url_for("teacher.assignments"))
    try:
        coursework.delete_assignment(gw, t, aid)
        flash(f'Deleted "{a.title}"', "success")
    except ClassroomError as e:
        flash(e.message, "alert")
    return redirect(url_for("teacher.assignments"))

@bp.route("/lectures", methods=["GET", "POST"])
@login_required
@role_required("teacher")
def lectures():
    gw = get_gateway()
    t = get_current_teacher()
    if request.method == "POST":
        f = request.files.get("video_file")
        has_file = bool(f and f.filename)
        try:
            lecture_svc.create_lecture(
                gw, t, request.form.get("title"), request.form.get("description"),
                class_id=request.form.get("class_id", type=int),
                video_url=request.form.get("video_url"),
                video_file=f.stream if has_file else None,
                filename=f.filename if has_file else None)
            flash("Lecture uploaded", "success")
        except ClassroomError as e:
            flash(e.message, "alert")
        return redirect(url_for("teacher.lectures"))
    try:
        items = lecture_svc.lectures_for_teacher(gw, t.id)
        classes = membership.classes_for_teacher(gw, t.id)
    except ClassroomError:
        log.exception("failed to load lectures for teacher %s", t.id)
        items, classes = [], []
    return render_template("teacher/lectures.html", items=items, classes=classes,
                           embed_url=lecture_svc.embed_url)

@bp.route("/lectures/<int:lid>/delete", methods=["GET", "POST"])
@login_required
@role_required("teacher")
def delete_lecture(lid):
    if request.method == "GET":
        return render_template("confirm.html", title="Delete lecture",
                               message="Are you sure you want to delete this lecture?",
                               cancel_url=url_for("teacher.lectures"))
    try:
        lecture_svc.delete_lecture(get_gateway(), get_current_teacher(), lid)
        flash("Lecture deleted", "success")
    except ClassroomError as e:
        flash(e.message, "alert")
    return redirect(url_for("teacher.lectures"))

from flask import render_template, request, redirect, url_for, flash, abort
from flask_login import login_required
from ...errors import ClassroomError, NotFoundError
from ...gateway import get_gateway
from ...logger import get_logger
from ...services import coursework, lectures as lecture_svc, membership
from ...services.identity import get_identity
from ...services.routing import role_required
from ...utils import utcnow
from . import bp

log = get_logger(__name__)

def get_current_student():
    return get_identity().profile

@bp.get("/dashboard")
@login_required
@role_required("student")
def dashboard():
    gw = get_gateway()
    stu = get_current_student()
    try:
        classes = membership.classes_for_student(gw, stu.id)
        upcoming = coursework.upcoming_for_student(gw, stu)
    except ClassroomError:
        log.exception("failed to load dashboard for student %s", stu.id)
        classes, upcoming = [], []
    return render_template("student/dashboard.html", classes=classes, upcoming=upcoming)

@bp.route("/join-class", methods=["GET", "POST"])
@login_required
@role_required("student")
def join_class():
    code = ""
    if request.method == "POST":
        code = request.form.get("code", "")
        try:
            cls = membership.join_class(get_gateway(), get_current_student(), code)
            flash(f"Joined {cls.name}", "success")
            return redirect(url_for("student.dashboard"))
        except ClassroomError as e:
            flash(e.message, "error")
    return render_template("student/join_class.html", code=membership.normalize_code(code))

@bp.get("/classes/<int:cid>")
@login_required
@role_required("student")
def class_page(cid):
    gw = get_gateway()
    stu = get_current_student()
    try:
        cls = membership.get_class_for_student(gw, stu, cid)
    except NotFoundError:
        abort(404)
    try:
        items = coursework.class_assignments_for_student(gw, stu, cid)
        announcements = coursework.list_announcements(gw, cid)
        members = membership.list_class_members_with_profiles(gw, cid)
        teacher = gw.get("profiles", cls.teacher_id)
    except ClassroomError:
        log.exception("failed to load class %s for student %s", cid, stu.id)
        items, announcements, members, teacher = [], [], [], None
    graded = sum(1 for i in items if i.submission is not None and i.submission.status == "graded")
    return render_template("student/class.html", cls=cls, items=items, teacher=teacher,
                           announcements=announcements, members=members, graded=graded)

@bp.route("/classes/<int:cid>/leave", methods=["GET", "POST"])
@login_required
@role_required("student")
def leave_class(cid):
    if request.method == "GET":
        return render_template("confirm.html", title="Leave class",
                               message="Are you sure you want to leave this class?",
                               cancel_url=url_for("student.class_page", cid=cid))
    try:
        membership.leave_class(get_gateway(), get_current_student(), cid)
        flash("You left the class", "success")
    except ClassroomError as e:
        flash(e.message, "alert")
        return redirect(url_for("student.class_page", cid=cid))
    return redirect(url_for("student.dashboard"))

@bp.route("/class/<int:cid>/assignment/<int:aid>", methods=["GET", "POST"])
@login_required
@role_required("student")
def assignment(cid, aid):
    gw = get_gateway()
    stu = get_current_student()
    try:
        a, cls = coursework.get_assignment_for_student(gw, stu, aid)
    except NotFoundError:
        abort(404)
    if request.method == "POST":
        try:
            existing = coursework.find_submission(gw, aid, stu.id)
            coursework.submit(gw, stu, aid, request.form.get("content"))
            if existing is not None:
                flash("Your work has been updated successfully!", "success")
            else:
                flash("Your work has been submitted successfully!", "success")
        except ClassroomError as e:
            flash(e.message, "error")
        return redirect(url_for("student.assignment", cid=cls.id, aid=aid))
    submission = coursework.find_submission(gw, aid, stu.id)
    view = coursework.derive_submission_view(a, submission, utcnow())
    return render_template("student/assignment.html", assignment=a, cls=cls,
                           submission=submission, view=view)

@bp.get("/assignments")
@login_required
@role_required("student")
def assignments():
    stu = get_current_student()
    which = request.args.get("filter", "all")
    try:
        groups = coursework.assignments_for_student(get_gateway(), stu, which=which)
    except ClassroomError:
        log.exception("failed to load assignments for student %s", stu.id)
        groups = []
    return render_template("student/assignments.html", groups=groups, which=which,
                           filters=coursework.STUDENT_FILTERS)

@bp.get("/lectures")
@login_required
@role_required("student")
def lectures():
    stu = get_current_student()
    try:
        items = lecture_svc.lectures_for_student(get_gateway(), stu.id)
    except ClassroomError:
        log.exception("failed to load lectures for student %s", stu.id)
        items = []
    return render_template("student/lectures.html", items=items,
                           embed_url=lecture_svc.embed_url)

"""Classes and who belongs to them."""
from ..errors import ConflictError, NotFoundError, OperationError, ValidationError
from ..logger import get_logger
from ..utils import generate_code

log = get_logger(__name__)

CODE_LENGTH = 6
CODE_ATTEMPTS = 5


def generate_class_code(rng=None):
    return generate_code(CODE_LENGTH, rng)


def normalize_code(code):
    return (code or "").strip().upper()


def _require_role(profile, role):
    if profile is None or profile.role != role:
        raise ValidationError(f"Only a {role} can do that")


def create_class(gateway, teacher, name, section=None, description="", rng=None):
    _require_role(teacher, "teacher")
    name = (name or "").strip()
    if not name:
        raise ValidationError("Class name is required")
    for _ in range(CODE_ATTEMPTS):
        code = generate_class_code(rng)
        try:
            cls = gateway.insert(
                "classes", name=name, section=(section or "").strip() or None,
                description=(description or "").strip(), code=code, teacher_id=teacher.id,
            )
        except ConflictError:
            log.warning("class code collision on %s, retrying", code)
            continue
        log.info("teacher %s created class %s (%s)", teacher.id, cls.id, cls.code)
        return cls
    raise OperationError("Could not generate a unique class code. Please try again.")


def join_class(gateway, student, code):
    _require_role(student, "student")
    code = normalize_code(code)
    if not code:
        raise ValidationError("Enter a class code")
    cls = gateway.single("classes", eq={"code": code})
    if cls is None:
        raise NotFoundError("Invalid class code")
    try:
        # unique (class_id, student_id) decides; no separate existence check
        gateway.insert("class_members", class_id=cls.id, student_id=student.id)
    except ConflictError:
        raise ConflictError("You are already enrolled in this class") from None
    log.info("student %s joined class %s", student.id, cls.id)
    return cls


def leave_class(gateway, student, class_id):
    _require_role(student, "student")
    try:
        n = gateway.delete("class_members", eq={"class_id": class_id, "student_id": student.id})
    except OperationError:
        raise OperationError("Failed to leave class. Please try again.") from None
    if not n:
        raise NotFoundError("You are not enrolled in this class")
    log.info("student %s left class %s", student.id, class_id)


def list_class_members_with_profiles(gateway, class_id):
    return gateway.members_with_profiles(class_id)


def classes_for_teacher(gateway, teacher_id):
    return gateway.select("classes", eq={"teacher_id": teacher_id},
                          order_by="created_at", descending=True)


def classes_for_student(gateway, student_id):
    memberships = gateway.select("class_members", eq={"student_id": student_id})
    ids = [m.class_id for m in memberships]
    return gateway.select("classes", in_={"id": ids}, order_by="name")


def is_member(gateway, student_id, class_id):
    return gateway.count("class_members",
                         eq={"class_id": class_id, "student_id": student_id}) > 0


def get_class_for_teacher(gateway, teacher, class_id):
    cls = gateway.get("classes", class_id)
    if cls is None or cls.teacher_id != teacher.id:
        raise NotFoundError("Class does not exist")
    return cls


def get_class_for_student(gateway, student, class_id):
    cls = gateway.get("classes", class_id)
    if cls is None or not is_member(gateway, student.id, class_id):
        raise NotFoundError("Class does not exist")
    return cls

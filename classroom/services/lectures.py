import re

from ..errors import NotFoundError, OperationError, ValidationError
from ..logger import get_logger
from ..storage import LECTURE_VIDEOS, Storage, object_name
from ..utils import utcnow
from .membership import classes_for_student, get_class_for_teacher

log = get_logger(__name__)

_YOUTUBE = re.compile(
    r"^https?://(?:www\.|m\.)?(?:youtube\.com/watch\?(?:.*&)?v=|youtu\.be/)([\w-]{6,})"
)


def embed_url(url):
    """YouTube links become embeddable player URLs; anything else returns None."""
    m = _YOUTUBE.match(url or "")
    return f"https://www.youtube.com/embed/{m.group(1)}" if m else None


def create_lecture(gateway, teacher, title, description="", class_id=None,
                   video_url=None, video_file=None, filename=None, storage=None, now=None):
    if teacher is None or teacher.role != "teacher":
        raise ValidationError("Only a teacher can do that")
    title = (title or "").strip()
    video_url = (video_url or "").strip()
    if not title:
        raise ValidationError("Lecture title is required")
    if bool(video_url) == bool(video_file):
        raise ValidationError("Provide either a video link or a video file")
    if class_id:
        get_class_for_teacher(gateway, teacher, class_id)
    if video_file:
        storage = storage or Storage()
        name = storage.upload(LECTURE_VIDEOS,
                              object_name(teacher.id, filename, now or utcnow()), video_file)
        video_url = storage.public_url(LECTURE_VIDEOS, name)
    elif not video_url.startswith(("http://", "https://")):
        raise ValidationError("Video link must start with http:// or https://")
    lecture = gateway.insert(
        "lectures", title=title, description=(description or "").strip(),
        class_id=class_id or None, video_url=video_url, teacher_id=teacher.id,
    )
    log.info("teacher %s added lecture %s", teacher.id, lecture.id)
    return lecture


def delete_lecture(gateway, teacher, lecture_id):
    lecture = gateway.get("lectures", lecture_id)
    if lecture is None or teacher is None or lecture.teacher_id != teacher.id:
        raise NotFoundError("Lecture does not exist")
    try:
        gateway.delete("lectures", eq={"id": lecture.id})
    except OperationError:
        raise OperationError("Failed to delete lecture") from None
    log.info("teacher %s deleted lecture %s", teacher.id, lecture.id)


def lectures_for_teacher(gateway, teacher_id):
    return gateway.select("lectures", eq={"teacher_id": teacher_id},
                          order_by="created_at", descending=True)


def lectures_for_student(gateway, student_id):
    class_ids = [c.id for c in classes_for_student(gateway, student_id)]
    lectures = gateway.select("lectures", eq={"class_id": None})
    lectures += gateway.select("lectures", in_={"class_id": class_ids})
    return sorted(lectures, key=lambda l: l.created_at, reverse=True)

from pathlib import Path

from flask import current_app, url_for
from werkzeug.utils import secure_filename

from .errors import OperationError, ValidationError
from .logger import get_logger

log = get_logger(__name__)

AVATARS = "avatars"
LECTURE_VIDEOS = "lecture-videos"
BUCKETS = {
    AVATARS: {".png", ".jpg", ".jpeg", ".gif", ".webp"},
    LECTURE_VIDEOS: {".mp4", ".webm", ".mov", ".mkv", ".ogg"},
}


def object_name(principal_id, filename, now):
    """``<principal>-<epoch ms>.<ext>``, unique per principal and upload time."""
    ext = Path(secure_filename(filename or "")).suffix.lower()
    return f"{principal_id}-{int(now.timestamp() * 1000)}{ext}"


class Storage:
    def __init__(self, root=None):
        self.root = Path(root or current_app.config["UPLOAD_FOLDER"])

    def _bucket_dir(self, bucket):
        if bucket not in BUCKETS:
            raise OperationError(f"Unknown storage bucket: {bucket}")
        return self.root / bucket

    def upload(self, bucket, name, fileobj):
        folder = self._bucket_dir(bucket)
        name = secure_filename(name)
        if not name:
            raise ValidationError("A file is required")
        if Path(name).suffix.lower() not in BUCKETS[bucket]:
            raise ValidationError("Unsupported file type")
        try:
            folder.mkdir(parents=True, exist_ok=True)
            with open(folder / name, "wb") as fh:
                data = fileobj.read(64 * 1024)
                while data:
                    fh.write(data)
                    data = fileobj.read(64 * 1024)
        except OSError as exc:
            log.exception("upload to %s failed", bucket)
            raise OperationError("Failed to upload file") from exc
        log.info("stored %s/%s", bucket, name)
        return name

    def path(self, bucket, name):
        return self._bucket_dir(bucket) / secure_filename(name)

    def public_url(self, bucket, name):
        self._bucket_dir(bucket)
        return url_for("main.uploaded_file", bucket=bucket, name=name)

import secrets
import string
from datetime import datetime, timezone

CODE_ALPHABET = string.ascii_uppercase + string.digits


def utcnow():
    """Naive UTC now; every timestamp column stores naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def generate_code(length=6, rng=None):
    choice = rng.choice if rng is not None else secrets.choice
    return "".join(choice(CODE_ALPHABET) for _ in range(length))


def parse_datetime(value):
    """Parse an HTML ``datetime-local`` value (or ISO string) to naive UTC."""
    value = (value or "").strip()
    if not value:
        return None
    try:
        dt = datetime.fromisoformat(value)
    except ValueError:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt

"""Data gateway over the relational store.

Every read and write the application makes goes through :class:`Gateway`.
Collections are addressed by table name, filtered by equality (``eq``) or
set membership (``in_``), and come back as typed records.
"""
from contextlib import contextmanager

from flask import g
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from . import models, records
from .errors import ConflictError, OperationError
from .extensions import db
from .logger import get_logger

log = get_logger(__name__)

COLLECTIONS = {
    "profiles": (models.Profile, records.Profile),
    "classes": (models.Classroom, records.Class),
    "class_members": (models.ClassMember, records.ClassMember),
    "assignments": (models.Assignment, records.Assignment),
    "submissions": (models.Submission, records.Submission),
    "announcements": (models.Announcement, records.Announcement),
    "lectures": (models.Lecture, records.Lecture),
}


class Gateway:
    def __init__(self, session=None):
        self.session = session if session is not None else db.session
        self._depth = 0

    # ---------- helpers ----------
    def _resolve(self, collection):
        try:
            return COLLECTIONS[collection]
        except KeyError:
            raise OperationError(f"Unknown collection: {collection}") from None

    @staticmethod
    def _column(model, name):
        col = getattr(model, name, None)
        if col is None or not hasattr(col, "property"):
            raise OperationError(f"Unknown field: {model.__tablename__}.{name}")
        return col

    def _query(self, model, eq=None, in_=None):
        q = self.session.query(model)
        for name, value in (eq or {}).items():
            q = q.filter(self._column(model, name) == value)
        for name, values in (in_ or {}).items():
            q = q.filter(self._column(model, name).in_(list(values)))
        return q

    def _finish(self):
        if self._depth:
            self.session.flush()
        else:
            self.session.commit()

    @contextmanager
    def _guard(self):
        try:
            yield
        except IntegrityError as exc:
            self.session.rollback()
            log.info("integrity conflict: %s", exc.orig)
            raise ConflictError() from exc
        except StaleDataError as exc:
            self.session.rollback()
            raise ConflictError("This record was changed by someone else. Reload and try again.") from exc
        except SQLAlchemyError as exc:
            self.session.rollback()
            log.exception("gateway failure")
            raise OperationError() from exc

    @contextmanager
    def transaction(self):
        """Group several writes; commits once at the end, rolls back on any failure."""
        self._depth += 1
        try:
            with self._guard():
                yield self
                if self._depth == 1:
                    self.session.commit()
        except BaseException:
            if self._depth == 1:
                self.session.rollback()
            raise
        finally:
            self._depth -= 1

    # ---------- reads ----------
    def select(self, collection, *, eq=None, in_=None, order_by=None,
               descending=False, limit=None):
        model, record = self._resolve(collection)
        if in_ and any(not list(v) for v in in_.values()):
            return []
        with self._guard():
            q = self._query(model, eq, in_)
            if order_by:
                col = self._column(model, order_by)
                q = q.order_by(col.desc() if descending else col.asc())
            if limit is not None:
                q = q.limit(limit)
            return [record.from_row(r) for r in q.all()]

    def get(self, collection, id):
        model, record = self._resolve(collection)
        with self._guard():
            row = self.session.get(model, id)
            return record.from_row(row) if row is not None else None

    def single(self, collection, *, eq):
        model, record = self._resolve(collection)
        with self._guard():
            row = self._query(model, eq).one_or_none()
            return record.from_row(row) if row is not None else None

    def count(self, collection, *, eq=None, in_=None):
        model, _ = self._resolve(collection)
        if in_ and any(not list(v) for v in in_.values()):
            return 0
        with self._guard():
            return self._query(model, eq, in_).count()

    def count_by(self, collection, field, *, in_=None):
        """Return ``{value: row_count}`` grouped on ``field``."""
        model, _ = self._resolve(collection)
        col = self._column(model, field)
        with self._guard():
            q = self.session.query(col, func.count(model.id)).group_by(col)
            for name, values in (in_ or {}).items():
                q = q.filter(self._column(model, name).in_(list(values)))
            return {value: n for value, n in q.all()}

    def password_hash(self, email):
        with self._guard():
            row = self.session.query(models.Profile).filter_by(email=email).one_or_none()
            if row is None:
                return None, None
            return records.Profile.from_row(row), row.password_hash

    def members_with_profiles(self, class_id):
        with self._guard():
            rows = (self.session.query(models.ClassMember, models.Profile)
                    .join(models.Profile, models.ClassMember.student_id == models.Profile.id)
                    .filter(models.ClassMember.class_id == class_id)
                    .order_by(models.Profile.full_name.asc())
                    .all())
            return [records.Member(class_id=m.class_id, joined_at=m.joined_at,
                                   student=records.Profile.from_row(p))
                    for m, p in rows]

    # ---------- writes ----------
    def insert(self, collection, **values):
        model, record = self._resolve(collection)
        with self._guard():
            row = model(**values)
            self.session.add(row)
            self._finish()
            return record.from_row(row)

    def update(self, collection, id, **values):
        model, record = self._resolve(collection)
        with self._guard():
            row = self.session.get(model, id)
            if row is None:
                return None
            for name, value in values.items():
                self._column(model, name)
                setattr(row, name, value)
            self._finish()
            return record.from_row(row)

    def delete(self, collection, *, eq=None, in_=None):
        model, _ = self._resolve(collection)
        if not eq and not in_:
            raise OperationError("Refusing to delete without a filter")
        with self._guard():
            n = self._query(model, eq, in_).delete(synchronize_session="fetch")
            self._finish()
            return n


def get_gateway():
    """The gateway bound to the current request."""
    if "gateway" not in g:
        g.gateway = Gateway()
    return g.gateway

"""Identity of the signed-in principal.

An :class:`IdentitySession` is built once per request (``get_identity``) and
injected with the data gateway. It is the only place that signs principals in
and out; everything else reads ``profile`` and ``role`` from it.
"""
from flask import g
from flask_login import (UserMixin, current_user, login_user, logout_user,
                         user_loaded_from_cookie, user_logged_in, user_logged_out)
from werkzeug.security import check_password_hash, generate_password_hash

from ..errors import AuthenticationError, ConflictError, ValidationError
from ..gateway import get_gateway
from ..logger import get_logger
from ..storage import AVATARS, Storage, object_name
from ..utils import utcnow

log = get_logger(__name__)

SELF_SERVICE_ROLES = ("student", "teacher")
MIN_PASSWORD_LENGTH = 6


class Principal(UserMixin):
    """The Flask-Login user: an authenticated id plus its profile record."""

    def __init__(self, profile):
        self.profile = profile
        self.id = profile.id

    @property
    def role(self):
        return self.profile.role


def load_principal(user_id):
    try:
        profile = get_gateway().get("profiles", int(user_id))
    except (TypeError, ValueError):
        return None
    return Principal(profile) if profile else None


def validate_password(password, confirm=None):
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if confirm is not None and password != confirm:
        raise ValidationError("Passwords do not match")


def normalize_email(email):
    return (email or "").strip().lower()


class IdentitySession:
    def __init__(self, gateway, user=None):
        self.gateway = gateway
        self._user = user if user is not None and user.is_authenticated else None

    @property
    def principal(self):
        return self._user

    @property
    def is_authenticated(self):
        return self._user is not None

    @property
    def profile(self):
        return self._user.profile if self._user else None

    @property
    def role(self):
        return self._user.role if self._user else None

    def sign_in(self, email, password, remember=False):
        """Log in and return the principal's role so the caller can route at once."""
        profile, pw_hash = self.gateway.password_hash(normalize_email(email))
        if profile is None or not check_password_hash(pw_hash, password or ""):
            log.info("rejected sign-in for %s", normalize_email(email))
            raise AuthenticationError()
        principal = Principal(profile)
        login_user(principal, remember=remember)
        self._user = principal
        return profile.role

    def sign_up(self, email, password, full_name, role="student", confirm=None):
        email = normalize_email(email)
        full_name = (full_name or "").strip()
        if not email or "@" not in email:
            raise ValidationError("A valid email address is required")
        if not full_name:
            raise ValidationError("Full name is required")
        if role not in SELF_SERVICE_ROLES:
            raise ValidationError("Role must be student or teacher")
        validate_password(password, confirm)
        try:
            profile = self.gateway.insert(
                "profiles", email=email, full_name=full_name, role=role,
                password_hash=generate_password_hash(password),
            )
        except ConflictError:
            raise ConflictError("An account with this email already exists") from None
        log.info("registered %s as %s", email, role)
        return profile

    def sign_out(self):
        if self._user is not None:
            logout_user()
        self._user = None

    def refresh_profile(self):
        if self._user is None:
            return None
        profile = self.gateway.get("profiles", self._user.id)
        if profile is None:
            # account removed underneath the session
            self.sign_out()
            return None
        self._user.profile = profile
        return profile

    def _require(self):
        if self._user is None:
            raise AuthenticationError("Please sign in first")
        return self._user.profile

    def update_profile(self, full_name):
        profile = self._require()
        full_name = (full_name or "").strip()
        if not full_name:
            raise ValidationError("Full name is required")
        self.gateway.update("profiles", profile.id, full_name=full_name)
        return self.refresh_profile()

    def update_avatar(self, fileobj, filename, storage=None, now=None):
        profile = self._require()
        storage = storage or Storage()
        name = storage.upload(AVATARS, object_name(profile.id, filename, now or utcnow()), fileobj)
        self.gateway.update("profiles", profile.id, avatar_url=storage.public_url(AVATARS, name))
        return self.refresh_profile()

    def change_password(self, old, new, confirm):
        profile = self._require()
        _, pw_hash = self.gateway.password_hash(profile.email)
        if not pw_hash or not check_password_hash(pw_hash, old or ""):
            raise AuthenticationError("Current password is incorrect")
        validate_password(new, confirm)
        self.gateway.update("profiles", profile.id, password_hash=generate_password_hash(new))


def get_identity():
    if "identity" not in g:
        g.identity = IdentitySession(get_gateway(), current_user._get_current_object())
    return g.identity


def _session_changed(sender, user=None, **extra):
    g.pop("identity", None)
    log.info("session change (%s): %s", extra.get("signal", "update"),
             getattr(user, "id", None))


def _on_login(sender, user=None, **extra):
    _session_changed(sender, user, signal="login")


def _on_logout(sender, user=None, **extra):
    _session_changed(sender, user, signal="logout")


def _on_cookie(sender, user=None, **extra):
    _session_changed(sender, user, signal="restored")


def _reset_request_state():
    g.pop("identity", None)
    g.pop("gateway", None)


def init_identity(app, login_manager):
    login_manager.user_loader(load_principal)
    app.before_request(_reset_request_state)
    user_logged_in.connect(_on_login, app)
    user_logged_out.connect(_on_logout, app)
    user_loaded_from_cookie.connect(_on_cookie, app)

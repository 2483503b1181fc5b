import pytest

from classroom import create_app
from classroom.extensions import db
from classroom.gateway import Gateway
from classroom.utils import utcnow
from tests.helpers import PASSWORD, make_user


@pytest.fixture
def app(tmp_path):
    app = create_app("config.TestConfig")
    app.config["UPLOAD_FOLDER"] = str(tmp_path / "uploads")
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def ctx(app):
    """A request context for calling services directly."""
    with app.test_request_context():
        yield


@pytest.fixture
def gw(ctx):
    return Gateway()


@pytest.fixture
def users(app):
    with app.app_context():
        gateway = Gateway()
        return {
            "admin": make_user(gateway, "admin@example.com", "admin", "Ada Admin"),
            "teacher": make_user(gateway, "teacher@example.com", "teacher", "Tess Teacher"),
            "student": make_user(gateway, "student@example.com", "student", "Sam Student"),
            "student2": make_user(gateway, "student2@example.com", "student", "Kim Student"),
        }


@pytest.fixture
def login(client):
    def do_login(email, password=PASSWORD):
        return client.post("/auth/login", data={"email": email, "password": password})
    return do_login


@pytest.fixture
def now():
    return utcnow().replace(microsecond=0)

import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent
load_dotenv(BASE_DIR / ".env")


class Config:
    SECRET_KEY = os.getenv("CLASSROOM_SECRET_KEY", "dev-secret")
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "CLASSROOM_DATABASE_URI", f"sqlite:///{(BASE_DIR / 'classroom.db').as_posix()}"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    UPLOAD_FOLDER = os.getenv("CLASSROOM_UPLOAD_FOLDER", (BASE_DIR / "uploads").as_posix())
    MAX_CONTENT_LENGTH = int(os.getenv("CLASSROOM_MAX_UPLOAD_MB", "200")) * 1024 * 1024
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    LOG_LEVEL = "WARNING"

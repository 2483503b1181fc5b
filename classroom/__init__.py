import click
from flask import Flask
from werkzeug.security import generate_password_hash

from .extensions import db, migrate, login_manager
from .logger import setup_logging

def register_filters(app):
    from .services.coursework import due_label

    @app.template_filter("datetime")
    def datetime_format(value, fmt="%b %d, %Y %H:%M"):
        try:
            return value.strftime(fmt)
        except AttributeError:
            return value or ""

    @app.template_filter("due_label")
    def due_label_filter(value):
        return due_label(value) if value else ""

def register_commands(app):
    @app.cli.command("init-db")
    def init_db():
        """Create all tables."""
        db.create_all()
        click.echo("Database initialised")

    @app.cli.command("seed-admin")
    @click.option("--email", required=True)
    @click.option("--password", required=True)
    @click.option("--name", default="Administrator")
    def seed_admin(email, password, name):
        """Create an admin account (admins cannot register themselves)."""
        from .gateway import Gateway
        from .services.identity import normalize_email, validate_password
        validate_password(password)
        Gateway().insert("profiles", email=normalize_email(email), full_name=name,
                         role="admin", password_hash=generate_password_hash(password))
        click.echo(f"Admin {email} created")

def create_app(config_object="config.Config"):
    app = Flask(__name__)
    app.config.from_object(config_object)
    log = setup_logging(app.config.get("LOG_LEVEL", "INFO"))

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    login_manager.login_view = "auth.login"

    from . import models  # noqa: F401
    from .services.identity import init_identity
    init_identity(app, login_manager)

    from .blueprints.main import bp as main_bp
    from .blueprints.auth import bp as auth_bp
    from .blueprints.admin import bp as admin_bp
    from .blueprints.teacher import bp as teacher_bp
    from .blueprints.student import bp as student_bp
    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(admin_bp, url_prefix="/admin")
    app.register_blueprint(teacher_bp, url_prefix="/teacher")
    app.register_blueprint(student_bp, url_prefix="/student")
    register_filters(app)
    register_commands(app)

    log.info("classroom app created (%s)", config_object)
    return app

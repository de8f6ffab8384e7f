# console_api/main.py
from __future__ import annotations

import logging
import secrets
import uuid

import click
from flask import Flask, g, request
from flask_cors import CORS

from console_api.api.middlewares.auth_middleware import AuthGuard
from console_api.api.middlewares.error_handler import register_error_handlers
from console_api.api.routes import register_routes
from console_api.config.flask_config import configure_app
from console_api.config.logging_config import configure_logging, request_id_var, user_id_var
from console_api.config.settings import settings
from console_api.core.clock import Clock, utcnow
from console_api.core.interfaces.mailer import Mailer
from console_api.infrastructure.database.base_model import BaseModel
from console_api.infrastructure.database.session import db_session, get_engine
from console_api.infrastructure.mail.factory import build_mailer
from console_api.infrastructure.security.password_hasher import PasswordHasher
from console_api.infrastructure.security.token_codec import TokenCodec
from console_api.repositories.user_repository import UserRepository
from console_api.services.user_service import UserService

import console_api.infrastructure.database.models  # noqa: F401

logger = logging.getLogger(__name__)


def _register_request_hooks(app: Flask) -> None:
    @app.before_request
    def assign_request_id():
        incoming = request.headers.get("X-Request-ID", "").strip()
        g.request_id = incoming[:64] or uuid.uuid4().hex
        request_id_var.set(g.request_id)
        user_id_var.set("")

    @app.after_request
    def echo_request_id(response):
        request_id = getattr(g, "request_id", None)
        if request_id:
            response.headers["X-Request-ID"] = request_id
        return response


def _register_cli(app: Flask) -> None:
    @app.cli.command("init-db")
    def init_db():
        """Create the tables and the bootstrap admin account."""
        BaseModel.metadata.create_all(get_engine())

        with db_session() as session:
            users = UserRepository(session)
            if users.get_by_email(settings.bootstrap_admin_email) is not None:
                click.echo(f"Admin {settings.bootstrap_admin_email} already exists")
                return

            password = settings.bootstrap_admin_password or secrets.token_urlsafe(12)
            service = UserService(
                users=users,
                hasher=app.extensions["password_hasher"],
                min_password_length=settings.password_min_length,
            )
            service.create_user(
                email=settings.bootstrap_admin_email,
                name=settings.bootstrap_admin_name,
                password=password,
            )

        click.echo(f"Created admin {settings.bootstrap_admin_email}")
        if not settings.bootstrap_admin_password:
            click.echo(f"Generated password: {password}")


def create_app(*, clock: Clock = utcnow, mailer: Mailer | None = None) -> Flask:
    configure_logging(level=settings.log_level, json_output=settings.log_json)

    app = Flask(__name__)

    # applied before the routes so preflight requests are answered
    CORS(
        app,
        resources={rf"{settings.api_prefix}/*": {"origins": settings.cors_origins}},
        supports_credentials=True,
        allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
        methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    )

    configure_app(app)

    codec = TokenCodec.from_settings(settings, clock=clock)
    app.extensions["clock"] = clock
    app.extensions["token_codec"] = codec
    app.extensions["password_hasher"] = PasswordHasher(iterations=settings.password_hash_iterations)
    app.extensions["mailer"] = mailer or build_mailer(settings)
    app.extensions["auth_guard"] = AuthGuard(codec, track_activity=settings.session_activity_tracking, clock=clock)

    _register_request_hooks(app)
    register_routes(app, api_prefix=settings.api_prefix)
    register_error_handlers(app)
    _register_cli(app)

    logger.info("Application created", extra={"extra_data": {"environment": settings.environment}})
    return app


app = create_app()

if __name__ == "__main__":
    app.run(host="0.0.0.0", port=3980, debug=settings.debug)

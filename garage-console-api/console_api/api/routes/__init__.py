# console_api/api/routes/__init__.py

from flask import Flask

from console_api.api.routes.auth_routes import bp_auth
from console_api.api.routes.health_routes import bp_health
from console_api.api.routes.password_routes import bp_password
from console_api.api.routes.session_routes import bp_sessions
from console_api.api.routes.user_routes import bp_users


def register_routes(app: Flask, *, api_prefix: str) -> None:
    app.register_blueprint(bp_health, url_prefix=f"{api_prefix}/health")

    app.register_blueprint(bp_auth, url_prefix=f"{api_prefix}/auth")
    app.register_blueprint(bp_sessions, url_prefix=f"{api_prefix}/auth/sessions")
    app.register_blueprint(bp_password, url_prefix=f"{api_prefix}/auth")
    app.register_blueprint(bp_users, url_prefix=f"{api_prefix}/user")

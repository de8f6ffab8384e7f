# console_api/config/flask_config.py
from flask import Flask

from console_api.config.settings import settings


def configure_app(app: Flask) -> None:
    app.config["DEBUG"] = settings.debug
    app.config["API_PREFIX"] = settings.api_prefix
    app.config["ENVIRONMENT"] = settings.environment

    # auth payloads are tiny
    app.config["MAX_CONTENT_LENGTH"] = 64 * 1024

    app.json.sort_keys = False

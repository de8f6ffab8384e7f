# console_api/api/routes/health_routes.py
import time

from flask import Blueprint
from sqlalchemy import text

from console_api.api.responder import success
from console_api.infrastructure.database.session import db_session, get_engine

bp_health = Blueprint("health", __name__, url_prefix="/health")


@bp_health.get("")
def health():
    return success("ok", {"status": "ok"})


@bp_health.get("/db")
def health_db():
    started = time.perf_counter()
    with db_session() as session:
        session.execute(text("select 1"))
    elapsed_ms = round((time.perf_counter() - started) * 1000, 2)

    return success("ok", {"db": "ok", "backend": get_engine().dialect.name, "latency_ms": elapsed_ms})

# practice_backend/operations/health_monitor.py

# Liveness/readiness checks for the store and the cache

import logging
import time
from datetime import datetime, timezone
from typing import Dict

from flask import Blueprint, current_app, jsonify
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from practice_backend.context import EXTENSION_KEY

logger = logging.getLogger(__name__)

ops = Blueprint("ops", __name__)


def _check_db(session) -> Dict:
    started = time.perf_counter()
    try:
        session.execute(text("SELECT 1"))
        return {"ok": True, "latency_ms": round((time.perf_counter() - started) * 1000, 2)}
    except SQLAlchemyError as e:
        logger.warning("Database health check failed: %s", e)
        session.rollback()
        return {"ok": False, "error": "unavailable"}


def _check_cache(cache) -> Dict:
    started = time.perf_counter()
    try:
        cache.ping()
        return {"ok": True, "latency_ms": round((time.perf_counter() - started) * 1000, 2)}
    except RedisError as e:
        logger.warning("Cache health check failed: %s", e)
        return {"ok": False, "error": "unavailable"}


def check_health(services) -> Dict:
    """Aggregate overall system health.

    The cache is advisory: listings fall back to the store when it is down,
    so only the store decides ``overall_ok``.
    """
    db = _check_db(services.session)
    cache = _check_cache(services.cache)
    return {"db": db, "cache": cache, "overall_ok": db["ok"]}


@ops.get("/health")
def health():
    res = check_health(current_app.extensions[EXTENSION_KEY])
    body = {
        "status": "OK" if res["overall_ok"] else "DEGRADED",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": current_app.config.get("ENVIRONMENT", "development"),
        "checks": {"db": res["db"], "cache": res["cache"]},
    }
    return jsonify(body), 200 if res["overall_ok"] else 503

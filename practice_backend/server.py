# practice_backend/server.py

import logging
import os
import sys

from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError

from practice_backend import create_app
from practice_backend.context import EXTENSION_KEY
from practice_backend.database.models import db

logger = logging.getLogger("practice_backend")


def main():
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = create_app()

    # The store must be reachable at boot; the cache may come up later
    try:
        with app.app_context():
            db.create_all()
    except SQLAlchemyError as e:
        logger.error("Cannot reach the database: %s", e)
        sys.exit(1)

    cache = app.extensions[EXTENSION_KEY].cache
    try:
        cache.ping()
    except RedisError as e:
        logger.warning("Redis unavailable, product listings will read the database: %s", e)

    port = int(os.environ.get("PORT", "5000"))
    logger.info("Server running on port %s", port)
    app.run(host=os.environ.get("HOST", "0.0.0.0"), port=port, threaded=True)


if __name__ == "__main__":
    main()

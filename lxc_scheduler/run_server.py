# lxc_scheduler/run_server.py
"""Run the scheduler HTTP service."""

import logging
import sys

import uvicorn
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from lxc_scheduler.api.main import create_app
from lxc_scheduler.config import SchedulerSettings
from lxc_scheduler.infrastructure.postgres.config import DatabaseSettings
from lxc_scheduler.infrastructure.postgres.database import check_connection, create_db_engine
from lxc_scheduler.wiring import build_scheduler

logger = logging.getLogger(__name__)


def main() -> int:
    """Main entry point."""
    settings = SchedulerSettings()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        db_settings = DatabaseSettings()
    except ValidationError as e:
        logger.error(f"Database configuration incomplete: {e}")
        return 1

    engine = create_db_engine(db_settings)
    try:
        check_connection(engine)
    except SQLAlchemyError as e:
        logger.error(f"Database handshake failed: {e}")
        engine.dispose()
        return 1

    app = create_app(build_scheduler(settings, engine))

    logger.info("=" * 80)
    logger.info("LXC SCHEDULER")
    logger.info("=" * 80)
    logger.info(f"Listening on {settings.listen_host}:{settings.listen_port}")
    logger.info(f"Metrics source: {settings.prometheus_url} ({settings.metrics_query})")
    logger.info(f"Agent dispatch: {'enabled' if settings.agent_dispatch_enabled else 'disabled'}")
    logger.info("=" * 80)

    try:
        # uvicorn exits with status 1 itself when the listener cannot bind
        uvicorn.run(
            app,
            host=settings.listen_host,
            port=settings.listen_port,
            log_level=settings.log_level.lower(),
        )
    finally:
        engine.dispose()

    return 0


if __name__ == "__main__":
    sys.exit(main())

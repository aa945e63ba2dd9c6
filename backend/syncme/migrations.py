"""
SyncMe - Startup Migration Runner
=================================

What:  Applies pending Alembic revisions from inside the running application.
How:   Opens a connection on the application's async engine and hands it to
       Alembic through config.attributes; alembic/env.py detects the
       connection and migrates on it instead of building its own engine.
When:  Once in the lifespan, when RUN_MIGRATIONS_ON_STARTUP is true.

The caller (main.lifespan) logs any failure and lets startup continue, so
the service may run against a schema that is behind the models.
"""

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy.engine import Connection

from syncme.config import settings
from syncme.database import engine

logger = logging.getLogger(__name__)

# backend/alembic, next to the syncme package
SCRIPT_LOCATION = Path(__file__).resolve().parent.parent / "alembic"


def build_alembic_config() -> Config:
    cfg = Config()
    cfg.set_main_option("script_location", str(SCRIPT_LOCATION))
    # ConfigParser interpolation treats % as special
    cfg.set_main_option("sqlalchemy.url", settings.database_url.replace("%", "%%"))
    return cfg


def _upgrade(connection: Connection, cfg: Config) -> None:
    cfg.attributes["connection"] = connection
    command.upgrade(cfg, "head")


async def run_migrations() -> None:
    """Upgrade the database to the latest revision. A no-op when already current."""
    cfg = build_alembic_config()
    logger.info("Applying database migrations from %s", SCRIPT_LOCATION)
    async with engine.begin() as conn:
        await conn.run_sync(_upgrade, cfg)
    logger.info("Database schema is up to date")

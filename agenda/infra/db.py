from __future__ import annotations

import logging

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from agenda.config import PROJECT_ROOT, SETTINGS

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = PROJECT_ROOT / "migrations"

engine = create_engine(SETTINGS.database_url, pool_pre_ping=True)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
Base = declarative_base()


def alembic_config(url: str) -> Config:
    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_DIR))
    config.set_main_option("sqlalchemy.url", url.replace("%", "%%"))
    return config


def init_db(bind: Engine | None = None) -> None:
    """Check the connection and create the schema on an unmanaged database.

    A database already carrying an ``alembic_version`` table is left to the
    migrations. Otherwise the tables are created from the models and the
    database is stamped at the latest revision, so later upgrades start
    from there.
    """
    bind = bind or engine
    with bind.connect() as connection:
        connection.execute(text("SELECT 1"))

    if inspect(bind).has_table("alembic_version"):
        return

    from . import models  # noqa: F401  registers the tables on Base.metadata

    Base.metadata.create_all(bind)
    if not MIGRATIONS_DIR.exists():
        logger.warning("No migrations at %s, database left unstamped", MIGRATIONS_DIR)
        return
    command.stamp(alembic_config(bind.url.render_as_string(hide_password=False)), "head")
    logger.info("Created schema and stamped it at head")

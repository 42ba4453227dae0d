#!/usr/bin/env python3
"""Database bootstrap: wait for the database, then `alembic upgrade head`.

The container entrypoint runs this before the API or the worker starts.
A migration failure exits non-zero so nothing starts on an unknown schema.
"""
import logging
import os
import sys
import time

from dotenv import load_dotenv
from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError

load_dotenv()

from core.config import settings  # noqa: E402
from core.logging import setup_logging  # noqa: E402

logger = logging.getLogger("run_migrations")

HERE = os.path.dirname(os.path.abspath(__file__))


def wait_for_database(max_retries: int = 30, delay_seconds: float = 1.0) -> bool:
    engine = create_engine(settings.database_url, pool_pre_ping=True)
    try:
        for attempt in range(1, max_retries + 1):
            try:
                with engine.connect() as conn:
                    conn.execute(text("SELECT 1"))
                return True
            except OperationalError:
                logger.info(f"Database is unavailable - sleeping (attempt {attempt}/{max_retries})")
                time.sleep(delay_seconds)
        return False
    finally:
        engine.dispose()


def _alembic_config():
    from alembic.config import Config

    cfg = Config(os.path.join(HERE, "alembic.ini"))
    cfg.set_main_option("script_location", os.path.join(HERE, "alembic"))
    return cfg


def single_head() -> str:
    """The one head revision; branched histories are refused."""
    from alembic.script import ScriptDirectory

    heads = ScriptDirectory.from_config(_alembic_config()).get_heads()
    if len(heads) != 1:
        raise RuntimeError(f"expected exactly one alembic head, found {sorted(heads)}")
    return heads[0]


def alembic_upgrade_head() -> None:
    from alembic import command

    command.upgrade(_alembic_config(), "head")


def main() -> int:
    setup_logging()

    if not wait_for_database():
        logger.error("Database is not ready after maximum retries")
        return 1

    try:
        head = single_head()
        alembic_upgrade_head()
    except Exception as e:
        logger.error(f"Alembic upgrade failed: {e}", exc_info=True)
        return 1

    logger.info(f"Migrations completed, schema at revision {head}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

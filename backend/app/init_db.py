# backend/app/init_db.py
"""Create all tables for local development (`python -m app.init_db`)."""

import logging

from sqlalchemy.engine import Engine

from app import models  # noqa: F401  registers mappers on Base.metadata
from app.database import Base, engine

logger = logging.getLogger(__name__)


def create_tables(bind: Engine = engine) -> None:
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=bind)
    logger.info("Tables created: %s", ", ".join(sorted(Base.metadata.tables)))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    create_tables()

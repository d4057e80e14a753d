"""Database engine and session factory construction.

Each HistoryStore owns the engine it creates here; nothing is cached at
module level, so separate configurations never share a connection pool.
"""

import logging
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from tell.config import TellConfig
from tell.storage.models import Base


logger = logging.getLogger(__name__)


def get_database_url(config: TellConfig) -> str:
    """Get database URL from configuration.

    Args:
        config: TellConfig instance

    Returns:
        SQLite database URL string
    """
    db_path = Path(config.db_path)

    # Ensure directory exists
    db_path.parent.mkdir(parents=True, exist_ok=True)

    return f"sqlite:///{db_path}"


def create_database_engine(config: TellConfig) -> Engine:
    """Create an engine for the configured database and its schema.

    Args:
        config: TellConfig instance

    Returns:
        SQLAlchemy Engine with all tables and indexes created
    """
    database_url = get_database_url(config)
    logger.debug(f"Opening database: {database_url}")

    engine = create_engine(
        database_url,
        connect_args={"check_same_thread": False},  # Needed for SQLite
        echo=config.verbose,
    )

    Base.metadata.create_all(bind=engine)
    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    """Create a session maker bound to an engine.

    Args:
        engine: SQLAlchemy Engine

    Returns:
        sessionmaker producing Session instances
    """
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=engine,
    )

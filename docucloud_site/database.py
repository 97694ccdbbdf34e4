import logging

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.orm import declarative_base, sessionmaker

logger = logging.getLogger(__name__)

Base = declarative_base()


def create_db_engine(database_url: str):
    connect_args = {}
    if database_url.startswith("sqlite"):
        # SQLite connections are shared across the server's worker threads
        connect_args["check_same_thread"] = False
    return create_engine(database_url, connect_args=connect_args, pool_pre_ping=True)


def create_session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


def create_reporting_views(engine):
    """Create (or refresh) the read-only reporting views used by the summary."""
    from .models import VIEW_DEFINITIONS

    dialect = engine.dialect.name
    with engine.begin() as conn:
        for name, select_sql in VIEW_DEFINITIONS.items():
            if dialect == "postgresql":
                ddl = f"CREATE OR REPLACE VIEW {name} AS {select_sql}"
            else:
                ddl = f"CREATE VIEW IF NOT EXISTS {name} AS {select_sql}"
            conn.execute(text(ddl))
    logger.info("Reporting views ready (%s)", ", ".join(VIEW_DEFINITIONS))


def init_db(engine):
    # Import models so they are registered on Base.metadata
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    create_reporting_views(engine)


def get_db(request: Request):
    """Yield a database session bound to the application's engine."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()

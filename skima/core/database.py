import logging
from typing import Generator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from skima.core.config import Settings

logger = logging.getLogger(__name__)

# Create Base class for models
Base = declarative_base()


def build_engine(settings: Settings) -> Engine:
    """
    Create the SQLAlchemy engine for the configured database.

    SQLite connections are shared across FastAPI's worker threads, so the
    same-thread check is disabled for them.
    """
    connect_args = {"check_same_thread": False} if settings.is_sqlite else {}
    return create_engine(
        settings.DATABASE_URL,
        echo=settings.SQL_ECHO,
        pool_pre_ping=True,  # Verify connections before using them
        connect_args=connect_args,
    )


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Dependency function to get database session.
    Used in FastAPI endpoints with Depends(get_db)

    The session factory is attached to app.state by create_app().
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def init_db(engine: Engine) -> None:
    """
    Create any missing tables.

    Schema migrations are out of scope; create_all only adds tables that do
    not exist yet and never alters existing ones.
    """
    from skima.models import collaborator, evaluation, role_profile, skill  # noqa: F401  register models
    Base.metadata.create_all(bind=engine)
    logger.info("Database schema ensured")

import logging
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError, TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session, sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from app.core.config import settings
from app.core.errors import StoreUnavailable

logger = logging.getLogger(__name__)


def build_engine(url: str):
    """Engine with every store call bounded by ``DB_TIMEOUT_SECONDS``."""
    if url.startswith("sqlite"):
        kwargs = {
            "connect_args": {"check_same_thread": False, "timeout": settings.DB_TIMEOUT_SECONDS},
        }
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=settings.SQL_ECHO, **kwargs)

    connect_args = {}
    if url.startswith("postgresql"):
        connect_args = {
            "connect_timeout": settings.DB_TIMEOUT_SECONDS,
            "options": f"-c statement_timeout={settings.DB_STATEMENT_TIMEOUT_MS}",
        }
    return create_engine(
        url,
        echo=settings.SQL_ECHO,
        pool_pre_ping=True,
        pool_timeout=settings.DB_TIMEOUT_SECONDS,
        connect_args=connect_args,
    )


engine = build_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def store_guard(db: Session):
    """Roll back and surface connectivity or timeout failures as StoreUnavailable."""
    try:
        yield
    except (OperationalError, PoolTimeoutError) as exc:
        db.rollback()
        logger.error("Store call failed: %s", exc)
        raise StoreUnavailable() from exc


def init_db():
    """Create all tables."""
    from app.models.user_db import user_db  # noqa: F401
    from app.models.event_db import event_db, participation_db  # noqa: F401
    from app.models.material_db import material_log_db  # noqa: F401

    Base.metadata.create_all(bind=engine)

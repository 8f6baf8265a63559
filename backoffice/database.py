# backoffice/database.py
from contextlib import contextmanager

from sqlmodel import SQLModel, create_engine, Session

from backoffice.core.config import get_settings

settings = get_settings()

# ---------------------------------------------------------
# Engine construction
#
# - sslmode=require   : appended for Postgres when DB_REQUIRE_SSL is set
# - pool_size         : bounded pool for server databases
# - max_overflow      : extra connections beyond the pool
# - pool_pre_ping=True: validate connections before using them
#
# SQLite (local runs, tests) uses its own pool class and rejects the
# sizing arguments, so it only gets check_same_thread=False.
# ---------------------------------------------------------


def _with_sslmode(db_url: str) -> str:
    """Append sslmode=require if it is not already present."""
    if "sslmode=" in db_url:
        return db_url
    if "?" in db_url:
        return db_url + "&sslmode=require"
    return db_url + "?sslmode=require"


def build_engine(db_url: str, echo: bool = False):
    """
    Create a SQLAlchemy engine for the given URL.

    Args:
        db_url: SQLAlchemy connection string.
        echo: log every SQL statement (debug only).
    """
    if db_url.startswith("sqlite"):
        return create_engine(
            db_url,
            echo=echo,
            connect_args={"check_same_thread": False},
        )

    if settings.DB_REQUIRE_SSL and db_url.startswith("postgresql"):
        db_url = _with_sslmode(db_url)

    return create_engine(
        db_url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
    )


engine = build_engine(settings.DATABASE_URL, echo=settings.DB_ECHO)


def create_db_and_tables() -> None:
    """
    Create all tables defined in SQLModel metadata if they do not exist.

    This is called once on application startup.
    """
    SQLModel.metadata.create_all(engine)


def get_session():
    """
    FastAPI dependency that yields a SQLModel Session.

    Usage:

        from fastapi import Depends

        @router.get("/example")
        def example_endpoint(session: Session = Depends(get_session)):
            ...
    """
    with Session(engine) as session:
        yield session


@contextmanager
def atomic(session: Session):
    """
    Run a multi-step write as one transaction.

    Commits when the block finishes; on any exception rolls back every
    flushed change and re-raises.
    """
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise

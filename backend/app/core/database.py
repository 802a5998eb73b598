import math
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool

from app.core.config import settings


def _create_engine(url: str):
    """Create the engine; SQLite gets a single shared connection and math functions."""
    if url.startswith("sqlite"):
        sqlite_engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        event.listen(sqlite_engine, "connect", _register_sqlite_math)
        return sqlite_engine

    return create_engine(
        url,
        pool_pre_ping=True,
        pool_recycle=300,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
    )


def _register_sqlite_math(dbapi_connection, connection_record):
    """SQLite builds often ship without trig functions; the haversine filter needs them."""
    def unary(fn):
        return lambda value: None if value is None else fn(value)

    for name, fn in (
        ("radians", math.radians),
        ("sin", math.sin),
        ("cos", math.cos),
        ("asin", math.asin),
        ("sqrt", math.sqrt),
    ):
        dbapi_connection.create_function(name, 1, unary(fn))
    dbapi_connection.create_function(
        "power", 2, lambda base, exp: None if base is None or exp is None else math.pow(base, exp)
    )


engine = _create_engine(settings.database_url.strip())

SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False,
)

Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """Request-scoped session; always returned to the pool."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

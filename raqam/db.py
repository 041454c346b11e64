# raqam/db.py
"""Database engine and session utilities.

The key-value store lives in a single SQLite file in the app's private data
directory. Engine and session factory are created from ``RAQAM_DB_URL``;
tests and embedding apps can build their own with :func:`make_engine`.
"""
import os
from contextlib import asynccontextmanager
from dotenv import load_dotenv
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

load_dotenv()

DEFAULT_DB_URL = "sqlite+aiosqlite:///./raqam.db"

Base = declarative_base()


def normalize_db_url(url: str) -> str:
    url = url.strip()
    # plain sqlite URLs need the async driver
    if url.startswith("sqlite://"):
        url = url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return url


def make_engine(url: str | None = None, echo: bool | None = None) -> AsyncEngine:
    if url is None:
        url = os.getenv("RAQAM_DB_URL") or DEFAULT_DB_URL
    if echo is None:
        echo = os.getenv("RAQAM_DB_ECHO", "0") == "1"
    return create_async_engine(normalize_db_url(url), echo=echo)


def make_session_factory(bind: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(bind=bind, autoflush=False, expire_on_commit=False)


engine = make_engine()
SessionLocal = make_session_factory(engine)


async def init_models(bind: AsyncEngine = engine) -> None:
    """Create the key-value table if it does not exist yet."""
    import raqam.models  # noqa: F401 ensure models are imported so tables are known

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@asynccontextmanager
async def session_scope(factory: async_sessionmaker = None):
    """Open a session for one user action and close it afterwards."""
    db = (factory or SessionLocal)()
    try:
        yield db
    finally:
        await db.close()

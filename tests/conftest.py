# tests/conftest.py
import pytest_asyncio
from raqam.db import init_models, make_engine, make_session_factory


@pytest_asyncio.fixture
async def db(tmp_path):
    # a throwaway sqlite file per test
    engine = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'raqam-test.db'}", echo=False)
    await init_models(engine)
    session = make_session_factory(engine)()
    yield session
    await session.close()
    await engine.dispose()

# raqam/storage.py
"""Persistent key-value storage over the `kv_store` table.

get/set/multi-get/multi-remove/enumerate over string keys and string values.
Errors propagate; callers in `raqam.crud` decide how to degrade.
"""
from sqlalchemy import select, delete, func
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Iterable, List, Optional, Tuple
from .models import KeyValue
from .utils import retry


async def get_item(db: AsyncSession, key: str) -> Optional[str]:
    res = await db.execute(select(KeyValue.value).where(KeyValue.key == key))
    return res.scalar_one_or_none()


async def multi_get(db: AsyncSession, keys: Iterable[str]) -> List[Tuple[str, Optional[str]]]:
    keys = list(keys)
    res = await db.execute(select(KeyValue.key, KeyValue.value).where(KeyValue.key.in_(keys)))
    found = {k: v for k, v in res.all()}
    return [(k, found.get(k)) for k in keys]


@retry(OperationalError)
async def set_item(db: AsyncSession, key: str, value: str) -> None:
    stmt = sqlite_insert(KeyValue.__table__).values(key=key, value=value)
    stmt = stmt.on_conflict_do_update(
        index_elements=["key"],
        set_={"value": stmt.excluded.value, "updated_at": func.now()},
    )
    try:
        await db.execute(stmt)
        await db.commit()
    except Exception:
        await db.rollback()
        raise


@retry(OperationalError)
async def multi_remove(db: AsyncSession, keys: Iterable[str]) -> None:
    try:
        await db.execute(delete(KeyValue).where(KeyValue.key.in_(list(keys))))
        await db.commit()
    except Exception:
        await db.rollback()
        raise


async def get_all_keys(db: AsyncSession) -> List[str]:
    res = await db.execute(select(KeyValue.key).order_by(KeyValue.key))
    return list(res.scalars().all())

# raqam/utils.py
"""Shared utilities: the store logger and an async retry decorator.

Logging goes through the root `logging` config with one line per record;
the level comes from `LOG_LEVEL` (default INFO, `.env` honoured).
"""
import os
import asyncio
import logging
from functools import wraps
from dotenv import load_dotenv

load_dotenv()

def get_logger(name=__name__):
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        level=getattr(logging, level, logging.INFO)
    )
    return logging.getLogger(name)

logger = get_logger("raqam-store")

def retry(exceptions, tries=3, delay=0.05, backoff=2, logger=logger):
    """Retry a coroutine on `exceptions`; the last attempt propagates."""
    def deco_retry(f):
        @wraps(f)
        async def f_retry(*args, **kwargs):
            mtries, mdelay = tries, delay
            while mtries > 1:
                try:
                    return await f(*args, **kwargs)
                except exceptions as e:
                    logger.warning("Retryable storage error: %s, retrying in %s sec", e, mdelay)
                    await asyncio.sleep(mdelay)
                    mtries -= 1
                    mdelay *= backoff
            return await f(*args, **kwargs)
        return f_retry
    return deco_retry

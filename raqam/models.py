# raqam/models.py
"""SQLAlchemy ORM model backing the persistent key-value store.

One row per logical key; values are opaque strings (JSON or a bare token).
"""
from sqlalchemy import Column, Text, TIMESTAMP, func
from .db import Base

class KeyValue(Base):
    __tablename__ = "kv_store"
    key = Column(Text, primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

"""
SQLite-backed key-value store for the local product cache.

Uses SQLAlchemy with one table of string keys and values.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional

from sqlalchemy import create_engine, Column, String, Text, DateTime
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


class CacheEntry(Base):
    """One cached value."""

    __tablename__ = "cache_entries"

    key = Column(String, primary_key=True)  # product-cache:<id>
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)


def init_database(db_path: Path):
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLAlchemy engine
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(engine)
    return engine


class SqliteStore:
    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self.engine = init_database(self.db_path)
        self.Session = sessionmaker(bind=self.engine)

    def get(self, key: str) -> Optional[str]:
        with self.Session() as session:
            entry = session.get(CacheEntry, key)
            return entry.value if entry is not None else None

    def set(self, key: str, value: str) -> None:
        with self.Session() as session:
            entry = session.get(CacheEntry, key)
            if entry is None:
                session.add(CacheEntry(key=key, value=value))
            else:
                entry.value = value
            session.commit()

    def delete(self, key: str) -> None:
        with self.Session() as session:
            entry = session.get(CacheEntry, key)
            if entry is not None:
                session.delete(entry)
                session.commit()

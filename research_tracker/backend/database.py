"""
Persistence ports for the research tracker.

The entry store only needs a single named slot it can read from and
overwrite: a key-value cell holding the JSON encoded collection.  Two
ports provide that contract:

* :class:`SlotStorage` keeps the slot in a SQLAlchemy managed table.
  A local SQLite file is used by default; ``DATABASE_URL`` can point
  at any other database SQLAlchemy understands.
* :class:`MemoryStorage` keeps the slot in a dictionary and is used
  by the tests.

Both expose ``read()`` returning the stored text (or ``None`` when the
slot has never been written) and ``write(blob)`` replacing it.
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Optional, Protocol

from sqlalchemy import Column, DateTime, String, Text, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

DEFAULT_SLOT = 'researchEntries'

# SQLAlchemy base class used to declare models
Base = declarative_base()


class StorageSlot(Base):
    """ORM model for one named key-value slot."""

    __tablename__ = 'storage_slots'

    key = Column(String, primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, nullable=True)


class StoragePort(Protocol):
    """What the entry store needs from a persistence backend."""

    def read(self) -> Optional[str]:
        ...

    def write(self, blob: str) -> None:
        ...


def _get_database_url() -> str:
    """Resolve the database URL from environment variables.

    When ``DATABASE_URL`` is unset the slot lives in a SQLite file
    named ``research_entries.db`` next to the package.  A URL starting
    with ``postgres://`` is rewritten to ``postgresql://`` because
    SQLAlchemy does not recognise the former scheme.
    """
    url = os.getenv('DATABASE_URL')
    if url:
        if url.startswith('postgres://'):
            url = url.replace('postgres://', 'postgresql://', 1)
        logger.info(f"Using database URL from environment: {url}")
        return url
    default_path = os.path.join(os.path.dirname(os.path.dirname(__file__)), 'research_entries.db')
    logger.info(f"Using local SQLite database at {default_path}")
    return f"sqlite:///{default_path}"


def _get_slot_name() -> str:
    return os.getenv('RESEARCH_TRACKER_SLOT', DEFAULT_SLOT)


def create_storage_engine(url: Optional[str] = None) -> Engine:
    """Create an engine for ``url`` (or the configured database).

    StaticPool is used for SQLite so that the connection can be shared
    across threads, which Streamlit does between reruns.  It also keeps
    ``sqlite:///:memory:`` databases alive for the engine's lifetime.
    """
    url = url or _get_database_url()
    if url.startswith('sqlite'):
        return create_engine(
            url,
            connect_args={'check_same_thread': False},
            poolclass=StaticPool
        )
    return create_engine(url, pool_pre_ping=True)


class SlotStorage:
    """A single named slot stored in the ``storage_slots`` table."""

    def __init__(self, slot: Optional[str] = None, url: Optional[str] = None,
                 engine: Optional[Engine] = None) -> None:
        self.slot = slot or _get_slot_name()
        self.engine = engine or create_storage_engine(url)
        self._session_factory = sessionmaker(bind=self.engine, autocommit=False, autoflush=False)
        self.init_db()

    def init_db(self) -> None:
        """Create the slot table if it does not exist yet."""
        Base.metadata.create_all(bind=self.engine)
        logger.info("Database initialised (tables created if missing)")

    @contextmanager
    def get_db(self) -> Any:
        """Provide a transactional scope for database operations.

        The session is committed when the block exits normally, rolled
        back if it raises and always closed.
        """
        db = self._session_factory()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def read(self) -> Optional[str]:
        """Return the slot's stored text, or ``None`` if never written."""
        with self.get_db() as session:
            row = session.get(StorageSlot, self.slot)
            return row.value if row is not None else None

    def write(self, blob: str) -> None:
        """Overwrite the slot with ``blob``."""
        with self.get_db() as session:
            row = session.get(StorageSlot, self.slot)
            if row is None:
                session.add(StorageSlot(key=self.slot, value=blob, updated_at=datetime.now()))
            else:
                row.value = blob
                row.updated_at = datetime.now()
        logger.debug(f"Wrote {len(blob)} characters to slot {self.slot!r}")


class MemoryStorage:
    """An in-process slot, shared by every store given the same instance."""

    def __init__(self, initial: Optional[str] = None) -> None:
        self.slots: Dict[str, str] = {}
        self.writes = 0
        if initial is not None:
            self.slots[DEFAULT_SLOT] = initial

    def read(self) -> Optional[str]:
        return self.slots.get(DEFAULT_SLOT)

    def write(self, blob: str) -> None:
        self.slots[DEFAULT_SLOT] = blob
        self.writes += 1

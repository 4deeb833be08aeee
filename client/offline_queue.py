"""
Durable queue of fixes that could not be sent, replayed by the sync worker.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Union

from sqlalchemy import create_engine, Column, Integer, Float, BigInteger, Text, DateTime, func
from sqlalchemy.orm import declarative_base, sessionmaker

from client.geolocation import Fix
from core.logger import logger
import config

QueueBase = declarative_base()


class PendingLocation(QueueBase):
    """A fix waiting to be sent, with the token that was current when it was captured."""
    __tablename__ = "pending_locations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    accuracy = Column(Float, nullable=True)
    fix_timestamp = Column(BigInteger, nullable=False)
    token = Column(Text, nullable=False)
    captured_at = Column(DateTime, default=datetime.utcnow, nullable=False)


@dataclass(frozen=True)
class QueuedFix:
    id: int
    fix: Fix
    token: str


class OfflineQueue(ABC):
    """Append-only store of unsent fixes. Entries are removed only by remove() or clear()."""

    @abstractmethod
    def enqueue(self, fix: Fix, token: str) -> None:
        ...

    @abstractmethod
    def drain_all(self) -> List[QueuedFix]:
        """All entries, oldest first. Entries are not removed."""

    @abstractmethod
    def remove(self, ids: Iterable[int]) -> None:
        """Delete the given entries; entries added since they were drained stay queued."""

    @abstractmethod
    def clear(self) -> None:
        ...

    @abstractmethod
    def __len__(self) -> int:
        ...


class SqliteOfflineQueue(OfflineQueue):
    """OfflineQueue persisted in a local SQLite file."""

    def __init__(self, path: Union[str, Path] = config.OFFLINE_QUEUE_PATH):
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.engine = create_engine(f"sqlite:///{path}", connect_args={"check_same_thread": False})
        QueueBase.metadata.create_all(bind=self.engine)
        self.SessionLocal = sessionmaker(bind=self.engine)

    def enqueue(self, fix: Fix, token: str) -> None:
        with self.SessionLocal() as session:
            session.add(PendingLocation(
                latitude=fix.latitude,
                longitude=fix.longitude,
                accuracy=fix.accuracy,
                fix_timestamp=fix.timestamp,
                token=token,
            ))
            session.commit()
        logger.info(f"Fix from {fix.timestamp} queued for background sync")

    def drain_all(self) -> List[QueuedFix]:
        with self.SessionLocal() as session:
            rows = session.query(PendingLocation).order_by(PendingLocation.id).all()
            return [
                QueuedFix(
                    id=row.id,
                    fix=Fix(row.latitude, row.longitude, row.accuracy, row.fix_timestamp),
                    token=row.token,
                )
                for row in rows
            ]

    def remove(self, ids: Iterable[int]) -> None:
        ids = list(ids)
        if not ids:
            return
        with self.SessionLocal() as session:
            session.query(PendingLocation).filter(PendingLocation.id.in_(ids)).delete(synchronize_session=False)
            session.commit()

    def clear(self) -> None:
        with self.SessionLocal() as session:
            session.query(PendingLocation).delete()
            session.commit()

    def __len__(self) -> int:
        with self.SessionLocal() as session:
            return session.query(func.count(PendingLocation.id)).scalar() or 0

    def close(self) -> None:
        self.engine.dispose()

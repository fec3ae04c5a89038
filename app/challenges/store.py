"""
Challenge progress persistence.

Every stored document carries a schema version. Reads go through
migrate_document(), which upgrades old documents and rejects malformed
ones instead of trusting their shape.
"""
import logging
from typing import Optional, Protocol

from pydantic import ValidationError
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.sql import func

from app.challenges.models import ChallengeProgressRecord
from app.challenges.schemas import ChallengeProgress

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 2

# Dialects with a native INSERT ... ON CONFLICT DO UPDATE
_UPSERT_INSERTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


class ProgressStoreError(Exception):
    """The backing store could not be read."""


class ChallengeProgressStore(Protocol):
    def read(self, user_id: int) -> Optional[ChallengeProgress]:
        """Stored progress, or None when absent or unreadable. Raises ProgressStoreError on backend failure."""
        ...

    def write(self, user_id: int, progress: ChallengeProgress) -> bool:
        """Upsert. Returns False instead of raising when the write fails."""
        ...


def migrate_document(doc: dict) -> Optional[ChallengeProgress]:
    """Upgrade a stored document to the current schema. None if it can't be trusted."""
    version = doc.get("schemaVersion", 1)
    if not isinstance(version, int) or version < 1 or version > SCHEMA_VERSION:
        logger.warning("[STORE] rejecting progress document with schemaVersion=%r", version)
        return None

    data = {k: v for k, v in doc.items() if k != "schemaVersion"}
    if version < 2:
        # v1 had no failure tracking
        if data.get("failed") is None:
            data["failed"] = False
        data.setdefault("failedReason", None)

    try:
        return ChallengeProgress.model_validate(data)
    except ValidationError as exc:
        logger.warning("[STORE] rejecting malformed progress document: %s", exc.errors()[:3])
        return None


def progress_to_document(progress: ChallengeProgress) -> dict:
    return {"schemaVersion": SCHEMA_VERSION, **progress.model_dump(mode="json", by_alias=True)}


class SqlChallengeProgressStore:
    """Store backed by the challenge_progress table."""

    def __init__(self, db: Session):
        self.db = db

    def read(self, user_id: int) -> Optional[ChallengeProgress]:
        try:
            row = (
                self.db.query(ChallengeProgressRecord)
                .filter(ChallengeProgressRecord.user_id == user_id)
                .first()
            )
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise ProgressStoreError(f"read failed for user={user_id}") from exc

        if row is None:
            return None
        return migrate_document(_record_to_document(row))

    def write(self, user_id: int, progress: ChallengeProgress) -> bool:
        values = _progress_to_columns(progress)
        try:
            insert = _UPSERT_INSERTS.get(self.db.get_bind().dialect.name)
            if insert is not None:
                stmt = insert(ChallengeProgressRecord).values(user_id=user_id, **values)
                stmt = stmt.on_conflict_do_update(
                    index_elements=["user_id"],
                    set_={**values, "updated_at": func.now()},
                )
                self.db.execute(stmt)
            else:
                row = (
                    self.db.query(ChallengeProgressRecord)
                    .filter(ChallengeProgressRecord.user_id == user_id)
                    .first()
                )
                if row is None:
                    row = ChallengeProgressRecord(user_id=user_id)
                    self.db.add(row)
                for key, value in values.items():
                    setattr(row, key, value)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("[STORE] write failed for user=%s", user_id)
            return False
        return True


class InMemoryChallengeProgressStore:
    """Process-local store holding serialized documents (local fallback and tests)."""

    def __init__(self):
        self._docs: dict[int, dict] = {}

    def read(self, user_id: int) -> Optional[ChallengeProgress]:
        doc = self._docs.get(user_id)
        if doc is None:
            return None
        return migrate_document(doc)

    def write(self, user_id: int, progress: ChallengeProgress) -> bool:
        self._docs[user_id] = progress_to_document(progress)
        return True

    def put_document(self, user_id: int, doc: dict) -> None:
        """Store a raw document as-is, e.g. one exported by the old browser client."""
        self._docs[user_id] = dict(doc)


def _progress_to_columns(progress: ChallengeProgress) -> dict:
    doc = progress.model_dump(mode="json", by_alias=True)
    return {
        "schema_version": SCHEMA_VERSION,
        "is_active": progress.is_active,
        "start_date": progress.start_date,
        "current_day": progress.current_day,
        "consecutive_days": progress.consecutive_days,
        "completed_days": progress.completed_days,
        "daily_challenges": doc["dailyChallenges"],
        "activity_logs": doc["activityLogs"],
        "last_activity_date": progress.last_activity_date,
        "failed": progress.failed,
        "failed_reason": progress.failed_reason,
    }


def _record_to_document(row: ChallengeProgressRecord) -> dict:
    return {
        "schemaVersion": row.schema_version or 1,
        "isActive": bool(row.is_active),
        "startDate": row.start_date,
        "currentDay": row.current_day or 0,
        "consecutiveDays": row.consecutive_days or 0,
        "completedDays": row.completed_days or 0,
        "dailyChallenges": row.daily_challenges or [],
        "activityLogs": row.activity_logs or [],
        "lastActivityDate": row.last_activity_date,
        "failed": row.failed,
        "failedReason": row.failed_reason,
    }

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from resolvix.core.config import settings
from resolvix.core.errors import BackendError, ValidationError
from resolvix.models.log import Log
from resolvix.services.change_feed import get_change_feed

logger = logging.getLogger(__name__)

LOG_LEVELS = ("debug", "info", "warning", "error")


def log_to_event(row: Log) -> dict:
    return {
        "id": row.id,
        "level": row.level,
        "source": row.source,
        "message": row.message,
        "metadata": row.meta or {},
        "timestamp": row.timestamp.isoformat() if row.timestamp else None,
    }


def ingest_log(
    db: Session,
    *,
    level: str,
    source: str,
    message: str,
    metadata: Optional[dict] = None,
    timestamp: Optional[datetime] = None,
) -> Log:
    """Append one log row. Logs are never updated."""
    missing = [name for name, value in (("level", level), ("source", source), ("message", message))
               if not value or not str(value).strip()]
    if missing:
        raise ValidationError("Missing required fields: " + ", ".join(missing))
    if level not in LOG_LEVELS:
        raise ValidationError(f"Unknown log level '{level}'")

    row = Log(
        level=level,
        source=source.strip(),
        message=message,
        meta=metadata or {},
        timestamp=timestamp or datetime.now(timezone.utc),
    )
    try:
        db.add(row)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Log ingestion failed for source %s", source)
        raise BackendError("Could not store the log entry. Please retry.") from e
    db.refresh(row)

    get_change_feed().publish("logs", "INSERT", log_to_event(row))
    return row


def list_logs(
    db: Session,
    *,
    level: Optional[str] = None,
    source: Optional[str] = None,
    search: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[Log]:
    limit = min(limit or settings.LIVE_LOG_DEFAULT_LIMIT, settings.LIVE_LOG_MAX_LIMIT)
    q = db.query(Log)
    if level:
        q = q.filter(Log.level == level)
    if source:
        q = q.filter(Log.source == source)
    if search:
        q = q.filter(Log.message.ilike(f"%{search}%"))
    return q.order_by(Log.timestamp.desc(), Log.id.desc()).limit(limit).all()

import logging
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Iterable, Optional

from lending.config import Config
from lending.sa.database import Database
from lending.sa.models import AuditLogEntry, AuditAction

logger = logging.getLogger(__name__)
alert_logger = logging.getLogger(Config.ALERT_LOGGER)


def _jsonable(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple, set)):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    return value


def snapshot(obj: Any, fields: Iterable[str]) -> Dict[str, Any]:
    """Build a JSON-safe payload from selected attributes of a model"""
    return {name: _jsonable(getattr(obj, name)) for name in fields}


class AuditRecorder:
    """Append-only log of committed mutations.

    Writes in its own session after the triggering unit has committed, so a
    logging failure can never undo or fail a data change. Failures go to the
    alert logger instead of the caller.
    """

    def __init__(self, database: Database):
        self.database = database

    def record(self, table: str, action: AuditAction, record_id: int,
               actor: Optional[int] = None, payload: Optional[Dict[str, Any]] = None) -> Optional[AuditLogEntry]:
        """Append one audit row.

        Returns:
            The stored entry, or None if the write failed (already alerted)
        """
        try:
            with self.database.get_db() as session:
                entry = AuditLogEntry(
                    table_name=table,
                    action=AuditAction(action).value,
                    record_id=record_id,
                    changed_by=actor,
                    details=_jsonable(payload) if payload is not None else None
                )
                session.add(entry)
            return entry
        except Exception:
            alert_logger.exception(
                f"Audit write failed for {table} {getattr(action, 'value', action)} id={record_id}; "
                f"audit log has a gap"
            )
            return None

    def history(self, table: str, record_id: int):
        """Entries for one record, oldest first"""
        with self.database.get_db() as session:
            return (
                session.query(AuditLogEntry)
                .filter(AuditLogEntry.table_name == table, AuditLogEntry.record_id == record_id)
                .order_by(AuditLogEntry.changed_at, AuditLogEntry.id)
                .all()
            )

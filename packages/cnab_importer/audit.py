"""Best-effort user activity log for completed imports."""

from __future__ import annotations

from db.client import session_scope
from db.models.cnab import CnabUserLog
from sqlalchemy.orm import Session

from .logging_setup import get_logger

logger = get_logger("cnab_importer.audit")


def upload_message(user_id: int, file_name: str) -> str:
    return f"User {user_id} uploaded file {file_name}."


def append_user_log(session: Session, *, user_id: int, message: str) -> CnabUserLog:
    row = CnabUserLog(user_id=user_id, log=message)
    session.add(row)
    session.flush()
    return row


def record_upload(*, user_id: int, file_name: str, database_url: str | None = None) -> bool:
    """Append the upload entry in its own transaction.

    Returns ``False`` (after logging) when the append fails; the import that
    triggered it is already committed and is not affected.
    """

    try:
        with session_scope(database_url=database_url) as session:
            append_user_log(session, user_id=user_id, message=upload_message(user_id, file_name))
    except Exception:
        logger.exception("Failed to append audit log for user %s, file %s", user_id, file_name)
        return False
    return True


__all__ = ["append_user_log", "record_upload", "upload_message"]

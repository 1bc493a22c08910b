"""
Status edit logging.

Provides a context manager and logger class that record every edit attempt
(submitted fields, outcome, error, timing) in the status_edit_log table.
"""

import sys
import time
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy.exc import OperationalError, SQLAlchemyError

from db import Database
from db.models import StatusEditLog
from domain.errors import StatusError


class StatusEditLogger:
    """
    Logger for one status edit attempt.

    The workflow reports its outcome through mark_saved / mark_failed; the
    context manager persists the entry when the block exits.
    """

    def __init__(self, db: Database, article_id: int, submitted_fields: Optional[Dict[str, Any]] = None):
        """
        Initialize logger.

        Args:
            db: Database the log row is written to
            article_id: Page ID being edited
            submitted_fields: Raw form fields as submitted
        """
        self.db = db
        self.article_id = article_id
        self.submitted_fields = {k: (None if v is None else str(v)) for k, v in (submitted_fields or {}).items()}

        # Timing
        self.started_at = datetime.utcnow()
        self.completed_at: Optional[datetime] = None
        self.duration_ms: Optional[int] = None

        # Status
        self.success: bool = True
        self.error_type: Optional[str] = None
        self.error_message: Optional[str] = None
        self.log_id: Optional[int] = None

    def _finish(self):
        self.completed_at = datetime.utcnow()
        self.duration_ms = int((self.completed_at - self.started_at).total_seconds() * 1000)

    def mark_saved(self):
        """Mark the edit as stored."""
        self._finish()
        self.success = True

    def mark_failed(self, error: Exception):
        """Mark the edit as rejected or failed."""
        self._finish()
        self.success = False
        self.error_type = error.code if isinstance(error, StatusError) else type(error).__name__
        self.error_message = str(error)

    def save(self):
        """
        Save log entry to database.

        Uses its own session so the entry is written whether or not the edit
        transaction committed. Retries briefly on a locked database and only
        warns on stderr when the entry cannot be written.
        """
        session = self.db.get_session()

        max_retries = 3
        retry_delay = 0.1

        try:
            for attempt in range(max_retries):
                try:
                    entry = StatusEditLog(
                        page_id=self.article_id,
                        submitted_fields=self.submitted_fields or None,
                        success=1 if self.success else 0,
                        error_type=self.error_type,
                        error_message=self.error_message,
                        started_at=self.started_at,
                        completed_at=self.completed_at,
                        duration_ms=self.duration_ms
                    )
                    session.add(entry)
                    session.commit()
                    self.log_id = entry.id
                    break

                except OperationalError:
                    session.rollback()
                    if attempt < max_retries - 1:
                        time.sleep(retry_delay)
                        retry_delay *= 2
                        continue
                    print(f"Warning: Failed to save status edit log after {max_retries} attempts (database locked)", file=sys.stderr)

                except SQLAlchemyError as e:
                    session.rollback()
                    print(f"Warning: Failed to save status edit log: {e}", file=sys.stderr)
                    break

        finally:
            session.close()


@contextmanager
def log_status_edit(db: Database, article_id: int, submitted_fields: Optional[Dict[str, Any]] = None, enabled: bool = True):
    """
    Context manager for logging a status edit attempt.

    Unexpected exceptions are recorded as failures and re-raised.

    Args:
        db: Database the log row is written to
        article_id: Page ID being edited
        submitted_fields: Raw form fields as submitted
        enabled: When False nothing is written

    Yields:
        StatusEditLogger instance

    Example:
        >>> with log_status_edit(db, 42, {'status': 'review'}) as edit_log:
        ...     result = store.save(record)
        ...     edit_log.mark_saved() if result.ok else edit_log.mark_failed(result.error)
    """
    logger = StatusEditLogger(db, article_id, submitted_fields)

    try:
        yield logger
        if logger.completed_at is None:
            logger.mark_saved()
    except Exception as e:
        logger.mark_failed(e)
        raise
    finally:
        if enabled:
            logger.save()

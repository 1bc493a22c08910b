"""
Status edit workflow.

Validates one editor submission and stores it as the article's status
record. Every expected failure comes back on the EditResult; no failure
leaves a partial write behind.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError

from db import Database, StatusCode
from db.status_store import StatusRecordStore
from domain.edit_log import log_status_edit
from domain.errors import FieldValidationError, PersistenceError, UnknownArticleError
from domain.records import EDITABLE_FIELDS, EditResult, StatusRecord
from domain.status import derive_effective_status, status_locked
from settings import get_setting, get_bool_setting

DATE_FORMAT = '%Y-%m-%d'

_UNSIGNED_INT = re.compile(r'^\d+$')


def normalize_fields(raw_fields: Mapping[str, Any]) -> Dict[str, Any]:
    """Strip strings and collapse empty values to None."""
    normalized = {}
    for name, value in raw_fields.items():
        if isinstance(value, str):
            value = value.strip() or None
        normalized[name] = value
    return normalized


def parse_wordcount(value: Any) -> Optional[int]:
    """Parse a non-negative integer; 0 is valid and distinct from None."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise FieldValidationError('wordcount', 'must be a whole number')
    if isinstance(value, int):
        if value < 0:
            raise FieldValidationError('wordcount', 'cannot be negative')
        return value
    text = str(value)
    if text.startswith('-') and _UNSIGNED_INT.match(text[1:]):
        raise FieldValidationError('wordcount', 'cannot be negative')
    if not _UNSIGNED_INT.match(text):
        raise FieldValidationError('wordcount', f"'{text}' is not a whole number")
    return int(text)


def parse_date(field: str, value: Any) -> Optional[date]:
    """Parse a YYYY-MM-DD calendar date."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value), DATE_FORMAT).date()
    except ValueError:
        raise FieldValidationError(field, f"'{value}' is not a date in YYYY-MM-DD format")


def parse_status(value: Any) -> Optional[StatusCode]:
    """Parse a stored status code."""
    if value is None:
        return None
    try:
        return StatusCode(value)
    except ValueError:
        raise FieldValidationError('status', f"unknown status '{value}'; choose one of {', '.join(StatusCode.values())}")


def parse_edit_fields(raw_fields: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Normalize and validate an editor submission.

    Every editable field is returned; fields missing from the submission are
    None, since an edit overwrites the whole editable part of the record.

    Raises:
        FieldValidationError: On an unknown field or malformed value
    """
    unknown = sorted(set(raw_fields) - set(EDITABLE_FIELDS))
    if unknown:
        raise FieldValidationError(unknown[0], 'is not an editable field')

    data = normalize_fields(raw_fields)
    fields = {name: data.get(name) for name in EDITABLE_FIELDS}

    fields['wordcount'] = parse_wordcount(fields['wordcount'])
    fields['start_date'] = parse_date('start_date', fields['start_date'])
    fields['end_date'] = parse_date('end_date', fields['end_date'])
    fields['status'] = parse_status(fields['status'])
    for name in ('comments', 'translator', 'project', 'suggested_name'):
        if fields[name] is not None:
            fields[name] = str(fields[name])

    return fields


@dataclass
class EditView:
    """What an editing form shows for one article."""

    article_id: int
    title: str
    record: StatusRecord
    actual_translation: Optional[str]
    effective_status: StatusCode
    status_locked: bool


class StatusEditWorkflow:
    """Apply editor submissions to status records."""

    def __init__(
        self,
        db: Database,
        store: Optional[StatusRecordStore] = None,
        target_language: Optional[str] = None,
        log_edits: Optional[bool] = None
    ):
        """
        Args:
            db: Database with article metadata and status records
            store: Record store (default: one over db)
            target_language: Language code of translation links (default: TARGET_LANGUAGE setting)
            log_edits: Write status_edit_log rows (default: EDIT_LOG_ENABLED setting)
        """
        self.db = db
        self.store = store or StatusRecordStore(db)
        self.target_language = target_language or get_setting('TARGET_LANGUAGE', 'ar')
        self.log_edits = get_bool_setting('EDIT_LOG_ENABLED', 'True') if log_edits is None else log_edits

    def _article_exists(self, article_id: int) -> bool:
        session = self.db.get_session()
        try:
            return self.db.page_exists(session, article_id)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not read page {article_id}: {e}") from e
        finally:
            session.close()

    def load_edit_view(self, article_id: int) -> Optional[EditView]:
        """
        Load an article's record with its derived display state.

        Returns:
            EditView, or None when the article does not exist. An article
            without a record gets a default untranslated one.

        Raises:
            PersistenceError: If the database cannot be read
        """
        session = self.db.get_session()
        try:
            page = self.db.get_page(session, article_id)
            if not page:
                return None
            title = page.display_title
            actual_translation = self.db.get_langlink_title(session, article_id, self.target_language)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not read page {article_id}: {e}") from e
        finally:
            session.close()

        record = self.store.get_or_default(article_id)
        has_link = actual_translation is not None
        return EditView(
            article_id=article_id,
            title=title,
            record=record,
            actual_translation=actual_translation,
            effective_status=derive_effective_status(record.status, has_link),
            status_locked=status_locked(record.status, has_link),
        )

    def apply_edit(self, article_id: int, raw_fields: Mapping[str, Any]) -> EditResult:
        """
        Validate and store one editor submission.

        Steps: normalize empties to None, validate wordcount / dates /
        status, load or synthesize the record, overwrite the editable
        fields, save. The submitted status is stored as-is even when a
        translation link makes the article translated.

        Args:
            article_id: Page ID
            raw_fields: Submitted form fields (see EDITABLE_FIELDS)

        Returns:
            EditResult with the stored record, or one of FieldValidationError,
            UnknownArticleError, DuplicateSuggestionError, PersistenceError
        """
        with log_status_edit(self.db, article_id, dict(raw_fields), enabled=self.log_edits) as edit_log:
            result = self._apply(article_id, raw_fields)
            if result.ok:
                edit_log.mark_saved()
            else:
                edit_log.mark_failed(result.error)
        return result

    def _apply(self, article_id: int, raw_fields: Mapping[str, Any]) -> EditResult:
        try:
            fields = parse_edit_fields(raw_fields)
        except FieldValidationError as e:
            return EditResult(article_id, error=e)

        try:
            if not self._article_exists(article_id):
                return EditResult(article_id, error=UnknownArticleError(article_id))
            record = self.store.get_or_default(article_id)
        except PersistenceError as e:
            return EditResult(article_id, error=e)

        updated = record.model_copy(update=fields)
        saved = self.store.save(updated, fields=EDITABLE_FIELDS)
        return EditResult(article_id, record=saved.record, error=saved.error)

"""
Persistence for per-article translation status records.

Every public method opens its own session, so one call is one transaction.
Write failures come back as SaveResult errors instead of exceptions.
"""

from typing import Iterable, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from domain.errors import DuplicateSuggestionError, PersistenceError
from domain.records import SaveResult, StatusRecord
from .database import Database
from .models import Page, TranslationStatus

# Columns copied between StatusRecord and TranslationStatus
RECORD_FIELDS = (
    'status',
    'comments',
    'translator',
    'project',
    'main_category',
    'suggested_name',
    'wordcount',
    'start_date',
    'end_date',
    'pageviews',
)


class StatusRecordStore:
    """Create, read and update TranslationStatus rows."""

    def __init__(self, db: Database):
        self.db = db

    @staticmethod
    def to_record(row: TranslationStatus) -> StatusRecord:
        """Detach an ORM row into a StatusRecord."""
        data = {field: getattr(row, field) for field in RECORD_FIELDS}
        if data['pageviews'] is None:
            data['pageviews'] = 0
        return StatusRecord(article_id=row.page_id, **data)

    def get(self, article_id: int) -> Optional[StatusRecord]:
        """
        Get the stored record for an article.

        Returns:
            StatusRecord, or None when the article has no record yet

        Raises:
            PersistenceError: If the database cannot be read
        """
        session = self.db.get_session()
        try:
            row = session.get(TranslationStatus, article_id)
            return self.to_record(row) if row else None
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not read status of page {article_id}: {e}") from e
        finally:
            session.close()

    def get_or_default(self, article_id: int) -> StatusRecord:
        """Get the stored record, or a fresh untranslated one (not saved)."""
        return self.get(article_id) or StatusRecord(article_id=article_id)

    def exists(self, article_id: int) -> bool:
        """Check whether a status record is stored for an article."""
        session = self.db.get_session()
        try:
            return session.query(TranslationStatus.page_id).filter_by(page_id=article_id).first() is not None
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not read status of page {article_id}: {e}") from e
        finally:
            session.close()

    def find_suggestion_holder(self, session: Session, suggested_name: str, exclude_article_id: int):
        """
        Find another record holding a suggested name.

        Returns:
            (page_id, page_title) row, or None. page_title is None when the
            holder has no article metadata.
        """
        return (session.query(TranslationStatus.page_id, Page.title)
                .select_from(TranslationStatus)
                .outerjoin(Page, Page.page_id == TranslationStatus.page_id)
                .filter(TranslationStatus.suggested_name == suggested_name)
                .filter(TranslationStatus.page_id != exclude_article_id)
                .first())

    def _duplicate_error(self, session: Session, record: StatusRecord) -> Optional[DuplicateSuggestionError]:
        holder = self.find_suggestion_holder(session, record.suggested_name, record.article_id)
        if not holder:
            return None
        title = holder.title.replace('_', ' ') if holder.title else None
        return DuplicateSuggestionError(record.article_id, record.suggested_name, holder.page_id, title)

    def save(self, record: StatusRecord, fields: Optional[Iterable[str]] = None) -> SaveResult:
        """
        Insert or update a record.

        The suggestion uniqueness check and the write share one transaction.
        A concurrent writer that passes the check first is stopped by the
        unique index on suggested_name, which maps to the same error.

        Args:
            record: Record to store
            fields: Columns to write on an existing row (default: all). New
                rows always receive every field of the record.

        Returns:
            SaveResult with the stored record, or a DuplicateSuggestionError /
            PersistenceError. Nothing is written when an error is returned.
        """
        fields = tuple(fields) if fields is not None else RECORD_FIELDS
        check_suggestion = bool((record.suggested_name or '').strip()) and 'suggested_name' in fields

        session = self.db.get_session()
        try:
            if check_suggestion:
                duplicate = self._duplicate_error(session, record)
                if duplicate:
                    return SaveResult(error=duplicate)

            row = session.get(TranslationStatus, record.article_id)
            if row is None:
                row = TranslationStatus(page_id=record.article_id)
                session.add(row)
                write_fields = RECORD_FIELDS
            else:
                write_fields = fields

            for field in write_fields:
                value = getattr(record, field)
                if field == 'status' and value is not None:
                    value = value.value
                elif isinstance(value, str) and not value.strip():
                    # Empty strings would collide in the unique suggested_name index
                    value = None
                setattr(row, field, value)

            session.commit()
            return SaveResult(record=self.to_record(row))

        except IntegrityError as e:
            session.rollback()
            duplicate = self._duplicate_error(session, record) if check_suggestion else None
            if duplicate:
                return SaveResult(error=duplicate)
            return SaveResult(error=PersistenceError(f"Could not save status of page {record.article_id}: {e.orig}"))

        except SQLAlchemyError as e:
            session.rollback()
            return SaveResult(error=PersistenceError(f"Could not save status of page {record.article_id}: {e}"))

        finally:
            session.close()

    def set_external_fields(
        self,
        article_id: int,
        pageviews: Optional[int] = None,
        main_category: Optional[str] = None
    ) -> SaveResult:
        """
        Store externally supplied data (page views, main category).

        Creates the record when missing and leaves editor fields untouched.
        Arguments left as None are not written.
        """
        try:
            record = self.get_or_default(article_id)
        except PersistenceError as e:
            return SaveResult(error=e)

        fields = []
        if pageviews is not None:
            record.pageviews = pageviews
            fields.append('pageviews')
        if main_category is not None:
            record.main_category = main_category or None
            fields.append('main_category')

        return self.save(record, fields=fields)

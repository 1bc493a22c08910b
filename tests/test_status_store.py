"""
Tests for StatusRecordStore.
"""

from datetime import date

import pytest
from sqlalchemy.exc import OperationalError

from db.models import StatusCode, TranslationStatus
from db.status_store import StatusRecordStore
from domain.errors import DuplicateSuggestionError, PersistenceError
from domain.records import StatusRecord


class TestGetAndExists:

    def test_missing_record(self, store, add_page):
        add_page(1, 'Alpha')
        assert store.get(1) is None
        assert store.exists(1) is False

    def test_missing_article_is_not_an_error(self, store):
        assert store.get(404) is None
        default = store.get_or_default(404)
        assert default.article_id == 404
        assert default.status is None
        assert default.pageviews == 0

    def test_round_trip(self, store, add_page):
        add_page(1, 'Alpha')
        record = StatusRecord(
            article_id=1,
            status=StatusCode.IN_PROGRESS,
            comments='Needs a glossary',
            translator='Dana',
            project='Housing',
            suggested_name='ألفا',
            wordcount=0,
            start_date=date(2024, 5, 1),
            end_date=date(2024, 4, 1),
        )
        result = store.save(record)

        assert result.ok
        assert store.exists(1)
        assert store.get(1) == record
        assert result.record == record

    def test_read_failure_raises_persistence_error(self, store, monkeypatch):
        class BrokenSession:
            def get(self, *args, **kwargs):
                raise OperationalError('SELECT', {}, Exception('disk I/O error'))

            def close(self):
                pass

        monkeypatch.setattr(store.db, 'get_session', BrokenSession)
        with pytest.raises(PersistenceError):
            store.get(1)


class TestSuggestionUniqueness:

    def test_empty_suggestions_never_conflict(self, store, add_page):
        add_page(1, 'Alpha')
        add_page(2, 'Beta')
        add_page(3, 'Gamma')

        assert store.save(StatusRecord(article_id=1, suggested_name='')).ok
        assert store.save(StatusRecord(article_id=2, suggested_name='   ')).ok
        # model_copy skips validation, so the store normalizes on its own
        bypass = StatusRecord(article_id=3).model_copy(update={'suggested_name': ''})
        assert store.save(bypass).ok

        assert store.get(1).suggested_name is None
        assert store.get(2).suggested_name is None
        assert store.get(3).suggested_name is None

    def test_duplicate_is_rejected_without_writes(self, store, add_page):
        add_page(1, 'Alpha')
        add_page(2, 'Beta')
        store.save(StatusRecord(article_id=1, suggested_name='Foo', translator='Dana'))
        store.save(StatusRecord(article_id=2, translator='Sami'))

        result = store.save(StatusRecord(article_id=2, suggested_name='Foo', translator='Changed'))

        assert not result.ok
        assert isinstance(result.error, DuplicateSuggestionError)
        assert result.error.conflicting_article_id == 1
        assert result.error.conflicting_title == 'Alpha'
        assert result.error.suggested_name == 'Foo'
        assert store.get(1).translator == 'Dana'
        assert store.get(2).translator == 'Sami'
        assert store.get(2).suggested_name is None

    def test_duplicate_on_new_record_creates_nothing(self, store, add_page):
        add_page(1, 'Alpha')
        add_page(2, 'Beta')
        store.save(StatusRecord(article_id=1, suggested_name='Foo'))

        result = store.save(StatusRecord(article_id=2, suggested_name='Foo'))

        assert isinstance(result.error, DuplicateSuggestionError)
        assert not store.exists(2)

    def test_same_record_may_keep_its_suggestion(self, store, add_page):
        add_page(1, 'Alpha')
        store.save(StatusRecord(article_id=1, suggested_name='Foo'))
        result = store.save(StatusRecord(article_id=1, suggested_name='Foo', translator='Dana'))

        assert result.ok
        assert store.get(1).translator == 'Dana'

    def test_absent_suggestions_never_conflict(self, store, add_page):
        add_page(1, 'Alpha')
        add_page(2, 'Beta')
        assert store.save(StatusRecord(article_id=1)).ok
        assert store.save(StatusRecord(article_id=2)).ok

    def test_unique_index_catches_a_concurrent_writer(self, store, add_page, monkeypatch):
        add_page(1, 'Alpha')
        add_page(2, 'Beta')
        store.save(StatusRecord(article_id=1, suggested_name='Foo'))

        # Simulate a writer that committed between the check and the write
        calls = []
        original = StatusRecordStore.find_suggestion_holder

        def racing_lookup(self, session, suggested_name, exclude_article_id):
            calls.append(suggested_name)
            if len(calls) == 1:
                return None
            return original(self, session, suggested_name, exclude_article_id)

        monkeypatch.setattr(StatusRecordStore, 'find_suggestion_holder', racing_lookup)
        result = store.save(StatusRecord(article_id=2, suggested_name='Foo'))

        assert isinstance(result.error, DuplicateSuggestionError)
        assert result.error.conflicting_article_id == 1
        assert not store.exists(2)

    def test_holder_without_metadata_is_named_by_id(self, store, add_page):
        add_page(2, 'Beta')
        store.save(StatusRecord(article_id=1, suggested_name='Foo'))

        result = store.save(StatusRecord(article_id=2, suggested_name='Foo'))

        assert result.error.conflicting_title is None
        assert 'page #1' in str(result.error)


class TestPartialWrites:

    def test_save_restricted_to_fields(self, store, add_page):
        add_page(1, 'Alpha')
        store.save(StatusRecord(article_id=1, pageviews=120, translator='Dana'))

        result = store.save(StatusRecord(article_id=1, pageviews=0, translator='Sami'), fields=['translator'])

        assert result.ok
        stored = store.get(1)
        assert stored.translator == 'Sami'
        assert stored.pageviews == 120

    def test_set_external_fields_creates_record_lazily(self, store, add_page):
        add_page(1, 'Alpha')
        result = store.set_external_fields(1, pageviews=2500, main_category='Law')

        assert result.ok
        stored = store.get(1)
        assert stored.pageviews == 2500
        assert stored.main_category == 'Law'
        assert stored.status is None

    def test_set_external_fields_keeps_editor_fields(self, store, add_page):
        add_page(1, 'Alpha')
        store.save(StatusRecord(article_id=1, status=StatusCode.REVIEW, suggested_name='Foo'))

        store.set_external_fields(1, pageviews=10)

        stored = store.get(1)
        assert stored.status == StatusCode.REVIEW
        assert stored.suggested_name == 'Foo'
        assert stored.pageviews == 10

    def test_status_is_stored_as_code(self, db, store, add_page):
        add_page(1, 'Alpha')
        store.save(StatusRecord(article_id=1, status=StatusCode.IN_PROGRESS))

        session = db.get_session()
        try:
            assert session.get(TranslationStatus, 1).status == 'progress'
        finally:
            session.close()

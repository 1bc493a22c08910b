"""
Tests for derived status and the overview pipeline.
"""

import pytest

from db.models import Page, StatusCode
from domain.filters import FilterCriteria
from domain.overview import PAGE_LIMITS, fetch_overview
from domain.records import StatusRecord
from domain.status import OVERVIEW_FIELDS, derive_effective_status, status_locked


class TestDeriveEffectiveStatus:

    def test_link_overrides_stored_status(self):
        assert derive_effective_status('untranslated', has_link=True) == StatusCode.TRANSLATED
        assert derive_effective_status(StatusCode.IRRELEVANT, has_link=True) == StatusCode.TRANSLATED
        assert derive_effective_status(None, has_link=True) == StatusCode.TRANSLATED

    def test_absent_status_reads_untranslated(self):
        assert derive_effective_status(None, has_link=False) == StatusCode.UNTRANSLATED
        assert derive_effective_status('', has_link=False) == StatusCode.UNTRANSLATED

    def test_stored_status_without_link(self):
        assert derive_effective_status('review', has_link=False) == StatusCode.REVIEW

    def test_status_locked(self):
        assert status_locked('translated', has_link=False)
        assert status_locked('review', has_link=True)
        assert not status_locked('review', has_link=False)


class TestPageKeys:

    def test_key_from_text(self):
        assert Page.key_from_text('  rights of  tenants ') == 'Rights_of_tenants'
        assert Page.key_from_text('Already_keyed') == 'Already_keyed'


class TestFetchOverview:

    @pytest.fixture
    def listed(self, add_page, store):
        add_page(1, 'Charlie')
        add_page(2, 'Alpha', link='ألفا', article_type='service')
        add_page(3, 'Bravo')
        store.save(StatusRecord(article_id=1, status=StatusCode.REVIEW, pageviews=50))
        store.save(StatusRecord(article_id=2, status=StatusCode.UNTRANSLATED, pageviews=900, translator='Dana'))
        store.save(StatusRecord(article_id=3, pageviews=300))

    def fetch(self, db, **kwargs):
        session = db.get_session()
        try:
            return fetch_overview(session, FilterCriteria(), target_language='ar', **kwargs)
        finally:
            session.close()

    def test_default_sort_is_title(self, db, listed):
        page = self.fetch(db)
        assert [row.title for row in page.rows] == ['Alpha', 'Bravo', 'Charlie']
        assert page.total == 3
        assert page.limit == 500
        assert not page.has_more

    def test_sort_by_pageviews_descending(self, db, listed):
        page = self.fetch(db, sort='pageviews', descending=True)
        assert [row.article_id for row in page.rows] == [2, 3, 1]

    def test_rows_carry_effective_status(self, db, listed):
        rows = {row.article_id: row for row in self.fetch(db).rows}

        assert rows[2].status == StatusCode.TRANSLATED
        assert rows[2].stored_status == 'untranslated'
        assert rows[2].actual_translation == 'ألفا'
        assert rows[2].article_type == 'service'
        assert rows[3].status == StatusCode.UNTRANSLATED
        assert rows[1].status == StatusCode.REVIEW

    def test_article_without_record(self, db, add_page):
        add_page(1, 'Lonely')
        row = self.fetch(db).rows[0]

        assert row.status == StatusCode.UNTRANSLATED
        assert row.pageviews == 0
        assert row.display_title == 'Lonely'

    def test_offset(self, db, listed):
        page = self.fetch(db, limit=100, offset=2)
        assert [row.title for row in page.rows] == ['Charlie']
        assert page.total == 3

    def test_has_more(self, db, add_page):
        for page_id in range(1, 103):
            add_page(page_id, f'Page {page_id:03d}')
        page = self.fetch(db, limit=100)
        assert len(page.rows) == 100
        assert page.total == 102
        assert page.has_more

    @pytest.mark.parametrize('kwargs', [
        {'sort': 'translator'},
        {'limit': 50},
        {'limit': 10000},
        {'offset': -1},
    ])
    def test_rejects_unsupported_paging(self, db, kwargs):
        with pytest.raises(ValueError):
            self.fetch(db, **kwargs)

    def test_page_limits(self):
        assert PAGE_LIMITS == (100, 500, 1000, 5000)


class TestOverviewFields:

    def test_field_table_is_immutable(self):
        with pytest.raises(TypeError):
            OVERVIEW_FIELDS['page_title'] = 'Name'

    def test_field_order(self):
        assert list(OVERVIEW_FIELDS)[:2] == ['page_title', 'actual_translation']

"""
Shared fixtures: a fresh SQLite database per test.
"""

import pytest

import settings
from db import Database
from db.status_store import StatusRecordStore
from domain.status_editor import StatusEditWorkflow

TARGET_LANGUAGE = 'ar'


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    path = str(tmp_path / 'translation_manager.db')
    # Commands build Database() from settings
    monkeypatch.setitem(settings._ENV_CACHE, 'DATABASE_PATH', path)
    monkeypatch.setitem(settings._ENV_CACHE, 'TARGET_LANGUAGE', TARGET_LANGUAGE)
    monkeypatch.setitem(settings._ENV_CACHE, 'EDIT_LOG_ENABLED', 'True')
    return path


@pytest.fixture
def db(db_path):
    return Database(db_path)


@pytest.fixture
def store(db):
    return StatusRecordStore(db)


@pytest.fixture
def workflow(db, store):
    return StatusEditWorkflow(db, store, target_language=TARGET_LANGUAGE, log_edits=True)


@pytest.fixture
def add_page(db):
    """Insert article metadata: add_page(1, 'Foo', link='...', article_type='...')."""

    def _add(page_id, title, link=None, article_type=None, namespace=0, is_redirect=False):
        session = db.get_session()
        try:
            db.save_page(session, page_id, title, namespace=namespace, is_redirect=is_redirect)
            if link:
                db.set_langlink(session, page_id, TARGET_LANGUAGE, link)
            if article_type:
                db.set_article_type(session, page_id, article_type)
            session.commit()
        finally:
            session.close()

    return _add

"""
SQLAlchemy models for the translation manager.

Article metadata (pages, page_props, langlinks) mirrors the host wiki and is
treated as read-only by the status workflow. Translation status records and
the edit log are owned by this application.
"""

import re
from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, DateTime, Date, ForeignKey, Index, JSON, UniqueConstraint
from sqlalchemy.orm import relationship, declarative_base
import enum

Base = declarative_base()

# Namespace of content articles in the host wiki
NS_MAIN = 0

# page_props name carrying the article type
ARTICLE_TYPE_PROP = 'ArticleType'


class StatusCode(str, enum.Enum):
    """Stored translation status codes."""
    UNTRANSLATED = "untranslated"
    IN_PROGRESS = "progress"
    REVIEW = "review"
    TRANSLATED = "translated"
    IRRELEVANT = "irrelevant"

    @classmethod
    def values(cls) -> list:
        return [code.value for code in cls]


class Page(Base):
    """Source-language article (read-only mirror of the wiki page table)."""
    __tablename__ = 'pages'

    page_id = Column(Integer, primary_key=True, autoincrement=False)
    namespace = Column(Integer, nullable=False, default=NS_MAIN)
    title = Column(String(255), nullable=False)  # Key form: underscores, first letter upper-cased
    is_redirect = Column(Integer, nullable=False, default=0)  # 0/1 (SQLite has no native boolean)

    # Relationships
    status = relationship('TranslationStatus', back_populates='page', uselist=False)
    props = relationship('PageProp', back_populates='page', cascade='all, delete-orphan')
    langlinks = relationship('LangLink', back_populates='page', cascade='all, delete-orphan')

    __table_args__ = (
        UniqueConstraint('namespace', 'title', name='uq_page_namespace_title'),
        Index('idx_page_title', 'title'),
    )

    @staticmethod
    def key_from_text(text: str) -> str:
        """
        Convert a human-entered title to key form.

        Example:
            >>> Page.key_from_text('  rights of  tenants ')
            'Rights_of_tenants'
        """
        key = re.sub(r'[\s_]+', '_', text.strip()).strip('_')
        return key[:1].upper() + key[1:]

    @property
    def display_title(self) -> str:
        return self.title.replace('_', ' ')

    def __repr__(self):
        return f"<Page(page_id={self.page_id}, title='{self.title}')>"


class PageProp(Base):
    """Named page property (ArticleType and friends)."""
    __tablename__ = 'page_props'

    page_id = Column(Integer, ForeignKey('pages.page_id', ondelete='CASCADE'), primary_key=True)
    name = Column(String(60), primary_key=True)
    value = Column(String(255), nullable=True)

    page = relationship('Page', back_populates='props')

    def __repr__(self):
        return f"<PageProp(page_id={self.page_id}, name='{self.name}', value='{self.value}')>"


class LangLink(Base):
    """Interlanguage link: the page has a counterpart in another language."""
    __tablename__ = 'langlinks'

    from_page_id = Column(Integer, ForeignKey('pages.page_id', ondelete='CASCADE'), primary_key=True)
    lang = Column(String(20), primary_key=True)
    title = Column(String(255), nullable=False)

    page = relationship('Page', back_populates='langlinks')

    def __repr__(self):
        return f"<LangLink(from_page_id={self.from_page_id}, lang='{self.lang}', title='{self.title}')>"


class TranslationStatus(Base):
    """Translation status record, at most one per page."""
    __tablename__ = 'translation_status'

    page_id = Column(Integer, ForeignKey('pages.page_id', ondelete='CASCADE'), primary_key=True, autoincrement=False)
    status = Column(String(32), nullable=True, index=True)  # StatusCode value; NULL reads as untranslated
    comments = Column(Text, nullable=True)
    pageviews = Column(Integer, nullable=False, default=0, index=True)
    wordcount = Column(Integer, nullable=True)
    main_category = Column(String(255), nullable=True)
    translator = Column(String(255), nullable=True)
    project = Column(String(255), nullable=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    # Empty values are stored as NULL, so a plain unique index only binds real suggestions
    suggested_name = Column(String(255), nullable=True, unique=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    page = relationship('Page', back_populates='status')

    def __repr__(self):
        return f"<TranslationStatus(page_id={self.page_id}, status='{self.status}')>"


class StatusEditLog(Base):
    """One row per status edit attempt, successful or not."""
    __tablename__ = 'status_edit_log'

    id = Column(Integer, primary_key=True, autoincrement=True)
    page_id = Column(Integer, nullable=False, index=True)  # No FK: attempts on unknown pages are logged too
    submitted_fields = Column(JSON, nullable=True)
    success = Column(Integer, nullable=False, default=1)  # 0=failed, 1=saved
    error_type = Column(String(64), nullable=True)
    error_message = Column(Text, nullable=True)
    started_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    completed_at = Column(DateTime, nullable=True)
    duration_ms = Column(Integer, nullable=True)

    __table_args__ = (
        Index('idx_status_edit_log_success', 'success'),
    )

    def __repr__(self):
        return f"<StatusEditLog(id={self.id}, page_id={self.page_id}, success={bool(self.success)})>"

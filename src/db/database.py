"""
Database connection and article metadata operations.
"""

from pathlib import Path
from typing import Optional
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from settings import get_setting
from .models import Base, Page, PageProp, LangLink, NS_MAIN, ARTICLE_TYPE_PROP


def _unicode_lower(value):
    """SQL lower() that folds non-ASCII letters the way str.lower() does."""
    return value.lower() if isinstance(value, str) else value


def _register_sqlite_functions(dbapi_connection, connection_record):
    # SQLite's built-in lower() only folds ASCII letters
    dbapi_connection.create_function('lower', 1, _unicode_lower, deterministic=True)


class Database:
    """Database manager for the translation manager."""

    def __init__(self, db_path: Optional[str] = None):
        """
        Initialize database connection.

        Args:
            db_path: Path to SQLite database file. If None, uses DATABASE_PATH from settings.
        """
        if db_path is None:
            db_path = get_setting('DATABASE_PATH', 'data/translation_manager.db')

        # Ensure data directory exists
        db_file = Path(db_path)
        db_file.parent.mkdir(parents=True, exist_ok=True)

        self.db_path = db_path
        self.engine = create_engine(f'sqlite:///{db_path}', echo=False)
        event.listen(self.engine, 'connect', _register_sqlite_functions)
        self.SessionLocal = sessionmaker(bind=self.engine)

        # Create tables if they don't exist
        Base.metadata.create_all(self.engine)

    def get_session(self) -> Session:
        """Get a new database session."""
        return self.SessionLocal()

    def get_page(self, session: Session, page_id: int) -> Optional[Page]:
        """Get page by ID."""
        return session.get(Page, page_id)

    def page_exists(self, session: Session, page_id: int) -> bool:
        """Check whether article metadata exists for a page ID."""
        return session.query(Page.page_id).filter_by(page_id=page_id).first() is not None

    def save_page(
        self,
        session: Session,
        page_id: int,
        title: str,
        namespace: int = NS_MAIN,
        is_redirect: bool = False
    ) -> Page:
        """
        Insert or update article metadata.

        Args:
            session: Database session
            page_id: Page ID in the host wiki
            title: Page title (any form; stored in key form)
            namespace: Wiki namespace (default: main)
            is_redirect: Whether the page is a redirect

        Returns:
            Page object
        """
        page = session.get(Page, page_id)
        if not page:
            page = Page(page_id=page_id)
            session.add(page)

        page.title = Page.key_from_text(title)
        page.namespace = namespace
        page.is_redirect = 1 if is_redirect else 0
        session.flush()
        return page

    def set_page_prop(self, session: Session, page_id: int, name: str, value: Optional[str]) -> Optional[PageProp]:
        """
        Set or clear a page property.

        Passing an empty value removes the property.
        """
        prop = session.get(PageProp, (page_id, name))
        if not value:
            if prop:
                session.delete(prop)
                session.flush()
            return None

        if not prop:
            prop = PageProp(page_id=page_id, name=name)
            session.add(prop)
        prop.value = value
        session.flush()
        return prop

    def set_article_type(self, session: Session, page_id: int, article_type: Optional[str]) -> Optional[PageProp]:
        """Set or clear the ArticleType property of a page."""
        return self.set_page_prop(session, page_id, ARTICLE_TYPE_PROP, article_type)

    def set_langlink(self, session: Session, page_id: int, lang: str, title: Optional[str]) -> Optional[LangLink]:
        """
        Set or clear the interlanguage link of a page for one language.

        Passing an empty title removes the link.
        """
        link = session.get(LangLink, (page_id, lang))
        if not title:
            if link:
                session.delete(link)
                session.flush()
            return None

        if not link:
            link = LangLink(from_page_id=page_id, lang=lang)
            session.add(link)
        link.title = title
        session.flush()
        return link

    def get_langlink_title(self, session: Session, page_id: int, lang: str) -> Optional[str]:
        """Get the target-language title linked from a page, if any."""
        link = session.get(LangLink, (page_id, lang))
        return link.title if link else None

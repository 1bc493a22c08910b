"""
Translation overview: criteria -> predicate -> ordered page of rows.

Rendering is left to the caller (see commands/status.py).
"""

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from sqlalchemy import and_
from sqlalchemy.orm import Session

from db.models import Page, TranslationStatus, StatusCode, NS_MAIN, ARTICLE_TYPE_PROP
from domain.filters import FilterCriteria, TargetLink, ArticleTypeProp, build_predicate
from domain.status import derive_effective_status
from settings import get_setting

PAGE_LIMITS = (100, 500, 1000, 5000)
DEFAULT_LIMIT = 500
DEFAULT_SORT = 'title'


@dataclass
class OverviewRow:
    """One overview line with the derived status already applied."""

    article_id: int
    title: str
    status: StatusCode
    stored_status: Optional[str] = None
    actual_translation: Optional[str] = None
    suggested_name: Optional[str] = None
    wordcount: Optional[int] = None
    translator: Optional[str] = None
    project: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    comments: Optional[str] = None
    pageviews: int = 0
    main_category: Optional[str] = None
    article_type: Optional[str] = None

    @property
    def display_title(self) -> str:
        return self.title.replace('_', ' ')


@dataclass
class OverviewPage:
    """A slice of the overview plus the total number of matching rows."""

    rows: List[OverviewRow] = field(default_factory=list)
    total: int = 0
    limit: int = DEFAULT_LIMIT
    offset: int = 0

    @property
    def has_more(self) -> bool:
        return self.offset + len(self.rows) < self.total


SORT_COLUMNS = {
    'title': Page.title,
    'status': TranslationStatus.status,
    'pageviews': TranslationStatus.pageviews,
}


def overview_query(session: Session, criteria: FilterCriteria, target_language: Optional[str] = None):
    """
    Build the joined, filtered overview query (unsorted, unpaged).

    Only main-namespace, non-redirect pages are listed.
    """
    if target_language is None:
        target_language = get_setting('TARGET_LANGUAGE', 'ar')

    return (session.query(
                Page.page_id,
                Page.title,
                TargetLink.title.label('actual_translation'),
                TranslationStatus.status,
                TranslationStatus.comments,
                TranslationStatus.pageviews,
                TranslationStatus.wordcount,
                TranslationStatus.main_category,
                TranslationStatus.translator,
                TranslationStatus.project,
                TranslationStatus.start_date,
                TranslationStatus.end_date,
                TranslationStatus.suggested_name,
                ArticleTypeProp.value.label('article_type'))
            .select_from(Page)
            .outerjoin(TranslationStatus, TranslationStatus.page_id == Page.page_id)
            .outerjoin(TargetLink, and_(TargetLink.from_page_id == Page.page_id,
                                        TargetLink.lang == target_language))
            .outerjoin(ArticleTypeProp, and_(ArticleTypeProp.page_id == Page.page_id,
                                             ArticleTypeProp.name == ARTICLE_TYPE_PROP))
            .filter(Page.namespace == NS_MAIN, Page.is_redirect == 0)
            .filter(build_predicate(criteria)))


def _to_row(result) -> OverviewRow:
    has_link = result.actual_translation is not None
    return OverviewRow(
        article_id=result.page_id,
        title=result.title,
        status=derive_effective_status(result.status, has_link),
        stored_status=result.status,
        actual_translation=result.actual_translation,
        suggested_name=result.suggested_name,
        wordcount=result.wordcount,
        translator=result.translator,
        project=result.project,
        start_date=result.start_date,
        end_date=result.end_date,
        comments=result.comments,
        pageviews=result.pageviews or 0,
        main_category=result.main_category,
        article_type=result.article_type,
    )


def fetch_overview(
    session: Session,
    criteria: FilterCriteria,
    sort: str = DEFAULT_SORT,
    descending: bool = False,
    limit: int = DEFAULT_LIMIT,
    offset: int = 0,
    target_language: Optional[str] = None
) -> OverviewPage:
    """
    Fetch one page of the translation overview.

    Args:
        session: Database session
        criteria: Filter criteria
        sort: 'title', 'status' or 'pageviews'
        descending: Reverse the sort order
        limit: Page size, one of PAGE_LIMITS
        offset: Number of rows to skip
        target_language: Language code of the translation link (default: TARGET_LANGUAGE setting)

    Returns:
        OverviewPage

    Raises:
        ValueError: If sort, limit or offset is not allowed
    """
    if sort not in SORT_COLUMNS:
        raise ValueError(f"Cannot sort by '{sort}'; choose one of {', '.join(SORT_COLUMNS)}")
    if limit not in PAGE_LIMITS:
        raise ValueError(f"Invalid page size {limit}; choose one of {', '.join(map(str, PAGE_LIMITS))}")
    if offset < 0:
        raise ValueError("Offset cannot be negative")

    query = overview_query(session, criteria, target_language)
    total = query.count()

    column = SORT_COLUMNS[sort]
    order = column.desc() if descending else column.asc()
    # Title as tie-breaker keeps paging stable
    results = query.order_by(order, Page.title.asc()).limit(limit).offset(offset).all()

    return OverviewPage(rows=[_to_row(r) for r in results], total=total, limit=limit, offset=offset)

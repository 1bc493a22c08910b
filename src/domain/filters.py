"""
Filter criteria for the translation overview and their translation into a
SQLAlchemy predicate.

The predicate is evaluated against pages outer-joined with their status
record, their target-language interlanguage link and their ArticleType
property (see domain.overview.overview_query). Every user value goes in as a
bound parameter.
"""

import operator
import re
from datetime import date
from typing import Optional

from pydantic import BaseModel, field_validator
from sqlalchemy import and_, or_, true, func
from sqlalchemy.orm import aliased

from db.models import LangLink, PageProp, Page, TranslationStatus, StatusCode

# Composite status filters (not stored codes)
STATUS_FILTER_ALL = 'all'
STATUS_FILTER_PREREVIEW = 'prereview'
STATUS_FILTER_UNSUGGESTED = 'unsuggested'

STATUS_FILTER_CHOICES = (
    STATUS_FILTER_ALL,
    StatusCode.UNTRANSLATED.value,
    STATUS_FILTER_UNSUGGESTED,
    STATUS_FILTER_PREREVIEW,
    StatusCode.REVIEW.value,
    StatusCode.IN_PROGRESS.value,
    StatusCode.TRANSLATED.value,
    StatusCode.IRRELEVANT.value,
)

# Aliases used by the overview query; the predicate refers to these
TargetLink = aliased(LangLink, name='target_link')
ArticleTypeProp = aliased(PageProp, name='article_type_prop')


class FilterCriteria(BaseModel):
    """Overview filter. Empty strings and thresholds of zero or less mean "no constraint"."""

    status_filter: str = STATUS_FILTER_ALL
    page_title: Optional[str] = None
    min_pageviews: Optional[int] = None
    start_date_from: Optional[date] = None
    start_date_to: Optional[date] = None
    end_date_from: Optional[date] = None
    end_date_to: Optional[date] = None
    article_type: Optional[str] = None
    translator: Optional[str] = None
    project: Optional[str] = None
    main_category: Optional[str] = None

    @field_validator('status_filter', mode='before')
    @classmethod
    def default_status_filter(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            return STATUS_FILTER_ALL
        return value.strip() if isinstance(value, str) else value

    @field_validator(
        'page_title', 'article_type', 'translator', 'project', 'main_category',
        'start_date_from', 'start_date_to', 'end_date_from', 'end_date_to',
        mode='before'
    )
    @classmethod
    def empty_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


def normalize_title_fragment(text: str) -> str:
    """Lower-cased key form of a title fragment ('Foo bar' -> 'foo_bar')."""
    return re.sub(r'\s+', '_', text.strip()).lower()


def status_condition(status_filter: str):
    """
    Condition for the status selector, or None for no constraint.

    - review / prereview: stored status is review and no link exists
    - unsuggested: no link, no suggested name, not marked irrelevant
    - untranslated: no link, stored status absent or untranslated
    - translated: link exists OR stored status is translated
    - anything else: stored status equals the value
    """
    no_link = TargetLink.from_page_id.is_(None)
    status = TranslationStatus.status

    if status_filter == STATUS_FILTER_ALL:
        return None

    # TODO: prereview has no behavior of its own; merge it into review in STATUS_FILTER_CHOICES
    if status_filter in (STATUS_FILTER_PREREVIEW, StatusCode.REVIEW.value):
        return and_(status == StatusCode.REVIEW.value, no_link)

    if status_filter == STATUS_FILTER_UNSUGGESTED:
        return and_(
            no_link,
            or_(TranslationStatus.suggested_name.is_(None), TranslationStatus.suggested_name == ''),
            or_(status.is_(None), status != StatusCode.IRRELEVANT.value),
        )

    if status_filter == StatusCode.UNTRANSLATED.value:
        return and_(no_link, or_(status.is_(None), status == StatusCode.UNTRANSLATED.value))

    if status_filter == StatusCode.TRANSLATED.value:
        return or_(TargetLink.from_page_id.isnot(None), status == StatusCode.TRANSLATED.value)

    return status == status_filter


def build_predicate(criteria: FilterCriteria):
    """
    Translate filter criteria into one boolean clause.

    All active conditions are ANDed. With no active condition the result is
    a literal TRUE, so it can always be passed to .filter().

    Args:
        criteria: Filter criteria

    Returns:
        SQLAlchemy boolean clause over Page, TranslationStatus, TargetLink
        and ArticleTypeProp

    Example:
        >>> predicate = build_predicate(FilterCriteria(status_filter='translated', min_pageviews=100))
        >>> session.query(Page).select_from(...).filter(predicate)
    """
    conditions = []

    condition = status_condition(criteria.status_filter)
    if condition is not None:
        conditions.append(condition)

    if criteria.page_title:
        fragment = normalize_title_fragment(criteria.page_title)
        conditions.append(func.lower(Page.title).contains(fragment, autoescape=True))

    if criteria.min_pageviews and criteria.min_pageviews > 0:
        conditions.append(TranslationStatus.pageviews >= criteria.min_pageviews)

    date_bounds = (
        (criteria.start_date_from, TranslationStatus.start_date, operator.ge),
        (criteria.start_date_to, TranslationStatus.start_date, operator.le),
        (criteria.end_date_from, TranslationStatus.end_date, operator.ge),
        (criteria.end_date_to, TranslationStatus.end_date, operator.le),
    )
    for bound, column, compare in date_bounds:
        if bound is not None:
            conditions.append(compare(column, bound))

    equality_filters = (
        (criteria.article_type, ArticleTypeProp.value),
        (criteria.translator, TranslationStatus.translator),
        (criteria.project, TranslationStatus.project),
        (criteria.main_category, TranslationStatus.main_category),
    )
    for value, column in equality_filters:
        if value:
            conditions.append(column == value)

    if not conditions:
        return true()
    return and_(*conditions)

"""
Translation status values and the derived-status rule.
"""

from types import MappingProxyType
from typing import Optional, Union

from db.models import StatusCode


def derive_effective_status(status: Optional[Union[str, StatusCode]], has_link: bool) -> StatusCode:
    """
    Status as shown to editors.

    An interlanguage link to the target language means the article is
    translated, whatever the stored record says. A missing stored status
    reads as untranslated. The stored value is never rewritten.

    Args:
        status: Stored status code (or None when there is no record)
        has_link: Whether a target-language link exists

    Returns:
        Effective StatusCode
    """
    if has_link:
        return StatusCode.TRANSLATED
    if not status:
        return StatusCode.UNTRANSLATED
    return StatusCode(status)


def status_locked(status: Optional[Union[str, StatusCode]], has_link: bool) -> bool:
    """
    Whether the status field should be presented as read-only.

    Editing views disable the status selector once an article is genuinely
    translated. The edit workflow itself does not enforce this.
    """
    return derive_effective_status(status, has_link) == StatusCode.TRANSLATED


STATUS_LABELS = MappingProxyType({
    StatusCode.UNTRANSLATED: 'Untranslated',
    StatusCode.IN_PROGRESS: 'In progress',
    StatusCode.REVIEW: 'In review',
    StatusCode.TRANSLATED: 'Translated',
    StatusCode.IRRELEVANT: 'Irrelevant',
})

# Overview columns, in display order, with their header labels
OVERVIEW_FIELDS = MappingProxyType({
    'page_title': 'Title',
    'actual_translation': 'Translation',
    'suggested_name': 'Suggested name',
    'wordcount': 'Words',
    'status': 'Status',
    'translator': 'Translator',
    'project': 'Project',
    'start_date': 'Start date',
    'end_date': 'End date',
    'comments': 'Comments',
    'pageviews': 'Page views',
    'main_category': 'Main category',
    'article_type': 'Article type',
})

"""
Error taxonomy for status record operations.

These are returned as values on SaveResult / EditResult rather than raised
across the workflow boundary. They still subclass Exception so callers that
prefer to raise can do so with `raise result.error`.
"""

from typing import Optional


class StatusError(Exception):
    """Base class for every status workflow error."""

    code = 'error'

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class FieldValidationError(StatusError):
    """Malformed numeric, date or status input for one form field."""

    code = 'validation'

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field


class DuplicateSuggestionError(StatusError):
    """Another article already carries the same suggested translation name."""

    code = 'duplicate_suggestion'

    def __init__(
        self,
        article_id: int,
        suggested_name: str,
        conflicting_article_id: int,
        conflicting_title: Optional[str] = None
    ):
        holder = conflicting_title or f"page #{conflicting_article_id}"
        super().__init__(f"Suggested name '{suggested_name}' is already used by {holder}")
        self.article_id = article_id
        self.suggested_name = suggested_name
        self.conflicting_article_id = conflicting_article_id
        self.conflicting_title = conflicting_title


class PersistenceError(StatusError):
    """The store could not be read or written."""

    code = 'persistence'


class UnknownArticleError(StatusError):
    """No article metadata exists for the requested page ID."""

    code = 'unknown_article'

    def __init__(self, article_id: int):
        super().__init__(f"No article with page ID {article_id}")
        self.article_id = article_id

"""
Value types passed between the store, the edit workflow and the CLI.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from db.models import StatusCode
from domain.errors import StatusError


class StatusRecord(BaseModel):
    """Translation status of one article, detached from any session."""

    model_config = ConfigDict(validate_assignment=True)

    article_id: int
    status: Optional[StatusCode] = None
    comments: Optional[str] = None
    translator: Optional[str] = None
    project: Optional[str] = None
    main_category: Optional[str] = None
    suggested_name: Optional[str] = None
    wordcount: Optional[int] = Field(default=None, ge=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    pageviews: int = Field(default=0, ge=0)

    @field_validator('comments', 'translator', 'project', 'main_category', 'suggested_name', mode='before')
    @classmethod
    def empty_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


# Fields the edit workflow overwrites on every save
EDITABLE_FIELDS = (
    'comments',
    'status',
    'translator',
    'project',
    'suggested_name',
    'wordcount',
    'start_date',
    'end_date',
)


@dataclass
class SaveResult:
    """Outcome of a store write: either ok with the stored record, or an error."""

    record: Optional[StatusRecord] = None
    error: Optional[StatusError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class EditResult:
    """Outcome of an edit: the saved record, or the error that prevented it."""

    article_id: int
    record: Optional[StatusRecord] = None
    error: Optional[StatusError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

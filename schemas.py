"""Request payloads and client-side records.

The API validates incoming JSON with these models; the dashboard client
keeps its in-memory task list and summaries as the same pydantic records so
that the wire format (camelCase, ISO-8601 datetimes) lives in one place.
"""
from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

Priority = Literal['high', 'medium', 'low']

DEFAULT_PRIORITY = 'medium'
DEFAULT_CATEGORY = 'Personal'
DATE_FORMAT = '%Y-%m-%d'


def ensure_utc(value):
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def blank_as_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


def validate_date_key(value):
    """Summary dates are calendar days keyed as YYYY-MM-DD strings."""
    value = (value or '').strip()
    try:
        datetime.strptime(value, DATE_FORMAT)
    except ValueError:
        raise ValueError('date must be in YYYY-MM-DD format')
    return value


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='ignore')


class TaskCreate(_Payload):
    title: str
    description: Optional[str] = None
    priority: Priority = DEFAULT_PRIORITY
    category: Optional[str] = DEFAULT_CATEGORY
    due_date: Optional[datetime] = Field(default=None, alias='dueDate')

    @field_validator('title')
    @classmethod
    def title_not_blank(cls, value):
        value = value.strip()
        if not value:
            raise ValueError('Title is required')
        return value

    @field_validator('due_date', mode='before')
    @classmethod
    def empty_due_date(cls, value):
        return blank_as_none(value)

    @field_validator('category')
    @classmethod
    def default_category(cls, value):
        return value or DEFAULT_CATEGORY


NON_NULLABLE_UPDATES = ('title', 'completed', 'priority', 'category')


class TaskUpdate(_Payload):
    title: Optional[str] = None
    description: Optional[str] = None
    completed: Optional[bool] = None
    priority: Optional[Priority] = None
    category: Optional[str] = None
    due_date: Optional[datetime] = Field(default=None, alias='dueDate')

    @field_validator('title')
    @classmethod
    def title_not_blank(cls, value):
        if value is None:
            return value
        value = value.strip()
        if not value:
            raise ValueError('Title cannot be empty')
        return value

    @field_validator('due_date', mode='before')
    @classmethod
    def empty_due_date(cls, value):
        return blank_as_none(value)

    @model_validator(mode='after')
    def reject_null_required(self):
        for name in NON_NULLABLE_UPDATES:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f'{name} cannot be null')
        return self

    def changes(self):
        """Only the fields the caller actually sent."""
        return {name: getattr(self, name) for name in self.model_fields_set}


class CompletedTaskSnapshot(_Payload):
    title: str
    description: Optional[str] = None
    category: str
    priority: Priority
    completed_at: Optional[datetime] = Field(default=None, alias='completedAt')

    @field_validator('completed_at')
    @classmethod
    def utc(cls, value):
        return ensure_utc(value)


class SummaryUpsert(_Payload):
    date: str
    summary: str
    task_count: int = Field(alias='taskCount', ge=0)
    categories: List[str] = Field(default_factory=list)
    completed_tasks: List[CompletedTaskSnapshot] = Field(default_factory=list, alias='completedTasks')

    @field_validator('date')
    @classmethod
    def date_key(cls, value):
        return validate_date_key(value)

    @field_validator('summary')
    @classmethod
    def summary_not_blank(cls, value):
        value = value.strip()
        if not value:
            raise ValueError('summary cannot be empty')
        return value

    @field_validator('categories', 'completed_tasks', mode='before')
    @classmethod
    def none_as_empty(cls, value):
        return [] if value is None else value


class SummaryGenerateRequest(_Payload):
    date: str
    completed_tasks: List[CompletedTaskSnapshot] = Field(default_factory=list, alias='completedTasks')

    @field_validator('date')
    @classmethod
    def date_key(cls, value):
        return validate_date_key(value)


class Task(_Payload):
    """A task as held by the dashboard client."""

    id: str
    title: str
    description: Optional[str] = None
    completed: bool = False
    priority: Priority = DEFAULT_PRIORITY
    category: str = DEFAULT_CATEGORY
    due_date: Optional[datetime] = Field(default=None, alias='dueDate')
    created_at: datetime = Field(alias='createdAt')
    updated_at: datetime = Field(alias='updatedAt')

    @field_validator('due_date', mode='before')
    @classmethod
    def empty_due_date(cls, value):
        return blank_as_none(value)

    @field_validator('due_date', 'created_at', 'updated_at')
    @classmethod
    def utc(cls, value):
        return ensure_utc(value)

    def to_wire(self):
        return self.model_dump(by_alias=True, mode='json')


class DailySummary(_Payload):
    """A saved daily summary as held by the dashboard client."""

    id: Optional[str] = None
    date: str
    summary: str
    task_count: int = Field(alias='taskCount')
    categories: List[str] = Field(default_factory=list)
    completed_tasks: List[CompletedTaskSnapshot] = Field(default_factory=list, alias='completedTasks')
    created_at: Optional[datetime] = Field(default=None, alias='createdAt')

    @field_validator('created_at')
    @classmethod
    def utc(cls, value):
        return ensure_utc(value)


WIRE_NAMES = {
    'due_date': 'dueDate',
    'created_at': 'createdAt',
    'updated_at': 'updatedAt',
    'completed_at': 'completedAt',
    'task_count': 'taskCount',
    'completed_tasks': 'completedTasks',
}


def to_wire_fields(fields):
    """Rename python field names to their JSON names and format datetimes."""
    payload = {}
    for name, value in fields.items():
        if isinstance(value, datetime):
            value = ensure_utc(value).isoformat().replace('+00:00', 'Z')
        payload[WIRE_NAMES.get(name, name)] = value
    return payload

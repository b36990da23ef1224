import uuid
from datetime import UTC, date, datetime
from enum import Enum

from pydantic import BaseModel, Field


class TaskPriority(str, Enum):
    LOW = "low"
    MID = "mid"
    HIGH = "high"


# Rotated through as categories are created
CATEGORY_COLORS = [
    "#22c55e",
    "#3b82f6",
    "#eab308",
    "#ef4444",
    "#8b5cf6",
    "#06b6d4",
    "#f97316",
    "#ec4899",
]


def generate_id() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(UTC)


class Category(BaseModel):
    id: str = Field(default_factory=generate_id)
    name: str
    color: str = CATEGORY_COLORS[0]
    order: int = 0
    context_hint: str = ""
    keywords: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class TaskGroup(BaseModel):
    id: str = Field(default_factory=generate_id)
    category_id: str
    name: str
    order: int = 0
    is_collapsed: bool = False
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class Task(BaseModel):
    id: str = Field(default_factory=generate_id)
    category_id: str
    task_group_id: str | None = None
    text: str
    raw_text: str = ""
    priority: TaskPriority | None = None
    category_path: list[str] = Field(default_factory=list)
    entities: list[str] = Field(default_factory=list)
    task_type: str = "other"
    due_date: date | None = None
    notes: str | None = None
    is_completed: bool = False
    is_archived: bool = False
    order: int = 0
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class PendingClassification(BaseModel):
    """A task whose category was assigned offline and awaits a late classification."""

    id: str = Field(default_factory=generate_id)
    task_id: str
    raw_text: str
    created_at: datetime = Field(default_factory=utc_now)

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

DEFAULT_EVENT_COLOR = "bg-blue-100 text-blue-700 border-l-4 border-blue-600"
DEFAULT_PROJECT = "기타"
DEFAULT_MEMO_TITLE = "제목 없음"
DEFAULT_MEMO_GROUP = "기본 그룹"


class EventType(str, Enum):
    PERSONAL = "personal"
    TEAM = "team"
    COMPANY = "company"


class TodoStatus(str, Enum):
    WAITING = "대기"
    IN_PROGRESS = "진행중"
    DONE = "완료"


class TodoPriority(str, Enum):
    HIGH = "상"
    MEDIUM = "중"
    LOW = "하"


class CalendarEvent(BaseModel):
    id: int | None = None
    title: str
    start_date: datetime
    end_date: datetime
    type: EventType = EventType.PERSONAL
    color: str = DEFAULT_EVENT_COLOR


class TodoItem(BaseModel):
    id: int | None = None
    title: str
    description: str = ""
    project: str = DEFAULT_PROJECT
    due_date: datetime | None = None
    status: TodoStatus = TodoStatus.WAITING
    priority: TodoPriority = TodoPriority.MEDIUM
    assignee: str = ""
    is_deleted: bool = False

    @property
    def is_open(self) -> bool:
        return self.status != TodoStatus.DONE and not self.is_deleted


class MemoItem(BaseModel):
    id: int | None = None
    title: str = DEFAULT_MEMO_TITLE
    content: str = ""
    tags: list[str] = Field(default_factory=list)
    is_pinned: bool = False
    group: str | None = None
    updated_at: datetime | None = None
    created_at: datetime | None = None

"""Table-backed stores for calendar events, todos and memos.

Each store maps between PostgREST rows and the pydantic models in
``secretary.supabase.schemas``. Errors from the client propagate to the
caller unchanged.
"""

import logging
from datetime import UTC, datetime
from typing import Any

from secretary.supabase.client import SupabaseClient
from secretary.supabase.schemas import (
    DEFAULT_MEMO_GROUP,
    DEFAULT_MEMO_TITLE,
    CalendarEvent,
    MemoItem,
    TodoItem,
)

logger = logging.getLogger(__name__)

TODO_DUE_FORMAT = "%Y-%m-%dT%H:%M"


class EventStore:
    TABLE = "events"

    def __init__(self, client: SupabaseClient):
        self.client = client

    async def list_events(self) -> list[CalendarEvent]:
        rows = await self.client.select(self.TABLE, order="start_date.asc")
        return [CalendarEvent.model_validate(_drop_nulls(row)) for row in rows]

    async def create_event(self, event: CalendarEvent) -> CalendarEvent:
        row = await self.client.insert(self.TABLE, _event_to_row(event))
        logger.info(f"Created event {row.get('id')}: {event.title}")
        return CalendarEvent.model_validate(_drop_nulls(row))

    async def update_event(self, event_id: int, **changes: Any) -> CalendarEvent:
        values = {
            key: value.isoformat() if isinstance(value, datetime) else value
            for key, value in changes.items()
            if value is not None
        }
        row = await self.client.update(self.TABLE, event_id, values)
        return CalendarEvent.model_validate(_drop_nulls(row))

    async def delete_event(self, event_id: int) -> None:
        await self.client.delete(self.TABLE, event_id)


class TodoStore:
    TABLE = "todos"

    def __init__(self, client: SupabaseClient):
        self.client = client

    async def list_todos(self) -> list[TodoItem]:
        """All todos ordered by due date, trashed ones included."""
        rows = await self.client.select(self.TABLE, order="due_date.asc")
        return [_todo_from_row(row) for row in rows]

    async def create_todo(self, todo: TodoItem) -> TodoItem:
        row = await self.client.insert(self.TABLE, _todo_to_row(todo))
        logger.info(f"Created todo {row.get('id')}: {todo.title}")
        return _todo_from_row(row)

    async def update_todo(self, todo_id: int, **changes: Any) -> TodoItem:
        values: dict[str, Any] = {}
        for key, value in changes.items():
            if isinstance(value, datetime):
                value = value.strftime(TODO_DUE_FORMAT)
            elif hasattr(value, "value"):
                value = value.value
            values[key] = value
        row = await self.client.update(self.TABLE, todo_id, values)
        return _todo_from_row(row)

    async def move_to_trash(self, todo_id: int) -> TodoItem:
        return await self.update_todo(todo_id, is_deleted=True)

    async def restore_from_trash(self, todo_id: int) -> TodoItem:
        return await self.update_todo(todo_id, is_deleted=False)

    async def delete_todo(self, todo_id: int) -> None:
        """Permanently remove a todo."""
        await self.client.delete(self.TABLE, todo_id)


class MemoStore:
    TABLE = "memos"

    def __init__(self, client: SupabaseClient):
        self.client = client

    async def list_memos(self) -> list[MemoItem]:
        rows = await self.client.select(self.TABLE, order="created_at.desc")
        return [MemoItem.model_validate(_drop_nulls(row)) for row in rows]

    async def create_memo(self, memo: MemoItem) -> MemoItem:
        row = {
            "title": memo.title or DEFAULT_MEMO_TITLE,
            "content": memo.content,
            "tags": memo.tags,
            "is_pinned": memo.is_pinned,
            "updated_at": datetime.now(UTC).isoformat(),
            "group": memo.group or (memo.tags[0] if memo.tags else DEFAULT_MEMO_GROUP),
        }
        created = await self.client.insert(self.TABLE, row)
        logger.info(f"Created memo {created.get('id')}: {row['title']}")
        return MemoItem.model_validate(_drop_nulls(created))

    async def update_memo(self, memo_id: int, **changes: Any) -> MemoItem:
        values = dict(changes)
        values["updated_at"] = datetime.now(UTC).isoformat()
        row = await self.client.update(self.TABLE, memo_id, values)
        return MemoItem.model_validate(_drop_nulls(row))

    async def delete_memo(self, memo_id: int) -> None:
        await self.client.delete(self.TABLE, memo_id)


def _event_to_row(event: CalendarEvent) -> dict[str, Any]:
    return {
        "title": event.title,
        "start_date": event.start_date.isoformat(),
        "end_date": event.end_date.isoformat(),
        "type": event.type.value,
        "color": event.color,
    }


def _todo_to_row(todo: TodoItem) -> dict[str, Any]:
    return {
        "title": todo.title,
        "description": todo.description,
        "project": todo.project,
        "due_date": todo.due_date.strftime(TODO_DUE_FORMAT) if todo.due_date else "",
        "status": todo.status.value,
        "priority": todo.priority.value,
        "assignee": todo.assignee,
        "is_deleted": False,
    }


def _todo_from_row(row: dict[str, Any]) -> TodoItem:
    data = _drop_nulls(row)
    # Legacy rows store an empty string for "no due date"
    if not data.get("due_date"):
        data.pop("due_date", None)
    return TodoItem.model_validate(data)


def _drop_nulls(row: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in row.items() if value is not None}

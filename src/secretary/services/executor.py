"""Command executor for the secretary.

Runs a classified ParsedCommand against the event, todo and memo stores and
returns the confirmation text shown to the user. Store failures never escape:
they are logged, reported to Sentry and replaced with a generic message.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Callable

import pytz

from secretary.config import settings
from secretary.sentry import add_breadcrumb, capture_exception
from secretary.services import responses
from secretary.services.command import CommandAction, CommandEntity, ParsedCommand
from secretary.supabase.schemas import (
    DEFAULT_PROJECT,
    CalendarEvent,
    EventType,
    MemoItem,
    TodoItem,
    TodoPriority,
    TodoStatus,
)

if TYPE_CHECKING:
    from secretary.supabase.stores import EventStore, MemoStore, TodoStore

logger = logging.getLogger(__name__)

LIST_LIMIT = 5
DEFAULT_MEMO_TITLE = "새 메모"


class CommandExecutor:
    def __init__(
        self,
        events: EventStore,
        todos: TodoStore,
        memos: MemoStore,
        *,
        assignee: str,
        timezone: str | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.events = events
        self.todos = todos
        self.memos = memos
        self.assignee = assignee
        self.timezone = pytz.timezone(timezone or settings.user_timezone)
        self._clock = clock

    def now(self) -> datetime:
        if self._clock:
            return self._clock()
        return datetime.now(self.timezone)

    def _local(self, value: datetime) -> datetime:
        """Naive wall-clock time in the user timezone."""
        if value.tzinfo is None:
            return value
        return value.astimezone(self.timezone).replace(tzinfo=None)

    def _days_from_now(self, days: int) -> datetime:
        """Same wall-clock time ``days`` later, with the offset of that day."""
        now = self.now()
        if now.tzinfo is None:
            return now + timedelta(days=days)
        return self.timezone.localize(self._local(now) + timedelta(days=days))

    async def execute(
        self,
        command: ParsedCommand,
        cancel: asyncio.Event | None = None,
    ) -> str | None:
        """Execute a command and return the reply text.

        Returns None when the command has no executor branch, which tells the
        caller to fall back to conversation.
        """
        add_breadcrumb(
            f"execute {command.action.value} {command.entity.value if command.entity else '-'}",
            category="executor",
        )

        try:
            if command.action == CommandAction.ADD:
                return await self._add(command, cancel)

            if command.action == CommandAction.LIST:
                return await self._list(command)

            if command.action in (CommandAction.UPDATE, CommandAction.DELETE) and command.entity:
                return responses.not_supported(command.action.value, command.entity.value)

            return None

        except Exception as e:
            logger.exception(f"Command failed: {command.action.value} {command.entity}")
            capture_exception(e)
            return responses.COMMAND_FAILED

    async def _add(self, command: ParsedCommand, cancel: asyncio.Event | None) -> str | None:
        if command.entity == CommandEntity.EVENT:
            if not command.title:
                return responses.EVENT_TITLE_NEEDED
            start = command.resolved_date or self.now()
            event = CalendarEvent(
                title=command.title,
                start_date=start,
                end_date=start,
                type=EventType.PERSONAL,
            )
            if _is_cancelled(cancel):
                return responses.COMMAND_CANCELLED
            await self.events.create_event(event)
            return responses.event_added(command.title, start)

        if command.entity == CommandEntity.TODO:
            if not command.title:
                return responses.TODO_TITLE_NEEDED
            due = command.resolved_date or self._days_from_now(1)
            todo = TodoItem(
                title=command.title,
                due_date=due,
                status=TodoStatus.WAITING,
                priority=TodoPriority.MEDIUM,
                project=DEFAULT_PROJECT,
                assignee=self.assignee,
            )
            if _is_cancelled(cancel):
                return responses.COMMAND_CANCELLED
            await self.todos.create_todo(todo)
            return responses.todo_added(command.title, due)

        if command.entity == CommandEntity.MEMO:
            title = command.title or DEFAULT_MEMO_TITLE
            memo = MemoItem(
                title=title,
                content=command.content or command.original_text,
                tags=[],
                is_pinned=False,
            )
            if _is_cancelled(cancel):
                return responses.COMMAND_CANCELLED
            await self.memos.create_memo(memo)
            return responses.memo_added(title)

        return None

    async def _list(self, command: ParsedCommand) -> str | None:
        if command.entity == CommandEntity.EVENT:
            events = await self.events.list_events()
            today = self._local(self.now())
            start_of_today = today.replace(hour=0, minute=0, second=0, microsecond=0)
            upcoming = [
                e.model_copy(update={"start_date": self._local(e.start_date)})
                for e in events
                if self._local(e.start_date) >= start_of_today
            ]
            if not upcoming:
                return responses.NO_EVENTS
            return responses.event_list(upcoming[:LIST_LIMIT])

        if command.entity == CommandEntity.TODO:
            todos = await self.todos.list_todos()
            pending = [t for t in todos if t.is_open]
            if not pending:
                return responses.NO_TODOS
            return responses.todo_list(pending[:LIST_LIMIT])

        if command.entity == CommandEntity.MEMO:
            memos = await self.memos.list_memos()
            if not memos:
                return responses.NO_MEMOS
            # Stable sort keeps the store's newest-first order within each group
            ordered = sorted(memos, key=lambda m: not m.is_pinned)
            return responses.memo_list(ordered[:LIST_LIMIT])

        return None


def _is_cancelled(cancel: asyncio.Event | None) -> bool:
    if cancel is not None and cancel.is_set():
        logger.info("Command superseded before write, skipping")
        return True
    return False


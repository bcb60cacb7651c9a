from secretary.supabase.client import SupabaseClient, SupabaseError
from secretary.supabase.schemas import (
    CalendarEvent,
    EventType,
    MemoItem,
    TodoItem,
    TodoPriority,
    TodoStatus,
)
from secretary.supabase.stores import EventStore, MemoStore, TodoStore

__all__ = [
    "SupabaseClient",
    "SupabaseError",
    "CalendarEvent",
    "EventType",
    "MemoItem",
    "TodoItem",
    "TodoPriority",
    "TodoStatus",
    "EventStore",
    "MemoStore",
    "TodoStore",
]

"""User-facing Korean response text for the secretary."""

from datetime import datetime

from secretary.supabase.schemas import CalendarEvent, MemoItem, TodoItem

COMMAND_FAILED = "⚠️ 명령 처리 중 오류가 발생했습니다. 다시 시도해주세요."
COMMAND_CANCELLED = "요청이 취소되어 아무것도 변경하지 않았습니다."

EVENT_TITLE_NEEDED = '일정 제목을 알려주세요. 예: "내일 오후 2시에 팀 미팅 일정 추가해줘"'
TODO_TITLE_NEEDED = '할 일 내용을 알려주세요. 예: "금요일까지 보고서 작성 할 일 추가해줘"'

NO_EVENTS = "등록된 일정이 없습니다."
NO_TODOS = "등록된 할 일이 없습니다."
NO_MEMOS = "저장된 메모가 없습니다."

MODEL_UNREACHABLE = "⚠️ AI 모델 연결에 문제가 있습니다. 잠시 후 다시 시도해주세요."
CHAT_FAILED = "⚠️ 죄송합니다. 요청을 처리하는 중 오류가 발생했습니다. 다시 시도해주세요."

ENTITY_NAMES = {
    "event": "일정",
    "todo": "할 일",
    "memo": "메모",
}
ACTION_NAMES = {
    "update": "수정",
    "delete": "삭제",
}


def format_month_day(value: datetime) -> str:
    return f"{value.month}월 {value.day}일"


def format_month_day_time(value: datetime) -> str:
    return f"{value.month}월 {value.day}일 {value:%H:%M}"


def format_short(value: datetime) -> str:
    return f"{value.month}/{value.day} {value:%H:%M}"


def event_added(title: str, start: datetime) -> str:
    return f"✅ 일정이 추가되었습니다!\n\n📅 **{title}**\n⏰ {format_month_day_time(start)}"


def todo_added(title: str, due: datetime) -> str:
    return f"✅ 할 일이 추가되었습니다!\n\n📝 **{title}**\n📆 마감일: {format_month_day(due)}"


def memo_added(title: str) -> str:
    return f"✅ 메모가 저장되었습니다!\n\n📝 **{title}**"


def event_list(events: list[CalendarEvent]) -> str:
    lines = ["📅 **다가오는 일정**", ""]
    lines.extend(f"• {event.title} - {format_short(event.start_date)}" for event in events)
    return "\n".join(lines)


def todo_list(todos: list[TodoItem]) -> str:
    lines = ["📝 **진행 중인 할 일**", ""]
    lines.extend(f"• {todo.title}" for todo in todos)
    return "\n".join(lines)


def memo_list(memos: list[MemoItem]) -> str:
    lines = ["🗒️ **최근 메모**", ""]
    lines.extend(f"• {'📌 ' if memo.is_pinned else ''}{memo.title}" for memo in memos)
    return "\n".join(lines)


def not_supported(action: str, entity: str) -> str:
    entity_name = ENTITY_NAMES.get(entity, entity)
    action_name = ACTION_NAMES.get(action, action)
    return (
        f"{entity_name} {action_name} 기능은 아직 대화로 지원하지 않습니다. "
        f"{entity_name} 화면에서 직접 {action_name}해주세요."
    )

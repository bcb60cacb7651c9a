from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class CommandAction(str, Enum):
    ADD = "add"
    UPDATE = "update"
    DELETE = "delete"
    LIST = "list"
    CHAT = "chat"


class CommandEntity(str, Enum):
    EVENT = "event"
    TODO = "todo"
    MEMO = "memo"


@dataclass
class ParsedCommand:
    action: CommandAction
    entity: CommandEntity | None = None
    title: str | None = None
    resolved_date: datetime | None = None
    time: str | None = None
    content: str | None = None
    original_text: str = ""

    @property
    def is_actionable(self) -> bool:
        return self.action != CommandAction.CHAT and self.entity is not None

    def to_dict(self) -> dict[str, str | None]:
        return {
            "action": self.action.value,
            "entity": self.entity.value if self.entity else None,
            "title": self.title,
            "resolved_date": self.resolved_date.isoformat() if self.resolved_date else None,
            "time": self.time,
            "content": self.content,
            "original_text": self.original_text,
        }

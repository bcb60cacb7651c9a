"""Keyword intent classifier for chat commands.

Maps a message to an action and a target entity using two ordered rule
tables. Earlier rules win when a message contains keywords from several.
"""

from dataclasses import dataclass

from secretary.services.command import CommandAction, CommandEntity


@dataclass
class Classification:
    action: CommandAction
    entity: CommandEntity | None = None


class IntentClassifier:
    # Order is precedence: add > delete > update > list
    ACTION_RULES: list[tuple[CommandAction, tuple[str, ...]]] = [
        (CommandAction.ADD, ("추가", "등록", "만들", "생성", "잡아", "넣어")),
        (CommandAction.DELETE, ("삭제", "지워", "취소", "제거")),
        (CommandAction.UPDATE, ("수정", "변경", "바꿔", "옮겨")),
        (CommandAction.LIST, ("보여", "알려", "뭐", "조회")),
    ]

    ENTITY_RULES: list[tuple[CommandEntity, tuple[str, ...]]] = [
        (CommandEntity.EVENT, ("일정", "회의", "미팅", "약속")),
        (CommandEntity.TODO, ("할일", "할 일", "업무", "태스크")),
        (CommandEntity.MEMO, ("메모", "노트")),
    ]

    def classify(self, text: str) -> Classification:
        text_lower = text.lower()

        action = self.detect_action(text_lower)
        if action == CommandAction.CHAT:
            return Classification(action=CommandAction.CHAT)

        entity = self.detect_entity(text_lower)
        if entity is None:
            # A command without a target is not actionable
            return Classification(action=CommandAction.CHAT)

        return Classification(action=action, entity=entity)

    def detect_action(self, text: str) -> CommandAction:
        for action, keywords in self.ACTION_RULES:
            if any(keyword in text for keyword in keywords):
                return action
        return CommandAction.CHAT

    def detect_entity(self, text: str) -> CommandEntity | None:
        for entity, keywords in self.ENTITY_RULES:
            if any(keyword in text for keyword in keywords):
                return entity
        return None

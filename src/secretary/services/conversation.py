"""Conversational fallback for messages that are not commands."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from secretary.sentry import capture_exception
from secretary.services import responses
from secretary.services.llm_client import ChatTurn

if TYPE_CHECKING:
    from secretary.services.llm_client import LLMClient

logger = logging.getLogger(__name__)

PERSONA_PROMPT = """당신은 "AI 비서"입니다. 비즈니스 협업 플랫폼에서 사용자를 도와주는 친절한 AI 어시스턴트입니다.

다음과 같은 업무를 도와줄 수 있습니다:
- 일정 관리 (추가/조회/삭제)
- 할 일 관리 (추가/조회/삭제)
- 메모 작성
- 업무 관련 질문 답변

항상 친절하고 전문적으로 응답해주세요. 한국어로 응답해주세요."""

GREETING = "안녕하세요! AI 비서입니다. 일정, 할 일, 메모 관리를 도와드리겠습니다. 무엇을 도와드릴까요?"

PRIMING_HISTORY = [
    ChatTurn(role="user", text=PERSONA_PROMPT),
    ChatTurn(role="model", text=GREETING),
]


class ConversationalResponder:
    def __init__(self, llm: LLMClient):
        self.llm = llm

    async def converse(self, message: str, history: list[ChatTurn] | None = None) -> str:
        """Reply to a free-form message. Errors become an apology, never an exception.

        Every call starts from the fixed persona priming; ``history`` is
        appended after it when the caller keeps its own transcript.
        """
        turns = PRIMING_HISTORY + list(history or [])
        try:
            response = await self.llm.complete(message, history=turns)
            return response.text
        except Exception as e:
            logger.exception("Conversational reply failed")
            capture_exception(e)
            if "404" in str(e):
                return responses.MODEL_UNREACHABLE
            return responses.CHAT_FAILED

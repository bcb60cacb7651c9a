"""Entry point for chat messages sent to the secretary.

A message is parsed into a command; actionable commands are executed
against the stores, everything else is answered conversationally.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from secretary.services import responses
from secretary.services.command import ParsedCommand
from secretary.services.conversation import ConversationalResponder
from secretary.services.executor import CommandExecutor
from secretary.services.parser import CommandParser

if TYPE_CHECKING:
    from secretary.config import Settings

logger = logging.getLogger(__name__)


@dataclass
class InterpretResult:
    response_text: str
    command: ParsedCommand | None = None


class CommandInterpreter:
    def __init__(
        self,
        parser: CommandParser,
        executor: CommandExecutor,
        responder: ConversationalResponder,
    ):
        self.parser = parser
        self.executor = executor
        self.responder = responder

    async def interpret(
        self,
        message: str,
        *,
        cancel: asyncio.Event | None = None,
    ) -> InterpretResult:
        """Interpret one chat message. Never raises.

        Args:
            message: Raw user text
            cancel: Set by the caller when a newer message supersedes this
                one; a set event suppresses any pending store write.

        Returns:
            InterpretResult with display text and the executed command, or
            ``command=None`` when the reply came from conversation.
        """
        try:
            command = self.parser.parse(message)
            logger.debug(f"Parsed command: {command.to_dict()}")

            if command.is_actionable:
                result = await self.executor.execute(command, cancel=cancel)
                if result:
                    return InterpretResult(response_text=result, command=command)

            reply = await self.responder.converse(message)
            return InterpretResult(response_text=reply)

        except Exception:
            logger.exception("Unexpected error while interpreting message")
            return InterpretResult(response_text=responses.CHAT_FAILED)

    async def close(self) -> None:
        await self.responder.llm.close()
        await self.executor.events.client.close()


def build_interpreter(settings: Settings) -> CommandInterpreter:
    """Wire an interpreter to the Supabase stores and LLM providers in ``settings``."""
    from secretary.services.dates import DateResolver
    from secretary.services.llm_client import LLMClient
    from secretary.supabase import EventStore, MemoStore, SupabaseClient, TodoStore

    client = SupabaseClient(
        url=settings.supabase_url,
        api_key=settings.supabase_key,
        max_retries=settings.supabase_max_retries,
    )
    executor = CommandExecutor(
        EventStore(client),
        TodoStore(client),
        MemoStore(client),
        assignee=settings.current_user,
        timezone=settings.user_timezone,
    )
    llm = LLMClient(
        gemini_api_key=settings.gemini_api_key,
        gemini_model=settings.gemini_model,
        openai_api_key=settings.openai_api_key,
        anthropic_api_key=settings.anthropic_api_key,
        timeout=settings.llm_timeout,
    )
    parser = CommandParser(date_resolver=DateResolver(settings.user_timezone))
    return CommandInterpreter(parser, executor, ConversationalResponder(llm))

"""End-to-end tests for message interpretation with fake stores and LLM."""

import asyncio
from datetime import datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytz

from secretary.services import responses
from secretary.services.command import CommandAction, CommandEntity
from secretary.services.conversation import GREETING, PERSONA_PROMPT, ConversationalResponder
from secretary.services.dates import DateResolver
from secretary.services.executor import CommandExecutor
from secretary.services.interpreter import CommandInterpreter, InterpretResult
from secretary.services.llm_client import LLMProvider, LLMResponse
from secretary.services.parser import CommandParser
from secretary.supabase.client import SupabaseError
from secretary.supabase.schemas import TodoPriority, TodoStatus

SEOUL = pytz.timezone("Asia/Seoul")


def make_interpreter() -> tuple[CommandInterpreter, MagicMock, MagicMock, MagicMock, MagicMock]:
    events = MagicMock()
    events.create_event = AsyncMock(side_effect=lambda e: e.model_copy(update={"id": 1}))
    events.list_events = AsyncMock(return_value=[])
    todos = MagicMock()
    todos.create_todo = AsyncMock(side_effect=lambda t: t.model_copy(update={"id": 1}))
    todos.list_todos = AsyncMock(return_value=[])
    memos = MagicMock()
    memos.create_memo = AsyncMock(side_effect=lambda m: m.model_copy(update={"id": 1}))
    memos.list_memos = AsyncMock(return_value=[])

    llm = MagicMock()
    llm.complete = AsyncMock(
        return_value=LLMResponse(text="네, 도와드릴게요!", provider=LLMProvider.GEMINI, model="test")
    )
    llm.close = AsyncMock()

    executor = CommandExecutor(events, todos, memos, assignee="김민지", timezone="Asia/Seoul")
    interpreter = CommandInterpreter(
        CommandParser(date_resolver=DateResolver("Asia/Seoul")),
        executor,
        ConversationalResponder(llm),
    )
    return interpreter, events, todos, memos, llm


class TestCommandScenarios:
    def setup_method(self):
        self.interpreter, self.events, self.todos, self.memos, self.llm = make_interpreter()

    @pytest.mark.asyncio
    async def test_add_event_for_tomorrow_afternoon(self):
        today = datetime.now(SEOUL).date()

        result = await self.interpreter.interpret("내일 오후 2시에 팀 미팅 일정 추가해줘")

        self.events.create_event.assert_awaited_once()
        event = self.events.create_event.call_args.args[0]
        assert event.title == "팀 미팅"
        assert event.start_date.date() == today + timedelta(days=1)
        assert (event.start_date.hour, event.start_date.minute) == (14, 0)
        assert event.end_date == event.start_date
        assert event.type.value == "personal"

        assert "✅" in result.response_text
        assert "팀 미팅" in result.response_text
        assert result.command.action == CommandAction.ADD
        assert result.command.entity == CommandEntity.EVENT
        self.llm.complete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_add_todo_due_friday(self):
        result = await self.interpreter.interpret("금요일까지 보고서 작성 할 일 추가해줘")

        todo = self.todos.create_todo.call_args.args[0]
        assert todo.title == "보고서 작성"
        assert todo.due_date.weekday() == 4
        assert todo.status == TodoStatus.WAITING
        assert todo.priority == TodoPriority.MEDIUM
        assert todo.project == "기타"
        assert todo.assignee == "김민지"
        assert "보고서 작성" in result.response_text

    @pytest.mark.asyncio
    async def test_list_with_no_events(self):
        result = await self.interpreter.interpret("이번 주 일정 알려줘")

        self.events.list_events.assert_awaited_once()
        assert result.response_text == responses.NO_EVENTS
        assert result.command.action == CommandAction.LIST
        self.llm.complete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_chat_message_goes_to_conversation(self):
        result = await self.interpreter.interpret("오늘 점심 뭐 먹을까?")

        assert result == InterpretResult(response_text="네, 도와드릴게요!", command=None)
        self.events.create_event.assert_not_awaited()
        self.todos.create_todo.assert_not_awaited()
        self.memos.create_memo.assert_not_awaited()

        history = self.llm.complete.call_args.kwargs["history"]
        assert history[0].role == "user"
        assert history[0].text == PERSONA_PROMPT
        assert history[1].role == "model"
        assert history[1].text == GREETING
        assert self.llm.complete.call_args.args[0] == "오늘 점심 뭐 먹을까?"

    @pytest.mark.asyncio
    async def test_missing_event_title_asks_for_it(self):
        result = await self.interpreter.interpret("내일 일정 추가해줘")

        assert result.response_text == responses.EVENT_TITLE_NEEDED
        self.events.create_event.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_same_message_twice_creates_two_events(self):
        await self.interpreter.interpret("내일 오후 2시에 팀 미팅 일정 추가해줘")
        await self.interpreter.interpret("내일 오후 2시에 팀 미팅 일정 추가해줘")

        assert self.events.create_event.await_count == 2

    @pytest.mark.asyncio
    async def test_delete_is_reported_as_unsupported(self):
        result = await self.interpreter.interpret("내일 팀 미팅 일정 삭제해줘")

        assert "아직" in result.response_text
        assert result.command.action == CommandAction.DELETE
        self.events.create_event.assert_not_awaited()
        self.llm.complete.assert_not_awaited()


class TestFailures:
    def setup_method(self):
        self.interpreter, self.events, self.todos, self.memos, self.llm = make_interpreter()

    @pytest.mark.asyncio
    async def test_store_failure_gives_generic_message(self):
        self.events.create_event.side_effect = SupabaseError("HTTP 500: column does not exist")

        result = await self.interpreter.interpret("내일 오후 2시에 팀 미팅 일정 추가해줘")

        assert result.response_text == responses.COMMAND_FAILED
        assert "column" not in result.response_text
        self.llm.complete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_model_not_found_message(self):
        self.llm.complete.side_effect = RuntimeError(
            "All LLM providers failed: gemini: Client error '404 Not Found'"
        )

        result = await self.interpreter.interpret("오늘 기분이 어때?")

        assert result.response_text == responses.MODEL_UNREACHABLE
        assert result.command is None

    @pytest.mark.asyncio
    async def test_other_llm_failure_message(self):
        self.llm.complete.side_effect = RuntimeError("All LLM providers failed: gemini: timeout")

        result = await self.interpreter.interpret("오늘 기분이 어때?")

        assert result.response_text == responses.CHAT_FAILED

    @pytest.mark.asyncio
    async def test_parser_crash_never_escapes(self):
        self.interpreter.parser = MagicMock()
        self.interpreter.parser.parse.side_effect = ValueError("bad input")

        result = await self.interpreter.interpret("아무 말")

        assert result.response_text == responses.CHAT_FAILED
        assert result.command is None

    @pytest.mark.asyncio
    async def test_superseded_message_writes_nothing(self):
        cancel = asyncio.Event()
        cancel.set()

        result = await self.interpreter.interpret(
            "금요일까지 보고서 작성 할 일 추가해줘", cancel=cancel
        )

        assert result.response_text == responses.COMMAND_CANCELLED
        self.todos.create_todo.assert_not_awaited()


class TestClose:
    @pytest.mark.asyncio
    async def test_close_releases_clients(self):
        interpreter, events, _, _, llm = make_interpreter()
        events.client.close = AsyncMock()

        await interpreter.close()

        llm.close.assert_awaited_once()
        events.client.close.assert_awaited_once()

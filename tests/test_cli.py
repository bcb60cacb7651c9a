"""Tests for the command line entry point."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from secretary import cli
from secretary.services.interpreter import InterpretResult


@pytest.fixture(autouse=True)
def no_sentry():
    with patch("secretary.cli.init_sentry") as init, patch("secretary.cli.sentry_flush"):
        yield init


class TestParseCommand:
    def test_prints_parsed_command_json(self, capsys):
        cli.main(["parse", "내일 오후 2시에 팀 미팅 일정 추가해줘"])

        data = json.loads(capsys.readouterr().out)
        assert data["action"] == "add"
        assert data["entity"] == "event"
        assert data["title"] == "팀 미팅"
        assert data["time"] == "14:00"
        assert data["resolved_date"].endswith("T14:00:00+09:00")

    def test_chat_message(self, capsys):
        cli.main(["parse", "오늘 점심 뭐 먹을까?"])

        data = json.loads(capsys.readouterr().out)
        assert data["action"] == "chat"
        assert data["entity"] is None


class TestCheckCommand:
    def test_reports_missing_configuration(self, capsys):
        fake = MagicMock(
            supabase_url="",
            supabase_key="",
            has_supabase=False,
            has_gemini=False,
            has_openai=False,
            has_anthropic=False,
            has_llm=False,
            has_sentry=False,
            user_timezone="Asia/Seoul",
            current_user="나",
            log_level="INFO",
        )
        with patch.object(cli, "settings", fake):
            cli.main(["check"])

        out = capsys.readouterr().out
        assert "[-] Supabase URL: MISSING" in out
        assert "Missing required configuration" in out

    def test_reports_ready(self, capsys):
        fake = MagicMock(
            supabase_url="https://demo.supabase.co",
            supabase_key="anon",
            has_supabase=True,
            has_gemini=True,
            has_openai=False,
            has_anthropic=False,
            has_llm=True,
            has_sentry=False,
            user_timezone="Asia/Seoul",
            current_user="나",
            log_level="INFO",
        )
        with patch.object(cli, "settings", fake):
            cli.main(["check"])

        out = capsys.readouterr().out
        assert "[+] Gemini API Key: OK" in out
        assert "Ready to run" in out


class TestAskCommand:
    def test_ask_exits_without_backend(self):
        fake = MagicMock(has_supabase=False, has_llm=False, log_level="INFO")
        with patch.object(cli, "settings", fake):
            with pytest.raises(SystemExit) as exc_info:
                cli.main(["ask", "안녕"])

        assert exc_info.value.code == 1

    def test_ask_prints_reply_and_closes(self, capsys):
        interpreter = MagicMock()
        interpreter.interpret = AsyncMock(return_value=InterpretResult(response_text="안녕하세요!"))
        interpreter.close = AsyncMock()
        fake = MagicMock(has_supabase=True, has_llm=True, log_level="INFO")

        with (
            patch.object(cli, "settings", fake),
            patch("secretary.services.interpreter.build_interpreter", return_value=interpreter),
        ):
            cli.main(["ask", "안녕"])

        assert "안녕하세요!" in capsys.readouterr().out
        interpreter.interpret.assert_awaited_once_with("안녕")
        interpreter.close.assert_awaited_once()


class TestMain:
    def test_no_command_prints_help(self, capsys):
        cli.main([])
        assert "usage" in capsys.readouterr().out.lower()

    def test_sentry_initialized_from_settings(self, no_sentry):
        cli.main([])
        no_sentry.assert_called_once()

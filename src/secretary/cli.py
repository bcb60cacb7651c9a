import argparse
import asyncio
import json
import logging
import sys

from secretary.config import settings
from secretary.sentry import flush as sentry_flush
from secretary.sentry import init_sentry

EXIT_WORDS = {"exit", "quit", "종료"}


def setup_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _require_backends() -> None:
    if not settings.has_supabase:
        print("Error: SUPABASE_URL / SUPABASE_KEY not configured")
        print("Set them in .env file or as environment variables")
        sys.exit(1)

    if not settings.has_llm:
        print("Warning: no LLM API key configured, conversation replies will fail")


async def run_chat() -> None:
    from secretary.services.interpreter import build_interpreter

    _require_backends()
    interpreter = build_interpreter(settings)
    print("AI 비서입니다. 종료하려면 'exit'를 입력하세요.\n")

    try:
        while True:
            try:
                message = await asyncio.to_thread(input, "> ")
            except EOFError:
                break
            message = message.strip()
            if not message:
                continue
            if message.lower() in EXIT_WORDS:
                break

            result = await interpreter.interpret(message)
            print(f"\n{result.response_text}\n")
    finally:
        await interpreter.close()


async def ask(message: str) -> None:
    from secretary.services.interpreter import build_interpreter

    _require_backends()
    interpreter = build_interpreter(settings)
    try:
        result = await interpreter.interpret(message)
    finally:
        await interpreter.close()

    print(result.response_text)


def parse_only(message: str) -> None:
    """Print how a message would be interpreted, without touching any store."""
    from secretary.services.dates import DateResolver
    from secretary.services.parser import CommandParser

    parser = CommandParser(date_resolver=DateResolver(settings.user_timezone))
    command = parser.parse(message)
    print(json.dumps(command.to_dict(), ensure_ascii=False, indent=2))


def check_config() -> None:
    print("AI Secretary Configuration Check\n")

    checks = [
        ("Supabase URL", bool(settings.supabase_url)),
        ("Supabase Key", bool(settings.supabase_key)),
        ("Gemini API Key", settings.has_gemini),
        ("OpenAI API Key", settings.has_openai),
        ("Anthropic API Key", settings.has_anthropic),
        ("Sentry DSN", settings.has_sentry),
    ]

    for name, configured in checks:
        status = "OK" if configured else "MISSING"
        symbol = "+" if configured else "-"
        print(f"  [{symbol}] {name}: {status}")

    print(f"\n  Timezone: {settings.user_timezone}")
    print(f"  Assignee: {settings.current_user}")

    print()
    if settings.has_supabase and settings.has_llm:
        print("Required configuration present. Ready to run.")
    else:
        print("Missing required configuration. Supabase and at least one LLM key are needed.")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="AI Secretary")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("chat", help="Start an interactive chat session")
    ask_parser = subparsers.add_parser("ask", help="Send a single message")
    ask_parser.add_argument("message")
    parse_parser = subparsers.add_parser("parse", help="Show the parsed command for a message")
    parse_parser.add_argument("message")
    subparsers.add_parser("check", help="Check configuration")

    args = parser.parse_args(argv)

    setup_logging()

    # Disabled when no DSN is configured
    init_sentry(dsn=settings.sentry_dsn, environment=settings.sentry_environment)

    try:
        if args.command == "chat":
            asyncio.run(run_chat())
        elif args.command == "ask":
            asyncio.run(ask(args.message))
        elif args.command == "parse":
            parse_only(args.message)
        elif args.command == "check":
            check_config()
        else:
            parser.print_help()
    finally:
        sentry_flush(timeout=2.0)


if __name__ == "__main__":
    main()

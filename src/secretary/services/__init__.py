"""Secretary services module.

Command parsing, execution and the conversational fallback. Imports are lazy
so that importing one service does not pull in the HTTP clients of the others.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

_EXPORTS: dict[str, tuple[str, str]] = {
    # Command model
    "CommandAction": ("secretary.services.command", "CommandAction"),
    "CommandEntity": ("secretary.services.command", "CommandEntity"),
    "ParsedCommand": ("secretary.services.command", "ParsedCommand"),
    # Classifier
    "Classification": ("secretary.services.classifier", "Classification"),
    "IntentClassifier": ("secretary.services.classifier", "IntentClassifier"),
    # Dates
    "DateResolver": ("secretary.services.dates", "DateResolver"),
    "resolve_date": ("secretary.services.dates", "resolve_date"),
    "resolve_time": ("secretary.services.dates", "resolve_time"),
    # Parser
    "CommandParser": ("secretary.services.parser", "CommandParser"),
    "extract_title": ("secretary.services.parser", "extract_title"),
    # Executor
    "CommandExecutor": ("secretary.services.executor", "CommandExecutor"),
    # Conversation
    "ConversationalResponder": ("secretary.services.conversation", "ConversationalResponder"),
    # LLM
    "ChatTurn": ("secretary.services.llm_client", "ChatTurn"),
    "LLMClient": ("secretary.services.llm_client", "LLMClient"),
    "LLMProvider": ("secretary.services.llm_client", "LLMProvider"),
    "LLMResponse": ("secretary.services.llm_client", "LLMResponse"),
    "get_llm_client": ("secretary.services.llm_client", "get_llm_client"),
    # Interpreter
    "CommandInterpreter": ("secretary.services.interpreter", "CommandInterpreter"),
    "InterpretResult": ("secretary.services.interpreter", "InterpretResult"),
    "build_interpreter": ("secretary.services.interpreter", "build_interpreter"),
}

__all__ = list(_EXPORTS.keys())


def __getattr__(name: str) -> Any:
    if name not in _EXPORTS:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module_name, attr_name = _EXPORTS[name]
    module = import_module(module_name)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    return sorted(list(globals().keys()) + list(_EXPORTS.keys()))

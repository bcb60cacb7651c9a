import re
from datetime import datetime

from secretary.services.classifier import IntentClassifier
from secretary.services.command import CommandAction, ParsedCommand
from secretary.services.dates import DateResolver, format_time

MIN_TITLE_LENGTH = 3

QUOTED_RE = re.compile(r"[\"'“”‘’](.+?)[\"'“”‘’]")
CONTENT_RE = re.compile(r"[:：]\s+(.+)$", re.DOTALL)

# Particles that attach to a date or time word ("금요일까지", "2시에")
_PARTICLE = r"(?:까지|부터|에는|에|은|는)?"


class CommandParser:
    """Turns a chat message into a ParsedCommand.

    Classification runs first; date, time and title extraction only happen
    for messages that name an action and a target.
    """

    TITLE_STRIP_PATTERNS = [
        # Dates
        rf"(?:오늘|내일|모레|[월화수목금토일]요일){_PARTICLE}",
        rf"(?:이번|다음)\s*주{_PARTICLE}",
        rf"\d+\s*(?:일|주일|주|개월|달|월|년)\s*(?:뒤|후){_PARTICLE}",
        rf"(?:\d{{4}}\s*년\s*)?\d{{1,2}}\s*월\s*\d{{1,2}}\s*일{_PARTICLE}",
        # Times
        rf"(?:오전|오후)?\s*\d{{1,2}}\s*시(?!간)"
        rf"(?:\s*\d{{1,2}}\s*분|\d{{1,2}}(?!\d)|\s*반)?{_PARTICLE}",
        rf"\d{{1,2}}:\d{{2}}{_PARTICLE}",
        # Collection nouns; descriptive ones such as 회의 and 미팅 stay in the title
        r"(?:일정|할\s?일|태스크|메모|노트)(?:을|를|에다|에|으로|로|에서)?",
        # Action verbs with their politeness suffixes
        r"(?:추가|등록|생성)\s*(?:해\s*)?(?:줘|주세요|줄래요?|해)?",
        r"(?:만들어|잡아|넣어)\s*(?:줘|주세요|줄래요?)?",
        r"(?:만들|생성)",
        r"해\s*(?:줘|주세요)",
    ]

    def __init__(
        self,
        classifier: IntentClassifier | None = None,
        date_resolver: DateResolver | None = None,
    ):
        self.classifier = classifier or IntentClassifier()
        self.date_resolver = date_resolver or DateResolver()
        self._strip_patterns = [re.compile(p) for p in self.TITLE_STRIP_PATTERNS]

    def parse(self, text: str, now: datetime | None = None) -> ParsedCommand:
        classification = self.classifier.classify(text)
        if classification.action == CommandAction.CHAT:
            return ParsedCommand(action=CommandAction.CHAT, original_text=text)

        resolved_date, time_match = self.date_resolver.resolve(text, now)

        return ParsedCommand(
            action=classification.action,
            entity=classification.entity,
            title=self.extract_title(text),
            resolved_date=resolved_date,
            time=format_time(time_match) if time_match else None,
            content=self.extract_content(text),
            original_text=text,
        )

    def extract_title(self, text: str) -> str | None:
        quoted = QUOTED_RE.search(text)
        if quoted:
            return quoted.group(1)

        title = CONTENT_RE.sub("", text)
        for pattern in self._strip_patterns:
            title = pattern.sub(" ", title)
        title = re.sub(r"\s+", " ", title).strip(" .,!?~")

        if len(title) >= MIN_TITLE_LENGTH:
            return title
        return None

    def extract_content(self, text: str) -> str | None:
        """Body given after a colon, e.g. "메모 추가해줘: 장보기 목록"."""
        match = CONTENT_RE.search(text)
        if match:
            return match.group(1).strip() or None
        return None


_default_parser: CommandParser | None = None


def get_command_parser() -> CommandParser:
    global _default_parser
    if _default_parser is None:
        _default_parser = CommandParser()
    return _default_parser


def extract_title(text: str) -> str | None:
    return get_command_parser().extract_title(text)

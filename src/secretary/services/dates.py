"""Resolution of Korean date and time expressions.

Supported date expressions, tried in this order:
- 오늘, 모레, 내일
- 월요일 .. 일요일 (next occurrence strictly after today)
- N일 뒤 / N일 후
- N주 뒤 / N주일 후
- 2025년 1월 15일
- 7월 1일 (rolls over to next year once the day has passed)

Supported times: 오전/오후 3시 [30분 | 반], 15시 [30분], 3시30, 15:30.

Arithmetic is done on naive wall-clock values in the resolver timezone and
the result is localized at the end, so the UTC offset always matches the
resolved date.
"""

import re
from datetime import datetime, timedelta

import pytz

from secretary.config import settings

RELATIVE_DAYS = [
    ("오늘", 0),
    # "내일모레" is the day after tomorrow, so 모레 must be checked before 내일
    ("모레", 2),
    ("내일", 1),
]

WEEKDAYS = {
    "월요일": 0,
    "화요일": 1,
    "수요일": 2,
    "목요일": 3,
    "금요일": 4,
    "토요일": 5,
    "일요일": 6,
}

DAYS_LATER_RE = re.compile(r"(\d+)\s*(?:일|days?)\s*(?:뒤|후)")
WEEKS_LATER_RE = re.compile(r"(\d+)\s*(?:주일|주|weeks?)\s*(?:뒤|후)")
FULL_DATE_RE = re.compile(r"(\d{4})\s*년\s*(\d{1,2})\s*월\s*(\d{1,2})\s*일")
MONTH_DAY_RE = re.compile(r"(\d{1,2})\s*월\s*(\d{1,2})\s*일")

MERIDIEM_TIME_RE = re.compile(
    r"(오전|오후)\s*(\d{1,2})\s*시(?!간)(?:\s*(\d{1,2})\s*분|(\d{1,2})(?!\d)|\s*(반))?"
)
# Minutes without 분 only when attached to 시, so "2시30" is 2:30 but "2시 2층" is 2:00
HOUR_TIME_RE = re.compile(r"(\d{1,2})\s*시(?!간)(?:\s*(\d{1,2})\s*분|(\d{1,2})(?!\d)|\s*(반))?")
COLON_TIME_RE = re.compile(r"(\d{1,2}):(\d{2})")


class DateResolver:
    def __init__(self, timezone: str | None = None):
        self.timezone = pytz.timezone(timezone or settings.user_timezone)

    def now(self) -> datetime:
        return datetime.now(self.timezone)

    def resolve(
        self, text: str, now: datetime | None = None
    ) -> tuple[datetime | None, tuple[int, int] | None]:
        """Resolve a date and, only if one was found, a clock time.

        Returns the combined datetime and the (hour, minute) that was applied.
        """
        date = self._resolve_wall_date(text, now)
        if date is None:
            return None, None

        time_match = self.resolve_time(text)
        if time_match:
            date = apply_time(date, time_match)
        return self._localize(date), time_match

    def resolve_date(self, text: str, now: datetime | None = None) -> datetime | None:
        date = self._resolve_wall_date(text, now)
        if date is None:
            return None
        return self._localize(date)

    def _wall_clock(self, now: datetime | None) -> datetime:
        """Naive local time in the resolver timezone, seconds dropped."""
        now = now or self.now()
        if now.tzinfo is not None:
            now = now.astimezone(self.timezone).replace(tzinfo=None)
        return now.replace(second=0, microsecond=0)

    def _localize(self, value: datetime) -> datetime:
        # localize picks the offset in effect on the resulting date
        return self.timezone.localize(value)

    def _resolve_wall_date(self, text: str, now: datetime | None) -> datetime | None:
        now = self._wall_clock(now)
        text = text.lower()

        for word, offset in RELATIVE_DAYS:
            if word in text:
                return now + timedelta(days=offset)

        for day_name, day_num in WEEKDAYS.items():
            if day_name in text:
                days_ahead = day_num - now.weekday()
                if days_ahead <= 0:
                    days_ahead += 7
                return now + timedelta(days=days_ahead)

        match = DAYS_LATER_RE.search(text)
        if match:
            return now + timedelta(days=int(match.group(1)))

        match = WEEKS_LATER_RE.search(text)
        if match:
            return now + timedelta(weeks=int(match.group(1)))

        # The full form first, otherwise "1월 15일" inside "2025년 1월 15일"
        # would be taken as a year-less date
        match = FULL_DATE_RE.search(text)
        if match:
            year, month, day = (int(g) for g in match.groups())
            return _midnight(year, month, day)

        match = MONTH_DAY_RE.search(text)
        if match:
            month, day = int(match.group(1)), int(match.group(2))
            date = _midnight(now.year, month, day)
            if date is not None and date.date() < now.date():
                date = _midnight(now.year + 1, month, day)
            return date

        return None

    def resolve_time(self, text: str) -> tuple[int, int] | None:
        match = MERIDIEM_TIME_RE.search(text)
        if match:
            hour = int(match.group(2))
            minute = _minutes(match.group(3) or match.group(4), match.group(5))
            if match.group(1) == "오후" and hour < 12:
                hour += 12
            elif match.group(1) == "오전" and hour == 12:
                hour = 0
            return _valid_time(hour, minute)

        match = HOUR_TIME_RE.search(text)
        if match:
            hour = int(match.group(1))
            minute = _minutes(match.group(2) or match.group(3), match.group(4))
            return _valid_time(hour, minute)

        match = COLON_TIME_RE.search(text)
        if match:
            return _valid_time(int(match.group(1)), int(match.group(2)))

        return None


def apply_time(date: datetime, time: tuple[int, int]) -> datetime:
    return date.replace(hour=time[0], minute=time[1], second=0, microsecond=0)


def format_time(time: tuple[int, int]) -> str:
    return f"{time[0]}:{time[1]:02d}"


def _midnight(year: int, month: int, day: int) -> datetime | None:
    try:
        return datetime(year, month, day)
    except ValueError:
        # 2월 30일 and friends
        return None


def _minutes(digits: str | None, half: str | None) -> int:
    if digits:
        return int(digits)
    if half:
        return 30
    return 0


def _valid_time(hour: int, minute: int) -> tuple[int, int] | None:
    if 0 <= hour <= 23 and 0 <= minute <= 59:
        return hour, minute
    return None


_default_resolver: DateResolver | None = None


def get_date_resolver() -> DateResolver:
    global _default_resolver
    if _default_resolver is None:
        _default_resolver = DateResolver()
    return _default_resolver


def resolve_date(text: str, now: datetime | None = None) -> datetime | None:
    """Resolve a date expression using the configured user timezone."""
    return get_date_resolver().resolve_date(text, now)


def resolve_time(text: str) -> tuple[int, int] | None:
    return get_date_resolver().resolve_time(text)

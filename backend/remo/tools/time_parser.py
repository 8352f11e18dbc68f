from datetime import datetime, date, timedelta
from typing import Optional, Callable, List, Tuple
from dateutil import parser, relativedelta
import pytz
import calendar
import re

from .extractors import extract_time, NUMERIC_DATE_PATTERN
from ..utils.logger import logger


MONTH_NAMES = [
    'january', 'february', 'march', 'april', 'may', 'june',
    'july', 'august', 'september', 'october', 'november', 'december'
]

DAY_ORDINALS = {
    'first': 1, 'second': 2, 'third': 3, 'fourth': 4, 'fifth': 5, 'sixth': 6,
    'seventh': 7, 'eighth': 8, 'ninth': 9, 'tenth': 10, 'eleventh': 11,
    'twelfth': 12, 'thirteenth': 13, 'fourteenth': 14, 'fifteenth': 15,
    'sixteenth': 16, 'seventeenth': 17, 'eighteenth': 18, 'nineteenth': 19,
    'twentieth': 20, 'twenty-first': 21, 'twenty-second': 22, 'twenty-third': 23,
    'twenty-fourth': 24, 'twenty-fifth': 25, 'twenty-sixth': 26,
    'twenty-seventh': 27, 'twenty-eighth': 28, 'twenty-ninth': 29,
    'thirtieth': 30, 'thirty-first': 31
}

WEEKDAYS = {
    'monday': 0, 'tuesday': 1, 'wednesday': 2, 'thursday': 3,
    'friday': 4, 'saturday': 5, 'sunday': 6
}

WEEKDAY_PATTERN = re.compile(
    r'\b(?:(next|this|coming|last)\s+)?(monday|tuesday|wednesday|thursday|friday|saturday|sunday)\b'
)


def _weekend(today: date) -> date:
    return today + timedelta(days=(5 - today.weekday()) % 7)


def _month_end(today: date) -> date:
    last_day = calendar.monthrange(today.year, today.month)[1]
    return today.replace(day=last_day)


# Evaluated in declaration order. "day after tomorrow" sits behind "tomorrow"
# and "next weekend" behind "next week"; the first substring hit wins.
DATE_EXPRESSIONS: List[Tuple[str, Callable[[date], date]]] = [
    ('today', lambda today: today),
    ('tomorrow', lambda today: today + timedelta(days=1)),
    ('day after tomorrow', lambda today: today + timedelta(days=2)),
    ('next week', lambda today: today + timedelta(days=7)),
    ('weekend', _weekend),
    ('month end', _month_end),
    ('next month', lambda today: today + relativedelta.relativedelta(months=1)),
    ('christmas', lambda today: date(today.year, 12, 25)),
    ('new year', lambda today: date(today.year + 1, 1, 1)),
]


class TimeParser:
    """
    Resolves natural-language date and time phrases against "today" in the
    configured timezone.

    `now` is taken once at construction, so one parser answers every question
    about a single message consistently.
    """

    def __init__(self, timezone: str = 'Asia/Kolkata', now: Optional[datetime] = None):
        self.timezone = pytz.timezone(timezone)
        if now is None:
            now = datetime.now(self.timezone)
        elif now.tzinfo is None:
            now = self.timezone.localize(now)
        self.now = now
        self.today = now.date()

    def resolve_date(self, text: str) -> Optional[date]:
        """
        Map a date phrase to a concrete calendar date.

        Named relative expressions return without the future check; every
        other branch (weekday, numeric, month name, generic parse) only
        accepts dates on or after today.
        """
        text_lower = text.lower().strip()
        if not text_lower:
            return None

        for expression, resolve in DATE_EXPRESSIONS:
            if expression in text_lower:
                resolved = resolve(self.today)
                logger.info(f"Resolved '{expression}' to {resolved.isoformat()}")
                return resolved

        weekday_match = WEEKDAY_PATTERN.search(text_lower)
        if weekday_match:
            qualifier, day_name = weekday_match.group(1) or '', weekday_match.group(2)
            return self._validated(self.resolve_weekday(day_name, qualifier))

        numeric_match = NUMERIC_DATE_PATTERN.search(text_lower)
        if numeric_match:
            day = int(numeric_match.group(1))
            month = int(numeric_match.group(2))
            year = int(numeric_match.group(3)) if numeric_match.group(3) else self.today.year
            return self._validated(self._build_date(year, month, day))

        month_date = self._match_month_name(text_lower)
        if month_date is not False:
            return self._validated(month_date)

        try:
            parsed = parser.parse(text, default=datetime.combine(self.today, datetime.min.time()))
        except (ValueError, OverflowError):
            logger.info(f"Could not parse date: {text}")
            return None

        return self._validated(parsed.date())

    def resolve_weekday(self, name: str, qualifier: str = '') -> Optional[date]:
        """
        Concrete date for a weekday name.

        - next: the occurrence in the following week, 7 to 13 days ahead
        - this / coming / no qualifier: nearest occurrence after today
        - last: most recent occurrence before today, within this month
        """
        target_day = WEEKDAYS.get(name.lower().strip())
        if target_day is None:
            return None

        qualifier = (qualifier or '').lower().strip()
        days_ahead = (target_day - self.today.weekday()) % 7

        if qualifier == 'next':
            return self.today + timedelta(days=days_ahead + 7)

        if qualifier == 'last':
            candidate = self.today - timedelta(days=1)
            while candidate.weekday() != target_day:
                candidate -= timedelta(days=1)
            if candidate.month != self.today.month:
                logger.info(f"No earlier {name} in {self.today.strftime('%B')}")
                return None
            return candidate

        if days_ahead == 0:
            days_ahead = 7
        return self.today + timedelta(days=days_ahead)

    def resolve_time(self, text: str) -> Optional[str]:
        return extract_time(text)

    def is_valid_future_date(self, value: date) -> bool:
        return value >= self.today

    def combine(self, day: date, clock: str) -> datetime:
        hours, minutes = (int(part) for part in clock.split(':'))
        naive = datetime.combine(day, datetime.min.time().replace(hour=hours, minute=minutes))
        return self.timezone.localize(naive)

    def _validated(self, value: Optional[date]) -> Optional[date]:
        if value is None:
            return None
        if not self.is_valid_future_date(value):
            logger.warning(f"Past date rejected: {value.isoformat()}")
            return None
        return value

    def _build_date(self, year: int, month: int, day: int) -> Optional[date]:
        try:
            return date(year, month, day)
        except ValueError:
            logger.warning(f"Invalid calendar date: {year}-{month}-{day}")
            return None

    def _match_month_name(self, text: str):
        # False means "no month phrase at all", None means "matched but impossible"
        for month_index, month_name in enumerate(MONTH_NAMES, start=1):
            numeric = re.search(
                rf'(?<!\d)(\d{{1,2}})(?:st|nd|rd|th)?\s+{month_name[:3]}\w*(?:\s+(\d{{4}}))?',
                text
            )
            if numeric:
                year = int(numeric.group(2)) if numeric.group(2) else self.today.year
                return self._build_date(year, month_index, int(numeric.group(1)))

            for day_word, day_number in DAY_ORDINALS.items():
                spelled = re.search(rf'(?<![\w-]){day_word}\s+{month_name}(?:\s+(\d{{4}}))?', text)
                if spelled:
                    year = int(spelled.group(1)) if spelled.group(1) else self.today.year
                    return self._build_date(year, month_index, day_number)

        return False


def resolve_date(text: str, timezone: str = 'Asia/Kolkata', now: Optional[datetime] = None) -> Optional[date]:
    return TimeParser(timezone, now).resolve_date(text)


def resolve_weekday(name: str, qualifier: str = '', timezone: str = 'Asia/Kolkata', now: Optional[datetime] = None) -> Optional[date]:
    return TimeParser(timezone, now).resolve_weekday(name, qualifier)

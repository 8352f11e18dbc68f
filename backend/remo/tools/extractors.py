"""
Pattern-based entity extraction over a single chat message.

Every extractor is a pure function: a miss returns None (or an empty list),
never an exception.
"""

from typing import Optional, List, Tuple, TypedDict
import re


# Declaration order matters: the first substring hit wins, so "early morning"
# and "late night" are shadowed by "morning" and "night".
TIME_EXPRESSIONS: List[Tuple[str, str]] = [
    ('noon', '12:00'),
    ('midnight', '00:00'),
    ('midday', '12:00'),
    ('morning', '09:00'),
    ('afternoon', '14:00'),
    ('evening', '18:00'),
    ('night', '20:00'),
    ('dawn', '06:00'),
    ('dusk', '18:00'),
    ('lunch', '12:00'),
    ('breakfast', '08:00'),
    ('dinner', '19:00'),
    ('brunch', '10:30'),
    ('eod', '17:00'),      # end of day
    ('cob', '17:00'),      # close of business
    ('early morning', '07:00'),
    ('late night', '23:00'),
]

# Groups: hour, minutes (optional), meridian (optional)
TIME_PATTERNS = [
    re.compile(r'\b(\d{1,2})(?:[:.](\d{2}))?(?!\d)\s*(am|pm|a\.m\.|p\.m\.)?', re.IGNORECASE),  # 3pm, 3:30pm, 3 a.m.
    re.compile(r'\b(\d{1,2})[.:](\d{2})()'),                                                     # 15.30, 15:30
    re.compile(r'\b(\d{1,2})()\s*o[\'’]?\s*clock()', re.IGNORECASE),                        # 3 o'clock
    re.compile(r'\b(\d{1,2})()\s*hrs\b()', re.IGNORECASE),                                       # 15 hrs
    re.compile(r'\bat\s+(\d{1,2})(?::(\d{2}))?\s*(am|pm)?', re.IGNORECASE),                      # at 3pm, at 15:00
]

DATE_TOKEN_PATTERN = re.compile(
    r'\b(?:on|for|next|this|coming)?\s*(monday|tuesday|wednesday|thursday|friday|saturday|sunday|tomorrow|today)\b',
    re.IGNORECASE
)
DURATION_PATTERN = re.compile(r'(\d+)\s*(minutes?|mins?|hours?|hrs?)\b', re.IGNORECASE)
EMAIL_PATTERN = re.compile(r'[\w.+-]+@[\w.-]+\.\w+')
NAME_PATTERN = re.compile(r'\bwith\s+([A-Za-z]+)\b(?!@)', re.IGNORECASE)
DESCRIPTION_PATTERN = re.compile(
    r'(?:with description|description:?|about|regarding)\s*["\']?([^"\']+)["\']?',
    re.IGNORECASE
)

# Lookbehind keeps ISO dates ("2026-11-20") for the generic parse
NUMERIC_DATE_PATTERN = re.compile(r'(?<![\d/-])(\d{1,2})[-/](\d{1,2})(?:[-/](\d{4}))?(?!\d)')
ISO_DATE_PATTERN = re.compile(r'\b\d{4}-\d{1,2}-\d{1,2}\b')
MONTH_DAY_PATTERN = re.compile(
    r'(?<!\d)\d{1,2}(?:st|nd|rd|th)?\s+'
    r'(?:jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|aug(?:ust)?'
    r'|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)\b(?:\s+\d{4})?',
    re.IGNORECASE
)
ORDINAL_DAY_PATTERN = re.compile(r'\b\d{1,2}(?:st|nd|rd|th)\b', re.IGNORECASE)

NAME_STOPWORDS = {
    'a', 'an', 'the', 'my', 'me', 'him', 'her', 'them', 'us', 'you', 'description',
    'team', 'everyone', 'someone', 'somebody',
}


class ExtractionResult(TypedDict):
    time: Optional[str]
    name: Optional[str]
    date_token: Optional[str]
    duration_minutes: Optional[int]
    emails: List[str]
    description: Optional[str]
    has_time: bool
    has_name: bool
    has_date: bool
    has_duration: bool
    has_email: bool


def extract_time(message: str) -> Optional[str]:
    """
    Extract a clock time from free text as a zero-padded "HH:MM" string.

    Named expressions ("noon", "eod", ...) are checked before numeric
    patterns. Meridian handling: "pm" adds 12 unless the hour is already 12
    or more, "am" turns 12 into 0, and a bare hour in a message mentioning
    "evening" or "night" is moved to the afternoon.
    """
    lower_message = message.lower()

    for expression, clock in TIME_EXPRESSIONS:
        if expression in lower_message:
            return clock

    for pattern in TIME_PATTERNS:
        match = pattern.search(message)
        if not match:
            continue

        hours = int(match.group(1))
        minutes = int(match.group(2)) if match.group(2) else 0
        meridian = (match.group(3) or '').lower()

        if 'p' in meridian and hours < 12:
            hours += 12
        if 'a' in meridian and hours == 12:
            hours = 0
        if not meridian and hours < 12 and ('evening' in lower_message or 'night' in lower_message):
            hours += 12

        if hours > 23 or minutes > 59:
            return None

        return f"{hours:02d}:{minutes:02d}"

    return None


def extract_date_token(message: str) -> Optional[str]:
    match = DATE_TOKEN_PATTERN.search(message)
    return match.group(1).lower() if match else None


def extract_duration(message: str) -> Optional[int]:
    """Duration in minutes from "<N> <unit>", hour units multiplied by 60."""
    match = DURATION_PATTERN.search(message)
    if not match:
        return None

    amount = int(match.group(1))
    unit = match.group(2).lower()
    if unit.startswith('h'):
        return amount * 60
    return amount


def extract_emails(message: str) -> List[str]:
    return EMAIL_PATTERN.findall(message)


def extract_name(message: str) -> Optional[str]:
    for match in NAME_PATTERN.finditer(message):
        candidate = match.group(1)
        if candidate.lower() not in NAME_STOPWORDS:
            return candidate.capitalize()
    return None


def extract_description(message: str) -> Optional[str]:
    if 'no description' in message.lower():
        return None

    match = DESCRIPTION_PATTERN.search(message)
    if not match:
        return None

    description = match.group(1).strip()
    return description or None


def strip_date_phrases(message: str) -> str:
    # "20/11", "2nd december" and "2026-11-20" carry a day the bare-hour pattern would take
    for pattern in (ISO_DATE_PATTERN, NUMERIC_DATE_PATTERN, MONTH_DAY_PATTERN, ORDINAL_DAY_PATTERN):
        message = pattern.sub(' ', message)
    return message


def strip_non_time_entities(message: str) -> str:
    # Emails and durations carry digits that the bare-hour pattern would take
    without_emails = EMAIL_PATTERN.sub(' ', message)
    return strip_date_phrases(DURATION_PATTERN.sub(' ', without_emails))


def analyze_meeting_request(message: str) -> ExtractionResult:
    """Run every extractor once over an opening scheduling message."""
    time = extract_time(strip_non_time_entities(message))
    name = extract_name(message)
    date_token = extract_date_token(message)
    duration = extract_duration(message)
    emails = extract_emails(message)
    description = extract_description(message)

    return ExtractionResult(
        time=time,
        name=name,
        date_token=date_token,
        duration_minutes=duration,
        emails=emails,
        description=description,
        has_time=time is not None,
        has_name=name is not None,
        has_date=date_token is not None,
        has_duration=duration is not None,
        has_email=len(emails) > 0,
    )

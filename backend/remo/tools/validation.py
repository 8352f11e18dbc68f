from typing import Optional, Any
import re

from .time_parser import TimeParser
from ..utils.logger import logger

EMAIL_REGEX = re.compile(r'[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}')
LEADING_INTEGER = re.compile(r'\s*([+-]?\d+)')


class ValidationResult:
    def __init__(self, is_valid: bool, value: Any = None, error_type: Optional[str] = None, clarification_question: Optional[str] = None):
        self.is_valid = is_valid
        self.value = value
        self.error_type = error_type
        self.clarification_question = clarification_question


class SlotValidator:
    """Validates a single dialogue answer for one slot."""

    MAX_DURATION_MINUTES = 480

    def __init__(self, time_parser: TimeParser):
        self.time_parser = time_parser

    def validate_date(self, message: str) -> ValidationResult:
        resolved = self.time_parser.resolve_date(message)
        if resolved is None:
            return ValidationResult(
                is_valid=False,
                error_type="invalid_date",
                clarification_question=(
                    "I couldn't understand that date format. Please use a format like:\n"
                    "• tomorrow\n"
                    "• 25th March\n"
                    "• 25-03-2026\n"
                    "• 25/03\n"
                    "Remember, the date should be in the future.\n\n"
                    "Or type 'cancel' to stop scheduling."
                )
            )
        return ValidationResult(is_valid=True, value=resolved)

    def validate_time(self, message: str) -> ValidationResult:
        clock = self.time_parser.resolve_time(message)
        if clock is None:
            return ValidationResult(
                is_valid=False,
                error_type="invalid_time",
                clarification_question=(
                    "Please provide a valid time format like:\n"
                    "• 2:30 PM\n"
                    "• 14:30\n"
                    "• 2 PM\n\n"
                    "Or type 'cancel' to stop scheduling."
                )
            )
        return ValidationResult(is_valid=True, value=clock)

    def validate_email(self, message: str) -> ValidationResult:
        email = validate_email(message)
        if email is None:
            logger.warning(f"Invalid email address: '{message}'")
            return ValidationResult(
                is_valid=False,
                error_type="invalid_email",
                clarification_question=(
                    "Please provide a valid email address (e.g., name@domain.com)\n\n"
                    "Or type 'cancel' to stop scheduling."
                )
            )
        return ValidationResult(is_valid=True, value=email)

    def validate_duration(self, message: str) -> ValidationResult:
        duration = parse_leading_integer(message)
        if duration is None or duration <= 0 or duration > self.MAX_DURATION_MINUTES:
            logger.warning(f"Invalid duration: '{message}'")
            return ValidationResult(
                is_valid=False,
                error_type="invalid_duration",
                clarification_question=(
                    f"Please provide a valid duration between 1 and {self.MAX_DURATION_MINUTES} minutes\n\n"
                    "Or type 'cancel' to stop scheduling."
                )
            )
        return ValidationResult(is_valid=True, value=duration)


def validate_email(text: str) -> Optional[str]:
    candidate = text.strip()
    return candidate if EMAIL_REGEX.fullmatch(candidate) else None


def parse_leading_integer(text: str) -> Optional[int]:
    match = LEADING_INTEGER.match(text)
    return int(match.group(1)) if match else None

"""Tests for slot validation."""

from datetime import date

import pytest

from remo.tools.validation import SlotValidator, validate_email, parse_leading_integer


@pytest.fixture
def validator(time_parser):
    return SlotValidator(time_parser)


class TestValidateDuration:
    """Tests for SlotValidator.validate_duration()."""

    @pytest.mark.parametrize("answer", ["0", "481", "abc", "-5", ""])
    def test_rejected(self, validator, answer):
        """Test that zero, over-limit and non-numeric answers are rejected."""
        result = validator.validate_duration(answer)

        assert result.is_valid is False
        assert result.error_type == "invalid_duration"
        assert "between 1 and 480" in result.clarification_question

    @pytest.mark.parametrize("answer,minutes", [("1", 1), ("480", 480), ("45 minutes", 45)])
    def test_accepted(self, validator, answer, minutes):
        """Test that the boundaries and a leading integer are accepted."""
        result = validator.validate_duration(answer)

        assert result.is_valid is True
        assert result.value == minutes


class TestValidateEmail:
    """Tests for email validation."""

    def test_valid_address(self, validator):
        """Test that a plain address is accepted."""
        result = validator.validate_email("bob@example.com")
        assert result.is_valid and result.value == "bob@example.com"

    def test_surrounding_whitespace_is_ignored(self):
        """Test that the address is stripped before matching."""
        assert validate_email("  bob@example.com \n") == "bob@example.com"

    @pytest.mark.parametrize("answer", [
        "bob@example",
        "bob at example.com",
        "bob@example.com, carol@example.com",
        "email: bob@example.com",
    ])
    def test_rejected(self, validator, answer):
        """Test that anything but a single full address is rejected."""
        result = validator.validate_email(answer)

        assert result.is_valid is False
        assert result.error_type == "invalid_email"


class TestValidateDateAndTime:
    """Tests for date and time answers."""

    def test_valid_date(self, validator):
        """Test that a resolvable date is returned as a date."""
        result = validator.validate_date("tomorrow")
        assert result.is_valid and result.value == date(2026, 10, 15)

    def test_past_date(self, validator):
        """Test that a past date re-prompts with format examples."""
        result = validator.validate_date("1st march")

        assert result.is_valid is False
        assert result.error_type == "invalid_date"
        assert "25th March" in result.clarification_question

    def test_valid_time(self, validator):
        """Test that a time answer is normalized."""
        result = validator.validate_time("around 4:15 pm")
        assert result.is_valid and result.value == "16:15"

    def test_invalid_time(self, validator):
        """Test that a time-less answer re-prompts."""
        result = validator.validate_time("whenever")

        assert result.is_valid is False
        assert result.error_type == "invalid_time"


class TestParseLeadingInteger:
    """Tests for parse_leading_integer()."""

    @pytest.mark.parametrize("text,expected", [
        ("30", 30),
        ("  15 min", 15),
        ("-2", -2),
        ("about 30", None),
    ])
    def test_parse(self, text, expected):
        """Test that only a leading integer is read."""
        assert parse_leading_integer(text) == expected

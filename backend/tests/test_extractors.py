"""Tests for entity extractors."""

import pytest

from remo.tools.extractors import (
    TIME_EXPRESSIONS,
    extract_time,
    extract_duration,
    extract_emails,
    extract_name,
    extract_description,
    extract_date_token,
    analyze_meeting_request,
    strip_date_phrases,
)


class TestExtractTime:
    """Tests for extract_time()."""

    def test_named_expression_inside_sentence(self):
        """Test that a named expression wins regardless of surrounding text."""
        assert extract_time("let's meet at noon ok?") == "12:00"

    @pytest.mark.parametrize("expression,clock", [
        (expression, clock) for expression, clock in TIME_EXPRESSIONS
        if expression not in ("afternoon", "early morning", "late night")
    ])
    def test_named_table_values(self, expression, clock):
        """Test that every reachable table entry returns its own value."""
        assert extract_time(f"how about {expression}") == clock

    def test_shadowed_entries(self):
        """Test that earlier table entries shadow the ones containing them."""
        assert extract_time("afternoon") == "12:00"
        assert extract_time("early morning") == "09:00"
        assert extract_time("late night") == "20:00"

    def test_midnight_is_not_night(self):
        """Test that midnight is matched before night."""
        assert extract_time("midnight") == "00:00"

    @pytest.mark.parametrize("text,clock", [
        ("2pm", "14:00"),
        ("12am", "00:00"),
        ("12pm", "12:00"),
        ("9", "09:00"),
        ("3:30 pm", "15:30"),
        ("3.30pm", "15:30"),
        ("3 p.m.", "15:00"),
        ("15:30", "15:30"),
        ("11 AM", "11:00"),
    ])
    def test_meridian_normalization(self, text, clock):
        """Test that 12-hour and 24-hour inputs normalize consistently."""
        assert extract_time(text) == clock

    def test_out_of_range_clock_is_rejected(self):
        """Test that an impossible clock value yields None."""
        assert extract_time("25:00") is None

    def test_no_time(self):
        """Test that a message without a time yields None."""
        assert extract_time("sometime soon") is None


class TestExtractDuration:
    """Tests for extract_duration()."""

    @pytest.mark.parametrize("text,minutes", [
        ("for 30 minutes", 30),
        ("45 mins", 45),
        ("1 min", 1),
        ("2 hours", 120),
        ("1 hr", 60),
        ("3 hrs", 180),
    ])
    def test_units(self, text, minutes):
        """Test that hour units are converted to minutes."""
        assert extract_duration(text) == minutes

    def test_missing_duration(self):
        """Test that a message without a duration yields None."""
        assert extract_duration("tomorrow at 3") is None


class TestExtractEmails:
    """Tests for extract_emails()."""

    def test_multiple_addresses_in_order(self):
        """Test that every address is returned in message order."""
        message = "invite bob@example.com and carol.smith+work@corp.co.uk"
        assert extract_emails(message) == ["bob@example.com", "carol.smith+work@corp.co.uk"]

    def test_no_addresses(self):
        """Test that an empty list is returned when there is no address."""
        assert extract_emails("invite bob") == []


class TestExtractName:
    """Tests for extract_name()."""

    def test_name_after_with(self):
        """Test that the word after 'with' is returned capitalized."""
        assert extract_name("meet with sarah tomorrow") == "Sarah"

    def test_email_is_not_a_name(self):
        """Test that an address right after 'with' is not taken as a name."""
        assert extract_name("meeting with bob@example.com") is None

    def test_stopwords_are_skipped(self):
        """Test that pronouns and articles are not names."""
        assert extract_name("sync with the team") is None


class TestExtractDescription:
    """Tests for extract_description()."""

    def test_about_phrase(self):
        """Test that text after 'about' becomes the description."""
        assert extract_description("meeting about budget planning") == "budget planning"

    def test_quoted_description(self):
        """Test that quotes around the description are dropped."""
        assert extract_description('with description "Q3 review"') == "Q3 review"

    def test_no_description_suppresses(self):
        """Test that 'no description' suppresses any other phrase."""
        assert extract_description("no description, about budget") is None


class TestAnalyzeMeetingRequest:
    """Tests for analyze_meeting_request()."""

    def test_full_request(self):
        """Test that every entity is found in a fully specified request."""
        result = analyze_meeting_request(
            "Schedule a meeting tomorrow at 3pm with bob@example.com for 45 minutes about roadmap review"
        )

        assert result["time"] == "15:00"
        assert result["emails"] == ["bob@example.com"]
        assert result["duration_minutes"] == 45
        assert result["description"] == "roadmap review"
        assert result["date_token"] == "tomorrow"
        assert result["has_time"] and result["has_email"] and result["has_duration"]
        assert result["has_date"]

    def test_digits_in_email_and_duration_are_not_times(self):
        """Test that digits inside addresses and durations are not read as hours."""
        result = analyze_meeting_request("book 30 minutes with bob2@example.com")

        assert result["time"] is None
        assert result["has_time"] is False
        assert result["duration_minutes"] == 30

    def test_date_digits_are_not_times(self):
        """Test that the day of a numeric or month-name date is not read as the hour."""
        assert analyze_meeting_request("meet on 20/11 at 3pm")["time"] == "15:00"
        assert analyze_meeting_request("meet on 2nd december at 3pm")["time"] == "15:00"
        assert analyze_meeting_request("meet on 2026-11-20 at 10am")["time"] == "10:00"
        assert analyze_meeting_request("meet on 25 dec")["time"] is None

    def test_strip_date_phrases(self):
        """Test that date spans are removed and clock tokens kept."""
        stripped = strip_date_phrases("20/11 or 2nd december 2026 at 4pm")

        assert "20" not in stripped
        assert "december" not in stripped
        assert "4pm" in stripped

    def test_empty_request(self):
        """Test that a bare request has every flag unset."""
        result = analyze_meeting_request("Schedule a meeting")

        assert result["time"] is None
        assert result["name"] is None
        assert result["emails"] == []
        assert not any([
            result["has_time"], result["has_name"], result["has_date"],
            result["has_duration"], result["has_email"]
        ])

    def test_date_token(self):
        """Test that weekday and relative day words are picked up."""
        assert extract_date_token("see you next Friday") == "friday"

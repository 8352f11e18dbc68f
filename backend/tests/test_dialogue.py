"""Tests for the meeting creation dialogue."""

from datetime import date, timedelta

import pytest

from remo.agent.dialogue import next_missing_step, format_details
from remo.agent.prompts import (
    STEP_PROMPTS,
    DIALOGUE_CANCELLED,
    DIALOGUE_RESTART,
    DIALOGUE_ERROR,
    MEETING_CREATE_FAILED,
)
from remo.agent.state import create_meeting_dialogue
from remo.tools.calendar import CalendarNotAuthorizedError


def dialogue_step(store, user_id="user1"):
    dialogue = store.get_dialogue(user_id)
    return dialogue["step"] if dialogue else None


class TestSlotOrder:
    """Tests for the opening step computed from the first message."""

    def test_bare_request_asks_for_date(self, send, store):
        """Test that a request with no details starts at the date."""
        replies = send("Schedule a meeting")

        assert len(replies) == 1
        assert replies[0].startswith("I'll help you schedule a meeting")
        assert STEP_PROMPTS["collect_date"] in replies[0]
        assert dialogue_step(store) == "collect_date"

    def test_date_given_asks_for_time(self, send, store):
        """Test that a pre-filled date skips to the time."""
        replies = send("Schedule a meeting tomorrow")

        assert dialogue_step(store) == "collect_time"
        assert "📅 Date: Thursday, October 15, 2026" in replies[0]

    def test_date_and_time_given_asks_for_email(self, send, store):
        """Test that the email prompt names the attendee when known."""
        replies = send("Set up a call with priya tomorrow at 11am")

        assert dialogue_step(store) == "collect_email"
        assert "Please provide Priya's email address" in replies[0]

    def test_email_pre_filled_is_skipped(self, send, store):
        """Test that later answers skip slots filled at entry."""
        send("Book a call with alice@example.com tomorrow")
        assert dialogue_step(store) == "collect_time"

        replies = send("4:30 pm")

        assert dialogue_step(store) == "collect_duration"
        assert STEP_PROMPTS["collect_duration"] in replies[0]

    def test_today_is_special_cased(self, send, store):
        """Test that the word 'today' fills the date with today."""
        send("Schedule a meeting today")
        assert store.get_dialogue("user1")["details"]["date"] == date(2026, 10, 14)

    def test_fully_specified_request_goes_to_confirm(self, send, store):
        """Test that a fully specified message reaches confirm directly."""
        replies = send("schedule a meeting with john@x.com tomorrow at 3pm for 30 minutes")
        details = store.get_dialogue("user1")["details"]

        assert dialogue_step(store) == "confirm"
        assert details["date"] == date(2026, 10, 15)
        assert details["time"] == "15:00"
        assert details["duration_minutes"] == 30
        assert details["attendees"] == ["john@x.com"]
        assert replies[0].startswith("Please confirm these meeting details")

    @pytest.mark.parametrize("message,expected_date", [
        ("schedule a meeting with john@x.com on 20/11 at 3pm for 30 minutes", date(2026, 11, 20)),
        ("schedule a meeting with john@x.com on 2nd december at 3pm for 30 minutes", date(2026, 12, 2)),
    ])
    def test_day_of_date_is_not_the_time(self, send, store, message, expected_date):
        """Test that the day number of an explicit date does not become the meeting time."""
        send(message)
        details = store.get_dialogue("user1")["details"]

        assert dialogue_step(store) == "confirm"
        assert details["date"] == expected_date
        assert details["time"] == "15:00"

    def test_out_of_range_duration_is_not_prefilled(self, send, store):
        """Test that an over-limit duration in the opening message is ignored."""
        send("schedule a meeting with john@x.com tomorrow at 3pm for 10 hours")
        assert dialogue_step(store) == "collect_duration"

    def test_next_missing_step(self):
        """Test the fixed date, time, email, duration order."""
        details = create_meeting_dialogue()["details"]
        assert next_missing_step(details) == "collect_date"

        details["time"] = "10:00"
        details["attendees"] = ["a@b.co"]
        assert next_missing_step(details) == "collect_date"

        details["date"] = date(2026, 10, 20)
        assert next_missing_step(details) == "collect_duration"

        details["duration_minutes"] = 15
        assert next_missing_step(details) is None


class TestRoundTrip:
    """Tests for a dialogue from first message to a created event."""

    def test_step_by_step(self, send, store, calendar, fixed_now):
        """Test that each answer fills one slot and 'yes' creates the event."""
        send("Schedule a meeting")
        assert STEP_PROMPTS["collect_time"] in send("tomorrow")[0]
        assert "the attendee's email address" in send("3pm")[0]
        assert STEP_PROMPTS["collect_duration"] in send("alice@example.com")[0]
        assert STEP_PROMPTS["collect_description"] in send("30")[0]

        confirmation = send("skip")[0]
        assert "📝 Description: No description" in confirmation
        assert dialogue_step(store) == "confirm"

        replies = send("yes")

        assert replies[0].startswith("✅ Meeting scheduled successfully!")
        assert store.get_dialogue("user1") is None

        calendar.create_event.assert_called_once()
        user_id, title, description, start, end, attendees = calendar.create_event.call_args[0]
        assert user_id == "user1"
        assert title == "Meeting with alice"
        assert description == "Meeting scheduled via Remo"
        assert (start.date(), start.hour, start.minute) == (date(2026, 10, 15), 15, 0)
        assert start.utcoffset() == timedelta(hours=5, minutes=30)
        assert end - start == timedelta(minutes=30)
        assert attendees == ["alice@example.com"]

    def test_description_answer_is_kept_verbatim(self, send, store, calendar):
        """Test that a description answer is stored as typed."""
        send("schedule a meeting with john@x.com tomorrow at 3pm")
        send("45")
        send("Quarterly planning, bring laptops")

        assert dialogue_step(store) == "confirm"
        send("Yes please")

        description = calendar.create_event.call_args[0][2]
        assert description == "Quarterly planning, bring laptops"

    def test_description_from_opening_message_skips_prompt(self, send, store):
        """Test that a description found at entry skips the description step."""
        send("schedule a meeting with john@x.com tomorrow at 3pm about roadmap review")
        replies = send("45")

        assert dialogue_step(store) == "confirm"
        assert "📝 Description: roadmap review" in replies[0]

    def test_new_dialogue_after_success(self, send, store):
        """Test that a finished dialogue leaves nothing behind."""
        send("schedule a meeting with john@x.com tomorrow at 3pm for 30 minutes")
        send("yes")

        send("Schedule a meeting")
        details = store.get_dialogue("user1")["details"]
        assert details["date"] is None and details["attendees"] == []


class TestInvalidAnswers:
    """Tests for answers that fail validation."""

    @pytest.mark.parametrize("answer", ["0", "481", "abc"])
    def test_duration_rejected(self, send, store, answer):
        """Test that bad durations re-prompt and stay in place."""
        send("schedule a meeting with john@x.com tomorrow at 3pm")
        replies = send(answer)

        assert "between 1 and 480" in replies[0]
        assert dialogue_step(store) == "collect_duration"

    @pytest.mark.parametrize("answer,minutes", [("1", 1), ("480", 480)])
    def test_duration_boundaries_accepted(self, send, store, answer, minutes):
        """Test that 1 and 480 minutes are both accepted."""
        send("schedule a meeting with john@x.com tomorrow at 3pm")
        send(answer)

        assert store.get_dialogue("user1")["details"]["duration_minutes"] == minutes
        assert dialogue_step(store) == "collect_description"

    def test_past_date_rejected(self, send, store):
        """Test that a past date re-prompts at the date step."""
        send("Schedule a meeting")
        replies = send("1st march")

        assert "the date should be in the future" in replies[0]
        assert dialogue_step(store) == "collect_date"

    def test_bad_email_replaces_nothing(self, send, store):
        """Test that an invalid address leaves the attendee list untouched."""
        send("Schedule a meeting tomorrow at 3pm")
        send("bob at example dot com")

        assert store.get_dialogue("user1")["details"]["attendees"] == []
        assert dialogue_step(store) == "collect_email"


class TestCancellation:
    """Tests for leaving the dialogue."""

    @pytest.mark.parametrize("keyword", ["cancel", "stop", "no", "quit", "exit", "nevermind", "never mind"])
    def test_cancel_keywords_clear_dialogue(self, send, store, keyword):
        """Test that every cancel keyword clears the dialogue."""
        send("Schedule a meeting tomorrow")
        replies = send(keyword)

        assert replies == [DIALOGUE_CANCELLED]
        assert store.get_dialogue("user1") is None

    def test_no_slots_leak_into_next_dialogue(self, send, store):
        """Test that a dialogue after cancel starts from scratch."""
        send("schedule a meeting with john@x.com tomorrow at 3pm")
        send("stop")

        send("Schedule a meeting")
        details = store.get_dialogue("user1")["details"]

        assert dialogue_step(store) == "collect_date"
        assert details["time"] is None
        assert details["attendees"] == []

    def test_cancel_keyword_inside_word(self, send, store):
        """Test that keywords match as substrings, e.g. 'noon' contains 'no'."""
        send("Schedule a meeting tomorrow")
        replies = send("noon")

        assert replies == [DIALOGUE_CANCELLED]

    def test_confirm_anything_else_restarts(self, send, store, calendar):
        """Test that a non-yes confirmation resets the dialogue."""
        send("schedule a meeting with john@x.com tomorrow at 3pm for 30 minutes")
        replies = send("hmm, wait")

        assert replies == [DIALOGUE_RESTART]
        assert store.get_dialogue("user1") is None
        calendar.create_event.assert_not_called()


class TestExecution:
    """Tests for creating the event on confirmation."""

    def test_unauthorized_keeps_dialogue(self, send, store, calendar):
        """Test that a missing token sends the auth link and keeps the dialogue."""
        calendar.is_authorized.return_value = False
        send("schedule a meeting with john@x.com tomorrow at 3pm for 30 minutes")

        replies = send("yes")

        assert "https://accounts.example.com/consent?state=abc" in replies[0]
        assert dialogue_step(store) == "confirm"
        calendar.create_event.assert_not_called()

        calendar.is_authorized.return_value = True
        send("yes")
        calendar.create_event.assert_called_once()

    def test_token_lost_between_check_and_create(self, send, store, calendar):
        """Test that CalendarNotAuthorizedError also leads to the auth link."""
        calendar.create_event.side_effect = CalendarNotAuthorizedError("user1")
        send("schedule a meeting with john@x.com tomorrow at 3pm for 30 minutes")

        replies = send("yes")

        assert "authorize" in replies[0]
        assert dialogue_step(store) == "confirm"

    def test_create_failure_clears_dialogue(self, send, store, calendar):
        """Test that a failed creation reports and clears the dialogue."""
        calendar.create_event.return_value = False
        send("schedule a meeting with john@x.com tomorrow at 3pm for 30 minutes")

        replies = send("yes")

        assert replies == [MEETING_CREATE_FAILED]
        assert store.get_dialogue("user1") is None

    def test_unexpected_error_clears_dialogue(self, send, store, calendar):
        """Test that an unexpected error apologises and clears the dialogue."""
        calendar.create_event.side_effect = RuntimeError("socket timeout")
        send("schedule a meeting with john@x.com tomorrow at 3pm for 30 minutes")

        replies = send("yes")

        assert replies == [DIALOGUE_ERROR]
        assert store.get_dialogue("user1") is None


class TestFormatDetails:
    """Tests for the running summary."""

    def test_only_filled_slots_are_listed(self):
        """Test that the summary skips empty slots."""
        details = create_meeting_dialogue()["details"]
        details["time"] = "09:30"

        assert format_details(details) == "⏰ Time: 09:30"

    def test_confirmation_lists_missing_description(self):
        """Test that the confirmation always shows the description line."""
        details = create_meeting_dialogue()["details"]
        details["duration_minutes"] = 20

        assert format_details(details, confirmation=True) == (
            "⏱️ Duration: 20 minutes\n📝 Description: No description"
        )

REMO_PERSONALITY = """You are Remo, a friendly and engaging AI assistant with a warm personality. Your responses should be:

1. Natural and conversational
2. Varied and non-repetitive
3. Empathetic and understanding
4. Occasionally playful but always professional
5. Concise but helpful

Key traits:
- Show genuine interest in the user
- Remember context from the conversation
- Use appropriate emojis naturally
- Vary your greetings and responses
- Match the user's energy level
- Ask follow-up questions when appropriate

You excel at both casual conversation and task-oriented assistance. While you can schedule meetings and manage calendars, you're also great at general chat and helping users feel heard."""

REPETITION_NOTE = "The user has sent similar messages {count} times. If repetitive, acknowledge it naturally."

HELP_TEXT = (
    "Hello! I'm Remo, your personal AI assistant. 👋\n\n"
    "I can help you manage your meetings:\n\n"
    "📅 Meeting Management:\n"
    "• Schedule a new meeting\n"
    "• Update meeting details\n"
    "• Reschedule meetings\n"
    "• Cancel meetings\n\n"
    "Examples:\n"
    "• 'Schedule a meeting tomorrow at 2pm'\n"
    "• 'Update the description of today's 3pm meeting'\n"
    "• 'Reschedule tomorrow's meeting to Friday'\n"
    "• 'Cancel my 4pm meeting'\n\n"
    "How can I assist you today?"
)

GREETINGS = [
    "Hey! How's it going? 😊",
    "Hi there! What's on your mind today?",
    "Hello! How can I help you today? 💫",
    "Hey! Nice to see you! What's up? 😊",
    "Hi! How's your day going so far? ✨",
    "Hello there! What can I do for you today? 🌟",
]

HOW_ARE_YOU_RESPONSES = [
    "I'm doing great, thank you! How can I help you today? 😊",
    "I'm feeling fantastic! What can I do for you? ✨",
    "I'm wonderful, thanks for asking! How can I assist you? 🌟",
    "I'm doing well! What's on your mind? 💫",
    "I'm great! Ready to help you with whatever you need! 😊",
]

REPETITIVE_HOW_ARE_YOU_RESPONSES = [
    "I see you're checking on me again! 😊 I'm still doing great and ready to help!",
    "You're very thoughtful to keep asking! I'm always here and ready to assist you. What's on your mind?",
    "I appreciate your concern! But maybe I should be asking - how are YOU doing? 😊",
    "Still doing great! Though I'm more interested in how I can help YOU right now! 🌟",
    "You seem very interested in my well-being! I'm always good, but I'd love to know what you need help with! 💫",
]

HOW_ARE_YOU_LIMIT_RESPONSE = (
    "I notice you've asked how I am several times. While I appreciate your interest, "
    "I'm always here and ready to help! Is there something specific you'd like assistance with? 😊"
)

REPEATED_GREETING_TWICE = "Hey again! 👋 Nice to see you're still here!"
REPEATED_GREETING_THRICE = "Hi once more! You're very friendly today! 😊"
REPEATED_GREETING_MANY = "I see you're saying hi a lot! I'm always here and happy to chat. What's on your mind? 🌟"

CHAT_EMPTY_RESPONSE = "I'm having trouble understanding. Could you rephrase that?"
CHAT_ERROR_RESPONSE = "I'm having a moment. Could you try again?"
GENERIC_ERROR_RESPONSE = "I encountered an error. Let me know if you'd like to try again!"

# Scheduling dialogue

SCHEDULING_INTRO = "I'll help you schedule a meeting. Here's what I understood:\n\n"

STEP_PROMPTS = {
    "collect_date": "What date would you like to schedule it for? (e.g., tomorrow, 25th March, 25-03-2026)",
    "collect_time": "What time would you like to schedule it for? (e.g., 2:30 PM, 14:30)",
    "collect_email": "Please provide {name} email address",
    "collect_duration": "How long should the meeting be? (in minutes)",
    "collect_description": "Would you like to add a description for the meeting? (Type 'skip' to skip)",
}

CANCEL_HINT = "\n\nOr type 'cancel' to stop scheduling."
CONFIRM_QUESTION = "Is this correct? (Yes/No)"

DIALOGUE_CANCELLED = "I've cancelled the meeting scheduling. Let me know if you want to schedule another meeting!"
DIALOGUE_RESTART = "No problem, let's start over. Just tell me when you want to schedule a meeting."
DIALOGUE_ERROR = "I encountered an error. Let's start over with the scheduling."

AUTH_REQUIRED_TO_CREATE = (
    "I'll create the meeting, but first I need access to your calendar. "
    "Please click this link to authorize:\n\n{auth_url}\n\n"
    "After authorizing, come back and reply 'yes' to try again."
)
AUTH_REQUIRED = (
    "I need access to your calendar first. Please click this link to authorize:\n\n"
    "{auth_url}\n\n"
    "After authorizing, come back and try again."
)

MEETING_CREATED = "✅ Meeting scheduled successfully!\n\n{summary}\n\nCalendar invite has been sent to all attendees."
MEETING_CREATE_FAILED = "Sorry, I couldn't schedule the meeting. Please check your calendar permissions and try again."

# Calendar flows

NO_MEETINGS_FOUND = "No meetings found for {period}! 📅"
CANCEL_SINGLE_FOUND = "I found this meeting:\n\n{event}\n\nWould you like me to cancel this meeting? (Yes/No)"
CANCEL_SELECT_HEADER = "I found {count} meetings for {day}. Which one would you like to cancel?\n\n"
CANCEL_SELECT_FOOTER = "\nPlease reply with the number of the meeting you want to cancel."
CANCEL_SELECT_INVALID = "Please reply with a number between 1 and {count}, or type 'cancel' to stop."
MEETING_CANCELLED = "✅ Meeting has been cancelled and attendees have been notified."
MEETING_CANCEL_FAILED = "❌ Sorry, I couldn't cancel the meeting. Please try again."
MEETING_KEPT = "Okay, I'll keep that meeting. 👍"
CANCEL_LOOKUP_ERROR = "❌ Error processing cancellation request. Please try again."
LIST_ERROR = "❌ Error fetching meetings. Please try again."

UPDATE_NO_MEETINGS = "I couldn't find any meetings scheduled for {day}."
UPDATE_NO_MATCH = "I couldn't find a meeting with that person {day}."
UPDATE_TIME_DONE = "✅ Meeting time updated successfully!\n\nNew time: {time}\nAll attendees have been notified."
UPDATE_TIME_FAILED = "❌ Sorry, I couldn't update the meeting time. Please try again."
UPDATE_DESCRIPTION_DONE = "✅ Meeting description updated. All attendees have been notified."
UPDATE_DESCRIPTION_FAILED = "❌ Sorry, I couldn't update the meeting description. Please try again."
UPDATE_OPTIONS = (
    "What would you like to update?\n"
    "• Say a new time (e.g., 'move to 2:30 PM')\n"
    "• Say 'cancel' to cancel the meeting\n"
    "• Say 'description: <text>' to update the description"
)
UPDATE_ERROR = "Sorry, I encountered an error while updating the meeting."

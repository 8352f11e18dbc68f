from langgraph.graph import StateGraph, END
from typing import Literal

from .intent import route_message
from .prompts import HELP_TEXT
from .state import TurnState
from ..utils.logger import logger


def create_message_router(assistant):
    """
    Compile the per-message graph: classify the text, then hand it to exactly
    one handler. Handlers talk to the user through `state["reply"]` and end
    the run; the next message starts a fresh invocation.
    """

    def classify(state: TurnState) -> dict:
        route = route_message(state["text"], assistant.store.has_dialogue(state["user_id"]))
        logger.info(f"Routing: {state['user_id']} -> {route}")
        return {"route": route}

    def select_handler(state: TurnState) -> Literal[
        "help", "meeting", "cancel_meeting", "list_meetings", "update_meeting", "chat"
    ]:
        return state["route"]

    def show_help(state: TurnState) -> TurnState:
        state["reply"](HELP_TEXT)
        return state

    def schedule_meeting(state: TurnState) -> TurnState:
        assistant.dialogue.handle(state["user_id"], state["text"], state["reply"])
        return state

    def cancel_meeting(state: TurnState) -> TurnState:
        assistant.meetings.start_cancellation(state["user_id"], state["text"], state["reply"])
        return state

    def list_meetings(state: TurnState) -> TurnState:
        assistant.meetings.list_meetings(state["user_id"], state["text"], state["reply"])
        return state

    def update_meeting(state: TurnState) -> TurnState:
        assistant.meetings.update_meeting(state["user_id"], state["text"], state["reply"])
        return state

    def chat(state: TurnState) -> TurnState:
        state["reply"](assistant.chat.respond(state["user_id"], state["text"]))
        return state

    workflow = StateGraph(TurnState)

    workflow.add_node("classify", classify)
    workflow.add_node("help", show_help)
    workflow.add_node("meeting", schedule_meeting)
    workflow.add_node("cancel_meeting", cancel_meeting)
    workflow.add_node("list_meetings", list_meetings)
    workflow.add_node("update_meeting", update_meeting)
    workflow.add_node("chat", chat)

    workflow.set_entry_point("classify")

    handlers = ["help", "meeting", "cancel_meeting", "list_meetings", "update_meeting", "chat"]
    workflow.add_conditional_edges(
        "classify",
        select_handler,
        {handler: handler for handler in handlers}
    )

    for handler in handlers:
        workflow.add_edge(handler, END)

    app = workflow.compile()
    logger.info("Compiled message router")
    return app

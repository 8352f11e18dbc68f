from typing import List, Dict, Optional, Callable
import random

from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_core.messages import HumanMessage, AIMessage, SystemMessage, BaseMessage

from .intent import is_greeting, is_how_are_you
from .prompts import (
    REMO_PERSONALITY,
    REPETITION_NOTE,
    GREETINGS,
    HOW_ARE_YOU_RESPONSES,
    REPETITIVE_HOW_ARE_YOU_RESPONSES,
    HOW_ARE_YOU_LIMIT_RESPONSE,
    REPEATED_GREETING_TWICE,
    REPEATED_GREETING_THRICE,
    REPEATED_GREETING_MANY,
    CHAT_EMPTY_RESPONSE,
    CHAT_ERROR_RESPONSE,
)
from .sessions import SessionStore
from .state import create_conversation
from ..utils.config import settings
from ..utils.logger import logger


class GeminiChatClient:
    """Generative chat completion: role-tagged messages in, text out."""

    def __init__(
        self,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        timeout: Optional[float] = None
    ):
        self.model = model or settings.llm_model
        self.temperature = temperature if temperature is not None else settings.llm_temperature
        self.timeout = timeout if timeout is not None else settings.llm_timeout_seconds
        self._llm: Optional[ChatGoogleGenerativeAI] = None

    def _get_llm(self) -> ChatGoogleGenerativeAI:
        if self._llm is None:
            self._llm = ChatGoogleGenerativeAI(
                model=self.model,
                google_api_key=settings.gemini_api_key,
                temperature=self.temperature,
                timeout=self.timeout,
                max_retries=0
            )
        return self._llm

    def complete(self, messages: List[Dict[str, str]]) -> str:
        response = self._get_llm().invoke(to_langchain_messages(messages))
        content = response.content
        if isinstance(content, list):
            content = "".join(
                part.get("text", "") if isinstance(part, dict) else str(part)
                for part in content
            )
        return content.strip()


def to_langchain_messages(messages: List[Dict[str, str]]) -> List[BaseMessage]:
    # Gemini takes a single system instruction, so system turns are merged up front
    system_parts = [m["content"] for m in messages if m["role"] == "system"]
    converted: List[BaseMessage] = []
    if system_parts:
        converted.append(SystemMessage(content="\n\n".join(system_parts)))

    for message in messages:
        if message["role"] == "user":
            converted.append(HumanMessage(content=message["content"]))
        elif message["role"] == "assistant":
            converted.append(AIMessage(content=message["content"]))
    return converted


def repeated_greeting_response(count: int) -> str:
    if count == 2:
        return REPEATED_GREETING_TWICE
    if count == 3:
        return REPEATED_GREETING_THRICE
    return REPEATED_GREETING_MANY


def repeated_how_are_you_response(count: int, choose: Callable = random.choice) -> str:
    if count > 4:
        return HOW_ARE_YOU_LIMIT_RESPONSE
    return choose(REPETITIVE_HOW_ARE_YOU_RESPONSES)


class ChatHandler:
    """Casual conversation outside the scheduling dialogue."""

    def __init__(self, store: SessionStore, chat_client, choose: Callable = random.choice):
        self.store = store
        self.chat_client = chat_client
        self.choose = choose

    def respond(self, user_id: str, message: str) -> str:
        conversation = self.store.get_conversation(user_id)
        if conversation is None:
            conversation = create_conversation(REMO_PERSONALITY, self.store.clock())

        conversation["messages"].append({"role": "user", "content": message})

        normalized = message.lower()
        repetition_count = sum(
            1 for m in conversation["messages"]
            if m["role"] == "user" and m["content"].lower() == normalized
        )

        if is_greeting(message):
            if repetition_count > 1:
                response = repeated_greeting_response(repetition_count)
            else:
                response = self.choose(GREETINGS)
        elif is_how_are_you(message):
            if repetition_count > 1:
                response = repeated_how_are_you_response(repetition_count, self.choose)
            else:
                response = self.choose(HOW_ARE_YOU_RESPONSES)
        else:
            response = self._complete(user_id, conversation["messages"], repetition_count)

        conversation["messages"].append({"role": "assistant", "content": response})
        self.store.save_conversation(user_id, conversation)
        return response

    def _complete(self, user_id: str, history: List[Dict[str, str]], repetition_count: int) -> str:
        prompt = history + [{"role": "system", "content": REPETITION_NOTE.format(count=repetition_count)}]
        try:
            response = self.chat_client.complete(prompt)
        except Exception as e:
            logger.error(f"Chat completion failed for {user_id}: {e}")
            return CHAT_ERROR_RESPONSE

        return response or CHAT_EMPTY_RESPONSE

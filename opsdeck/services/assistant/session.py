from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from uuid import uuid4

from opsdeck.domain.schemas import AssistantMessage, ChatRequest, ChatResponse
from opsdeck.services.query import Mutation


logger = logging.getLogger(__name__)


FALLBACK_REPLY = "Sorry, I encountered an error processing your request. Please try again."


@dataclass(frozen=True)
class QuickAction:
    label: str
    query: str


# Canned prompts offered on an empty conversation.
QUICK_ACTIONS: tuple[QuickAction, ...] = (
    QuickAction("System Status", "What's the current system status?"),
    QuickAction("Cost Summary", "How much have we spent on AI this month?"),
    QuickAction("Check Anomalies", "Are there any anomalies or issues?"),
    QuickAction("Usage Trends", "Show me usage trends for the past week"),
    QuickAction("Performance", "How is API performance looking?"),
    QuickAction("Recommendations", "What recommendations do you have for cost optimization?"),
)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def build_user_message(text: str) -> AssistantMessage:
    return AssistantMessage(id=str(uuid4()), role="user", content=text, timestamp=_utc_now())


def build_fallback_message() -> AssistantMessage:
    # Failed turns render as a canned assistant reply instead of a raw error.
    return AssistantMessage(id=str(uuid4()), role="assistant", content=FALLBACK_REPLY, timestamp=_utc_now())


@dataclass(frozen=True)
class ChatResult:
    # Outcome of one chat turn: exactly one of response/error is set.
    response: ChatResponse | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.response is not None

    def reply(self) -> AssistantMessage:
        if self.response is not None:
            return self.response.message
        return build_fallback_message()


class AssistantSession:
    """Client-held state of one monitoring assistant conversation."""

    def __init__(self, chat: Mutation[ChatRequest, ChatResponse]) -> None:
        self._chat = chat
        self.messages: list[AssistantMessage] = []
        self.conversation_id: str | None = None
        self.suggested_follow_ups: list[str] = []

    @property
    def is_sending(self) -> bool:
        return self._chat.is_pending

    async def request(self, text: str) -> ChatResult:
        # Transport step only: the error is returned, never raised.
        try:
            response = await self._chat.mutate_async(
                ChatRequest(message=text, conversation_id=self.conversation_id)
            )
        except Exception as exc:  # noqa: BLE001 - folded into ChatResult
            logger.warning("assistant_chat_failed conversation_id=%s error=%s", self.conversation_id, exc)
            return ChatResult(error=exc)
        return ChatResult(response=response)

    def apply(self, result: ChatResult) -> AssistantMessage:
        reply = result.reply()
        if result.response is not None:
            self.conversation_id = result.response.conversation_id
            self.suggested_follow_ups = list(result.response.suggested_follow_ups)
        self.messages.append(reply)
        return reply

    async def send(self, text: str) -> AssistantMessage | None:
        # The user turn is visible immediately; blank input is ignored.
        text = text.strip()
        if not text:
            return None
        self.messages.append(build_user_message(text))
        self.suggested_follow_ups = []
        result = await self.request(text)
        return self.apply(result)

    def clear(self) -> None:
        # Abandoning a conversation is implicit; the server is not told.
        self.messages = []
        self.conversation_id = None
        self.suggested_follow_ups = []

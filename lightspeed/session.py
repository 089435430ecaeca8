"""
Conversation state for the Lightspeed chat panel.

Holds the single active conversation:
- The ordered, append-only log of chat turns
- The conversation ID assigned by the service
- The attachments and context offered for the next query
- Whether a query is waiting for its response

Turn positions in the log are stable; they are the keys used for feedback.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Tuple

import structlog

from lightspeed.attachments import Attachment, AttachmentStore
from lightspeed.context import ResourceDescriptor
from lightspeed.enums import Who
from lightspeed.feedback import FeedbackState
from lightspeed.query import compose_query

logger = structlog.get_logger(__name__)


class SessionError(Exception):
    """Base exception for conversation session errors."""


class EmptyPromptError(SessionError):
    """Raised when submitting a prompt that is empty or only whitespace."""


class SessionBusyError(SessionError):
    """Raised when submitting while a previous query is still waiting."""


@dataclass(frozen=True)
class ReferencedDoc:
    """Documentation page referenced by a response."""

    docs_url: str
    title: str


def parse_references(raw: Optional[Iterable[Any]]) -> Tuple[ReferencedDoc, ...]:
    """Keep the referenced documents whose URL and title are both strings."""
    if not raw:
        return ()
    references = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        docs_url = entry.get("docs_url")
        title = entry.get("title")
        if isinstance(docs_url, str) and isinstance(title, str):
            references.append(ReferencedDoc(docs_url=docs_url, title=title))
    return tuple(references)


@dataclass(frozen=True)
class ChatTurn:
    """A single message in the chat log."""

    who: Who
    text: Optional[str] = None
    error: Optional[str] = None
    is_truncated: bool = False
    references: Optional[Tuple[ReferencedDoc, ...]] = None
    attachments: Optional[Tuple[Attachment, ...]] = None
    user_feedback: Optional[FeedbackState] = None


@dataclass(frozen=True)
class PendingQuery:
    """A submitted query waiting to be sent.

    Attributes:
        token: Submission token; only the latest token may settle the session
        conversation_id: Conversation the query continues, None for a new one
        query: Prompt text with attachment content appended
    """

    token: int
    conversation_id: Optional[str]
    query: str


class ConversationSession:
    """
    The single active conversation of the chat panel.

    State moves from idle to waiting on ``submit`` and back to idle when the
    response settles through ``on_response_success`` or
    ``on_response_failure``. Only one query may be waiting at a time.
    """

    def __init__(self) -> None:
        self.conversation_id: Optional[str] = None
        self.attachments = AttachmentStore()
        self.context: Optional[ResourceDescriptor] = None
        self.query: str = ""
        self._history: List[ChatTurn] = []
        self._token = 0
        self._waiting = False

    @property
    def history(self) -> Tuple[ChatTurn, ...]:
        return tuple(self._history)

    @property
    def is_waiting(self) -> bool:
        return self._waiting

    @property
    def is_empty(self) -> bool:
        return not self._history

    def turn(self, index: int) -> ChatTurn:
        """Get the turn at a position in the log.

        Raises:
            IndexError: If there is no turn at this position
        """
        if index < 0:
            raise IndexError(f"Invalid turn index: {index}")
        return self._history[index]

    def set_query(self, text: str) -> None:
        self.query = text

    def set_context(self, context: Optional[ResourceDescriptor]) -> None:
        self.context = context

    def submit(self, prompt: Optional[str] = None) -> PendingQuery:
        """Record the user's prompt and prepare the outgoing query.

        Args:
            prompt: Prompt text; defaults to the pending query

        Returns:
            The query to send, tagged with its submission token

        Raises:
            EmptyPromptError: If the prompt is empty or whitespace
            SessionBusyError: If a previous query is still waiting
        """
        text = self.query if prompt is None else prompt
        if not text or not text.strip():
            raise EmptyPromptError("Prompt is empty")
        if self._waiting:
            raise SessionBusyError("A query is already waiting for a response")

        attachments = self.attachments.snapshot()
        self._history.append(ChatTurn(who=Who.USER, text=text, attachments=attachments))

        self._token += 1
        self._waiting = True
        pending = PendingQuery(
            token=self._token,
            conversation_id=self.conversation_id,
            query=compose_query(text, attachments),
        )

        self.query = ""
        self.attachments.clear()

        logger.debug(
            "query submitted",
            token=pending.token,
            conversation_id=pending.conversation_id,
            attachments=len(attachments),
        )
        return pending

    def _accepts(self, token: int) -> bool:
        if self._waiting and token == self._token:
            return True
        logger.warning("dropping stale response", token=token, current_token=self._token)
        return False

    def on_response_success(
        self,
        token: int,
        conversation_id: Optional[str],
        text: Optional[str],
        truncated: Any = False,
        references: Optional[Iterable[Any]] = None,
    ) -> Optional[ChatTurn]:
        """Settle the waiting query with the service's answer.

        Returns:
            The appended ai turn, or None if the token is stale
        """
        if not self._accepts(token):
            return None

        self.conversation_id = conversation_id
        entry = ChatTurn(
            who=Who.AI,
            text=text,
            is_truncated=truncated is True,
            references=parse_references(references),
            user_feedback=FeedbackState(),
        )
        self._history.append(entry)
        self._waiting = False

        logger.debug("query answered", token=token, conversation_id=conversation_id, truncated=entry.is_truncated)
        return entry

    def on_response_failure(self, token: int, message: str) -> Optional[ChatTurn]:
        """Settle the waiting query with an error turn.

        Returns:
            The appended error turn, or None if the token is stale
        """
        if not self._accepts(token):
            return None

        entry = ChatTurn(who=Who.AI, error=message, is_truncated=False)
        self._history.append(entry)
        self._waiting = False

        logger.info("query failed", token=token, error=message)
        return entry

    def reset(self) -> None:
        """Start a new conversation.

        Conversation ID, history, attachments and context are cleared
        together. A response still in flight is dropped when it arrives.
        """
        self.conversation_id = None
        self._history = []
        self.attachments.clear()
        self.context = None
        self.query = ""
        self._waiting = False
        self._token += 1
        logger.debug("conversation reset", token=self._token)

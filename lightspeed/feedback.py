"""User feedback on assistant answers.

Each ai turn carries its own feedback state; rating one answer never
touches another, and several submissions may be in flight at once.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

import structlog

from lightspeed.client import FeedbackRequest, LightspeedAPIError, error_message, run_with_timeout
from lightspeed.enums import Sentiment, Who

if TYPE_CHECKING:
    from lightspeed.client import LightspeedClient
    from lightspeed.session import ConversationSession

logger = structlog.get_logger(__name__)

FEEDBACK_POST_FAILED = "Feedback POST failed"


@dataclass
class FeedbackState:
    """Feedback panel state of one ai turn."""

    is_open: bool = False
    sentiment: Optional[int] = None
    text: str = ""
    submitted: bool = False
    error: Optional[str] = None


class FeedbackSession:
    """Rating and comment for the ai turn at ``index``.

    The question being answered is the turn right before it.
    """

    def __init__(self, session: "ConversationSession", index: int):
        turn = session.turn(index)
        if turn.who != Who.AI or turn.user_feedback is None:
            raise ValueError(f"Turn {index} does not accept feedback")

        self.index = index
        self.state: FeedbackState = turn.user_feedback
        self.conversation_id = session.conversation_id
        self.llm_response = turn.text
        self.user_question = session.turn(index - 1).text if index > 0 else None

    def open(self) -> None:
        self.state.is_open = True

    def close(self) -> None:
        self.state.is_open = False

    def set_sentiment(self, value: Optional[int]) -> None:
        """Choose a rating; choosing the active rating again clears it."""
        self.open()
        if value is not None:
            value = Sentiment(value).value
        self.state.sentiment = None if value == self.state.sentiment else value

    def thumbs_up(self) -> None:
        self.set_sentiment(Sentiment.THUMBS_UP)

    def thumbs_down(self) -> None:
        self.set_sentiment(Sentiment.THUMBS_DOWN)

    def set_text(self, value: str) -> None:
        self.state.text = value

    def build_request(self) -> FeedbackRequest:
        return FeedbackRequest(
            conversation_id=self.conversation_id,
            llm_response=self.llm_response,
            sentiment=self.state.sentiment,
            user_feedback=self.state.text,
            user_question=self.user_question,
        )

    async def submit(self, client: "LightspeedClient", timeout: Optional[float] = None) -> bool:
        """Send the feedback.

        On success the panel closes and the turn is marked submitted. On
        failure the panel stays open with an error message.

        Returns:
            True if the service accepted the feedback
        """
        request = self.build_request()
        try:
            await run_with_timeout(
                client.send_feedback, request, timeout=timeout if timeout is not None else client.timeout
            )
        except LightspeedAPIError as e:
            logger.info("feedback request failed", index=self.index, error_type=e.__class__.__name__)
            self.state.error = error_message(e, FEEDBACK_POST_FAILED)
            self.state.submitted = False
            return False
        except Exception as e:
            logger.exception("unexpected error sending feedback", index=self.index)
            self.state.error = error_message(e, FEEDBACK_POST_FAILED)
            self.state.submitted = False
            return False

        self.state.error = None
        self.close()
        self.state.submitted = True
        return True

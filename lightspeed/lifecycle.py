"""Request lifecycle of a conversation turn.

submit -> waiting -> settle. Transport errors, service rejections and the
time bound all end the turn the same way: an error turn in the log. A failed
turn is final; only a new submission sends another request.
"""

from typing import Optional

import structlog

from lightspeed.client import LightspeedAPIError, LightspeedClient, error_message, run_with_timeout
from lightspeed.session import ChatTurn, ConversationSession

logger = structlog.get_logger(__name__)

QUERY_POST_FAILED = "Query POST failed"


class RequestLifecycle:
    """Sends a session's submitted query and settles the session."""

    def __init__(self, client: LightspeedClient, timeout: Optional[float] = None):
        self.client = client
        self.timeout = timeout if timeout is not None else client.timeout

    async def submit(self, session: ConversationSession, prompt: Optional[str] = None) -> Optional[ChatTurn]:
        """Submit a prompt and wait for the answer.

        Args:
            session: The conversation to continue
            prompt: Prompt text; defaults to the session's pending query

        Returns:
            The ai turn appended to the log, or None if the session was
            reset while the request was in flight

        Raises:
            EmptyPromptError: If the prompt is blank; nothing is sent
            SessionBusyError: If a query is already waiting; nothing is sent
        """
        pending = session.submit(prompt)
        log = logger.bind(token=pending.token, conversation_id=pending.conversation_id)

        try:
            response = await run_with_timeout(
                self.client.query, pending.conversation_id, pending.query, timeout=self.timeout
            )
        except LightspeedAPIError as e:
            log.info("query request failed", error_type=e.__class__.__name__)
            return session.on_response_failure(pending.token, error_message(e, QUERY_POST_FAILED))
        except Exception as e:
            log.exception("unexpected error sending query")
            return session.on_response_failure(pending.token, error_message(e, QUERY_POST_FAILED))

        return session.on_response_success(
            pending.token,
            response.conversation_id,
            response.response,
            response.truncated,
            response.referenced_documents,
        )

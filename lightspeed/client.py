"""HTTP client for the OpenShift Lightspeed service.

Both endpoints are JSON POSTs proxied by the cluster console and carry the
console's authorization header. Every request is bounded by the configured
timeout (10 minutes by default); there is no retry.
"""

import asyncio
import functools
import json
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional, TypeVar

import requests
import structlog
from pydantic import BaseModel, Field, ValidationError

from lightspeed.auth import AuthProvider, BearerTokenAuth
from lightspeed.config import Config

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class LightspeedAPIError(Exception):
    """Base exception for Lightspeed requests.

    Attributes:
        detail: Error detail reported by the service, if any
    """

    def __init__(self, message: str = "", detail: Optional[str] = None):
        super().__init__(message)
        self.detail = detail


class APIConnectionError(LightspeedAPIError):
    """Raised when the service cannot be reached."""


class APITimeoutError(LightspeedAPIError):
    """Raised when a request exceeds its time bound."""


class APIResponseError(LightspeedAPIError):
    """Raised when the service rejects a request or answers garbage."""

    def __init__(self, message: str = "", detail: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message, detail)
        self.status_code = status_code


def error_message(error: BaseException, fallback: str) -> str:
    """Pick the message shown for a failed request.

    The service's detail wins, then the exception message, then the fallback.
    """
    detail = getattr(error, "detail", None)
    if detail:
        return detail
    message = str(error)
    if message:
        return message
    return fallback


async def run_with_timeout(func: Callable[..., T], *args: Any, timeout: float) -> T:
    """Run a blocking request in a worker thread with a total time bound.

    Each call gets its own single-thread executor, shut down without
    waiting. A request that overruns is abandoned; its thread finishes in
    the background and its result is discarded, so neither the caller nor
    the event loop shutdown waits for it.

    Raises:
        APITimeoutError: If the call does not finish within ``timeout`` seconds
    """
    loop = asyncio.get_running_loop()
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="lightspeed-request")
    try:
        return await asyncio.wait_for(
            loop.run_in_executor(executor, functools.partial(func, *args)), timeout=timeout
        )
    except asyncio.TimeoutError as e:
        raise APITimeoutError(f"Request timed out after {timeout:g} seconds") from e
    finally:
        executor.shutdown(wait=False)


class QueryRequest(BaseModel):
    """Body of a query request."""

    conversation_id: Optional[str] = None
    query: str


class QueryResponse(BaseModel):
    """Body of a successful query response."""

    conversation_id: Optional[str] = None
    query: Optional[str] = None
    referenced_documents: Optional[List[Any]] = Field(default_factory=list)
    response: Optional[str] = None
    # Kept raw; only a literal true marks the answer as truncated
    truncated: Any = False


class FeedbackRequest(BaseModel):
    """Body of a feedback request."""

    conversation_id: Optional[str] = None
    llm_response: Optional[str] = None
    sentiment: Optional[int] = None
    user_feedback: Optional[str] = None
    user_question: Optional[str] = None


def _extract_detail(response: requests.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict) or not body.get("detail"):
        return None
    detail = body["detail"]
    if isinstance(detail, str):
        return detail
    return json.dumps(detail)


class LightspeedClient:
    """Client for the query and feedback endpoints.

    Configuration comes from ``Config.get_api_config()``:
        query_url: Full URL of the query endpoint
        feedback_url: Full URL of the feedback endpoint
        timeout: Request time bound in seconds
        verify: Whether to verify TLS certificates
    """

    def __init__(self, config: Config, auth: Optional[AuthProvider] = None):
        api_config = config.get_api_config()
        self.query_url: str = api_config["query_url"]
        self.feedback_url: str = api_config["feedback_url"]
        self.timeout: float = api_config["timeout"]
        self.verify: bool = api_config["verify"]
        self.auth = auth if auth is not None else BearerTokenAuth.from_config(config)

    def _get_headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        headers.update(self.auth.headers())
        return headers

    def _post(self, url: str, payload: Dict[str, Any]) -> Any:
        """POST a JSON payload and return the decoded JSON answer.

        Raises:
            APITimeoutError: If the transport times out
            APIConnectionError: If the request cannot be sent
            APIResponseError: If the service answers with an error status or invalid JSON
        """
        try:
            response = requests.post(
                url,
                json=payload,
                headers=self._get_headers(),
                timeout=self.timeout,
                verify=self.verify,
            )
        except requests.exceptions.Timeout as e:
            raise APITimeoutError(f"Request timed out after {self.timeout:g} seconds") from e
        except requests.exceptions.RequestException as e:
            raise APIConnectionError(f"Failed to reach Lightspeed: {e}") from e

        if not response.ok:
            raise APIResponseError(
                f"{response.status_code} {response.reason or ''}".strip(),
                detail=_extract_detail(response),
                status_code=response.status_code,
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise APIResponseError("Invalid JSON in response", status_code=response.status_code) from e

    def query(self, conversation_id: Optional[str], query: str) -> QueryResponse:
        """Send a query and return the service's answer."""
        request = QueryRequest(conversation_id=conversation_id, query=query)
        logger.debug("sending query", conversation_id=conversation_id, length=len(query))
        body = self._post(self.query_url, request.model_dump(exclude_none=True))
        try:
            return QueryResponse.model_validate(body)
        except ValidationError as e:
            raise APIResponseError(f"Unexpected query response: {e.error_count()} invalid field(s)") from e

    def send_feedback(self, request: FeedbackRequest) -> None:
        """Send user feedback about a response."""
        logger.debug("sending feedback", conversation_id=request.conversation_id, sentiment=request.sentiment)
        self._post(self.feedback_url, request.model_dump(exclude_none=True))

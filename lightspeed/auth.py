"""Authorization for requests to the Lightspeed service.

Whether the user is authenticated is decided by the console; this module
only consumes that status and supplies the header sent with each request.
"""

import os
from typing import Dict, Optional, Protocol, TYPE_CHECKING

from lightspeed.enums import AuthStatus

if TYPE_CHECKING:
    from lightspeed.config import Config


class AuthProvider(Protocol):
    """Supplies authorization headers for outgoing requests."""

    def headers(self) -> Dict[str, str]:
        ...


class BearerTokenAuth:
    """Sends a fixed bearer token, or nothing when no token is set."""

    def __init__(self, token: Optional[str] = None):
        self.token = token

    @classmethod
    def from_config(cls, config: "Config") -> "BearerTokenAuth":
        """Use the configured token, else the token in ``config.auth_token_env``."""
        return cls(config.auth_token or os.getenv(config.auth_token_env))

    def headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}


def is_prompt_enabled(status: AuthStatus) -> bool:
    """The prompt is hidden when the user is known to lack access."""
    return status not in (AuthStatus.NOT_AUTHENTICATED, AuthStatus.NOT_AUTHORIZED)

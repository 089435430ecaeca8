from enum import Enum, IntEnum


class AttachmentType(str, Enum):
    """Types of context attachments."""

    EVENTS = "Events"
    LOG = "Log"
    YAML = "YAML"
    YAML_FILTERED = "YAML filtered"
    YAML_STATUS = "YAML Status"
    YAML_UPLOAD = "YAMLUpload"


class Who(str, Enum):
    """Author of a chat turn."""

    USER = "user"
    AI = "ai"


class AuthStatus(Enum):
    """Authentication status reported by the auth collaborator."""

    AUTHENTICATED = "Authenticated"
    NOT_AUTHENTICATED = "NotAuthenticated"
    NOT_AUTHORIZED = "NotAuthorized"
    UNKNOWN = "Unknown"


class Sentiment(IntEnum):
    """Feedback rating values."""

    THUMBS_DOWN = -1
    THUMBS_UP = 1

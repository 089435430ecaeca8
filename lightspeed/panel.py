"""Chat panel controller.

Ties the conversation engine to the console: the location the user is
viewing, the resource watch, the auth status and the prompt form. This is
the behaviour of the chat page without any of its rendering.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Optional

import structlog

from lightspeed.attachments import AttachmentError, get_attachment_id, to_ols_attachment
from lightspeed.auth import is_prompt_enabled
from lightspeed.client import LightspeedClient
from lightspeed.config import Config
from lightspeed.context import LocationContext, QueryParams, ResourceDescriptor
from lightspeed.enums import AttachmentType, AuthStatus
from lightspeed.feedback import FeedbackSession
from lightspeed.lifecycle import RequestLifecycle
from lightspeed.session import ChatTurn, ConversationSession, EmptyPromptError, SessionBusyError
from lightspeed.watch import ResourceWatchProvider

logger = structlog.get_logger(__name__)

ATTACH_MENU_TYPES = (AttachmentType.YAML, AttachmentType.YAML_STATUS)


@dataclass(frozen=True)
class AttachMenu:
    """The resource offered for attachment and which captures are active."""

    kind: str
    name: str
    namespace: Optional[str]
    selected: Dict[AttachmentType, bool]

    @property
    def title(self) -> str:
        return f"{self.kind} {self.name} in namespace {self.namespace}"


@dataclass(frozen=True)
class AttachmentLabel:
    """An attachment shown next to the prompt."""

    id: str
    attachment_type: AttachmentType
    title: str
    is_changed: bool
    content_type: str


class ChatPanel:
    """Non-visual state and actions of the chat panel."""

    def __init__(
        self,
        config: Config,
        client: Optional[LightspeedClient] = None,
        watch: Optional[ResourceWatchProvider] = None,
        auth_status: AuthStatus = AuthStatus.UNKNOWN,
        session: Optional[ConversationSession] = None,
    ):
        self.config = config
        self.client = client if client is not None else LightspeedClient(config)
        self.lifecycle = RequestLifecycle(self.client)
        self.watch = watch
        self.auth_status = auth_status
        self.session = session if session is not None else ConversationSession()
        self.location = LocationContext()

        self.validated: Literal["default", "error"] = "default"
        self.attach_error: Optional[str] = None
        self.privacy_alert_dismissed = config.hide_privacy_alert
        self.privacy_alert_shown = not self.privacy_alert_dismissed
        self._feedback: Dict[int, FeedbackSession] = {}

    @property
    def prompt_enabled(self) -> bool:
        return is_prompt_enabled(self.auth_status)

    @property
    def is_welcome(self) -> bool:
        return self.session.is_empty

    # =================================================================
    # Context
    # =================================================================

    def navigate(self, path: Optional[str], params: QueryParams = None) -> Optional[ResourceDescriptor]:
        """Follow a console navigation."""
        return self.location.update(path, params)

    def set_panel_context(self, resource: Any) -> None:
        """Set the resource the console attached to the panel.

        Only k8s-like objects with string kind, name and namespace count.
        """
        self.session.set_context(ResourceDescriptor.from_resource(resource))

    @property
    def attach_descriptor(self) -> Optional[ResourceDescriptor]:
        """The page's resource, else the panel context."""
        return self.location.descriptor or self.session.context

    def attach_context(self) -> Optional[Dict[str, Any]]:
        """The live object of the resource offered for attachment."""
        descriptor = self.attach_descriptor
        if descriptor is None or self.watch is None:
            return None
        return self.watch.get(descriptor)

    def attach_menu(self) -> Optional[AttachMenu]:
        resource = self.attach_context()
        if not resource:
            return None
        metadata = resource.get("metadata") or {}
        kind = resource.get("kind")
        name = metadata.get("name")
        if not kind or not name:
            return None

        return AttachMenu(
            kind=kind,
            name=name,
            namespace=metadata.get("namespace"),
            selected={
                attachment_type: self.session.attachments.has(get_attachment_id(attachment_type, kind, name))
                for attachment_type in ATTACH_MENU_TYPES
            },
        )

    # =================================================================
    # Attachments
    # =================================================================

    def toggle_attachment(self, attachment_type: AttachmentType) -> bool:
        """Attach or detach the current resource.

        Returns:
            True if the resource is attached after the call
        """
        resource = self.attach_context()
        if not resource:
            logger.info("no resource to attach", descriptor=self.attach_descriptor)
            return False
        if not resource.get("kind") or not (resource.get("metadata") or {}).get("name"):
            logger.info("resource has no kind or name", descriptor=self.attach_descriptor)
            return False

        try:
            return self.session.attachments.toggle(attachment_type, resource)
        except AttachmentError as e:
            self.attach_error = f"Error getting YAML: {e}"
            logger.warning("failed to attach context", attachment_type=AttachmentType(attachment_type).value, error=str(e))
            return False

    def remove_attachment(self, attachment_id: str) -> None:
        self.session.attachments.remove(attachment_id)

    def attachment_labels(self) -> List[AttachmentLabel]:
        return [
            AttachmentLabel(
                id=attachment.id,
                attachment_type=attachment.attachment_type,
                title=attachment.label,
                is_changed=attachment.is_changed,
                content_type=to_ols_attachment(attachment)["content_type"],
            )
            for attachment in self.session.attachments
        ]

    # =================================================================
    # Prompt
    # =================================================================

    def on_query_change(self, value: str) -> None:
        if value.strip():
            self.validated = "default"
        self.session.set_query(value)

    async def submit(self) -> Optional[ChatTurn]:
        """Submit the pending query.

        Returns:
            The ai turn that settled the query, or None if nothing was sent
        """
        if not self.prompt_enabled:
            logger.info("prompt disabled", auth_status=self.auth_status.value)
            return None

        try:
            return await self.lifecycle.submit(self.session)
        except EmptyPromptError:
            self.validated = "error"
            return None
        except SessionBusyError:
            logger.info("query already waiting, submission ignored")
            return None

    def new_chat(self) -> None:
        """Start over with an empty conversation."""
        self.session.reset()
        self._feedback.clear()
        self.attach_error = None

    # =================================================================
    # Feedback
    # =================================================================

    def feedback(self, index: int) -> FeedbackSession:
        """Feedback controls for the ai turn at ``index``."""
        if index not in self._feedback:
            self._feedback[index] = FeedbackSession(self.session, index)
        return self._feedback[index]

    async def submit_feedback(self, index: int) -> bool:
        return await self.feedback(index).submit(self.client)

    # =================================================================
    # Privacy alert
    # =================================================================

    def hide_privacy_alert(self, persistent: bool = False) -> None:
        """Hide the alert; ``persistent`` also stops it showing for new panels."""
        self.privacy_alert_shown = False
        if persistent:
            self.privacy_alert_dismissed = True

"""Context attachments for chat queries.

An attachment is a text snapshot of a resource (its full YAML or just its
status) that the user adds to the next query. Attachments are keyed by
``type + kind + name``; the namespace is not part of the key,
so the same resource seen from two namespaces acts as a single toggle.
"""

import copy
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterator, Optional, Tuple

import structlog
import yaml

from lightspeed.enums import AttachmentType

logger = structlog.get_logger(__name__)


class AttachmentError(Exception):
    """Raised when a resource cannot be captured as an attachment."""


@dataclass(frozen=True)
class Attachment:
    """A captured, possibly edited, snapshot of a resource."""

    attachment_type: AttachmentType
    kind: str
    name: str
    namespace: Optional[str]
    value: str
    original_value: Optional[str] = None

    @property
    def id(self) -> str:
        return get_attachment_id(self.attachment_type, self.kind, self.name)

    @property
    def is_changed(self) -> bool:
        return is_attachment_changed(self)

    @property
    def label(self) -> str:
        """Human readable description shown next to the prompt."""
        return f"{self.kind} {self.name} in namespace {self.namespace}"


def get_attachment_id(attachment_type: AttachmentType, kind: str, name: str) -> str:
    """Build the identity key of an attachment."""
    return f"{AttachmentType(attachment_type).value}_{kind}_{name}"


def is_attachment_changed(attachment: Optional[Attachment]) -> bool:
    """True when the attachment was edited after it was captured."""
    return (
        attachment is not None
        and attachment.original_value is not None
        and attachment.original_value != attachment.value
    )


def to_ols_attachment(attachment: Attachment) -> Dict[str, str]:
    """Convert an attachment to the service's structured attachment format."""
    attachment_type = "api object"
    if attachment.attachment_type == AttachmentType.EVENTS:
        attachment_type = "event"
    if attachment.attachment_type == AttachmentType.LOG:
        attachment_type = "log"

    return {
        "attachment_type": attachment_type,
        "content": attachment.value,
        "content_type": "text/plain" if attachment.attachment_type == AttachmentType.LOG else "application/yaml",
    }


class _ManifestDumper(yaml.SafeDumper):
    """Dumper that writes every node in full instead of using anchors."""

    def ignore_aliases(self, data: Any) -> bool:
        return True


def dump_yaml(data: Any) -> str:
    """Serialize data to YAML without line wrapping, keeping key order.

    Raises:
        AttachmentError: If the data cannot be represented as YAML
    """
    try:
        text = yaml.dump(
            data,
            Dumper=_ManifestDumper,
            width=float("inf"),
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )
    except (yaml.YAMLError, RecursionError) as e:
        raise AttachmentError(str(e) or e.__class__.__name__) from e
    return text.strip()


def build_snapshot(attachment_type: AttachmentType, resource: Dict[str, Any]) -> str:
    """Capture the YAML text attached for a resource.

    Args:
        attachment_type: YAML for the whole object, YAML Status for its status only
        resource: The live resource object

    Returns:
        YAML text

    Raises:
        AttachmentError: If the type cannot be captured or serialization fails
    """
    if attachment_type == AttachmentType.YAML:
        data = copy.deepcopy(resource)
        metadata = data.get("metadata")
        if isinstance(metadata, dict):
            metadata.pop("managedFields", None)
    elif attachment_type == AttachmentType.YAML_STATUS:
        data = {"status": resource["status"]} if "status" in resource else {}
    else:
        raise AttachmentError(f"Cannot capture {AttachmentType(attachment_type).value} from a resource")

    return dump_yaml(data)


class AttachmentStore:
    """Insertion-ordered collection of attachments, at most one per key."""

    def __init__(self) -> None:
        self._attachments: Dict[str, Attachment] = {}

    def __len__(self) -> int:
        return len(self._attachments)

    def __iter__(self) -> Iterator[Attachment]:
        return iter(list(self._attachments.values()))

    def __contains__(self, attachment_id: object) -> bool:
        return attachment_id in self._attachments

    def has(self, attachment_id: str) -> bool:
        return attachment_id in self._attachments

    def get(self, attachment_id: str) -> Optional[Attachment]:
        return self._attachments.get(attachment_id)

    def ids(self) -> Tuple[str, ...]:
        return tuple(self._attachments)

    def add(
        self,
        attachment_type: AttachmentType,
        kind: str,
        name: str,
        namespace: Optional[str],
        value: str,
    ) -> bool:
        """Insert an attachment unless one with the same key exists.

        Returns:
            True if the attachment was inserted
        """
        attachment_id = get_attachment_id(attachment_type, kind, name)
        if attachment_id in self._attachments:
            return False

        self._attachments[attachment_id] = Attachment(
            attachment_type=AttachmentType(attachment_type),
            kind=kind,
            name=name,
            namespace=namespace,
            value=value,
            original_value=value,
        )
        logger.debug("attachment added", attachment_id=attachment_id)
        return True

    def remove(self, attachment_id: str) -> None:
        if self._attachments.pop(attachment_id, None) is not None:
            logger.debug("attachment removed", attachment_id=attachment_id)

    def update_value(self, attachment_id: str, value: str) -> None:
        """Replace the text of an attachment, keeping its original value.

        Raises:
            KeyError: If no attachment has this key
        """
        self._attachments[attachment_id] = replace(self._attachments[attachment_id], value=value)

    def clear(self) -> None:
        self._attachments.clear()

    def snapshot(self) -> Tuple[Attachment, ...]:
        """Immutable copy of the current attachments, in insertion order."""
        return tuple(self._attachments.values())

    def toggle(self, attachment_type: AttachmentType, resource: Dict[str, Any]) -> bool:
        """Attach a resource, or detach it if it is already attached.

        Args:
            attachment_type: What to capture from the resource
            resource: The live resource object

        Returns:
            True if the resource is attached after the call

        Raises:
            AttachmentError: If the resource has no kind or name, or the snapshot
                cannot be built; the store is unchanged
        """
        metadata = resource.get("metadata") or {}
        kind = resource.get("kind")
        name = metadata.get("name")
        namespace = metadata.get("namespace")
        if not isinstance(kind, str) or not kind or not isinstance(name, str) or not name:
            raise AttachmentError("Resource has no kind or name")

        attachment_id = get_attachment_id(attachment_type, kind, name)
        if self.has(attachment_id):
            self.remove(attachment_id)
            return False

        value = build_snapshot(attachment_type, resource)
        self.add(attachment_type, kind, name, namespace, value)
        return True

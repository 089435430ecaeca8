"""Composition of the query text sent to the service."""

from typing import Iterable

from lightspeed.attachments import Attachment
from lightspeed.enums import AttachmentType


YAML_TEMPLATE = """

For reference, here is the full resource YAML for {kind} '{name}':
```yaml
{value}
```"""

YAML_STATUS_TEMPLATE = """

For reference, here is the resource's 'status' section YAML for {kind} '{name}':
```yaml
{value}
```"""

_TEMPLATES = {
    AttachmentType.YAML: YAML_TEMPLATE,
    AttachmentType.YAML_STATUS: YAML_STATUS_TEMPLATE,
}


def compose_query(prompt: str, attachments: Iterable[Attachment]) -> str:
    """Append attachment content to the user's prompt.

    Attachments are rendered in iteration order. Only YAML and YAML Status
    attachments are embedded; other types are not rendered into the query.
    """
    full_query = prompt
    for attachment in attachments:
        template = _TEMPLATES.get(attachment.attachment_type)
        if template is None:
            continue
        full_query += template.format(kind=attachment.kind, name=attachment.name, value=attachment.value)
    return full_query

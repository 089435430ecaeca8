"""Resolution of the resource currently in view.

The console encodes the resource being viewed in its route. This module turns
a navigation location (path plus query string) into a ``ResourceDescriptor``
that can be offered as attachable context.

Recognised shapes, tried in order (first match wins):

- ``/k8s/ns/<namespace>/<resourceType>/<name>``
- ``/k8s/all-namespaces/<resourceType>/<name>``
- ``/k8s/cluster/<resourceType>/<name>``
- ``/monitoring/alerts/<id>?alertname=<name>[&namespace=<ns>]``
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union
from urllib.parse import parse_qsl

import structlog

from lightspeed.resources import RESOURCES, kind_for

logger = structlog.get_logger(__name__)

ALERT_KIND = "Alert"

_NS = r"[a-z0-9-]+"
_NAME = r"[a-z0-9.-]+"
_TYPE = "|".join(re.escape(key) for key in RESOURCES)

_NAMESPACED = re.compile(rf"/k8s/ns/({_NS})/({_TYPE})/({_NAME})")
_ALL_NAMESPACES = re.compile(rf"/k8s/all-namespaces/({_TYPE})/({_NAME})")
_CLUSTER = re.compile(rf"/k8s/cluster/({_TYPE})/({_NAME})")
_ALERT = re.compile(r"^/monitoring/alerts/[0-9]+")

QueryParams = Union[str, Mapping[str, str], None]


@dataclass(frozen=True)
class ResourceDescriptor:
    """Identifies a single cluster object."""

    kind: str
    name: str
    namespace: Optional[str] = None

    @classmethod
    def from_resource(cls, resource: Any) -> Optional["ResourceDescriptor"]:
        """Build a descriptor from a k8s-like object.

        Only objects whose kind, metadata.name and metadata.namespace are all
        strings qualify; anything else yields None.
        """
        if not is_k8s_resource_context(resource):
            return None
        metadata = resource["metadata"]
        return cls(kind=resource["kind"], name=metadata["name"], namespace=metadata["namespace"])


def is_k8s_resource_context(resource: Any) -> bool:
    """Check that an object carries enough identity to be watched."""
    if not isinstance(resource, Mapping):
        return False
    metadata = resource.get("metadata")
    if not isinstance(metadata, Mapping):
        return False
    return (
        isinstance(resource.get("kind"), str)
        and isinstance(metadata.get("name"), str)
        and isinstance(metadata.get("namespace"), str)
    )


def _parse_params(params: QueryParams) -> dict[str, str]:
    if params is None:
        return {}
    if isinstance(params, str):
        # First occurrence wins, like URLSearchParams.get
        parsed: dict[str, str] = {}
        for key, value in parse_qsl(params.lstrip("?"), keep_blank_values=True):
            parsed.setdefault(key, value)
        return parsed
    return dict(params)


def resolve_location(path: str, params: QueryParams = None) -> Optional[ResourceDescriptor]:
    """Resolve the resource addressed by a console location.

    Args:
        path: Route path, e.g. ``/k8s/ns/default/pods/nginx``
        params: Query string (``"?alertname=X"``) or an already parsed mapping

    Returns:
        The descriptor of the first matching shape, or None
    """
    matches = _NAMESPACED.search(path)
    if matches:
        return ResourceDescriptor(
            kind=kind_for(matches.group(2)), name=matches.group(3), namespace=matches.group(1)
        )

    matches = _ALL_NAMESPACES.search(path)
    if matches:
        return ResourceDescriptor(kind=kind_for(matches.group(1)), name=matches.group(2))

    matches = _CLUSTER.search(path)
    if matches:
        return ResourceDescriptor(kind=kind_for(matches.group(1)), name=matches.group(2))

    if _ALERT.match(path):
        query = _parse_params(params)
        if "alertname" in query:
            return ResourceDescriptor(
                kind=ALERT_KIND, name=query["alertname"], namespace=query.get("namespace")
            )

    return None


class LocationContext:
    """Tracks the resource in view as the user navigates.

    The descriptor is recomputed on every call to ``update``; nothing is
    cached across paths. An empty path keeps the previous result.
    """

    def __init__(self) -> None:
        self._descriptor: Optional[ResourceDescriptor] = None

    @property
    def descriptor(self) -> Optional[ResourceDescriptor]:
        return self._descriptor

    def update(self, path: Optional[str], params: QueryParams = None) -> Optional[ResourceDescriptor]:
        """Recompute the descriptor for a new location."""
        if not path:
            return self._descriptor

        self._descriptor = resolve_location(path, params)
        logger.debug("location resolved", path=path, descriptor=self._descriptor)
        return self._descriptor

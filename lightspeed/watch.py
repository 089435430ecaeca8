"""Live resource lookup for attachable context.

A watch provider takes a ``ResourceDescriptor`` and returns the current
resource object, or None when there is nothing to show. The kubectl-backed
provider is used by the CLI; the console supplies its own.
"""

import json
import subprocess
from typing import Any, Dict, Optional, Protocol

import structlog

from lightspeed.config import Config
from lightspeed.context import ALERT_KIND, ResourceDescriptor
from lightspeed.utils.command import run_command

logger = structlog.get_logger(__name__)


class ResourceWatchProvider(Protocol):
    """Returns the live object for a descriptor, or None."""

    def get(self, descriptor: ResourceDescriptor) -> Optional[Dict[str, Any]]:
        ...


def kubectl_resource_name(kind: str) -> str:
    """Convert a ``group~version~Kind`` reference to kubectl's ``Kind.version.group``."""
    parts = kind.split("~")
    if len(parts) == 3:
        group, version, name = parts
        return f"{name}.{version}.{group}"
    return kind


class KubectlResourceProvider:
    """Fetches resources with ``kubectl get -o json``.

    Alerts are not cluster objects and are never fetched.
    """

    def __init__(self, config: Config):
        kubernetes_config = config.get_kubernetes_config()
        self.context: Optional[str] = kubernetes_config["context"]
        self.timeout: int = kubernetes_config["timeout"]

    def _build_command(self, descriptor: ResourceDescriptor) -> list[str]:
        cmd = ["kubectl"]
        if self.context:
            cmd.extend(["--context", self.context])
        cmd.extend(["get", kubectl_resource_name(descriptor.kind), descriptor.name, "-o", "json"])
        if descriptor.namespace:
            cmd.extend(["--namespace", descriptor.namespace])
        return cmd

    def get(self, descriptor: Optional[ResourceDescriptor]) -> Optional[Dict[str, Any]]:
        if descriptor is None or descriptor.kind == ALERT_KIND:
            return None

        cmd = self._build_command(descriptor)
        try:
            result = run_command(cmd, timeout=self.timeout)
        except subprocess.CalledProcessError as e:
            logger.warning("kubectl get failed", kind=descriptor.kind, name=descriptor.name, stderr=(e.stderr or "").strip())
            return None
        except subprocess.TimeoutExpired:
            logger.warning("kubectl get timed out", kind=descriptor.kind, name=descriptor.name, timeout=self.timeout)
            return None
        except FileNotFoundError:
            logger.warning("kubectl not found on PATH")
            return None

        try:
            resource = json.loads(result.stdout)
        except ValueError:
            logger.warning("kubectl returned invalid JSON", kind=descriptor.kind, name=descriptor.name)
            return None
        return resource if isinstance(resource, dict) else None

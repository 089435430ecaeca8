"""Route segment to resource kind lookup.

Console routes name resources by their plural lower-case form (``pods``) or,
for custom resources, by a ``group~version~Kind`` reference. This table maps
the route segment to the kind used when attaching context. Custom resource
references map to themselves; the table is a lookup, not a parser.
"""

from typing import Dict, Optional


RESOURCES: Dict[str, str] = {
    # Workloads
    "pods": "Pod",
    "deployments": "Deployment",
    "statefulsets": "StatefulSet",
    "cronjobs": "CronJob",
    "jobs": "Job",
    "daemonsets": "DaemonSet",
    "replicasets": "ReplicaSet",
    "horizontalpodautoscalers": "HorizontalPodAutoscaler",
    "poddisruptionbudgets": "PodDisruptionBudget",

    # Networking
    "services": "Service",
    "routes": "Route",
    "ingresses": "Ingress",
    "networkpolicies": "NetworkPolicy",

    # Virtualization
    "kubevirt.io~v1~VirtualMachine": "kubevirt.io~v1~VirtualMachine",
    "kubevirt.io~v1~VirtualMachineInstance": "kubevirt.io~v1~VirtualMachineInstance",
    "kubevirt.io~v1~VirtualMachineInstanceMigration": "kubevirt.io~v1~VirtualMachineInstanceMigration",
    "instancetype.kubevirt.io~v1beta1~VirtualMachineClusterInstancetype":
        "instancetype.kubevirt.io~v1beta1~VirtualMachineClusterInstancetype",
    "instancetype.kubevirt.io~v1beta1~VirtualMachineClusterPreference":
        "instancetype.kubevirt.io~v1beta1~VirtualMachineClusterPreference",
    "cdi.kubevirt.io~v1beta1~DataSource": "cdi.kubevirt.io~v1beta1~DataSource",
    "migrations.kubevirt.io~v1alpha1~MigrationPolicy": "migrations.kubevirt.io~v1alpha1~MigrationPolicy",

    "templates": "Template",
}


def kind_for(resource_type: str) -> Optional[str]:
    """Return the kind for a route segment, or None if it is not known."""
    return RESOURCES.get(resource_type)

"""
Value types for the fake NEG cloud.

These mirror the shape of the compute API's NetworkEndpointGroup resources
closely enough that controller code can pass them through unchanged.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from kubernetes import client as k8s_client

from .errors import InvalidArgumentError

COMPUTE_API_PREFIX = "https://www.googleapis.com/compute"

GCE_VM_IP_PORT = "GCE_VM_IP_PORT"
NON_GCP_PRIVATE_IP_PORT = "NON_GCP_PRIVATE_IP_PORT"

_SELF_LINK_PATTERN = re.compile(
    r"^https://www\.googleapis\.com/compute/(?P<api>[^/]+)"
    r"/projects/(?P<project>[^/]+)"
    r"/zones/(?P<zone>[^/]+)"
    r"/networkEndpointGroups/(?P<name>[^/]+)$"
)


class Version(str, Enum):
    """Compute API versions a caller may target."""

    GA = "ga"
    ALPHA = "alpha"
    BETA = "beta"

    @property
    def api_path(self) -> str:
        """Path segment used for this version in resource URLs."""
        if self is Version.GA:
            return "v1"
        return self.value


def self_link(project: str, zone: str, name: str, version: Version = Version.GA) -> str:
    """Build the self-link for a zonal network endpoint group."""
    return (
        f"{COMPUTE_API_PREFIX}/{Version(version).api_path}"
        f"/projects/{project}"
        f"/zones/{zone}"
        f"/networkEndpointGroups/{name}"
    )


@dataclass(frozen=True)
class ResourceKey:
    """Identity of a zonal NEG: the (name, zone) pair."""

    name: str
    zone: str

    @classmethod
    def from_self_link(cls, link: str) -> "ResourceKey":
        """Parse a NEG self-link back into its key."""
        match = _SELF_LINK_PATTERN.match(link or "")
        if not match:
            raise InvalidArgumentError(
                f"Not a network endpoint group self-link: {link!r}"
            )
        return cls(name=match.group("name"), zone=match.group("zone"))

    def __str__(self) -> str:
        return f"{self.zone}/{self.name}"


@dataclass(frozen=True)
class NetworkEndpoint:
    """A single backend target; compared by value."""

    ip_address: str
    port: int
    instance: Optional[str] = None
    fqdn: Optional[str] = None


@dataclass
class NetworkEndpointGroup:
    """A named, zone-scoped group of network endpoints."""

    name: str
    self_link: str = ""
    network_endpoint_type: str = GCE_VM_IP_PORT
    network: str = ""
    subnetwork: str = ""
    default_port: Optional[int] = None
    description: str = ""
    zone: str = ""
    creation_timestamp: Optional[datetime] = None

    @property
    def key(self) -> ResourceKey:
        return ResourceKey(name=self.name, zone=self.zone)


@dataclass
class HealthStatusForNetworkEndpoint:
    health_state: str


@dataclass
class NetworkEndpointWithHealthStatus:
    """A listed endpoint, with health only when the caller asked for it."""

    network_endpoint: NetworkEndpoint
    healths: Optional[List[HealthStatusForNetworkEndpoint]] = field(default=None)


def endpoint_for_pod(pod: k8s_client.V1Pod, port: int) -> NetworkEndpoint:
    """
    Derive the NEG endpoint that serves a pod.

    The endpoint's instance is the node the pod is scheduled on and its
    address is the pod IP.

    Raises:
        InvalidArgumentError: if the pod has no IP or is not scheduled.
    """
    pod_ip = pod.status.pod_ip if pod.status else None
    node_name = pod.spec.node_name if pod.spec else None
    pod_name = pod.metadata.name if pod.metadata else None
    if not pod_ip:
        raise InvalidArgumentError(f"Pod {pod_name} has no IP address")
    if not node_name:
        raise InvalidArgumentError(f"Pod {pod_name} is not scheduled to a node")
    return NetworkEndpoint(ip_address=pod_ip, port=port, instance=node_name)

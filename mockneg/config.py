"""Configuration for the fake zone getter and NEG cloud."""

import logging
import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, Mapping

from kubernetes import client as k8s_client

from .models import Version

logger = logging.getLogger(__name__)

TEST_ZONE1 = "zone1"
TEST_ZONE2 = "zone2"
TEST_INSTANCE1 = "instance1"
TEST_INSTANCE2 = "instance2"
TEST_INSTANCE3 = "instance3"
TEST_INSTANCE4 = "instance4"
TEST_INSTANCE5 = "instance5"
TEST_INSTANCE6 = "instance6"

DEFAULT_PROJECT = "mock-project"
DEFAULT_HEALTH_STATE = "HEALTHY"
VALID_HEALTH_STATES = ("HEALTHY", "UNHEALTHY", "DRAINING", "TIMEOUT", "UNKNOWN")

ZONE_LABEL = "topology.kubernetes.io/zone"
LEGACY_ZONE_LABEL = "failure-domain.beta.kubernetes.io/zone"


class ConfigurationError(Exception):
    """Raised when configuration validation fails."""

    pass


@dataclass(frozen=True)
class ZoneConfig:
    """
    Static zone membership table: zone name -> node names.

    A node may belong to at most one zone.
    """

    zones: Mapping[str, FrozenSet[str]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        normalized: Dict[str, FrozenSet[str]] = {
            zone: frozenset(nodes) for zone, nodes in self.zones.items()
        }
        seen: Dict[str, str] = {}
        for zone, nodes in normalized.items():
            if not zone:
                raise ConfigurationError("zone name cannot be empty")
            for node in nodes:
                if node in seen:
                    raise ConfigurationError(
                        f"node {node!r} is listed in both {seen[node]!r} and {zone!r}"
                    )
                seen[node] = zone
        object.__setattr__(self, "zones", MappingProxyType(normalized))

    @classmethod
    def default(cls) -> "ZoneConfig":
        """Two zones: two instances in zone1, four in zone2."""
        return cls(
            zones={
                TEST_ZONE1: {TEST_INSTANCE1, TEST_INSTANCE2},
                TEST_ZONE2: {
                    TEST_INSTANCE3,
                    TEST_INSTANCE4,
                    TEST_INSTANCE5,
                    TEST_INSTANCE6,
                },
            }
        )

    @classmethod
    def from_nodes(cls, nodes: Iterable[k8s_client.V1Node]) -> "ZoneConfig":
        """
        Build the table from Kubernetes node objects.

        The zone is read from the node's topology label, falling back to the
        legacy failure-domain label. Nodes carrying neither are skipped.
        """
        zones: Dict[str, set] = {}
        for node in nodes:
            metadata = node.metadata
            if metadata is None or not metadata.name:
                continue
            labels = metadata.labels or {}
            zone = labels.get(ZONE_LABEL) or labels.get(LEGACY_ZONE_LABEL)
            if not zone:
                logger.debug("Skipping node %s: no zone label", metadata.name)
                continue
            zones.setdefault(zone, set()).add(metadata.name)
        return cls(zones=zones)


@dataclass(frozen=True)
class CloudConfig:
    """Fixed values the fake NEG cloud reports or embeds in self-links."""

    project: str = DEFAULT_PROJECT
    network_url: str = ""
    subnetwork_url: str = ""
    self_link_version: Version = Version.ALPHA
    health_state: str = DEFAULT_HEALTH_STATE

    def __post_init__(self) -> None:
        errors = []
        if not self.project:
            errors.append("project cannot be empty")
        if self.health_state not in VALID_HEALTH_STATES:
            errors.append(
                f"health_state must be one of {list(VALID_HEALTH_STATES)}: "
                f"{self.health_state}"
            )
        if errors:
            raise ConfigurationError(
                "Configuration validation failed:\n  - " + "\n  - ".join(errors)
            )

    @classmethod
    def from_env(cls) -> "CloudConfig":
        """Load configuration from environment variables.

        Environment Variables:
            MOCKNEG_PROJECT: Project embedded in self-links (default: mock-project)
            MOCKNEG_NETWORK_URL: Value returned by network_url()
            MOCKNEG_SUBNETWORK_URL: Value returned by subnetwork_url()
            MOCKNEG_SELF_LINK_VERSION: One of ga, alpha, beta (default: alpha)
            MOCKNEG_HEALTH_STATE: Health reported for listed endpoints
                (default: HEALTHY)
        """

        def get_version(value: str) -> Version:
            if not value:
                return Version.ALPHA
            try:
                return Version(value.lower())
            except ValueError as e:
                valid = [v.value for v in Version]
                raise ConfigurationError(
                    f"MOCKNEG_SELF_LINK_VERSION must be one of {valid}: {value}"
                ) from e

        return cls(
            project=os.environ.get("MOCKNEG_PROJECT", DEFAULT_PROJECT),
            network_url=os.environ.get("MOCKNEG_NETWORK_URL", ""),
            subnetwork_url=os.environ.get("MOCKNEG_SUBNETWORK_URL", ""),
            self_link_version=get_version(
                os.environ.get("MOCKNEG_SELF_LINK_VERSION", "")
            ),
            health_state=os.environ.get(
                "MOCKNEG_HEALTH_STATE", DEFAULT_HEALTH_STATE
            ).upper(),
        )

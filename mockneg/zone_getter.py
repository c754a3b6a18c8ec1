"""Fake zone getter backed by a static zone membership table."""

from typing import Iterable, List, Optional

from kubernetes import client as k8s_client

from .config import ZoneConfig
from .errors import NotFoundError


class FakeZoneGetter:
    """
    Answers zone queries from a fixed ZoneConfig.

    The table is immutable after construction, so no locking is needed.
    """

    def __init__(self, config: Optional[ZoneConfig] = None):
        self.config = config or ZoneConfig.default()

    @classmethod
    def from_nodes(cls, nodes: Iterable[k8s_client.V1Node]) -> "FakeZoneGetter":
        """Build a zone getter from the zone labels of Kubernetes nodes."""
        return cls(ZoneConfig.from_nodes(nodes))

    def list_zones(self) -> List[str]:
        """Return all zones in the table."""
        return list(self.config.zones)

    def get_zone_for_node(self, name: str) -> str:
        """Return the zone containing the node, or raise NotFoundError."""
        for zone, nodes in self.config.zones.items():
            if name in nodes:
                return zone
        raise NotFoundError(f"Node {name} not found in any zone")

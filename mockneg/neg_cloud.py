"""
Fake NEG cloud - an in-memory stand-in for the compute NEG API.

All state lives in two maps guarded by a single lock:

* zone -> NEGs created in that zone, in creation order
* ResourceKey(name, zone) -> endpoints attached to that NEG, in attach order
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from .config import CloudConfig
from .errors import ConflictError, NotFoundError
from .models import (
    HealthStatusForNetworkEndpoint,
    NetworkEndpoint,
    NetworkEndpointGroup,
    NetworkEndpointWithHealthStatus,
    ResourceKey,
    Version,
    self_link,
)

logger = logging.getLogger(__name__)


class FakeNetworkEndpointGroupCloud:
    """
    Thread-safe fake implementing the NetworkEndpointGroupCloud interface.

    Every public method holds the lock for its full duration. Objects passed
    to create_network_endpoint_group are stored as-is; returned lists are
    copies.
    """

    def __init__(self, config: Optional[CloudConfig] = None):
        self.config = config or CloudConfig()
        self._lock = threading.Lock()
        self._network_endpoint_groups: Dict[str, List[NetworkEndpointGroup]] = {}
        self._network_endpoints: Dict[ResourceKey, List[NetworkEndpoint]] = {}

    def reset(self) -> None:
        """Drop every NEG and endpoint."""
        with self._lock:
            self._network_endpoint_groups = {}
            self._network_endpoints = {}

    def _find(self, name: str, zone: str) -> Optional[NetworkEndpointGroup]:
        for neg in self._network_endpoint_groups.get(zone, []):
            if neg.name == name:
                return neg
        return None

    def get_network_endpoint_group(
        self, name: str, zone: str, version: Version = Version.GA
    ) -> NetworkEndpointGroup:
        """Return the NEG with this name in this zone."""
        with self._lock:
            neg = self._find(name, zone)
            if neg is None:
                raise NotFoundError(
                    f"networkEndpointGroup {name} not found in zone {zone}"
                )
            return neg

    def list_network_endpoint_groups(
        self, zone: str, version: Version = Version.GA
    ) -> List[NetworkEndpointGroup]:
        """List the NEGs in a zone. An unknown zone has no NEGs."""
        with self._lock:
            return list(self._network_endpoint_groups.get(zone, []))

    def aggregated_list_network_endpoint_groups(
        self, version: Version = Version.GA
    ) -> Dict[ResourceKey, NetworkEndpointGroup]:
        """Return every NEG in every zone keyed by (name, zone)."""
        with self._lock:
            return {
                ResourceKey(name=neg.name, zone=zone): neg
                for zone, negs in self._network_endpoint_groups.items()
                for neg in negs
            }

    def create_network_endpoint_group(
        self, neg: NetworkEndpointGroup, zone: str
    ) -> None:
        """
        Store neg in zone.

        The caller's object becomes the stored object: its self_link and zone
        are set, and network, subnetwork and creation_timestamp are filled in
        when left empty.

        Raises:
            ConflictError: if a NEG with the same name already exists in zone,
                or neg itself is already stored in any zone.
        """
        with self._lock:
            if self._find(neg.name, zone) is not None:
                raise ConflictError(
                    f"networkEndpointGroup {neg.name} already exists in zone {zone}"
                )
            for stored_zone, negs in self._network_endpoint_groups.items():
                if any(stored is neg for stored in negs):
                    raise ConflictError(
                        f"networkEndpointGroup {neg.name} is already stored "
                        f"in zone {stored_zone}"
                    )

            neg.self_link = self_link(
                self.config.project, zone, neg.name, self.config.self_link_version
            )
            neg.zone = zone
            if not neg.network:
                neg.network = self.config.network_url
            if not neg.subnetwork:
                neg.subnetwork = self.config.subnetwork_url
            if neg.creation_timestamp is None:
                neg.creation_timestamp = datetime.now(timezone.utc)

            self._network_endpoint_groups.setdefault(zone, []).append(neg)
            self._network_endpoints[ResourceKey(name=neg.name, zone=zone)] = []
            logger.debug(
                "Created networkEndpointGroup %s in zone %s", neg.name, zone
            )

    def delete_network_endpoint_group(
        self, name: str, zone: str, version: Version = Version.GA
    ) -> None:
        """Delete a NEG together with its endpoints."""
        with self._lock:
            negs = self._network_endpoint_groups.get(zone, [])
            remaining = [neg for neg in negs if neg.name != name]
            if len(remaining) == len(negs):
                raise NotFoundError(
                    f"networkEndpointGroup {name} not found in zone {zone}"
                )
            self._network_endpoint_groups[zone] = remaining
            self._network_endpoints.pop(ResourceKey(name=name, zone=zone), None)
            logger.debug("Deleted networkEndpointGroup %s in zone %s", name, zone)

    def attach_network_endpoints(
        self,
        name: str,
        zone: str,
        endpoints: Sequence[NetworkEndpoint],
        version: Version = Version.GA,
    ) -> None:
        """
        Append endpoints to the NEG's endpoint list.

        No existence check is made: attaching to an untracked (name, zone)
        starts a new endpoint list for it.
        """
        with self._lock:
            key = ResourceKey(name=name, zone=zone)
            self._network_endpoints.setdefault(key, []).extend(endpoints)
            logger.debug("Attached %d endpoint(s) to %s", len(endpoints), key)

    def detach_network_endpoints(
        self,
        name: str,
        zone: str,
        endpoints: Sequence[NetworkEndpoint],
        version: Version = Version.GA,
    ) -> None:
        """
        Remove every stored endpoint equal to any of endpoints.

        Duplicates of a detached value are all removed. Values that are not
        attached are ignored, and detaching from an untracked (name, zone)
        does nothing.
        """
        with self._lock:
            key = ResourceKey(name=name, zone=zone)
            stored = self._network_endpoints.get(key)
            if stored is None:
                logger.debug("Nothing to detach from untracked %s", key)
                return
            remove = set(endpoints)
            kept = [ne for ne in stored if ne not in remove]
            self._network_endpoints[key] = kept
            logger.debug(
                "Detached %d endpoint(s) from %s", len(stored) - len(kept), key
            )

    def list_network_endpoints(
        self,
        name: str,
        zone: str,
        show_health_status: bool = False,
        version: Version = Version.GA,
    ) -> List[NetworkEndpointWithHealthStatus]:
        """
        List the endpoints attached to a NEG.

        A NEG with no endpoints yields an empty list; only a (name, zone) with
        no tracked endpoint list raises NotFoundError.
        """
        with self._lock:
            key = ResourceKey(name=name, zone=zone)
            endpoints = self._network_endpoints.get(key)
            if endpoints is None:
                raise NotFoundError(
                    f"networkEndpointGroup {name} not found in zone {zone}"
                )
            result = []
            for ne in endpoints:
                healths = None
                if show_health_status:
                    healths = [
                        HealthStatusForNetworkEndpoint(
                            health_state=self.config.health_state
                        )
                    ]
                result.append(
                    NetworkEndpointWithHealthStatus(
                        network_endpoint=ne, healths=healths
                    )
                )
            return result

    def network_url(self) -> str:
        return self.config.network_url

    def subnetwork_url(self) -> str:
        return self.config.subnetwork_url

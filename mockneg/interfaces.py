"""
Capability interfaces consumed by NEG controllers.

Controllers depend on these protocols rather than on a concrete client, so a
real compute client and the fakes in this package are interchangeable.
"""

from typing import Dict, List, Protocol, Sequence, runtime_checkable

from .models import (
    NetworkEndpoint,
    NetworkEndpointGroup,
    NetworkEndpointWithHealthStatus,
    ResourceKey,
    Version,
)


@runtime_checkable
class ZoneGetter(Protocol):
    """Resolves nodes to the zones they run in."""

    def list_zones(self) -> List[str]:
        """Return every known zone. Order is not significant."""
        ...

    def get_zone_for_node(self, name: str) -> str:
        """Return the zone of a node; raise a 404 ApiException if unknown."""
        ...


@runtime_checkable
class NetworkEndpointGroupCloud(Protocol):
    """The full NEG surface a controller may call."""

    def get_network_endpoint_group(
        self, name: str, zone: str, version: Version
    ) -> NetworkEndpointGroup:
        ...

    def list_network_endpoint_groups(
        self, zone: str, version: Version
    ) -> List[NetworkEndpointGroup]:
        ...

    def aggregated_list_network_endpoint_groups(
        self, version: Version
    ) -> Dict[ResourceKey, NetworkEndpointGroup]:
        ...

    def create_network_endpoint_group(
        self, neg: NetworkEndpointGroup, zone: str
    ) -> None:
        ...

    def delete_network_endpoint_group(
        self, name: str, zone: str, version: Version
    ) -> None:
        ...

    def attach_network_endpoints(
        self,
        name: str,
        zone: str,
        endpoints: Sequence[NetworkEndpoint],
        version: Version,
    ) -> None:
        ...

    def detach_network_endpoints(
        self,
        name: str,
        zone: str,
        endpoints: Sequence[NetworkEndpoint],
        version: Version,
    ) -> None:
        ...

    def list_network_endpoints(
        self, name: str, zone: str, show_health_status: bool, version: Version
    ) -> List[NetworkEndpointWithHealthStatus]:
        ...

    def network_url(self) -> str:
        ...

    def subnetwork_url(self) -> str:
        ...

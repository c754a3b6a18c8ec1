"""An in-memory fake of a zoned Network Endpoint Group cloud for controller tests."""

__version__ = "0.1.0"

from .config import CloudConfig, ConfigurationError, ZoneConfig
from .errors import ConflictError, InvalidArgumentError, NotFoundError, is_not_found
from .interfaces import NetworkEndpointGroupCloud, ZoneGetter
from .mock import MockNetworkEndpointGroups, mock_negs, patch_negs
from .models import (
    HealthStatusForNetworkEndpoint,
    NetworkEndpoint,
    NetworkEndpointGroup,
    NetworkEndpointWithHealthStatus,
    ResourceKey,
    Version,
    endpoint_for_pod,
    self_link,
)
from .neg_cloud import FakeNetworkEndpointGroupCloud
from .zone_getter import FakeZoneGetter

__all__ = [
    "MockNetworkEndpointGroups",
    "mock_negs",
    "patch_negs",
    "FakeNetworkEndpointGroupCloud",
    "FakeZoneGetter",
    "NetworkEndpointGroupCloud",
    "ZoneGetter",
    "CloudConfig",
    "ZoneConfig",
    "ConfigurationError",
    "NotFoundError",
    "ConflictError",
    "InvalidArgumentError",
    "is_not_found",
    "NetworkEndpoint",
    "NetworkEndpointGroup",
    "NetworkEndpointWithHealthStatus",
    "HealthStatusForNetworkEndpoint",
    "ResourceKey",
    "Version",
    "endpoint_for_pod",
    "self_link",
]

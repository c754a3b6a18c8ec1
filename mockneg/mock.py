"""
Main mockneg interface for easy integration with tests.

This module bundles a fake NEG cloud and a fake zone getter into one
environment that can be used as a context manager, a decorator, or started
and stopped explicitly. Factories in the code under test can be patched to
hand out the fakes while the environment is active.
"""

import inspect
from contextlib import contextmanager
from typing import Any, Dict, Generator, List, Optional
from unittest.mock import patch

from kubernetes import client as k8s_client

from .config import CloudConfig, ZoneConfig
from .models import (
    NetworkEndpoint,
    NetworkEndpointGroup,
    NetworkEndpointWithHealthStatus,
)
from .neg_cloud import FakeNetworkEndpointGroupCloud
from .zone_getter import FakeZoneGetter

CLOUD = "cloud"
ZONES = "zones"


class MockNetworkEndpointGroups:
    """
    A complete fake NEG environment: one cloud and one zone getter.

    This can be used as a context manager or with explicit start/stop methods.
    """

    def __init__(
        self,
        initial_state: Optional[Dict[str, Any]] = None,
        cloud_config: Optional[CloudConfig] = None,
        zone_config: Optional[ZoneConfig] = None,
        patch_targets: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize MockNetworkEndpointGroups.

        Args:
            initial_state: Optional dictionary defining initial cloud state.
                          Format: {
                              'nodes': [node_dict1, ...],
                              'network_endpoint_groups': [
                                  {'name': 'neg-a', 'zone': 'zone1', ...}, ...
                              ],
                              'network_endpoints': [
                                  {'name': 'neg-a', 'zone': 'zone1',
                                   'endpoints': [endpoint_dict1, ...]}, ...
                              ],
                          }
                          Nodes build the zone table from their zone labels
                          and cannot be combined with zone_config.
            cloud_config: Project, network URLs and self-link version.
            zone_config: Zone membership table. Defaults to the two-zone
                         test topology.
            patch_targets: Dotted paths of factories in the code under test,
                           each mapped to "cloud" or "zones". While active,
                           calling a patched factory returns the matching fake.
        """
        for target, kind in (patch_targets or {}).items():
            if kind not in (CLOUD, ZONES):
                raise ValueError(
                    f"patch target {target} must map to {CLOUD!r} or {ZONES!r}: {kind}"
                )

        if zone_config is not None and "nodes" in (initial_state or {}):
            raise ValueError(
                "initial_state nodes and zone_config are mutually exclusive"
            )

        self.cloud = FakeNetworkEndpointGroupCloud(cloud_config)
        self.zone_getter = FakeZoneGetter(zone_config)
        self.patch_targets = dict(patch_targets or {})
        self.patches = []
        self._is_active = False

        if initial_state:
            self._load_initial_state(initial_state)

    def start(self) -> None:
        """Start patching the configured factories."""
        if self._is_active:
            return

        for target, kind in self.patch_targets.items():
            if kind == CLOUD:
                factory = lambda *args, **kwargs: self.cloud
            else:
                factory = lambda *args, **kwargs: self.zone_getter
            target_patch = patch(target, factory)
            self.patches.append(target_patch)
            target_patch.start()

        self._is_active = True

    def stop(self) -> None:
        """Stop patching."""
        if not self._is_active:
            return

        for patch_obj in self.patches:
            patch_obj.stop()
        self.patches.clear()
        self._is_active = False

    def reset(self) -> None:
        """Reset the cloud state to empty. The zone table is kept."""
        self.cloud.reset()

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()

    def _load_initial_state(self, initial_state: Dict[str, Any]) -> None:
        """Load initial state from configuration."""
        # Nodes first, so the zone table is in place before anything else
        if "nodes" in initial_state:
            self._load_nodes(initial_state["nodes"])
        if "network_endpoint_groups" in initial_state:
            self._load_network_endpoint_groups(initial_state["network_endpoint_groups"])
        if "network_endpoints" in initial_state:
            self._load_network_endpoints(initial_state["network_endpoints"])

    def _load_nodes(self, nodes_data: list) -> None:
        """Replace the zone table with one derived from node dicts."""
        nodes = []
        for node_data in nodes_data:
            metadata = k8s_client.V1ObjectMeta(**node_data.get("metadata", {}))
            nodes.append(k8s_client.V1Node(metadata=metadata))
        self.zone_getter = FakeZoneGetter.from_nodes(nodes)

    def _load_network_endpoint_groups(self, negs_data: list) -> None:
        """Create NEGs from configuration data."""
        for neg_data in negs_data:
            fields = dict(neg_data)
            zone = fields.pop("zone")
            self.cloud.create_network_endpoint_group(
                NetworkEndpointGroup(**fields), zone
            )

    def _load_network_endpoints(self, endpoints_data: list) -> None:
        """Attach endpoints from configuration data."""
        for entry in endpoints_data:
            endpoints = [NetworkEndpoint(**ne) for ne in entry.get("endpoints", [])]
            self.cloud.attach_network_endpoints(entry["name"], entry["zone"], endpoints)

    # Convenience methods for accessing state
    def get_network_endpoint_groups(self, zone: str) -> List[NetworkEndpointGroup]:
        """Get the NEGs in a zone."""
        return self.cloud.list_network_endpoint_groups(zone)

    def get_network_endpoints(self, name: str, zone: str) -> List[NetworkEndpoint]:
        """Get the bare endpoints attached to a NEG."""
        listed: List[NetworkEndpointWithHealthStatus] = (
            self.cloud.list_network_endpoints(name, zone)
        )
        return [entry.network_endpoint for entry in listed]


# Convenience functions for common usage patterns
@contextmanager
def mock_negs(
    initial_state: Optional[Dict[str, Any]] = None,
    cloud_config: Optional[CloudConfig] = None,
    zone_config: Optional[ZoneConfig] = None,
    patch_targets: Optional[Dict[str, str]] = None,
) -> Generator[MockNetworkEndpointGroups, None, None]:
    """
    Context manager for a fake NEG environment.

    Usage:
        with mock_negs() as negs:
            negs.cloud.create_network_endpoint_group(
                NetworkEndpointGroup(name="neg-a"), "zone1"
            )
    """
    env = MockNetworkEndpointGroups(
        initial_state, cloud_config, zone_config, patch_targets
    )
    with env:
        yield env


def patch_negs(
    initial_state: Optional[Dict[str, Any]] = None,
    cloud_config: Optional[CloudConfig] = None,
    zone_config: Optional[ZoneConfig] = None,
    patch_targets: Optional[Dict[str, str]] = None,
):
    """
    Decorator running a test function inside a fake NEG environment.

    Usage:
        @patch_negs()
        def test_my_function(negs):
            # negs is the active MockNetworkEndpointGroups
            pass
    """

    def decorator(func):
        def wrapper(*args, **kwargs):
            with mock_negs(
                initial_state, cloud_config, zone_config, patch_targets
            ) as env:
                # Add env as first argument if function accepts it
                sig = inspect.signature(func)
                if len(sig.parameters) > len(args):
                    return func(env, *args, **kwargs)
                return func(*args, **kwargs)

        return wrapper

    return decorator

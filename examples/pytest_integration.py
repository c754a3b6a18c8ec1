#!/usr/bin/env python3
"""
Pytest integration examples for mockneg.

This file demonstrates different ways to integrate mockneg with pytest
for testing NEG controllers.
"""

import pytest

from mockneg import (
    MockNetworkEndpointGroups,
    NetworkEndpoint,
    NetworkEndpointGroup,
    NotFoundError,
    ZoneConfig,
    mock_negs,
    patch_negs,
)


# Example 1: Using context manager directly in tests
def test_direct_context_manager():
    """Test using mock_negs context manager directly."""
    with mock_negs() as negs:
        neg = NetworkEndpointGroup(name="neg-a")
        negs.cloud.create_network_endpoint_group(neg, "zone1")
        assert negs.cloud.get_network_endpoint_group("neg-a", "zone1").self_link


# Example 2: Using decorator
@patch_negs()
def test_with_decorator(negs):
    """Test using @patch_negs decorator."""
    assert negs.get_network_endpoint_groups("zone1") == []


# Example 3: Using pytest fixtures
@pytest.fixture
def neg_cloud():
    """Provide a clean fake NEG environment for each test."""
    with MockNetworkEndpointGroups() as negs:
        yield negs


@pytest.fixture
def neg_cloud_with_data():
    """Provide a fake NEG environment with pre-loaded NEGs."""
    initial_state = {
        "network_endpoint_groups": [{"name": "existing-neg", "zone": "zone1"}],
        "network_endpoints": [
            {
                "name": "existing-neg",
                "zone": "zone1",
                "endpoints": [
                    {"ip_address": "10.0.0.1", "port": 80, "instance": "instance1"}
                ],
            }
        ],
    }

    with MockNetworkEndpointGroups(initial_state) as negs:
        yield negs


def test_with_clean_fixture(neg_cloud):
    """Test using a clean fixture."""
    assert neg_cloud.cloud.aggregated_list_network_endpoint_groups() == {}


def test_with_preloaded_fixture(neg_cloud_with_data):
    """Test using a pre-loaded fixture."""
    assert neg_cloud_with_data.get_network_endpoints("existing-neg", "zone1") == [
        NetworkEndpoint(ip_address="10.0.0.1", port=80, instance="instance1")
    ]


# Example 4: Custom zone topology
def test_custom_topology():
    """Test against a three-zone cluster."""
    zones = ZoneConfig(zones={"us-a": ["n1"], "us-b": ["n2"], "us-c": ["n3"]})
    with mock_negs(zone_config=zones) as negs:
        assert negs.zone_getter.get_zone_for_node("n3") == "us-c"


# Example 5: Error handling
def test_missing_neg(neg_cloud):
    """Test that missing NEGs raise 404s."""
    with pytest.raises(NotFoundError):
        neg_cloud.cloud.delete_network_endpoint_group("missing", "zone1")

#!/usr/bin/env python3
"""
Basic usage examples for mockneg.

This file demonstrates how to use the fake NEG cloud and zone getter the way
a NEG controller would while under test.
"""

from kubernetes.client.rest import ApiException

from mockneg import NetworkEndpoint, NetworkEndpointGroup, Version, mock_negs


def example_neg_lifecycle():
    """Example: create a NEG, attach and detach endpoints, delete it."""
    print("=== NEG Lifecycle ===")

    with mock_negs() as negs:
        cloud = negs.cloud

        neg = NetworkEndpointGroup(name="k8s1-default-web-80", default_port=80)
        cloud.create_network_endpoint_group(neg, "zone1")
        print(f"Created NEG: {neg.name}")
        print(f"Self link: {neg.self_link}")

        e1 = NetworkEndpoint(ip_address="10.0.0.1", port=80, instance="instance1")
        e2 = NetworkEndpoint(ip_address="10.0.0.2", port=80, instance="instance2")
        cloud.attach_network_endpoints(neg.name, "zone1", [e1, e2], Version.GA)

        listed = cloud.list_network_endpoints(neg.name, "zone1", True, Version.GA)
        for entry in listed:
            health = entry.healths[0].health_state
            print(f"Endpoint {entry.network_endpoint.ip_address}: {health}")

        cloud.detach_network_endpoints(neg.name, "zone1", [e1], Version.GA)
        remaining = negs.get_network_endpoints(neg.name, "zone1")
        print(f"Endpoints after detach: {len(remaining)}")

        cloud.delete_network_endpoint_group(neg.name, "zone1", Version.GA)
        try:
            cloud.get_network_endpoint_group(neg.name, "zone1", Version.GA)
        except ApiException as e:
            print(f"NEG gone, get returned {e.status}")


def example_zones():
    """Example: resolving nodes to zones."""
    print("\n=== Zones ===")

    with mock_negs() as negs:
        for zone in sorted(negs.zone_getter.list_zones()):
            print(f"Zone: {zone}")
        print(f"instance3 is in {negs.zone_getter.get_zone_for_node('instance3')}")


def example_aggregated_list():
    """Example: listing NEGs across every zone."""
    print("\n=== Aggregated List ===")

    initial_state = {
        "network_endpoint_groups": [
            {"name": "neg-a", "zone": "zone1"},
            {"name": "neg-b", "zone": "zone1"},
            {"name": "neg-a", "zone": "zone2"},
        ]
    }
    with mock_negs(initial_state) as negs:
        aggregated = negs.cloud.aggregated_list_network_endpoint_groups()
        for key in sorted(aggregated, key=str):
            print(f"{key}: {aggregated[key].self_link}")


if __name__ == "__main__":
    example_neg_lifecycle()
    example_zones()
    example_aggregated_list()

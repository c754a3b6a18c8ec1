"""
Test the fake NEG cloud.

These tests verify that FakeNetworkEndpointGroupCloud reproduces the
behavior controllers rely on: self-links, 404s, zone partitioning and
endpoint set semantics.
"""

import threading

import pytest
from kubernetes.client.rest import ApiException

from mockneg import (
    CloudConfig,
    ConflictError,
    FakeNetworkEndpointGroupCloud,
    NetworkEndpoint,
    NetworkEndpointGroup,
    NetworkEndpointGroupCloud,
    NotFoundError,
    ResourceKey,
    Version,
)

E1 = NetworkEndpoint(ip_address="10.0.0.1", port=8080, instance="instance1")
E2 = NetworkEndpoint(ip_address="10.0.0.2", port=8080, instance="instance2")
E3 = NetworkEndpoint(ip_address="10.0.0.3", port=8080, instance="instance1")


@pytest.fixture
def cloud():
    """Provide an empty fake cloud for each test."""
    return FakeNetworkEndpointGroupCloud(
        CloudConfig(
            network_url="global/networks/test-network",
            subnetwork_url="regions/us-central1/subnetworks/test-subnetwork",
        )
    )


def test_satisfies_cloud_interface(cloud):
    """Test that the fake can stand in for a real NEG client."""
    assert isinstance(cloud, NetworkEndpointGroupCloud)


def test_end_to_end_endpoint_lifecycle(cloud):
    """Test create, attach, detach and delete of a NEG."""
    cloud.create_network_endpoint_group(NetworkEndpointGroup(name="neg-a"), "zone1")
    cloud.attach_network_endpoints("neg-a", "zone1", [E1, E2])

    listed = cloud.list_network_endpoints("neg-a", "zone1", False)
    assert [entry.network_endpoint for entry in listed] == [E1, E2]

    cloud.detach_network_endpoints("neg-a", "zone1", [E1])
    listed = cloud.list_network_endpoints("neg-a", "zone1", False)
    assert [entry.network_endpoint for entry in listed] == [E2]

    cloud.delete_network_endpoint_group("neg-a", "zone1")
    with pytest.raises(NotFoundError):
        cloud.get_network_endpoint_group("neg-a", "zone1")


def test_create_assigns_self_link(cloud):
    """Test that creation mutates the caller's object in place."""
    neg = NetworkEndpointGroup(name="neg-a")
    cloud.create_network_endpoint_group(neg, "zone1")

    assert neg.self_link == (
        "https://www.googleapis.com/compute/alpha"
        "/projects/mock-project/zones/zone1/networkEndpointGroups/neg-a"
    )
    assert neg.zone == "zone1"
    assert neg.network == "global/networks/test-network"
    assert neg.subnetwork == "regions/us-central1/subnetworks/test-subnetwork"
    assert neg.creation_timestamp is not None
    assert cloud.get_network_endpoint_group("neg-a", "zone1") is neg


def test_self_link_is_deterministic():
    """Test that two fakes produce the same self-link for the same inputs."""
    links = []
    for _ in range(2):
        cloud = FakeNetworkEndpointGroupCloud(
            CloudConfig(project="p1", self_link_version=Version.GA)
        )
        neg = NetworkEndpointGroup(name="neg-a")
        cloud.create_network_endpoint_group(neg, "zone2")
        links.append(neg.self_link)

    assert links[0] == links[1]
    assert links[0] == (
        "https://www.googleapis.com/compute/v1"
        "/projects/p1/zones/zone2/networkEndpointGroups/neg-a"
    )
    assert ResourceKey.from_self_link(links[0]) == ResourceKey(
        name="neg-a", zone="zone2"
    )


def test_recreating_stored_object_conflicts(cloud):
    """Test that a stored NEG cannot be created again in another zone."""
    neg = NetworkEndpointGroup(name="neg-a")
    cloud.create_network_endpoint_group(neg, "zone1")
    link = neg.self_link

    with pytest.raises(ConflictError) as exc_info:
        cloud.create_network_endpoint_group(neg, "zone2")

    assert exc_info.value.status == 409
    stored = cloud.get_network_endpoint_group("neg-a", "zone1")
    assert stored.self_link == link
    assert stored.self_link.endswith("/zones/zone1/networkEndpointGroups/neg-a")
    assert stored.zone == "zone1"
    assert cloud.list_network_endpoint_groups("zone2") == []
    with pytest.raises(NotFoundError):
        cloud.list_network_endpoints("neg-a", "zone2", False)


def test_create_duplicate_conflicts(cloud):
    """Test that a second NEG with the same name in a zone is rejected."""
    first = NetworkEndpointGroup(name="neg-a")
    cloud.create_network_endpoint_group(first, "zone1")

    with pytest.raises(ConflictError) as exc_info:
        cloud.create_network_endpoint_group(NetworkEndpointGroup(name="neg-a"), "zone1")

    assert exc_info.value.status == 409
    assert cloud.list_network_endpoint_groups("zone1") == [first]


def test_same_name_in_different_zones(cloud):
    """Test that names only need to be unique within a zone."""
    cloud.create_network_endpoint_group(NetworkEndpointGroup(name="neg-a"), "zone1")
    cloud.create_network_endpoint_group(NetworkEndpointGroup(name="neg-a"), "zone2")

    assert cloud.get_network_endpoint_group("neg-a", "zone1").zone == "zone1"
    assert cloud.get_network_endpoint_group("neg-a", "zone2").zone == "zone2"


def test_zone_isolation(cloud):
    """Test that a NEG is invisible from other zones."""
    cloud.create_network_endpoint_group(NetworkEndpointGroup(name="neg-a"), "zone1")

    assert cloud.list_network_endpoint_groups("zone2") == []
    with pytest.raises(NotFoundError):
        cloud.get_network_endpoint_group("neg-a", "zone2")
    with pytest.raises(NotFoundError):
        cloud.list_network_endpoints("neg-a", "zone2", False)


def test_get_missing_raises_404(cloud):
    """Test that misses look like a 404 from the real API."""
    with pytest.raises(ApiException) as exc_info:
        cloud.get_network_endpoint_group("missing", "zone1", Version.BETA)

    assert exc_info.value.status == 404


def test_list_unknown_zone_is_empty(cloud):
    """Test that listing an unknown zone returns an empty list."""
    assert cloud.list_network_endpoint_groups("nowhere") == []


def test_list_returns_copy(cloud):
    """Test that mutating a listed result does not change the store."""
    cloud.create_network_endpoint_group(NetworkEndpointGroup(name="neg-a"), "zone1")

    negs = cloud.list_network_endpoint_groups("zone1")
    negs.clear()

    assert len(cloud.list_network_endpoint_groups("zone1")) == 1


def test_delete_removes_endpoints(cloud):
    """Test that deleting a NEG also drops its endpoints."""
    cloud.create_network_endpoint_group(NetworkEndpointGroup(name="neg-a"), "zone1")
    cloud.attach_network_endpoints("neg-a", "zone1", [E1])

    cloud.delete_network_endpoint_group("neg-a", "zone1")

    with pytest.raises(NotFoundError):
        cloud.get_network_endpoint_group("neg-a", "zone1")
    with pytest.raises(NotFoundError):
        cloud.list_network_endpoints("neg-a", "zone1", False)
    assert cloud.list_network_endpoint_groups("zone1") == []


def test_delete_missing_raises_not_found(cloud):
    """Test deleting a NEG that was never created."""
    cloud.create_network_endpoint_group(NetworkEndpointGroup(name="neg-a"), "zone1")

    with pytest.raises(NotFoundError):
        cloud.delete_network_endpoint_group("neg-b", "zone1")
    with pytest.raises(NotFoundError):
        cloud.delete_network_endpoint_group("neg-a", "zone2")

    # The existing NEG is untouched
    assert cloud.get_network_endpoint_group("neg-a", "zone1").name == "neg-a"


def test_empty_neg_lists_no_endpoints(cloud):
    """Test that an existing NEG without endpoints is not a 404."""
    cloud.create_network_endpoint_group(NetworkEndpointGroup(name="neg-a"), "zone1")

    assert cloud.list_network_endpoints("neg-a", "zone1", False) == []


def test_attach_without_neg_creates_endpoint_list(cloud):
    """Test that attaching to an untracked NEG starts a new endpoint list."""
    cloud.attach_network_endpoints("neg-x", "zone1", [E1])

    listed = cloud.list_network_endpoints("neg-x", "zone1", False)
    assert [entry.network_endpoint for entry in listed] == [E1]
    with pytest.raises(NotFoundError):
        cloud.get_network_endpoint_group("neg-x", "zone1")


def test_detach_removes_all_matches(cloud):
    """Test that duplicate values are all removed by one detach."""
    cloud.create_network_endpoint_group(NetworkEndpointGroup(name="neg-a"), "zone1")
    cloud.attach_network_endpoints("neg-a", "zone1", [E1, E2, E1, E3])

    cloud.detach_network_endpoints("neg-a", "zone1", [E1, E3])

    listed = cloud.list_network_endpoints("neg-a", "zone1", False)
    assert [entry.network_endpoint for entry in listed] == [E2]


def test_detach_matches_by_value(cloud):
    """Test that a separately built but equal endpoint is detached."""
    cloud.create_network_endpoint_group(NetworkEndpointGroup(name="neg-a"), "zone1")
    cloud.attach_network_endpoints("neg-a", "zone1", [E1])

    same_as_e1 = NetworkEndpoint(ip_address="10.0.0.1", port=8080, instance="instance1")
    cloud.detach_network_endpoints("neg-a", "zone1", [same_as_e1])

    assert cloud.list_network_endpoints("neg-a", "zone1", False) == []


def test_detach_after_delete_stays_not_found(cloud):
    """Test that detaching from a deleted NEG does not bring back its endpoints."""
    cloud.create_network_endpoint_group(NetworkEndpointGroup(name="neg-a"), "zone1")
    cloud.attach_network_endpoints("neg-a", "zone1", [E1])
    cloud.delete_network_endpoint_group("neg-a", "zone1")

    cloud.detach_network_endpoints("neg-a", "zone1", [E1])

    with pytest.raises(NotFoundError):
        cloud.list_network_endpoints("neg-a", "zone1", False)


def test_detach_from_unknown_neg_is_noop(cloud):
    """Test that detaching from a NEG that never existed tracks nothing."""
    cloud.detach_network_endpoints("never", "zone1", [E1])

    with pytest.raises(NotFoundError):
        cloud.list_network_endpoints("never", "zone1", False)
    assert cloud.aggregated_list_network_endpoint_groups() == {}


def test_detach_missing_endpoint_is_noop(cloud):
    """Test that detaching endpoints that were never attached is not an error."""
    cloud.create_network_endpoint_group(NetworkEndpointGroup(name="neg-a"), "zone1")
    cloud.attach_network_endpoints("neg-a", "zone1", [E1])

    cloud.detach_network_endpoints("neg-a", "zone1", [E2, E3])

    listed = cloud.list_network_endpoints("neg-a", "zone1", False)
    assert [entry.network_endpoint for entry in listed] == [E1]


def test_list_endpoints_with_health(cloud):
    """Test that health is only reported when requested."""
    cloud.create_network_endpoint_group(NetworkEndpointGroup(name="neg-a"), "zone1")
    cloud.attach_network_endpoints("neg-a", "zone1", [E1])

    without_health = cloud.list_network_endpoints("neg-a", "zone1", False)
    with_health = cloud.list_network_endpoints("neg-a", "zone1", True)

    assert without_health[0].healths is None
    assert [h.health_state for h in with_health[0].healths] == ["HEALTHY"]


def test_aggregated_list_is_complete(cloud):
    """Test that the aggregated list equals the union of per-zone lists."""
    for zone, name in [("zone1", "neg-a"), ("zone1", "neg-b"), ("zone2", "neg-a")]:
        cloud.create_network_endpoint_group(NetworkEndpointGroup(name=name), zone)

    aggregated = cloud.aggregated_list_network_endpoint_groups()

    assert len(aggregated) == 3
    per_zone = cloud.list_network_endpoint_groups(
        "zone1"
    ) + cloud.list_network_endpoint_groups("zone2")
    assert sorted(id(neg) for neg in aggregated.values()) == sorted(
        id(neg) for neg in per_zone
    )
    for key, neg in aggregated.items():
        assert key == ResourceKey(name=neg.name, zone=neg.zone)
        assert cloud.get_network_endpoint_group(key.name, key.zone) is neg


def test_network_urls(cloud):
    """Test that configured URLs are returned verbatim."""
    assert cloud.network_url() == "global/networks/test-network"
    assert cloud.subnetwork_url() == "regions/us-central1/subnetworks/test-subnetwork"


def test_concurrent_attach_loses_no_updates(cloud):
    """Test that concurrent attaches to one NEG all land."""
    cloud.create_network_endpoint_group(NetworkEndpointGroup(name="neg-a"), "zone1")
    count = 200
    barrier = threading.Barrier(count)

    def attach(i):
        barrier.wait()
        endpoint = NetworkEndpoint(ip_address=f"10.1.{i // 256}.{i % 256}", port=80)
        cloud.attach_network_endpoints("neg-a", "zone1", [endpoint])

    threads = [threading.Thread(target=attach, args=(i,)) for i in range(count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    listed = cloud.list_network_endpoints("neg-a", "zone1", False)
    assert len(listed) == count
    assert len({entry.network_endpoint for entry in listed}) == count


def test_reset_clears_state(cloud):
    """Test that reset drops NEGs and endpoints."""
    cloud.create_network_endpoint_group(NetworkEndpointGroup(name="neg-a"), "zone1")

    cloud.reset()

    assert cloud.aggregated_list_network_endpoint_groups() == {}
    with pytest.raises(NotFoundError):
        cloud.list_network_endpoints("neg-a", "zone1", False)

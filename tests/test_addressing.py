import pytest

from core.addressing import NO_NETWORK, build_url

BASE = "http://coord:8888/v1"


def test_empty_network_maps_to_sentinel():
    assert build_url(BASE, "", "config") == f"{BASE}/_/config"
    assert build_url(BASE, "", "config") == build_url(BASE, NO_NETWORK, "config")


@pytest.mark.parametrize("network", ["foo", "net-a", "_", "x.y"])
def test_leading_separator_is_optional(network):
    parts = ("leases", "10.1.2.0-24")
    assert build_url(BASE, network, *parts) == build_url(BASE, "/" + network, *parts)


def test_parts_are_appended_in_order():
    assert build_url(BASE, "foo", "leases", "10.1.2.0-24") == f"{BASE}/foo/leases/10.1.2.0-24"


def test_no_parts():
    assert build_url(BASE, "foo") == f"{BASE}/foo"


def test_duplicate_separators_are_collapsed():
    assert build_url(BASE, "//foo", "/leases//", "") == f"{BASE}/foo/leases"
    assert build_url(BASE, "foo/", "config") == f"{BASE}/foo/config"


def test_trailing_slash_of_last_part_is_kept():
    assert build_url(BASE, "foo", "leases/") == f"{BASE}/foo/leases/"
    assert build_url(BASE, "", "leases/") == f"{BASE}/_/leases/"


def test_dot_segments_are_cleaned():
    assert build_url(BASE, "foo", "./leases", "../config") == f"{BASE}/foo/config"

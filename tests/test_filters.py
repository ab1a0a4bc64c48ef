import pytest

from trafficreplay.capture.filters import (
    EngineType,
    InterfaceInfo,
    afpacket_compute_size,
    build_filter,
    hosts_filter,
    interface_addresses,
    is_device,
    link_type_length,
    listen_all,
    ports_filter,
)

LO = InterfaceInfo(name="lo", addresses=("127.0.0.1", "::1"))


@pytest.mark.parametrize("name", ["libpcap", "pcap_file", "raw_socket", "af_packet"])
def test_engine_round_trip(name):
    assert str(EngineType.parse(name)) == name


def test_engine_empty_is_pcap():
    assert EngineType.parse("") is EngineType.PCAP


def test_engine_invalid():
    with pytest.raises(ValueError, match="invalid engine bogus"):
        EngineType.parse("bogus")


@pytest.mark.parametrize("addr", ["", "0.0.0.0", "[::]", "::"])
def test_listen_all_true(addr):
    assert listen_all(addr) is True


def test_listen_all_false():
    assert listen_all("127.0.0.1") is False


def test_is_device():
    assert is_device("lo", LO)
    assert is_device("::1", LO)
    assert not is_device("10.0.0.1", LO)


def test_interface_addresses():
    assert interface_addresses(LO) == list(LO.addresses)


def test_ports_filter_all_ports():
    assert ports_filter("tcp", "dst", []) == "tcp dst portrange 0-65535"
    assert ports_filter("tcp", "dst", [0]) == ports_filter("tcp", "dst", [])


def test_ports_filter_listed():
    assert ports_filter("tcp", "src", [80, 443]) == "tcp src port 80 or tcp src port 443"


def test_hosts_filter():
    assert hosts_filter("dst", ["a", "b"]) == "dst host a or dst host b"


def test_build_filter_single_host():
    expr = build_filter("10.0.0.5", [8080], iface=LO)
    assert expr == f"(({ports_filter('tcp', 'dst', [8080])}) and ({hosts_filter('dst', ['10.0.0.5'])}))"


def test_build_filter_device_uses_interface_addresses():
    expr = build_filter("lo", [80], iface=LO)
    assert hosts_filter("dst", list(LO.addresses)) in expr
    assert "lo" not in expr.replace("host", "")


def test_build_filter_localhost_normalised():
    assert build_filter("localhost", [80], iface=InterfaceInfo()) == build_filter(
        "127.0.0.1", [80], iface=InterfaceInfo()
    )


def test_build_filter_no_hosts_for_file():
    assert build_filter("", [80], iface=None) == f"({ports_filter('tcp', 'dst', [80])})"


def test_build_filter_tracks_responses():
    request_only = build_filter("10.0.0.5", [80], iface=LO)
    both = build_filter("10.0.0.5", [80], track_response=True, iface=LO)
    assert both.startswith(request_only + " or ")
    assert ports_filter("tcp", "src", [80]) in both
    assert hosts_filter("src", ["10.0.0.5"]) in both


@pytest.mark.parametrize(
    "link_type,expected",
    [(1, 14), (0, 4), (108, 4), (101, 0), (12, 0), (14, 0), (228, 0), (229, 0), (113, 16), (10, 13), (226, 24)],
)
def test_link_type_length(link_type, expected):
    assert link_type_length(link_type) == expected


def test_link_type_unknown():
    assert link_type_length(9999) is None


def test_afpacket_compute_size_invariants():
    page = 4096
    frame, block, count = afpacket_compute_size(32, 32 << 10, page)
    target = 32 * 1024 * 1024
    assert frame > 32 << 10
    assert frame % page == 0
    assert block == frame * 128
    assert count * block <= target < (count + 1) * block


def test_afpacket_small_snaplen():
    page = 4096
    frame, block, count = afpacket_compute_size(32, 1500, page)
    assert frame >= 1500
    assert page % frame == 0
    assert block % page == 0


def test_afpacket_too_small():
    with pytest.raises(ValueError, match="too small"):
        afpacket_compute_size(0, 32 << 10, 4096)
import socket
from collections import namedtuple
from unittest.mock import MagicMock, patch

import psutil

from dog_watcher.core.template import first_external_ipv4, resolve

Addr = namedtuple("Addr", "family address netmask broadcast ptp")


def addr(family, address):
    return Addr(family, address, None, None, None)


INTERFACES = {
    "lo": [addr(socket.AF_INET, "127.0.0.1"), addr(socket.AF_INET6, "::1")],
    "eth0": [
        addr(psutil.AF_LINK, "02:42:ac:11:00:02"),
        addr(socket.AF_INET6, "fe80::42:acff:fe11:2"),
        addr(socket.AF_INET, "10.0.0.5"),
    ],
    "eth1": [addr(socket.AF_INET, "192.168.1.20")],
}


def test_first_external_ipv4_skips_loopback_and_other_families():
    assert first_external_ipv4(INTERFACES) == "10.0.0.5"


def test_first_external_ipv4_returns_none_without_external_address():
    assert first_external_ipv4({"lo": [addr(socket.AF_INET, "127.0.0.1")]}) is None


def test_first_external_ipv4_reads_host_interfaces_by_default():
    with patch("dog_watcher.core.template.psutil.net_if_addrs", return_value=INTERFACES) as net_if_addrs:
        assert first_external_ipv4() == "10.0.0.5"

    net_if_addrs.assert_called_once()


def test_resolve_substitutes_address():
    resolved = resolve("Backup from {IP}", address_lookup=lambda: "10.0.0.5")

    assert resolved == "Backup from 10.0.0.5"
    assert "{IP}" not in resolved


def test_resolve_only_replaces_first_placeholder():
    assert resolve("{IP} and {IP}", address_lookup=lambda: "10.0.0.5") == "10.0.0.5 and {IP}"


def test_resolve_leaves_placeholder_when_no_address():
    logger = MagicMock()

    assert resolve("Backup from {IP}", address_lookup=lambda: None, logger=logger) == "Backup from {IP}"
    logger.warning.assert_called_once()


def test_resolve_without_placeholder_does_not_look_up_address():
    lookup = MagicMock()

    assert resolve("Nightly backup", address_lookup=lookup) == "Nightly backup"
    lookup.assert_not_called()

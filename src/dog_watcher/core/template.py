#!/usr/bin/env python3
"""
Commit message template resolution
"""

import ipaddress
import socket
from typing import Callable, Dict, List, Optional, Any
import logging

import psutil

IP_PLACEHOLDER = "{IP}"


def first_external_ipv4(interfaces: Optional[Dict[str, List[Any]]] = None) -> Optional[str]:
    """Return the first IPv4 address of the host that is not loopback, or None"""
    if interfaces is None:
        interfaces = psutil.net_if_addrs()

    for addresses in interfaces.values():
        for addr in addresses:
            if addr.family != socket.AF_INET:
                continue
            try:
                if ipaddress.ip_address(addr.address).is_loopback:
                    continue
            except ValueError:
                continue
            return addr.address

    return None


def resolve(template: str,
            address_lookup: Callable[[], Optional[str]] = first_external_ipv4,
            logger: Optional[logging.Logger] = None) -> str:
    """Substitute the host address for the first {IP} placeholder.

    When no external address can be found the placeholder is left as is.
    """
    if IP_PLACEHOLDER not in template:
        return template

    address = address_lookup()
    if address is None:
        (logger or logging.getLogger("dog-watcher")).warning(
            f"No external IPv4 address found, leaving {IP_PLACEHOLDER} unresolved"
        )
        return template

    return template.replace(IP_PLACEHOLDER, address, 1)

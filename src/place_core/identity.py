"""Pixel Place - Rate-limit identity buckets.

A globally routable IPv6 client is normally handed a /64 (or larger), so the
bucket for such an address is its /64 prefix. Everything else (IPv4, private,
link-local and special-purpose IPv6) is bucketed by the exact address.

The global classification is hardcoded instead of delegating to
``ipaddress.IPv6Address.is_global``, whose special-purpose table changes
between Python releases.
"""
from __future__ import annotations

import ipaddress
from typing import Union

from place_core.protocol import IPV6_BUCKET_PREFIX

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]
IdentityKey = Union[ipaddress.IPv4Address, ipaddress.IPv6Address, str]

_HOST_MASK = (1 << (128 - IPV6_BUCKET_PREFIX)) - 1

# Anycast addresses inside 2001::/23 that are globally reachable
_PCP_ANYCAST = int(ipaddress.IPv6Address("2001:1::1"))
_TURN_ANYCAST = int(ipaddress.IPv6Address("2001:1::2"))


def _segments(ip: ipaddress.IPv6Address) -> tuple[int, ...]:
    n = int(ip)
    return tuple((n >> (112 - 16 * i)) & 0xFFFF for i in range(8))


def _is_global_ietf_exception(ip: ipaddress.IPv6Address, s: tuple[int, ...]) -> bool:
    return (
        int(ip) in (_PCP_ANYCAST, _TURN_ANYCAST)
        # AMT (2001:3::/32)
        or s[1] == 0x3
        # AS112-v6 (2001:4:112::/48)
        or (s[1] == 0x4 and s[2] == 0x112)
        # ORCHIDv2 (2001:20::/28) and DETs (2001:30::/28)
        or 0x20 <= s[1] <= 0x3F
    )


def is_global_v6(ip: ipaddress.IPv6Address) -> bool:
    s = _segments(ip)
    n = int(ip)
    if n == 0 or n == 1:
        # unspecified, loopback
        return False
    # IPv4-mapped (::ffff:0:0/96)
    if s[:6] == (0, 0, 0, 0, 0, 0xFFFF):
        return False
    # IPv4-IPv6 translation (64:ff9b:1::/48)
    if s[:3] == (0x64, 0xFF9B, 0x1):
        return False
    # Discard-only (100::/64)
    if s[:4] == (0x100, 0, 0, 0):
        return False
    # IETF protocol assignments (2001::/23)
    if s[0] == 0x2001 and s[1] < 0x200 and not _is_global_ietf_exception(ip, s):
        return False
    # 6to4 (2002::/16)
    if s[0] == 0x2002:
        return False
    # Documentation (2001:db8::/32)
    if s[0] == 0x2001 and s[1] == 0xDB8:
        return False
    # Unique local (fc00::/7)
    if s[0] & 0xFE00 == 0xFC00:
        return False
    # Link-local unicast (fe80::/10)
    if s[0] & 0xFFC0 == 0xFE80:
        return False
    return True


def mask_host_identifier(ip: ipaddress.IPv6Address) -> ipaddress.IPv6Address:
    """Zero the low 64 bits, keeping the first four segments."""
    return ipaddress.IPv6Address(int(ip) & ~_HOST_MASK)


def parse_address(address: IPAddress | str) -> IPAddress | None:
    """Parse a transport address. Returns None when it is not an IP address."""
    if isinstance(address, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return address
    text = address.strip()
    if text.startswith("[") and text.endswith("]"):
        text = text[1:-1]
    # Scope ids do not identify a client
    text = text.split("%", 1)[0]
    try:
        return ipaddress.ip_address(text)
    except ValueError:
        return None


def resolve_identity(address: IPAddress | str) -> IdentityKey:
    """Derive the rate-limit bucket key for a caller address."""
    ip = parse_address(address)
    if ip is None:
        return address
    if isinstance(ip, ipaddress.IPv6Address) and is_global_v6(ip):
        return mask_host_identifier(ip)
    return ip

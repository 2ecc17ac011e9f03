"""
Location Resolution Interface

This module defines the strategy used to turn a visitor's source address
into a coarse, best-effort location label stored with each click.

The default CoarseLocationResolver does not perform any lookup: it keeps
the network part of an IPv4 address and masks the rest. A real geolocation
backend can be plugged in by implementing LocationResolver and passing it
to the registry.
"""

import ipaddress
from abc import ABC, abstractmethod
from typing import Optional

LOCAL_LABEL = "Local"
UNKNOWN_LABEL = "Unknown"


class LocationResolver(ABC):
    """
    Abstract base class for location resolvers.

    Implementations must not raise on malformed input: the registry calls
    resolve() on every redirect, before taking its lock.
    """

    @abstractmethod
    def resolve(self, address: Optional[str]) -> str:
        """
        Derive a location label for a source address.

        Args:
            address: Source address of the request (may be None or empty)

        Returns:
            A human readable location label
        """
        pass


class CoarseLocationResolver(LocationResolver):
    """
    Octet-masking placeholder for geolocation.

    - Loopback addresses map to "Local"
    - IPv4 addresses keep their first two octets: "93.184.*.*"
    - Anything else maps to "Unknown"
    """

    def resolve(self, address: Optional[str]) -> str:
        if not address:
            return UNKNOWN_LABEL

        try:
            ip = ipaddress.ip_address(address.strip())
        except ValueError:
            return UNKNOWN_LABEL

        # IPv4-mapped IPv6 (e.g. "::ffff:93.184.216.34") is treated as IPv4
        if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is not None:
            ip = ip.ipv4_mapped

        if ip.is_loopback:
            return LOCAL_LABEL

        if isinstance(ip, ipaddress.IPv4Address):
            first, second = str(ip).split(".")[:2]
            return f"{first}.{second}.*.*"

        return UNKNOWN_LABEL

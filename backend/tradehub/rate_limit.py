"""Request rate limiting keyed on the caller's network address.

The key is the nearest address in the forwarding chain that is not one of our
own proxies. Hops appended by trusted proxies are peeled off from the right;
anything a client writes at the left of X-Forwarded-For is never reached
unless every hop after it is trusted.
"""

import ipaddress
from functools import lru_cache

from slowapi import Limiter
from slowapi.util import get_remote_address

from .config import get_settings
from .logging_config import get_logger

logger = get_logger("tradehub.rate_limit")

IPNetwork = ipaddress.IPv4Network | ipaddress.IPv6Network

# Used when TRUSTED_PROXY_CIDRS is blank
PRIVATE_NETWORK_CIDRS = (
    "10.0.0.0/8",
    "172.16.0.0/12",
    "192.168.0.0/16",
    "127.0.0.0/8",
    "::1/128",
)


@lru_cache
def parse_trusted_networks(raw: str) -> tuple[IPNetwork, ...]:
    """Parse a comma-separated CIDR list. Invalid entries are logged and skipped."""
    cidrs = [part.strip() for part in raw.split(",") if part.strip()] or PRIVATE_NETWORK_CIDRS
    networks = []
    for cidr in cidrs:
        try:
            networks.append(ipaddress.ip_network(cidr, strict=False))
        except ValueError:
            logger.warning(f"Ignoring invalid trusted proxy CIDR: {cidr!r}")
    return tuple(networks)


def trusted_networks() -> tuple[IPNetwork, ...]:
    return parse_trusted_networks(get_settings().trusted_proxy_cidrs)


def is_trusted_proxy(address: str, networks: tuple[IPNetwork, ...]) -> bool:
    try:
        ip = ipaddress.ip_address(address)
    except ValueError:
        return False
    return any(ip in network for network in networks)


def get_client_ip(request) -> str:
    """Rate-limit key for *request*.

    Forwarded hops are only consulted when the direct peer is a trusted proxy.
    The chain is then walked right to left and the first untrusted hop wins.
    If every hop is trusted the leftmost one is used.
    """
    peer = get_remote_address(request)
    networks = trusted_networks()
    if not is_trusted_proxy(peer, networks):
        return peer

    forwarded_for = request.headers.get("x-forwarded-for", "")
    hops = [hop.strip() for hop in forwarded_for.split(",") if hop.strip()]
    for hop in reversed(hops):
        if not is_trusted_proxy(hop, networks):
            return hop
    return hops[0] if hops else peer


limiter = Limiter(key_func=get_client_ip)

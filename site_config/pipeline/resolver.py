"""Map a hostname to the configuration key that governs it.

Follows the FiveFilters file naming rules:
- ``example.com``       matches ``example.com`` and ``www.example.com``
- ``blog.example.com``  matches only that host
- ``.example.com``      matches any other subdomain (``sport.example.com``)
                        but NOT ``example.com`` or ``www.example.com``

Usage:
    from site_config.pipeline.resolver import resolve_config_key
    key = resolve_config_key("www.example.com", index)  # "example.com"
"""

from __future__ import annotations

import logging
from typing import Optional

from site_config.models.domain_index import WILDCARD_PREFIX, DomainIndex

logger = logging.getLogger(__name__)

WWW_PREFIX = "www."


def normalize_hostname(hostname: str) -> str:
    """Lower-case ``hostname``; ports and schemes are the caller's problem."""
    return hostname.lower()


def _match_wildcard(hostname: str, index: DomainIndex) -> Optional[str]:
    for wildcard in index.wildcards:
        suffix = wildcard[len(WILDCARD_PREFIX):]
        if (
            hostname.endswith(suffix)
            and hostname != suffix
            and hostname != WWW_PREFIX + suffix
        ):
            return wildcard
    return None


def resolve_config_key(hostname: str, index: DomainIndex) -> Optional[str]:
    """Return the configuration key for ``hostname`` or ``None``.

    Precedence, first match wins:
    1. exact domain
    2. domain after stripping a leading ``www.`` (the stripped key is
       returned)
    3. exact specific subdomain
    4. first wildcard, in index order, covering the host
    """
    hostname = normalize_hostname(hostname)

    if hostname in index.domains:
        return hostname

    if hostname.startswith(WWW_PREFIX):
        without_www = hostname[len(WWW_PREFIX):]
        if without_www in index.domains:
            return without_www

    if hostname in index.specific_subdomains:
        return hostname

    key = _match_wildcard(hostname, index)
    if key is None:
        logger.debug("No site config for %s", hostname)
    return key


def has_config(hostname: str, index: DomainIndex) -> bool:
    """True when some configuration key applies to ``hostname``."""
    return resolve_config_key(hostname, index) is not None

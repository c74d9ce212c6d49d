"""Membership index of known configuration keys."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Iterable, Iterator, Optional, Tuple

GLOBAL_CONFIG_KEY = "global"
WILDCARD_PREFIX = "."


class KeyCategory(Enum):
    """How a configuration key participates in hostname resolution."""

    # Fallback rules, never matched against a hostname
    GLOBAL = "global"

    # example.com -> matches example.com and www.example.com
    DOMAIN = "domain"

    # .example.com -> matches any subdomain except example.com/www.example.com
    WILDCARD = "wildcard"

    # blog.example.com -> matches only that host
    SPECIFIC_SUBDOMAIN = "specific_subdomain"


def classify_config_key(key: str) -> Optional[KeyCategory]:
    """Return the category for ``key`` or ``None`` if it can't be indexed.

    Single-label keys (``"com"``, ``"README"``) other than ``global`` are
    not indexable.
    """
    if not key:
        return None
    if key == GLOBAL_CONFIG_KEY:
        return KeyCategory.GLOBAL
    if key.startswith(WILDCARD_PREFIX):
        return KeyCategory.WILDCARD
    if "." not in key:
        return None

    labels = key.split(".")
    if len(labels) == 2:
        return KeyCategory.DOMAIN
    return KeyCategory.SPECIFIC_SUBDOMAIN


@dataclass(frozen=True)
class DomainIndex:
    """Three disjoint partitions of configuration keys.

    The index only answers membership questions; precedence between the
    partitions lives in :mod:`site_config.pipeline.resolver`.
    """

    domains: FrozenSet[str] = field(default_factory=frozenset)
    wildcards: Tuple[str, ...] = ()
    specific_subdomains: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        # Accept any iterables from callers but store immutable containers.
        object.__setattr__(self, "domains", frozenset(self.domains))
        object.__setattr__(self, "wildcards", tuple(self.wildcards))
        object.__setattr__(
            self, "specific_subdomains", frozenset(self.specific_subdomains)
        )

    @classmethod
    def empty(cls) -> "DomainIndex":
        return cls()

    @classmethod
    def from_keys(cls, keys: Iterable[str]) -> "DomainIndex":
        """Categorise ``keys`` into the three partitions.

        Keys are lower-cased. Wildcards keep the order in which they were
        first seen; duplicates, ``global`` and unindexable keys are dropped.
        """
        domains: set[str] = set()
        wildcards: list[str] = []
        specific: set[str] = set()

        for raw_key in keys:
            key = raw_key.strip().lower()
            category = classify_config_key(key)
            if category is KeyCategory.DOMAIN:
                domains.add(key)
            elif category is KeyCategory.WILDCARD:
                if key not in wildcards:
                    wildcards.append(key)
            elif category is KeyCategory.SPECIFIC_SUBDOMAIN:
                specific.add(key)

        return cls(
            domains=frozenset(domains),
            wildcards=tuple(wildcards),
            specific_subdomains=frozenset(specific),
        )

    def keys(self) -> Iterator[str]:
        """Iterate all keys: domains and subdomains sorted, then wildcards."""
        yield from sorted(self.domains)
        yield from sorted(self.specific_subdomains)
        yield from self.wildcards

    def __contains__(self, key: object) -> bool:
        return (
            key in self.domains
            or key in self.specific_subdomains
            or key in self.wildcards
        )

    def __len__(self) -> int:
        return (
            len(self.domains)
            + len(self.wildcards)
            + len(self.specific_subdomains)
        )

"""Serve the site config for a hostname, with caching and a safe fallback.

Usage:
    from site_config.services.config_manager import SiteConfigManager
    manager = SiteConfigManager.from_directory("ftr-site-config")
    rules = manager.get_config_for_host("www.example.com")

The manager never raises for a hostname: unknown hosts and rule files that
fail to load both yield the global default config.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Mapping, Optional, Union

from site_config import config as settings
from site_config.models.domain_index import DomainIndex
from site_config.models.site_config import SiteConfig, default_global_config
from site_config.pipeline.parser import parse_config_file
from site_config.pipeline.resolver import (
    has_config,
    normalize_hostname,
    resolve_config_key,
)
from site_config.pipeline.site_index import index_rule_directory
from site_config.services.config_cache import SiteConfigCache

logger = logging.getLogger(__name__)

ConfigSource = Union[Path, SiteConfig]


def _copy_config(config: SiteConfig) -> SiteConfig:
    # to_dict copies lists and dicts, so the copy shares no mutable state.
    return SiteConfig.from_dict(config.to_dict())


class SiteConfigLoadError(Exception):
    """Raised internally when the rules for a resolved key can't be loaded."""

    def __init__(self, key: str, message: str):
        super().__init__(f"{key}: {message}")
        self.key = key


class SiteConfigManager:
    """Resolve hostnames to site configs and cache the results.

    ``sources`` maps each configuration key to either a rule file (parsed on
    first use) or an already parsed :class:`SiteConfig`. The manager only
    ever looks keys up in this table; hostnames are never turned into paths.
    """

    def __init__(
        self,
        index: DomainIndex,
        sources: Mapping[str, ConfigSource],
        *,
        cache: Optional[SiteConfigCache] = None,
        global_config: Optional[SiteConfig] = None,
    ):
        self.index = index
        self._sources = {key.lower(): src for key, src in sources.items()}
        self.cache = cache if cache is not None else SiteConfigCache()
        self._global_config = global_config or default_global_config()

    @classmethod
    def from_directory(
        cls,
        directory: Union[str, Path, None] = None,
        *,
        cache: Optional[SiteConfigCache] = None,
    ) -> "SiteConfigManager":
        """Index ``directory`` (default ``SITE_CONFIG_DIR``) once, up front."""
        directory = Path(directory or settings.SITE_CONFIG_DIR)
        index, sources = index_rule_directory(directory)
        return cls(index, sources, cache=cache)

    def resolve_config_key(self, hostname: str) -> Optional[str]:
        return resolve_config_key(hostname, self.index)

    def has_config_for_host(self, hostname: str) -> bool:
        return has_config(hostname, self.index)

    def global_config(self) -> SiteConfig:
        """Return a copy of the fallback config."""
        return _copy_config(self._global_config)

    def get_config_for_host(self, hostname: str) -> SiteConfig:
        """Return the site config for ``hostname``.

        Successful loads are cached per normalized hostname. Hosts with no
        rules, and keys whose rules fail to load, get the global default
        (which is not cached so a fixed rule file is picked up later).
        Every call returns a fresh copy; mutating it never reaches the cache.
        """
        hostname = normalize_hostname(hostname)

        cached = self.cache.get(hostname)
        if cached is not None:
            return _copy_config(cached)

        key = self.resolve_config_key(hostname)
        if key is None:
            return self.global_config()

        try:
            config = self._load(key)
        except SiteConfigLoadError as exc:
            logger.warning(
                "Falling back to global site config for %s: %s", hostname, exc
            )
            return self.global_config()

        self.cache.set(hostname, config)
        return _copy_config(config)

    def load_config(self, key: str) -> SiteConfig:
        """Load the rules for ``key``, or the global default on failure."""
        try:
            return _copy_config(self._load(key))
        except SiteConfigLoadError as exc:
            logger.warning("Failed to load site config: %s", exc)
            return self.global_config()

    def _load(self, key: str) -> SiteConfig:
        source = self._sources.get(key)
        if source is None:
            raise SiteConfigLoadError(key, "no rule source registered")
        if isinstance(source, SiteConfig):
            return source

        try:
            return parse_config_file(source)
        except (OSError, UnicodeDecodeError) as exc:
            raise SiteConfigLoadError(key, str(exc)) from exc

    def preload_configs(self, hostnames: Iterable[str]) -> None:
        """Warm the cache for ``hostnames``."""
        for hostname in hostnames:
            self.get_config_for_host(hostname)

    def clear_cache(self) -> None:
        self.cache.clear()


_default_manager: Optional[SiteConfigManager] = None


def get_site_config_manager() -> SiteConfigManager:
    """Return the process-wide manager, indexing ``SITE_CONFIG_DIR`` on first use."""
    global _default_manager
    if _default_manager is None:
        _default_manager = SiteConfigManager.from_directory()
    return _default_manager


def reset_site_config_manager() -> None:
    """Drop the process-wide manager so the next call re-indexes."""
    global _default_manager
    _default_manager = None

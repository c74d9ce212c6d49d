"""Per-hostname cache of resolved site configs."""

from __future__ import annotations

import threading
from typing import Dict, List, Optional

from site_config.models.site_config import SiteConfig


class SiteConfigCache:
    """Thread-safe mapping of normalized hostname -> SiteConfig.

    Owned by a :class:`~site_config.services.config_manager.SiteConfigManager`
    and injectable so tests (or several managers) can share or isolate it.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, SiteConfig] = {}
        self._lock = threading.Lock()

    def get(self, hostname: str) -> Optional[SiteConfig]:
        with self._lock:
            return self._entries.get(hostname)

    def set(self, hostname: str, config: SiteConfig) -> None:
        with self._lock:
            self._entries[hostname] = config

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def hostnames(self) -> List[str]:
        with self._lock:
            return list(self._entries)

    def __contains__(self, hostname: object) -> bool:
        with self._lock:
            return hostname in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

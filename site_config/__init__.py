"""Resolve hostnames to FiveFilters-style site extraction rules.

Public API:
    parse_config(text, label) -> SiteConfig
    resolve_config_key(hostname, index) -> str | None
    has_config(hostname, index) -> bool
    SiteConfigManager -- cached "rules for this host" lookups
"""

from site_config.models.domain_index import DomainIndex, KeyCategory
from site_config.models.site_config import SiteConfig, default_global_config
from site_config.pipeline.parser import (
    ParseResult,
    parse_config,
    parse_config_file,
    parse_config_with_diagnostics,
)
from site_config.pipeline.resolver import has_config, resolve_config_key
from site_config.pipeline.site_index import (
    build_domain_index,
    index_rule_directory,
)
from site_config.services.config_cache import SiteConfigCache
from site_config.services.config_manager import (
    SiteConfigLoadError,
    SiteConfigManager,
    get_site_config_manager,
)

__all__ = [
    "DomainIndex",
    "KeyCategory",
    "ParseResult",
    "SiteConfig",
    "SiteConfigCache",
    "SiteConfigLoadError",
    "SiteConfigManager",
    "build_domain_index",
    "default_global_config",
    "get_site_config_manager",
    "has_config",
    "index_rule_directory",
    "parse_config",
    "parse_config_file",
    "parse_config_with_diagnostics",
    "resolve_config_key",
]

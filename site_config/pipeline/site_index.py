"""Build a :class:`DomainIndex` from a directory of site rule files.

Usage:
    from site_config.pipeline.site_index import index_rule_directory
    index, sources = index_rule_directory("ftr-site-config")

Each ``<key>.txt`` file in the directory contributes one configuration
key. ``global.txt`` is skipped (the fallback rules are fixed), as are files
whose stem has no dot (``LICENSE.txt``).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Sequence, Tuple, Union

from site_config import config as settings
from site_config.models.domain_index import (
    WILDCARD_PREFIX,
    DomainIndex,
    KeyCategory,
    classify_config_key,
)

logger = logging.getLogger(__name__)

RULE_FILE_SUFFIX = ".txt"


def discover_rule_files(directory: Union[str, Path]) -> Dict[str, Path]:
    """Map config key -> rule file for every indexable file in ``directory``.

    Files are visited in name order so wildcard precedence is stable across
    filesystems. Hidden files are included since wildcard rules are named
    ``.example.com.txt``.
    """
    directory = Path(directory)
    if not directory.is_dir():
        logger.warning("Site config directory %s does not exist", directory)
        return {}

    sources: Dict[str, Path] = {}
    for path in sorted(directory.iterdir(), key=lambda p: p.name):
        if not path.name.endswith(RULE_FILE_SUFFIX) or not path.is_file():
            continue

        key = path.name[: -len(RULE_FILE_SUFFIX)].lower()
        category = classify_config_key(key)
        if category is None or category is KeyCategory.GLOBAL:
            logger.debug("Skipping non-site rule file %s", path.name)
            continue
        if key in sources:
            logger.warning(
                "Duplicate site config key %s (%s and %s); keeping the first",
                key,
                sources[key].name,
                path.name,
            )
            continue
        sources[key] = path

    return sources


def find_overlapping_wildcards(
    wildcards: Sequence[str],
) -> List[Tuple[str, str]]:
    """Return ``(earlier, later)`` pairs where one wildcard covers the other.

    ``.example.org`` and ``.news.example.org`` overlap: a host such as
    ``a.news.example.org`` matches both and resolution picks whichever is
    stored first.
    """
    overlaps: List[Tuple[str, str]] = []
    suffixes = [w[len(WILDCARD_PREFIX):] for w in wildcards]
    for i, first in enumerate(suffixes):
        for j in range(i + 1, len(suffixes)):
            second = suffixes[j]
            if first.endswith(second) or second.endswith(first):
                overlaps.append((wildcards[i], wildcards[j]))
    return overlaps


def build_domain_index(
    keys: Iterable[str], *, check_overlap: bool | None = None
) -> DomainIndex:
    """Categorise ``keys`` into a :class:`DomainIndex`.

    With ``check_overlap`` (default from ``SITE_CONFIG_CHECK_WILDCARD_OVERLAP``)
    overlapping wildcards are logged. They are still indexed; the resolver
    keeps first-match semantics.
    """
    if check_overlap is None:
        check_overlap = settings.SITE_CONFIG_CHECK_WILDCARD_OVERLAP

    index = DomainIndex.from_keys(keys)

    if check_overlap:
        for earlier, later in find_overlapping_wildcards(index.wildcards):
            logger.warning(
                "Overlapping wildcard site configs %s and %s; hosts covered "
                "by both resolve to %s",
                earlier,
                later,
                earlier,
            )

    return index


def index_rule_directory(
    directory: Union[str, Path],
) -> Tuple[DomainIndex, Dict[str, Path]]:
    """Scan ``directory`` and return the index plus the key -> file table."""
    sources = discover_rule_files(directory)
    index = build_domain_index(sources)
    logger.info(
        "Indexed site configs in %s: %d domains, %d wildcards, "
        "%d specific subdomains",
        directory,
        len(index.domains),
        len(index.wildcards),
        len(index.specific_subdomains),
    )
    return index, sources

"""Typed extraction rules for one site (or the global fallback)."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Dict, List, Mapping, Optional, Tuple

# Ordered lists of DOM-query (XPath) expressions or plain strings.
SELECTOR_FIELDS: Tuple[str, ...] = (
    "title",
    "body",
    "date",
    "author",
    "strip",
    "strip_id_or_class",
    "strip_image_src",
    "single_page_link",
    "single_page_link_in_feed",
    "next_page_link",
    "native_ad_clue",
    "src_lazy_load_attr",
    "if_page_contains",
)

# Must always have the same length; position ``i`` of one pairs with ``i``
# of the other.
PAIRED_FIELDS: Tuple[str, str] = ("find_string", "replace_string")

MAPPING_FIELDS: Tuple[str, ...] = ("http_header", "wrap_in")

BOOLEAN_FIELDS: Tuple[str, ...] = (
    "prune",
    "autodetect_on_failure",
    "insert_detected_image",
    "skip_json_ld",
)

LIST_FIELDS: Tuple[str, ...] = SELECTOR_FIELDS + PAIRED_FIELDS


@dataclass(frozen=True)
class SiteConfig:
    """Extraction rules for a single configuration key.

    Every field defaults to ``None`` which means "not specified in the rule
    text". Consumers fall back to their own (or the global) default for
    unset fields, so an empty list and ``None`` are not interchangeable.
    """

    # Content selectors
    title: Optional[List[str]] = None
    body: Optional[List[str]] = None
    date: Optional[List[str]] = None
    author: Optional[List[str]] = None

    # Elements to remove
    strip: Optional[List[str]] = None
    strip_id_or_class: Optional[List[str]] = None
    strip_image_src: Optional[List[str]] = None

    # Multi-page handling
    single_page_link: Optional[List[str]] = None
    single_page_link_in_feed: Optional[List[str]] = None
    next_page_link: Optional[List[str]] = None

    native_ad_clue: Optional[List[str]] = None
    src_lazy_load_attr: Optional[List[str]] = None
    if_page_contains: Optional[List[str]] = None

    # String replacements applied to the raw HTML
    find_string: Optional[List[str]] = None
    replace_string: Optional[List[str]] = None

    http_header: Optional[Dict[str, str]] = None
    wrap_in: Optional[Dict[str, str]] = None

    prune: Optional[bool] = None
    autodetect_on_failure: Optional[bool] = None
    insert_detected_image: Optional[bool] = None
    skip_json_ld: Optional[bool] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SiteConfig":
        """Build a config from ``field -> value``.

        Raises:
            ValueError: if ``data`` contains a key that is not a field.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(
                f"Unknown SiteConfig field(s): {', '.join(unknown)}"
            )
        return cls(**dict(data))

    def defined_fields(self) -> Tuple[str, ...]:
        """Names of the fields that were explicitly set, in field order."""
        return tuple(
            f.name for f in fields(self) if getattr(self, f.name) is not None
        )

    def to_dict(self) -> Dict[str, Any]:
        """Return only the explicitly set fields.

        Lists and dicts are copied so callers can't mutate a shared
        (cached) instance through the result.
        """
        result: Dict[str, Any] = {}
        for name in self.defined_fields():
            value = getattr(self, name)
            if isinstance(value, list):
                value = list(value)
            elif isinstance(value, dict):
                value = dict(value)
            result[name] = value
        return result

    @property
    def is_empty(self) -> bool:
        return not self.defined_fields()


def default_global_config() -> SiteConfig:
    """Fallback rules used when no site file applies or loading fails.

    A new instance is returned on every call.
    """
    return SiteConfig(
        title=[],
        body=[],
        date=[],
        author=[],
        strip=[],
        native_ad_clue=[],
        insert_detected_image=True,
        autodetect_on_failure=True,
        skip_json_ld=True,
    )

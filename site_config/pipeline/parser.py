"""Parse FiveFilters-style site rule text into a :class:`SiteConfig`.

The format is line oriented:

    # comment
    title: //h1[@class="headline"]
    body: //div[@id="article"]
    prune: no
    http_header(User-Agent): Mozilla/5.0
    replace_string(<br /><br />): </p><p>

Usage:
    from site_config.pipeline.parser import parse_config
    config = parse_config(text, "example.com")

Directives we know about but don't act on (login, test and tidy related)
are dropped silently. Anything else unrecognised is collected and logged
once per file so rule-set updates that introduce new directives show up in
the logs without breaking parsing.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Dict, List, NamedTuple, Union

from site_config import config as settings
from site_config.models.site_config import (
    BOOLEAN_FIELDS,
    LIST_FIELDS,
    SiteConfig,
)

logger = logging.getLogger(__name__)

IGNORED_AUTH_TAGS = frozenset(
    {
        "requires_login",
        "login_uri",
        "login_username_field",
        "login_password_field",
        "login_extra_fields",
        "not_logged_in_xpath",
    }
)

IGNORED_TEST_TAGS = frozenset(
    {"test", "test_url", "test_contains", "test_content", "test_urls"}
)

IGNORED_OTHER_TAGS = frozenset(
    {
        "parser",
        "convert_double_br_tags",
        "strip_comments",
        "move_into",
        "autodetect_next_page",
        "dissolve",
        "footnotes",
        "skip_id_or_class",
        "tidy",
    }
)

IGNORED_TAGS = IGNORED_AUTH_TAGS | IGNORED_TEST_TAGS | IGNORED_OTHER_TAGS

BOOLEAN_TAGS = frozenset(BOOLEAN_FIELDS)
_TRUE_TOKENS = frozenset({"yes", "true"})

# Simple-form keys appended to a list field of the same name.
LIST_TAGS = frozenset(LIST_FIELDS)

STRIP_ALIASES = {"strip_attr": "strip"}

KNOWN_DIRECTIVES = (
    LIST_TAGS
    | BOOLEAN_TAGS
    | frozenset(STRIP_ALIASES)
    | {"http_header", "wrap_in"}
    | IGNORED_TAGS
)

# directive(param): value -- value may be empty
_FUNCTION_RE = re.compile(r"^([a-z_]+)\(([^)]+)\):(.*)$", re.IGNORECASE)


class ParseResult(NamedTuple):
    config: SiteConfig
    unknown_directives: List[str]


class _Builder:
    """Accumulates fields for one parse; only touched keys end up set."""

    def __init__(self) -> None:
        self.fields: Dict[str, Any] = {}
        self.unknown: Dict[str, None] = {}

    def append(self, name: str, value: str) -> None:
        self.fields.setdefault(name, []).append(value)

    def put(self, name: str, key: str, value: str) -> None:
        self.fields.setdefault(name, {})[key] = value

    def flag(self, name: str, value: str) -> None:
        self.fields[name] = value.lower() in _TRUE_TOKENS

    def note_unknown(self, line: str) -> None:
        self.unknown.setdefault(line, None)


def _handle_function(
    builder: _Builder, directive: str, param: str, value: str
) -> None:
    if directive in IGNORED_TAGS:
        return

    if directive == "http_header":
        builder.put("http_header", param.lower(), value)
    elif directive == "replace_string":
        builder.append("find_string", param)
        builder.append("replace_string", value)
    elif directive == "wrap_in":
        builder.put("wrap_in", param, value)
    elif directive not in KNOWN_DIRECTIVES:
        builder.note_unknown(f"{directive}({param}): {value}")


def _handle_simple(builder: _Builder, key: str, value: str) -> None:
    # Case-insensitive like the function form: "Title: x" sets title.
    directive = key.lower()
    if directive in IGNORED_TAGS:
        return

    if directive in STRIP_ALIASES:
        builder.append(STRIP_ALIASES[directive], value)
    elif directive in LIST_TAGS:
        builder.append(directive, value)
    elif directive in BOOLEAN_TAGS:
        builder.flag(directive, value)
    elif directive not in KNOWN_DIRECTIVES:
        builder.note_unknown(f"{key}: {value}")


def _parse_line(builder: _Builder, line: str) -> None:
    if "(" in line and "):" in line:
        match = _FUNCTION_RE.match(line)
        if match:
            directive, param, value = match.groups()
            _handle_function(builder, directive.lower(), param, value.strip())
            return

    key, sep, value = line.partition(":")
    if not sep:
        return

    key = key.strip()
    value = value.strip()
    if not key:
        return
    # An empty replacement deletes the matching find_string, so keep it.
    if not value and key.lower() != "replace_string":
        return

    _handle_simple(builder, key, value)


def _check_pairs(builder: _Builder, label: str) -> None:
    find = builder.fields.get("find_string")
    replace = builder.fields.get("replace_string")
    if find is None and replace is None:
        return

    find_size = len(find or [])
    replace_size = len(replace or [])
    if find_size == replace_size:
        return

    logger.warning(
        "find_string & replace_string size mismatch in %s, check the site "
        "config to fix it (find_size=%d, replace_size=%d)",
        label,
        find_size,
        replace_size,
    )
    builder.fields["find_string"] = []
    builder.fields["replace_string"] = []


def _report_unknown(unknown: List[str], label: str) -> None:
    if not unknown:
        return
    level = (
        logging.INFO
        if settings.SITE_CONFIG_LOG_UNKNOWN_DIRECTIVES
        else logging.DEBUG
    )
    if not logger.isEnabledFor(level):
        return
    listing = "\n".join(f"  - {entry}" for entry in unknown)
    logger.log(level, "Unknown directives in %s:\n%s", label, listing)


def parse_config_with_diagnostics(text: str, label: str) -> ParseResult:
    """Parse ``text`` and also return the unknown directives it contained.

    ``label`` is only used to group log output (normally the config key).
    """
    builder = _Builder()

    for raw_line in text.split("\n"):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        _parse_line(builder, line)

    _check_pairs(builder, label)

    unknown = list(builder.unknown)
    _report_unknown(unknown, label)

    return ParseResult(SiteConfig.from_dict(builder.fields), unknown)


def parse_config(text: str, label: str) -> SiteConfig:
    """Parse site rule text into a :class:`SiteConfig`.

    Never raises for malformed rule text: lines that don't fit either the
    ``key: value`` or ``directive(param): value`` shape are skipped.
    Fields absent from ``text`` stay ``None`` on the result.
    """
    return parse_config_with_diagnostics(text, label).config


def parse_config_file(path: Union[str, Path]) -> SiteConfig:
    """Read a UTF-8 rule file and parse it using the file stem as label.

    ``OSError``/``UnicodeDecodeError`` propagate; callers that need a
    fallback (the config manager) handle them.
    """
    path = Path(path)
    return parse_config(path.read_text(encoding="utf-8"), path.stem)

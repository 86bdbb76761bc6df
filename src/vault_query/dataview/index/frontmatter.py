"""
Frontmatter handling for indexed notes.

Notes start with an optional `---` delimited YAML header. The header is
loaded with `yaml.safe_load` and its values are mapped onto engine values:
dates become `Date`, `[[wikilinks]]` become `Link`. Nested mappings are
left out.
"""

import re
from datetime import date, datetime
from typing import Any

import yaml
from loguru import logger

from vault_query.dataview.types import Date, Link, to_number

OPENING_PATTERN = re.compile(r"^---\r?\n")
CLOSING_PATTERN = re.compile(r"\n---[ \t]*(?:\r?\n|$)")
ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}(T\d{2}:\d{2}(:\d{2})?)?$")
WIKILINK_PATTERN = re.compile(r"^\[\[([^\[\]]*)\]\]$")


def split_frontmatter(content: str) -> tuple[str, str]:
    """Split note content into (frontmatter text, body).

    The frontmatter text excludes both `---` lines. Without a header, or
    with an unclosed one, the frontmatter is "" and the body is the whole content.
    """
    opening = OPENING_PATTERN.match(content)
    if not opening:
        return "", content

    closing = CLOSING_PATTERN.search(content, opening.end() - 1)
    if not closing:
        return "", content

    return content[opening.end() : closing.start() + 1], content[closing.end() :]


def parse_frontmatter(text: str) -> dict[str, Any]:
    """Load frontmatter YAML into a mapping of engine values.

    Invalid YAML, or a document that is not a mapping, gives no fields.
    Keys whose value is null or a nested mapping are left out.
    """
    if not text.strip():
        return {}

    try:
        loaded = yaml.safe_load(text)
    except (yaml.YAMLError, ValueError) as e:
        # ValueError: YAML timestamps that are not real dates (2026-99-99)
        logger.warning(f"Ignoring invalid frontmatter: {e}")
        return {}

    if not isinstance(loaded, dict):
        logger.debug("Frontmatter is not a mapping, ignoring it")
        return {}

    fields: dict[str, Any] = {}
    for key, value in loaded.items():
        if value is None or isinstance(value, dict):
            continue
        fields[str(key)] = convert_yaml_value(value)
    return fields


def convert_yaml_value(value: Any) -> Any:
    """Map one loaded YAML value onto engine values."""
    if isinstance(value, datetime):
        return Date.from_datetime(value)
    if isinstance(value, date):
        return Date(value.year, value.month, value.day)
    if isinstance(value, str):
        return _convert_yaml_string(value)
    if isinstance(value, list):
        # An unquoted [[Note]] loads as a list holding a one-string list
        if len(value) == 1 and isinstance(value[0], list) and len(value[0]) == 1:
            if isinstance(value[0][0], str):
                return parse_link_target(value[0][0])
        return [convert_yaml_value(item) for item in value if not isinstance(item, dict)]
    return value


def _convert_yaml_string(text: str) -> Any:
    """Strings YAML leaves alone: quoted wikilinks and minute-precision datetimes."""
    link = WIKILINK_PATTERN.match(text.strip())
    if link:
        return parse_link_target(link.group(1))
    if ISO_DATE_PATTERN.match(text):
        parsed = Date.parse(text)
        if parsed is not None:
            return parsed
    return text


def parse_note_header(content: str) -> tuple[dict[str, Any], str]:
    """Split and parse in one go.

    An unclosed header is treated as body text, so the note gets no
    frontmatter fields instead of failing the scan.
    """
    frontmatter, body = split_frontmatter(content)
    if not frontmatter and OPENING_PATTERN.match(content) and body is content:
        logger.debug("Frontmatter opened but never closed, ignoring it")
    return parse_frontmatter(frontmatter), body


def parse_scalar(text: str) -> Any:
    """Coerce one inline field value.

    Order: empty -> None, quoted -> str, true/false, ISO date(time) -> Date,
    number, `[[path|display]]` -> Link, otherwise the text itself.
    """
    text = text.strip()
    if not text:
        return None

    if len(text) >= 2 and text[0] == text[-1] and text[0] in ('"', "'"):
        return text[1:-1]

    if text == "true":
        return True
    if text == "false":
        return False

    if ISO_DATE_PATTERN.match(text):
        parsed = Date.parse(text)
        if parsed is not None:
            return parsed

    number = to_number(text)
    if number is not None:
        return number

    link = WIKILINK_PATTERN.match(text)
    if link:
        return parse_link_target(link.group(1))

    return text


def parse_link_target(inner: str, embed: bool = False) -> Link:
    """Build a Link from the text between `[[` and `]]`.

    The display defaults to the last path segment; a `#heading` or `^block`
    suffix is cut from the display only.
    """
    inner = inner.replace("\\|", "|")
    path, sep, display = inner.partition("|")
    if not sep or not display:
        path = inner if not sep else path
        display = path.rsplit("/", 1)[-1]

    clean_display = display.split("#", 1)[0] or display
    return Link(path=path, display=clean_display.strip(), embed=embed)

"""
Metadata extraction from note bodies: inline fields, tags and wikilinks.
"""

import re
from typing import Any, Iterable

from vault_query.dataview.index.frontmatter import parse_link_target, parse_scalar
from vault_query.dataview.types import Link

TASK_LINE_PATTERN = re.compile(r"^\s*[-*] \[.\] ")
STANDALONE_FIELD_PATTERN = re.compile(r"([\w-]+)::\s*(.*?)\s*$")
BRACKET_FIELD_PATTERN = re.compile(r"\[([\w-]+)::\s*(.*?)\]")
PAREN_FIELD_PATTERN = re.compile(r"\(([\w-]+)::\s*(.*?)\)")
URL_SCHEMES = {"http", "https"}

TAG_PATTERN = re.compile(r"(?<!\S)#([\w-][\w/-]*)")
FENCED_CODE_PATTERN = re.compile(r"```.*?```", re.DOTALL)
INLINE_CODE_PATTERN = re.compile(r"`[^`]+`")

EMBED_PATTERN = re.compile(r"!\[\[(.*?)\]\]")
WIKILINK_PATTERN = re.compile(r"\[\[(.*?)\]\]")
INLINE_FIELD_PREFIX = re.compile(r"^[\w-]+::")


def strip_code(text: str) -> str:
    """Remove fenced code blocks and inline code spans."""
    text = FENCED_CODE_PATTERN.sub("", text)
    return INLINE_CODE_PATTERN.sub("", text)


def extract_bracketed_fields(text: str) -> dict[str, Any]:
    """Fields written as `[key:: value]` or `(key:: value)`."""
    fields = {}
    for pattern in (BRACKET_FIELD_PATTERN, PAREN_FIELD_PATTERN):
        for key, value in pattern.findall(text):
            fields[key] = parse_scalar(value)
    return fields


def extract_inline_fields(body: str) -> dict[str, Any]:
    """Extract `key:: value` fields from the note body.

    Task lines are skipped since their fields belong to the task. A bare
    `http::`/`https::` match is a URL, not a field. Bracketed forms on the
    same line override the standalone form.
    """
    fields: dict[str, Any] = {}

    for line in body.splitlines():
        if not line or TASK_LINE_PATTERN.match(line):
            continue

        match = STANDALONE_FIELD_PATTERN.search(line)
        if match and match.group(1) not in URL_SCHEMES:
            fields[match.group(1)] = parse_scalar(match.group(2))

        fields.update(extract_bracketed_fields(line))

    return fields


def expand_tag(tag: str) -> list[str]:
    """`a/b/c` -> [`a/b/c`, `a/b`, `a`]"""
    expanded = [tag]
    while "/" in tag:
        tag = tag.rsplit("/", 1)[0]
        if tag:
            expanded.append(tag)
    return expanded


def find_tags(text: str) -> list[str]:
    """Tags written as `#tag` in text, in order of appearance, without expansion.

    Purely numeric matches (`#123`) are not tags.
    """
    return [tag for tag in TAG_PATTERN.findall(text) if not tag.isdigit()]


def expand_tags(tags: Iterable[str]) -> list[str]:
    """Sorted set of tags plus all of their ancestors."""
    expanded: set[str] = set()
    for tag in tags:
        expanded.update(expand_tag(tag))
    return sorted(expanded)


def frontmatter_tags(frontmatter: dict[str, Any]) -> list[str]:
    """The `tags` frontmatter field as plain strings, leading `#` removed."""
    value = frontmatter.get("tags")
    if value is None:
        return []
    if not isinstance(value, list):
        value = [value]

    tags = []
    for item in value:
        if item is None:
            continue
        tag = str(item).strip()
        if tag.startswith("#"):
            tag = tag[1:]
        if tag:
            tags.append(tag)
    return tags


def extract_tags(frontmatter: dict[str, Any], body: str) -> tuple[list[str], list[str]]:
    """Return (expanded tags, explicit tags) for a note.

    Code blocks and code spans are stripped from the body first.
    """
    explicit: list[str] = []
    for tag in frontmatter_tags(frontmatter) + find_tags(strip_code(body)):
        if tag not in explicit:
            explicit.append(tag)
    return expand_tags(explicit), explicit


def extract_links(content: str) -> list[Link]:
    """Extract embeds followed by plain wikilinks from the note, outside of code."""
    clean = strip_code(content)
    links = [parse_link_target(inner, embed=True) for inner in EMBED_PATTERN.findall(clean)]

    for line in clean.splitlines():
        for match in WIKILINK_PATTERN.finditer(line):
            start = match.start()
            if start > 0 and line[start - 1] == "!":
                continue
            inner = match.group(1)
            if INLINE_FIELD_PREFIX.match(inner):
                continue
            links.append(parse_link_target(inner))

    return links

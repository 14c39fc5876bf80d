"""Heading extraction and slug policy.

The default policy follows GitHub's anchor rules: markup stripped,
lowercased, punctuation removed, spaces joined with ``-`` and repeated
slugs suffixed ``-1``, ``-2``. Every step can be switched off through
:class:`~mdrelink.core.models.SlugPolicy`.
"""

from __future__ import annotations

import re
from typing import NamedTuple

from mdrelink.core.models import SlugPolicy
from mdrelink.core.scanner import in_regions, skip_regions

_ATX_HEADING = re.compile(
    r"^ {0,3}(#{1,6})[ \t]+(?P<text>.*?)(?:[ \t]+#+)?[ \t]*\r?$", re.MULTILINE
)
_SETEXT_UNDERLINE = re.compile(r"^ {0,3}(=+|-+)[ \t]*$")
_BLOCK_START = re.compile(r"^ {0,3}(?:[-*+](?:[ \t]|$)|\d{1,9}[.)](?:[ \t]|$)|>)")
_CUSTOM_ID = re.compile(r"\s*\{#(?P<id>[^}\s]+)\}\s*$")
_INLINE_LINK = re.compile(r"!?\[([^\]]*)\]\([^)]*\)")
_MARKUP = re.compile(r"[*_`~]|<[^>]+>")
_PUNCTUATION = re.compile(r"[^\w\- ]", re.UNICODE)


def slugify(text: str, policy: SlugPolicy | None = None) -> str:
    """Turn heading text into an anchor identifier."""
    policy = policy or SlugPolicy()
    slug = _INLINE_LINK.sub(r"\1", text)
    slug = _MARKUP.sub("", slug).strip()
    if policy.lowercase:
        slug = slug.lower()
    if policy.strip_punctuation:
        slug = _PUNCTUATION.sub("", slug)
    return slug.replace(" ", policy.separator)


class Heading(NamedTuple):
    """One heading's anchor: ``key`` before duplicate suffixing, ``slug`` after."""

    key: str
    slug: str


def _heading_texts(content: str) -> list[tuple[int, str]]:
    """ATX and setext headings as ``(offset, text)``, code excluded.

    Setext text is the whole paragraph above the underline, lines joined
    with a space. List items, block quotes, tables and indented code never
    become setext headings; they block the underline until the next blank
    line, where CommonMark reads ``---`` as a thematic break.
    """
    regions = skip_regions(content)
    headings: list[tuple[int, str]] = []

    for match in _ATX_HEADING.finditer(content):
        if not in_regions(match.start(), regions):
            headings.append((match.start(), match.group("text")))

    offset = 0
    start = 0
    # None while inside a block that cannot turn into a setext heading
    paragraph: list[str] | None = []
    for line in content.splitlines(keepends=True):
        stripped = line.rstrip("\r\n")
        if not stripped.strip() or in_regions(offset, regions):
            paragraph = []
        elif _SETEXT_UNDERLINE.match(stripped):
            if paragraph:
                headings.append((start, " ".join(paragraph)))
            paragraph = []
        elif _ATX_HEADING.match(stripped):
            paragraph = []
        elif paragraph is None:
            pass
        elif (
            _BLOCK_START.match(stripped)
            or "|" in stripped
            or (not paragraph and stripped.startswith(("    ", "\t")))
        ):
            paragraph = None
        else:
            if not paragraph:
                start = offset
            paragraph.append(stripped.strip())
        offset += len(line)

    headings.sort()
    return headings


def slugged_headings(content: str, policy: SlugPolicy | None = None) -> list[Heading]:
    """Every heading's anchor in document order."""
    policy = policy or SlugPolicy()
    seen: dict[str, int] = {}
    headings: list[Heading] = []

    for _, text in _heading_texts(content):
        custom = _CUSTOM_ID.search(text)
        if custom is not None:
            text = text[: custom.start()]
            if policy.honor_custom_ids:
                headings.append(Heading(custom.group("id"), custom.group("id")))
                continue

        key = slugify(text, policy)
        slug = key
        if policy.dedupe:
            count = seen.get(key, 0)
            seen[key] = count + 1
            if count:
                slug = f"{key}{policy.separator}{count}"
        headings.append(Heading(key, slug))

    return headings


def heading_slugs(content: str, policy: SlugPolicy | None = None) -> list[str]:
    """Slugs of every heading in document order."""
    return [heading.slug for heading in slugged_headings(content, policy)]

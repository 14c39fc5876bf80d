"""Markdown link scanner.

Finds inline links, images and reference definitions in a document and
resolves their targets against the document's directory. Scanning is
best-effort: anything that does not parse is skipped, nothing raises.
"""

from __future__ import annotations

import bisect
import heapq
import logging
import re
from collections.abc import Iterator
from urllib.parse import unquote

from mdrelink.core.errors import UnresolvableLinkError
from mdrelink.core.models import Document, LinkKind, LinkOccurrence, Options
from mdrelink.core.paths import NormalizedPath, dirname, join, normalize

logger = logging.getLogger(__name__)

# [label](dest "title") and ![alt](dest), dest optionally in <angle brackets>.
# Labels may hold one level of brackets, e.g. [![badge](logo.svg)](dest).
_INLINE_LINK = re.compile(
    r"(?P<bang>!?)\[(?P<label>(?:\\.|[^\[\]\\\n]|\[(?:\\.|[^\[\]\\\n])*\])*)\]"
    r"\([ \t]*(?:<(?P<angled>[^<>\n]*)>|(?P<bare>(?:\\.|[^\s()\\]|\([^\s()]*\))*))"
    r"(?:[ \t]+(?:\"[^\"\n]*\"|'[^'\n]*'|\([^()\n]*\)))?[ \t]*\)"
)

# [label]: dest "title" at the start of a line
_REFERENCE_DEFINITION = re.compile(
    r"^ {0,3}\[(?P<label>(?:\\.|[^\[\]\\\n])+)\]:[ \t]*"
    r"(?:<(?P<angled>[^<>\n]*)>|(?P<bare>\S+))"
    r"(?:[ \t]+(?:\"[^\"\n]*\"|'[^'\n]*'|\([^()\n]*\)))?[ \t]*\r?$",
    re.MULTILINE,
)

_FENCE = re.compile(r"^ {0,3}(?P<fence>`{3,}|~{3,})[^\n]*$", re.MULTILINE)
_CODE_SPAN = re.compile(r"(?<!`)(?P<ticks>`+)(?!`).+?(?<!`)(?P=ticks)(?!`)")
_FRONTMATTER = re.compile(
    r"\A---[ \t]*\r?\n.*?^(?:---|\.\.\.)[ \t]*\r?$", re.MULTILINE | re.DOTALL
)
_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")

Region = tuple[int, int]


def skip_regions(content: str) -> list[Region]:
    """Sorted offsets of front matter, fenced code blocks and code spans."""
    regions: list[Region] = []
    frontmatter = _FRONTMATTER.match(content)
    if frontmatter is not None:
        regions.append((0, frontmatter.end()))
    opened: re.Match[str] | None = None
    for match in _FENCE.finditer(content):
        fence = match.group("fence")
        if opened is None:
            opened = match
        elif fence[0] == opened.group("fence")[0] and len(fence) >= len(opened.group("fence")):
            if match.group(0).strip() == fence:
                regions.append((opened.start(), match.end()))
                opened = None
    if opened is not None:
        regions.append((opened.start(), len(content)))

    spans: list[Region] = []
    for match in _CODE_SPAN.finditer(content):
        if not in_regions(match.start(), regions):
            spans.append((match.start(), match.end()))

    return sorted(regions + spans)


def in_regions(offset: int, regions: list[Region]) -> bool:
    """True when ``offset`` falls inside one of the sorted regions."""
    index = bisect.bisect_right(regions, (offset, float("inf"))) - 1
    return index >= 0 and regions[index][0] <= offset < regions[index][1]


def is_external(target: str) -> bool:
    """True for URLs with a scheme (http:, mailto:, ...) or protocol-relative ones."""
    return target.startswith("//") or bool(_SCHEME.match(target))


def resolve_target(document: NormalizedPath, target: str, options: Options) -> NormalizedPath:
    """Resolve a link's path text to a tracked document path.

    An empty target is a same-document anchor and resolves to ``document``.

    Raises:
        UnresolvableLinkError: External, root-relative without a project
            root, or not a tracked extension.
    """
    if not target:
        return document
    if is_external(target):
        raise UnresolvableLinkError(f"External link: {target}")

    path = unquote(target.split("?", 1)[0])
    if not path.lower().endswith(tuple(options.file_extensions_tracked)):
        raise UnresolvableLinkError(f"Untracked extension: {target}")

    if path.startswith("/"):
        if options.project_root is None:
            raise UnresolvableLinkError(f"Root-relative link without project root: {target}")
        return join(options.project_root, path.lstrip("/"))
    return join(dirname(document), path)


class LinkScan:
    """Lazy, restartable sequence of link occurrences in one document.

    Each call to ``iter()`` starts a fresh pass over the content, and
    occurrences come out in ascending offset order.
    """

    def __init__(
        self,
        document: Document,
        options: Options | None = None,
        base: NormalizedPath | None = None,
    ) -> None:
        self.document = document
        self.options = options or Options()
        self.base = normalize(base) if base else document.path

    def __iter__(self) -> Iterator[LinkOccurrence]:
        content = self.document.content
        regions = skip_regions(content)
        matches = heapq.merge(
            ((m.start(), LinkKind.INLINE, m) for m in _INLINE_LINK.finditer(content)),
            ((m.start(), LinkKind.REFERENCE, m) for m in _REFERENCE_DEFINITION.finditer(content)),
            key=lambda item: item[0],
        )
        last_end = -1
        for start, kind, match in matches:
            if start < last_end or in_regions(start, regions):
                continue
            occurrence = self._occurrence(kind, match)
            if occurrence is not None:
                last_end = match.end()
                yield occurrence

    def _occurrence(self, kind: LinkKind, match: re.Match[str]) -> LinkOccurrence | None:
        group = "angled" if match.group("angled") is not None else "bare"
        raw = match.group(group)
        if raw is None:
            return None
        start = match.start(group)

        if kind == LinkKind.INLINE and match.group("bang"):
            kind = LinkKind.IMAGE

        path_text, hash_mark, anchor = raw.partition("#")
        path_end = start + len(path_text)
        path, _, _ = path_text.partition("?")
        anchor_span = (path_end + 1, path_end + 1 + len(anchor)) if hash_mark else None

        try:
            resolved: NormalizedPath | None = resolve_target(self.base, path, self.options)
        except UnresolvableLinkError as e:
            logger.debug("Skipping link in %s: %s", self.document.path, e)
            resolved = None
        if not path and not hash_mark:
            resolved = None

        return LinkOccurrence(
            document=self.document.path,
            kind=kind,
            raw_span=(match.start(), match.end()),
            label=match.group("label"),
            target=path,
            target_span=(start, start + len(path)),
            angled=group == "angled",
            anchor=anchor if hash_mark else None,
            anchor_span=anchor_span,
            resolved_target=resolved,
        )


def scan(
    document: Document,
    options: Options | None = None,
    base: NormalizedPath | None = None,
) -> LinkScan:
    """Scan a document's links.

    Args:
        document: The document to scan.
        options: Tracked extensions and project root; defaults apply when None.
        base: Path whose directory relative targets resolve against. Defaults
            to ``document.path``; a moved document passes its pre-move path.

    Returns:
        A restartable iterable of LinkOccurrence.
    """
    return LinkScan(document, options, base)

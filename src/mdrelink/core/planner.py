"""Edit planner: computes the text edits that keep links valid after a change.

``plan`` is a pure function of ``(event, corpus, options_for)``. It reads
no files, keeps no state between calls and emits edits in corpus order,
ascending by span within each document.
"""

from __future__ import annotations

import difflib
import logging
import re
from collections import Counter
from collections.abc import Callable, Iterable, Mapping
from urllib.parse import quote

from mdrelink.core.models import (
    ChangeEvent,
    Document,
    Edit,
    LinkOccurrence,
    LinkStyle,
    Options,
    RenameEvent,
    SaveEvent,
    SlugPolicy,
)
from mdrelink.core.paths import NormalizedPath, dirname, is_within, join, matches_glob, relative
from mdrelink.core.scanner import scan
from mdrelink.core.slugs import Heading, slugged_headings

logger = logging.getLogger(__name__)

OptionsFor = Callable[[NormalizedPath], Options]

# Characters that end or break a link destination
_UNSAFE_BARE = re.compile(r"[\s()<>]")
_UNSAFE_ANGLED = re.compile(r"[<>\n]")


def plan(
    event: ChangeEvent,
    corpus: Iterable[Document],
    options_for: OptionsFor,
) -> list[Edit]:
    """Plan the edits needed to keep links valid after ``event``.

    Args:
        event: The rename or save that happened.
        corpus: Snapshot of every tracked document, taken after the change.
        options_for: Per-document options lookup; must not do I/O.

    Returns:
        Non-overlapping edits in corpus order, ascending by span per document.
    """
    documents = list(corpus)
    if isinstance(event, RenameEvent):
        return plan_rename(event, documents, options_for)
    if isinstance(event, SaveEvent):
        return plan_save(event, documents, options_for)
    raise TypeError(f"Unsupported event: {type(event).__name__}")


def plan_rename(
    event: RenameEvent,
    corpus: list[Document],
    options_for: OptionsFor,
) -> list[Edit]:
    """Plan a file or directory rename."""
    if event.path_before == event.path_after:
        return []

    if _is_directory_rename(event, corpus):
        moves = directory_moves(event, corpus)
        logger.debug(
            "Directory rename %s -> %s covers %d documents",
            event.path_before,
            event.path_after,
            len(moves),
        )
    else:
        moves = {event.path_before: event.path_after}

    return plan_moves(moves, corpus, options_for)


def _is_directory_rename(event: RenameEvent, corpus: list[Document]) -> bool:
    if event.directory is not None:
        return event.directory
    return any(is_within(doc.path, event.path_after) for doc in corpus)


def directory_moves(
    event: RenameEvent,
    corpus: list[Document],
) -> dict[NormalizedPath, NormalizedPath]:
    """Per-file ``{before: after}`` pairs for every document under the moved directory.

    A directory move keeps the subtree shape, so each descendant's old
    path is ``path_before`` joined with its path relative to ``path_after``.
    Documents outside ``path_after`` are not part of the move.
    """
    moves: dict[NormalizedPath, NormalizedPath] = {}
    for doc in corpus:
        if not is_within(doc.path, event.path_after):
            continue
        before = join(event.path_before, relative(event.path_after, doc.path))
        moves[before] = doc.path
    return moves


def plan_moves(
    moves: Mapping[NormalizedPath, NormalizedPath],
    corpus: list[Document],
    options_for: OptionsFor,
) -> list[Edit]:
    """Rewrite every link affected by a set of file moves.

    A link is rewritten when its target moved or when the document holding
    it moved. Links in moved documents resolve against the document's old
    directory, because that is where they were written. Only the path text
    is replaced; labels and anchors stay as they are.
    """
    if not moves:
        return []
    previous = {after: before for before, after in moves.items()}
    edits: list[Edit] = []

    for doc in corpus:
        options = options_for(doc.path)
        if _excluded(doc.path, options):
            continue

        doc_moved = doc.path in previous
        base = previous.get(doc.path, doc.path)
        for occurrence in scan(doc, options, base=base):
            if occurrence.resolved_target is None or not occurrence.target:
                continue
            target_moved = occurrence.resolved_target in moves
            if not (doc_moved or target_moved):
                continue
            new_target = moves.get(occurrence.resolved_target, occurrence.resolved_target)
            edits.append(
                Edit(
                    document=doc.path,
                    span=occurrence.target_span,
                    replacement=_link_path(doc.path, new_target, occurrence, options),
                )
            )

    return edits


def _link_path(
    document: NormalizedPath,
    target: NormalizedPath,
    occurrence: LinkOccurrence,
    options: Options,
) -> str:
    """Path text for ``target`` as seen from ``document``, escaped to stay a valid destination."""
    original = occurrence.target
    if options.link_style == LinkStyle.ABSOLUTE:
        if options.project_root is not None:
            path = "/" + relative(options.project_root, target)
        else:
            path = target
    else:
        path = relative(dirname(document), target)
        if original.startswith("./") and not path.startswith("../"):
            path = f"./{path}"

    if "%" in original:
        return quote(path, safe="/")
    unsafe = _UNSAFE_ANGLED if occurrence.angled else _UNSAFE_BARE
    return unsafe.sub(lambda m: quote(m.group()), path)


def plan_save(
    event: SaveEvent,
    corpus: list[Document],
    options_for: OptionsFor,
) -> list[Edit]:
    """Rewrite anchors in other documents after a heading in ``event.path`` changed."""
    policy = options_for(event.path).slug_policy
    renamed = changed_slugs(event.content_before, event.content_after, policy)
    if not renamed:
        return []
    logger.debug("Save of %s renamed anchors %s", event.path, renamed)

    edits: list[Edit] = []
    for doc in corpus:
        if doc.path == event.path:
            continue
        options = options_for(doc.path)
        if _excluded(doc.path, options):
            continue
        for occurrence in scan(doc, options):
            new_slug = _renamed_anchor(occurrence, event.path, renamed)
            if new_slug is not None and occurrence.anchor_span is not None:
                edits.append(
                    Edit(document=doc.path, span=occurrence.anchor_span, replacement=new_slug)
                )

    return edits


def _renamed_anchor(
    occurrence: LinkOccurrence,
    path: NormalizedPath,
    renamed: Mapping[str, str],
) -> str | None:
    if occurrence.resolved_target != path or occurrence.anchor is None:
        return None
    return renamed.get(occurrence.anchor)


def changed_slugs(
    content_before: str,
    content_after: str,
    policy: SlugPolicy | None = None,
) -> dict[str, str]:
    """Map each heading slug whose heading now has a different slug.

    When the heading count is unchanged, headings pair up by position.
    Otherwise they are aligned with a diff over their undeduplicated slugs,
    and pairs come from ``equal`` and ``replace`` blocks. A pair counts as a
    rename when the old heading text no longer appears as often as before,
    or when only its duplicate suffix shifted. Reordered headings keep
    their slugs and are left out.
    """
    before = slugged_headings(content_before, policy)
    after = slugged_headings(content_after, policy)
    if [h.slug for h in before] == [h.slug for h in after]:
        return {}

    before_counts = Counter(h.key for h in before)
    after_counts = Counter(h.key for h in after)
    renamed: dict[str, str] = {}
    for old, new in _paired_headings(before, after):
        if old.slug == new.slug or old.slug in renamed:
            continue
        if old.key != new.key and after_counts[old.key] >= before_counts[old.key]:
            continue
        renamed[old.slug] = new.slug
    return renamed


def _paired_headings(before: list[Heading], after: list[Heading]) -> list[tuple[Heading, Heading]]:
    if len(before) == len(after):
        return list(zip(before, after))

    pairs: list[tuple[Heading, Heading]] = []
    matcher = difflib.SequenceMatcher(
        a=[h.key for h in before], b=[h.key for h in after], autojunk=False
    )
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag in ("equal", "replace"):
            pairs.extend(zip(before[i1:i2], after[j1:j2]))
    return pairs


def _excluded(path: NormalizedPath, options: Options) -> bool:
    root = options.project_root
    return any(matches_glob(path, pattern, root) for pattern in options.exclude_globs)

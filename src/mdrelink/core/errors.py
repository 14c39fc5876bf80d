"""Error hierarchy for mdrelink."""

from __future__ import annotations


class MdrelinkError(Exception):
    """Base exception for all mdrelink errors."""

    pass


class ConfigError(MdrelinkError):
    """Configuration loading or validation error."""

    pass


class UnresolvableLinkError(MdrelinkError):
    """Link target cannot be mapped to a project path.

    Raised by target resolution and always recovered by the scanner: the
    occurrence is kept with ``resolved_target=None`` and never edited.
    """

    pass


class ConflictingEditError(MdrelinkError):
    """Two planned edits overlap within one document."""

    def __init__(self, document: str, first: tuple[int, int], second: tuple[int, int]) -> None:
        super().__init__(
            f"Overlapping edits in {document}: {first[0]}-{first[1]} and {second[0]}-{second[1]}"
        )
        self.document = document
        self.first = first
        self.second = second


class StaleDocumentError(MdrelinkError):
    """An edit span no longer fits the document's current content."""

    pass


class ReadFailureError(MdrelinkError):
    """A document could not be read from its collaborator."""

    pass


class WriteFailureError(MdrelinkError):
    """A document could not be committed to its collaborator."""

    pass

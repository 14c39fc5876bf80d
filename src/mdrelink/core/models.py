"""Domain models for mdrelink."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mdrelink.core.paths import NormalizedPath, normalize

Span = tuple[int, int]
"""Half-open ``(start, end)`` character offsets into a document."""

DEFAULT_EXTENSIONS: frozenset[str] = frozenset({".md", ".mdx"})


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class Document(_Frozen):
    """A tracked Markdown document captured in a corpus snapshot."""

    path: NormalizedPath = Field(description="Normalized absolute path")
    content: str = Field(description="Full UTF-8 text")

    @field_validator("path")
    @classmethod
    def normalize_path(cls, v: str) -> str:
        return normalize(v)


class RenameEvent(_Frozen):
    """A file or directory moved from ``path_before`` to ``path_after``."""

    kind: Literal["rename"] = "rename"
    path_before: NormalizedPath
    path_after: NormalizedPath
    directory: bool | None = Field(
        default=None,
        description="True for directory moves; None lets the planner infer it from the corpus",
    )

    @field_validator("path_before", "path_after")
    @classmethod
    def normalize_paths(cls, v: str) -> str:
        return normalize(v)


class SaveEvent(_Frozen):
    """A document's own text changed on save."""

    kind: Literal["save"] = "save"
    path: NormalizedPath
    content_before: str
    content_after: str

    @field_validator("path")
    @classmethod
    def normalize_path(cls, v: str) -> str:
        return normalize(v)


ChangeEvent = Annotated[RenameEvent | SaveEvent, Field(discriminator="kind")]


class LinkKind(str, Enum):
    """Syntactic form a link occurrence was found in."""

    INLINE = "inline"
    IMAGE = "image"
    REFERENCE = "reference"


class LinkOccurrence(_Frozen):
    """One link found while scanning a document."""

    document: NormalizedPath
    kind: LinkKind
    raw_span: Span = Field(description="Offsets of the whole link token")
    label: str
    target: str = Field(description="Raw path text, without query or anchor")
    target_span: Span = Field(description="Offsets of the path text")
    angled: bool = Field(default=False, description="Destination written as <...>")
    anchor: str | None = None
    anchor_span: Span | None = Field(default=None, description="Offsets of anchor text, no '#'")
    resolved_target: NormalizedPath | None = Field(
        default=None,
        description="Tracked document the link points at; None for external/unresolvable",
    )


class Edit(_Frozen):
    """Replace ``span`` of ``document`` with ``replacement``."""

    document: NormalizedPath
    span: Span
    replacement: str


class LinkStyle(str, Enum):
    """How rewritten link paths are written."""

    RELATIVE = "relative"
    ABSOLUTE = "absolute"


class SlugPolicy(_Frozen):
    """Rules turning heading text into anchor identifiers."""

    lowercase: bool = True
    strip_punctuation: bool = True
    separator: str = "-"
    honor_custom_ids: bool = Field(default=True, description="Use '{#id}' heading suffixes")
    dedupe: bool = Field(default=True, description="Suffix repeated slugs with -1, -2, ...")


class Options(_Frozen):
    """Per-document planning options."""

    exclude_globs: frozenset[str] = frozenset()
    link_style: LinkStyle = LinkStyle.RELATIVE
    file_extensions_tracked: frozenset[str] = DEFAULT_EXTENSIONS
    project_root: NormalizedPath | None = None
    slug_policy: SlugPolicy = Field(default_factory=SlugPolicy)

    @field_validator("project_root")
    @classmethod
    def normalize_root(cls, v: str | None) -> str | None:
        return normalize(v) if v else None

    @field_validator("file_extensions_tracked")
    @classmethod
    def lowercase_extensions(cls, v: frozenset[str]) -> frozenset[str]:
        return frozenset(ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in v)


class ApplyStatus(str, Enum):
    """Outcome of committing one document's edits."""

    APPLIED = "applied"
    FAILED = "failed"


class ApplyResult(BaseModel):
    """Result of applying the edits planned for one document."""

    document: NormalizedPath
    status: ApplyStatus
    edits: int = Field(default=0, description="Number of edits committed")
    reason: str | None = Field(default=None, description="Failure reason")


class EventReport(BaseModel):
    """Everything a caller needs to know after one event was processed."""

    event_kind: str
    planned: int = Field(default=0, description="Number of planned edits")
    results: list[ApplyResult] = Field(default_factory=list)

    @property
    def failed(self) -> list[ApplyResult]:
        """Documents whose edits were not committed."""
        return [r for r in self.results if r.status == ApplyStatus.FAILED]

    @property
    def applied(self) -> list[ApplyResult]:
        """Documents whose edits were committed."""
        return [r for r in self.results if r.status == ApplyStatus.APPLIED]


class SessionStatus(str, Enum):
    """Current state of an mdrelink session."""

    IDLE = "idle"
    PLANNING = "planning"
    APPLYING = "applying"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"
    ERROR = "error"

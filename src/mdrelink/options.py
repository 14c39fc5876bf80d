"""Options registry: resolves per-document planning options from config."""

from __future__ import annotations

import logging

from mdrelink.config import MdrelinkConfig, OverrideConfig
from mdrelink.core.models import Options
from mdrelink.core.paths import NormalizedPath, matches_glob, normalize

logger = logging.getLogger(__name__)


class OptionsRegistry:
    """Routes document paths to the Options that apply to them.

    Base options come from the top-level config. Every override whose
    ``paths`` globs match a document is layered on top, in file order,
    so later overrides win.
    """

    def __init__(self, root: str, config: MdrelinkConfig | None = None) -> None:
        self._root = normalize(root)
        self._config = config or MdrelinkConfig()
        self._base = Options(
            exclude_globs=frozenset(self._config.exclude),
            link_style=self._config.link_style,
            file_extensions_tracked=frozenset(self._config.extensions),
            project_root=self._root,
            slug_policy=self._config.slugs,
        )
        self._cache: dict[NormalizedPath, Options] = {}

    @property
    def root(self) -> NormalizedPath:
        """Normalized project root."""
        return self._root

    @property
    def base(self) -> Options:
        """Options for documents no override matches."""
        return self._base

    def resolve(self, path: NormalizedPath) -> Options:
        """Options for one document. Pure lookup, cached per path."""
        cached = self._cache.get(path)
        if cached is not None:
            return cached

        options = self._base
        for override in self._config.overrides:
            if any(matches_glob(path, glob, self._root) for glob in override.paths):
                options = _layer(options, override)

        self._cache[path] = options
        return options

    __call__ = resolve


def _layer(options: Options, override: OverrideConfig) -> Options:
    """Apply the fields an override sets."""
    update: dict[str, object] = {}
    if override.exclude is not None:
        update["exclude_globs"] = frozenset(override.exclude)
    if override.link_style is not None:
        update["link_style"] = override.link_style
    if override.extensions is not None:
        update["file_extensions_tracked"] = frozenset(override.extensions)
    if override.slugs is not None:
        update["slug_policy"] = override.slugs
    if not update:
        logger.warning("Override for %s sets no options", override.paths)
    return options.model_copy(update=update)

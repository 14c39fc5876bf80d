"""Tests for the per-document options registry."""

from __future__ import annotations

from mdrelink.config import MdrelinkConfig, OverrideConfig
from mdrelink.core.models import LinkStyle, SlugPolicy
from mdrelink.options import OptionsRegistry


def make_registry(*overrides: OverrideConfig) -> OptionsRegistry:
    config = MdrelinkConfig(exclude=["drafts/**"], overrides=list(overrides))
    return OptionsRegistry("/p", config)


class TestOptionsRegistry:
    """Tests for OptionsRegistry.resolve()."""

    def test_base_options_from_config(self) -> None:
        options = make_registry().resolve("/p/docs/a.md")

        assert options.project_root == "/p"
        assert options.exclude_globs == frozenset({"drafts/**"})
        assert options.link_style == LinkStyle.RELATIVE
        assert options.file_extensions_tracked == frozenset({".md", ".mdx"})

    def test_matching_override_applies(self) -> None:
        registry = make_registry(OverrideConfig(paths=["blog/**"], link_style=LinkStyle.ABSOLUTE))

        assert registry.resolve("/p/blog/post.md").link_style == LinkStyle.ABSOLUTE
        assert registry.resolve("/p/docs/a.md").link_style == LinkStyle.RELATIVE

    def test_later_override_wins(self) -> None:
        registry = make_registry(
            OverrideConfig(paths=["**/*.md"], slugs=SlugPolicy(separator="_")),
            OverrideConfig(paths=["blog/**"], slugs=SlugPolicy(separator="+")),
        )

        assert registry.resolve("/p/blog/post.md").slug_policy.separator == "+"
        assert registry.resolve("/p/docs/a.md").slug_policy.separator == "_"

    def test_override_keeps_unset_fields(self) -> None:
        registry = make_registry(OverrideConfig(paths=["blog/**"], extensions=[".md"]))
        options = registry.resolve("/p/blog/post.md")

        assert options.file_extensions_tracked == frozenset({".md"})
        assert options.exclude_globs == frozenset({"drafts/**"})

    def test_registry_is_callable(self) -> None:
        registry = make_registry()
        assert registry("/p/a.md") == registry.resolve("/p/a.md")

    def test_resolution_is_stable(self) -> None:
        registry = make_registry()
        assert registry.resolve("/p/a.md") is registry.resolve("/p/a.md")

    def test_root_is_normalized(self) -> None:
        assert OptionsRegistry("C:\\proj\\").root == "C:/proj/"

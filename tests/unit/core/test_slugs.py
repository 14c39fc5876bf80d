"""Tests for heading extraction and slug policy."""

from __future__ import annotations

from mdrelink.core.models import SlugPolicy
from mdrelink.core.slugs import Heading, heading_slugs, slugged_headings, slugify


class TestSlugify:
    """Tests for slugify() under the default and custom policies."""

    def test_default_policy(self) -> None:
        assert slugify("Old Title") == "old-title"

    def test_strips_punctuation(self) -> None:
        assert slugify("Hello, World!") == "hello-world"

    def test_strips_inline_markup(self) -> None:
        assert slugify("API `v2` *notes*") == "api-v2-notes"

    def test_link_in_heading_keeps_label(self) -> None:
        assert slugify("See [the guide](guide.md)") == "see-the-guide"

    def test_keeps_hyphens(self) -> None:
        assert slugify("Pre-flight checks") == "pre-flight-checks"

    def test_case_preserved_when_disabled(self) -> None:
        assert slugify("Old Title", SlugPolicy(lowercase=False)) == "Old-Title"

    def test_custom_separator(self) -> None:
        assert slugify("Old Title", SlugPolicy(separator="_")) == "old_title"

    def test_punctuation_kept_when_disabled(self) -> None:
        assert slugify("v1.2 notes", SlugPolicy(strip_punctuation=False)) == "v1.2-notes"


class TestHeadingSlugs:
    """Tests for heading_slugs()."""

    def test_atx_headings(self) -> None:
        assert heading_slugs("# Intro\n\ntext\n\n## Next Step ##\n") == ["intro", "next-step"]

    def test_duplicates_are_suffixed(self) -> None:
        assert heading_slugs("# A\n## A\n### A\n") == ["a", "a-1", "a-2"]

    def test_duplicates_kept_when_dedupe_disabled(self) -> None:
        assert heading_slugs("# A\n## A\n", SlugPolicy(dedupe=False)) == ["a", "a"]

    def test_custom_id(self) -> None:
        assert heading_slugs("## Setup {#install}\n") == ["install"]

    def test_custom_id_ignored_when_disabled(self) -> None:
        assert heading_slugs("## Setup {#install}\n", SlugPolicy(honor_custom_ids=False)) == [
            "setup"
        ]

    def test_setext_headings(self) -> None:
        assert heading_slugs("Title\n=====\n\nSub Part\n---\n") == ["title", "sub-part"]

    def test_headings_in_code_are_ignored(self) -> None:
        assert heading_slugs("```\n# not a heading\n```\n# Real\n") == ["real"]

    def test_front_matter_is_not_a_heading(self) -> None:
        assert heading_slugs("---\ntitle: x\n---\n# H\n") == ["h"]

    def test_hash_without_space_is_not_a_heading(self) -> None:
        assert heading_slugs("#hashtag\n") == []

    def test_rule_after_code_fence_is_not_a_heading(self) -> None:
        assert heading_slugs("```\ncode\n```\n---\n\n# Real\n") == ["real"]

    def test_list_item_before_rule_is_not_a_heading(self) -> None:
        assert heading_slugs("- item\n---\n\n1. step\n---\n") == []

    def test_table_before_rule_is_not_a_heading(self) -> None:
        assert heading_slugs("| a | b |\n---\n") == []

    def test_multiline_setext_heading_joins_lines(self) -> None:
        assert heading_slugs("Getting\nStarted\n===\n") == ["getting-started"]

    def test_slugged_headings_keep_undeduplicated_key(self) -> None:
        assert slugged_headings("# Intro\n# Intro\n## Setup {#install}\n") == [
            Heading("intro", "intro"),
            Heading("intro", "intro-1"),
            Heading("install", "install"),
        ]

"""Tests for the table loader."""

from __future__ import annotations

import httpx
import pytest

from repolang.exceptions import ConfigLoadError
from repolang.patterns import Dialect, compile_pattern
from repolang.tables import (
    build_context,
    extract_generated_patterns,
    load_bundled_context,
    load_context,
    load_remote_context,
)


class TestBundledTables:
    def test_loads_and_is_cached(self):
        ctx = load_bundled_context()
        assert ctx is load_bundled_context()
        assert ctx.source == "bundled"
        assert ctx.languages["Python"].category == "programming"
        assert ctx.languages["Text"].category == "prose"

    def test_groups_point_at_parents(self):
        ctx = load_bundled_context()
        assert ctx.parent_of("TSX") == "TypeScript"
        assert ctx.parent_of("JSON with Comments") == "JSON"
        assert ctx.parent_of("Python") is None

    def test_every_parent_is_top_level(self):
        ctx = load_bundled_context()
        for lang in ctx.languages.values():
            if lang.group and lang.group in ctx.languages:
                assert ctx.languages[lang.group].group is None

    def test_all_bundled_regexes_compile(self):
        ctx = load_bundled_context()
        patterns = list(ctx.vendor_patterns) + list(ctx.generated_patterns)
        stack = [rule for group in ctx.disambiguations for rule in group.rules]
        while stack:
            rule = stack.pop()
            patterns.extend(rule.patterns)
            patterns.extend(rule.negative_patterns)
            stack.extend(rule.and_rules)
        for pattern in patterns:
            compile_pattern(pattern, Dialect.REGEX, source="bundled")

    def test_heuristic_languages_exist(self):
        ctx = load_bundled_context()
        for group in ctx.disambiguations:
            for rule in group.rules:
                assert rule.language in ctx.languages, rule.language

    @pytest.mark.asyncio
    async def test_load_context_bundled(self):
        assert await load_context("bundled") is load_bundled_context()

    @pytest.mark.asyncio
    async def test_load_context_unknown_source(self):
        with pytest.raises(ConfigLoadError):
            await load_context("ftp")


class TestBuildContext:
    def test_alias_resolution_is_case_insensitive(self, context):
        assert context.resolve_alias("JS") == "JavaScript"
        assert context.resolve_alias("Python") == "Python"
        assert context.resolve_alias("cobol") == "cobol"

    def test_without_languages(self, context):
        ctx = context.without_languages(["python", "SHELL"])
        assert "Python" not in ctx.languages
        assert "Shell" not in ctx.languages
        assert "Python" in context.languages

    def test_language_list_uses_first_element(self):
        ctx = build_context(
            {"A": {"type": "data"}, "B": {"type": "data"}},
            heuristics={"disambiguations": [{"extensions": [".X"], "rules": [{"language": ["B", "A"]}]}]},
        )
        group = ctx.disambiguations[0]
        assert group.extensions == (".x",)
        assert group.rules[0].language == "B"
        assert group.rules[0].unconditional

    def test_named_and_inline_patterns_concatenate(self):
        ctx = build_context(
            {"A": {"type": "data"}},
            heuristics={
                "disambiguations": [
                    {"extensions": [".a"], "rules": [{"language": "A", "pattern": "x", "named_pattern": "n"}]}
                ],
                "named_patterns": {"n": ["y", "z"]},
            },
        )
        assert ctx.disambiguations[0].rules[0].patterns == ("x", "y", "z")

    def test_and_clauses(self):
        ctx = build_context(
            {"A": {"type": "data"}},
            heuristics={
                "disambiguations": [
                    {
                        "extensions": [".a"],
                        "rules": [{"language": "A", "and": [{"pattern": "x"}, {"negative_pattern": "y"}]}],
                    }
                ]
            },
        )
        rule = ctx.disambiguations[0].rules[0]
        assert [r.patterns for r in rule.and_rules] == [("x",), ()]
        assert rule.and_rules[1].negative_patterns == ("y",)

    def test_nested_groups_are_flattened(self):
        ctx = build_context(
            {
                "Top": {"type": "programming"},
                "Mid": {"type": "programming", "group": "Top"},
                "Leaf": {"type": "programming", "group": "Mid"},
            }
        )
        assert ctx.parent_of("Leaf") == "Top"

    def test_self_group_is_dropped(self):
        ctx = build_context({"A": {"type": "data", "group": "A"}})
        assert ctx.parent_of("A") is None

    @pytest.mark.parametrize(
        "languages",
        [
            {},
            {"A": "not a mapping"},
            {"A": {"type": "code"}},
            {"A": {"type": "data", "extensions": [1, 2]}},
        ],
    )
    def test_malformed_languages_raise(self, languages):
        with pytest.raises(ConfigLoadError):
            build_context(languages)

    def test_unknown_named_pattern_raises(self):
        with pytest.raises(ConfigLoadError):
            build_context(
                {"A": {"type": "data"}},
                heuristics={"disambiguations": [{"extensions": [".a"], "rules": [{"language": "A", "named_pattern": "nope"}]}]},
            )

    def test_vendor_must_be_string_list(self):
        with pytest.raises(ConfigLoadError):
            build_context({"A": {"type": "data"}}, vendor=[1])


GENERATED_RB = r"""
    def cargo_lock?
      !!name.match(/Cargo\.lock/)
    end

    def generated_net_designer_file?
      !!name.match(/\.designer\.(cs|vb)$/i)
    end

    def esy_lock?
      !!name.match(/(^|\/)(\w+\.)?esy\.lock$/)
    end
"""


class TestGeneratedRb:
    def test_extracts_unflagged_regexes(self):
        assert extract_generated_patterns(GENERATED_RB) == [
            r"Cargo\.lock",
            r"(^|\/)(\w+\.)?esy\.lock$",
        ]


LANGUAGES_YML = """
Python:
  type: programming
  extensions: [".py"]
"""
VENDOR_YML = "- '(^|/)vendor/'\n"
HEURISTICS_YML = "disambiguations: []\n"


class TestRemoteTables:
    @staticmethod
    def _client(handler):
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    @pytest.mark.asyncio
    async def test_downloads_all_tables(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.path)
            name = request.url.path.rsplit("/", 1)[-1]
            body = {
                "languages.yml": LANGUAGES_YML,
                "vendor.yml": VENDOR_YML,
                "heuristics.yml": HEURISTICS_YML,
                "generated.rb": GENERATED_RB,
            }[name]
            return httpx.Response(200, text=body)

        async with self._client(handler) as client:
            ctx = await load_remote_context(ref="v9", client=client)

        assert ctx.source == "remote@v9"
        assert list(ctx.languages) == ["Python"]
        assert ctx.vendor_patterns == ("(^|/)vendor/",)
        assert r"Cargo\.lock" in ctx.generated_patterns
        assert all("/v9/lib/linguist/" in path for path in seen)

    @pytest.mark.asyncio
    async def test_http_failure_is_config_error(self):
        async with self._client(lambda request: httpx.Response(404)) as client:
            with pytest.raises(ConfigLoadError):
                await load_remote_context(ref="HEAD", client=client)

    @pytest.mark.asyncio
    async def test_invalid_yaml_is_config_error(self):
        async with self._client(lambda request: httpx.Response(200, text="a: [b")) as client:
            with pytest.raises(ConfigLoadError):
                await load_remote_context(ref="HEAD", client=client)

"""Configuration table loader: languages, vendor paths, generated paths, heuristics.

Bundled tables ship in ``repolang/data``.  Remote mode fetches the same files
from the upstream linguist repository (``generated.rb`` is scanned for its
name-based regexes instead of being shipped as YAML).
"""

from __future__ import annotations

import functools
import os
import re
from collections.abc import Mapping
from dataclasses import replace
from importlib import resources
from typing import Any

import httpx
import structlog
import yaml

from repolang.exceptions import ConfigLoadError
from repolang.models.language import (
    CATEGORIES,
    Disambiguation,
    HeuristicRule,
    LanguageDefinition,
    LinguistContext,
)

log = structlog.get_logger("repolang.tables")

UPSTREAM_RAW_URL = "https://raw.githubusercontent.com/github-linguist/linguist/{ref}/lib/linguist/{name}"

_BUNDLED = {
    "languages": "languages.yml",
    "vendor": "vendor.yml",
    "generated": "generated.yml",
    "heuristics": "heuristics.yml",
}

# Matches the body of `name.match(/.../)` in generated.rb (flagged regexes are skipped).
_GENERATED_RB_RE = re.compile(r"(?<=name\.match\(/).+?(?=(?<!\\)/\))")


# ── public ───────────────────────────────────────────────────────────────


async def load_context(
    source: str = "bundled",
    ref: str | None = None,
    client: httpx.AsyncClient | None = None,
) -> LinguistContext:
    """Load the tables from ``"bundled"`` data or the ``"remote"`` upstream repository."""
    if source == "bundled":
        return load_bundled_context()
    if source == "remote":
        return await load_remote_context(ref=ref, client=client)
    raise ConfigLoadError(source, "unknown table source (expected 'bundled' or 'remote')")


@functools.lru_cache(maxsize=1)
def load_bundled_context() -> LinguistContext:
    """Load the tables shipped with the package (cached for the process)."""
    raw = {key: _parse_yaml(_read_bundled(name), name) for key, name in _BUNDLED.items()}
    return build_context(
        languages=raw["languages"],
        vendor=raw["vendor"],
        generated=raw["generated"],
        heuristics=raw["heuristics"],
        source="bundled",
    )


async def load_remote_context(
    ref: str | None = None,
    client: httpx.AsyncClient | None = None,
) -> LinguistContext:
    """Download the upstream linguist tables at *ref* (default ``$REPOLANG_LINGUIST_REF`` or HEAD)."""
    ref = ref or os.environ.get("REPOLANG_LINGUIST_REF", "HEAD")
    owns_client = client is None
    http = client or httpx.AsyncClient(timeout=30.0, follow_redirects=True)
    try:
        texts: dict[str, str] = {}
        for name in ("languages.yml", "vendor.yml", "heuristics.yml", "generated.rb"):
            url = UPSTREAM_RAW_URL.format(ref=ref, name=name)
            try:
                resp = await http.get(url)
                resp.raise_for_status()
            except httpx.HTTPError as e:
                raise ConfigLoadError(url, str(e)) from e
            texts[name] = resp.text
            log.debug("tables.fetched", url=url, size=len(resp.text))
    finally:
        if owns_client:
            await http.aclose()

    return build_context(
        languages=_parse_yaml(texts["languages.yml"], "languages.yml"),
        vendor=_parse_yaml(texts["vendor.yml"], "vendor.yml"),
        generated=extract_generated_patterns(texts["generated.rb"]),
        heuristics=_parse_yaml(texts["heuristics.yml"], "heuristics.yml"),
        source=f"remote@{ref}",
    )


def extract_generated_patterns(ruby_source: str) -> list[str]:
    """Pull the ``name.match(/regex/)`` bodies out of linguist's generated.rb."""
    return _GENERATED_RB_RE.findall(ruby_source)


def build_context(
    languages: Mapping[str, Any],
    vendor: list[str] | None = None,
    generated: list[str] | None = None,
    heuristics: Mapping[str, Any] | None = None,
    source: str = "inline",
) -> LinguistContext:
    """Validate already-parsed table data and build an immutable context.

    Raises :class:`ConfigLoadError` when a table does not have the expected shape.
    """
    langs = _build_languages(languages, source)
    return LinguistContext(
        languages=langs,
        vendor_patterns=tuple(_string_list(vendor or [], f"{source}:vendor")),
        generated_patterns=tuple(_string_list(generated or [], f"{source}:generated")),
        disambiguations=_build_disambiguations(heuristics or {}, f"{source}:heuristics"),
        source=source,
    )


# ── internal ─────────────────────────────────────────────────────────────


def _read_bundled(name: str) -> str:
    try:
        return resources.files("repolang.data").joinpath(name).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigLoadError(name, str(e)) from e


def _parse_yaml(text: str, source: str) -> Any:
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigLoadError(source, f"invalid YAML: {e}") from e


def _as_tuple(value: Any, source: str, key: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return tuple(value)
    raise ConfigLoadError(source, f"'{key}' must be a string or a list of strings")


def _string_list(value: Any, source: str) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigLoadError(source, "expected a list of strings")
    return value


def _build_languages(data: Mapping[str, Any], source: str) -> dict[str, LanguageDefinition]:
    if not isinstance(data, Mapping) or not data:
        raise ConfigLoadError(f"{source}:languages", "expected a non-empty mapping of languages")

    langs: dict[str, LanguageDefinition] = {}
    for name, entry in data.items():
        name = str(name)
        if not isinstance(entry, Mapping):
            raise ConfigLoadError(f"{source}:languages", f"entry for {name!r} is not a mapping")
        category = entry.get("type")
        if category not in CATEGORIES:
            raise ConfigLoadError(
                f"{source}:languages", f"{name!r} has invalid type {category!r}"
            )
        group = entry.get("group")
        if group == name:
            group = None
        langs[name] = LanguageDefinition(
            name=name,
            category=category,
            group=group,
            filenames=_as_tuple(entry.get("filenames"), source, f"{name}.filenames"),
            extensions=_as_tuple(entry.get("extensions"), source, f"{name}.extensions"),
            interpreters=_as_tuple(entry.get("interpreters"), source, f"{name}.interpreters"),
            aliases=_as_tuple(entry.get("aliases"), source, f"{name}.aliases"),
            color=entry.get("color"),
        )

    # Grouping is a two-level forest: point every child at its top-level ancestor.
    for name, lang in list(langs.items()):
        root = lang.group
        seen = {name}
        while root in langs and langs[root].group and root not in seen:
            seen.add(root)
            root = langs[root].group
        if root in seen:
            raise ConfigLoadError(f"{source}:languages", f"cyclic group for {name!r}")
        if root != lang.group:
            log.warning("tables.group_flattened", language=name, group=lang.group, root=root)
            langs[name] = replace(lang, group=root)
    return langs


def _build_rule(
    entry: Mapping[str, Any],
    language: str,
    named: Mapping[str, tuple[str, ...]],
    source: str,
) -> HeuristicRule:
    patterns = list(_as_tuple(entry.get("pattern"), source, "pattern"))
    named_key = entry.get("named_pattern")
    if named_key is not None:
        if named_key not in named:
            raise ConfigLoadError(source, f"unknown named_pattern {named_key!r}")
        patterns.extend(named[named_key])
    and_rules = tuple(
        _build_rule(clause, language, named, source) for clause in entry.get("and") or []
    )
    return HeuristicRule(
        language=language,
        patterns=tuple(patterns),
        negative_patterns=_as_tuple(entry.get("negative_pattern"), source, "negative_pattern"),
        and_rules=and_rules,
    )


def _build_disambiguations(
    data: Mapping[str, Any],
    source: str,
) -> tuple[Disambiguation, ...]:
    if not isinstance(data, Mapping):
        raise ConfigLoadError(source, "expected a mapping with 'disambiguations'")
    named = {
        str(k): _as_tuple(v, source, f"named_patterns.{k}")
        for k, v in (data.get("named_patterns") or {}).items()
    }

    groups: list[Disambiguation] = []
    for group in data.get("disambiguations") or []:
        if not isinstance(group, Mapping):
            raise ConfigLoadError(source, "each disambiguation must be a mapping")
        extensions = _as_tuple(group.get("extensions"), source, "extensions")
        rules: list[HeuristicRule] = []
        for entry in group.get("rules") or []:
            if not isinstance(entry, Mapping):
                raise ConfigLoadError(source, f"rule for {extensions} is not a mapping")
            language = entry.get("language")
            # Only the first language of a list is ever used.
            if isinstance(language, list):
                language = language[0] if language else None
            if not isinstance(language, str):
                raise ConfigLoadError(source, f"rule for {extensions} has no language")
            rules.append(_build_rule(entry, language, named, source))
        groups.append(
            Disambiguation(
                extensions=tuple(ext.lower() for ext in extensions),
                rules=tuple(rules),
            )
        )
    return tuple(groups)

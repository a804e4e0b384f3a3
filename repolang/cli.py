"""CLI entry point: repolang.

Subcommands:
    repolang analyse [PATHS...]          # Language breakdown of one or more folders
    repolang analyse . --json            # Full result as JSON
    repolang analyse . -t languages.count
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

import click
from pydantic import ValidationError

from repolang import __version__
from repolang.analyser import analyse
from repolang.config import AnalysisOptions
from repolang.core.logging import setup_logging
from repolang.exceptions import RepolangError
from repolang.models.result import AnalysisResult
from repolang.samples import DirectorySampleProvider, GitHubSampleProvider, SampleProvider
from repolang.tables import load_bundled_context, load_remote_context


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
@click.version_option(__version__, prog_name="repolang")
def main(verbose: bool) -> None:
    """repolang: classify repository files by language and count bytes per language."""
    setup_logging("DEBUG" if verbose else None)


@click.command("analyse")
@click.argument("paths", nargs=-1, type=click.Path(exists=True))
@click.option("-i", "--ignored-files", multiple=True, help="Gitignore-style glob to skip (repeatable)")
@click.option("-l", "--ignored-languages", multiple=True, help="Language to leave out (repeatable)")
@click.option(
    "-c",
    "--categories",
    multiple=True,
    type=click.Choice(["data", "markup", "programming", "prose"]),
    help="Only include these language categories (repeatable)",
)
@click.option("-C", "--child-languages", is_flag=True, help="Report child languages instead of their parents")
@click.option("-j", "--json", "as_json", is_flag=True, help="Print the result as JSON")
@click.option("-t", "--tree", default=None, help="Dot-delimited path into the JSON result to print")
@click.option("-q", "--quick", is_flag=True, help="Skip attributes, gitignores, heuristics and shebangs")
@click.option("-V", "--keep-vendored", is_flag=True, help="Keep vendored, generated and gitignored files")
@click.option("-B", "--keep-binary", is_flag=True, help="Keep binary files")
@click.option("--attributes/--no-attributes", "check_attributes", default=True, help="Read .gitattributes files")
@click.option("--ignored/--no-ignored", "check_ignored", default=True, help="Read .gitignore files")
@click.option("--heuristics/--no-heuristics", "check_heuristics", default=True, help="Apply content heuristics")
@click.option("--shebang/--no-shebang", "check_shebang", default=True, help="Check shebang lines")
@click.option("--remote-tables", is_flag=True, help="Download current language tables from upstream linguist")
@click.option("--samples-dir", type=click.Path(exists=True, file_okay=False), help="Local samples/<Language>/ corpus")
@click.option("--github-samples", is_flag=True, help="Fetch reference samples from upstream linguist")
@click.option("--concurrency", type=int, default=8, show_default=True, help="Files classified in parallel")
def analyse_cmd(
    paths: tuple[str, ...],
    ignored_files: tuple[str, ...],
    ignored_languages: tuple[str, ...],
    categories: tuple[str, ...],
    child_languages: bool,
    as_json: bool,
    tree: str | None,
    quick: bool,
    keep_vendored: bool,
    keep_binary: bool,
    check_attributes: bool,
    check_ignored: bool,
    check_heuristics: bool,
    check_shebang: bool,
    remote_tables: bool,
    samples_dir: str | None,
    github_samples: bool,
    concurrency: int,
) -> None:
    """Analyse the languages of all files in PATHS (default: current folder)."""
    if samples_dir and github_samples:
        raise click.UsageError("--samples-dir and --github-samples are mutually exclusive")
    try:
        options = AnalysisOptions(
            ignored_files=list(ignored_files),
            ignored_languages=list(ignored_languages),
            categories=list(categories) or None,
            child_languages=child_languages,
            keep_vendored=keep_vendored,
            keep_binary=keep_binary,
            check_attributes=check_attributes,
            check_ignored=check_ignored,
            check_heuristics=check_heuristics,
            check_shebang=check_shebang,
            quick=quick,
            concurrency=concurrency,
        )
    except ValidationError as e:
        raise click.UsageError(str(e)) from e

    try:
        result = asyncio.run(
            _run(list(paths) or ["."], options, remote_tables, samples_dir, github_samples)
        )
    except (RepolangError, OSError) as e:
        raise click.ClickException(str(e)) from e

    if tree:
        click.echo(_format_json(_traverse(result.model_dump(), tree)))
    elif as_json:
        click.echo(result.model_dump_json(indent=2))
    else:
        _print_report(result)


main.add_command(analyse_cmd)
main.add_command(analyse_cmd, name="analyze")


async def _run(
    paths: list[str],
    options: AnalysisOptions,
    remote_tables: bool,
    samples_dir: str | None,
    github_samples: bool,
) -> AnalysisResult:
    context = await load_remote_context() if remote_tables else load_bundled_context()
    provider: SampleProvider | None = None
    if samples_dir:
        provider = DirectorySampleProvider(samples_dir)
    if github_samples:
        async with GitHubSampleProvider() as gh:
            return await analyse(paths, options, context=context, sample_provider=gh)
    return await analyse(paths, options, context=context, sample_provider=provider)


def _traverse(data: Any, tree: str) -> Any:
    node = data
    for part in tree.split("."):
        if not isinstance(node, dict) or part not in node:
            raise click.UsageError(f"Key '{part}' cannot be found on the output object")
        node = node[part]
    return node


def _format_json(value: Any) -> str:
    if isinstance(value, (dict, list)):
        return json.dumps(value, indent=2)
    return str(value)


def _print_report(result: AnalysisResult) -> None:
    files, languages, unknown = result.files, result.languages, result.unknown
    click.echo(f"Analysed {files.bytes:,} B from {files.count} files with repolang")
    click.echo("\n Language analysis results:")
    ranked = sorted(languages.results.items(), key=lambda kv: kv[1].bytes, reverse=True)
    total = languages.bytes
    for i, (name, stats) in enumerate(ranked, 1):
        percent = stats.bytes / (total or 1) * 100
        click.echo(f"  {i:>2}. {name:<24} {percent:>5.2f}% {stats.bytes:>10,} B")
    click.echo(f" Total: {total:,} B")

    if unknown.bytes > 0:
        click.echo("\n Unknown files and extensions:")
        for name, size in unknown.filenames.items():
            click.echo(f"  '{name}': {size:,} B")
        for ext, size in unknown.extensions.items():
            click.echo(f"  '{ext}': {size:,} B")
        click.echo(f" Total: {unknown.bytes:,} B")


if __name__ == "__main__":
    main()

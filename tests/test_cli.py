"""Tests for the repolang CLI."""

from __future__ import annotations

import json
import logging

import pytest
from click.testing import CliRunner

from repolang.cli import main

QUIET = {"REPOLANG_LOG_LEVEL": "WARNING"}


@pytest.fixture(autouse=True)
def _restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def repo(make_tree):
    return make_tree({
        "main.py": "print('hello world')\n",
        "notes.txt": "abc\n",
        "data.xyz": "??",
        "node_modules/dep/index.js": "module.exports = 1;\n",
    })


def _run(*args):
    return CliRunner().invoke(main, list(args), env=QUIET)


class TestAnalyse:
    def test_human_report(self, repo):
        result = _run("analyse", str(repo))
        assert result.exit_code == 0, result.output
        lines = result.output.splitlines()
        assert lines[0] == "Analysed 27 B from 3 files with repolang"
        assert "   1. Python                   84.00%         21 B" in lines
        assert "   2. Text                     16.00%          4 B" in lines
        assert " Total: 25 B" in lines
        assert "  '.xyz': 2 B" in lines
        assert "index.js" not in result.output

    def test_json(self, repo):
        result = _run("analyse", str(repo), "--json")
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["languages"]["count"] == 2
        assert data["unknown"]["extensions"] == {".xyz": 2}
        assert data["languages"]["results"]["Python"]["type"] == "programming"

    def test_tree(self, repo):
        result = _run("analyse", str(repo), "-t", "languages.count")
        assert result.exit_code == 0, result.output
        assert result.output.strip() == "2"

    def test_tree_subobject_is_json(self, repo):
        result = _run("analyse", str(repo), "-t", "unknown.extensions")
        assert json.loads(result.output) == {".xyz": 2}

    def test_tree_missing_key(self, repo):
        result = _run("analyse", str(repo), "-t", "languages.nope")
        assert result.exit_code == 2
        assert "nope" in result.output

    def test_analyze_alias(self, repo):
        result = _run("analyze", str(repo), "-j")
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["files"]["count"] == 3

    def test_options_forwarded(self, repo):
        result = _run("analyse", str(repo), "-j", "-V", "-l", "text", "-c", "programming")
        data = json.loads(result.output)
        assert set(data["languages"]["results"]) == {"Python", "JavaScript"}

    def test_ignored_files_option(self, repo):
        result = _run("analyse", str(repo), "-j", "-i", "*.py")
        data = json.loads(result.output)
        assert "Python" not in data["languages"]["results"]

    def test_invalid_category(self, repo):
        result = _run("analyse", str(repo), "-c", "poetry")
        assert result.exit_code == 2

    def test_missing_path(self, tmp_path):
        result = _run("analyse", str(tmp_path / "nope"))
        assert result.exit_code == 2

    def test_sample_sources_are_exclusive(self, repo, tmp_path):
        result = _run("analyse", str(repo), "--samples-dir", str(tmp_path), "--github-samples")
        assert result.exit_code == 2

    def test_version(self):
        result = _run("--version")
        assert result.exit_code == 0
        assert "0.1.0" in result.output

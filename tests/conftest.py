"""Shared pytest fixtures for repolang tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from repolang.config import AnalysisOptions
from repolang.tables import build_context

LANGUAGES = {
    "C": {"type": "programming", "color": "#555555", "extensions": [".c", ".h"]},
    "C++": {"type": "programming", "color": "#f34b7d", "extensions": [".cpp", ".hpp", ".h"]},
    "JSON": {"type": "data", "color": "#292929", "extensions": [".json"]},
    "JSON with Comments": {
        "type": "data",
        "group": "JSON",
        "extensions": [".jsonc"],
        "filenames": ["tsconfig.json"],
    },
    "JavaScript": {
        "type": "programming",
        "color": "#f1e05a",
        "aliases": ["js", "node"],
        "extensions": [".js"],
        "interpreters": ["node"],
    },
    "MATLAB": {"type": "programming", "color": "#e16737", "extensions": [".m"]},
    "Markdown": {"type": "prose", "color": "#083fa1", "aliases": ["md"], "extensions": [".md"]},
    "Mercury": {"type": "programming", "color": "#ff2b2b", "extensions": [".m"]},
    "Objective-C": {
        "type": "programming",
        "color": "#438eff",
        "aliases": ["objc"],
        "extensions": [".m", ".h"],
    },
    "Python": {
        "type": "programming",
        "color": "#3572A5",
        "aliases": ["python3"],
        "extensions": [".py"],
        "interpreters": ["python", "python3"],
    },
    "Shell": {
        "type": "programming",
        "color": "#89e051",
        "aliases": ["sh", "bash"],
        "extensions": [".sh"],
        "interpreters": ["bash", "sh"],
    },
    "Tcsh": {"type": "programming", "group": "Shell", "extensions": [".tcsh"], "interpreters": ["tcsh"]},
    "Text": {"type": "prose", "extensions": [".txt"], "filenames": ["LICENSE", "README.txt"]},
    "TSX": {"type": "programming", "color": "#3178c6", "group": "TypeScript", "extensions": [".tsx"]},
    "TypeScript": {"type": "programming", "color": "#3178c6", "aliases": ["ts"], "extensions": [".ts"]},
}

HEURISTICS = {
    "disambiguations": [
        {
            "extensions": [".h"],
            "rules": [
                {"language": "Objective-C", "named_pattern": "objectivec"},
                {"language": "C++", "pattern": r"^\s*template\s*<|std::\w+"},
                {"language": "C"},
            ],
        },
        {
            "extensions": [".m"],
            "rules": [
                {"language": "Objective-C", "named_pattern": "objectivec"},
                {"language": "Mercury", "pattern": ":- module"},
                {"language": "MATLAB", "pattern": r"^\s*%"},
            ],
        },
    ],
    "named_patterns": {
        "objectivec": r"^\s*(@(interface|class|protocol|property|end|implementation)\b|#import\s+.+\.h[\">])",
    },
}

VENDOR = [r"(^|/)node_modules/", r"(^|/)vendor/"]
GENERATED = [r"(^|/)package-lock\.json$"]


@pytest.fixture
def context():
    return build_context(
        languages=LANGUAGES,
        vendor=VENDOR,
        generated=GENERATED,
        heuristics=HEURISTICS,
        source="test",
    )


@pytest.fixture
def options():
    return AnalysisOptions()


@pytest.fixture
def make_tree(tmp_path: Path):
    """Write ``{relative path: content}`` under tmp_path and return the root."""

    def _make(files: dict[str, str | bytes]) -> Path:
        for rel, content in files.items():
            path = tmp_path / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                path.write_bytes(content)
            else:
                path.write_text(content)
        return tmp_path

    return _make

"""Per-file classifications and the aggregated analysis result."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, Field

from repolang.models.language import Category


@dataclass
class FileClassification:
    """Outcome of the classification pipeline for one file."""

    path: str
    language: str | None
    size: int = 0
    binary: bool = False
    source: str = "none"  # shebang | override | filename | extension | heuristic | classifier | none


class FilesSummary(BaseModel):
    count: int = 0
    bytes: int = 0
    results: dict[str, str | None] = Field(default_factory=dict)


class LanguageStats(BaseModel):
    type: Category
    bytes: int = 0
    color: str | None = None
    parent: str | None = None


class LanguagesSummary(BaseModel):
    count: int = 0
    bytes: int = 0
    results: dict[str, LanguageStats] = Field(default_factory=dict)


class UnknownSummary(BaseModel):
    count: int = 0
    bytes: int = 0
    extensions: dict[str, int] = Field(default_factory=dict)
    filenames: dict[str, int] = Field(default_factory=dict)


class AnalysisResult(BaseModel):
    """Repository-wide language breakdown."""

    files: FilesSummary = Field(default_factory=FilesSummary)
    languages: LanguagesSummary = Field(default_factory=LanguagesSummary)
    unknown: UnknownSummary = Field(default_factory=UnknownSummary)

"""Data models."""

from repolang.models.language import (
    CATEGORIES,
    Category,
    Disambiguation,
    HeuristicRule,
    LanguageDefinition,
    LinguistContext,
)
from repolang.models.result import (
    AnalysisResult,
    FileClassification,
    FilesSummary,
    LanguagesSummary,
    LanguageStats,
    UnknownSummary,
)

__all__ = [
    "AnalysisResult",
    "CATEGORIES",
    "Category",
    "Disambiguation",
    "FileClassification",
    "FilesSummary",
    "HeuristicRule",
    "LanguageDefinition",
    "LanguageStats",
    "LanguagesSummary",
    "LinguistContext",
    "UnknownSummary",
]

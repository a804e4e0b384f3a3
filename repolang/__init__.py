"""repolang: repository language breakdown in the manner of GitHub Linguist."""

__version__ = "0.1.0"

from repolang.analyser import analyse, analyse_sync
from repolang.config import AnalysisOptions
from repolang.exceptions import (
    ClassifierUnavailableError,
    ConfigLoadError,
    PatternSyntaxError,
    RepolangError,
)
from repolang.models import AnalysisResult, FileClassification, LinguistContext
from repolang.samples import (
    DirectorySampleProvider,
    GitHubSampleProvider,
    InMemorySampleProvider,
    SampleProvider,
)
from repolang.tables import build_context, load_bundled_context, load_context, load_remote_context

__all__ = [
    "AnalysisOptions",
    "AnalysisResult",
    "ClassifierUnavailableError",
    "ConfigLoadError",
    "DirectorySampleProvider",
    "FileClassification",
    "GitHubSampleProvider",
    "InMemorySampleProvider",
    "LinguistContext",
    "PatternSyntaxError",
    "RepolangError",
    "SampleProvider",
    "analyse",
    "analyse_sync",
    "build_context",
    "load_bundled_context",
    "load_context",
    "load_remote_context",
]

"""Custom exceptions for repolang."""


class RepolangError(Exception):
    """Base exception for all repolang errors."""


class ConfigLoadError(RepolangError):
    """Raised when a language, vendor or heuristic table is missing or malformed.

    Fatal: aborts the analysis run.
    """

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Cannot load table '{source}': {reason}")


class PatternSyntaxError(RepolangError):
    """Raised when a glob or regex pattern cannot be compiled."""

    def __init__(self, source: str, pattern: str, reason: str):
        self.source = source
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid pattern {pattern!r} from {source}: {reason}")


class ClassifierUnavailableError(RepolangError):
    """Raised when no candidate language has a reference sample to train on."""

    def __init__(self, candidates: list[str]):
        self.candidates = candidates
        super().__init__(
            f"No reference samples available for any of {candidates}"
        )

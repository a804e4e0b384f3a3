"""Language, vendor, generated-file and heuristic tables."""

from repolang.tables.loader import (
    build_context,
    extract_generated_patterns,
    load_bundled_context,
    load_context,
    load_remote_context,
)

__all__ = [
    "build_context",
    "extract_generated_patterns",
    "load_bundled_context",
    "load_context",
    "load_remote_context",
]

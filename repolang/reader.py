"""File content access: text reads, first-line reads, binary sniffing."""

from __future__ import annotations

import os
from pathlib import Path

SNIFF_BYTES = 8000

# Extensions treated as binary without opening the file
BINARY_EXTENSIONS = frozenset({
    ".3ds", ".3g2", ".3gp", ".7z", ".a", ".aac", ".adp", ".ai", ".aif", ".aiff",
    ".apk", ".ar", ".arj", ".avi", ".bin", ".bmp", ".bz2", ".cab", ".class",
    ".dat", ".deb", ".dll", ".dmg", ".doc", ".docx", ".dylib", ".ear", ".eot",
    ".epub", ".exe", ".flac", ".flv", ".gif", ".gz", ".ico", ".icns", ".iso",
    ".jar", ".jpeg", ".jpg", ".lz", ".lzma", ".m4a", ".m4v", ".mkv", ".mov",
    ".mp3", ".mp4", ".mpeg", ".mpg", ".o", ".obj", ".odp", ".ods", ".odt",
    ".ogg", ".otf", ".pdf", ".png", ".ppt", ".pptx", ".psd", ".pyc", ".pyo",
    ".rar", ".rpm", ".so", ".swf", ".tar", ".tga", ".tgz", ".tif", ".tiff",
    ".ttf", ".war", ".wav", ".webm", ".webp", ".wma", ".wmv", ".woff",
    ".woff2", ".xls", ".xlsx", ".xz", ".zip", ".zst",
})


def read_text(path: str | os.PathLike[str]) -> str:
    """Read a whole file as text, replacing undecodable bytes."""
    return Path(path).read_text(encoding="utf-8", errors="replace")


def read_first_line(path: str | os.PathLike[str]) -> str:
    with open(path, encoding="utf-8", errors="replace") as f:
        return f.readline().rstrip("\r\n")


def has_binary_extension(path: str | os.PathLike[str]) -> bool:
    return Path(path).suffix.lower() in BINARY_EXTENSIONS


def is_binary(path: str | os.PathLike[str]) -> bool:
    """True if *path* has a binary extension or a NUL byte near its start.

    Empty files are text.
    """
    if has_binary_extension(path):
        return True
    with open(path, "rb") as f:
        head = f.read(SNIFF_BYTES)
    return b"\x00" in head

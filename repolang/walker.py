"""Top-down directory walker."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterator
from pathlib import PurePosixPath

import structlog

log = structlog.get_logger("repolang.walker")

# Version-control metadata, never analysed
VCS_DIRS = frozenset({".git", ".hg", ".svn"})


def _join(folder: str, name: str) -> str:
    return name if not folder else str(PurePosixPath(folder, name))


def walk_tree(
    root: str | os.PathLike[str],
    skip_folder: Callable[[str], bool] | None = None,
) -> Iterator[tuple[str, list[str]]]:
    """Yield ``(folder, files)`` for every folder under *root*, parents first.

    *folder* is the posix path relative to *root* (``""`` for the root itself)
    and *files* are the sorted basenames it contains.  ``skip_folder`` receives
    the relative path of each subfolder *after* its parent has been yielded, so
    the caller can load the parent's rules before deciding whether to descend.
    Symlinked directories are not followed.
    """
    def _on_error(err: OSError) -> None:
        log.warning("walk.unreadable_folder", path=err.filename, error=err.strerror)

    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
        rel = os.path.relpath(dirpath, root)
        folder = "" if rel == os.curdir else PurePosixPath(*rel.split(os.sep)).as_posix()

        yield folder, sorted(filenames)

        kept = []
        for name in sorted(dirnames):
            if name in VCS_DIRS:
                continue
            if skip_folder is not None and skip_folder(_join(folder, name)):
                log.debug("walk.folder_skipped", folder=_join(folder, name))
                continue
            kept.append(name)
        dirnames[:] = kept

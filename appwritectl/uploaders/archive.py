"""Packaging of code directories into gzip tarballs for deployment upload."""

from __future__ import annotations

import logging
import tarfile
from collections.abc import Sequence
from pathlib import Path

import pathspec

from appwritectl.core.exceptions import PathValidationError

logger = logging.getLogger(__name__)

# Never shipped, regardless of ignore rules
ALWAYS_IGNORED = (".git", ".appwrite")
GITIGNORE = ".gitignore"


def load_ignore_patterns(source_dir: Path) -> list[str]:
    """Read ignore patterns from the directory's .gitignore, if any.

    Blank lines and comments are dropped; negations (``!pattern``) are kept.
    """
    gitignore = source_dir / GITIGNORE
    if not gitignore.is_file():
        return []

    return [
        line
        for line in gitignore.read_text().splitlines()
        if line.strip() and not line.startswith("#")
    ]


def build_ignore_spec(patterns: Sequence[str]) -> pathspec.GitIgnoreSpec:
    """Compile patterns with git's ignore semantics."""
    return pathspec.GitIgnoreSpec.from_lines(patterns)


def is_ignored(rel_path: Path, spec: pathspec.GitIgnoreSpec) -> bool:
    """Check a path (relative to the package root) against an ignore spec.

    ``.git`` and ``.appwrite`` are excluded at any depth. Everything else
    follows .gitignore rules: ``*`` does not cross ``/``, a leading ``/``
    anchors at the root, ``**`` spans directories and a later ``!pattern``
    re-includes what an earlier line excluded.
    """
    if any(part in ALWAYS_IGNORED for part in rel_path.parts):
        return True
    return spec.match_file(rel_path.as_posix())


def collect_package_files(source_dir: Path, ignore: Sequence[str] | None = None) -> list[Path]:
    """List files under ``source_dir`` that belong in the package.

    Args:
        source_dir: Code directory.
        ignore: Patterns to exclude, in .gitignore syntax. When None, the
            directory's .gitignore is used.

    Returns:
        Sorted list of absolute file paths.

    Raises:
        PathValidationError: If source_dir is not a directory.
    """
    if not source_dir.is_dir():
        raise PathValidationError(str(source_dir), "not a directory")

    patterns = list(ignore) if ignore is not None else load_ignore_patterns(source_dir)
    if patterns:
        logger.debug("Ignoring %d pattern(s) when packaging %s", len(patterns), source_dir)
    spec = build_ignore_spec(patterns)

    files = [
        path
        for path in source_dir.rglob("*")
        if path.is_file() and not is_ignored(path.relative_to(source_dir), spec)
    ]
    return sorted(files)


def package_directory(
    source_dir: Path,
    output_path: Path,
    ignore: Sequence[str] | None = None,
) -> int:
    """Create a ``.tar.gz`` of a code directory, returning its size in bytes.

    Args:
        source_dir: Directory to package.
        output_path: Destination archive path.
        ignore: Exclusion patterns (see collect_package_files).

    Returns:
        Size of the created archive in bytes.
    """
    source_dir = source_dir.resolve()
    files = collect_package_files(source_dir, ignore)

    with tarfile.open(output_path, "w:gz") as tf:
        for file_path in files:
            tf.add(file_path, arcname=file_path.relative_to(source_dir).as_posix())

    size = output_path.stat().st_size
    logger.info(
        "Packaged %d file(s) from %s into %s (%d bytes)", len(files), source_dir, output_path, size
    )
    return size

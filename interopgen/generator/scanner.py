"""
Header discovery for the interop binding generator.

Walks a source tree and selects the headers that should get bindings: right
extension, not a generated artifact, and containing the marker token.
"""

import os
from collections.abc import Iterable
from pathlib import Path

from loguru import logger

from interopgen.generator.constants import (
    GENERATED_HEADER_SUFFIX,
    HEADER_EXTENSION,
    MARKER_TOKEN,
)
from interopgen.generator.errors import ScanError


def is_candidate(path: Path) -> bool:
    """Check whether a file name qualifies as an input header."""
    name = path.name
    return name.endswith(HEADER_EXTENSION) and not name.endswith(
        GENERATED_HEADER_SUFFIX
    )


def has_marker(path: Path, marker: str = MARKER_TOKEN) -> bool:
    """Cheap case-insensitive substring check for the marker token.

    Raises:
        ScanError: If the file cannot be read
    """
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise ScanError(f"Failed to read header: {e}", path=path) from e
    return marker.lower() in text.lower()


def _walk(directory: Path, excluded: set[Path]) -> Iterable[Path]:
    """Yield files of a directory by name, then recurse into subdirectories."""
    try:
        entries = sorted(os.scandir(directory), key=lambda entry: entry.name)
    except OSError as e:
        raise ScanError(f"Failed to list directory: {e}", path=directory) from e

    subdirectories = []
    for entry in entries:
        path = Path(entry.path)
        try:
            if entry.is_dir():
                subdirectories.append(path)
            elif entry.is_file():
                yield path
        except OSError as e:
            raise ScanError(f"Failed to inspect entry: {e}", path=path) from e

    for subdirectory in subdirectories:
        if subdirectory.resolve() in excluded:
            logger.debug(f"Skipping output directory {subdirectory}")
            continue
        yield from _walk(subdirectory, excluded)


def find_headers(
    root: str | Path,
    marker: str = MARKER_TOKEN,
    exclude: Iterable[str | Path] = (),
) -> list[Path]:
    """Find every eligible header below a root directory.

    Args:
        root: Directory to scan recursively
        marker: Marker token flagging eligible headers (case-insensitive)
        exclude: Directories to skip, typically the output directories

    Returns:
        Eligible headers in discovery order; empty when none qualify

    Raises:
        ScanError: If the root is missing or the tree cannot be read
    """
    root = Path(root)
    if not root.is_dir():
        raise ScanError(f"Root directory does not exist: {root}")

    excluded = {Path(path).resolve() for path in exclude}
    headers = [
        path
        for path in _walk(root, excluded)
        if is_candidate(path) and has_marker(path, marker)
    ]
    logger.debug(f"Found {len(headers)} eligible header(s) under {root}")
    return headers

"""Output directory management and artifact writing."""

import shutil
from pathlib import Path

from loguru import logger

from interopgen.generator.errors import ConfigurationError, WriteError
from interopgen.generator.models import GeneratedFile


def prepare_output_directories(root: Path, *directories: Path) -> None:
    """Delete and recreate output directories.

    Args:
        root: Root directory of the run; outputs may not contain it
        directories: Output directories to reset

    Raises:
        ConfigurationError: If an output directory is the root or one of
            its ancestors
        WriteError: If a directory cannot be deleted or created
    """
    resolved_root = root.resolve()
    for directory in directories:
        resolved = directory.resolve()
        if resolved == resolved_root or resolved in resolved_root.parents:
            raise ConfigurationError(
                f"Output directory {directory} would delete the source tree"
            )

    for directory in directories:
        try:
            if directory.exists():
                logger.debug(f"Deleting output directory {directory}")
                shutil.rmtree(directory)
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise WriteError(
                f"Failed to reset output directory: {e}", path=directory
            ) from e


def write_file(generated: GeneratedFile) -> Path:
    """Write a generated artifact with ``\\n`` line endings.

    Raises:
        WriteError: If the file cannot be written
    """
    try:
        with open(generated.path, "w", encoding="utf-8", newline="\n") as f:
            f.write(generated.text)
    except OSError as e:
        raise WriteError(f"Failed to write artifact: {e}", path=generated.path) from e

    logger.debug(f"Wrote {generated.path}")
    return generated.path

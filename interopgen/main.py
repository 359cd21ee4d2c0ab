"""Command line interface for interopgen.

This module provides a command-line interface for generating managed (C#) and
native (C++) interop glue from annotated C++ headers.
"""

import os
import sys
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar, cast

import arrow
import typer
import watchdog.events
import watchdog.observers
from loguru import logger
from watchdog.events import FileSystemEventHandler

from interopgen.generator import (
    GenerationResult,
    GeneratorConfig,
    InteropGenError,
    generate,
    scan,
)
from interopgen.generator.constants import (
    MANAGED_NAMESPACE,
    MANAGED_OUTPUT_DIR,
    MANAGED_TABLE_ACCESSOR,
    MARKER_TOKEN,
    NATIVE_OUTPUT_DIR,
)
from interopgen.generator.scanner import is_candidate

# Define type variables for TypedCallable
F = TypeVar("F", bound=Callable[..., Any])


# TypedCommand decorator helper
def typed_command(app_command: Any) -> Callable[[F], F]:
    """Wrap typer command with proper typing for mypy."""

    def decorator(func: F) -> F:
        return cast(F, app_command(func))

    return decorator


app = typer.Typer(
    name="interopgen",
    help=(
        "Generate C# <--> C++ interop glue from annotated headers. "
        "Commands: generate, scan, watch."
    ),
    add_completion=False,
)

# Reusable arguments and options
ROOT_ARG = typer.Argument(..., help="Root directory scanned for annotated headers")
WORKERS_OPT = typer.Option(
    os.cpu_count() or 1,
    "--workers",
    "-j",
    envvar="INTEROPGEN_WORKERS",
    help="Number of worker threads",
)
MANAGED_DIR_OPT = typer.Option(
    MANAGED_OUTPUT_DIR,
    "--managed-dir",
    envvar="INTEROPGEN_MANAGED_DIR",
    help="Managed output directory, relative to ROOT",
)
NATIVE_DIR_OPT = typer.Option(
    NATIVE_OUTPUT_DIR,
    "--native-dir",
    envvar="INTEROPGEN_NATIVE_DIR",
    help="Native output directory, relative to ROOT",
)
MARKER_OPT = typer.Option(
    MARKER_TOKEN, "--marker", help="Marker token flagging eligible headers"
)
NAMESPACE_OPT = typer.Option(
    MANAGED_NAMESPACE, "--namespace", help="Namespace of generated C# code"
)
ACCESSOR_OPT = typer.Option(
    MANAGED_TABLE_ACCESSOR,
    "--accessor",
    help="C# expression holding the UnmanagedArgs table at runtime",
)
INCLUDE_OPT = typer.Option(
    [], "--include", "-I", help="Extra include directory passed to clang"
)
DEFINE_OPT = typer.Option(
    [], "--define", "-D", help="Extra preprocessor define (NAME or NAME=VALUE)"
)
VERBOSE_OPT = typer.Option(False, "--verbose", "-v", help="Enable debug logging")


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO")


def _run_generation(config: GeneratorConfig) -> GenerationResult:
    """Generate bindings and report the elapsed time.

    Raises:
        typer.Exit: With code 1 if generation fails
    """
    start = arrow.utcnow()
    logger.info("Generating C# <--> C++ interop code...")
    try:
        result = generate(config)
    except InteropGenError as e:
        logger.error(f"Generation failed: {e}")
        raise typer.Exit(1) from e

    elapsed = (arrow.utcnow() - start).total_seconds()
    logger.info(f"-- Took {elapsed:.2f} seconds.")
    return result


@typed_command(app.command("generate"))
def generate_bindings(
    root: Path = ROOT_ARG,
    workers: int = WORKERS_OPT,
    managed_dir: str = MANAGED_DIR_OPT,
    native_dir: str = NATIVE_DIR_OPT,
    marker: str = MARKER_OPT,
    namespace: str = NAMESPACE_OPT,
    accessor: str = ACCESSOR_OPT,
    include: list[str] = INCLUDE_OPT,
    define: list[str] = DEFINE_OPT,
    verbose: bool = VERBOSE_OPT,
) -> None:
    """Generate interop glue for every annotated header under ROOT.

    Deletes and recreates both output directories, writes one C# module and
    one C++ header per input header, then the shared UnmanagedArgs tables and
    the InteropList manifest.

    Example: interopgen generate Source
    """
    _configure_logging(verbose)
    config = GeneratorConfig(
        root=root,
        managed_dir=managed_dir,
        native_dir=native_dir,
        marker=marker,
        namespace=namespace,
        table_accessor=accessor,
        workers=workers,
        include_dirs=include,
        defines=define,
    )
    result = _run_generation(config)
    for path in result.written:
        logger.debug(f"Wrote {path}")


@typed_command(app.command("scan"))
def scan_headers(
    root: Path = ROOT_ARG,
    managed_dir: str = MANAGED_DIR_OPT,
    native_dir: str = NATIVE_DIR_OPT,
    marker: str = MARKER_OPT,
    verbose: bool = VERBOSE_OPT,
) -> None:
    """List the headers under ROOT that would get bindings.

    Example: interopgen scan Source
    """
    _configure_logging(verbose)
    config = GeneratorConfig(
        root=root, managed_dir=managed_dir, native_dir=native_dir, marker=marker
    )
    try:
        headers = scan(config)
    except InteropGenError as e:
        logger.error(f"Scan failed: {e}")
        raise typer.Exit(1) from e

    for path in headers:
        typer.echo(str(path))
    logger.info(f"Found {len(headers)} header(s)")


class HeaderChangeHandler(FileSystemEventHandler):  # type: ignore
    """Event handler flagging changes to input headers."""

    def __init__(self, config: GeneratorConfig):
        """Initialize header change handler.

        Args:
            config: Generator settings; changes inside its output
                directories are ignored
        """
        self.config = config
        self.outputs = (
            config.managed_path.resolve(),
            config.native_path.resolve(),
        )
        self.needs_regeneration = False

    def is_relevant(self, src_path: str) -> bool:
        path = Path(src_path)
        if not is_candidate(path):
            return False
        resolved = path.resolve()
        return not any(output in resolved.parents for output in self.outputs)

    def on_any_event(self, event: watchdog.events.FileSystemEvent) -> None:
        """Handle any file system event.

        Args:
            event: File system event
        """
        if event.is_directory:
            return
        paths = [event.src_path, getattr(event, "dest_path", "")]
        if any(path and self.is_relevant(str(path)) for path in paths):
            logger.info(f"Detected changes in {event.src_path}")
            self.needs_regeneration = True


@typed_command(app.command("watch"))
def watch_headers(
    root: Path = ROOT_ARG,
    workers: int = WORKERS_OPT,
    managed_dir: str = MANAGED_DIR_OPT,
    native_dir: str = NATIVE_DIR_OPT,
    marker: str = MARKER_OPT,
    namespace: str = NAMESPACE_OPT,
    accessor: str = ACCESSOR_OPT,
    include: list[str] = INCLUDE_OPT,
    define: list[str] = DEFINE_OPT,
    verbose: bool = VERBOSE_OPT,
) -> None:
    """Regenerate interop glue whenever a header under ROOT changes.

    Example: interopgen watch Source
    """
    _configure_logging(verbose)
    config = GeneratorConfig(
        root=root,
        managed_dir=managed_dir,
        native_dir=native_dir,
        marker=marker,
        namespace=namespace,
        table_accessor=accessor,
        workers=workers,
        include_dirs=include,
        defines=define,
    )

    handler = HeaderChangeHandler(config)
    observer = watchdog.observers.Observer()
    observer.schedule(handler, str(root), recursive=True)
    observer.start()
    logger.info(f"Watching {root} for header changes (press Ctrl+C to exit)...")

    handler.needs_regeneration = True
    try:
        while True:
            if handler.needs_regeneration:
                handler.needs_regeneration = False
                try:
                    _run_generation(config)
                except typer.Exit:
                    # Keep watching, the next change may fix the headers
                    logger.warning("Waiting for changes before regenerating")
            time.sleep(0.5)
    except KeyboardInterrupt:
        logger.info("Stopping watcher")
    finally:
        observer.stop()
        observer.join()


if __name__ == "__main__":
    app()

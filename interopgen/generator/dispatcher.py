"""
Concurrent per-header processing.

Headers are split into contiguous batches, one per worker thread. Each worker
parses its headers, runs both generators, writes the two artifacts of each
header and hands the parsed header to a shared collector. ``run`` returns
only after every worker has finished, because the global pointer table needs
the complete set of methods.
"""

import os
import threading
from collections.abc import Callable, Sequence
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from pathlib import Path
from typing import TypeVar

from loguru import logger

from interopgen.generator.constants import (
    HEADER_EXTENSION,
    INTEROP_LIST_FILE,
    INTEROP_LIST_GUARD,
    MANAGED_EXTENSION,
    NATIVE_TABLE_FILE,
    NATIVE_TABLE_GUARD,
    RESERVED_STEMS,
)
from interopgen.generator.errors import ConfigurationError
from interopgen.generator.managed import ManagedCodeGenerator
from interopgen.generator.models import GeneratedFile, GeneratorConfig, Header
from interopgen.generator.naming import generated_file_name, include_guard
from interopgen.generator.native import NativeCodeGenerator
from interopgen.generator.parser import parse_header
from interopgen.generator.writer import write_file

T = TypeVar("T")


class UnitCollector:
    """Append-only, thread-safe collection of processed headers."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._headers: list[Header] = []

    def add(self, header: Header) -> None:
        with self._lock:
            self._headers.append(header)

    def headers(self) -> list[Header]:
        """Collected headers in discovery order."""
        with self._lock:
            return sorted(self._headers, key=lambda header: header.index)

    def __len__(self) -> int:
        with self._lock:
            return len(self._headers)


def partition(items: Sequence[T], count: int) -> list[list[T]]:
    """Split items into at most ``count`` contiguous, non-empty batches."""
    if count < 1:
        raise ConfigurationError(f"Worker count must be positive, got {count}")

    count = min(count, len(items))
    batches = []
    start = 0
    for i in range(count):
        size = len(items) // count + (1 if i < len(items) % count else 0)
        batches.append(list(items[start : start + size]))
        start += size
    return batches


def check_unique_names(files: Sequence[Path]) -> None:
    """Ensure no two headers write to the same artifact names or include guards.

    Raises:
        ConfigurationError: If two headers share a file name stem or an
            include guard, or a header would overwrite a global artifact
    """
    reserved_guards = {
        NATIVE_TABLE_GUARD: NATIVE_TABLE_FILE,
        INTEROP_LIST_GUARD: INTEROP_LIST_FILE,
    }
    stems: dict[str, Path] = {}
    guards: dict[str, Path] = {}

    for path in files:
        output = generated_file_name(path.stem, HEADER_EXTENSION)
        if path.stem.casefold() in RESERVED_STEMS:
            raise ConfigurationError(
                f"Header {path} would overwrite the global artifact '{output}'",
                path=path,
            )

        previous = stems.setdefault(path.stem.casefold(), path)
        if previous != path:
            raise ConfigurationError(
                f"Headers {previous} and {path} would both generate '{output}'"
            )

        guard = include_guard(path.stem)
        if guard in reserved_guards:
            raise ConfigurationError(
                f"Header {path} would reuse the include guard {guard} "
                f"of '{reserved_guards[guard]}'",
                path=path,
            )
        previous = guards.setdefault(guard, path)
        if previous != path:
            raise ConfigurationError(
                f"Headers {previous} and {path} would both use the include "
                f"guard {guard}"
            )


def include_path(path: Path, native_dir: Path) -> str:
    """Include path of a source header as seen from the native output directory."""
    return os.path.relpath(path, native_dir).replace(os.sep, "/")


def process_header(path: Path, index: int, config: GeneratorConfig) -> Header:
    """Parse one header, generate both artifacts and write them.

    Args:
        path: Header to process
        index: Position of the header in discovery order
        config: Generator settings

    Returns:
        The parsed header with the paths of its artifacts
    """
    logger.info(f"Processing header {path}")
    header = Header(
        path=path, index=index, units=parse_header(path, config.compiler_args())
    )

    managed = ManagedCodeGenerator(
        header.units, header.name, config.namespace, config.table_accessor
    ).generate_managed_code()
    native = NativeCodeGenerator(header.units, header.name).generate_native_code(
        include_path(path, config.native_path)
    )

    for generated in (
        GeneratedFile(
            config.managed_path / generated_file_name(header.name, MANAGED_EXTENSION),
            managed,
        ),
        GeneratedFile(
            config.native_path / generated_file_name(header.name, HEADER_EXTENSION),
            native,
        ),
    ):
        header.outputs.append(write_file(generated))

    return header


class ThreadDispatcher:
    """Runs header processing over a fixed pool of worker threads."""

    def __init__(
        self,
        work: Callable[[Path, int], Header],
        files: Sequence[Path],
        workers: int,
    ):
        """Initialize the dispatcher.

        Args:
            work: Function processing one header given its path and index
            files: Headers in discovery order
            workers: Maximum number of worker threads
        """
        self.work = work
        self.files = list(files)
        self.batches = partition(list(enumerate(self.files)), workers)
        self._abort = threading.Event()

    def _run_batch(self, batch: list[tuple[int, Path]], collector: UnitCollector) -> None:
        for index, path in batch:
            if self._abort.is_set():
                logger.debug(f"Skipping {path} after a failure in another worker")
                return
            collector.add(self.work(path, index))

    def run(self, collector: UnitCollector) -> list[Header]:
        """Process every header and wait for all workers.

        Args:
            collector: Collector receiving the processed headers

        Returns:
            Processed headers in discovery order

        Raises:
            InteropGenError: The first failure of any worker, after every
                worker has stopped
        """
        if not self.batches:
            return collector.headers()

        logger.debug(
            f"Dispatching {len(self.files)} header(s) over "
            f"{len(self.batches)} worker(s)"
        )
        with ThreadPoolExecutor(
            max_workers=len(self.batches), thread_name_prefix="interopgen"
        ) as executor:
            futures = [
                executor.submit(self._run_batch, batch, collector)
                for batch in self.batches
            ]
            done, _ = wait(futures, return_when=FIRST_EXCEPTION)
            if any(future.exception() is not None for future in done):
                self._abort.set()

        for future in futures:
            future.result()

        return collector.headers()

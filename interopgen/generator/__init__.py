"""
Binding generation between managed (C#) and native (C++) code.

This module provides the top-level interface: scan a source tree for
annotated headers, generate per-header glue on both sides concurrently, then
write the shared function-pointer tables and the native include manifest.
"""

from pathlib import Path

from loguru import logger

from interopgen.generator.aggregator import (
    build_pointer_table,
    emit_interop_list,
    emit_tables,
)
from interopgen.generator.constants import (
    INTEROP_LIST_FILE,
    MANAGED_TABLE_FILE,
    NATIVE_TABLE_FILE,
)
from interopgen.generator.dispatcher import (
    ThreadDispatcher,
    UnitCollector,
    check_unique_names,
    process_header,
)
from interopgen.generator.errors import (
    ConfigurationError,
    InteropGenError,
    NamingCollisionError,
    ParseError,
    ScanError,
    WriteError,
)
from interopgen.generator.models import (
    GeneratedFile,
    GenerationResult,
    GeneratorConfig,
    Header,
)
from interopgen.generator.scanner import find_headers
from interopgen.generator.writer import prepare_output_directories, write_file


def scan(config: GeneratorConfig) -> list[Path]:
    """List the eligible headers of a run without generating anything."""
    return find_headers(
        config.root,
        marker=config.marker,
        exclude=[config.managed_path, config.native_path],
    )


def write_global_artifacts(
    headers: list[Header], config: GeneratorConfig
) -> GenerationResult:
    """Build the pointer table from every header and write the global artifacts.

    Args:
        headers: All processed headers in discovery order
        config: Generator settings

    Returns:
        Result holding the headers, the table and every written path
    """
    table = build_pointer_table(headers)
    managed_table, native_table = emit_tables(table, config.namespace)

    result = GenerationResult(headers=headers, table=table)
    for header in headers:
        result.written.extend(header.outputs)
    for generated in (
        GeneratedFile(config.managed_path / MANAGED_TABLE_FILE, managed_table),
        GeneratedFile(config.native_path / NATIVE_TABLE_FILE, native_table),
        GeneratedFile(config.native_path / INTEROP_LIST_FILE, emit_interop_list(headers)),
    ):
        result.written.append(write_file(generated))
    return result


def generate(config: GeneratorConfig) -> GenerationResult:
    """Generate managed and native bindings for a source tree.

    Args:
        config: Generator settings

    Returns:
        GenerationResult describing the run

    Raises:
        InteropGenError: On any scan, parse, naming, configuration or write
            failure. Output directories are left empty after a failed
            run, because partial output is never valid
    """
    headers = scan(config)
    check_unique_names(headers)
    logger.info(f"Found {len(headers)} header(s) to process")

    prepare_output_directories(config.root, config.managed_path, config.native_path)

    dispatcher = ThreadDispatcher(
        lambda path, index: process_header(path, index, config),
        headers,
        config.workers,
    )
    try:
        processed = dispatcher.run(UnitCollector())
        result = write_global_artifacts(processed, config)
    except InteropGenError:
        # Per-header artifacts are useless without a matching pointer table
        logger.warning("Generation failed, clearing partial output")
        prepare_output_directories(
            config.root, config.managed_path, config.native_path
        )
        raise

    logger.info(
        f"Generated {len(result.table)} binding(s) from {len(processed)} header(s)"
    )
    return result


__all__ = [
    "ConfigurationError",
    "GenerationResult",
    "GeneratorConfig",
    "InteropGenError",
    "NamingCollisionError",
    "ParseError",
    "ScanError",
    "WriteError",
    "generate",
    "scan",
]

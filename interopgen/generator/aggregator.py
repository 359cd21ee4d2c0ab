"""
Aggregation of every processed header into the global artifacts.

The managed ``UnmanagedArgs`` struct and the native ``UnmanagedArgs`` struct
are matched by raw memory layout at the boundary. Both are therefore emitted
from one ``PointerTable`` in a single loop, never from two traversals.
"""

from loguru import logger

from interopgen.generator.code_block import CodeBlock
from interopgen.generator.constants import (
    AUTO_GENERATED_BANNER,
    GENERATED_HEADER_SUFFIX,
    INTEROP_LIST_FILE,
    INTEROP_LIST_GUARD,
    MANAGED_NAMESPACE,
    MANAGED_POINTER_TYPE,
    NATIVE_TABLE_GUARD,
    NATIVE_TABLE_INSTANCE,
    POINTER_TABLE_NAME,
)
from interopgen.generator.errors import NamingCollisionError
from interopgen.generator.models import Header, PointerTable, TableEntry
from interopgen.generator.naming import method_pointer_field, method_symbol


def build_pointer_table(headers: list[Header]) -> PointerTable:
    """Flatten all methods into the global pointer table.

    Order is header discovery order, then unit order within the header, then
    method order within the unit.

    Args:
        headers: Processed headers sorted by discovery index

    Returns:
        The table shared by the managed and native records

    Raises:
        NamingCollisionError: If two methods map to the same symbol
    """
    table = PointerTable()
    seen: dict[str, TableEntry] = {}

    for header in headers:
        for unit in header.classes:
            for method in unit.methods:
                symbol = method_symbol(unit.name, method.name)
                entry = TableEntry(
                    class_name=unit.name,
                    method=method,
                    symbol=symbol,
                    field=method_pointer_field(unit.name, method.name),
                    source=header.path,
                )
                previous = seen.get(symbol)
                if previous is not None:
                    raise NamingCollisionError(
                        f"Symbol '{symbol}' for {unit.name}::{method.name} "
                        f"collides with {previous.class_name}::"
                        f"{previous.method.name} declared in {previous.source}",
                        path=header.path,
                        line=method.line,
                    )
                seen[symbol] = entry
                table.entries.append(entry)

    logger.debug(f"Pointer table has {len(table)} field(s)")
    return table


def emit_tables(
    table: PointerTable, namespace: str = MANAGED_NAMESPACE
) -> tuple[str, str]:
    """Emit the managed and native pointer-table definitions.

    Args:
        table: The flattened pointer table
        namespace: Namespace of the managed struct

    Returns:
        Tuple of (managed C# source, native C++ header)
    """
    managed_fields: list[str] = []
    native_fields: list[str] = []
    native_initializers: list[str] = []

    for entry in table.entries:
        managed_fields.append(f"public {MANAGED_POINTER_TYPE} {entry.field};")
        native_fields.append(f"void* {entry.field};")
        native_initializers.append(f"(void*){entry.symbol}")

    managed = CodeBlock()
    managed.add_comment(AUTO_GENERATED_BANNER)
    managed.add_line()
    managed.add_line("using System.Runtime.InteropServices;")
    managed.add_line()
    managed.add_line(f"namespace {namespace};")
    managed.add_line()
    managed.add_line("[StructLayout( LayoutKind.Sequential )]")
    managed.add_line(f"public struct {POINTER_TABLE_NAME}")
    with managed.block():
        managed.add_lines(managed_fields)

    native = CodeBlock()
    native.add_comment(AUTO_GENERATED_BANNER)
    native.add_line()
    native.add_line(f"#ifndef {NATIVE_TABLE_GUARD}")
    native.add_line(f"#define {NATIVE_TABLE_GUARD}")
    native.add_line()
    native.add_line(f'#include "{INTEROP_LIST_FILE}"')
    native.add_line()
    native.add_line(f"struct {POINTER_TABLE_NAME}")
    with native.block(closing="};"):
        native.add_lines(native_fields)
    native.add_line()
    native.add_line(f"inline {POINTER_TABLE_NAME} {NATIVE_TABLE_INSTANCE}")
    with native.block(closing="};"):
        # Every initializer but the last needs a separator
        native.add_lines(
            [f"{value}," for value in native_initializers[:-1]]
            + native_initializers[-1:]
        )
    native.add_line()
    native.add_line(f"#endif // {NATIVE_TABLE_GUARD}")

    return managed.get_code(), native.get_code()


def emit_interop_list(headers: list[Header]) -> str:
    """Emit the native manifest including every generated header."""
    code = CodeBlock()
    code.add_comment(AUTO_GENERATED_BANNER)
    code.add_line()
    code.add_line(f"#ifndef {INTEROP_LIST_GUARD}")
    code.add_line(f"#define {INTEROP_LIST_GUARD}")
    code.add_line()
    for header in headers:
        code.add_line(f'#include "{header.name}{GENERATED_HEADER_SUFFIX}"')
    code.add_line()
    code.add_line(f"#endif // {INTEROP_LIST_GUARD}")
    return code.get_code()

"""
Native-side code generation.

Emits one C++ header per input header, defining an ``inline`` thunk for every
bound method. The pointer table takes the address of each thunk, so thunk
names come from the shared naming module.
"""

from loguru import logger

from interopgen.generator.code_block import CodeBlock
from interopgen.generator.constants import AUTO_GENERATED_BANNER, HEADER_EXTENSION
from interopgen.generator.models import Class, Method, TypeCategory, Unit
from interopgen.generator.naming import include_guard, method_symbol

INSTANCE_PARAMETER = "instance"


def _returns_reference(method: Method) -> bool:
    return method.return_type.category == TypeCategory.POINTER and (
        method.return_type.spelling.rstrip().endswith("&")
    )


def thunk_signature(owner: Class, method: Method) -> str:
    """C++ signature of a method's thunk, e.g. ``void __Gfx_Init( Gfx* instance, int w )``."""
    parameters = []
    if not method.is_static:
        parameters.append(f"{owner.qualified_name}* {INSTANCE_PARAMETER}")
    parameters.extend(
        f"{p.type.global_spelling} {p.name}" for p in method.parameters
    )

    if method.is_constructor or _returns_reference(method):
        return_type = "void*"
    else:
        return_type = method.return_type.global_spelling

    symbol = method_symbol(owner.name, method.name)
    if not parameters:
        return f"{return_type} {symbol}()"
    return f"{return_type} {symbol}( {', '.join(parameters)} )"


def thunk_body(owner: Class, method: Method) -> str:
    """Single statement forwarding a thunk to the bound method."""
    arguments = ", ".join(p.name for p in method.parameters)
    arguments = f"( {arguments} )" if arguments else "()"

    if method.is_constructor:
        return f"return new {owner.qualified_name}{arguments};"

    if method.is_static:
        call = f"{owner.qualified_name}::{method.name}{arguments}"
    else:
        call = f"{INSTANCE_PARAMETER}->{method.name}{arguments}"

    if method.return_type.category == TypeCategory.VOID:
        return f"{call};"
    if _returns_reference(method):
        return f"return (void*)&( {call} );"
    return f"return {call};"


class NativeCodeGenerator:
    """Generates the native glue header for one input header."""

    def __init__(self, units: list[Unit], header_name: str):
        """Initialize the generator.

        Args:
            units: Ordered units parsed from the header
            header_name: Header file name without extension
        """
        self.units = units
        self.header_name = header_name

    def _emit_class(self, code: CodeBlock, unit: Class) -> None:
        for method in unit.methods:
            code.add_line(f"inline {thunk_signature(unit, method)}")
            with code.block():
                code.add_line(thunk_body(unit, method))
            code.add_line()
            logger.debug(
                f"Emitted native thunk {method_symbol(unit.name, method.name)}"
            )

    def generate_native_code(self, include_path: str) -> str:
        """Generate the native header.

        Args:
            include_path: Path of the source header relative to the native
                output directory, with forward slashes

        Returns:
            Complete header text
        """
        guard = include_guard(self.header_name)
        code = CodeBlock()
        code.add_comment(AUTO_GENERATED_BANNER)
        code.add_comment([f"Source: {self.header_name}{HEADER_EXTENSION}"])
        code.add_line()
        code.add_line(f"#ifndef {guard}")
        code.add_line(f"#define {guard}")
        code.add_line()
        code.add_line(f'#include "{include_path}"')
        code.add_line()

        for unit in self.units:
            # Structures are declared by the included header already
            if isinstance(unit, Class):
                self._emit_class(code, unit)

        code.add_line(f"#endif // {guard}")
        return code.get_code()

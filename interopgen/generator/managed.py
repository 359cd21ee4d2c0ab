"""
Managed-side code generation.

Emits one C# module per input header. Every bound method casts its slot of
the function-pointer table to an unmanaged function pointer and invokes it,
so slot names come from the shared naming module.
"""

from loguru import logger

from interopgen.generator.code_block import CodeBlock
from interopgen.generator.constants import (
    AUTO_GENERATED_BANNER,
    CSHARP_KEYWORDS,
    HEADER_EXTENSION,
    MANAGED_NAMESPACE,
    MANAGED_POINTER_TYPE,
    MANAGED_STRING_TYPE,
    MANAGED_TABLE_ACCESSOR,
    MANAGED_VOID_TYPE,
    NATIVE_POINTER_PROPERTY,
    PRIMITIVE_TYPES,
)
from interopgen.generator.models import (
    Class,
    Method,
    NativeType,
    Structure,
    TypeCategory,
    Unit,
)
from interopgen.generator.naming import method_pointer_field

# Generated locals start with "__", which C++ reserves, so parameter names
# cannot collide with them
FUNCTION_POINTER_LOCAL = "__ptr"
RESULT_LOCAL = "__result"
STRING_LOCAL_SUFFIX = "Utf8"


def managed_type(native: NativeType, interop: bool = False) -> str:
    """Map a native type to its managed counterpart.

    Args:
        native: Parsed native type
        interop: Whether the type appears in an unmanaged signature or a
            struct layout, where strings travel as raw pointers

    Returns:
        The C# type name
    """
    match native.category:
        case TypeCategory.VOID:
            return MANAGED_VOID_TYPE
        case TypeCategory.PRIMITIVE:
            return PRIMITIVE_TYPES[native.canonical]
        case TypeCategory.STRING:
            return MANAGED_POINTER_TYPE if interop else MANAGED_STRING_TYPE
        case TypeCategory.POINTER:
            return MANAGED_POINTER_TYPE
        case TypeCategory.RECORD:
            return native.canonical


def function_pointer_type(method: Method) -> str:
    """Unmanaged function pointer type of a method's thunk."""
    arguments = []
    if not method.is_static:
        arguments.append(MANAGED_POINTER_TYPE)
    arguments.extend(managed_type(p.type, interop=True) for p in method.parameters)
    arguments.append(managed_type(method.return_type, interop=True))
    return f"delegate* unmanaged< {', '.join(arguments)} >"


def safe_name(name: str) -> str:
    """Escape a C# keyword used as an identifier, e.g. ``params`` -> ``@params``."""
    if name in CSHARP_KEYWORDS:
        return f"@{name}"
    return name


def _string_local(name: str) -> str:
    return f"__{name}{STRING_LOCAL_SUFFIX}"


class ManagedCodeGenerator:
    """Generates the managed glue module for one input header."""

    def __init__(
        self,
        units: list[Unit],
        header_name: str,
        namespace: str = MANAGED_NAMESPACE,
        table_accessor: str = MANAGED_TABLE_ACCESSOR,
    ):
        """Initialize the generator.

        Args:
            units: Ordered units parsed from the header
            header_name: Header file name without extension
            namespace: Namespace of the generated code
            table_accessor: Managed expression holding the pointer table
        """
        self.units = units
        self.header_name = header_name
        self.namespace = namespace
        self.table_accessor = table_accessor

    def _signature(self, owner: Class, method: Method) -> str:
        parameters = ", ".join(
            f"{managed_type(p.type)} {safe_name(p.name)}" for p in method.parameters
        )
        parameters = f"( {parameters} )" if parameters else "()"
        if method.is_constructor:
            return f"public {owner.name}{parameters}"

        modifiers = "public static" if method.is_static else "public"
        return_type = managed_type(method.return_type)
        return f"{modifiers} {return_type} {safe_name(method.name)}{parameters}"

    def _emit_method(self, code: CodeBlock, owner: Class, method: Method) -> None:
        slot = f"{self.table_accessor}.{method_pointer_field(owner.name, method.name)}"
        strings = [
            p.name for p in method.parameters if p.type.category == TypeCategory.STRING
        ]

        arguments = [] if method.is_static else [NATIVE_POINTER_PROPERTY]
        arguments.extend(
            _string_local(p.name) if p.name in strings else safe_name(p.name)
            for p in method.parameters
        )
        joined = ", ".join(arguments)
        call = f"{FUNCTION_POINTER_LOCAL}( {joined} )"
        if not joined:
            call = f"{FUNCTION_POINTER_LOCAL}()"
        if method.return_type.category == TypeCategory.STRING:
            call = f"Marshal.PtrToStringUTF8( {call} )"

        code.add_line(self._signature(owner, method))
        with code.block():
            for name in strings:
                code.add_line(
                    f"var {_string_local(name)} = "
                    f"Marshal.StringToCoTaskMemUTF8( {safe_name(name)} );"
                )
            code.add_line(
                f"var {FUNCTION_POINTER_LOCAL} = ({function_pointer_type(method)}){slot};"
            )

            returns_value = method.return_type.category != TypeCategory.VOID
            if method.is_constructor:
                code.add_line(f"{NATIVE_POINTER_PROPERTY} = {call};")
            elif not returns_value:
                code.add_line(f"{call};")
            elif strings:
                code.add_line(f"var {RESULT_LOCAL} = {call};")
            else:
                code.add_line(f"return {call};")

            for name in strings:
                code.add_line(f"Marshal.FreeCoTaskMem( {_string_local(name)} );")
            if returns_value and strings and not method.is_constructor:
                code.add_line(f"return {RESULT_LOCAL};")

    def _emit_class(self, code: CodeBlock, unit: Class) -> None:
        if unit.is_namespace:
            code.add_line(f"public static unsafe class {unit.name}")
        else:
            code.add_line(f"public unsafe class {unit.name}")
        with code.block():
            # Namespaces have no native instance to hold
            if not unit.is_namespace:
                code.add_line(
                    f"public {MANAGED_POINTER_TYPE} {NATIVE_POINTER_PROPERTY} "
                    f"{{ get; set; }}"
                )
            for index, method in enumerate(unit.methods):
                if index > 0 or not unit.is_namespace:
                    code.add_line()
                self._emit_method(code, unit, method)
                logger.debug(
                    f"Emitted managed binding {unit.name}.{method.name} -> "
                    f"{method_pointer_field(unit.name, method.name)}"
                )

    def _emit_struct(self, code: CodeBlock, unit: Structure) -> None:
        code.add_line("[StructLayout( LayoutKind.Sequential )]")
        code.add_line(f"public struct {unit.name}")
        with code.block():
            for struct_field in unit.fields:
                code.add_line(
                    f"public {managed_type(struct_field.type, interop=True)} "
                    f"{safe_name(struct_field.name)};"
                )

    def generate_managed_code(self) -> str:
        """Generate the managed module text."""
        code = CodeBlock()
        code.add_comment(AUTO_GENERATED_BANNER)
        code.add_comment([f"Source: {self.header_name}{HEADER_EXTENSION}"])
        code.add_line()
        code.add_line("using System.Runtime.InteropServices;")
        code.add_line()
        code.add_line(f"namespace {self.namespace};")

        for unit in self.units:
            code.add_line()
            match unit:
                case Class():
                    self._emit_class(code, unit)
                case Structure():
                    self._emit_struct(code, unit)

        return code.get_code()

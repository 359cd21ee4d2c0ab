"""
Constants and predefined values for the interop binding generator.

This module contains the marker token, file naming rules, output locations
and the native to managed type table shared by the scanner, parser and both
code generators.
"""

# Marker token flagging a header as eligible for binding generation
MARKER_TOKEN = "GENERATE_BINDINGS"

# Annotation the marker macro expands to when the header is parsed
MARKER_ANNOTATION = "generate_bindings"

HEADER_EXTENSION = ".h"
GENERATED_SUFFIX = ".generated"
GENERATED_HEADER_SUFFIX = f"{GENERATED_SUFFIX}{HEADER_EXTENSION}"
MANAGED_EXTENSION = ".cs"

# Output locations relative to the root directory
MANAGED_OUTPUT_DIR = "Common/Glue"
NATIVE_OUTPUT_DIR = "Host/generated"

# Global artifacts
POINTER_TABLE_NAME = "UnmanagedArgs"
MANAGED_TABLE_FILE = f"{POINTER_TABLE_NAME}{MANAGED_EXTENSION}"
NATIVE_TABLE_FILE = f"{POINTER_TABLE_NAME}{GENERATED_HEADER_SUFFIX}"
INTEROP_LIST_NAME = "InteropList"
INTEROP_LIST_FILE = f"{INTEROP_LIST_NAME}{GENERATED_HEADER_SUFFIX}"
NATIVE_TABLE_GUARD = "__GENERATED_UNMANAGED_ARGS_H"
INTEROP_LIST_GUARD = "__GENERATED_INTEROPLIST_H"
NATIVE_TABLE_INSTANCE = "args"

# Header stems whose artifacts would overwrite a global artifact
RESERVED_STEMS = frozenset(
    {POINTER_TABLE_NAME.casefold(), INTEROP_LIST_NAME.casefold()}
)

# Managed side defaults
MANAGED_NAMESPACE = "Glue"
MANAGED_TABLE_ACCESSOR = "Global.UnmanagedArgs"
NATIVE_POINTER_PROPERTY = "NativePtr"

# Method name given to constructors
CONSTRUCTOR_NAME = "Ctor"
POINTER_FIELD_SUFFIX = "MethodPtr"

# Generated code uses tabs
INDENT = "\t"

CLANG_ARGS: list[str] = ["-x", "c++", "-std=c++17"]

# Canonical native spelling -> managed type, for types passed by value
PRIMITIVE_TYPES: dict[str, str] = {
    "bool": "bool",
    "char": "byte",
    "signed char": "sbyte",
    "unsigned char": "byte",
    "short": "short",
    "unsigned short": "ushort",
    "int": "int",
    "unsigned int": "uint",
    "long": "CLong",
    "unsigned long": "CULong",
    "long long": "long",
    "unsigned long long": "ulong",
    "float": "float",
    "double": "double",
    "wchar_t": "char",
    "char16_t": "char",
    "char32_t": "uint",
}

MANAGED_POINTER_TYPE = "IntPtr"
MANAGED_STRING_TYPE = "string"
MANAGED_VOID_TYPE = "void"

AUTO_GENERATED_BANNER = [
    "<auto-generated>",
    "This file was generated by interopgen. Do not edit it by hand.",
    "</auto-generated>",
]

# fmt: off
# C# reserved keywords, escaped with @ when used as identifiers
CSHARP_KEYWORDS = frozenset(
    {
        "abstract", "as", "base", "bool", "break", "byte", "case", "catch",
        "char", "checked", "class", "const", "continue", "decimal", "default",
        "delegate", "do", "double", "else", "enum", "event", "explicit",
        "extern", "false", "finally", "fixed", "float", "for", "foreach",
        "goto", "if", "implicit", "in", "int", "interface", "internal", "is",
        "lock", "long", "namespace", "new", "null", "object", "operator",
        "out", "override", "params", "private", "protected", "public",
        "readonly", "ref", "return", "sbyte", "sealed", "short", "sizeof",
        "stackalloc", "static", "string", "struct", "switch", "this", "throw",
        "true", "try", "typeof", "uint", "ulong", "unchecked", "unsafe",
        "ushort", "using", "virtual", "void", "volatile", "while",
    }
)
# fmt: on

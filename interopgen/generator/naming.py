"""
Symbol naming shared by the managed generator, the native generator and the
pointer-table aggregator.

The managed and native tables are matched by field position and name, so
every generated token is derived here and nowhere else.
"""

from interopgen.generator.constants import GENERATED_SUFFIX, POINTER_FIELD_SUFFIX


def method_symbol(class_name: str, method_name: str) -> str:
    """Native thunk symbol for a method.

    Args:
        class_name: Name of the owning class
        method_name: Name of the method

    Returns:
        The ``__C_M`` token, e.g. ``__Gfx_Init``
    """
    return f"__{class_name}_{method_name}"


def method_pointer_field(class_name: str, method_name: str) -> str:
    """Pointer-table field name for a method, e.g. ``__Gfx_InitMethodPtr``."""
    return f"{method_symbol(class_name, method_name)}{POINTER_FIELD_SUFFIX}"


def generated_file_name(stem: str, extension: str) -> str:
    """Name of a per-header artifact, e.g. ``Gfx.generated.h``."""
    return f"{stem}{GENERATED_SUFFIX}{extension}"


def include_guard(stem: str) -> str:
    """Include guard macro of a generated native header."""
    sanitized = "".join(c if c.isalnum() else "_" for c in stem)
    return f"__GENERATED_{sanitized.upper()}_H"

"""
Declaration parsing for the interop binding generator.

This module runs a header through libclang and converts the annotated
classes, structures and namespaces it declares into the generator's unit model. Parse
errors are fatal: a header that yields partial bindings would shift every
later slot of the function-pointer table.
"""

from pathlib import Path

from clang.cindex import (
    AccessSpecifier,
    Cursor,
    CursorKind,
    Diagnostic,
    Index,
    TranslationUnit,
    TranslationUnitLoadError,
    Type,
    TypeKind,
)
from loguru import logger

from interopgen.generator.constants import (
    CONSTRUCTOR_NAME,
    MARKER_ANNOTATION,
    PRIMITIVE_TYPES,
)
from interopgen.generator.errors import ParseError
from interopgen.generator.models import (
    Class,
    GeneratorConfig,
    Method,
    NativeType,
    Parameter,
    Structure,
    StructField,
    TypeCategory,
    Unit,
)

_SCOPE_KINDS = (CursorKind.NAMESPACE, CursorKind.LINKAGE_SPEC)
_RECORD_KINDS = (CursorKind.CLASS_DECL, CursorKind.STRUCT_DECL)
_QUALIFIERS = ("const ", "volatile ")


def _unqualified(spelling: str) -> str:
    """Strip leading cv-qualifiers from a type spelling."""
    changed = True
    while changed:
        changed = False
        for qualifier in _QUALIFIERS:
            if spelling.startswith(qualifier):
                spelling = spelling[len(qualifier) :]
                changed = True
    return spelling


def _is_annotated(cursor: Cursor) -> bool:
    return any(
        child.kind == CursorKind.ANNOTATE_ATTR and child.spelling == MARKER_ANNOTATION
        for child in cursor.get_children()
    )


def _qualified_name(cursor: Cursor) -> str:
    """Fully qualified C++ name of a declaration, e.g. ``Engine::Gfx``."""
    parts = [cursor.spelling]
    parent = cursor.semantic_parent
    while parent is not None and parent.kind in (
        CursorKind.NAMESPACE,
        *_RECORD_KINDS,
    ):
        parts.append(parent.spelling)
        parent = parent.semantic_parent
    return "::".join(reversed(parts))


def native_type(clang_type: Type, path: Path, line: int | None = None) -> NativeType:
    """Classify a clang type for the managed/native boundary.

    Args:
        clang_type: Type of a parameter, return value or field
        path: Header being parsed, for error reporting
        line: Line of the declaration, for error reporting

    Returns:
        NativeType with the written spelling, the fully qualified spelling
        and the boundary category

    Raises:
        ParseError: If the type cannot cross the boundary
    """
    spelling = clang_type.spelling
    canonical = clang_type.get_canonical()
    kind = canonical.kind
    # Canonical spellings are fully qualified and typedef-free
    qualified = canonical.spelling if canonical.spelling != spelling else ""

    if kind == TypeKind.VOID:
        return NativeType(spelling, "void", TypeCategory.VOID, qualified)

    if kind == TypeKind.POINTER:
        pointee = canonical.get_pointee()
        if (
            pointee.kind in (TypeKind.CHAR_S, TypeKind.CHAR_U)
            and pointee.is_const_qualified()
        ):
            return NativeType(
                spelling, canonical.spelling, TypeCategory.STRING, qualified
            )
        return NativeType(spelling, canonical.spelling, TypeCategory.POINTER, qualified)

    if kind in (TypeKind.LVALUEREFERENCE, TypeKind.RVALUEREFERENCE):
        return NativeType(spelling, canonical.spelling, TypeCategory.POINTER, qualified)

    if kind == TypeKind.ENUM:
        underlying = canonical.get_declaration().enum_type.get_canonical()
        return NativeType(
            spelling,
            _unqualified(underlying.spelling),
            TypeCategory.PRIMITIVE,
            qualified,
        )

    if kind == TypeKind.RECORD:
        declaration = canonical.get_declaration()
        definition = declaration.get_definition()
        if (
            definition is None
            or definition.kind != CursorKind.STRUCT_DECL
            or not _is_annotated(definition)
        ):
            raise ParseError(
                f"Unsupported type '{spelling}': records passed by value must "
                f"be annotated structs",
                path=path,
                line=line,
            )
        # Records are mirrored on the managed side under their declared name
        return NativeType(
            spelling, declaration.spelling, TypeCategory.RECORD, qualified
        )

    unqualified = _unqualified(canonical.spelling)
    if unqualified in PRIMITIVE_TYPES:
        return NativeType(spelling, unqualified, TypeCategory.PRIMITIVE, qualified)

    raise ParseError(f"Unsupported type '{spelling}'", path=path, line=line)


class DeclarationVisitor:
    """Visitor collecting annotated declarations from a header."""

    def __init__(self, path: Path):
        self.path = path
        self.resolved_path = path.resolve()
        self.units: list[Unit] = []

    def _in_header(self, cursor: Cursor) -> bool:
        location = cursor.location.file
        return location is not None and Path(location.name).resolve() == (
            self.resolved_path
        )

    def visit(self, cursor: Cursor) -> None:
        """Visit top-level and namespace-scoped declarations in source order."""
        for child in cursor.get_children():
            if not self._in_header(child):
                continue
            if child.kind in _SCOPE_KINDS:
                if (
                    child.kind == CursorKind.NAMESPACE
                    and child.spelling
                    and _is_annotated(child)
                ):
                    self.visit_namespace(child)
                self.visit(child)
            elif (
                child.kind in _RECORD_KINDS
                and child.is_definition()
                and _is_annotated(child)
            ):
                if child.kind == CursorKind.CLASS_DECL:
                    self.units.append(self.visit_class(child))
                else:
                    self.units.append(self.visit_struct(child))

    def visit_namespace(self, cursor: Cursor) -> None:
        """Collect the free functions of an annotated namespace.

        Reopening the same namespace later in the header extends the unit
        created for its first occurrence.
        """
        qualified_name = _qualified_name(cursor)
        unit = next(
            (
                unit
                for unit in self.units
                if isinstance(unit, Class)
                and unit.is_namespace
                and unit.qualified_name == qualified_name
            ),
            None,
        )
        if unit is None:
            unit = Class(
                name=cursor.spelling, qualified_name=qualified_name, is_namespace=True
            )
            self.units.append(unit)

        for child in cursor.get_children():
            if child.kind != CursorKind.FUNCTION_DECL or not self._in_header(child):
                continue
            # A definition following a declaration is the same function
            if child.canonical != child or child.spelling.startswith("operator"):
                continue
            unit.methods.append(self.visit_function(child))

        logger.debug(
            f"Collected namespace: {unit.qualified_name}, "
            f"functions: {[method.name for method in unit.methods]}"
        )

    def visit_class(self, cursor: Cursor) -> Class:
        """Collect public methods and constructors of an annotated class."""
        unit = Class(name=cursor.spelling, qualified_name=_qualified_name(cursor))
        for child in cursor.get_children():
            if child.access_specifier != AccessSpecifier.PUBLIC:
                continue
            if child.kind == CursorKind.CXX_METHOD:
                if child.spelling.startswith("operator") or child.is_deleted_method():
                    continue
                unit.methods.append(self.visit_method(child))
            elif child.kind == CursorKind.CONSTRUCTOR:
                if (
                    child.is_copy_constructor()
                    or child.is_move_constructor()
                    or child.is_deleted_method()
                ):
                    continue
                unit.methods.append(self.visit_constructor(child, unit))

        logger.debug(
            f"Collected class: {unit.qualified_name}, "
            f"methods: {[method.name for method in unit.methods]}"
        )
        return unit

    def visit_struct(self, cursor: Cursor) -> Structure:
        """Collect data fields of an annotated structure."""
        unit = Structure(name=cursor.spelling, qualified_name=_qualified_name(cursor))
        for child in cursor.get_children():
            if child.kind == CursorKind.FIELD_DECL:
                field_type = native_type(child.type, self.path, child.location.line)
                unit.fields.append(StructField(name=child.spelling, type=field_type))

        logger.debug(
            f"Collected structure: {unit.qualified_name}, "
            f"fields: {[(f.name, f.type.spelling) for f in unit.fields]}"
        )
        return unit

    def _parameters(self, cursor: Cursor) -> list[Parameter]:
        return [
            Parameter(
                name=argument.spelling or f"arg{index}",
                type=native_type(argument.type, self.path, argument.location.line),
            )
            for index, argument in enumerate(cursor.get_arguments())
        ]

    def visit_method(self, cursor: Cursor) -> Method:
        line = cursor.location.line
        return Method(
            name=cursor.spelling,
            return_type=native_type(cursor.result_type, self.path, line),
            parameters=self._parameters(cursor),
            is_static=cursor.is_static_method(),
            line=line,
        )

    def visit_function(self, cursor: Cursor) -> Method:
        line = cursor.location.line
        return Method(
            name=cursor.spelling,
            return_type=native_type(cursor.result_type, self.path, line),
            parameters=self._parameters(cursor),
            is_static=True,
            line=line,
        )

    def visit_constructor(self, cursor: Cursor, owner: Class) -> Method:
        pointer = f"{owner.qualified_name} *"
        return Method(
            name=CONSTRUCTOR_NAME,
            return_type=NativeType(pointer, pointer, TypeCategory.POINTER),
            parameters=self._parameters(cursor),
            is_static=True,
            is_constructor=True,
            line=cursor.location.line,
        )


def _check_diagnostics(tu: TranslationUnit, path: Path) -> None:
    """Raise on the first error-level diagnostic of a translation unit."""
    for diagnostic in tu.diagnostics:
        if diagnostic.severity < Diagnostic.Error:
            continue
        location = diagnostic.location
        source = location.file.name if location.file is not None else path
        raise ParseError(
            f"Malformed declaration: {diagnostic.spelling}",
            path=source,
            line=location.line or None,
        )


def parse_header(path: str | Path, compiler_args: list[str] | None = None) -> list[Unit]:
    """Parse one header into its ordered units.

    Args:
        path: Header to parse
        compiler_args: Arguments passed to clang; defaults to the generator's
            standard C++ arguments with the marker macro defined

    Returns:
        Units in declaration order

    Raises:
        ParseError: If clang cannot parse the header or reports errors
    """
    path = Path(path)
    if compiler_args is None:
        compiler_args = GeneratorConfig(root=path.parent).compiler_args()

    logger.debug(f"Parsing header {path}")
    index = Index.create()
    try:
        tu = index.parse(
            str(path),
            args=compiler_args,
            options=TranslationUnit.PARSE_SKIP_FUNCTION_BODIES,
        )
    except TranslationUnitLoadError as e:
        raise ParseError(f"libclang failed to load header: {e}", path=path) from e

    _check_diagnostics(tu, path)

    visitor = DeclarationVisitor(path)
    visitor.visit(tu.cursor)
    logger.debug(f"Parsing complete: {len(visitor.units)} unit(s) in {path.name}")
    return visitor.units

"""
Data models and structures for the interop binding generator.

This module contains the dataclass definitions used throughout the generator
to represent parsed declarations, generated files, the function-pointer table
and generator settings.
"""

import os
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path

from interopgen.generator.constants import (
    CLANG_ARGS,
    MANAGED_NAMESPACE,
    MANAGED_OUTPUT_DIR,
    MANAGED_TABLE_ACCESSOR,
    MARKER_ANNOTATION,
    MARKER_TOKEN,
    NATIVE_OUTPUT_DIR,
)


class TypeCategory(Enum):
    """How a native type crosses the managed/native boundary."""

    VOID = auto()
    PRIMITIVE = auto()
    STRING = auto()
    POINTER = auto()
    RECORD = auto()


@dataclass(frozen=True)
class NativeType:
    """A C++ type as seen by the parser.

    Attributes:
        spelling: Type as written in the header (e.g. ``uint32_t``)
        canonical: Canonical spelling with typedefs resolved
            (e.g. ``unsigned int``)
        category: Boundary category of the type
        qualified: Fully qualified spelling valid at global scope
            (e.g. ``const Engine::Color &``); empty when it equals ``spelling``
    """

    spelling: str
    canonical: str
    category: TypeCategory
    qualified: str = ""

    @property
    def global_spelling(self) -> str:
        """Spelling to use in code emitted outside the declaring namespace."""
        return self.qualified or self.spelling

    @classmethod
    def void(cls) -> "NativeType":
        return cls("void", "void", TypeCategory.VOID)


@dataclass(frozen=True)
class Parameter:
    """Method parameter."""

    name: str
    type: NativeType


@dataclass
class Method:
    """A bound method of a class.

    Attributes:
        name: Method name (``Ctor`` for constructors)
        return_type: Native return type
        parameters: Ordered parameter list
        is_static: Whether the method is static
        is_constructor: Whether the method is a constructor
        line: Line of the declaration in its header
    """

    name: str
    return_type: NativeType
    parameters: list[Parameter] = field(default_factory=list)
    is_static: bool = False
    is_constructor: bool = False
    line: int | None = None


@dataclass
class Class:
    """A class whose methods are exposed through the pointer table.

    Attributes:
        name: Unqualified name, used for symbols and the managed class
        qualified_name: Fully qualified C++ name
        methods: Bound methods in declaration order
        is_namespace: Whether the unit is an annotated namespace whose free
            functions are bound as static methods
    """

    name: str
    qualified_name: str
    methods: list[Method] = field(default_factory=list)
    is_namespace: bool = False


@dataclass
class StructField:
    """Data member of a structure."""

    name: str
    type: NativeType


@dataclass
class Structure:
    """A plain data structure mirrored on the managed side."""

    name: str
    qualified_name: str
    fields: list[StructField] = field(default_factory=list)


Unit = Class | Structure


@dataclass
class Header:
    """One processed input header.

    Attributes:
        path: Path of the source header
        index: Position of the header in discovery order
        units: Ordered units declared in the header
        outputs: Artifacts written for the header
    """

    path: Path
    index: int
    units: list[Unit] = field(default_factory=list)
    outputs: list[Path] = field(default_factory=list)

    @property
    def name(self) -> str:
        """File name without extension, used to name generated artifacts."""
        return self.path.stem

    @property
    def classes(self) -> list[Class]:
        return [unit for unit in self.units if isinstance(unit, Class)]


@dataclass(frozen=True)
class GeneratedFile:
    """Generated text and the path it is written to."""

    path: Path
    text: str


@dataclass(frozen=True)
class TableEntry:
    """One slot of the function-pointer table.

    Attributes:
        class_name: Name of the owning class
        method: The method bound by this slot
        symbol: Native thunk symbol (``__C_M``)
        field: Table field name (``__C_MMethodPtr``)
        source: Header that declared the method
    """

    class_name: str
    method: Method
    symbol: str
    field: str
    source: Path


@dataclass
class PointerTable:
    """Ordered entries shared by the managed and native table records."""

    entries: list[TableEntry] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def fields(self) -> list[str]:
        return [entry.field for entry in self.entries]


@dataclass
class GeneratorConfig:
    """Settings for one generation run.

    Attributes:
        root: Directory scanned for headers; output paths are relative to it
        managed_dir: Output directory for managed artifacts
        native_dir: Output directory for native artifacts
        marker: Marker token flagging eligible headers
        namespace: Namespace of generated managed code
        table_accessor: Managed expression holding the pointer table
        workers: Number of worker threads
        include_dirs: Extra include directories passed to clang
        defines: Extra preprocessor defines (``NAME`` or ``NAME=VALUE``)
        clang_args: Extra raw clang arguments
    """

    root: Path
    managed_dir: str = MANAGED_OUTPUT_DIR
    native_dir: str = NATIVE_OUTPUT_DIR
    marker: str = MARKER_TOKEN
    namespace: str = MANAGED_NAMESPACE
    table_accessor: str = MANAGED_TABLE_ACCESSOR
    workers: int = field(default_factory=lambda: os.cpu_count() or 1)
    include_dirs: list[str] = field(default_factory=list)
    defines: list[str] = field(default_factory=list)
    clang_args: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.root = Path(self.root)

    @property
    def managed_path(self) -> Path:
        return self.root / self.managed_dir

    @property
    def native_path(self) -> Path:
        return self.root / self.native_dir

    def compiler_args(self) -> list[str]:
        """Arguments handed to clang when parsing a header."""
        args = list(CLANG_ARGS)
        args.append(
            f"-D{self.marker}="
            f'__attribute__((annotate("{MARKER_ANNOTATION}")))'
        )
        args.extend(f"-I{path}" for path in self.include_dirs)
        args.extend(f"-D{define}" for define in self.defines)
        args.extend(self.clang_args)
        return args


@dataclass
class GenerationResult:
    """Outcome of a generation run.

    Attributes:
        headers: Processed headers in discovery order
        table: The function-pointer table shared by both sides
        written: Every artifact written, in write order per header then globals
    """

    headers: list[Header]
    table: PointerTable
    written: list[Path] = field(default_factory=list)

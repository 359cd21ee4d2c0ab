"""Tests for the pointer table and the global artifacts."""

from pathlib import Path

import pytest

from interopgen.generator.aggregator import (
    build_pointer_table,
    emit_interop_list,
    emit_tables,
)
from interopgen.generator.errors import NamingCollisionError
from interopgen.generator.models import (
    Class,
    Header,
    Method,
    NativeType,
    PointerTable,
)


def managed_fields(code: str) -> list[str]:
    return [
        line.strip().split()[-1].rstrip(";")
        for line in code.splitlines()
        if line.strip().startswith("public IntPtr ")
    ]


def native_fields(code: str) -> list[str]:
    return [
        line.strip()[len("void* ") :].rstrip(";")
        for line in code.splitlines()
        if line.strip().startswith("void* ")
    ]


def native_initializers(code: str) -> list[str]:
    return [
        line.strip().rstrip(",")
        for line in code.splitlines()
        if line.strip().startswith("(void*)")
    ]


class TestBuildPointerTable:
    """Tests for flattening headers into the pointer table."""

    def test_order_follows_discovery(self, make_header):
        """Test header, class and method order are all preserved."""
        # Arrange
        headers = [
            make_header("Audio.h", 0, {"Audio": ["Play"]}),
            make_header("Gfx.h", 1, {"Gfx": ["Init", "Render"], "Window": ["Show"]}),
        ]

        # Act
        table = build_pointer_table(headers)

        # Assert
        assert table.fields == [
            "__Audio_PlayMethodPtr",
            "__Gfx_InitMethodPtr",
            "__Gfx_RenderMethodPtr",
            "__Window_ShowMethodPtr",
        ]
        assert [entry.symbol for entry in table.entries] == [
            "__Audio_Play",
            "__Gfx_Init",
            "__Gfx_Render",
            "__Window_Show",
        ]
        assert table.entries[0].source == Path("Audio.h")

    def test_structures_have_no_entries(self, vector_struct):
        header = Header(path=Path("Math.h"), index=0, units=[vector_struct])
        assert len(build_pointer_table([header])) == 0

    def test_same_method_in_two_headers(self, make_header):
        """Test that redeclaring a class method in another header is fatal."""
        headers = [
            make_header("A.h", 0, {"Gfx": ["Init"]}),
            make_header("B.h", 1, {"Gfx": ["Init"]}),
        ]

        with pytest.raises(NamingCollisionError, match="__Gfx_Init") as excinfo:
            build_pointer_table(headers)

        assert excinfo.value.file_path == Path("B.h")

    def test_underscore_ambiguity(self, make_header):
        """Test that A_B::C and A::B_C collide on the same symbol."""
        headers = [make_header("X.h", 0, {"A_B": ["C"], "A": ["B_C"]})]

        with pytest.raises(NamingCollisionError, match="A_B::C"):
            build_pointer_table(headers)

    def test_overloads_collide(self):
        """Test that overloaded methods cannot share one table slot."""
        header = Header(
            path=Path("Gfx.h"),
            index=0,
            units=[
                Class(
                    name="Gfx",
                    qualified_name="Gfx",
                    methods=[
                        Method(name="Draw", return_type=NativeType.void(), line=3),
                        Method(name="Draw", return_type=NativeType.void(), line=4),
                    ],
                )
            ],
        )

        with pytest.raises(NamingCollisionError) as excinfo:
            build_pointer_table([header])

        assert excinfo.value.lineno == 4


class TestEmitTables:
    """Tests for the managed and native pointer-table records."""

    def test_tables_share_field_order(self, make_header):
        """Test that both records list the same fields in the same order."""
        # Arrange
        table = build_pointer_table(
            [
                make_header("Audio.h", 0, {"Audio": ["Play", "Stop"]}),
                make_header("Gfx.h", 1, {"Gfx": ["Init"]}),
            ]
        )

        # Act
        managed, native = emit_tables(table)

        # Assert
        assert managed_fields(managed) == table.fields
        assert native_fields(native) == table.fields
        assert native_initializers(native) == [
            "(void*)__Audio_Play",
            "(void*)__Audio_Stop",
            "(void*)__Gfx_Init",
        ]

    def test_native_table_text(self, make_header):
        table = build_pointer_table([make_header("Gfx.h", 0, {"Gfx": ["Init"]})])

        _, native = emit_tables(table)

        expected = "\n".join(
            [
                "// <auto-generated>",
                "// This file was generated by interopgen. Do not edit it by hand.",
                "// </auto-generated>",
                "",
                "#ifndef __GENERATED_UNMANAGED_ARGS_H",
                "#define __GENERATED_UNMANAGED_ARGS_H",
                "",
                '#include "InteropList.generated.h"',
                "",
                "struct UnmanagedArgs",
                "{",
                "\tvoid* __Gfx_InitMethodPtr;",
                "};",
                "",
                "inline UnmanagedArgs args",
                "{",
                "\t(void*)__Gfx_Init",
                "};",
                "",
                "#endif // __GENERATED_UNMANAGED_ARGS_H",
                "",
            ]
        )
        assert native == expected

    def test_initializer_separators(self, make_header):
        """Test that every initializer but the last ends with a comma."""
        table = build_pointer_table([make_header("Gfx.h", 0, {"Gfx": ["A", "B"]})])

        _, native = emit_tables(table)

        assert "\t(void*)__Gfx_A,\n\t(void*)__Gfx_B\n};" in native

    def test_managed_table(self, make_header):
        table = build_pointer_table([make_header("Gfx.h", 0, {"Gfx": ["Init"]})])

        managed, _ = emit_tables(table, namespace="Mocha.Glue")

        assert "namespace Mocha.Glue;" in managed
        assert (
            "[StructLayout( LayoutKind.Sequential )]\n"
            "public struct UnmanagedArgs\n"
            "{\n"
            "\tpublic IntPtr __Gfx_InitMethodPtr;\n"
            "}\n"
        ) in managed

    def test_empty_table(self):
        """Test that an empty table still yields both records."""
        managed, native = emit_tables(PointerTable())

        assert "public struct UnmanagedArgs\n{\n}\n" in managed
        assert "struct UnmanagedArgs\n{\n};" in native
        assert "inline UnmanagedArgs args\n{\n};" in native


class TestEmitInteropList:
    """Tests for the native include manifest."""

    def test_includes_every_header_in_order(self, make_header):
        headers = [
            make_header("Input/Audio.h", 0, {}),
            make_header("Input/Gfx.h", 1, {"Gfx": ["Init"]}),
        ]

        code = emit_interop_list(headers)

        includes = [line for line in code.splitlines() if line.startswith("#include")]
        assert includes == [
            '#include "Audio.generated.h"',
            '#include "Gfx.generated.h"',
        ]
        assert code.startswith("// <auto-generated>")
        assert code.endswith("#endif // __GENERATED_INTEROPLIST_H\n")

    def test_no_headers(self):
        code = emit_interop_list([])
        assert "#include" not in code
        assert "#define __GENERATED_INTEROPLIST_H" in code

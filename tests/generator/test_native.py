"""Tests for native-side (C++) code generation."""

from interopgen.generator.models import (
    Class,
    Method,
    NativeType,
    Parameter,
    TypeCategory,
)
from interopgen.generator.native import (
    NativeCodeGenerator,
    thunk_body,
    thunk_signature,
)

from .sample_types import INT


def methods_by_name(unit: Class) -> dict[str, Method]:
    return {method.name: method for method in unit.methods}


class TestThunkSignature:
    """Tests for thunk signatures."""

    def test_constructor_returns_opaque_pointer(self, gfx_class):
        ctor = methods_by_name(gfx_class)["Ctor"]
        assert thunk_signature(gfx_class, ctor) == "void* __Gfx_Ctor( int width )"

    def test_instance_method_takes_instance(self, gfx_class):
        init = methods_by_name(gfx_class)["Init"]
        assert thunk_signature(gfx_class, init) == (
            "void __Gfx_Init( Engine::Gfx* instance, int width, int height )"
        )

    def test_static_method_without_parameters(self, gfx_class):
        scale = methods_by_name(gfx_class)["GetScale"]
        assert thunk_signature(gfx_class, scale) == "float __Gfx_GetScale()"

    def test_strings_keep_native_spelling(self, gfx_class):
        methods = methods_by_name(gfx_class)
        assert thunk_signature(gfx_class, methods["SetTitle"]) == (
            "void __Gfx_SetTitle( Engine::Gfx* instance, const char * title )"
        )
        assert thunk_signature(gfx_class, methods["GetTitle"]) == (
            "const char * __Gfx_GetTitle( Engine::Gfx* instance )"
        )

    def test_reference_return_becomes_pointer(self):
        """Test that references are returned by address."""
        unit = Class(
            name="Scene",
            qualified_name="Scene",
            methods=[
                Method(
                    name="GetCamera",
                    return_type=NativeType(
                        "Camera &", "Camera &", TypeCategory.POINTER
                    ),
                )
            ],
        )
        method = unit.methods[0]

        assert thunk_signature(unit, method) == (
            "void* __Scene_GetCamera( Scene* instance )"
        )
        assert thunk_body(unit, method) == (
            "return (void*)&( instance->GetCamera() );"
        )

    def test_namespaced_types_are_qualified(self):
        """Test that namespace-local types are spelled with their scope."""
        # Arrange
        color = NativeType(
            "Color", "Color", TypeCategory.RECORD, qualified="Engine::Color"
        )
        handle = NativeType(
            "Handle", "unsigned int", TypeCategory.PRIMITIVE, qualified="unsigned int"
        )
        unit = Class(
            name="Gfx",
            qualified_name="Engine::Gfx",
            methods=[
                Method(
                    name="Set",
                    return_type=color,
                    parameters=[Parameter("c", color), Parameter("h", handle)],
                )
            ],
        )

        # Act
        signature = thunk_signature(unit, unit.methods[0])

        # Assert
        assert signature == (
            "Engine::Color __Gfx_Set( Engine::Gfx* instance, Engine::Color c, "
            "unsigned int h )"
        )


class TestThunkBody:
    """Tests for the forwarding statement of each thunk."""

    def test_constructor(self, gfx_class):
        ctor = methods_by_name(gfx_class)["Ctor"]
        assert thunk_body(gfx_class, ctor) == "return new Engine::Gfx( width );"

    def test_void_instance_call(self, gfx_class):
        init = methods_by_name(gfx_class)["Init"]
        assert thunk_body(gfx_class, init) == "instance->Init( width, height );"

    def test_static_call(self, gfx_class):
        scale = methods_by_name(gfx_class)["GetScale"]
        assert thunk_body(gfx_class, scale) == "return Engine::Gfx::GetScale();"

    def test_value_return(self, gfx_class):
        title = methods_by_name(gfx_class)["GetTitle"]
        assert thunk_body(gfx_class, title) == "return instance->GetTitle();"


class TestNativeCodeGenerator:
    """Tests for complete native headers."""

    def test_single_method_header(self):
        """Test the full text of a header with one instance method."""
        # Arrange
        units = [
            Class(
                name="Gfx",
                qualified_name="Gfx",
                methods=[
                    Method(
                        name="Resize",
                        return_type=INT,
                        parameters=[],
                    )
                ],
            )
        ]

        # Act
        code = NativeCodeGenerator(units, "Gfx").generate_native_code("../Input/Gfx.h")

        # Assert
        expected = "\n".join(
            [
                "// <auto-generated>",
                "// This file was generated by interopgen. Do not edit it by hand.",
                "// </auto-generated>",
                "// Source: Gfx.h",
                "",
                "#ifndef __GENERATED_GFX_H",
                "#define __GENERATED_GFX_H",
                "",
                '#include "../Input/Gfx.h"',
                "",
                "inline int __Gfx_Resize( Gfx* instance )",
                "{",
                "\treturn instance->Resize();",
                "}",
                "",
                "#endif // __GENERATED_GFX_H",
                "",
            ]
        )
        assert code == expected

    def test_thunks_in_declaration_order(self, gfx_class):
        code = NativeCodeGenerator([gfx_class], "Gfx").generate_native_code("Gfx.h")

        thunks = [line for line in code.splitlines() if line.startswith("inline ")]
        assert thunks == [
            "inline void* __Gfx_Ctor( int width )",
            "inline void __Gfx_Init( Engine::Gfx* instance, int width, int height )",
            "inline float __Gfx_GetScale()",
            "inline void __Gfx_SetTitle( Engine::Gfx* instance, const char * title )",
            "inline const char * __Gfx_GetTitle( Engine::Gfx* instance )",
        ]

    def test_structures_emit_no_thunks(self, vector_struct):
        """Test that structures rely on the included header."""
        code = NativeCodeGenerator([vector_struct], "Math").generate_native_code(
            "Math.h"
        )

        assert "inline" not in code
        assert '#include "Math.h"' in code

    def test_empty_header(self):
        """Test that a header without units still has a guard and include."""
        code = NativeCodeGenerator([], "Empty").generate_native_code("src/Empty.h")

        assert code.endswith(
            '#include "src/Empty.h"\n\n#endif // __GENERATED_EMPTY_H\n'
        )

    def test_namespace_functions(self):
        """Test that namespace functions are forwarded as qualified free calls."""
        unit = Class(
            name="Editor",
            qualified_name="Engine::Editor",
            is_namespace=True,
            methods=[Method(name="GetFPS", return_type=INT, is_static=True)],
        )

        code = NativeCodeGenerator([unit], "Editor").generate_native_code("Editor.h")

        assert (
            "inline int __Editor_GetFPS()\n{\n\treturn Engine::Editor::GetFPS();\n}"
            in code
        )

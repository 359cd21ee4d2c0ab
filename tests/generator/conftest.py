"""
Pytest configuration and shared fixtures for generator tests.

This module contains fixtures that are shared across multiple test modules.
"""

from pathlib import Path
from textwrap import dedent

import pytest

from interopgen.generator.models import (
    Class,
    Header,
    Method,
    NativeType,
    Parameter,
    Structure,
    StructField,
    TypeCategory,
)

from .sample_types import FLOAT, INT, STRING


@pytest.fixture
def write_header(tmp_path):
    """Fixture writing a dedented header below ``tmp_path``."""

    def _write(relative: str, text: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(dedent(text).lstrip(), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def gfx_class():
    """Fixture providing a class with a constructor, instance and static methods."""
    return Class(
        name="Gfx",
        qualified_name="Engine::Gfx",
        methods=[
            Method(
                name="Ctor",
                return_type=NativeType(
                    "Engine::Gfx *", "Engine::Gfx *", TypeCategory.POINTER
                ),
                parameters=[Parameter("width", INT)],
                is_static=True,
                is_constructor=True,
            ),
            Method(
                name="Init",
                return_type=NativeType.void(),
                parameters=[Parameter("width", INT), Parameter("height", INT)],
            ),
            Method(name="GetScale", return_type=FLOAT, is_static=True),
            Method(
                name="SetTitle",
                return_type=NativeType.void(),
                parameters=[Parameter("title", STRING)],
            ),
            Method(name="GetTitle", return_type=STRING),
        ],
    )


@pytest.fixture
def vector_struct():
    """Fixture providing a plain data structure."""
    return Structure(
        name="Vector3",
        qualified_name="Vector3",
        fields=[
            StructField("x", FLOAT),
            StructField("y", FLOAT),
            StructField("z", FLOAT),
        ],
    )


@pytest.fixture
def make_header():
    """Fixture building a Header holding one class per (class, methods) pair."""

    def _make(path: str, index: int, classes: dict[str, list[str]]) -> Header:
        units = [
            Class(
                name=name,
                qualified_name=name,
                methods=[
                    Method(name=method, return_type=NativeType.void())
                    for method in methods
                ],
            )
            for name, methods in classes.items()
        ]
        return Header(path=Path(path), index=index, units=units)

    return _make

"""Indented text buffer used by every emitter."""

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator

from interopgen.generator.constants import INDENT


@dataclass
class CodeBlock:
    """Manages code block generation."""

    indent_level: int = 0
    lines: list[str] = field(default_factory=list)

    @contextmanager
    def block(self, closing: str = "}") -> Iterator[None]:
        """Context manager for brace-delimited blocks."""
        self.add_line("{")
        self.indent_level += 1
        try:
            yield
        finally:
            self.indent_level -= 1
            self.add_line(closing)

    def add_line(self, line: str = "") -> None:
        """Add line with proper indentation."""
        if not line:
            if self.lines and self.lines[-1]:
                self.lines.append("")
            return

        # Preprocessor directives stay in the first column
        if line.startswith("#"):
            self.lines.append(line)
            return

        self.lines.append(f"{INDENT * self.indent_level}{line}")

    def add_lines(self, lines: list[str]) -> None:
        for line in lines:
            self.add_line(line)

    def add_comment(self, lines: list[str]) -> None:
        for line in lines:
            self.add_line(f"// {line}")

    def get_code(self) -> str:
        """Get generated code, terminated by a single newline."""
        lines = list(self.lines)
        while lines and not lines[-1]:
            lines.pop()
        return "\n".join(lines) + "\n"

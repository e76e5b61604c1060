"""Helpers for rendering reconstructed JavaScript statements.

Expressions render themselves to single-line strings (see
:mod:`unternary.js_ast`); statements need indentation and brace placement
which is what :class:`JsWriter` takes care of.  The writer never
reflows text and never inserts blank lines on its own; its output is spliced
back into an existing file whose surrounding layout stays untouched.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, List, Sequence


@dataclass
class JsRenderOptions:
    """Customisation knobs that influence statement rendering."""

    indent: str = "  "
    semicolons: bool = True


class JsWriter:
    """Incremental JavaScript pretty printer.

    Components contribute source through :meth:`write_line` and open nested
    blocks with :meth:`indented`.  The writer tracks the indentation level and
    the statement terminator so that AST nodes do not have to.
    """

    def __init__(self, options: JsRenderOptions | None = None) -> None:
        self.options = options or JsRenderOptions()
        self._indent = 0
        self._lines: List[str] = []

    # ------------------------------------------------------------------
    # basic line emission helpers
    # ------------------------------------------------------------------
    def write_line(self, text: str) -> None:
        """Append ``text`` at the current indentation level."""

        self._lines.append(f"{self.options.indent * self._indent}{text}")

    def write_statement(self, text: str) -> None:
        """Append a simple statement, adding the terminator when enabled."""

        if self.options.semicolons:
            text += ";"
        self.write_line(text)

    # ------------------------------------------------------------------
    # indentation helpers
    # ------------------------------------------------------------------
    @contextmanager
    def indented(self) -> Iterator[None]:
        """Context manager that increases indentation within the ``with`` body."""

        self.indent()
        try:
            yield
        finally:
            self.dedent()

    def indent(self) -> None:
        self._indent += 1

    def dedent(self) -> None:
        if self._indent == 0:
            raise ValueError("indentation underflow")
        self._indent -= 1

    # ------------------------------------------------------------------
    # rendering helpers
    # ------------------------------------------------------------------
    def lines(self) -> List[str]:
        return list(self._lines)

    def render(self) -> str:
        """Return the accumulated source code without a trailing newline."""

        return "\n".join(self._lines)


def render_lines(statements, options: JsRenderOptions | None = None) -> List[str]:
    """Render ``statements`` and return the writer lines.

    A writer line may span several physical lines when an expression keeps
    multi-line source text, such as a template literal or a function body.
    """

    writer = JsWriter(options)
    for statement in statements:
        emit = getattr(statement, "emit", None)
        if emit is None:
            raise TypeError(f"cannot render {type(statement).__name__} as a statement")
        emit(writer)
    return writer.lines()


def render_statements(statements, options: JsRenderOptions | None = None) -> str:
    """Render ``statements`` into a standalone source fragment."""

    return "\n".join(render_lines(statements, options))


def indent_fragment(lines: Sequence[str], prefix: str) -> str:
    """Join writer ``lines``, prefixing every line but the first with ``prefix``.

    The first line is written at the position of the statement being replaced,
    which already sits behind the original indentation.  Newlines inside a
    writer line belong to expression text and are left alone: re-indenting
    them would change the value of multi-line template literals.
    """

    if not lines:
        return ""
    head, *rest = lines
    return "\n".join([head] + [f"{prefix}{line}" if line else line for line in rest])


__all__ = ["JsRenderOptions", "JsWriter", "render_lines", "render_statements", "indent_fragment"]

"""Text-level statement splicing.

The unfolder never reprints a whole file.  Each rewrite replaces the byte span
of exactly one statement with freshly rendered statements, so comments and
formatting elsewhere survive untouched.  A :class:`StatementSite` captures
what the replacement needs to know about its surroundings:

* statements inside a program, a block or a ``case`` body can be replaced by
  any number of statements at the same level;
* a statement that is the sole body of an ``if``, ``else``, loop or label is
  always replaced by a ``{ ... }`` block, even for a single statement, since a
  bare ``if`` there would bind a following ``else``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from .js_formatter import JsRenderOptions, indent_fragment, render_lines


@dataclass(frozen=True)
class StatementSite:
    """Location of a statement in the encoded source."""

    start: int
    end: int
    indent: str
    needs_block: bool = False
    line: int = 0


@dataclass(frozen=True)
class TextEdit:
    start: int
    end: int
    replacement: bytes


def render_replacement(
    site: StatementSite,
    statements: Sequence,
    options: JsRenderOptions | None = None,
) -> str:
    """Render ``statements`` so they can stand where ``site`` used to be."""

    opts = options or JsRenderOptions()
    lines = render_lines(statements, opts)
    if not site.needs_block:
        return indent_fragment(lines, site.indent)
    inner = indent_fragment(lines, site.indent + opts.indent)
    return f"{{\n{site.indent}{opts.indent}{inner}\n{site.indent}}}"


def splice_statements(
    source: bytes,
    site: StatementSite,
    statements: Sequence,
    options: JsRenderOptions | None = None,
) -> bytes:
    """Return ``source`` with the statement at ``site`` replaced."""

    edit = make_edit(site, statements, options)
    return apply_edits(source, [edit])


def make_edit(
    site: StatementSite,
    statements: Sequence,
    options: JsRenderOptions | None = None,
) -> TextEdit:
    text = render_replacement(site, statements, options)
    return TextEdit(site.start, site.end, text.encode("utf-8"))


def apply_edits(source: bytes, edits: Iterable[TextEdit]) -> bytes:
    """Apply non-overlapping ``edits`` to ``source``.

    Edits are applied back to front so earlier offsets stay valid.
    """

    ordered = sorted(edits, key=lambda edit: edit.start)
    for previous, current in zip(ordered, ordered[1:]):
        if current.start < previous.end:
            raise ValueError(
                f"overlapping edits at bytes {previous.start}..{previous.end} and {current.start}..{current.end}"
            )
    result = source
    for edit in reversed(ordered):
        result = result[: edit.start] + edit.replacement + result[edit.end :]
    return result


def line_indent(source: bytes, offset: int) -> str:
    """Return the leading whitespace of the line containing ``offset``."""

    line_start = source.rfind(b"\n", 0, offset) + 1
    prefix = source[line_start:offset].decode("utf-8", errors="replace")
    stripped = prefix.lstrip(" \t")
    return prefix[: len(prefix) - len(stripped)]


__all__ = [
    "StatementSite",
    "TextEdit",
    "render_replacement",
    "splice_statements",
    "make_edit",
    "apply_edits",
    "line_indent",
]

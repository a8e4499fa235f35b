#  -*- coding: utf-8 -*-
"""
Line-oriented source builder used by the emitters.

Lines are stored with their nesting depth and only turned into text by
``render``, which applies one indentation unit and one line ending to the
whole unit. Fragments built separately can be nested into one another with
``include``.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator


class SourceBuilder:
    """
    Accumulates ``(depth, text)`` lines.

    Examples
    --------
    >>> source = SourceBuilder()
    >>> with source.block('if ok:'):
    ...     source.line('return 1')
    >>> source.render()
    'if ok:\\n    return 1\\n'
    """

    def __init__(self) -> None:
        self.depth: int = 0
        self.lines: list[tuple[int, str]] = []

    def __bool__(self) -> bool:
        return bool(self.lines)

    def __len__(self) -> int:
        return len(self.lines)

    def line(self, text: str = '') -> None:
        self.lines.append((self.depth if text else 0, text))

    def blank(self) -> None:
        """Add one empty line, never two in a row."""
        if self.lines and self.lines[-1][1]:
            self.lines.append((0, ''))

    @contextmanager
    def indented(self) -> Iterator[None]:
        self.depth += 1

        try:
            yield
        finally:
            self.depth -= 1

    @contextmanager
    def block(self, header: str) -> Iterator[None]:
        """Write ``header`` and indent what follows by one level."""
        self.line(header)

        with self.indented():
            yield

    def include(self, other: SourceBuilder) -> None:
        """Append the lines of ``other`` nested under the current depth."""
        for depth, text in other.lines:
            self.lines.append((self.depth + depth if text else 0, text))

    def render(self, indent: str = '    ', newline: str = '\n') -> str:
        return ''.join(f"{indent * depth}{text}{newline}" for depth, text in self.lines)


# ========== ========== ========== ========== ========== ==========
class Target(Enum):
    """Which part of the document a field's statements deal with."""

    VALUES = 'values'
    NODES = 'nodes'


@dataclass
class Statements:
    """
    The statements emitted for one field.

    Attributes
    ----------
    target : Target
        For load: the loop (over values or over nodes) ``body`` belongs to.
        For save: the section (values first, then nodes) ``body`` belongs to.
    body : SourceBuilder
        The main statements.
    before : SourceBuilder
        Statements placed before the loops (load only).
    after : SourceBuilder
        Statements placed after the loops (load only).
    """

    target: Target
    body: SourceBuilder = field(default_factory=SourceBuilder)
    before: SourceBuilder = field(default_factory=SourceBuilder)
    after: SourceBuilder = field(default_factory=SourceBuilder)

#  -*- coding: utf-8 -*-
"""
The hierarchical config document and the node serialization capability.

A ``ConfigNode`` is a named container of ordered scalar values and ordered
child nodes. Names may repeat in both lists: repeated values usually hold the
elements of a collection, repeated nodes are tolerated and left to the caller.

Text format
-----------
::

    PART
    {
        name = wing     // comments run to the end of the line
        mass = 0.25
        MODULE
        {
            speed = 1.5
        }
    }

``ConfigNode.parse`` returns a root node whose values and nodes are the
top-level entries of the text. ``to_text`` writes the body of a node, so
``ConfigNode.parse(node.to_text())`` reproduces ``node``'s contents.

Node capability
---------------
A type is ``ConfigSerializable`` when it can load and save itself from and to
a node, either through public ``load(node)`` / ``save(node)`` members
(``NodeReach.DIRECT``) or only through the ``__config_load__`` /
``__config_save__`` protocol methods (``NodeReach.EXPLICIT``). The latter are
reached with ``config_load`` and ``config_save``.
"""

from __future__ import annotations

import re

from abc import ABC
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Iterator, Self

from rich.text import Text
from rich.tree import Tree
from rich.console import RenderableType

from .display import Displayable
from .errors import ConfigParseError, check_types


_BRACES = re.compile(r'([{}])')


# ========== ========== ========== ========== ========== ==========
@dataclass
class Value:
    """A named scalar entry of a ``ConfigNode``."""

    name: str
    value: str


class ConfigNode(Displayable):
    """
    A named node of a config document.

    Parameters
    ----------
    name : str, optional
        Node name. Root nodes are usually named ``"root"``.

    Examples
    --------
    >>> node = ConfigNode('PART')
    >>> node.add_value('mass', 0.25)
    >>> node.add_node('MODULE').add_value('speed', '1.5')
    >>> node.get_value('mass')
    '0.25'
    >>> node.get_node('MODULE').get_value('speed')
    '1.5'
    """

    # ========== ========== ========== ========== ========== special methods
    def __init__(self, name: str = '') -> None:
        check_types(name, str)

        self.name: str = name
        self.values: list[Value] = []
        self.nodes: list[ConfigNode] = []

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConfigNode):
            return NotImplemented

        return self.name == other.name and self.values == other.values and self.nodes == other.nodes

    def __repr__(self) -> str:
        return f"ConfigNode({self.name!r}, values={self.count_values}, nodes={self.count_nodes})"

    def __iter__(self) -> Iterator[Value]:
        return iter(self.values)

    # ========== ========== ========== ========== ========== protected methods
    def _title(self) -> Text:
        return Text(self.name or '<root>', style='bold')

    def _content(self) -> RenderableType:
        tree = Tree(self.name or '<root>', guide_style=self.display_settings.panel_border_style)
        self._fill_tree(tree)
        return tree

    def _fill_tree(self, tree: Tree) -> None:
        for value in self.values:
            tree.add(Text.assemble((value.name, self.display_settings.property_style), ' = ', value.value))

        for node in self.nodes:
            node._fill_tree(tree.add(Text(node.name, style='bold')))

    # ========== ========== ========== ========== ========== public methods
    def add_value(self, name: str, value: Any) -> None:
        """
        Append a value. ``None`` is stored as an empty string and anything that
        is not a string is stored as ``str(value)``.
        """
        check_types(name, str)

        if value is None:
            value = ''
        elif not isinstance(value, str):
            value = str(value)

        self.values.append(Value(name, value))

    def add_node(self, name: str, node: ConfigNode | None = None) -> ConfigNode:
        """
        Append a child node and return it.

        Parameters
        ----------
        name : str
            Name of the child.
        node : ConfigNode, optional
            When given, a copy of ``node`` renamed to ``name`` is appended
            instead of a new empty node.

        Returns
        -------
        ConfigNode
            The appended child.
        """
        check_types(name, str)
        check_types(node, ConfigNode, can_be_none=True)

        child = ConfigNode(name) if node is None else node.copy(name)
        self.nodes.append(child)

        return child

    def get_value(self, name: str) -> str | None:
        """First value named ``name``, or ``None``."""
        for value in self.values:
            if value.name == name:
                return value.value

        return None

    def get_values(self, name: str) -> list[str]:
        return [value.value for value in self.values if value.name == name]

    def has_value(self, name: str) -> bool:
        return any(value.name == name for value in self.values)

    def get_node(self, name: str) -> ConfigNode | None:
        """First child named ``name``, or ``None``."""
        for node in self.nodes:
            if node.name == name:
                return node

        return None

    def get_nodes(self, name: str) -> list[ConfigNode]:
        return [node for node in self.nodes if node.name == name]

    def has_node(self, name: str) -> bool:
        return any(node.name == name for node in self.nodes)

    def copy(self, name: str | None = None) -> ConfigNode:
        """Deep copy, optionally renamed."""
        clone = ConfigNode(self.name if name is None else name)
        clone.values = [Value(value.name, value.value) for value in self.values]
        clone.nodes = [node.copy() for node in self.nodes]

        return clone

    # ---------- ---------- ---------- ---------- ---------- text format
    @classmethod
    def parse(cls, text: str, name: str = 'root') -> Self:
        """
        Parse config text into a root node.

        Parameters
        ----------
        text : str
            Document text.
        name : str, default 'root'
            Name of the returned root node.

        Returns
        -------
        ConfigNode
            Root node holding the top-level values and nodes.

        Raises
        ------
        ConfigParseError
            On unbalanced braces, a node name not followed by ``{``, or a line
            that is neither a value, a node name nor a brace.
        """
        check_types(text, str)

        root = cls(name)
        stack: list[ConfigNode] = [root]
        pending: tuple[str, int] | None = None

        for lineno, line in enumerate(text.splitlines(), start=1):
            line = line.split('//', 1)[0]

            for segment in _BRACES.split(line):
                segment = segment.strip()

                if not segment:
                    continue

                if segment == '{':
                    child = cls(pending[0] if pending is not None else '')
                    stack[-1].nodes.append(child)
                    stack.append(child)
                    pending = None
                    continue

                if pending is not None:
                    raise ConfigParseError(f"expected '{{' after node name '{pending[0]}'", pending[1])

                if segment == '}':
                    if len(stack) == 1:
                        raise ConfigParseError("unbalanced '}'", lineno)

                    stack.pop()

                elif '=' in segment:
                    key, value = segment.split('=', 1)
                    stack[-1].values.append(Value(key.strip(), value.strip()))

                else:
                    pending = (segment, lineno)

        if pending is not None:
            raise ConfigParseError(f"expected '{{' after node name '{pending[0]}'", pending[1])

        if len(stack) > 1:
            raise ConfigParseError(f"unclosed node '{stack[-1].name}'")

        return root

    def to_text(self, indent: str = '\t', newline: str = '\n') -> str:
        """Write the body of this node (its values and children) as config text."""
        lines: list[str] = []
        self._write_lines(lines, 0, indent)

        return ''.join(line + newline for line in lines)

    def _write_lines(self, lines: list[str], depth: int, indent: str) -> None:
        prefix = indent * depth

        for value in self.values:
            lines.append(f"{prefix}{value.name} = {value.value}")

        for node in self.nodes:
            lines.append(f"{prefix}{node.name}")
            lines.append(f"{prefix}{{")
            node._write_lines(lines, depth + 1, indent)
            lines.append(f"{prefix}}}")

    @classmethod
    def from_file(cls, path: Path | str, name: str = 'root') -> Self:
        path = Path(path)

        with path.open(encoding='utf-8') as file:
            return cls.parse(file.read(), name=name)

    def to_file(self, path: Path | str) -> None:
        path = Path(path)

        with path.open('w', encoding='utf-8', newline='') as file:
            file.write(self.to_text())

    # ---------- ---------- ---------- ---------- ---------- properties
    @property
    def count_values(self) -> int:
        return len(self.values)

    @property
    def count_nodes(self) -> int:
        return len(self.nodes)


# ========== ========== ========== ========== ========== ==========
class NodeReach(Enum):
    """How a ``ConfigSerializable`` type exposes its load/save entry points."""

    DIRECT = 'direct'
    EXPLICIT = 'explicit'


def _has_methods(cls: type, *names: str) -> bool:
    return all(callable(getattr(cls, name, None)) for name in names)


def node_reach(cls: Any) -> NodeReach | None:
    """
    Return how ``cls`` can be loaded from and saved to a node, or ``None``
    when it cannot.
    """
    if not isinstance(cls, type):
        return None

    # config objects declare their reach; inherited members may say otherwise
    object_meta = cls.__dict__.get('__config_metadata__')

    if object_meta is not None and object_meta.reach is not None:
        return object_meta.reach

    if _has_methods(cls, 'load', 'save'):
        return NodeReach.DIRECT

    if _has_methods(cls, '__config_load__', '__config_save__'):
        return NodeReach.EXPLICIT

    return None


class ConfigSerializable(ABC):
    """
    Structural capability of types that load and save themselves from nodes.

    Any class with ``load``/``save`` or ``__config_load__``/``__config_save__``
    methods is a virtual subclass; no registration is needed.
    """

    __slots__ = ()

    @classmethod
    def __subclasshook__(cls, subclass: type) -> Any:
        if cls is ConfigSerializable and node_reach(subclass) is not None:
            return True

        return NotImplemented


def config_load(obj: Any, node: ConfigNode) -> None:
    """Load ``obj`` from ``node`` through the explicit protocol channel."""
    type(obj).__config_load__(obj, node)


def config_save(obj: Any, node: ConfigNode) -> None:
    """Save ``obj`` into ``node`` through the explicit protocol channel."""
    type(obj).__config_save__(obj, node)

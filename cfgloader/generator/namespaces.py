#  -*- coding: utf-8 -*-
"""
Accumulation and canonical ordering of the modules referenced by emitted code.
"""

from __future__ import annotations

import sys

from typing import Iterable, Iterator


def is_stdlib(module: str) -> bool:
    """
    Return True if ``module`` belongs to the running interpreter's standard
    library (judged by its top-level package).

    Examples
    --------
    >>> is_stdlib('collections.abc')
    True
    >>> is_stdlib('numpy')
    False
    """
    top = module.split('.', 1)[0]
    return top == 'builtins' or top in sys.stdlib_module_names


def namespace_key(module: str) -> tuple[int, str]:
    """Sort key placing standard library modules first, each group lexically."""
    return (0 if is_stdlib(module) else 1), module


class NamespaceSet:
    """
    A set of module names with a deterministic iteration order.

    Standard library modules come first; within each group names sort with
    ordinary string ordering. Adding a name twice is a no-op. Instances are
    meant to live for one generation pass only.

    Examples
    --------
    >>> names = NamespaceSet(['numpy', 'uuid', 'cfgloader.parsing', 'decimal'])
    >>> names.ordered()
    ['decimal', 'uuid', 'cfgloader.parsing', 'numpy']
    """

    __slots__ = ('_names',)

    def __init__(self, names: Iterable[str] = ()) -> None:
        self._names: set[str] = set()

        for name in names:
            self.add(name)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __len__(self) -> int:
        return len(self._names)

    def __iter__(self) -> Iterator[str]:
        return iter(self.ordered())

    def add(self, name: str) -> None:
        if not isinstance(name, str) or not name:
            raise ValueError(f"invalid module name {name!r}")

        if name != 'builtins':
            self._names.add(name)

    def update(self, names: Iterable[str]) -> None:
        for name in names:
            self.add(name)

    def ordered(self) -> list[str]:
        return sorted(self._names, key=namespace_key)

    def standard(self) -> list[str]:
        return [name for name in self.ordered() if is_stdlib(name)]

    def third_party(self) -> list[str]:
        return [name for name in self.ordered() if not is_stdlib(name)]

#  -*- coding: utf-8 -*-
"""
Per-pass generation state.

A ``GenerationContext`` is created for every generated unit and threaded
through all the stages. It owns the referenced-module set and the collected
field errors, and carries the cancellation token. Nothing in it is shared
between two passes, so independent units can be generated concurrently.
"""

from __future__ import annotations

import sys
import threading

from typing import Any

from ..errors import FieldGenerationError, GenerationCancelled, UnsupportedFieldType
from ..node import NodeReach
from ..settings import GeneratorSettings
from .namespaces import NamespaceSet


class CancellationToken:
    """
    Cooperative cancellation signal.

    Examples
    --------
    >>> token = CancellationToken()
    >>> token.cancelled
    False
    >>> token.cancel()
    >>> token.cancelled
    True
    """

    __slots__ = ('_event',)

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def throw_if_cancellation_requested(self) -> None:
        """
        Raises
        ------
        GenerationCancelled
            If ``cancel`` has been called.
        """
        if self._event.is_set():
            raise GenerationCancelled()


NEVER_CANCELLED = CancellationToken()


class GenerationContext:
    """
    State of one generation pass.

    Parameters
    ----------
    owner : type
        The class being generated.
    settings : GeneratorSettings, optional
    token : CancellationToken, optional
    pending : dict, optional
        Node reach of classes still being generated (see ``classify``).
    """

    def __init__(self,
                 owner: type,
                 settings: GeneratorSettings | None = None,
                 token: CancellationToken | None = None,
                 pending: dict[type, NodeReach | None] | None = None) -> None:

        self.owner: type = owner
        self.settings: GeneratorSettings = settings if settings is not None else GeneratorSettings()
        self.token: CancellationToken = token if token is not None else NEVER_CANCELLED
        self.pending: dict[type, NodeReach | None] = dict(pending or {})

        self.namespaces: NamespaceSet = NamespaceSet()
        self.errors: list[FieldGenerationError] = []
        self._locals: int = 0

    def check_cancelled(self) -> None:
        self.token.throw_if_cancellation_requested()

    def report(self, error: FieldGenerationError) -> None:
        self.errors.append(error)

    def local_name(self, stem: str) -> str:
        """
        Return a fresh local variable name for emitted code.

        Names start with an underscore and a digit, which no ``_<attribute>``
        temporary can produce.
        """
        name = f"_{self._locals}_{stem}"
        self._locals += 1
        return name

    def reference(self, module: str, name: str) -> str:
        """Record ``module`` as imported and return ``module.name``."""
        self.namespaces.add(module)
        return f"{module}.{name}"

    def type_reference(self, type_: Any, field: str) -> str:
        """
        Return an expression naming ``type_`` in emitted code, recording the
        module to import.

        Builtins are named bare. Other types are named through the shortest
        importable parent package that exposes them, e.g. ``pandas.Timestamp``
        rather than its defining submodule.

        Raises
        ------
        UnsupportedFieldType
            If ``type_`` is not importable by name (e.g. defined inside a
            function).
        """
        if type_ is None or type_ is type(None):
            return 'None'

        module = getattr(type_, '__module__', None)
        qualname = getattr(type_, '__qualname__', None)

        if module is None or qualname is None:
            raise UnsupportedFieldType(field, f"cannot reference {type_!r} from generated code")

        if '<locals>' in qualname:
            raise UnsupportedFieldType(field, f"{qualname} is defined inside a function and cannot be imported")

        if module == 'builtins':
            return qualname

        return self.reference(_public_module(type_, module, qualname), qualname)


def _public_module(type_: Any, module: str, qualname: str) -> str:
    parts = module.split('.')

    for end in range(1, len(parts)):
        candidate = '.'.join(parts[:end])
        obj = sys.modules.get(candidate)

        for attribute in qualname.split('.'):
            obj = getattr(obj, attribute, None)

        if obj is type_:
            return candidate

    return module

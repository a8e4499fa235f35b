#  -*- coding: utf-8 -*-
"""
Value to text conversion, the mirror of ``cfgloader.parsing``.

``write`` dispatches on the runtime type of its argument, so one function
serves every leaf type and is also the element writer handed to the container
entry points.
"""

from __future__ import annotations

import datetime
import decimal
import fractions

import numpy
import pandas

from collections.abc import Mapping
from enum import Enum
from typing import Any, Callable, Iterable, TypeAlias

from .enums import format_enum
from .node import ConfigNode
from .options import WriteOptions
from .types import Color32, Vector2Int, Vector3Int, Matrix4x4


WriteFunc: TypeAlias = Callable[[Any, WriteOptions], str]

_INTEGER_VECTORS = (Vector2Int, Vector3Int, Color32)


# ========== ========== ========== ========== ========== ==========
def _join(separator: str) -> str:
    """Separator used between joined items, padded for readability."""
    return separator if separator.isspace() else f"{separator} "


def _write_number(value: Any, options: WriteOptions) -> str:
    if options.format:
        return format(value, options.format)

    if isinstance(value, float):
        return repr(value)

    return str(value)


def write(value: Any, options: WriteOptions = WriteOptions.DEFAULTS) -> str:
    """
    Write a leaf value as text.

    Parameters
    ----------
    value : Any
        Value to write. ``None`` is written as an empty string.
    options : WriteOptions
        ``enum_handling`` applies to enums, ``format`` to numbers and temporal
        values, ``value_separator`` to multi-component values.

    Returns
    -------
    str

    Examples
    --------
    >>> write(1.5)
    '1.5'
    >>> write(True)
    'True'
    >>> from cfgloader.types import Vector3
    >>> write(Vector3(1.0, 2.0, 3.0))
    '1.0 2.0 3.0'
    """
    if value is None:
        return ''

    if isinstance(value, str):
        return value

    if isinstance(value, bool):
        return 'True' if value else 'False'

    if isinstance(value, Enum):
        return format_enum(value, options.enum_handling)

    if isinstance(value, numpy.generic):
        return write(value.item(), options)

    if isinstance(value, (int, float, decimal.Decimal)):
        return _write_number(value, options)

    if isinstance(value, (complex, fractions.Fraction)):
        return str(value)

    if isinstance(value, (datetime.date, datetime.time)):
        if options.format:
            return value.strftime(options.format)

        return value.isoformat()

    if isinstance(value, datetime.timedelta):
        return pandas.Timedelta(value).isoformat()

    if isinstance(value, Matrix4x4):
        return _join(options.value_sep).join(_write_number(component, options) for component in value)

    if isinstance(value, tuple) and hasattr(value, '_fields'):
        # vectors, quaternions, rects and colors
        components = value if isinstance(value, _INTEGER_VECTORS) else map(float, value)
        return _join(options.value_sep).join(_write_number(component, options) for component in components)

    return str(value)


def writer_for(type_: Any) -> WriteFunc:
    """
    Return the per-element write function for ``type_``.

    ``write`` dispatches at runtime, so every supported type shares it; the
    type is only checked to be writable.
    """
    if isinstance(type_, type) and issubclass(type_, (Mapping, ConfigNode)):
        raise TypeError(f"no writer for {type_!r}")

    return write


def write_collection(values: Iterable[Any] | None,
                     element_write: WriteFunc = write,
                     options: WriteOptions = WriteOptions.DEFAULTS) -> str:
    """
    Write the elements of any iterable joined by the collection separator.

    Examples
    --------
    >>> write_collection([1, 2, 3])
    '1, 2, 3'
    """
    if values is None:
        return ''

    return _join(options.collection_sep).join(element_write(element, options) for element in values)


def write_mapping(mapping: Mapping | None,
                  key_write: WriteFunc = write,
                  value_write: WriteFunc = write,
                  options: WriteOptions = WriteOptions.DEFAULTS) -> str:
    """
    Write a mapping as ``"k1: v1, k2: v2"`` in iteration order.

    Examples
    --------
    >>> write_mapping({'a': 1, 'b': 2})
    'a: 1, b: 2'
    """
    if mapping is None:
        return ''

    pair_separator = _join(options.key_value_sep)

    return _join(options.collection_sep).join(
        f"{key_write(key, options)}{pair_separator}{value_write(value, options)}"
        for key, value in mapping.items()
    )


def write_node_collection(values: Iterable[Any] | None,
                          key_name: str,
                          element_write: WriteFunc = write,
                          options: WriteOptions = WriteOptions.DEFAULTS) -> ConfigNode:
    """
    Write a collection as a node holding one ``key_name`` value per element.
    """
    node = ConfigNode()

    for text in write_values(values, element_write, options):
        node.add_value(key_name, text)

    return node


def write_values(values: Iterable[Any] | None,
                 element_write: WriteFunc = write,
                 options: WriteOptions = WriteOptions.DEFAULTS) -> list[str]:
    """Write each element of a collection stored as repeated values."""
    if values is None:
        return []

    return [element_write(element, options) for element in values]

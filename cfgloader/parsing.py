#  -*- coding: utf-8 -*-
"""
Text to value conversion.

Every entry point follows the same contract: it never raises on malformed
input and returns ``(True, value)`` on success or ``(False, None)`` on failure.
Container entry points take per-element parse functions with the signature
``parse(text, options) -> (ok, value)``, as returned by ``parser_for``.

Entry points
------------
- ``try_parse(text, type_, options)``: leaf values.
- ``try_parse_array`` / ``try_parse_ndarray``: tuples and 1-d numpy arrays.
- ``try_parse_list`` / ``_set`` / ``_frozenset`` / ``_deque``: canned
  collections.
- ``try_parse_dict`` / ``try_parse_ordered_dict``: canned dictionaries.
- ``try_parse_collection`` / ``try_parse_mapping``: any constructible mutable
  sequence, set or mapping type.
- ``try_parse_node_collection``: a node of repeated keys.
"""

from __future__ import annotations

import datetime
import decimal
import fractions
import pathlib
import re
import uuid

import numpy
import pandas

from collections import OrderedDict, deque
from collections.abc import MutableMapping, MutableSet
from enum import Enum
from functools import lru_cache
from typing import Any, Callable, Iterable, TypeAlias

from .enums import try_parse_enum
from .node import ConfigNode
from .options import ExtendedSplitOptions, ParseOptions
from .types import (Vector2, Vector3, Vector4, Vector2Int, Vector3Int, Quaternion,
                    Rect, Color, Color32, Matrix4x4)


ParseResult: TypeAlias = tuple[bool, Any]
TryParseFunc: TypeAlias = Callable[[str | None, ParseOptions], ParseResult]

FAILED: ParseResult = (False, None)

_INTEGER = re.compile(r'^[+-]?\d+$')
_HEX_COLOR = re.compile(r'^#?([0-9a-fA-F]{6}|[0-9a-fA-F]{8})$')

# Errors a leaf conversion may raise on malformed text
_CONVERSION_ERRORS = (ValueError, TypeError, ArithmeticError, OverflowError)


# ========== ========== ========== ========== ========== ========== split
def split_values(text: str | None,
                 separator: str,
                 split_options: ExtendedSplitOptions = ExtendedSplitOptions.TRIM_AND_REMOVE_EMPTY_ENTRIES,
                 maxsplit: int = -1) -> list[str]:
    """
    Split ``text`` on ``separator`` and post-process the pieces.

    Whitespace separators split on runs of whitespace, like ``str.split()``.

    Examples
    --------
    >>> split_values(' a, b,, c ', ',')
    ['a', 'b', 'c']
    >>> split_values('a,,b', ',', ExtendedSplitOptions.NONE)
    ['a', '', 'b']
    """
    if not text:
        return []

    if separator.isspace():
        splits = text.split(None, maxsplit)
    else:
        splits = text.split(separator, maxsplit)

    if ExtendedSplitOptions.TRIM_ENTRIES in split_options:
        splits = [split.strip() for split in splits]

    if ExtendedSplitOptions.REMOVE_EMPTY_ENTRIES in split_options:
        splits = [split for split in splits if split]

    return splits


# ========== ========== ========== ========== ========== ========== leaves
def _parse_bool(text: str, options: ParseOptions) -> bool:
    folded = text.strip().casefold()

    if folded == 'true':
        return True

    if folded == 'false':
        return False

    raise ValueError(text)


def _parse_int(text: str, options: ParseOptions) -> int:
    text = text.strip()

    if not _INTEGER.match(text):
        raise ValueError(text)

    return int(text)


def _parse_float(text: str, options: ParseOptions) -> float:
    return float(text.strip())


def _parse_path(text: str, options: ParseOptions) -> pathlib.Path:
    text = text.strip()

    if not text:
        raise ValueError('empty path')

    return pathlib.Path(text)


def _parse_timestamp(text: str, options: ParseOptions) -> pandas.Timestamp:
    result = pandas.Timestamp(text.strip())

    if result is pandas.NaT:
        raise ValueError(text)

    return result


def _parse_timedelta(text: str, options: ParseOptions) -> pandas.Timedelta:
    result = pandas.Timedelta(text.strip())

    if result is pandas.NaT:
        raise ValueError(text)

    return result


def _components(text: str, options: ParseOptions, count: int | tuple[int, ...], parse: Callable) -> list:
    splits = split_values(text, options.value_sep, options.split_options)
    counts = count if isinstance(count, tuple) else (count,)

    if len(splits) not in counts:
        raise ValueError(f"expected {' or '.join(map(str, counts))} components, got {len(splits)}")

    return [parse(split, options) for split in splits]


def _vector_parser(vector_type: type, parse: Callable) -> Callable:
    count = len(vector_type._fields)

    def _parse(text: str, options: ParseOptions) -> Any:
        return vector_type(*_components(text, options, count, parse))

    return _parse


def _parse_color(text: str, options: ParseOptions) -> Color:
    try:
        return Color.clamped(*_components(text, options, (3, 4), _parse_float))

    except ValueError:
        r, g, b, a = _hex_channels(text)
        return Color(r / 255, g / 255, b / 255, a / 255)


def _parse_color32(text: str, options: ParseOptions) -> Color32:
    try:
        channels = _components(text, options, (3, 4), _parse_int)

    except ValueError:
        return Color32(*_hex_channels(text))

    if any(not 0 <= channel <= 255 for channel in channels):
        raise ValueError(f"color channels must be in [0, 255]: {text}")

    return Color32(*channels)


def _hex_channels(text: str) -> tuple[int, int, int, int]:
    match = _HEX_COLOR.match(text.strip())

    if match is None:
        raise ValueError(f"not a color: {text}")

    digits = match.group(1)

    if len(digits) == 6:
        digits += 'FF'

    return tuple(int(digits[i:i + 2], 16) for i in range(0, 8, 2))


def _parse_matrix(text: str, options: ParseOptions) -> Matrix4x4:
    return Matrix4x4(_components(text, options, 16, _parse_float))


_LEAF_PARSERS: dict[type, Callable[[str, ParseOptions], Any]] = {
    bool: _parse_bool,
    int: _parse_int,
    float: _parse_float,
    complex: lambda text, options: complex(text.strip()),
    decimal.Decimal: lambda text, options: decimal.Decimal(text.strip()),
    fractions.Fraction: lambda text, options: fractions.Fraction(text.strip()),
    uuid.UUID: lambda text, options: uuid.UUID(text.strip()),
    pathlib.Path: _parse_path,
    datetime.datetime: lambda text, options: datetime.datetime.fromisoformat(text.strip()),
    datetime.date: lambda text, options: datetime.date.fromisoformat(text.strip()),
    datetime.time: lambda text, options: datetime.time.fromisoformat(text.strip()),
    datetime.timedelta: lambda text, options: _parse_timedelta(text, options).to_pytimedelta(),
    pandas.Timestamp: _parse_timestamp,
    pandas.Timedelta: _parse_timedelta,
    Vector2: _vector_parser(Vector2, _parse_float),
    Vector3: _vector_parser(Vector3, _parse_float),
    Vector4: _vector_parser(Vector4, _parse_float),
    Vector2Int: _vector_parser(Vector2Int, _parse_int),
    Vector3Int: _vector_parser(Vector3Int, _parse_int),
    Quaternion: _vector_parser(Quaternion, _parse_float),
    Rect: _vector_parser(Rect, _parse_float),
    Color: _parse_color,
    Color32: _parse_color32,
    Matrix4x4: _parse_matrix,
}


def leaf_parser(type_: Any) -> Callable[[str, ParseOptions], Any] | None:
    """
    Return the raw converter for a leaf type, or ``None`` if ``type_`` is not
    a leaf the codec understands. Raw converters raise on malformed text.
    """
    if not isinstance(type_, type):
        return None

    if type_ in _LEAF_PARSERS:
        return _LEAF_PARSERS[type_]

    if issubclass(type_, Enum):
        def _parse_enum(text: str, options: ParseOptions) -> Enum:
            ok, result = try_parse_enum(text, type_, options.enum_handling)

            if not ok:
                raise ValueError(f"not a {type_.__name__}: {text}")

            return result

        return _parse_enum

    if issubclass(type_, numpy.integer):
        return lambda text, options: type_(_parse_int(text, options))

    if issubclass(type_, numpy.floating):
        return lambda text, options: type_(_parse_float(text, options))

    return None


def try_parse(text: str | None, type_: Any, options: ParseOptions = ParseOptions.DEFAULTS) -> ParseResult:
    """
    Parse a single leaf value.

    Parameters
    ----------
    text : str or None
        Text to parse. ``None`` and empty text always fail.
    type_ : type
        Target type. ``str`` and ``object`` accept the text as is.
    options : ParseOptions
        Parse options.

    Returns
    -------
    tuple[bool, Any]
        ``(True, value)`` on success, ``(False, None)`` otherwise.

    Raises
    ------
    TypeError
        If ``type_`` is not a type the codec can parse. This is a programming
        error, not a parse failure.

    Examples
    --------
    >>> try_parse('42', int)
    (True, 42)
    >>> try_parse('4 2', int)
    (False, None)
    """
    if text is None:
        return FAILED

    if type_ is str or type_ is object or type_ is Any:
        return True, text

    if not text:
        return FAILED

    parse = leaf_parser(type_)

    if parse is None:
        raise TypeError(f"no parser for {type_!r}")

    try:
        return True, parse(text, options)

    except _CONVERSION_ERRORS:
        return FAILED


@lru_cache(maxsize=None)
def parser_for(type_: Any) -> TryParseFunc:
    """
    Return a per-element parse function for ``type_``.

    Examples
    --------
    >>> parse_int = parser_for(int)
    >>> parse_int('7', ParseOptions.DEFAULTS)
    (True, 7)
    """
    if type_ is not str and type_ is not object and leaf_parser(type_) is None:
        raise TypeError(f"no parser for {type_!r}")

    def _try_parse(text: str | None, options: ParseOptions) -> ParseResult:
        return try_parse(text, type_, options)

    _try_parse.__qualname__ = f"parser_for({getattr(type_, '__qualname__', type_)})"
    return _try_parse


# ========== ========== ========== ========== ========== ========== containers
def _parse_elements(splits: Iterable[str], element_parse: TryParseFunc, options: ParseOptions) -> list | None:
    elements = []

    for split in splits:
        ok, element = element_parse(split, options)

        if not ok:
            return None

        elements.append(element)

    return elements


def _split_collection(text: str | None, options: ParseOptions) -> list[str] | None:
    if not text:
        return None

    return split_values(text, options.collection_sep, options.split_options)


def try_parse_array(text: str | None,
                    element_parse: TryParseFunc,
                    options: ParseOptions = ParseOptions.DEFAULTS) -> ParseResult:
    """Parse a separated list of elements into a tuple."""
    splits = _split_collection(text, options)

    if splits is None:
        return FAILED

    elements = _parse_elements(splits, element_parse, options)

    if elements is None:
        return FAILED

    return True, tuple(elements)


def try_parse_ndarray(text: str | None,
                      element_parse: TryParseFunc,
                      dtype: Any,
                      options: ParseOptions = ParseOptions.DEFAULTS) -> ParseResult:
    """Parse a separated list of elements into a 1-d numpy array of ``dtype``."""
    ok, elements = try_parse_array(text, element_parse, options)

    if not ok:
        return FAILED

    return True, numpy.asarray(elements, dtype=dtype)


def try_parse_collection(text: str | None,
                         collection_type: type,
                         element_parse: TryParseFunc,
                         options: ParseOptions = ParseOptions.DEFAULTS) -> ParseResult:
    """
    Parse a separated list of elements into a new ``collection_type()``.

    Sets are filled with ``add``, anything else with ``append``.
    """
    splits = _split_collection(text, options)

    if splits is None:
        return FAILED

    elements = _parse_elements(splits, element_parse, options)

    if elements is None:
        return FAILED

    return True, fill_collection(collection_type, elements)


def fill_collection(collection_type: type, elements: Iterable[Any]) -> Any:
    """Build a ``collection_type`` holding ``elements``."""
    if collection_type in (list, tuple, set, frozenset, deque):
        return collection_type(elements)

    result = collection_type()
    add = result.add if isinstance(result, MutableSet) else result.append

    for element in elements:
        add(element)

    return result


def try_parse_list(text, element_parse, options=ParseOptions.DEFAULTS) -> ParseResult:
    return try_parse_collection(text, list, element_parse, options)


def try_parse_set(text, element_parse, options=ParseOptions.DEFAULTS) -> ParseResult:
    return try_parse_collection(text, set, element_parse, options)


def try_parse_frozenset(text, element_parse, options=ParseOptions.DEFAULTS) -> ParseResult:
    return try_parse_collection(text, frozenset, element_parse, options)


def try_parse_deque(text, element_parse, options=ParseOptions.DEFAULTS) -> ParseResult:
    return try_parse_collection(text, deque, element_parse, options)


def try_parse_mapping(text: str | None,
                      mapping_type: type,
                      key_parse: TryParseFunc,
                      value_parse: TryParseFunc,
                      options: ParseOptions = ParseOptions.DEFAULTS) -> ParseResult:
    """
    Parse ``"k1: v1, k2: v2"`` into a new ``mapping_type()``.

    Every entry must hold exactly one key/value separator, and both sides must
    parse. A repeated key keeps its last value.
    """
    splits = _split_collection(text, options)

    if splits is None:
        return FAILED

    result = mapping_type()

    if not isinstance(result, MutableMapping):
        raise TypeError(f"{mapping_type!r} is not a mutable mapping")

    for split in splits:
        pair = split_values(split, options.key_value_sep, options.split_options | ExtendedSplitOptions.TRIM_ENTRIES, 1)

        if len(pair) != 2:
            return FAILED

        key_ok, key = key_parse(pair[0], options)
        value_ok, value = value_parse(pair[1], options)

        if not (key_ok and value_ok):
            return FAILED

        result[key] = value

    return True, result


def try_parse_dict(text, key_parse, value_parse, options=ParseOptions.DEFAULTS) -> ParseResult:
    return try_parse_mapping(text, dict, key_parse, value_parse, options)


def try_parse_ordered_dict(text, key_parse, value_parse, options=ParseOptions.DEFAULTS) -> ParseResult:
    return try_parse_mapping(text, OrderedDict, key_parse, value_parse, options)


def try_parse_node_collection(node: ConfigNode | None,
                              collection_type: type,
                              key_name: str,
                              element_parse: TryParseFunc,
                              options: ParseOptions = ParseOptions.DEFAULTS) -> ParseResult:
    """
    Parse the values named ``key_name`` of ``node`` into a ``collection_type``.

    Values with other names are ignored. Any element failing to parse fails
    the whole collection.
    """
    if node is None or not key_name:
        return FAILED

    return try_parse_values(node.get_values(key_name), collection_type, element_parse, options)


def try_parse_values(texts: Iterable[str] | None,
                     collection_type: type,
                     element_parse: TryParseFunc,
                     options: ParseOptions = ParseOptions.DEFAULTS) -> ParseResult:
    """
    Parse the texts of repeated values into a ``collection_type``.

    Fails when there is no text at all or when any element fails.
    """
    texts = list(texts or ())

    if not texts:
        return FAILED

    elements = _parse_elements(texts, element_parse, options)

    if elements is None:
        return FAILED

    if collection_type is numpy.ndarray:
        return True, numpy.asarray(elements)

    return True, fill_collection(collection_type, elements)

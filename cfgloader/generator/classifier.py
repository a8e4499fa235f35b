#  -*- coding: utf-8 -*-
"""
Structural classification of declared field types.

``classify`` maps any annotation to exactly one ``TypeShape`` variant, trying
the shapes in a fixed priority order:

1. ``DirectAssignable``     ``str``, ``object``, ``typing.Any``
2. ``LeafParseable``        numbers, enums, temporal values, codec value types
3. ``ArrayOf``              ``tuple[T, ...]``, ``NDArray[scalar]``
4. ``RecognizedCollection`` ``list``, ``set``, ``frozenset``, ``deque``
5. ``RecognizedDictionary`` ``dict``, ``OrderedDict``
6. ``GenericCollection``    any other concrete mutable sequence or set
7. ``GenericDictionary``    any other concrete mutable mapping
8. ``SelfSerializingNode``  types exposing the node load/save capability
9. ``RawNode``              ``ConfigNode`` itself
10. ``Unsupported``

The first match wins, so a ``list[int]`` is a recognized collection even though
it is also a mutable sequence, and a ``Vector3`` is a leaf even though it is
also a tuple. ``Optional[T]`` classifies as ``T``.

The module holds no mutable state; every function is safe to call from several
threads at once.
"""

from __future__ import annotations

import datetime
import decimal
import fractions
import inspect
import pathlib
import types
import uuid

import numpy
import pandas

from collections import OrderedDict, deque
from collections.abc import Mapping, MutableMapping, MutableSequence, MutableSet
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeVar, Union, get_args, get_origin

from ..node import ConfigNode, NodeReach, node_reach
from ..types import (Vector2, Vector3, Vector4, Vector2Int, Vector3Int, Quaternion,
                     Rect, Color, Color32, Matrix4x4)


LEAF_TYPES: frozenset[type] = frozenset({
    bool, int, float, complex,
    decimal.Decimal, fractions.Fraction, uuid.UUID, pathlib.Path,
    datetime.datetime, datetime.date, datetime.time, datetime.timedelta,
    pandas.Timestamp, pandas.Timedelta,
    Vector2, Vector3, Vector4, Vector2Int, Vector3Int, Quaternion, Rect,
    Color, Color32, Matrix4x4,
})

DIRECT_TYPES: tuple[Any, ...] = (str, object, Any)

CANNED_COLLECTIONS: tuple[type, ...] = (list, set, frozenset, deque)
CANNED_DICTIONARIES: tuple[type, ...] = (dict, OrderedDict)


# ========== ========== ========== ========== ========== ========== shapes
@dataclass(frozen=True)
class DirectAssignable:
    type_: Any


@dataclass(frozen=True)
class LeafParseable:
    type_: type


@dataclass(frozen=True)
class ArrayOf:
    element: Any
    container: type = tuple


@dataclass(frozen=True)
class RecognizedCollection:
    container: type
    element: Any


@dataclass(frozen=True)
class RecognizedDictionary:
    container: type
    key: Any
    value: Any


@dataclass(frozen=True)
class GenericCollection:
    container: type
    element: Any


@dataclass(frozen=True)
class GenericDictionary:
    container: type
    key: Any
    value: Any


@dataclass(frozen=True)
class SelfSerializingNode:
    """
    A nested type loaded and saved through its own entry points.

    ``reach`` records whether those entry points are public members
    (``NodeReach.DIRECT``) or only the ``__config_load__`` /
    ``__config_save__`` protocol (``NodeReach.EXPLICIT``).
    """

    type_: type
    reach: NodeReach


@dataclass(frozen=True)
class RawNode:
    type_: type = ConfigNode


@dataclass(frozen=True)
class Unsupported:
    reason: str


TypeShape = Union[DirectAssignable, LeafParseable, ArrayOf, RecognizedCollection, RecognizedDictionary,
                  GenericCollection, GenericDictionary, SelfSerializingNode, RawNode, Unsupported]

TYPE_SHAPES: tuple[type, ...] = get_args(TypeShape)

VALUE_SHAPES: tuple[type, ...] = (LeafParseable, ArrayOf, RecognizedCollection, RecognizedDictionary,
                                  GenericCollection, GenericDictionary)
"""Shapes read from and written to a single value through the codec."""

COLLECTION_SHAPES: tuple[type, ...] = (ArrayOf, RecognizedCollection, GenericCollection)


# ========== ========== ========== ========== ========== ========== helpers
def _is_union(type_: Any) -> bool:
    return get_origin(type_) in (Union, types.UnionType)


def unwrap_optional(type_: Any) -> tuple[Any, bool]:
    """
    Strip ``None`` out of ``Optional[T]`` / ``T | None``.

    Returns
    -------
    tuple
        ``(T, True)`` for an optional annotation, ``(type_, False)``
        otherwise. Unions of several non-None types are returned unchanged.

    Examples
    --------
    >>> unwrap_optional(int | None)
    (<class 'int'>, True)
    >>> unwrap_optional(int)
    (<class 'int'>, False)
    """
    if _is_union(type_):
        args = get_args(type_)
        remaining = [arg for arg in args if arg is not type(None)]

        if len(remaining) == 1 and len(args) == 2:
            return remaining[0], True

    return type_, False


def is_leaf_type(type_: Any) -> bool:
    """True for the types the codec converts with one parse/write pair."""
    if not isinstance(type_, type):
        return False

    if type_ in LEAF_TYPES:
        return True

    return issubclass(type_, (Enum, numpy.integer, numpy.floating))


def is_element_type(type_: Any) -> bool:
    """True for types allowed as collection elements, keys or values."""
    return type_ is str or is_leaf_type(type_)


def _is_concrete(cls: type) -> bool:
    return not inspect.isabstract(cls)


def _has_type_vars(args: tuple) -> bool:
    return any(isinstance(arg, TypeVar) for arg in args)


def resolve_parameters(type_: Any, capabilities: tuple[type, ...], arity: int) -> tuple | None:
    """
    Find the element (or key/value) types of a container annotation.

    Looks at the annotation's own parameters first, then walks the generic
    bases (``__orig_bases__``) of the container class and of its MRO, so a
    ``class Tags(list[str])`` field resolves to ``(str,)``.
    """
    args = get_args(type_)

    if len(args) == arity and not _has_type_vars(args):
        return args

    cls = get_origin(type_) or type_

    for base in getattr(cls, '__mro__', ()):
        for orig_base in getattr(base, '__orig_bases__', ()):
            origin = get_origin(orig_base)
            base_args = get_args(orig_base)

            if (isinstance(origin, type) and issubclass(origin, capabilities)
                    and len(base_args) == arity and not _has_type_vars(base_args)):
                return base_args

    return None


def _ndarray_element(type_: Any) -> Any:
    # NDArray[numpy.float64] is numpy.ndarray[Any, numpy.dtype[numpy.float64]]
    args = get_args(type_)

    if len(args) != 2:
        return None

    dtype_args = get_args(args[1])

    return dtype_args[0] if len(dtype_args) == 1 else None


def _check_elements(elements: tuple, make_shape) -> TypeShape:
    for element in elements:
        if not is_element_type(element):
            return Unsupported(f"unsupported element type {element!r}")

    return make_shape()


# ========== ========== ========== ========== ========== ========== classify
def classify(declared: Any, pending: dict[type, NodeReach | None] | None = None) -> TypeShape:
    """
    Classify a declared field type.

    Parameters
    ----------
    declared : Any
        The resolved annotation of the field.
    pending : dict, optional
        Node reach of classes whose load/save entry points are still being
        generated, keyed by class. A class found here is judged only by this
        mapping (``None`` meaning "not a node"), which lets a type hold fields
        of its own type.

    Returns
    -------
    TypeShape
        Exactly one variant. Never raises: unsupported types yield
        ``Unsupported`` with a reason.

    Examples
    --------
    >>> classify(int)
    LeafParseable(type_=<class 'int'>)
    >>> classify(list[int])
    RecognizedCollection(container=<class 'list'>, element=<class 'int'>)
    """
    type_, _ = unwrap_optional(declared)

    if _is_union(type_):
        return Unsupported(f"unions other than Optional are not supported: {declared!r}")

    origin = get_origin(type_)
    args = get_args(type_)
    cls = origin if origin is not None else type_

    # ---------- ---------- ---------- 1. direct
    if any(type_ is direct for direct in DIRECT_TYPES):
        return DirectAssignable(type_)

    # ---------- ---------- ---------- 2. leaf
    if is_leaf_type(type_):
        return LeafParseable(type_)

    # ---------- ---------- ---------- 3. array
    if cls is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return _check_elements(args[:1], lambda: ArrayOf(args[0], tuple))

        return Unsupported("only homogeneous tuples (tuple[T, ...]) are supported")

    if cls is numpy.ndarray:
        element = _ndarray_element(type_)

        if element is None:
            return Unsupported("numpy arrays need a scalar dtype, e.g. NDArray[numpy.float64]")

        if not (isinstance(element, type) and issubclass(element, (numpy.integer, numpy.floating))):
            return Unsupported(f"unsupported numpy dtype {element!r}")

        return ArrayOf(element, numpy.ndarray)

    # ---------- ---------- ---------- 4. canned collection
    if cls in CANNED_COLLECTIONS:
        if len(args) != 1:
            return Unsupported(f"{cls.__name__} fields need an element type, e.g. {cls.__name__}[int]")

        return _check_elements(args, lambda: RecognizedCollection(cls, args[0]))

    # ---------- ---------- ---------- 5. canned dictionary
    if cls in CANNED_DICTIONARIES:
        if len(args) != 2:
            return Unsupported(f"{cls.__name__} fields need key and value types")

        return _check_elements(args, lambda: RecognizedDictionary(cls, *args))

    if isinstance(cls, type):

        # ---------- ---------- ---------- 6. generic collection
        if issubclass(cls, (MutableSequence, MutableSet)) and _is_concrete(cls):
            params = resolve_parameters(type_, (MutableSequence, MutableSet, list, set), 1)

            if params is None:
                return Unsupported(f"cannot resolve the element type of {cls.__qualname__}")

            return _check_elements(params, lambda: GenericCollection(cls, params[0]))

        # ---------- ---------- ---------- 7. generic dictionary
        if issubclass(cls, MutableMapping) and _is_concrete(cls):
            params = resolve_parameters(type_, (Mapping, dict), 2)

            if params is None:
                return Unsupported(f"cannot resolve the key and value types of {cls.__qualname__}")

            return _check_elements(params, lambda: GenericDictionary(cls, *params))

        # ---------- ---------- ---------- 8. node capability
        if pending is not None and cls in pending:
            reach = pending[cls]
        else:
            reach = node_reach(cls)

        if reach is not None:
            return SelfSerializingNode(cls, reach)

        # ---------- ---------- ---------- 9. raw node
        if cls is ConfigNode:
            return RawNode(cls)

    return Unsupported(f"{declared!r} matches no supported shape")

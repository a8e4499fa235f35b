#  -*- coding: utf-8 -*-
"""
Options consumed by the parse and write codec.

``ParseOptions`` and ``WriteOptions`` are immutable. Each exposes a shared
``DEFAULTS`` instance that generated code references whenever a field does not
override any option.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, Flag


DEFAULT_VALUE_SEPARATOR: str = ' '
DEFAULT_COLLECTION_SEPARATOR: str = ','
DEFAULT_KEY_VALUE_SEPARATOR: str = ':'
DEFAULT_KEY_NAME: str = 'key'


# ========== ========== ========== ========== ========== ==========
class EnumHandling(Enum):
    """How enumeration values are written and read."""

    STRING = 0
    CASE_INSENSITIVE_STRING = 1
    FLAGS = 2
    CASE_INSENSITIVE_FLAGS = 3
    INTEGER = 4
    HEXADECIMAL = 5


class ExtendedSplitOptions(Flag):
    """Post-processing applied to the pieces of a split value."""

    NONE = 0
    REMOVE_EMPTY_ENTRIES = 1
    TRIM_ENTRIES = 2
    TRIM_AND_REMOVE_EMPTY_ENTRIES = 3


class CollectionHandling(Enum):
    """
    Where the elements of a collection field live in the document.

    SINGLE_VALUE
        One value, elements joined by the collection separator.
    MULTIPLE_VALUES
        One value per element, all sharing the field's name.
    NODE_OF_KEYS
        A nested node named after the field, holding one value per element
        under the field's ``key_name``.
    """

    SINGLE_VALUE = 0
    MULTIPLE_VALUES = 1
    NODE_OF_KEYS = 2


# ========== ========== ========== ========== ========== ==========
@dataclass(frozen=True)
class ParseOptions:
    """
    Options of a parse call.

    Parameters
    ----------
    enum_handling : EnumHandling, default EnumHandling.STRING
    split_options : ExtendedSplitOptions, default TRIM_AND_REMOVE_EMPTY_ENTRIES
    value_separator : str or None
        Separator of the components of a multi-component value (vectors,
        colors...). ``None`` means ``DEFAULT_VALUE_SEPARATOR``.
    collection_separator : str or None
        Separator of collection elements. ``None`` means
        ``DEFAULT_COLLECTION_SEPARATOR``.
    key_value_separator : str or None
        Separator between a key and its value. ``None`` means
        ``DEFAULT_KEY_VALUE_SEPARATOR``.
    """

    enum_handling: EnumHandling = EnumHandling.STRING
    split_options: ExtendedSplitOptions = ExtendedSplitOptions.TRIM_AND_REMOVE_EMPTY_ENTRIES
    value_separator: str | None = None
    collection_separator: str | None = None
    key_value_separator: str | None = None

    DEFAULTS = None  # replaced below

    @property
    def value_sep(self) -> str:
        return self.value_separator or DEFAULT_VALUE_SEPARATOR

    @property
    def collection_sep(self) -> str:
        return self.collection_separator or DEFAULT_COLLECTION_SEPARATOR

    @property
    def key_value_sep(self) -> str:
        return self.key_value_separator or DEFAULT_KEY_VALUE_SEPARATOR


@dataclass(frozen=True)
class WriteOptions:
    """
    Options of a write call.

    Parameters
    ----------
    enum_handling : EnumHandling, default EnumHandling.STRING
    format : str or None
        Format spec handed to ``format()`` for numeric and temporal values.
    value_separator, collection_separator, key_value_separator : str or None
        Same meaning as in ``ParseOptions``.
    """

    enum_handling: EnumHandling = EnumHandling.STRING
    format: str | None = None
    value_separator: str | None = None
    collection_separator: str | None = None
    key_value_separator: str | None = None

    DEFAULTS = None  # replaced below

    @property
    def value_sep(self) -> str:
        return self.value_separator or DEFAULT_VALUE_SEPARATOR

    @property
    def collection_sep(self) -> str:
        return self.collection_separator or DEFAULT_COLLECTION_SEPARATOR

    @property
    def key_value_sep(self) -> str:
        return self.key_value_separator or DEFAULT_KEY_VALUE_SEPARATOR


# Class attributes without annotations are not dataclass fields
ParseOptions.DEFAULTS = ParseOptions()
WriteOptions.DEFAULTS = WriteOptions()


__all__ = [
    "CollectionHandling",
    "EnumHandling",
    "ExtendedSplitOptions",
    "ParseOptions",
    "WriteOptions",
]

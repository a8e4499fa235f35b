#  -*- coding: utf-8 -*-
"""
Synthesis of the options expressions passed to the codec by emitted code.

A field whose options are all at their defaults gets a reference to the shared
``DEFAULTS`` instance. Otherwise a constructor call naming only the non-default
options is built, always in the same keyword order, so the emitted text is
stable across runs.
"""

from __future__ import annotations

from ..options import EnumHandling, ExtendedSplitOptions
from .metadata import FieldMetadata


OPTIONS_MODULE: str = 'cfgloader.options'

_PARSE_OPTIONS = f"{OPTIONS_MODULE}.ParseOptions"
_WRITE_OPTIONS = f"{OPTIONS_MODULE}.WriteOptions"


def _enum_handling(field: FieldMetadata) -> list[str]:
    if field.enum_handling is EnumHandling.STRING:
        return []

    return [f"enum_handling={OPTIONS_MODULE}.EnumHandling.{field.enum_handling.name}"]


def _separators(field: FieldMetadata) -> list[str]:
    arguments = []

    for keyword in ('value_separator', 'collection_separator', 'key_value_separator'):
        separator = getattr(field, keyword)

        if separator is not None:
            arguments.append(f"{keyword}={separator!r}")

    return arguments


def build_parse_options(field: FieldMetadata) -> str:
    """
    Expression of the ``ParseOptions`` of ``field``.

    Keyword order: enum handling, split options, value separator, collection
    separator, key/value separator.

    Examples
    --------
    >>> from cfgloader.generator.metadata import FieldMetadata
    >>> build_parse_options(FieldMetadata('count', object, int, 'count'))
    'cfgloader.options.ParseOptions.DEFAULTS'
    """
    arguments = _enum_handling(field)

    if field.split_options != ExtendedSplitOptions.TRIM_AND_REMOVE_EMPTY_ENTRIES:
        arguments.append(f"split_options={OPTIONS_MODULE}.ExtendedSplitOptions.{field.split_options.name}")

    arguments += _separators(field)

    if not arguments:
        return f"{_PARSE_OPTIONS}.DEFAULTS"

    return f"{_PARSE_OPTIONS}({', '.join(arguments)})"


def build_write_options(field: FieldMetadata) -> str:
    """
    Expression of the ``WriteOptions`` of ``field``.

    Keyword order: enum handling, format, value separator, collection
    separator, key/value separator.
    """
    arguments = _enum_handling(field)

    if field.format is not None:
        arguments.append(f"format={field.format!r}")

    arguments += _separators(field)

    if not arguments:
        return f"{_WRITE_OPTIONS}.DEFAULTS"

    return f"{_WRITE_OPTIONS}({', '.join(arguments)})"

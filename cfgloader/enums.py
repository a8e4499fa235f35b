#  -*- coding: utf-8 -*-
"""
Enumeration parsing and formatting for every ``EnumHandling`` mode.
"""

from __future__ import annotations

import re

from enum import Enum, Flag
from functools import lru_cache
from typing import Type, TypeVar

from .options import EnumHandling


E = TypeVar('E', bound=Enum)

_FLAG_SPLIT = re.compile(r'[,|]')
_INTEGER = re.compile(r'^[+-]?\d+$')
_HEXADECIMAL = re.compile(r'^[+-]?(0[xX])?[0-9a-fA-F]+$')


# ========== ========== ========== ========== ========== ========== lookups
@lru_cache(maxsize=None)
def _names(enum_type: Type[Enum]) -> dict[str, Enum]:
    return dict(enum_type.__members__)


@lru_cache(maxsize=None)
def _folded_names(enum_type: Type[Enum]) -> dict[str, Enum]:
    folded = {}

    for name, member in enum_type.__members__.items():
        folded.setdefault(name.casefold(), member)

    return folded


def _from_integer(enum_type: Type[E], number: int) -> E | None:
    try:
        return enum_type(number)
    except ValueError:
        return None


def _parse_single(text: str, enum_type: Type[E], ignore_case: bool, hexadecimal: bool = False) -> E | None:

    if ignore_case:
        member = _folded_names(enum_type).get(text.casefold())
    else:
        member = _names(enum_type).get(text)

    if member is not None:
        return member

    if hexadecimal and _HEXADECIMAL.match(text):
        return _from_integer(enum_type, int(text, 16))

    if _INTEGER.match(text):
        return _from_integer(enum_type, int(text))

    return None


def _parse_names(text: str, enum_type: Type[E], ignore_case: bool) -> E | None:
    # flag combinations are written as 'A|B' in the string modes
    names = _folded_names(enum_type) if ignore_case else _names(enum_type)
    key = text.casefold() if ignore_case else text

    if key in names:
        return names[key]

    if not issubclass(enum_type, Flag) or '|' not in key:
        return None

    parsed = None

    for part in key.split('|'):
        member = names.get(part.strip())

        if member is None:
            return None

        parsed = member if parsed is None else parsed | member

    return parsed


# ========== ========== ========== ========== ========== ========== public
def try_parse_enum(text: str | None,
                   enum_type: Type[E],
                   handling: EnumHandling = EnumHandling.STRING) -> tuple[bool, E | None]:
    """
    Parse ``text`` as a member of ``enum_type``.

    Parameters
    ----------
    text : str or None
        Text to parse. Surrounding whitespace is ignored.
    enum_type : type
        Target enumeration.
    handling : EnumHandling
        ``STRING`` and ``CASE_INSENSITIVE_STRING`` accept member names, joined
        with ``|`` for flag combinations.
        ``FLAGS`` and ``CASE_INSENSITIVE_FLAGS`` accept names or integers,
        combined with ``,`` or ``|`` when ``enum_type`` is a ``Flag``.
        ``INTEGER`` and ``HEXADECIMAL`` accept a number (decimal or hex) and
        fall back to a member name.

    Returns
    -------
    tuple[bool, Enum or None]
        ``(True, member)`` on success, ``(False, None)`` otherwise.
    """
    if not text or not text.strip():
        return False, None

    text = text.strip()

    parsed: Enum | None

    if handling in (EnumHandling.STRING, EnumHandling.CASE_INSENSITIVE_STRING):
        parsed = _parse_names(text, enum_type, handling is EnumHandling.CASE_INSENSITIVE_STRING)

    elif handling in (EnumHandling.FLAGS, EnumHandling.CASE_INSENSITIVE_FLAGS):
        ignore_case = handling is EnumHandling.CASE_INSENSITIVE_FLAGS
        parts = [part.strip() for part in _FLAG_SPLIT.split(text)]

        if len(parts) > 1 and not issubclass(enum_type, Flag):
            return False, None

        parsed = None

        for part in parts:
            member = _parse_single(part, enum_type, ignore_case)

            if member is None:
                return False, None

            parsed = member if parsed is None else parsed | member

    elif handling is EnumHandling.INTEGER:
        parsed = _parse_single(text, enum_type, ignore_case=False)

    elif handling is EnumHandling.HEXADECIMAL:
        parsed = _parse_single(text, enum_type, ignore_case=False, hexadecimal=True)

    else:
        raise ValueError(f"Unknown enum handling {handling!r}")

    if parsed is None:
        return False, None

    return True, parsed


def format_enum(value: Enum, handling: EnumHandling = EnumHandling.STRING) -> str:
    """
    Write ``value`` according to ``handling``.

    Names are used for the string modes, where unnamed flag combinations are
    written as ``"A|B"``. The flag modes write combinations as ``"A, B"``.
    The numeric modes need an integer member value and fall back to the
    member name otherwise; negative values keep their sign.
    """
    if handling in (EnumHandling.FLAGS, EnumHandling.CASE_INSENSITIVE_FLAGS) and isinstance(value, Flag):

        members = [member.name for member in value]

        if members:
            return ', '.join(members)

        return value.name or str(int(value.value))

    if handling in (EnumHandling.INTEGER, EnumHandling.HEXADECIMAL) and isinstance(value.value, int):

        if handling is EnumHandling.INTEGER:
            return str(value.value)

        return f"{value.value:08X}"

    if isinstance(value, Flag) and value.name not in type(value).__members__:
        return '|'.join(member.name for member in value)

    return value.name or ''

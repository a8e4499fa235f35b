#  -*- coding: utf-8 -*-
"""
Error taxonomy of cfgloader.

Generation-time errors are raised while a ``ConfigObject`` class is being
created (or while a batch of classes is regenerated). Runtime errors are raised
by the emitted ``load`` code and by the document parser.

Hierarchy
---------
- ``CfgLoaderError``
    - ``ConfigGenerationError`` (aggregate, one per generated unit)
    - ``FieldGenerationError`` (one per offending field)
        - ``UnsupportedFieldType``
        - ``DuplicateConfigName``
    - ``MissingRequiredConfigFieldError`` (runtime aggregate)
    - ``ConfigParseError`` (malformed document text)
    - ``SettingsError`` (invalid ``[tool.cfgloader]`` table)
- ``GenerationCancelled`` (cooperative abort, deliberately not a CfgLoaderError)
"""

from __future__ import annotations

from typing import Any, Iterable


# ========== ========== ========== ========== ========== ==========
def get_full_qualified_name(cls: type) -> str:
    """
    Return ``"<module>.<qualname>"`` for a class.

    For built-in types (module is ``builtins``), returns ``cls.__qualname__``.

    Parameters
    ----------
    cls : type
        The class to identify.

    Returns
    -------
    str
        Fully qualified name.
    """
    module = getattr(cls, '__module__', None)
    qualname = getattr(cls, '__qualname__', None) or repr(cls)

    if module is None or module == 'builtins':
        return qualname

    return f"{module}.{qualname}"


def check_types(obj: Any,
                types: type | tuple[type, ...],
                can_be_none: bool = False,
                raise_error: bool = True) -> bool:
    """
    Check whether an object is an instance of expected types.

    Parameters
    ----------
    obj : object
        Value to test.
    types : type or tuple of type
        Expected type(s).
    can_be_none : bool, default False
        If True, ``None`` is accepted as valid.
    raise_error : bool, default True
        If True, raises TypeError when the check fails.

    Returns
    -------
    bool
        True if obj is an instance of one of the expected types.

    Raises
    ------
    TypeError
        If ``raise_error`` is True and the check fails.

    Examples
    --------
    >>> check_types(1, int)
    True
    >>> check_types(None, int, can_be_none=True)
    True
    >>> check_types("x", int, raise_error=False)
    False
    """
    if can_be_none:
        if isinstance(types, tuple):
            types = (*types, None.__class__)
        else:
            types = (types, None.__class__)

    result = isinstance(obj, types)

    if not result and raise_error:

        if isinstance(types, tuple):
            cls_names = ', '.join(get_full_qualified_name(cls) for cls in types)
        else:
            cls_names = get_full_qualified_name(types)

        error_msg = f"Expected instance of one of the following classes: {cls_names}. " \
                    f"Given {get_full_qualified_name(type(obj))} instead"
        raise TypeError(error_msg)

    return result


# ========== ========== ========== ========== ========== ==========
class CfgLoaderError(Exception):
    """Root of every error raised by cfgloader."""


class FieldGenerationError(CfgLoaderError):
    """
    A single field could not be generated.

    Parameters
    ----------
    field : str
        Attribute name of the offending field.
    reason : str
        Human readable explanation.
    """

    def __init__(self, field: str, reason: str) -> None:
        self.field: str = field
        self.reason: str = reason
        super().__init__(f"field '{field}': {reason}")


class UnsupportedFieldType(FieldGenerationError):
    """The declared type of a field matches no supported shape."""


class DuplicateConfigName(FieldGenerationError):
    """Two fields of the same type share one serialized name."""


class ConfigGenerationError(CfgLoaderError):
    """
    Generation of one unit failed.

    Raised once per generated type, after every field has been visited, so the
    whole list of problems is available at once through ``errors``. No partial
    output is ever published alongside this error.
    """

    def __init__(self, qualified_name: str, errors: Iterable[FieldGenerationError]) -> None:
        self.qualified_name: str = qualified_name
        self.errors: list[FieldGenerationError] = list(errors)

        lines = '\n'.join(f"  - {error}" for error in self.errors)
        super().__init__(f"could not generate config methods for {qualified_name}:\n{lines}")


class MissingRequiredConfigFieldError(CfgLoaderError):
    """
    One or more required fields were not populated by a load.

    Parameters
    ----------
    owner : type
        The type whose load method raised.
    names : iterable of str
        Serialized names of every missing field, in declaration order.
    """

    def __init__(self, owner: type, names: Iterable[str]) -> None:
        self.owner: type = owner
        self.names: tuple[str, ...] = tuple(names)

        missing = ', '.join(self.names)
        super().__init__(f"{get_full_qualified_name(owner)} is missing required config fields: {missing}")


class ConfigParseError(CfgLoaderError):
    """The text of a config document is malformed."""

    def __init__(self, message: str, line: int | None = None) -> None:
        self.line: int | None = line

        if line is not None:
            message = f"line {line}: {message}"

        super().__init__(message)


class SettingsError(CfgLoaderError):
    """Invalid generator settings."""


class GenerationCancelled(Exception):
    """Generation was cancelled cooperatively. Not an error."""


__all__ = [
    "CfgLoaderError",
    "ConfigGenerationError",
    "ConfigParseError",
    "DuplicateConfigName",
    "FieldGenerationError",
    "GenerationCancelled",
    "MissingRequiredConfigFieldError",
    "SettingsError",
    "UnsupportedFieldType",
]

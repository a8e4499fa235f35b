#  -*- coding: utf-8 -*-
"""
Config objects: classes whose load/save methods are generated at definition.

Subclassing ``ConfigObject`` runs a generation pass inside the class
statement. The type-level options are class keywords::

    class Part(ConfigObject, load_access=AccessModifier.PUBLIC,
               implementation=InterfaceImplementation.PUBLIC):

        mass: float = ConfigField(required=True)
        label: str = ConfigField(name='Label')

Omitted keywords are inherited from the closest config object base, or take
their defaults (``load_from_config`` / ``save_to_config``, private, explicit
interface). A class whose fields cannot be generated is not created:
``ConfigGenerationError`` is raised by the class statement.
"""

from __future__ import annotations

import numpy

from abc import ABCMeta
from copy import deepcopy
from pathlib import Path
from typing import Any, Self, Type

from .fields import ConfigField
from .generator.assembler import EmittedUnit, attach_unit, generate_source
from .generator.metadata import AccessModifier, InterfaceImplementation, ObjectMetadata, collect_fields
from .node import ConfigNode


_CLASS_KEYWORDS = ('load_method_name', 'load_access', 'save_method_name', 'save_access', 'implementation')


def _equal(first: Any, second: Any) -> bool:
    if isinstance(first, numpy.ndarray) or isinstance(second, numpy.ndarray):
        return numpy.array_equal(first, second)

    return bool(first == second)


class ConfigObjectMetatype(ABCMeta):
    """Metaclass running the generation pass of every ``ConfigObject`` subclass."""

    # ========== ========== ========== ========== ========== special methods
    def __new__(mcs,
                name: str,
                bases: tuple[type, ...],
                namespace: dict[str, Any],
                *,
                load_method_name: str | None = None,
                load_access: AccessModifier | None = None,
                save_method_name: str | None = None,
                save_access: AccessModifier | None = None,
                implementation: InterfaceImplementation | None = None,
                **kwargs: Any) -> Type[ConfigObject]:

        cls = super().__new__(mcs, name, bases, namespace, **kwargs)

        # ---------- ---------- ---------- ---------- ---------- ----------
        if not any(isinstance(base, ConfigObjectMetatype) for base in bases):
            # ConfigObject itself
            return cls

        given = dict(load_method_name=load_method_name, load_access=load_access,
                     save_method_name=save_method_name, save_access=save_access,
                     implementation=implementation)

        inherited: ObjectMetadata | None = getattr(cls, '__config_metadata__', None)
        options = {}

        for keyword in _CLASS_KEYWORDS:
            if given[keyword] is not None:
                options[keyword] = given[keyword]

            elif inherited is not None:
                options[keyword] = getattr(inherited, keyword)

        object_meta = ObjectMetadata.build(cls, **options)
        unit = generate_source(cls, object_meta)

        attach_unit(cls, unit)

        cls.__config_metadata__ = object_meta
        cls.__config_unit__ = unit

        # ---------- ---------- ---------- ---------- ---------- ----------
        return cls

    def __init__(cls, name: str, bases: tuple[type, ...], namespace: dict[str, Any], **kwargs: Any) -> None:
        # class keywords are consumed by __new__
        super().__init__(name, bases, namespace)

    # ========== ========== ========== ========== ========== properties
    @property
    def config_fields(cls) -> dict[str, ConfigField]:
        """Config fields of the class, base class fields first."""
        return collect_fields(cls)

    @property
    def config_unit(cls) -> EmittedUnit | None:
        """The unit generated for the class (``None`` for ``ConfigObject``)."""
        return cls.__dict__.get('__config_unit__')


class ConfigObject(metaclass=ConfigObjectMetatype):
    """
    Base class of config objects.

    Parameters
    ----------
    *args
        Nothing, or one instance of the same type to copy.
    **kwargs
        Initial field values, by attribute name.

    Examples
    --------
    >>> class Settings(ConfigObject):
    ...     volume: int = ConfigField(default=5)
    >>> Settings.from_config(ConfigNode.parse('volume = 7')).volume
    7
    """

    __config_metadata__: ObjectMetadata | None = None
    __config_unit__: EmittedUnit | None = None

    # ========== ========== ========== ========== ========== special methods
    def __init__(self, *args: Any, **kwargs: Any) -> None:

        if len(args) > 1 or (args and kwargs):
            raise ValueError("Given args do not match any available signature for initializing a ConfigObject")

        if args:
            if not isinstance(args[0], type(self)):
                raise TypeError(f"Cannot copy a {type(args[0]).__name__} into a {type(self).__name__}")

            # field by field: no codec round trip, no required-field check
            for key in type(self).config_fields:
                setattr(self, key, deepcopy(getattr(args[0], key)))

            return

        fields = type(self).config_fields

        for key, value in kwargs.items():
            if key not in fields:
                raise AttributeError(f"{type(self).__name__} has no config field '{key}'")

            setattr(self, key, value)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented

        return all(_equal(getattr(self, key), getattr(other, key)) for key in type(self).config_fields)

    def __repr__(self) -> str:
        values = ', '.join(f"{key}={getattr(self, key)!r}" for key in type(self).config_fields)
        return f"{type(self).__name__}({values})"

    def __copy__(self) -> Self:
        return type(self)(self)

    # ========== ========== ========== ========== ========== public methods
    def load_config(self, node: ConfigNode) -> None:
        """Load the fields from ``node`` through the generated load method."""
        object_meta = type(self).__config_metadata__
        getattr(self, object_meta.load_attribute)(node)

    def save_config(self, node: ConfigNode) -> None:
        """Save the fields into ``node`` through the generated save method."""
        object_meta = type(self).__config_metadata__
        getattr(self, object_meta.save_attribute)(node)

    @classmethod
    def from_config(cls, node: ConfigNode) -> Self:
        """Create an instance and load it from ``node``."""
        obj = cls()
        obj.load_config(node)
        return obj

    def to_config(self, name: str = '') -> ConfigNode:
        """Save into a new node named ``name``."""
        node = ConfigNode(name)
        self.save_config(node)
        return node

    @classmethod
    def from_file(cls, path: Path | str) -> Self:
        """Load an instance from a config document file."""
        return cls.from_config(ConfigNode.from_file(path))

    def to_file(self, path: Path | str) -> None:
        """Save into a config document file."""
        self.to_config().to_file(path)

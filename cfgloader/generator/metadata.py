#  -*- coding: utf-8 -*-
"""
Canonical records describing a config object and its fields.

``ObjectMetadata`` normalizes the class keywords of a ``ConfigObject``;
``FieldMetadata`` normalizes one ``ConfigField`` together with its resolved
annotation. Both are immutable once built and are the only inputs the emitters
read.
"""

from __future__ import annotations

import inspect
import keyword
import sys

from dataclasses import dataclass
from enum import Enum
from typing import Any, Self

from ..errors import UnsupportedFieldType, check_types
from ..fields import ConfigField
from ..node import NodeReach
from ..options import (CollectionHandling, DEFAULT_KEY_NAME, EnumHandling, ExtendedSplitOptions)
from .classifier import unwrap_optional


DEFAULT_LOAD_NAME: str = 'load_from_config'
DEFAULT_SAVE_NAME: str = 'save_to_config'

PUBLIC_LOAD_NAME: str = 'load'
PUBLIC_SAVE_NAME: str = 'save'


# ========== ========== ========== ========== ========== ==========
class AccessModifier(Enum):
    """
    Visibility of a generated method.

    ``PUBLIC`` keeps the name, ``INTERNAL`` and ``PROTECTED`` add one leading
    underscore and ``PRIVATE`` adds two, so the method is name-mangled exactly
    as if it had been written in the class body.
    """

    PRIVATE = 'private'
    PROTECTED = 'protected'
    INTERNAL = 'internal'
    PUBLIC = 'public'


class InterfaceImplementation(Enum):
    """
    How a config object exposes the node capability.

    NONE
        Only the two generated methods; the type is not a node.
    EXPLICIT
        Adds ``__config_load__`` / ``__config_save__`` delegating to them.
    PUBLIC
        Adds public ``load`` / ``save`` delegating to them.
    USE_GENERATED
        The generated methods themselves are the public ``load`` / ``save``.
    """

    NONE = 'none'
    EXPLICIT = 'explicit'
    PUBLIC = 'public'
    USE_GENERATED = 'use_generated'


def declared_name(name: str, access: AccessModifier) -> str:
    """Name of a method as written in the class body for ``access``."""
    if access is AccessModifier.PUBLIC:
        return name

    if access is AccessModifier.PRIVATE:
        return f"__{name}"

    return f"_{name}"


def mangle(class_name: str, name: str) -> str:
    """Apply Python's private name mangling to ``name`` inside ``class_name``."""
    if name.startswith('__') and not name.endswith('__'):
        stripped = class_name.lstrip('_')

        if stripped:
            return f"_{stripped}{name}"

    return name


def _check_method_name(name: str) -> None:
    check_types(name, str)

    if not name.isidentifier() or keyword.iskeyword(name):
        raise ValueError(f"{name!r} is not a valid method name")


# ========== ========== ========== ========== ========== ==========
@dataclass(frozen=True)
class ObjectMetadata:
    """
    Type-level configuration of one generated unit.

    Attributes
    ----------
    owner : type
        The config object class.
    load_method_name, save_method_name : str
        Undecorated method names.
    load_access, save_access : AccessModifier
        Method visibilities.
    implementation : InterfaceImplementation
        How the node capability is exposed.
    """

    owner: type
    load_method_name: str = DEFAULT_LOAD_NAME
    load_access: AccessModifier = AccessModifier.PRIVATE
    save_method_name: str = DEFAULT_SAVE_NAME
    save_access: AccessModifier = AccessModifier.PRIVATE
    implementation: InterfaceImplementation = InterfaceImplementation.EXPLICIT

    @classmethod
    def build(cls,
              owner: type,
              load_method_name: str = DEFAULT_LOAD_NAME,
              load_access: AccessModifier = AccessModifier.PRIVATE,
              save_method_name: str = DEFAULT_SAVE_NAME,
              save_access: AccessModifier = AccessModifier.PRIVATE,
              implementation: InterfaceImplementation = InterfaceImplementation.EXPLICIT) -> Self:
        """
        Validate and normalize the class keywords of a config object.

        ``USE_GENERATED`` forces public ``load`` / ``save``. ``PUBLIC`` resets a
        method name that would collide with its public delegate.

        Raises
        ------
        TypeError
            If an argument has the wrong type.
        ValueError
            If a method name is not a valid identifier.
        """
        check_types(owner, type)
        check_types(load_access, AccessModifier)
        check_types(save_access, AccessModifier)
        check_types(implementation, InterfaceImplementation)
        _check_method_name(load_method_name)
        _check_method_name(save_method_name)

        if implementation is InterfaceImplementation.USE_GENERATED:
            load_method_name, load_access = PUBLIC_LOAD_NAME, AccessModifier.PUBLIC
            save_method_name, save_access = PUBLIC_SAVE_NAME, AccessModifier.PUBLIC

        elif implementation is InterfaceImplementation.PUBLIC:
            if load_method_name == PUBLIC_LOAD_NAME:
                load_method_name = DEFAULT_LOAD_NAME

            if save_method_name == PUBLIC_SAVE_NAME:
                save_method_name = DEFAULT_SAVE_NAME

        return cls(owner, load_method_name, load_access, save_method_name, save_access, implementation)

    # ---------- ---------- ---------- ---------- ---------- properties
    @property
    def class_name(self) -> str:
        return self.owner.__name__

    @property
    def qualified_name(self) -> str:
        return f"{self.owner.__module__}.{self.owner.__qualname__}"

    @property
    def load_declared_name(self) -> str:
        return declared_name(self.load_method_name, self.load_access)

    @property
    def save_declared_name(self) -> str:
        return declared_name(self.save_method_name, self.save_access)

    @property
    def load_attribute(self) -> str:
        """Attribute name under which the load method ends up on the class."""
        return mangle(self.class_name, self.load_declared_name)

    @property
    def save_attribute(self) -> str:
        return mangle(self.class_name, self.save_declared_name)

    @property
    def reach(self) -> NodeReach | None:
        """How other generated code reaches this type's load/save, if at all."""
        if self.implementation is InterfaceImplementation.NONE:
            return None

        if self.implementation is InterfaceImplementation.EXPLICIT:
            return NodeReach.EXPLICIT

        return NodeReach.DIRECT


# ========== ========== ========== ========== ========== ==========
@dataclass(frozen=True)
class FieldMetadata:
    """
    One config field, ready for emission.

    Attributes
    ----------
    attribute : str
        Member name on the class.
    owner : type
        Class that declared the field.
    declared_type : Any
        Resolved annotation, ``Optional`` unwrapped.
    optional : bool
        Whether the annotation was ``Optional[...]``.
    name : str
        Serialized name, never empty.
    required : bool
    enum_handling : EnumHandling
    split_options : ExtendedSplitOptions
    value_separator, collection_separator, key_value_separator : str or None
    format : str or None
    collection_handling : CollectionHandling
    key_name : str
    """

    attribute: str
    owner: type
    declared_type: Any
    name: str
    optional: bool = False
    required: bool = False
    enum_handling: EnumHandling = EnumHandling.STRING
    split_options: ExtendedSplitOptions = ExtendedSplitOptions.TRIM_AND_REMOVE_EMPTY_ENTRIES
    value_separator: str | None = None
    collection_separator: str | None = None
    key_value_separator: str | None = None
    format: str | None = None
    collection_handling: CollectionHandling = CollectionHandling.SINGLE_VALUE
    key_name: str = DEFAULT_KEY_NAME

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError(f"serialized name of field '{self.attribute}' is empty")

    @classmethod
    def from_field(cls, field: ConfigField, declared_type: Any) -> Self:
        """Build the record of ``field`` whose annotation resolved to ``declared_type``."""
        type_, optional = unwrap_optional(declared_type)

        return cls(
            attribute=field.name,
            owner=field.owner,
            declared_type=type_,
            name=field.config_name,
            optional=optional,
            required=field.required,
            enum_handling=field.enum_handling,
            split_options=field.split_options,
            value_separator=field.value_separator,
            collection_separator=field.collection_separator,
            key_value_separator=field.key_value_separator,
            format=field.format,
            collection_handling=field.collection_handling,
            key_name=field.key_name,
        )

    @property
    def temp_name(self) -> str:
        """Name of the temporary variable holding a parsed value."""
        return f"_{self.attribute}"


# ========== ========== ========== ========== ========== ==========
def collect_fields(cls: type) -> dict[str, ConfigField]:
    """
    Collect the ``ConfigField`` descriptors of ``cls`` across its MRO.

    Base class fields come first; within one class, declaration order is kept.
    A field redefined in a subclass keeps the position of its first
    declaration.
    """
    fields: dict[str, ConfigField] = {}

    for base in reversed(cls.__mro__):

        if base is object:
            continue

        for attr_name, attr_value in base.__dict__.items():

            if isinstance(attr_value, ConfigField):
                fields[attr_name] = attr_value

    return fields


def resolve_annotation(field: ConfigField, localns: dict[str, Any] | None = None) -> Any:
    """
    Resolve the annotation of ``field`` on the class that declared it.

    String annotations are evaluated in the declaring module's namespace
    extended with ``localns``.

    Raises
    ------
    UnsupportedFieldType
        If the field has no annotation or it cannot be evaluated.
    """
    annotations = inspect.get_annotations(field.owner)

    if field.name not in annotations:
        raise UnsupportedFieldType(field.name, "config fields need a type annotation")

    annotation = annotations[field.name]

    if isinstance(annotation, str):
        module = sys.modules.get(field.owner.__module__)
        globalns = dict(vars(module)) if module is not None else {}

        try:
            annotation = eval(annotation, globalns, dict(localns or {}))
        except (NameError, AttributeError, SyntaxError, TypeError) as error:
            raise UnsupportedFieldType(field.name, f"cannot resolve annotation {annotation!r}: {error}") from error

    return annotation

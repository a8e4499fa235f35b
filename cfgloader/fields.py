#  -*- coding: utf-8 -*-
"""
The ``ConfigField`` descriptor.

A ``ConfigField`` marks a class attribute as persisted to config documents and
carries the per-field options the generator reads: serialized name, required
flag, enum handling, split behaviour, separators, write format and collection
handling. At runtime it behaves like a property with a default.
"""

from __future__ import annotations

from typing import TypeVar, Callable, Any, TypeAlias, Self

from .errors import check_types
from .options import CollectionHandling, DEFAULT_KEY_NAME, EnumHandling, ExtendedSplitOptions


T = TypeVar('T')
"""Represent the type of the field"""

Getter: TypeAlias = Callable[[object], T]
Setter: TypeAlias = Callable[[object, Any], None]
Deleter: TypeAlias = Callable[[object], None]
Parser: TypeAlias = Callable[[object, Any], T]


class ConfigField:
    """
    Descriptor declaring a config field.

    Parameters
    ----------
    fget, fset, fdel : callable, optional
        Custom accessors, as for ``property``. By default the value is stored
        on the instance under a private attribute.
    default : Any or callable, optional
        Value returned while the field is unset (or set to ``None``). A
        callable is called with the instance, which lets mutable defaults be
        created per instance.
    parser : callable, optional
        ``parser(instance, value) -> value`` applied on every assignment,
        including the ones performed by generated load code.
    name : str, optional
        Serialized name. Defaults to the attribute name.
    required : bool, default False
        Whether a load must populate the field.
    enum_handling : EnumHandling, default EnumHandling.STRING
    split_options : ExtendedSplitOptions, default TRIM_AND_REMOVE_EMPTY_ENTRIES
    value_separator, collection_separator, key_value_separator : str, optional
        Single character separators overriding the codec defaults.
    format : str, optional
        Format spec used when writing numbers and temporal values.
    collection_handling : CollectionHandling, default SINGLE_VALUE
        Where the elements of a collection field are stored.
    key_name : str, default 'key'
        Value name used by ``CollectionHandling.NODE_OF_KEYS``.
    doc : str, optional
        Docstring. Defaults to the getter's docstring.

    Examples
    --------
    >>> class Part:
    ...     mass: float = ConfigField(default=1.0, required=True)
    >>> part = Part()
    >>> part.mass
    1.0
    >>> Part.mass.config_name
    'mass'
    """

    # ========== ========== ========== ========== ========== special methods
    def __init__(self,
                 fget: Getter | None = None,
                 fset: Setter | None = None,
                 fdel: Deleter | None = None,
                 *,
                 default: T | Getter | None = None,
                 parser: Parser | None = None,
                 name: str | None = None,
                 required: bool = False,
                 enum_handling: EnumHandling = EnumHandling.STRING,
                 split_options: ExtendedSplitOptions = ExtendedSplitOptions.TRIM_AND_REMOVE_EMPTY_ENTRIES,
                 value_separator: str | None = None,
                 collection_separator: str | None = None,
                 key_value_separator: str | None = None,
                 format: str | None = None,
                 collection_handling: CollectionHandling = CollectionHandling.SINGLE_VALUE,
                 key_name: str = DEFAULT_KEY_NAME,
                 doc: str | None = None) -> None:

        check_types(name, str, can_be_none=True)
        check_types(required, bool)
        check_types(enum_handling, EnumHandling)
        check_types(split_options, ExtendedSplitOptions)
        check_types(format, str, can_be_none=True)
        check_types(collection_handling, CollectionHandling)
        check_types(key_name, str)

        for separator in (value_separator, collection_separator, key_value_separator):
            check_types(separator, str, can_be_none=True)

            if separator is not None and len(separator) != 1:
                raise ValueError(f"separators must be a single character, got {separator!r}")

        if name is not None and not name:
            raise ValueError("the serialized name of a config field cannot be empty")

        if not key_name:
            raise ValueError("key_name cannot be empty")

        self.fget: Getter | None = fget
        self.fset: Setter | None = fset
        self.fdel: Deleter | None = fdel

        self._default: T | Getter | None = default
        self._parser: Parser | None = parser

        self._name: str | None = name
        self.required: bool = required
        self.enum_handling: EnumHandling = enum_handling
        self.split_options: ExtendedSplitOptions = split_options
        self.value_separator: str | None = value_separator
        self.collection_separator: str | None = collection_separator
        self.key_value_separator: str | None = key_value_separator
        self.format: str | None = format
        self.collection_handling: CollectionHandling = collection_handling
        self.key_name: str = key_name

        # Use getter docstring if not provided (which can also be None)
        self.__doc__: str | None = fget.__doc__ if doc is None and fget is not None else doc

    def __set_name__(self, owner: type, name: str) -> None:
        """Called when the descriptor is assigned to a class attribute."""
        self.name: str = name
        self.owner: type = owner
        self.private_name: str = f"_config_field__{name}"

        if self.fget is None:
            self.fget = lambda obj: getattr(obj, self.private_name)

        if self.fset is None:
            self.fset = lambda obj, value: setattr(obj, self.private_name, value)

    def __get__(self, instance: object | None, owner: type) -> T | Self:
        """Get the field value."""
        if instance is None:
            # Accessing from class, return descriptor for introspection
            return self

        if self.fget is None:
            raise AttributeError(f"unreadable attribute '{self.name}'")

        try:
            value = self.fget(instance)
        except AttributeError:
            value = None

        if value is None:
            value = self._default(instance) if callable(self._default) else self._default

            if value is not None and callable(self._default) and self.fset is not None:
                # cache factory defaults so mutations stick
                self.fset(instance, value)

        return value

    def __set__(self, instance: object, value: Any) -> None:
        """Set the field value."""
        if self.fset is None:
            raise AttributeError(f"can't set attribute '{self.name}'")

        if value is None:
            value = self._default(instance) if callable(self._default) else self._default

        if self._parser is not None and value is not None:
            value = self._parser(instance, value)

        self.fset(instance, value)

    def __delete__(self, instance: object) -> None:
        """Delete the field value."""
        if self.fdel is None:
            raise AttributeError(f"can't delete attribute '{self.name}'")

        self.fdel(instance)

    # ========== ========== ========== ========== ========== private methods
    def _copy(self, **overrides: Any) -> Self:
        kwargs = dict(
            fget=self.fget, fset=self.fset, fdel=self.fdel,
            default=self._default,
            parser=self._parser,
            name=self._name,
            required=self.required,
            enum_handling=self.enum_handling,
            split_options=self.split_options,
            value_separator=self.value_separator,
            collection_separator=self.collection_separator,
            key_value_separator=self.key_value_separator,
            format=self.format,
            collection_handling=self.collection_handling,
            key_name=self.key_name,
            doc=self.__doc__,
        )
        kwargs.update(overrides)

        fget, fset, fdel = kwargs.pop('fget'), kwargs.pop('fset'), kwargs.pop('fdel')

        return type(self)(fget, fset, fdel, **kwargs)

    # ========== ========== Descriptor protocol methods to work like @property
    def getter(self, fget: Getter) -> Self:
        """Set the getter function."""
        return self._copy(fget=fget, doc=self.__doc__ or fget.__doc__)

    def setter(self, fset: Setter) -> Self:
        """Set the setter function."""
        return self._copy(fset=fset)

    def deleter(self, fdel: Deleter) -> Self:
        """Set the deleter function."""
        return self._copy(fdel=fdel)

    # ---------- ---------- and more!!
    def default(self, func: Getter) -> Self:
        """Set the default factory."""
        return self._copy(default=func)

    def parser(self, func: Parser) -> Self:
        """Set the parser function."""
        return self._copy(parser=func)

    # ========== ========== ========== ========== ========== properties
    @property
    def config_name(self) -> str:
        """Serialized name: the explicit ``name`` or the attribute name."""
        return self._name if self._name is not None else self.name


def config_field(fget: Getter | None = None, **kwargs: Any) -> ConfigField | Callable[[Getter], ConfigField]:
    """
    Decorator form of ``ConfigField``.

    Examples
    --------
    >>> class Part:
    ...     @config_field(name='Mass', required=True)
    ...     def mass(self) -> float:
    ...         return self._mass
    ...     @mass.setter
    ...     def mass(self, value: float) -> None:
    ...         self._mass = value
    """
    if fget is not None:
        return ConfigField(fget, **kwargs)

    def decorator(getter: Getter) -> ConfigField:
        return ConfigField(getter, **kwargs)

    return decorator

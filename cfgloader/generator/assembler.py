#  -*- coding: utf-8 -*-
"""
Method assembly: from field statements to a generated unit.

``assemble`` folds the load and save statements of every field, in
declaration order, into the two methods named by ``ObjectMetadata``, adds the
capability delegates, wraps them in the declaration of the host class (and of
its enclosing classes, if nested), prepends the ordered import block and
renders the text with the configured indentation and line ending.

``generate_source`` runs a whole pass for one class. ``attach_unit`` compiles a
unit and moves the methods it defines onto the host class.
"""

from __future__ import annotations

import inspect
import linecache

from pathlib import Path
from typing import Any, Iterable

from rich.console import RenderableType
from rich.syntax import Syntax
from rich.text import Text

from ..display import Displayable
from ..errors import ConfigGenerationError, DuplicateConfigName, FieldGenerationError
from ..logging import get_logger
from ..node import NodeReach
from ..settings import GeneratorSettings
from .classifier import TypeShape, classify
from .context import CancellationToken, GenerationContext
from .load import REQUIRED_SET, emit_field_load
from .metadata import (FieldMetadata, InterfaceImplementation, ObjectMetadata, PUBLIC_LOAD_NAME,
                       PUBLIC_SAVE_NAME, collect_fields, resolve_annotation)
from .save import emit_field_save
from .source import SourceBuilder, Statements, Target


logger = get_logger('generator')

ERRORS_MODULE: str = 'cfgloader.errors'

LOOP_VARIABLE: str = 'value'

_LOOPS = ((Target.VALUES, 'node.values'), (Target.NODES, 'node.nodes'))


# ========== ========== ========== ========== ========== ==========
class EmittedUnit(Displayable):
    """
    The generated source of one config object.

    Attributes
    ----------
    qualified_name : str
        ``module.QualName`` of the host class.
    file_name : str
        Deterministic file name, ``<module>.<qualname>.generated.py``.
    text : str
        The full source text.
    """

    def __init__(self, qualified_name: str, file_name: str, text: str) -> None:
        self.qualified_name: str = qualified_name
        self.file_name: str = file_name
        self.text: str = text

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EmittedUnit):
            return NotImplemented

        return (self.qualified_name, self.file_name, self.text) == (other.qualified_name, other.file_name, other.text)

    def __hash__(self) -> int:
        return hash((self.qualified_name, self.file_name, self.text))

    def __repr__(self) -> str:
        return f"EmittedUnit({self.qualified_name!r}, {self.file_name!r})"

    # ========== ========== ========== ========== ========== display
    def _title(self) -> Text:
        return Text(self.file_name, style='bold')

    def _content(self) -> RenderableType:
        return Syntax(self.text, 'python', theme=self.display_settings.syntax_theme, line_numbers=True)

    # ========== ========== ========== ========== ========== public methods
    def write(self, directory: Path | str) -> Path:
        """Write the unit into ``directory`` (created if needed) and return its path."""
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)

        path = directory / self.file_name

        # newline='' keeps the configured line ending untouched
        with path.open('w', encoding='utf-8', newline='') as file:
            file.write(self.text)

        return path


def unit_file_name(owner: type) -> str:
    """
    Examples
    --------
    >>> class Part: ...
    >>> unit_file_name(Part)
    '__main__.Part.generated.py'
    """
    qualname = owner.__qualname__.replace('<', '').replace('>', '')
    return f"{owner.__module__}.{qualname}.generated.py"


def _declaration_path(owner: type) -> list[str]:
    # classes defined in a function are wrapped in their own name only
    qualname = owner.__qualname__.rsplit('<locals>.', 1)[-1]
    return qualname.split('.')


# ========== ========== ========== ========== ========== ========== methods
def _load_method(object_meta: ObjectMetadata,
                 fields: list[FieldMetadata],
                 statements: list[Statements],
                 context: GenerationContext) -> SourceBuilder:

    source = SourceBuilder()
    required = [field.name for field in fields if field.required]

    with source.block(f"def {object_meta.load_declared_name}(self, node):"):
        with source.block("if node is None:"):
            source.line("return")

        if required:
            source.line(f"{REQUIRED_SET} = set()")

        for field_statements in statements:
            source.include(field_statements.before)

        for target, iterable in _LOOPS:
            branches = [(field, field_statements) for field, field_statements in zip(fields, statements)
                        if field_statements.target is target and field_statements.body]

            if not branches:
                continue

            source.blank()

            with source.block(f"for {LOOP_VARIABLE} in {iterable}:"):
                for index, (field, field_statements) in enumerate(branches):
                    keyword = 'if' if index == 0 else 'elif'

                    with source.block(f"{keyword} {LOOP_VARIABLE}.name == {field.name!r}:"):
                        source.include(field_statements.body)

        if any(field_statements.after for field_statements in statements):
            source.blank()

            for field_statements in statements:
                source.include(field_statements.after)

        if required:
            error = context.reference(ERRORS_MODULE, 'MissingRequiredConfigFieldError')

            source.blank()
            source.line(f"missing = [name for name in {tuple(required)!r} if name not in {REQUIRED_SET}]")

            with source.block("if missing:"):
                source.line(f"raise {error}(type(self), missing)")

    return source


def _save_method(object_meta: ObjectMetadata, statements: list[Statements]) -> SourceBuilder:
    source = SourceBuilder()

    with source.block(f"def {object_meta.save_declared_name}(self, node):"):
        bodies = [field_statements.body for target, _ in _LOOPS
                  for field_statements in statements if field_statements.target is target]

        if not any(bodies):
            source.line("pass")

        for body in bodies:
            source.include(body)

    return source


def _delegate(name: str, target: str) -> SourceBuilder:
    source = SourceBuilder()

    with source.block(f"def {name}(self, node):"):
        source.line(f"self.{target}(node)")

    return source


_DELEGATE_NAMES: dict[InterfaceImplementation, tuple[str, str]] = {
    InterfaceImplementation.EXPLICIT: ('__config_load__', '__config_save__'),
    InterfaceImplementation.PUBLIC: (PUBLIC_LOAD_NAME, PUBLIC_SAVE_NAME),
}


def _inherited_delegates(owner: type) -> set[str]:
    """Delegate names set on ``owner`` by the generated units of its bases."""
    names = set()

    for base in owner.__mro__[1:]:
        if not isinstance(base.__dict__.get('__config_metadata__'), ObjectMetadata):
            continue

        names.update(name for pair in _DELEGATE_NAMES.values() for name in pair if name in base.__dict__)

    return names


def _delegates(object_meta: ObjectMetadata) -> list[SourceBuilder]:
    # delegates inherited from generated bases are redirected to this class
    own = {object_meta.load_declared_name, object_meta.save_declared_name}
    inherited = _inherited_delegates(object_meta.owner)
    delegates = []

    for implementation, (load_name, save_name) in _DELEGATE_NAMES.items():
        if implementation is not object_meta.implementation and not inherited.intersection((load_name, save_name)):
            continue

        for name, target in ((load_name, object_meta.load_declared_name),
                             (save_name, object_meta.save_declared_name)):
            if name not in own:
                delegates.append(_delegate(name, target))

    return delegates


def _imports(context: GenerationContext) -> SourceBuilder:
    source = SourceBuilder()

    for group in (context.namespaces.standard(), context.namespaces.third_party()):
        if not group:
            continue

        source.blank()

        for module in group:
            source.line(f"import {module}")

    return source


# ========== ========== ========== ========== ========== ========== assemble
def assemble(object_meta: ObjectMetadata,
             fields: Iterable[FieldMetadata],
             context: GenerationContext) -> EmittedUnit:
    """
    Build the generated unit of one config object.

    Every field is visited even after a failure, so that all of its problems
    are reported together.

    Parameters
    ----------
    object_meta : ObjectMetadata
        Method names, visibilities and interface implementation.
    fields : iterable of FieldMetadata
        The fields, in declaration order.
    context : GenerationContext
        The pass state. Errors already reported into it (e.g. unresolvable
        annotations) also fail the unit.

    Returns
    -------
    EmittedUnit

    Raises
    ------
    ConfigGenerationError
        If any field failed.
    GenerationCancelled
        If the context's token was cancelled.
    """
    context.check_cancelled()

    emitted_fields: list[FieldMetadata] = []
    loads: list[Statements] = []
    saves: list[Statements] = []

    owners: dict[str, str] = {}

    for field in fields:
        context.check_cancelled()

        if field.name in owners:
            context.report(DuplicateConfigName(
                field.attribute, f"serialized name {field.name!r} is already used by '{owners[field.name]}'"))
            continue

        owners[field.name] = field.attribute

        shape: TypeShape = classify(field.declared_type, context.pending)
        logger.debug("%s.%s classified as %s", object_meta.class_name, field.attribute, type(shape).__name__)

        try:
            load = emit_field_load(field, shape, LOOP_VARIABLE, context)
            save = emit_field_save(field, shape, repr(field.name), f"self.{field.attribute}", context)

        except FieldGenerationError as error:
            context.report(error)
            continue

        emitted_fields.append(field)
        loads.append(load)
        saves.append(save)

    if context.errors:
        raise ConfigGenerationError(object_meta.qualified_name, context.errors)

    methods = [_load_method(object_meta, emitted_fields, loads, context), _save_method(object_meta, saves)]
    methods += _delegates(object_meta)

    source = SourceBuilder()
    source.line(context.settings.header)
    source.blank()
    source.include(_imports(context))
    source.blank()
    source.line()

    path = _declaration_path(object_meta.owner)

    for depth, name in enumerate(path):
        source.line(f"class {name}:")
        source.depth += 1

        if depth < len(path) - 1:
            source.blank()

    for method in methods:
        source.blank()
        source.include(method)

    source.depth = 0

    text = source.render(context.settings.indent, context.settings.line_ending)

    return EmittedUnit(object_meta.qualified_name, unit_file_name(object_meta.owner), text)


# ========== ========== ========== ========== ========== ========== passes
def field_metadata(cls: type, context: GenerationContext) -> list[FieldMetadata]:
    """
    Build the ``FieldMetadata`` of every config field of ``cls``.

    Fields whose annotation cannot be resolved are reported into ``context``
    and skipped.
    """
    localns: dict[str, Any] = {base.__name__: base for base in reversed(cls.__mro__)}
    fields = []

    for attribute, config_field in collect_fields(cls).items():
        context.check_cancelled()

        try:
            declared_type = resolve_annotation(config_field, localns)
        except FieldGenerationError as error:
            context.report(error)
            continue

        fields.append(FieldMetadata.from_field(config_field, declared_type))

    return fields


def generate_source(cls: type,
                    object_meta: ObjectMetadata | None = None,
                    settings: GeneratorSettings | None = None,
                    token: CancellationToken | None = None,
                    pending: dict[type, NodeReach | None] | None = None) -> EmittedUnit:
    """
    Run one generation pass for ``cls``.

    Parameters
    ----------
    cls : type
        The config object class.
    object_meta : ObjectMetadata, optional
        Defaults to the metadata the class was created with, or to the
        default metadata for plain classes.
    settings : GeneratorSettings, optional
    token : CancellationToken, optional
    pending : dict, optional
        Node reach of other classes still being generated.

    Returns
    -------
    EmittedUnit
    """
    if object_meta is None:
        object_meta = getattr(cls, '__config_metadata__', None) or ObjectMetadata.build(cls)

    context = GenerationContext(cls, settings=settings, token=token, pending=pending)
    context.pending[cls] = object_meta.reach

    logger.debug("generating %s", object_meta.qualified_name)

    fields = field_metadata(cls, context)
    unit = assemble(object_meta, fields, context)

    logger.info("generated %s (%d fields)", unit.file_name, len(fields))

    return unit


def attach_unit(cls: type, unit: EmittedUnit) -> list[str]:
    """
    Compile ``unit`` and set the methods it defines on ``cls``.

    The unit text is registered with ``linecache`` under its file name, so
    tracebacks through generated methods show their source.

    Returns
    -------
    list of str
        Names of the attributes set on ``cls``.
    """
    code = compile(unit.text, unit.file_name, 'exec')
    linecache.cache[unit.file_name] = (len(unit.text), None, unit.text.splitlines(True), unit.file_name)

    namespace: dict[str, Any] = {'__name__': cls.__module__}
    exec(code, namespace)

    path = _declaration_path(cls)
    generated = namespace[path[0]]

    for name in path[1:]:
        generated = getattr(generated, name)

    attached = []

    for name, member in vars(generated).items():
        if inspect.isfunction(member):
            member.__qualname__ = f"{cls.__qualname__}.{name}"
            setattr(cls, name, member)
            attached.append(name)

    return attached

#  -*- coding: utf-8 -*-
"""
Load statement emission.

``emit_field_load`` turns one field and its ``TypeShape`` into the statements
the generated load method runs for it. Dispatch is a ``singledispatch`` over
the closed set of shape classes, so every shape has exactly one strategy and
an unregistered shape is a programming error.

Emitted statements run inside ``for value in node.values:`` (value fields) or
``for value in node.nodes:`` (node fields), under an ``if value.name == ...``
branch written by the assembler. Required fields are recorded into the
``found_required`` set in the same branch that assigns them, and only when
the assignment happens.
"""

from __future__ import annotations

from functools import singledispatch

from ..errors import UnsupportedFieldType
from ..node import NodeReach
from ..options import CollectionHandling
from .classifier import (TypeShape, DirectAssignable, LeafParseable, ArrayOf, RecognizedCollection,
                         RecognizedDictionary, GenericCollection, GenericDictionary, SelfSerializingNode,
                         RawNode, Unsupported, COLLECTION_SHAPES)
from .context import GenerationContext
from .metadata import FieldMetadata
from .options import OPTIONS_MODULE, build_parse_options
from .source import SourceBuilder, Statements, Target


PARSING_MODULE: str = 'cfgloader.parsing'
NODE_MODULE: str = 'cfgloader.node'

REQUIRED_SET: str = 'found_required'

_CANNED_PARSERS = {
    'list': 'try_parse_list',
    'set': 'try_parse_set',
    'frozenset': 'try_parse_frozenset',
    'deque': 'try_parse_deque',
    'dict': 'try_parse_dict',
    'OrderedDict': 'try_parse_ordered_dict',
}


# ========== ========== ========== ========== ========== ========== helpers
def _parsing(context: GenerationContext, name: str) -> str:
    return context.reference(PARSING_MODULE, name)


def _options(field: FieldMetadata, context: GenerationContext) -> str:
    context.namespaces.add(OPTIONS_MODULE)
    return build_parse_options(field)


def element_parser(element: object, field: FieldMetadata, context: GenerationContext) -> str:
    """Expression of the per-element parse function of ``element``."""
    return f"{_parsing(context, 'parser_for')}({context.type_reference(element, field.attribute)})"


def _assign(source: SourceBuilder, field: FieldMetadata, expression: str) -> None:
    source.line(f"self.{field.attribute} = {expression}")

    if field.required:
        source.line(f"{REQUIRED_SET}.add({field.name!r})")


def _assign_parsed(source: SourceBuilder, field: FieldMetadata, call: str) -> None:
    source.line(f"ok, {field.temp_name} = {call}")

    with source.block('if ok:'):
        _assign(source, field, field.temp_name)


# ========== ========== ========== ========== ========== ========== parse calls
@singledispatch
def parse_call(shape: TypeShape, field: FieldMetadata, text: str, context: GenerationContext) -> str:
    """
    Expression calling the codec entry point that parses ``text`` for a
    single-value field of ``shape``.
    """
    raise UnsupportedFieldType(field.attribute, f"{type(shape).__name__} fields are not stored as values")


@parse_call.register
def _(shape: LeafParseable, field: FieldMetadata, text: str, context: GenerationContext) -> str:
    type_ = context.type_reference(shape.type_, field.attribute)
    return f"{_parsing(context, 'try_parse')}({text}, {type_}, {_options(field, context)})"


@parse_call.register
def _(shape: ArrayOf, field: FieldMetadata, text: str, context: GenerationContext) -> str:
    element = element_parser(shape.element, field, context)

    if shape.container is tuple:
        return f"{_parsing(context, 'try_parse_array')}({text}, {element}, {_options(field, context)})"

    dtype = context.type_reference(shape.element, field.attribute)
    return f"{_parsing(context, 'try_parse_ndarray')}({text}, {element}, {dtype}, {_options(field, context)})"


@parse_call.register
def _(shape: RecognizedCollection, field: FieldMetadata, text: str, context: GenerationContext) -> str:
    entry_point = _parsing(context, _CANNED_PARSERS[shape.container.__name__])
    element = element_parser(shape.element, field, context)
    return f"{entry_point}({text}, {element}, {_options(field, context)})"


@parse_call.register
def _(shape: RecognizedDictionary, field: FieldMetadata, text: str, context: GenerationContext) -> str:
    entry_point = _parsing(context, _CANNED_PARSERS[shape.container.__name__])
    key = element_parser(shape.key, field, context)
    value = element_parser(shape.value, field, context)
    return f"{entry_point}({text}, {key}, {value}, {_options(field, context)})"


@parse_call.register
def _(shape: GenericCollection, field: FieldMetadata, text: str, context: GenerationContext) -> str:
    container = context.type_reference(shape.container, field.attribute)
    element = element_parser(shape.element, field, context)
    return f"{_parsing(context, 'try_parse_collection')}({text}, {container}, {element}, {_options(field, context)})"


@parse_call.register
def _(shape: GenericDictionary, field: FieldMetadata, text: str, context: GenerationContext) -> str:
    container = context.type_reference(shape.container, field.attribute)
    key = element_parser(shape.key, field, context)
    value = element_parser(shape.value, field, context)
    return (f"{_parsing(context, 'try_parse_mapping')}"
            f"({text}, {container}, {key}, {value}, {_options(field, context)})")


# ========== ========== ========== ========== ========== ========== strategies
@singledispatch
def _emit(shape: TypeShape, field: FieldMetadata, value: str, context: GenerationContext) -> Statements:
    raise TypeError(f"no load strategy for {shape!r}")


@_emit.register
def _(shape: Unsupported, field: FieldMetadata, value: str, context: GenerationContext) -> Statements:
    raise UnsupportedFieldType(field.attribute, shape.reason)


@_emit.register
def _(shape: DirectAssignable, field: FieldMetadata, value: str, context: GenerationContext) -> Statements:
    statements = Statements(Target.VALUES)

    # an empty value does not count as present
    with statements.body.block(f"if {value}.value:"):
        _assign(statements.body, field, f"{value}.value")

    return statements


def _emit_value(shape: TypeShape, field: FieldMetadata, value: str, context: GenerationContext) -> Statements:
    if field.collection_handling is CollectionHandling.SINGLE_VALUE:
        statements = Statements(Target.VALUES)
        _assign_parsed(statements.body, field, parse_call(shape, field, f"{value}.value", context))
        return statements

    if not isinstance(shape, COLLECTION_SHAPES):
        raise UnsupportedFieldType(field.attribute,
                                   f"{field.collection_handling.name} applies to collections only")

    container = context.type_reference(shape.container, field.attribute)
    element = element_parser(shape.element, field, context)
    options = _options(field, context)

    if field.collection_handling is CollectionHandling.NODE_OF_KEYS:
        statements = Statements(Target.NODES)
        call = (f"{_parsing(context, 'try_parse_node_collection')}"
                f"({value}, {container}, {field.key_name!r}, {element}, {options})")
        _assign_parsed(statements.body, field, call)
        return statements

    # MULTIPLE_VALUES: gather the texts of every repeated value, parse once
    statements = Statements(Target.VALUES)
    texts = context.local_name(f"{field.attribute}_texts")

    statements.before.line(f"{texts} = []")
    statements.body.line(f"{texts}.append({value}.value)")
    _assign_parsed(statements.after, field,
                   f"{_parsing(context, 'try_parse_values')}({texts}, {container}, {element}, {options})")

    return statements


for _shape in (LeafParseable, ArrayOf, RecognizedCollection, RecognizedDictionary,
               GenericCollection, GenericDictionary):
    _emit.register(_shape, _emit_value)


@_emit.register
def _(shape: SelfSerializingNode, field: FieldMetadata, value: str, context: GenerationContext) -> Statements:
    statements = Statements(Target.NODES)
    body = statements.body

    body.line(f"{field.temp_name} = {context.type_reference(shape.type_, field.attribute)}()")

    if shape.reach is NodeReach.DIRECT:
        body.line(f"{field.temp_name}.load({value})")
    else:
        body.line(f"{context.reference(NODE_MODULE, 'config_load')}({field.temp_name}, {value})")

    _assign(body, field, field.temp_name)

    return statements


@_emit.register
def _(shape: RawNode, field: FieldMetadata, value: str, context: GenerationContext) -> Statements:
    statements = Statements(Target.NODES)
    _assign(statements.body, field, value)
    return statements


# ========== ========== ========== ========== ========== ========== public
def emit_field_load(field: FieldMetadata,
                    shape: TypeShape,
                    value_expr: str,
                    context: GenerationContext) -> Statements:
    """
    Emit the load statements of one field.

    Parameters
    ----------
    field : FieldMetadata
        The field.
    shape : TypeShape
        Its classification.
    value_expr : str
        Name of the loop variable holding the current ``Value`` (value
        fields) or child ``ConfigNode`` (node fields).
    context : GenerationContext
        The pass state; referenced modules are recorded into it.

    Returns
    -------
    Statements
        Loop body statements and, for repeated-value collections, the
        statements placed before and after the loops.

    Raises
    ------
    UnsupportedFieldType
        If ``shape`` is ``Unsupported`` or the field options do not apply to
        it.
    """
    context.check_cancelled()
    return _emit(shape, field, value_expr, context)


def registered_shapes() -> tuple[type, ...]:
    """Shape classes with a load strategy."""
    return tuple(cls for cls in _emit.registry if cls is not object)

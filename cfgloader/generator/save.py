#  -*- coding: utf-8 -*-
"""
Save statement emission, the mirror of ``cfgloader.generator.load``.

Value fields append ``node.add_value(name, text)``; node fields allocate a
child with ``node.add_node(name)`` and recurse into it. Nested objects and raw
nodes that are unset write nothing. Other fields are guarded by
``is not None`` only when their annotation is optional; a direct-assignable
field is never guarded, so an empty value still round-trips as an empty entry.
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
from .load import NODE_MODULE
from .metadata import FieldMetadata
from .options import OPTIONS_MODULE, build_write_options
from .source import Statements, Target


WRITING_MODULE: str = 'cfgloader.writing'


# ========== ========== ========== ========== ========== ========== helpers
def _writing(context: GenerationContext, name: str) -> str:
    return context.reference(WRITING_MODULE, name)


def _emit_guarded(statements: Statements, value: str, guard: bool, lines: list[str]) -> Statements:
    """Write ``lines`` into the body, under ``if value is not None:`` when ``guard``."""
    if guard:
        with statements.body.block(f"if {value} is not None:"):
            for line in lines:
                statements.body.line(line)
    else:
        for line in lines:
            statements.body.line(line)

    return statements


def _options(field: FieldMetadata, context: GenerationContext) -> str:
    context.namespaces.add(OPTIONS_MODULE)
    return build_write_options(field)


# ========== ========== ========== ========== ========== ========== write calls
@singledispatch
def write_call(shape: TypeShape, field: FieldMetadata, value: str, context: GenerationContext) -> str:
    """Expression writing ``value`` of a single-value field of ``shape``."""
    raise UnsupportedFieldType(field.attribute, f"{type(shape).__name__} fields are not stored as values")


@write_call.register
def _(shape: LeafParseable, field: FieldMetadata, value: str, context: GenerationContext) -> str:
    return f"{_writing(context, 'write')}({value}, {_options(field, context)})"


def _write_elements(shape: TypeShape, field: FieldMetadata, value: str, context: GenerationContext) -> str:
    element = _writing(context, 'write')
    return f"{_writing(context, 'write_collection')}({value}, {element}, {_options(field, context)})"


def _write_pairs(shape: TypeShape, field: FieldMetadata, value: str, context: GenerationContext) -> str:
    element = _writing(context, 'write')
    return f"{_writing(context, 'write_mapping')}({value}, {element}, {element}, {_options(field, context)})"


for _shape in (ArrayOf, RecognizedCollection, GenericCollection):
    write_call.register(_shape, _write_elements)

for _shape in (RecognizedDictionary, GenericDictionary):
    write_call.register(_shape, _write_pairs)


# ========== ========== ========== ========== ========== ========== strategies
@singledispatch
def _emit(shape: TypeShape, field: FieldMetadata, name: str, value: str, context: GenerationContext) -> Statements:
    raise TypeError(f"no save strategy for {shape!r}")


@_emit.register
def _(shape: Unsupported, field: FieldMetadata, name: str, value: str, context: GenerationContext) -> Statements:
    raise UnsupportedFieldType(field.attribute, shape.reason)


@_emit.register
def _(shape: DirectAssignable, field: FieldMetadata, name: str, value: str, context: GenerationContext) -> Statements:
    statements = Statements(Target.VALUES)
    statements.body.line(f"node.add_value({name}, {value})")
    return statements


def _emit_value(shape: TypeShape, field: FieldMetadata, name: str, value: str, context: GenerationContext) -> Statements:
    handling = field.collection_handling

    if handling is CollectionHandling.SINGLE_VALUE:
        line = f"node.add_value({name}, {write_call(shape, field, value, context)})"
        return _emit_guarded(Statements(Target.VALUES), value, field.optional, [line])

    if not isinstance(shape, COLLECTION_SHAPES):
        raise UnsupportedFieldType(field.attribute, f"{handling.name} applies to collections only")

    element = _writing(context, 'write')
    options = _options(field, context)

    if handling is CollectionHandling.NODE_OF_KEYS:
        child = f"{_writing(context, 'write_node_collection')}({value}, {field.key_name!r}, {element}, {options})"
        return _emit_guarded(Statements(Target.NODES), value, field.optional, [f"node.add_node({name}, {child})"])

    # MULTIPLE_VALUES
    statements = Statements(Target.VALUES)
    text = f"{field.temp_name}_text"

    with statements.body.block(f"for {text} in {_writing(context, 'write_values')}({value}, {element}, {options}):"):
        statements.body.line(f"node.add_value({name}, {text})")

    return statements


for _shape in (LeafParseable, ArrayOf, RecognizedCollection, RecognizedDictionary,
               GenericCollection, GenericDictionary):
    _emit.register(_shape, _emit_value)


@_emit.register
def _(shape: SelfSerializingNode, field: FieldMetadata, name: str, value: str,
      context: GenerationContext) -> Statements:

    if shape.reach is NodeReach.DIRECT:
        line = f"{value}.save(node.add_node({name}))"
    else:
        line = f"{context.reference(NODE_MODULE, 'config_save')}({value}, node.add_node({name}))"

    # an unset nested object writes no fragment
    return _emit_guarded(Statements(Target.NODES), value, True, [line])


@_emit.register
def _(shape: RawNode, field: FieldMetadata, name: str, value: str, context: GenerationContext) -> Statements:
    return _emit_guarded(Statements(Target.NODES), value, True, [f"node.add_node({name}, {value})"])


# ========== ========== ========== ========== ========== ========== public
def emit_field_save(field: FieldMetadata,
                    shape: TypeShape,
                    name_expr: str,
                    value_expr: str,
                    context: GenerationContext) -> Statements:
    """
    Emit the save statements of one field.

    Parameters
    ----------
    field : FieldMetadata
        The field.
    shape : TypeShape
        Its classification.
    name_expr : str
        Expression of the serialized name, usually a string literal.
    value_expr : str
        Expression of the field's current value, usually ``self.<attribute>``.
    context : GenerationContext
        The pass state.

    Returns
    -------
    Statements
        ``target`` tells whether the statements belong to the value section
        (written first) or the node section of the save method.
    """
    context.check_cancelled()
    return _emit(shape, field, name_expr, value_expr, context)


def registered_shapes() -> tuple[type, ...]:
    """Shape classes with a save strategy."""
    return tuple(cls for cls in _emit.registry if cls is not object)

#  -*- coding: utf-8 -*-
"""
The type-directed load/save synthesizer.

Modules
-------
classifier
    ``classify``: declared type to ``TypeShape``.
metadata
    ``ObjectMetadata`` and ``FieldMetadata`` records.
options
    Synthesis of the options expressions handed to the codec.
load, save
    Per-field statement emitters.
namespaces
    Ordered set of the modules imported by a unit.
assembler
    Method assembly, ``generate_source`` and ``attach_unit``.
runner
    ``generate_all`` for batches.
"""

from .assembler import EmittedUnit, assemble, attach_unit, generate_source
from .classifier import (TypeShape, DirectAssignable, LeafParseable, ArrayOf, RecognizedCollection,
                         RecognizedDictionary, GenericCollection, GenericDictionary, SelfSerializingNode,
                         RawNode, Unsupported, classify)
from .context import CancellationToken, GenerationContext
from .load import emit_field_load
from .metadata import AccessModifier, FieldMetadata, InterfaceImplementation, ObjectMetadata
from .namespaces import NamespaceSet
from .options import build_parse_options, build_write_options
from .runner import GenerationReport, generate_all
from .save import emit_field_save


__all__ = [
    "AccessModifier",
    "ArrayOf",
    "CancellationToken",
    "DirectAssignable",
    "EmittedUnit",
    "FieldMetadata",
    "GenerationContext",
    "GenerationReport",
    "GenericCollection",
    "GenericDictionary",
    "InterfaceImplementation",
    "LeafParseable",
    "NamespaceSet",
    "ObjectMetadata",
    "RawNode",
    "RecognizedCollection",
    "RecognizedDictionary",
    "SelfSerializingNode",
    "TypeShape",
    "Unsupported",
    "assemble",
    "attach_unit",
    "build_parse_options",
    "build_write_options",
    "classify",
    "emit_field_load",
    "emit_field_save",
    "generate_all",
    "generate_source",
]

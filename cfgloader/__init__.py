#  -*- coding: utf-8 -*-
"""
cfgloader: generated load/save methods for hierarchical config documents.

Declare the persisted fields of a class with ``ConfigField`` and their types
with annotations; subclassing ``ConfigObject`` classifies every field type and
generates the methods that read and write them from a ``ConfigNode``.

Key Features
------------
- **Type-directed generation**: leaves, arrays, collections, dictionaries,
  nested config objects and raw nodes, each with its own strategy
- **Partial tolerance**: malformed values leave their field untouched; missing
  required fields are reported together at the end of a load
- **Deterministic output**: generated units are byte-identical across runs
- **Rich terminal output**: documents render as trees, units as highlighted
  source

Modules
-------
objects
    ``ConfigObject`` and its metaclass
fields
    The ``ConfigField`` descriptor
node
    The ``ConfigNode`` document and its text format
options, parsing, writing, enums, types
    The text codec
generator
    Classification, emission, assembly and batch generation
settings, logging, errors, display
    Ambient services

Examples
--------
>>> from cfgloader import ConfigObject, ConfigField, ConfigNode
>>>
>>> class Engine(ConfigObject):
...     thrust: float = ConfigField(required=True)
...     name: str = ConfigField(name='title')
>>>
>>> engine = Engine.from_config(ConfigNode.parse('thrust = 215.5\\ntitle = LV-T45'))
>>> engine.thrust, engine.name
(215.5, 'LV-T45')
>>> print(engine.to_config('ENGINE').to_text())
thrust = 215.5
title = LV-T45
<BLANKLINE>
"""


from .errors import *
from .options import *
from .types import *
from .node import ConfigNode, ConfigSerializable, NodeReach, Value
from .fields import ConfigField, config_field
from .generator import AccessModifier, InterfaceImplementation, CancellationToken, generate_all
from .objects import ConfigObject, ConfigObjectMetatype
from .settings import GeneratorSettings, load_settings


__all__ = [
    "AccessModifier",
    "CancellationToken",
    "CfgLoaderError",
    "CollectionHandling",
    "Color",
    "Color32",
    "ConfigField",
    "ConfigGenerationError",
    "ConfigNode",
    "ConfigObject",
    "ConfigObjectMetatype",
    "ConfigParseError",
    "ConfigSerializable",
    "DuplicateConfigName",
    "EnumHandling",
    "ExtendedSplitOptions",
    "GenerationCancelled",
    "GeneratorSettings",
    "InterfaceImplementation",
    "Matrix4x4",
    "MissingRequiredConfigFieldError",
    "NodeReach",
    "ParseOptions",
    "Quaternion",
    "Rect",
    "SettingsError",
    "UnsupportedFieldType",
    "Value",
    "Vector2",
    "Vector2Int",
    "Vector3",
    "Vector3Int",
    "Vector4",
    "WriteOptions",
    "config_field",
    "generate_all",
    "load_settings",
]


try:
    # this will run if cfgloader is installed
    from importlib.metadata import metadata, PackageNotFoundError

    meta = metadata('cfgloader')

    __author__ = meta['Author']
    __license__ = meta['License']
    __version__ = meta['Version']

except PackageNotFoundError:
    # this will run during development
    import toml
    from pathlib import Path

    pyproject_filepath = Path(__file__).parent.parent / "pyproject.toml"

    with pyproject_filepath.open() as file:
        pyproject = toml.load(file)

    __version__ = pyproject["project"]["version"]
    __author__ = pyproject["project"]["authors"][0]["name"]
    __license__ = pyproject["project"]["license"]["text"]

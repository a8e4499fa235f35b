#  -*- coding: utf-8 -*-
"""
Test suite for ConfigObject and the methods generated for it.

Tests cover:
- Round trip of leaf, direct and canned collection fields through text
- Required fields: aggregated report, empty values, declaration order
- Partial tolerance of malformed values
- Nested config objects: direct and explicit reach, absent fragments, recursion
- Raw nodes, repeated values and nodes of keys
- Class keywords: method names, access modifiers, interface implementation
- Inheritance, construction and copies
- Generation failures raised by the class statement
"""

from __future__ import annotations

import copy
import datetime
import uuid

import numpy
import pytest

from collections import OrderedDict, deque
from enum import Enum, Flag
from numpy.typing import NDArray

from cfgloader import (ConfigObject, ConfigObjectMetatype, ConfigField, ConfigNode, AccessModifier,
                       InterfaceImplementation, CollectionHandling, EnumHandling, Vector2, Vector3, Color, Color32,
                       ConfigGenerationError, DuplicateConfigName, MissingRequiredConfigFieldError,
                       UnsupportedFieldType, NodeReach, ConfigSerializable)
from cfgloader.node import config_load, config_save, node_reach


# ========== ========== ========== ========== Models
class Mode(Enum):
    IDLE = 0
    ACTIVE = 1


class Access(Flag):
    READ = 1
    WRITE = 2


class Sample(ConfigObject):
    int_value: int = ConfigField(name='intValue', required=True, default=0)
    label: str = ConfigField()


class Everything(ConfigObject):
    name: str = ConfigField()
    count: int = ConfigField(default=0)
    ratio: float = ConfigField()
    enabled: bool = ConfigField(default=False)
    mode: Mode = ConfigField(default=Mode.IDLE)
    access: Access = ConfigField(enum_handling=EnumHandling.FLAGS)
    when: datetime.date = ConfigField()
    ident: uuid.UUID = ConfigField()
    position: Vector3 = ConfigField()
    tint: Color = ConfigField()
    sizes: list[int] = ConfigField()
    tags: set[str] = ConfigField()
    queue: deque[float] = ConfigField()
    weights: dict[str, float] = ConfigField()
    ordered: OrderedDict[str, int] = ConfigField()
    samples: tuple[float, ...] = ConfigField()
    levels: NDArray[numpy.float64] = ConfigField()


class Probe(ConfigObject):
    alpha: int = ConfigField(required=True)
    beta: float = ConfigField(required=True)
    gamma: str = ConfigField()
    delta: str = ConfigField(required=True)


class Engine(ConfigObject, implementation=InterfaceImplementation.PUBLIC):
    thrust: float = ConfigField()


class Tank(ConfigObject):
    fuel: float = ConfigField()


class Rocket(ConfigObject):
    name: str = ConfigField()
    engine: Engine | None = ConfigField()
    tank: Tank | None = ConfigField()


class Chain(ConfigObject, implementation=InterfaceImplementation.USE_GENERATED):
    label: str = ConfigField()
    link: Chain | None = ConfigField()


class Holder(ConfigObject):
    extra: ConfigNode | None = ConfigField()


class Waypoints(ConfigObject):
    points: list[Vector2] = ConfigField(name='point', collection_handling=CollectionHandling.MULTIPLE_VALUES)
    ids: list[int] = ConfigField(collection_handling=CollectionHandling.NODE_OF_KEYS, key_name='id')


class Custom(ConfigObject,
             load_method_name='read', load_access=AccessModifier.PUBLIC,
             save_method_name='write', save_access=AccessModifier.PROTECTED,
             implementation=InterfaceImplementation.NONE):
    value: int = ConfigField()


class Palette(ConfigObject):
    primary: Color32 = ConfigField(value_separator=',')
    steps: list[int] = ConfigField(collection_separator=';')
    ratio: float = ConfigField(format='.2f')
    mode: Mode = ConfigField(enum_handling=EnumHandling.INTEGER)


class Base(ConfigObject):
    first: int = ConfigField()


class Derived(Base):
    second: int = ConfigField()


class Booster(Engine, implementation=InterfaceImplementation.EXPLICIT):
    burn: float = ConfigField()


class Stage(ConfigObject):
    booster: Booster | None = ConfigField()


class SealedTank(Tank, implementation=InterfaceImplementation.NONE):
    capacity: float = ConfigField()


class Track(ConfigObject):
    a: list[int] = ConfigField(collection_handling=CollectionHandling.MULTIPLE_VALUES)
    a_texts: int = ConfigField()


# ========== ========== ========== ========== Fixtures
@pytest.fixture
def everything() -> Everything:
    """An Everything instance with every field set."""
    return Everything(
        name='wing',
        count=3,
        ratio=0.125,
        enabled=True,
        mode=Mode.ACTIVE,
        access=Access.READ | Access.WRITE,
        when=datetime.date(2024, 5, 17),
        ident=uuid.UUID('12345678-1234-5678-1234-567812345678'),
        position=Vector3(1.0, -2.5, 3.0),
        tint=Color(1.0, 0.5, 0.25, 1.0),
        sizes=[1, 2, 3],
        tags={'a', 'b'},
        queue=deque([0.5, 1.5]),
        weights={'x': 0.5, 'y': 2.0},
        ordered=OrderedDict([('b', 2), ('a', 1)]),
        samples=(1.0, 2.5),
        levels=numpy.array([0.25, 0.75]),
    )


def parse(text: str) -> ConfigNode:
    return ConfigNode.parse(text)


# ========== ========== ========== ========== Round Trip
class TestRoundTrip:
    """Test save followed by load through the text format."""

    def test_every_value_shape_round_trips(self, everything: Everything) -> None:
        # Saving, writing text, parsing and loading reproduces the object
        text = everything.to_config().to_text()
        reloaded = Everything.from_config(parse(text))

        assert reloaded == everything

    def test_round_trip_keeps_types(self, everything: Everything) -> None:
        # Containers come back as the declared container types
        reloaded = Everything.from_config(everything.to_config())

        assert isinstance(reloaded.queue, deque)
        assert isinstance(reloaded.ordered, OrderedDict)
        assert list(reloaded.ordered) == ['b', 'a']
        assert isinstance(reloaded.samples, tuple)
        assert reloaded.levels.dtype == numpy.float64

    def test_saved_values_follow_declaration_order(self, everything: Everything) -> None:
        # Values are written in field declaration order
        node = everything.to_config()

        assert [value.name for value in node.values][:4] == ['name', 'count', 'ratio', 'enabled']

    def test_saved_text_forms(self, everything: Everything) -> None:
        # The codec text forms are used for every field
        node = everything.to_config()

        assert node.get_value('ratio') == '0.125'
        assert node.get_value('enabled') == 'True'
        assert node.get_value('mode') == 'ACTIVE'
        assert node.get_value('access') == 'READ, WRITE'
        assert node.get_value('when') == '2024-05-17'
        assert node.get_value('position') == '1.0 -2.5 3.0'
        assert node.get_value('sizes') == '1, 2, 3'
        assert node.get_value('weights') == 'x: 0.5, y: 2.0'

    def test_field_options_round_trip(self) -> None:
        # Separators, formats and enum handling apply on both sides
        palette = Palette(primary=Color32(255, 128, 0, 255), steps=[1, 2], ratio=0.5, mode=Mode.ACTIVE)
        node = palette.to_config()

        assert node.get_value('primary') == '255, 128, 0, 255'
        assert node.get_value('steps') == '1; 2'
        assert node.get_value('ratio') == '0.50'
        assert node.get_value('mode') == '1'

        assert Palette.from_config(node) == palette

    def test_unset_fields_write_empty_values(self) -> None:
        # Non-optional unset fields write an empty value that loads back as unset
        node = Sample(int_value=1).to_config()

        assert node.get_value('label') == ''
        assert Sample.from_config(node).label is None


# ========== ========== ========== ========== Required Fields
class TestRequiredFields:
    """Test the aggregated report of missing required fields."""

    def test_example_int_value_and_label(self) -> None:
        # Only label present: intValue keeps its default and is reported
        sample = Sample()

        with pytest.raises(MissingRequiredConfigFieldError) as info:
            sample.load_config(parse('label = hi'))

        assert info.value.names == ('intValue',)
        assert sample.label == 'hi'
        assert sample.int_value == 0

    def test_two_missing_fields_reported_together(self) -> None:
        # Both missing names come in one error, in declaration order
        probe = Probe()

        with pytest.raises(MissingRequiredConfigFieldError) as info:
            probe.load_config(parse('beta = 1.5\ngamma = x'))

        assert info.value.names == ('alpha', 'delta')
        assert info.value.owner is Probe
        assert 'alpha, delta' in str(info.value)
        assert probe.beta == 1.5

    def test_malformed_required_value_is_missing(self) -> None:
        # A value that fails to parse does not satisfy the requirement
        with pytest.raises(MissingRequiredConfigFieldError) as info:
            Sample.from_config(parse('intValue = twelve'))

        assert info.value.names == ('intValue',)

    def test_empty_direct_value_is_missing(self) -> None:
        # Present but empty direct values do not count
        with pytest.raises(MissingRequiredConfigFieldError) as info:
            Probe.from_config(parse('alpha = 1\nbeta = 2\ndelta ='))

        assert info.value.names == ('delta',)

    def test_all_present_loads(self) -> None:
        # No error when every required field is populated
        probe = Probe.from_config(parse('alpha = 1\nbeta = 2\ndelta = d'))

        assert (probe.alpha, probe.beta, probe.delta) == (1, 2.0, 'd')

    def test_none_node_is_ignored(self) -> None:
        # Loading from None leaves the object untouched and raises nothing
        sample = Sample(label='kept')
        sample.load_config(None)

        assert sample.label == 'kept'


# ========== ========== ========== ========== Partial Tolerance
class TestPartialTolerance:
    """Test that malformed values do not stop the load."""

    def test_one_malformed_among_four_good(self) -> None:
        # The malformed field keeps its default, the others load
        text = '\n'.join([
            'name = wing',
            'count = three',
            'ratio = 0.5',
            'enabled = true',
            'mode = ACTIVE',
        ])
        loaded = Everything.from_config(parse(text))

        assert loaded.count == 0
        assert loaded.name == 'wing'
        assert loaded.ratio == 0.5
        assert loaded.enabled is True
        assert loaded.mode is Mode.ACTIVE

    def test_malformed_value_keeps_prior_value(self) -> None:
        # A failed parse does not overwrite a value already set
        loaded = Everything(count=7)
        loaded.load_config(parse('count = 1.5'))

        assert loaded.count == 7

    def test_unknown_names_are_ignored(self) -> None:
        # Values and nodes without a matching field are skipped
        loaded = Sample.from_config(parse('intValue = 4\nother = 1\nNODE\n{\n}'))

        assert loaded.int_value == 4

    def test_collection_with_bad_element_is_unset(self) -> None:
        # One bad element fails the whole collection
        loaded = Everything.from_config(parse('sizes = 1, x, 3'))

        assert loaded.sizes is None


# ========== ========== ========== ========== Nested Objects
class TestNestedObjects:
    """Test self-serializing fields."""

    def test_absent_nested_stays_unconstructed(self) -> None:
        # No fragment in the document: the field stays None
        rocket = Rocket.from_config(parse('name = r1'))

        assert rocket.engine is None
        assert rocket.tank is None

    def test_unset_nested_writes_no_fragment(self) -> None:
        # Saving an unset nested object writes no node
        node = Rocket(name='r1').to_config()

        assert node.count_nodes == 0
        assert node.get_value('name') == 'r1'

    def test_nested_round_trip(self) -> None:
        # Nested objects load and save through their own methods
        rocket = Rocket(name='r1', engine=Engine(thrust=215.5), tank=Tank(fuel=90.0))
        node = rocket.to_config()

        assert node.get_node('engine').get_value('thrust') == '215.5'
        assert node.get_node('tank').get_value('fuel') == '90.0'

        reloaded = Rocket.from_config(parse(node.to_text()))

        assert reloaded.engine.thrust == 215.5
        assert reloaded.tank.fuel == 90.0

    def test_direct_reach_calls_public_load(self) -> None:
        # A type with public load/save is called directly
        assert node_reach(Engine) is NodeReach.DIRECT
        assert '_engine.load(value)' in Rocket.config_unit.text
        assert 'self.engine.save(node.add_node(' in Rocket.config_unit.text

    def test_explicit_reach_goes_through_protocol(self) -> None:
        # A type with only the dunder channel is reached through config_load/config_save
        assert node_reach(Tank) is NodeReach.EXPLICIT
        assert 'cfgloader.node.config_load(_tank, value)' in Rocket.config_unit.text
        assert 'cfgloader.node.config_save(self.tank, node.add_node(' in Rocket.config_unit.text

    def test_recursive_type(self) -> None:
        # A type can hold a field of its own type
        chain = Chain.from_config(parse('label = a\nlink\n{\n    label = b\n    link\n    {\n        label = c\n    }\n}'))

        assert chain.label == 'a'
        assert chain.link.label == 'b'
        assert chain.link.link.label == 'c'
        assert chain.link.link.link is None

    def test_config_objects_are_serializable(self) -> None:
        # Generated interfaces make the class a ConfigSerializable
        assert issubclass(Engine, ConfigSerializable)
        assert issubclass(Tank, ConfigSerializable)
        assert not issubclass(Custom, ConfigSerializable)

    def test_subclass_with_another_interface(self) -> None:
        # A subclass switching to the explicit channel keeps its own fields when nested
        node = Stage(booster=Booster(thrust=1.0, burn=2.0)).to_config()

        assert node_reach(Booster) is NodeReach.EXPLICIT
        assert node.get_node('booster').get_value('burn') == '2.0'

        reloaded = Stage.from_config(parse(node.to_text()))

        assert (reloaded.booster.thrust, reloaded.booster.burn) == (1.0, 2.0)

    def test_inherited_public_delegates_reach_subclass(self) -> None:
        # load/save inherited from a public base call the subclass methods
        node = ConfigNode()
        Booster(thrust=1.0, burn=2.0).save(node)

        assert node.get_value('burn') == '2.0'

        booster = Booster()
        booster.load(parse('thrust = 3\nburn = 4'))

        assert (booster.thrust, booster.burn) == (3.0, 4.0)

    def test_inherited_explicit_channel_reaches_subclass(self) -> None:
        # A subclass without an interface still loads all its fields through the inherited channel
        tank = SealedTank()
        config_load(tank, parse('fuel = 1\ncapacity = 5'))

        assert (tank.fuel, tank.capacity) == (1.0, 5.0)

        node = ConfigNode()
        config_save(tank, node)

        assert node.get_value('capacity') == '5.0'


# ========== ========== ========== ========== Node Fields
class TestNodeFields:
    """Test raw nodes, repeated values and nodes of keys."""

    def test_raw_node_is_assigned(self) -> None:
        # The nested fragment itself is stored
        holder = Holder.from_config(parse('extra\n{\n    a = 1\n    INNER\n    {\n    }\n}'))

        assert holder.extra.get_value('a') == '1'
        assert holder.extra.has_node('INNER')

    def test_raw_node_is_saved_verbatim(self) -> None:
        # A set raw node is written under the field name, an unset one is not
        extra = ConfigNode('anything')
        extra.add_value('a', '1')

        node = Holder(extra=extra).to_config()

        assert node.get_node('extra').get_value('a') == '1'
        assert Holder().to_config().count_nodes == 0

    def test_multiple_values(self) -> None:
        # Repeated values fill one collection
        waypoints = Waypoints.from_config(parse('point = 0 0\npoint = 1 2.5'))

        assert waypoints.points == [Vector2(0.0, 0.0), Vector2(1.0, 2.5)]

    def test_multiple_values_save(self) -> None:
        # Each element is written as its own value
        node = Waypoints(points=[Vector2(0.0, 1.0), Vector2(2.0, 3.0)]).to_config()

        assert node.get_values('point') == ['0.0 1.0', '2.0 3.0']

    def test_node_of_keys(self) -> None:
        # Elements are the key values of a child node
        waypoints = Waypoints.from_config(parse('ids\n{\n    id = 3\n    id = 4\n    other = 9\n}'))

        assert waypoints.ids == [3, 4]

    def test_node_of_keys_save(self) -> None:
        # The child node holds one key value per element
        node = Waypoints(ids=[5, 6]).to_config()

        assert node.get_node('ids').get_values('id') == ['5', '6']

    def test_repeated_values_beside_similar_names(self) -> None:
        # The collected texts of 'a' do not share a local with the field 'a_texts'
        track = Track.from_config(parse('a = 1\na = 2\na_texts = 5'))

        assert track.a == [1, 2]
        assert track.a_texts == 5


# ========== ========== ========== ========== Class Keywords
class TestClassKeywords:
    """Test method names, access modifiers and interface implementation."""

    def test_default_methods_are_private(self) -> None:
        # Defaults are name-mangled load_from_config / save_to_config
        assert callable(getattr(Sample, '_Sample__load_from_config'))
        assert callable(getattr(Sample, '_Sample__save_to_config'))
        assert callable(Sample.__config_load__)
        assert not hasattr(Sample, 'load')

    def test_custom_names_and_access(self) -> None:
        # Names and access modifiers are applied as written
        assert callable(Custom.read)
        assert callable(Custom._write)
        assert not hasattr(Custom, '__config_load__')

        custom = Custom()
        custom.read(parse('value = 4'))
        node = ConfigNode()
        custom._write(node)

        assert node.get_value('value') == '4'

    def test_public_delegates(self) -> None:
        # PUBLIC adds load/save delegating to the generated methods
        engine = Engine()
        engine.load(parse('thrust = 1.5'))
        node = ConfigNode()
        engine.save(node)

        assert engine.thrust == 1.5
        assert node.get_value('thrust') == '1.5'

    def test_use_generated_names(self) -> None:
        # USE_GENERATED makes the generated methods the public load/save
        assert Chain.__config_metadata__.load_attribute == 'load'
        assert Chain.__config_metadata__.save_attribute == 'save'

    def test_metadata_is_inherited(self) -> None:
        # A subclass without keywords keeps the parent's options
        class Booster(Engine):
            burn: float = ConfigField()

        assert Booster.__config_metadata__.implementation is InterfaceImplementation.PUBLIC

        booster = Booster()
        booster.load(parse('thrust = 2\nburn = 3'))

        assert (booster.thrust, booster.burn) == (2.0, 3.0)


# ========== ========== ========== ========== Construction
class TestConstruction:
    """Test ConfigObject construction, equality and inheritance."""

    def test_kwargs_set_fields(self) -> None:
        # Keyword arguments set the fields by attribute name
        sample = Sample(int_value=3, label='x')

        assert (sample.int_value, sample.label) == (3, 'x')

    def test_unknown_kwarg_raises(self) -> None:
        # Unknown names are rejected
        with pytest.raises(AttributeError, match="no config field 'nope'"):
            Sample(nope=1)

    def test_copy(self) -> None:
        # Passing an instance copies it through its config
        original = Sample(int_value=3, label='x')
        duplicate = Sample(original)

        assert duplicate == original
        assert duplicate is not original

    def test_copy_with_required_field_unset(self) -> None:
        # Copies do not go through load, so missing required fields are copied as unset
        original = Probe(gamma='x')
        duplicate = copy.copy(original)

        assert duplicate == original
        assert duplicate.alpha is None
        assert duplicate.gamma == 'x'

    def test_copy_is_independent(self, everything: Everything) -> None:
        # Field values are copied, not shared
        duplicate = copy.copy(everything)
        duplicate.sizes.append(4)
        duplicate.levels[0] = 9.0

        assert everything.sizes == [1, 2, 3]
        assert everything.levels[0] == 0.25

    def test_copy_keeps_values_without_text_form(self) -> None:
        # Values are copied as they are, not written and read back
        extra = ConfigNode('kept')
        duplicate = Holder(Holder(extra=extra))

        assert duplicate.extra == extra
        assert duplicate.extra.name == 'kept'

    def test_copy_wrong_type_raises(self) -> None:
        # Copies only accept instances of the same type
        with pytest.raises(TypeError):
            Sample(Probe())

    def test_inherited_fields_load_first(self) -> None:
        # Base class fields are part of the derived methods
        derived = Derived.from_config(parse('first = 1\nsecond = 2'))

        assert (derived.first, derived.second) == (1, 2)
        assert [value.name for value in derived.to_config().values] == ['first', 'second']

    def test_repr(self) -> None:
        # repr lists the fields
        assert repr(Sample(int_value=1, label='a')) == "Sample(int_value=1, label='a')"

    def test_file_round_trip(self, tmp_path) -> None:
        # Objects can be written to and read from files
        path = tmp_path / 'sample.cfg'
        Sample(int_value=9, label='z').to_file(path)

        assert Sample.from_file(path) == Sample(int_value=9, label='z')


# ========== ========== ========== ========== Generation Failures
class TestGenerationFailures:
    """Test that bad declarations abort the class statement."""

    def test_unsupported_fields_are_reported_together(self) -> None:
        # Every failing field is listed, sibling fields do not hide them
        with pytest.raises(ConfigGenerationError) as info:

            class Bad(ConfigObject):
                nested: list[list[int]] = ConfigField()
                fine: int = ConfigField()
                either: int | str = ConfigField()

        errors = info.value.errors

        assert [error.field for error in errors] == ['nested', 'either']
        assert all(isinstance(error, UnsupportedFieldType) for error in errors)
        assert 'Bad' in info.value.qualified_name

    def test_duplicate_names(self) -> None:
        # Two fields cannot share a serialized name
        with pytest.raises(ConfigGenerationError) as info:

            class Twice(ConfigObject):
                one: int = ConfigField(name='x')
                two: int = ConfigField(name='x')

        assert isinstance(info.value.errors[0], DuplicateConfigName)
        assert info.value.errors[0].field == 'two'

    def test_missing_annotation(self) -> None:
        # Fields need a type annotation
        with pytest.raises(ConfigGenerationError, match='type annotation'):

            class Bare(ConfigObject):
                value = ConfigField()

    def test_unresolvable_annotation(self) -> None:
        # Annotations naming unknown types fail
        with pytest.raises(ConfigGenerationError, match='cannot resolve'):

            class Ghost(ConfigObject):
                value: Missing = ConfigField()  # noqa: F821

    def test_local_types_cannot_be_referenced(self) -> None:
        # Types defined in a function cannot be imported by generated code
        class Local(Enum):
            A = 1

        namespace = {
            '__module__': __name__,
            '__qualname__': 'UsesLocal',
            '__annotations__': {'value': Local},
            'value': ConfigField(),
        }

        with pytest.raises(ConfigGenerationError, match='defined inside a function'):
            ConfigObjectMetatype('UsesLocal', (ConfigObject,), namespace)

    def test_collection_handling_on_scalar(self) -> None:
        # Repeated values only apply to collections
        with pytest.raises(ConfigGenerationError, match='applies to collections only'):

            class Scalar(ConfigObject):
                value: int = ConfigField(collection_handling=CollectionHandling.MULTIPLE_VALUES)

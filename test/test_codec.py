#  -*- coding: utf-8 -*-
"""
Test suite for the text codec.

Tests cover:
- Leaf parsing and its failure contract
- Enumerations in every handling mode
- Multi-component values: vectors, colors, matrices
- Temporal values through pandas
- Collections, mappings, repeated values and nodes of keys
- Writing, and the separators and formats of the write options
"""

from __future__ import annotations

import datetime
import decimal
import uuid

import numpy
import pandas
import pytest

from collections import OrderedDict, deque
from enum import Enum, Flag

from cfgloader import (ConfigNode, EnumHandling, ExtendedSplitOptions, ParseOptions, WriteOptions,
                       Vector2, Vector3Int, Color, Color32, Matrix4x4, Quaternion)
from cfgloader.enums import format_enum, try_parse_enum
from cfgloader.parsing import (FAILED, parser_for, split_values, try_parse, try_parse_array, try_parse_collection,
                               try_parse_deque, try_parse_dict, try_parse_list, try_parse_mapping,
                               try_parse_ndarray, try_parse_node_collection, try_parse_ordered_dict, try_parse_set,
                               try_parse_values)
from cfgloader.writing import (write, write_collection, write_mapping, write_node_collection, write_values,
                               writer_for)


# ========== ========== ========== ========== Models
class Fruit(Enum):
    APPLE = 1
    PEAR = 2
    Plum = 26


class Style(Flag):
    BOLD = 1
    ITALIC = 2
    UNDERLINE = 4


class Offset(Enum):
    BACK = -10
    FORWARD = 10


# ========== ========== ========== ========== Fixtures
@pytest.fixture
def int_parse():
    """Per-element parser of int."""
    return parser_for(int)


# ========== ========== ========== ========== Leaves
class TestLeaves:
    """Test leaf parsing."""

    @pytest.mark.parametrize('text, type_, expected', [
        ('42', int, 42),
        (' -7 ', int, -7),
        ('1.5', float, 1.5),
        ('1e3', float, 1000.0),
        ('TRUE', bool, True),
        ('false', bool, False),
        ('0.10', decimal.Decimal, decimal.Decimal('0.10')),
        ('2024-05-17', datetime.date, datetime.date(2024, 5, 17)),
        ('12345678-1234-5678-1234-567812345678', uuid.UUID, uuid.UUID('12345678-1234-5678-1234-567812345678')),
        ('3', numpy.int16, numpy.int16(3)),
    ])
    def test_parse(self, text, type_, expected) -> None:
        # Well formed text parses to the expected value
        assert try_parse(text, type_) == (True, expected)

    @pytest.mark.parametrize('text, type_', [
        ('4 2', int),
        ('1.0', int),
        ('yes', bool),
        ('x', float),
        ('', int),
        (None, float),
        ('2024-13-01', datetime.date),
        ('not-a-uuid', uuid.UUID),
    ])
    def test_failure_is_reported_not_raised(self, text, type_) -> None:
        # Malformed text gives (False, None)
        assert try_parse(text, type_) == FAILED

    def test_strings_pass_through(self) -> None:
        # str accepts any text, even empty
        assert try_parse('', str) == (True, '')
        assert try_parse(' a b ', str) == (True, ' a b ')

    def test_unknown_type_is_a_programming_error(self) -> None:
        # Types without a parser raise
        with pytest.raises(TypeError, match='no parser'):
            try_parse('1', dict)

        with pytest.raises(TypeError, match='no parser'):
            parser_for(list)

    def test_timedelta(self) -> None:
        # Durations go through pandas
        ok, value = try_parse('1 days 02:00:00', datetime.timedelta)

        assert ok
        assert value == datetime.timedelta(days=1, hours=2)
        assert try_parse('P1DT2H', pandas.Timedelta) == (True, pandas.Timedelta(days=1, hours=2))

    def test_timestamp(self) -> None:
        # Timestamps go through pandas
        assert try_parse('2024-05-17 10:30', pandas.Timestamp) == (True, pandas.Timestamp(2024, 5, 17, 10, 30))
        assert try_parse('soon', pandas.Timestamp) == FAILED

    def test_split_values(self) -> None:
        # Split options trim and drop pieces
        assert split_values(' a , , b ', ',') == ['a', 'b']
        assert split_values(' a , , b ', ',', ExtendedSplitOptions.TRIM_ENTRIES) == ['a', '', 'b']
        assert split_values('a  b\tc', ' ') == ['a', 'b', 'c']
        assert split_values(None, ',') == []


# ========== ========== ========== ========== Enums
class TestEnums:
    """Test enumeration handling."""

    def test_string(self) -> None:
        # Names only, case sensitive
        assert try_parse_enum('PEAR', Fruit) == (True, Fruit.PEAR)
        assert try_parse_enum('pear', Fruit) == (False, None)
        assert try_parse_enum('2', Fruit) == (False, None)

    def test_case_insensitive(self) -> None:
        # Names, any case
        assert try_parse_enum('pear', Fruit, EnumHandling.CASE_INSENSITIVE_STRING) == (True, Fruit.PEAR)

    def test_flags(self) -> None:
        # Combinations with ',' or '|'
        assert try_parse_enum('BOLD, ITALIC', Style, EnumHandling.FLAGS) == (True, Style.BOLD | Style.ITALIC)
        assert try_parse_enum('BOLD|4', Style, EnumHandling.FLAGS) == (True, Style.BOLD | Style.UNDERLINE)
        assert try_parse_enum('bold', Style, EnumHandling.CASE_INSENSITIVE_FLAGS) == (True, Style.BOLD)

    def test_combinations_need_a_flag(self) -> None:
        # Plain enums cannot be combined
        assert try_parse_enum('APPLE, PEAR', Fruit, EnumHandling.FLAGS) == (False, None)

    def test_numeric(self) -> None:
        # Numbers, falling back to names
        assert try_parse_enum('26', Fruit, EnumHandling.INTEGER) == (True, Fruit.Plum)
        assert try_parse_enum('1A', Fruit, EnumHandling.HEXADECIMAL) == (True, Fruit.Plum)
        assert try_parse_enum('APPLE', Fruit, EnumHandling.INTEGER) == (True, Fruit.APPLE)
        assert try_parse_enum('99', Fruit, EnumHandling.INTEGER) == (False, None)

    def test_blank(self) -> None:
        # Blank text never parses
        assert try_parse_enum('  ', Fruit) == (False, None)
        assert try_parse_enum(None, Fruit) == (False, None)

    def test_format(self) -> None:
        # Each handling has its text form
        assert format_enum(Fruit.Plum) == 'Plum'
        assert format_enum(Fruit.Plum, EnumHandling.INTEGER) == '26'
        assert format_enum(Fruit.Plum, EnumHandling.HEXADECIMAL) == '0000001A'
        assert format_enum(Style.BOLD | Style.UNDERLINE, EnumHandling.FLAGS) == 'BOLD, UNDERLINE'

    def test_negative_hexadecimal(self) -> None:
        # Signed hex is written and read back
        text = format_enum(Offset.BACK, EnumHandling.HEXADECIMAL)

        assert text == '-000000A'
        assert try_parse_enum(text, Offset, EnumHandling.HEXADECIMAL) == (True, Offset.BACK)
        assert try_parse_enum('-0xA', Offset, EnumHandling.HEXADECIMAL) == (True, Offset.BACK)

    def test_string_flag_combinations(self) -> None:
        # Unnamed combinations are joined with '|' and read back by name
        combined = Style.BOLD | Style.UNDERLINE
        text = format_enum(combined)

        assert text == 'BOLD|UNDERLINE'
        assert try_parse_enum(text, Style) == (True, combined)
        assert try_parse_enum('bold | underline', Style, EnumHandling.CASE_INSENSITIVE_STRING) == (True, combined)
        assert try_parse_enum('BOLD|4', Style) == (False, None)
        assert try_parse_enum('APPLE|PEAR', Fruit) == (False, None)

    def test_through_try_parse(self) -> None:
        # Leaf parsing honours the enum handling of the options
        options = ParseOptions(enum_handling=EnumHandling.CASE_INSENSITIVE_STRING)

        assert try_parse('plum', Fruit, options) == (True, Fruit.Plum)
        assert try_parse('plum', Fruit) == FAILED


# ========== ========== ========== ========== Components
class TestComponents:
    """Test multi-component values."""

    def test_vectors(self) -> None:
        # Components are separated by the value separator
        assert try_parse('1 2.5', Vector2) == (True, Vector2(1.0, 2.5))
        assert try_parse('1,2,3', Vector3Int, ParseOptions(value_separator=',')) == (True, Vector3Int(1, 2, 3))
        assert try_parse('1 2', Quaternion) == FAILED
        assert try_parse('1 2 x', Vector3Int) == FAILED

    def test_colors(self) -> None:
        # Float channels are clamped; hex is accepted
        assert try_parse('2 0.5 -1', Color) == (True, Color(1.0, 0.5, 0.0, 1.0))
        assert try_parse('#FF000080', Color32) == (True, Color32(255, 0, 0, 128))
        assert try_parse('255 0 0', Color32) == (True, Color32(255, 0, 0, 255))
        assert try_parse('256 0 0', Color32) == FAILED

        ok, color = try_parse('00FF00', Color)

        assert ok
        assert color == Color(0.0, 1.0, 0.0, 1.0)

    def test_matrix(self) -> None:
        # Sixteen components, row-major
        text = ' '.join(str(value) for value in range(16))
        ok, matrix = try_parse(text, Matrix4x4)

        assert ok
        assert matrix[1, 0] == 4.0
        assert write(matrix).split() == [repr(float(value)) for value in range(16)]
        assert try_parse('1 2 3', Matrix4x4) == FAILED

    def test_write_components(self) -> None:
        # Integer vectors keep integers, others are written as floats
        assert write(Vector3Int(1, 2, 3)) == '1 2 3'
        assert write(Vector2(1, 2)) == '1.0 2.0'
        assert write(Color32(1, 2, 3, 4), WriteOptions(value_separator=',')) == '1, 2, 3, 4'


# ========== ========== ========== ========== Collections
class TestCollections:
    """Test collection and mapping entry points."""

    def test_canned(self, int_parse) -> None:
        # Each canned entry point builds its own container
        assert try_parse_list('1, 2, 3', int_parse) == (True, [1, 2, 3])
        assert try_parse_set('1, 2, 2', int_parse) == (True, {1, 2})
        assert try_parse_deque('1', int_parse) == (True, deque([1]))

    def test_one_bad_element_fails_all(self, int_parse) -> None:
        # Partial collections are never returned
        assert try_parse_list('1, x, 3', int_parse) == FAILED
        assert try_parse_list('', int_parse) == FAILED

    def test_custom_separator(self, int_parse) -> None:
        # The collection separator comes from the options
        assert try_parse_list('1;2', int_parse, ParseOptions(collection_separator=';')) == (True, [1, 2])

    def test_generic_collection(self, int_parse) -> None:
        # Any constructible collection is filled element by element
        class Bag(list):
            pass

        ok, bag = try_parse_collection('4, 5', Bag, int_parse)

        assert ok
        assert type(bag) is Bag
        assert bag == [4, 5]

    def test_arrays(self) -> None:
        # Tuples and numpy arrays
        assert try_parse_array('1.5, 2', parser_for(float)) == (True, (1.5, 2.0))

        ok, array = try_parse_ndarray('1, 2', parser_for(numpy.int32), numpy.int32)

        assert ok
        assert array.dtype == numpy.int32
        assert array.tolist() == [1, 2]

    def test_mappings(self, int_parse) -> None:
        # key: value pairs
        str_parse = parser_for(str)

        assert try_parse_dict('a: 1, b: 2', str_parse, int_parse) == (True, {'a': 1, 'b': 2})
        assert try_parse_dict('a: 1, a: 3', str_parse, int_parse) == (True, {'a': 3})
        assert try_parse_dict('a 1', str_parse, int_parse) == FAILED
        assert try_parse_dict('a: x', str_parse, int_parse) == FAILED

        ok, ordered = try_parse_ordered_dict('z: 1, a: 2', str_parse, int_parse)

        assert ok
        assert list(ordered) == ['z', 'a']

    def test_mapping_type_must_be_mutable(self, int_parse) -> None:
        # Non-mapping types are a programming error
        with pytest.raises(TypeError):
            try_parse_mapping('a: 1', list, parser_for(str), int_parse)

    def test_values(self, int_parse) -> None:
        # Repeated values fill one collection
        assert try_parse_values(['1', '2'], list, int_parse) == (True, [1, 2])
        assert try_parse_values([], list, int_parse) == FAILED
        assert try_parse_values(['1', 'x'], list, int_parse) == FAILED

        ok, array = try_parse_values(['1', '2'], numpy.ndarray, int_parse)

        assert ok
        assert array.tolist() == [1, 2]

    def test_node_collection(self, int_parse) -> None:
        # Only the key values of the node are elements
        node = ConfigNode.parse('key = 1\nother = x\nkey = 2')

        assert try_parse_node_collection(node, list, 'key', int_parse) == (True, [1, 2])
        assert try_parse_node_collection(node, list, 'other', int_parse) == FAILED
        assert try_parse_node_collection(None, list, 'key', int_parse) == FAILED


# ========== ========== ========== ========== Writing
class TestWriting:
    """Test value to text conversion."""

    @pytest.mark.parametrize('value, expected', [
        (None, ''),
        ('text', 'text'),
        (False, 'False'),
        (3, '3'),
        (0.1, '0.1'),
        (numpy.float32(0.5), '0.5'),
        (decimal.Decimal('1.10'), '1.10'),
        (Fruit.PEAR, 'PEAR'),
        (datetime.date(2024, 1, 2), '2024-01-02'),
        (datetime.timedelta(hours=1), 'P0DT1H0M0S'),
    ])
    def test_write(self, value, expected) -> None:
        # Every leaf has a text form
        assert write(value) == expected

    def test_format(self) -> None:
        # Numbers and dates honour the format
        assert write(1.0 / 3.0, WriteOptions(format='.3f')) == '0.333'
        assert write(datetime.date(2024, 1, 2), WriteOptions(format='%d/%m/%Y')) == '02/01/2024'

    def test_enum_handling(self) -> None:
        # Enums are written according to the options
        assert write(Fruit.PEAR, WriteOptions(enum_handling=EnumHandling.INTEGER)) == '2'

    def test_collections(self) -> None:
        # Separators are padded unless whitespace
        assert write_collection([1, 2]) == '1, 2'
        assert write_collection([1, 2], write, WriteOptions(collection_separator=' ')) == '1 2'
        assert write_collection(None) == ''
        assert write_mapping(OrderedDict([('b', 1), ('a', 2)])) == 'b: 1, a: 2'
        assert write_mapping({'a': 1}, write, write, WriteOptions(key_value_separator='=')) == 'a= 1'

    def test_values(self) -> None:
        # One text per element
        assert write_values([1.5, 2]) == ['1.5', '2']
        assert write_values(None) == []
        assert write_values(numpy.array([1, 2])) == ['1', '2']

    def test_node_collection(self) -> None:
        # A node of key values
        node = write_node_collection([1, 2], 'item')

        assert node.get_values('item') == ['1', '2']
        assert node.count_nodes == 0

    def test_writer_for(self) -> None:
        # Mappings and nodes have no element writer
        assert writer_for(int) is write

        with pytest.raises(TypeError):
            writer_for(dict)

        with pytest.raises(TypeError):
            writer_for(ConfigNode)

    def test_write_then_parse(self) -> None:
        # The written form parses back
        original = {'a': Vector2(1.0, 2.0)}
        options = WriteOptions(collection_separator=';')
        text = write_mapping(original, write, write, options)

        ok, parsed = try_parse_dict(text, parser_for(str), parser_for(Vector2), ParseOptions(collection_separator=';'))

        assert ok
        assert parsed == original

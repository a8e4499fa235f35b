#  -*- coding: utf-8 -*-
"""
Test suite for the rich display layer.

Tests cover:
- DisplaySettings defaults and customization
- Displayable: abstract interface, per-instance settings
- Rendering: __str__, __rich__, panel styling, console width
- format_as_form
- ConfigNode trees and EmittedUnit source panels
"""

from __future__ import annotations

import pytest

from io import StringIO

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from cfgloader import ConfigNode
from cfgloader.display import Displayable, DisplaySettings
from cfgloader.generator import EmittedUnit


# ========== ========== ========== ========== Fixtures
@pytest.fixture
def custom_settings() -> DisplaySettings:
    """Customized DisplaySettings."""
    settings = DisplaySettings()
    settings.console_width = 60
    settings.property_style = 'bold cyan'
    settings.panel_border_style = 'green'
    settings.panel_box = 'SQUARE'
    return settings


@pytest.fixture
def simple_displayable_class() -> type:
    """A simple Displayable implementation."""

    class SimpleDisplay(Displayable):
        def __init__(self, title_text: str, body_text: str):
            self.title_text = title_text
            self.body_text = body_text

        def _title(self) -> Text:
            return Text(self.title_text)

        def _content(self) -> str:
            return self.body_text

    return SimpleDisplay


@pytest.fixture
def part_node() -> ConfigNode:
    """A small document with a nested node."""
    node = ConfigNode('PART')
    node.add_value('mass', 0.25)
    node.add_node('MODULE').add_value('speed', '1.5')
    return node


def render(renderable, width: int = 120) -> str:
    string_io = StringIO()
    Console(file=string_io, width=width, no_color=True).print(renderable)
    return string_io.getvalue()


# ========== ========== ========== ========== Settings
class TestDisplaySettings:
    """Test DisplaySettings."""

    def test_defaults(self) -> None:
        settings = DisplaySettings()

        assert settings.console_width == 120
        assert settings.property_style == 'bold bright_yellow'
        assert settings.panel_border_style == 'bright_cyan'
        assert settings.panel_box == 'ROUNDED'
        assert settings.panel_title_align == 'center'
        assert settings.syntax_theme == 'monokai'

    def test_customization(self, custom_settings: DisplaySettings) -> None:
        assert custom_settings.console_width == 60
        assert custom_settings.panel_box == 'SQUARE'
        assert DisplaySettings().panel_box == 'ROUNDED'


# ========== ========== ========== ========== Basics
class TestDisplayableBasics:
    """Test the abstract interface."""

    def test_cannot_instantiate(self) -> None:
        # Both abstract methods are required
        with pytest.raises(TypeError):
            Displayable()

    def test_settings_are_lazy_and_per_instance(self, simple_displayable_class: type) -> None:
        first = simple_displayable_class('a', 'b')
        second = simple_displayable_class('c', 'd')

        assert isinstance(first.display_settings, DisplaySettings)
        assert first.display_settings is first.display_settings
        assert first.display_settings is not second.display_settings

    def test_settings_setter(self, simple_displayable_class: type, custom_settings: DisplaySettings) -> None:
        obj = simple_displayable_class('a', 'b')
        obj.display_settings = custom_settings

        assert obj.display_settings is custom_settings


# ========== ========== ========== ========== Rendering
class TestDisplayableRendering:
    """Test rendering through rich."""

    def test_str_contains_title_and_body(self, simple_displayable_class: type) -> None:
        text = str(simple_displayable_class('Rocket', 'three stages'))

        assert 'Rocket' in text
        assert 'three stages' in text

    def test_rich_returns_styled_panel(self, simple_displayable_class: type,
                                       custom_settings: DisplaySettings) -> None:
        obj = simple_displayable_class('Rocket', 'body')
        obj.display_settings = custom_settings

        panel = obj.__rich__()

        assert isinstance(panel, Panel)
        assert panel.border_style == 'green'
        assert panel.box is box.SQUARE
        assert panel.title.plain == 'Rocket'

    def test_console_width_is_respected(self, simple_displayable_class: type,
                                        custom_settings: DisplaySettings) -> None:
        obj = simple_displayable_class('T', 'word ' * 50)
        obj.display_settings = custom_settings

        lines = Text.from_ansi(str(obj)).plain.splitlines()

        assert lines
        assert max(len(line) for line in lines) <= 60


# ========== ========== ========== ========== Forms
class TestFormatAsForm:
    """Test format_as_form."""

    def test_rows(self, simple_displayable_class: type) -> None:
        obj = simple_displayable_class('T', 'B')
        form = obj.format_as_form({'file': 'part.py', 'fields': '3'})

        assert isinstance(form, Table)
        assert form.row_count == 2

        text = render(form)

        assert 'file:' in text
        assert 'part.py' in text
        assert 'fields:' in text

    def test_key_style(self, simple_displayable_class: type, custom_settings: DisplaySettings) -> None:
        obj = simple_displayable_class('T', 'B')
        obj.display_settings = custom_settings

        form = obj.format_as_form({'a': '1'})

        assert form.columns[0].style == 'bold cyan'


# ========== ========== ========== ========== Integration
class TestIntegration:
    """Test the displayable library types."""

    def test_node_tree(self, part_node: ConfigNode) -> None:
        # Values as "name = value", children as branches
        tree = part_node._content()

        assert isinstance(tree, Tree)

        text = render(part_node)

        assert 'PART' in text
        assert 'mass = 0.25' in text
        assert 'MODULE' in text
        assert 'speed = 1.5' in text

    def test_unnamed_node(self) -> None:
        # Root nodes without a name
        assert ConfigNode()._title().plain == '<root>'

    def test_emitted_unit(self) -> None:
        # Highlighted source titled by the file name
        unit = EmittedUnit('pkg.Part', 'pkg.Part.py', 'class Part:\n    pass\n')

        assert unit._title().plain == 'pkg.Part.py'
        assert isinstance(unit._content(), Syntax)
        assert 'class Part' in render(unit)

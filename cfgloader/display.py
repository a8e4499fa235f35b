#  -*- coding: utf-8 -*-
"""
Rich terminal display for config documents and generated units.

Objects define their visual representation through ``_title`` and ``_content``;
``Displayable`` wraps them in a styled panel and provides ``__str__`` and the
rich protocol ``__rich__``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from io import StringIO

from rich import box
from rich.console import Console, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text


# ========== ========== ========== ========== ========== ==========
@dataclass
class DisplaySettings:
    """
    Styling used when rendering ``Displayable`` objects.

    Attributes
    ----------
    console_width : int
        Maximum console output width in characters. Default 120.
    property_style : str
        Style for keys in forms and value names in trees.
    panel_border_style : str
        Style for panel borders.
    panel_box : str
        Box style name from ``rich.box``.
    panel_title_align : str
        Panel title alignment.
    syntax_theme : str
        Pygments theme used for generated source.
    """

    console_width: int = 120
    property_style: str = 'bold bright_yellow'
    panel_border_style: str = 'bright_cyan'
    panel_box: str = 'ROUNDED'
    panel_title_align: str = 'center'
    syntax_theme: str = 'monokai'


class Displayable(ABC):
    """
    Abstract base for objects with rich terminal display.

    Subclasses implement ``_title`` and ``_content``. The panel is built with
    ``display_settings``, which defaults to a fresh ``DisplaySettings``.
    """

    # ========== ========== ========== ========== ========== special methods
    def __str__(self) -> str:
        """Rendered panel, with ANSI codes."""
        string_io = StringIO()
        console = Console(file=string_io,
                          force_terminal=True,
                          width=self.display_settings.console_width)

        console.print(self._display_panel())

        return string_io.getvalue()

    def __rich__(self) -> RenderableType:
        return self._display_panel()

    # ========== ========== ========== ========== ========== protected methods
    @abstractmethod
    def _title(self) -> Text:
        ...

    @abstractmethod
    def _content(self) -> RenderableType:
        ...

    def _display_panel(self) -> Panel:
        settings = self.display_settings

        return Panel(
            self._content(),
            title=self._title(),
            border_style=settings.panel_border_style,
            title_align=settings.panel_title_align,
            expand=False,
            box=getattr(box, settings.panel_box)
        )

    # ========== ========== ========== ========== ========== public methods
    def format_as_form(self, data: dict[str, str]) -> Table:
        """
        Format data as a two-column key/value form.

        Parameters
        ----------
        data : dict[str, str]
            Key-value pairs to display.

        Returns
        -------
        Table
            Rich grid with keys on the left (styled) and values on the right.
        """
        form = Table.grid(padding=(0, 4), expand=False)
        form.add_column(justify='left', style=self.display_settings.property_style)
        form.add_column(justify='left', style=None)

        for prop, value in data.items():
            form.add_row(f'{prop}:', value)

        return form

    # ---------- ---------- ---------- ---------- ---------- properties
    @property
    def display_settings(self) -> DisplaySettings:
        settings = getattr(self, '_display_settings', None)

        if settings is None:
            settings = DisplaySettings()
            self._display_settings = settings

        return settings

    @display_settings.setter
    def display_settings(self, settings: DisplaySettings) -> None:
        self._display_settings = settings

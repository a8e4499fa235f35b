#  -*- coding: utf-8 -*-
"""
Generator settings and their ``pyproject.toml`` source.

Settings live in the ``[tool.cfgloader]`` table::

    [tool.cfgloader]
    indent = "    "
    line_ending = "\\n"
    header = "# <auto-generated/>"
    output_dir = "generated"
    max_workers = 4
"""

from __future__ import annotations

import toml

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Self

from .errors import SettingsError


PYPROJECT: str = 'pyproject.toml'
TOOL_TABLE: str = 'cfgloader'

_LINE_ENDINGS = ('\n', '\r\n')


@dataclass(frozen=True)
class GeneratorSettings:
    """
    Formatting and output settings of the generator.

    Attributes
    ----------
    indent : str
        Indentation unit of emitted code. Default four spaces.
    line_ending : str
        ``"\\n"`` (default) or ``"\\r\\n"``.
    header : str
        First line of every generated unit.
    output_dir : Path or None
        Directory where ``generate_all`` writes units, if any.
    max_workers : int or None
        Thread pool size of ``generate_all``. ``None`` lets the executor
        decide.
    """

    indent: str = '    '
    line_ending: str = '\n'
    header: str = '# <auto-generated/>'
    output_dir: Path | None = None
    max_workers: int | None = None

    def __post_init__(self) -> None:
        if not self.indent or self.indent.strip(' \t'):
            raise SettingsError(f"indent must be made of spaces or tabs, got {self.indent!r}")

        if self.line_ending not in _LINE_ENDINGS:
            raise SettingsError(f"line_ending must be one of {_LINE_ENDINGS!r}, got {self.line_ending!r}")

        if not self.header.startswith('#') or '\n' in self.header:
            raise SettingsError("header must be a single comment line")

        if self.max_workers is not None and self.max_workers < 1:
            raise SettingsError("max_workers must be a positive integer")

    @classmethod
    def from_mapping(cls, table: dict[str, Any], root: Path | None = None) -> Self:
        """
        Build settings from a ``[tool.cfgloader]`` table.

        Parameters
        ----------
        table : dict
            The parsed table.
        root : Path, optional
            Directory relative ``output_dir`` values are resolved against.

        Raises
        ------
        SettingsError
            On unknown keys or invalid values.
        """
        known = {field.name for field in fields(cls)}
        unknown = sorted(set(table) - known)

        if unknown:
            raise SettingsError(f"unknown [tool.{TOOL_TABLE}] keys: {', '.join(unknown)}")

        values = dict(table)

        if values.get('output_dir') is not None:
            output_dir = Path(values['output_dir'])

            if root is not None and not output_dir.is_absolute():
                output_dir = root / output_dir

            values['output_dir'] = output_dir

        try:
            return cls(**values)
        except TypeError as error:
            raise SettingsError(str(error)) from error


def find_pyproject(start: Path | str | None = None) -> Path | None:
    """Return the nearest ``pyproject.toml`` at or above ``start`` (default cwd)."""
    directory = Path(start) if start is not None else Path.cwd()
    directory = directory.resolve()

    if directory.is_file():
        directory = directory.parent

    for candidate in (directory, *directory.parents):
        pyproject = candidate / PYPROJECT

        if pyproject.is_file():
            return pyproject

    return None


def load_settings(path: Path | str | None = None) -> GeneratorSettings:
    """
    Load generator settings.

    Parameters
    ----------
    path : Path or str, optional
        A ``pyproject.toml`` file, or a directory to search upward from.
        Defaults to the current working directory.

    Returns
    -------
    GeneratorSettings
        Settings from ``[tool.cfgloader]``, or defaults when there is no
        pyproject file or no such table.
    """
    if path is not None and Path(path).is_file():
        pyproject = Path(path)
    else:
        pyproject = find_pyproject(path)

    if pyproject is None:
        return GeneratorSettings()

    try:
        with pyproject.open(encoding='utf-8') as file:
            data = toml.load(file)
    except toml.TomlDecodeError as error:
        raise SettingsError(f"invalid {pyproject}: {error}") from error

    table = data.get('tool', {}).get(TOOL_TABLE, {})

    return GeneratorSettings.from_mapping(table, root=pyproject.parent)

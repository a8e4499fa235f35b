#  -*- coding: utf-8 -*-
"""
Batch generation.

``generate_all`` runs independent generation passes, optionally on a thread
pool. Each pass owns its ``GenerationContext``, so passes share no mutable
state. A failing class is reported and does not stop its siblings; a cancelled
class publishes nothing.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from ..errors import ConfigGenerationError, GenerationCancelled
from ..logging import get_logger
from ..node import NodeReach
from ..settings import GeneratorSettings
from .assembler import EmittedUnit, generate_source
from .context import CancellationToken
from .metadata import ObjectMetadata


logger = get_logger('generator')


@dataclass
class GenerationReport:
    """
    Outcome of a batch.

    Attributes
    ----------
    units : list of EmittedUnit
        Successfully generated units, in input order.
    failures : dict
        ``ConfigGenerationError`` by qualified class name.
    cancelled : list of str
        Qualified names of the classes whose pass was cancelled.
    written : list of Path
        Files written to the output directory, if any.
    """

    units: list[EmittedUnit] = field(default_factory=list)
    failures: dict[str, ConfigGenerationError] = field(default_factory=dict)
    cancelled: list[str] = field(default_factory=list)
    written: list[Path] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures and not self.cancelled


def _qualified_name(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


def generate_all(classes: Iterable[type],
                 output_dir: Path | str | None = None,
                 settings: GeneratorSettings | None = None,
                 token: CancellationToken | None = None,
                 max_workers: int | None = None) -> GenerationReport:
    """
    Generate the units of many config objects.

    Parameters
    ----------
    classes : iterable of type
        Config object classes (or plain classes with config fields).
    output_dir : Path or str, optional
        Where to write the units. Defaults to ``settings.output_dir``; nothing
        is written when both are unset.
    settings : GeneratorSettings, optional
    token : CancellationToken, optional
        Checked before every class and every field.
    max_workers : int, optional
        Thread pool size. Defaults to ``settings.max_workers``; ``1`` runs the
        passes sequentially.

    Returns
    -------
    GenerationReport
    """
    settings = settings if settings is not None else GeneratorSettings()
    classes = list(classes)

    output_dir = output_dir if output_dir is not None else settings.output_dir
    max_workers = max_workers if max_workers is not None else settings.max_workers

    # classes of the batch may hold fields of each other's types
    pending: dict[type, NodeReach | None] = {}

    for cls in classes:
        object_meta = getattr(cls, '__config_metadata__', None) or ObjectMetadata.build(cls)
        pending[cls] = object_meta.reach

    def run(cls: type) -> EmittedUnit | Exception:
        try:
            return generate_source(cls, settings=settings, token=token, pending=pending)

        except (ConfigGenerationError, GenerationCancelled) as error:
            return error

    if max_workers == 1:
        outcomes = [run(cls) for cls in classes]
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            outcomes = list(executor.map(run, classes))

    report = GenerationReport()

    for cls, outcome in zip(classes, outcomes):
        name = _qualified_name(cls)

        if isinstance(outcome, GenerationCancelled):
            logger.info("generation of %s cancelled", name)
            report.cancelled.append(name)

        elif isinstance(outcome, ConfigGenerationError):
            logger.warning("%s", outcome)
            report.failures[name] = outcome

        else:
            report.units.append(outcome)

            if output_dir is not None:
                report.written.append(outcome.write(output_dir))

    return report

# SPDX-License-Identifier: MIT
"""Generator protocol for build file generation.

Generators take a loaded Project and produce IDE build files in an
output directory, reporting which files changed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from vcxgen.core.project import Project


@dataclass
class ExportResult:
    """Files produced by one generate() call.

    Attributes:
        output_dir: Folder the files were written to.
        written: Files whose content changed and were rewritten.
        unchanged: Files left untouched because their content was current.
    """

    output_dir: Path
    written: list[Path] = field(default_factory=list)
    unchanged: list[Path] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        """True if any file was rewritten."""
        return bool(self.written)

    @property
    def files(self) -> list[Path]:
        return self.written + self.unchanged

    def record(self, path: Path, changed: bool) -> None:
        (self.written if changed else self.unchanged).append(path)


@runtime_checkable
class Generator(Protocol):
    """Protocol for build file generators."""

    @property
    def name(self) -> str:
        """Generator name (e.g., 'msvc')."""
        ...

    def generate(self, project: Project, output_dir: Path | None = None) -> ExportResult:
        """Generate build files for a project.

        Args:
            project: The project to generate for.
            output_dir: Directory to write output files to. Generators
                choose a default under the project root when omitted.
        """
        ...


class BaseGenerator:
    """Base class for generators with common functionality."""

    def __init__(self, name: str) -> None:
        """Initialize a generator.

        Args:
            name: Generator name.
        """
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def generate(self, project: Project, output_dir: Path | None = None) -> ExportResult:
        """Generate build files. Subclasses must implement."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name!r})"

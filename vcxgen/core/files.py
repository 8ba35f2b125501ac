# SPDX-License-Identifier: MIT
"""Project file tree.

The file tree is a read-only input: groups of file entries, each with a
compile flag. Files are classified by extension only; their contents are
never read.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import PureWindowsPath
from typing import TYPE_CHECKING, Any, Literal

from vcxgen.core.config import expect_type
from vcxgen.core.errors import ConfigurationError
from vcxgen.core.target import TARGET_KINDS, kind_for_file_tag

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

FileCategory = Literal["source", "header", "objc", "other"]

SOURCE_EXTENSIONS = frozenset({".cpp", ".cc", ".cxx", ".c"})
ASM_EXTENSIONS = frozenset({".s", ".asm"})
HEADER_EXTENSIONS = frozenset({".h", ".hpp", ".hxx", ".hh", ".inl"})
OBJC_EXTENSIONS = frozenset({".mm", ".m"})


def file_category(path: str) -> FileCategory:
    """Classify a file by its extension.

    Assembly files count as sources since MSBuild compiles them.
    """
    suffix = PureWindowsPath(path.replace("/", "\\")).suffix.lower()
    if suffix in SOURCE_EXTENSIONS or suffix in ASM_EXTENSIONS:
        return "source"
    if suffix in HEADER_EXTENSIONS:
        return "header"
    if suffix in OBJC_EXTENSIONS:
        return "objc"
    return "other"


@dataclass(frozen=True)
class FileEntry:
    """One file in the project tree.

    Attributes:
        path: Path relative to the project root, or absolute.
        compile: Whether the file is compiled (sources only).
        add_to_target: Whether the file is listed in the IDE project at all.
        target: Explicit target kind tag. When None the tag comes from
            the file name ("Plugin_VST3.cpp" belongs to the VST3 target).
    """

    path: str
    compile: bool = True
    add_to_target: bool = True
    target: str | None = None

    def __post_init__(self) -> None:
        if self.target is not None and self.target not in TARGET_KINDS:
            raise ConfigurationError(
                f"unknown target tag {self.target!r}", path=self.path
            )

    @property
    def name(self) -> str:
        return PureWindowsPath(self.path.replace("/", "\\")).name

    @property
    def stem(self) -> str:
        return PureWindowsPath(self.path.replace("/", "\\")).stem

    @property
    def category(self) -> FileCategory:
        return file_category(self.path)

    @property
    def target_kind(self) -> str:
        """The target kind this file is tagged for ("shared_code" if untagged)."""
        if self.target is not None:
            return self.target
        return kind_for_file_tag(self.stem) or "shared_code"


@dataclass(frozen=True)
class FileGroup:
    """A named group of entries and sub-groups."""

    name: str
    children: tuple[FileGroup | FileEntry, ...] = field(default_factory=tuple)

    def walk(self) -> Iterator[tuple[tuple[str, ...], FileEntry]]:
        """Yield (group path, entry) for every entry, depth first.

        The group path includes this group's name.
        """
        yield from self._walk(())

    def _walk(
        self, parents: tuple[str, ...]
    ) -> Iterator[tuple[tuple[str, ...], FileEntry]]:
        path = (*parents, self.name)
        for child in self.children:
            if isinstance(child, FileGroup):
                yield from child._walk(path)
            else:
                yield path, child

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FileGroup:
        """Build a group from stored settings.

        A child with a "children" key is a sub-group; a child with a
        "path" key is an entry; a bare string is a compiled entry.

        Raises:
            ConfigurationError: If a child has neither key, or a value has
                the wrong type.
        """
        if "name" not in data:
            raise ConfigurationError("file group is missing a 'name'")
        name = expect_type(data["name"], str, "name")
        children: list[FileGroup | FileEntry] = []
        for child in expect_type(data.get("children", []), list, f"{name}.children"):
            if isinstance(child, str):
                children.append(FileEntry(child))
            elif not isinstance(child, dict):
                raise ConfigurationError(
                    f"file group {name!r} has a {type(child).__name__} child, "
                    f"expected a path or an object"
                )
            elif "children" in child:
                children.append(cls.from_dict(child))
            elif "path" in child:
                target = child.get("target")
                if target is not None:
                    expect_type(target, str, "target", path=child["path"])
                children.append(
                    FileEntry(
                        path=expect_type(child["path"], str, f"{name}.path"),
                        compile=bool(child.get("compile", True)),
                        add_to_target=bool(child.get("add_to_target", True)),
                        target=target,
                    )
                )
            else:
                raise ConfigurationError(
                    f"file group {name!r} has a child with no 'path' or 'children'"
                )
        return cls(name=name, children=tuple(children))


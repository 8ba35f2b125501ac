# SPDX-License-Identifier: MIT
"""Target graph construction.

Decides how many targets a project exports to and how they depend on
each other. When several plugin formats share the same compiled code, a
single "Shared Code" static library is synthesized and every format
becomes a thin wrapper that links it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from typing import TYPE_CHECKING, overload

from vcxgen.core.errors import ConfigurationError
from vcxgen.core.target import (
    DISPLAY_NAMES,
    PLUGIN_KINDS,
    TARGET_KINDS,
    UNSUPPORTED_KINDS,
    TargetDescriptor,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from vcxgen.core.project import Project

logger = logging.getLogger(__name__)


class TargetGraph(Sequence[TargetDescriptor]):
    """Immutable, ordered set of targets for one export run.

    The shared-code target, when present, is always first. Every other
    target has at most one dependency edge, pointing at it.
    """

    def __init__(self, targets: Iterable[TargetDescriptor]) -> None:
        self._targets = tuple(targets)

    @overload
    def __getitem__(self, index: int) -> TargetDescriptor: ...

    @overload
    def __getitem__(self, index: slice) -> Sequence[TargetDescriptor]: ...

    def __getitem__(
        self, index: int | slice
    ) -> TargetDescriptor | Sequence[TargetDescriptor]:
        return self._targets[index]

    def __len__(self) -> int:
        return len(self._targets)

    def __iter__(self) -> Iterator[TargetDescriptor]:
        return iter(self._targets)

    def __repr__(self) -> str:
        names = ", ".join(t.name for t in self._targets)
        return f"TargetGraph([{names}])"

    @property
    def shared_code(self) -> TargetDescriptor | None:
        """The shared-code target, if the graph has one."""
        for target in self._targets:
            if target.is_shared_code:
                return target
        return None

    @property
    def wrappers(self) -> tuple[TargetDescriptor, ...]:
        """Targets that depend on the shared-code target."""
        return tuple(t for t in self._targets if t.is_wrapper)

    def has_kind(self, kind: str) -> bool:
        return any(t.kind == kind for t in self._targets)

    def find(self, kind: str) -> TargetDescriptor | None:
        for target in self._targets:
            if target.kind == kind:
                return target
        return None

    def solution_order(self) -> tuple[TargetDescriptor, ...]:
        """Order in which targets are listed in a solution.

        With a shared-code target, the standalone app goes first so that
        Visual Studio picks it as the startup project.
        """
        if self.shared_code is None:
            return self._targets
        first = [t for t in self._targets if t.kind == "standalone_plugin"]
        rest = [t for t in self._targets if t.kind != "standalone_plugin"]
        return tuple(first + rest)


def _declared_kinds(formats: Iterable[str]) -> list[str]:
    """Validate and de-duplicate declared formats, keeping their order."""
    kinds: list[str] = []
    for fmt in formats:
        if fmt not in TARGET_KINDS or fmt == "shared_code":
            raise ConfigurationError(f"unresolvable output format {fmt!r}")
        if fmt in UNSUPPORTED_KINDS:
            logger.warning(
                "Output format %s is not supported by Visual Studio, skipping",
                DISPLAY_NAMES[fmt],
            )
            continue
        if fmt not in kinds:
            kinds.append(fmt)
    return kinds


def build_target_graph(project: Project) -> TargetGraph:
    """Build the target graph for a project.

    Args:
        project: The project whose declared formats to export.

    Returns:
        The targets, shared-code first when present.

    Raises:
        ConfigurationError: If a format is unknown or no exportable
            format remains.

    Example:
        project.formats = ("vst3_plugin", "aax_plugin")
        graph = build_target_graph(project)
        [t.name for t in graph]   # ["Shared Code", "VST3", "AAX"]
    """
    kinds = _declared_kinds(project.formats)
    if not kinds:
        raise ConfigurationError(
            f"project {project.name!r} declares no output format this exporter can build"
        )

    sharing = [k for k in kinds if k in PLUGIN_KINDS]
    targets: list[TargetDescriptor] = []

    if sharing and len(sharing) != len(kinds):
        others = ", ".join(DISPLAY_NAMES[k] for k in kinds if k not in PLUGIN_KINDS)
        raise ConfigurationError(
            f"project {project.name!r} mixes plugin formats with {others}"
        )

    if len(sharing) > 1:
        shared = TargetDescriptor("shared_code", project.uid)
        targets.append(shared)
        targets.extend(
            TargetDescriptor(kind, project.uid, depends_on=shared) for kind in kinds
        )
    else:
        targets.extend(TargetDescriptor(kind, project.uid) for kind in kinds)

    graph = TargetGraph(targets)
    logger.debug("Target graph for %s: %r", project.name, graph)
    return graph

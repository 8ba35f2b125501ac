# SPDX-License-Identifier: MIT
"""File routing shared by the project and filter emitters.

Both documents of a target must list exactly the same files, with the
same paths and element kinds. Routing is done once per target here and
both emitters consume the result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from vcxgen.core.errors import PathResolutionError

if TYPE_CHECKING:
    from vcxgen.core.files import FileEntry
    from vcxgen.core.target import TargetDescriptor
    from vcxgen.generators.context import ExportContext

logger = logging.getLogger(__name__)

ItemKind = Literal["ClCompile", "ClInclude", "None"]

# Sources of the RTAS wrapper need the stdcall convention
STDCALL_PREFIX = "juce_audio_plugin_client_RTAS_"


@dataclass(frozen=True)
class RoutedFile:
    """A file as it appears in one target's documents.

    Attributes:
        entry: The file entry.
        include: Path relative to the target folder, Windows style.
        kind: MSBuild item element.
        filter: Virtual folder, e.g. "Source\\UI".
        excluded: Listed but excluded from the build.
        stdcall: Compiled with the stdcall calling convention.
    """

    entry: FileEntry
    include: str
    kind: ItemKind
    filter: str
    excluded: bool = False
    stdcall: bool = False


def claims(target: TargetDescriptor, entry: FileEntry, has_shared_code: bool) -> bool:
    """Check whether a target lists a file.

    Without a shared-code target, a target lists untagged files and files
    tagged for its own kind. With one, the shared-code target lists the
    untagged files and each wrapper lists only the compiled files tagged
    for its kind.
    """
    if not entry.add_to_target:
        return False
    tag = entry.target_kind
    if not has_shared_code:
        return tag in ("shared_code", target.kind)
    if target.is_shared_code:
        return tag == "shared_code"
    return tag == target.kind and entry.compile


def route_files(context: ExportContext, target: TargetDescriptor) -> list[RoutedFile]:
    """Route every file of the project tree for one target.

    Objective-C files are skipped. The order is the tree order.

    Raises:
        PathResolutionError: If a file cannot be expressed relative to
            the target folder. The error names the target.
    """
    has_shared_code = context.graph.shared_code is not None
    routed: list[RoutedFile] = []

    for group in context.project.groups:
        for group_path, entry in group.walk():
            if not claims(target, entry, has_shared_code):
                continue

            category = entry.category
            if category == "objc":
                logger.debug("Skipping %s for %s", entry.path, target.name)
                continue

            try:
                include = context.rebase(entry.path)
            except PathResolutionError as e:
                raise PathResolutionError(e.message, target=target.name, path=entry.path) from e

            folder = "\\".join(group_path)
            if category == "source":
                routed.append(
                    RoutedFile(
                        entry,
                        include,
                        "ClCompile",
                        folder,
                        excluded=not entry.compile,
                        stdcall=entry.stem.lower().startswith(STDCALL_PREFIX.lower()),
                    )
                )
            elif category == "header":
                routed.append(RoutedFile(entry, include, "ClInclude", folder))
            else:
                routed.append(RoutedFile(entry, include, "None", folder))

    return routed

# SPDX-License-Identifier: MIT
"""Filter (.vcxproj.filters) emitter.

The filters document gives Visual Studio's Solution Explorer its folder
view. It lists the same routed files as the project document, each with
the virtual folder it belongs to.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from vcxgen.core.paths import prepend_dot
from vcxgen.core.target import make_guid
from vcxgen.generators.routing import route_files
from vcxgen.generators.xmlnode import MSBUILD_NAMESPACE, Node

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from vcxgen.core.target import TargetDescriptor
    from vcxgen.generators.context import ExportContext
    from vcxgen.generators.routing import RoutedFile

# Folder the generated icon and resource script are filed under
GENERATED_FILES_FILTER = "JUCE Library Code"


def filter_folders(folders: Iterable[str]) -> list[str]:
    """Expand folder paths to every folder that must be declared.

    Each path contributes itself and all of its parents, parents first.
    The result keeps first-seen order and has no duplicates.

    Example:
        >>> filter_folders(["Source\\\\UI", "Source"])
        ['Source', 'Source\\\\UI']
    """
    declared: list[str] = []
    for folder in folders:
        if not folder:
            continue
        parts = folder.split("\\")
        for i in range(1, len(parts) + 1):
            path = "\\".join(parts[:i])
            if path not in declared:
                declared.append(path)
    return declared


def filter_guid(context: ExportContext, folder: str) -> str:
    return make_guid(context.project.uid, "filter", folder)


def _add_item(group: Node, kind: str, include: str, folder: str) -> None:
    item = group.add(kind, Include=include)
    if folder:
        item.add("Filter", folder)


def emit_filters(
    context: ExportContext,
    target: TargetDescriptor,
    files: Sequence[RoutedFile] | None = None,
) -> Node:
    """Build the filters document of one target.

    Args:
        context: The export context.
        target: The target to emit.
        files: The target's routed files, as given to emit_project().

    Returns:
        The root <Project> node.
    """
    if files is None:
        files = route_files(context, target)

    folders = filter_folders(f.filter for f in files)
    if (context.icon_file or context.rc_file) and GENERATED_FILES_FILTER not in folders:
        folders.append(GENERATED_FILES_FILTER)

    project = Node(
        "Project",
        ToolsVersion=context.profile.tools_version,
        xmlns=MSBUILD_NAMESPACE,
    )

    declarations = project.add("ItemGroup")
    for folder in folders:
        declarations.add("Filter", Include=folder).add(
            "UniqueIdentifier", filter_guid(context, folder)
        )

    sources = project.add("ItemGroup")
    headers = project.add("ItemGroup")
    others = Node("ItemGroup")
    groups = {"ClCompile": sources, "ClInclude": headers, "None": others}
    for routed in files:
        _add_item(groups[routed.kind], routed.kind, routed.include, routed.filter)

    if context.icon_file:
        _add_item(others, "None", prepend_dot(context.icon_file), GENERATED_FILES_FILTER)
    if others.children:
        project.add(others)

    if context.rc_file:
        _add_item(
            project.add("ItemGroup"),
            "ResourceCompile",
            prepend_dot(context.rc_file),
            GENERATED_FILES_FILTER,
        )

    return project

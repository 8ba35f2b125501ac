# SPDX-License-Identifier: MIT
"""Solution (.sln) emitter."""

from __future__ import annotations

from typing import TYPE_CHECKING

from vcxgen.generators.output import EOL_WINDOWS

if TYPE_CHECKING:
    from collections.abc import Sequence

    from vcxgen.core.config import BuildConfiguration
    from vcxgen.core.graph import TargetGraph
    from vcxgen.generators.context import ExportContext

# Project type GUID of a Visual C++ project
VCXPROJ_TYPE_GUID = "{8BC9CEB8-8B4A-11D0-8D11-00A0C91BC942}"

SOLUTION_FORMAT_VERSION = "11.00"


def emit_solution(
    context: ExportContext,
    graph: TargetGraph,
    configurations: Sequence[BuildConfiguration],
) -> str:
    """Render the solution that lists every target of the graph.

    Targets appear in graph.solution_order(). A wrapper gets a
    ProjectDependencies section naming the shared-code target, so the
    library always builds first.

    Returns:
        The solution text, with CRLF line endings.
    """
    lines = [
        f"Microsoft Visual Studio Solution File, Format Version {SOLUTION_FORMAT_VERSION}",
        context.profile.solution_comment,
        "",
    ]

    targets = graph.solution_order()
    for target in targets:
        lines.append(
            f'Project("{VCXPROJ_TYPE_GUID}") = '
            f'"{context.project.name} - {target.name}", '
            f'"{context.project_file_name(target, ".vcxproj")}", '
            f'"{target.guid}"'
        )
        if target.depends_on is not None:
            lines += [
                "\tProjectSection(ProjectDependencies) = postProject",
                f"\t\t{target.depends_on.guid} = {target.depends_on.guid}",
                "\tEndProjectSection",
            ]
        lines.append("EndProject")

    lines += ["Global", "\tGlobalSection(SolutionConfigurationPlatforms) = preSolution"]
    lines += [f"\t\t{c.msvc_name} = {c.msvc_name}" for c in configurations]
    lines += ["\tEndGlobalSection", "\tGlobalSection(ProjectConfigurationPlatforms) = postSolution"]
    for target in targets:
        for config in configurations:
            name = config.msvc_name
            lines.append(f"\t\t{target.guid}.{name}.ActiveCfg = {name}")
            lines.append(f"\t\t{target.guid}.{name}.Build.0 = {name}")
    lines += [
        "\tEndGlobalSection",
        "\tGlobalSection(SolutionProperties) = preSolution",
        "\t\tHideSolutionNode = FALSE",
        "\tEndGlobalSection",
        "EndGlobal",
        "",
    ]
    return EOL_WINDOWS.join(lines)

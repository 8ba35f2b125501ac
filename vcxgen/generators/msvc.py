# SPDX-License-Identifier: MIT
"""Visual Studio generator.

Exports a project to a Visual Studio build tree: one .vcxproj and
.vcxproj.filters per target, one .sln listing them all, plus the icon
and resource script.

Everything that can fail on bad input (the target graph, configurations,
toolset, path rebasing, document formatting) is done in memory first.
Files are only written once every document has been built, and each is
written only when its content changed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import TYPE_CHECKING

from vcxgen.core.config import validate_configurations
from vcxgen.core.errors import DocumentWriteError
from vcxgen.core.graph import build_target_graph
from vcxgen.core.paths import is_absolute, windows_style
from vcxgen.generators.context import ICON_FILE_NAME, RC_FILE_NAME, ExportContext
from vcxgen.generators.filters import emit_filters
from vcxgen.generators.generator import BaseGenerator, ExportResult
from vcxgen.generators.output import EOL_WINDOWS, OutputFile, overwrite_if_different
from vcxgen.generators.resources import build_resource_pack, render_rc_file
from vcxgen.generators.routing import route_files
from vcxgen.generators.solution import emit_solution
from vcxgen.generators.vcxproj import emit_project
from vcxgen.generators.xmlnode import XmlFormatter
from vcxgen.toolsets.profiles import get_profile

if TYPE_CHECKING:
    from collections.abc import Mapping

    from vcxgen.core.project import Project
    from vcxgen.core.target import TargetDescriptor
    from vcxgen.generators.xmlnode import Node

logger = logging.getLogger(__name__)


@dataclass
class _Document:
    path: Path
    text: str | None = None
    data: bytes | None = None

    def commit(self) -> bool:
        if self.data is not None:
            changed = overwrite_if_different(self.path, self.data)
            if changed:
                logger.info("Wrote %s", self.path)
            else:
                logger.debug("Unchanged %s", self.path)
            return changed
        out = OutputFile(self.path, EOL_WINDOWS)
        out.write(self.text or "")
        return out.commit()


class MsvcGenerator(BaseGenerator):
    """Generator that produces Visual Studio solutions and projects.

    Example:
        project = load_project("Gain.json")
        result = MsvcGenerator("vs2017").generate(project)
        # Builds/VisualStudio2017/Gain.sln, Gain_SharedCode.vcxproj, ...

    Args:
        profile_tag: Visual Studio profile to generate for. When None, the
            PROFILE variable or the project's exporter setting decides.
        variables: KEY=value overrides for the exporter settings
            (PROFILE, TOOLSET, TARGET_PLATFORM, TARGET_FOLDER, IPP).
    """

    def __init__(
        self,
        profile_tag: str | None = None,
        variables: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__("msvc")
        self.profile_tag = profile_tag
        self.variables = dict(variables or {})
        self._formatter = XmlFormatter()

    def create_context(self, project: Project, output_dir: Path | None = None) -> ExportContext:
        """Resolve settings, the target graph and resources for a project.

        Nothing is written.

        Raises:
            ConfigurationError: If the project cannot be exported.
        """
        settings = project.exporter.with_overrides(self.variables)
        if self.profile_tag:
            settings = replace(settings, profile=self.profile_tag)
        profile = get_profile(settings.profile)

        validate_configurations(project.configurations)
        graph = build_target_graph(project)
        toolset = settings.resolved_toolset(profile)

        if output_dir is not None:
            target_folder = windows_style(output_dir)
        else:
            target_folder = windows_style(settings.resolved_target_folder(profile))
        if not is_absolute(target_folder):
            target_folder = target_folder.rstrip("\\")

        pack = build_resource_pack(project)
        return ExportContext(
            project=project,
            profile=profile,
            settings=settings,
            graph=graph,
            target_folder=target_folder,
            platform_toolset=toolset,
            target_platform_version=settings.resolved_target_platform(profile),
            icon_file=ICON_FILE_NAME if pack is not None and pack.icon is not None else None,
            rc_file=RC_FILE_NAME if pack is not None else None,
            resources=pack,
        )

    def _format(self, node: Node, path: Path, target: TargetDescriptor) -> str:
        try:
            return self._formatter.format(node)
        except ValueError as e:
            raise DocumentWriteError(
                "failed to serialize document", path=path, cause=e, target=target.name
            ) from e

    def build_documents(self, context: ExportContext) -> list[_Document]:
        """Build every artifact of an export in memory, in write order.

        Raises:
            PathResolutionError: If a path cannot be rebased.
            DocumentWriteError: If a document cannot be serialized.
        """
        out_dir = context.output_dir
        configurations = context.project.configurations
        documents: list[_Document] = []

        pack = context.resources
        if pack is not None:
            if pack.icon is not None:
                documents.append(_Document(out_dir / ICON_FILE_NAME, data=pack.icon))
            rc_text = render_rc_file(
                pack, context.icon_file, context.settings.rc_include_macro
            )
            documents.append(_Document(out_dir / RC_FILE_NAME, text=rc_text))

        for target in context.graph:
            files = route_files(context, target)
            project_path = out_dir / context.project_file_name(target, ".vcxproj")
            filters_path = out_dir / context.project_file_name(target, ".vcxproj.filters")
            project_doc = emit_project(context, target, configurations, files)
            filters_doc = emit_filters(context, target, files)
            documents.append(
                _Document(project_path, text=self._format(project_doc, project_path, target))
            )
            documents.append(
                _Document(filters_path, text=self._format(filters_doc, filters_path, target))
            )

        solution_path = out_dir / context.project_file_name(None, ".sln")
        documents.append(
            _Document(solution_path, text=emit_solution(context, context.graph, configurations))
        )
        return documents

    def generate(self, project: Project, output_dir: Path | None = None) -> ExportResult:
        """Generate the Visual Studio build tree for a project.

        Args:
            project: The project to export.
            output_dir: Folder to write to, relative to the project root
                or absolute. Defaults to Builds/<profile folder>.

        Returns:
            The written and unchanged files.

        Raises:
            ConfigurationError: If the project cannot be exported. No file
                is written in that case.
            PathResolutionError: If a path cannot be rebased. No file is
                written in that case.
            DocumentWriteError: If a file cannot be written.
        """
        context = self.create_context(project, output_dir)
        logger.info(
            "Generating %s projects for %s: %s",
            context.profile.display_name,
            project.name,
            ", ".join(t.name for t in context.graph),
        )
        documents = self.build_documents(context)

        result = ExportResult(context.output_dir)
        for document in documents:
            result.record(document.path, document.commit())

        logger.info(
            "%d files written, %d unchanged in %s",
            len(result.written),
            len(result.unchanged),
            result.output_dir,
        )
        return result

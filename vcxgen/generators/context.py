# SPDX-License-Identifier: MIT
"""Export context shared by all Visual Studio emitters.

An ExportContext is built once per export run, after the target graph
and the resource pack are known, and is passed explicitly to every
emitter. It answers the path questions every document needs: where the
target folder is, how a project path looks from there, and where each
target's binaries and intermediates go.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from vcxgen.core.defines import merge_defines
from vcxgen.core.paths import (
    escape_c_string,
    is_absolute,
    prepend_dot,
    prepend_if_not_absolute,
    quoted,
    rebase,
    windows_path,
    windows_style,
)

if TYPE_CHECKING:
    from vcxgen.core.config import BuildConfiguration
    from vcxgen.core.graph import TargetGraph
    from vcxgen.core.project import Project
    from vcxgen.core.target import TargetDescriptor
    from vcxgen.generators.resources import ResourcePack
    from vcxgen.toolsets.profiles import ExporterSettings, ToolsetProfile

ICON_FILE_NAME = "icon.ico"
RC_FILE_NAME = "resources.rc"

_TOKEN = re.compile(r"\$\{(\w+)\}")


@dataclass(frozen=True)
class ExportContext:
    """Resolved, read-only state for one export run.

    Attributes:
        project: The project being exported.
        profile: The Visual Studio profile.
        settings: Exporter settings with command-line overrides applied.
        graph: The target graph.
        target_folder: Output folder, relative to the project root or
            absolute, Windows style.
        platform_toolset: Resolved PlatformToolset.
        target_platform_version: Resolved WindowsTargetPlatformVersion.
        icon_file: Name of the generated icon in the target folder, or
            None when there is no icon.
        rc_file: Name of the generated resource script, or None when
            no resource script is written.
        resources: The icon and version resources, or None for a
            project without resources.
    """

    project: Project
    profile: ToolsetProfile
    settings: ExporterSettings
    graph: TargetGraph
    target_folder: str
    platform_toolset: str
    target_platform_version: str
    icon_file: str | None = None
    rc_file: str | None = None
    resources: ResourcePack | None = None

    @property
    def output_dir(self) -> Path:
        """The target folder on disk."""
        return self.project.root_dir / Path(self.target_folder.replace("\\", "/"))

    def _target_dir(self) -> str:
        return str(windows_path(self.project.root_dir) / windows_path(self.target_folder))

    def rebase(self, path: str) -> str:
        """Express a project-relative path relative to the target folder.

        Raises:
            PathResolutionError: If the path cannot be expressed there.
        """
        return rebase(path, windows_path(self.project.root_dir), self._target_dir())

    def rebase_quoted(self, path: str) -> str:
        """Rebased path, C-escaped and quoted for use in a define or script."""
        return quoted(escape_c_string(self.rebase(path)))

    def replace_tokens(self, config: BuildConfiguration, text: str) -> str:
        """Replace ${NAME} tokens with the project and configuration defines.

        Unknown tokens are left as they are.
        """
        defines = merge_defines(self.project.defines, config.defines)

        def substitute(match: re.Match[str]) -> str:
            return defines.get(match.group(1), match.group(0))

        return _TOKEN.sub(substitute, text)

    def out_dir_file(self, config: BuildConfiguration, file: str) -> str:
        return prepend_if_not_absolute(self.replace_tokens(config, file), "$(OutDir)\\")

    def int_dir_file(self, config: BuildConfiguration, file: str) -> str:
        return prepend_if_not_absolute(self.replace_tokens(config, file), "$(IntDir)\\")

    def project_file_name(self, target: TargetDescriptor | None, extension: str) -> str:
        """Name of a generated file, e.g. "Gain_SharedCode.vcxproj".

        With no target, the name of the solution-level file.
        """
        name = self.project.filename_root
        if target is not None:
            name += "_" + target.name.replace(" ", "")
        return name + extension

    def solution_target_path(self, config: BuildConfiguration) -> str:
        """Folder the configuration's binaries go to, as MSBuild sees it."""
        binary_path = config.target_binary_path.strip()
        if not binary_path:
            return "$(SolutionDir)$(Platform)\\$(Configuration)"
        if is_absolute(binary_path):
            return windows_style(binary_path)
        return prepend_dot(self.rebase(binary_path))

    def config_target_path(self, target: TargetDescriptor, config: BuildConfiguration) -> str:
        """Per-target output folder (OutDir without the trailing separator)."""
        return f"{self.solution_target_path(config)}\\{target.name}"

    def intermediates_path(self, target: TargetDescriptor, config: BuildConfiguration) -> str:
        """Per-target intermediate folder (IntDir without the trailing separator)."""
        int_dir = windows_style(config.intermediates_path or "$(Platform)\\$(Configuration)")
        if not int_dir.endswith("\\"):
            int_dir += "\\"
        return int_dir + target.name

    def binary_name(self, target: TargetDescriptor, config: BuildConfiguration) -> str:
        """Binary file name with the target's suffix, e.g. "Gain.vst3"."""
        return config.output_filename(target.suffix, True)

    def output_file_path(self, target: TargetDescriptor, config: BuildConfiguration) -> str:
        return self.out_dir_file(config, self.binary_name(target, config))

    def use_runtime_dll(self, config: BuildConfiguration) -> bool:
        """Whether to link the DLL C runtime.

        When the configuration leaves it open, AAX and RTAS builds need the
        DLL runtime; everything else links it statically.
        """
        if config.use_runtime_lib_dll is not None:
            return config.use_runtime_lib_dll
        return self.graph.has_kind("aax_plugin") or self.graph.has_kind("rtas_plugin")

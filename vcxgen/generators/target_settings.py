# SPDX-License-Identifier: MIT
"""Per-target-kind build settings.

Plugin formats each need a few extra settings: SDK paths as defines,
extra include folders, linker switches, and build steps that package
or install the binary. They are looked up here by target kind, each
entry a pure function of (context, target, configuration).
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from vcxgen.core.paths import escape_c_string, prepend_dot, quoted

if TYPE_CHECKING:
    from vcxgen.core.config import BuildConfiguration
    from vcxgen.core.target import TargetDescriptor
    from vcxgen.generators.context import ExportContext

# Include folders inside the RTAS SDK
RTAS_SEARCH_PATHS = (
    "AlturaPorts/TDMPlugins/PluginLibrary/EffectClasses",
    "AlturaPorts/TDMPlugins/PluginLibrary/ProcessClasses",
    "AlturaPorts/TDMPlugins/PluginLibrary/ProcessClasses/Interfaces",
    "AlturaPorts/TDMPlugins/PluginLibrary/Utilities",
    "AlturaPorts/TDMPlugins/PluginLibrary/RTASP_Adapt",
    "AlturaPorts/TDMPlugins/PluginLibrary/CoreClasses",
    "AlturaPorts/TDMPlugins/PluginLibrary/Controls",
    "AlturaPorts/TDMPlugins/PluginLibrary/Meters",
    "AlturaPorts/TDMPlugins/PluginLibrary/ViewClasses",
    "AlturaPorts/TDMPlugins/PluginLibrary/DSPClasses",
    "AlturaPorts/TDMPlugins/PluginLibrary/Interfaces",
    "AlturaPorts/TDMPlugins/common",
    "AlturaPorts/TDMPlugins/common/Platform",
    "AlturaPorts/TDMPlugins/common/Macros",
    "AlturaPorts/TDMPlugins/SignalProcessing/Public",
    "AlturaPorts/TDMPlugIns/DSPManager/Interfaces",
    "AlturaPorts/SADriver/Interfaces",
    "AlturaPorts/DigiPublic/Interfaces",
    "AlturaPorts/DigiPublic",
    "AlturaPorts/Fic/Interfaces/DAEClient",
    "AlturaPorts/NewFileLibs/Cmn",
    "AlturaPorts/NewFileLibs/DOA",
    "AlturaPorts/AlturaSource/PPC_H",
    "AlturaPorts/AlturaSource/AppSupport",
    "AvidCode/AVX2sdk/AVX/avx2/avx2sdk/inc",
    "xplat/AVX/avx2/avx2sdk/inc",
)

# System DLLs an RTAS plugin must delay-load
RTAS_DELAY_LOAD_DLLS = (
    "DAE.dll",
    "DigiExt.dll",
    "DSI.dll",
    "PluginLib.dll",
    "DSPManager.dll",
    "DSPManagerClientLib.dll",
    "RTASClientLib.dll",
)

RTAS_MODULE_DEFINITION = "juce_audio_plugin_client/RTAS/juce_RTAS_WinExports.def"


@dataclass(frozen=True)
class ExtraSettings:
    """Settings a target kind adds on top of the project's own.

    Attributes:
        defines: Extra preprocessor defines.
        search_paths: Extra include folders, already relative to the
            target folder.
        link_flags: Extra linker switches.
        delay_load_dlls: DLLs to delay-load, "; " separated.
        module_definition_file: Default .def file when the configuration
            names none.
        pre_build: Synthesized pre-build commands.
        post_build: Synthesized post-build commands.
    """

    defines: dict[str, str] = field(default_factory=dict)
    search_paths: tuple[str, ...] = ()
    link_flags: str = ""
    delay_load_dlls: str = ""
    module_definition_file: str = ""
    pre_build: str = ""
    post_build: str = ""


SettingsFunction = Callable[
    ["ExportContext", "TargetDescriptor", "BuildConfiguration"], ExtraSettings
]


def _copy_step(location: str | None) -> str:
    return f'copy /Y "$(OutDir)$(TargetFileName)" "{location}\\$(TargetFileName)"'


def _aax_bundle_dirs(
    context: ExportContext, config: BuildConfiguration, force_suffix: bool
) -> tuple[str, str, str, str]:
    """(output name, bundle dir, Contents dir, architecture dir) of an AAX bundle."""
    output_filename = config.output_filename(".aaxplugin", force_suffix)
    bundle_dir = context.out_dir_file(config, output_filename)
    contents = bundle_dir + "\\Contents"
    arch_dir = contents + "\\" + ("x64" if config.is_64bit else "Win32")
    return output_filename, bundle_dir, contents, arch_dir


def _aax_icon(context: ExportContext) -> str:
    if context.icon_file:
        return quoted(escape_c_string(context.icon_file))
    return context.rebase_quoted(context.project.sdk_path("aax") + "/Utilities/PlugIn.ico")


def aax_settings(
    context: ExportContext, target: TargetDescriptor, config: BuildConfiguration
) -> ExtraSettings:
    """AAX: SDK library define, bundle folders and the packaging script."""
    sdk = context.project.sdk_path("aax")

    _, bundle_dir, contents, arch_dir = _aax_bundle_dirs(context, config, False)
    pre_build = "".join(
        f'if not exist "{folder}" mkdir "{folder}"\r\n'
        for folder in (bundle_dir, contents, arch_dir)
    )

    output_filename, bundle_dir, _, arch_dir = _aax_bundle_dirs(context, config, True)
    executable = arch_dir + "\\" + output_filename
    post_build = (
        f"copy /Y {quoted(context.output_file_path(target, config))} {quoted(executable)}"
        f"\r\ncall {context.rebase_quoted(sdk + '/Utilities/CreatePackage.bat')}"
        f" {quoted(arch_dir)} {_aax_icon(context)}"
    )
    if config.plugin_binary_copy_step:
        install_dir = f"{config.aax_binary_location}\\{output_filename}\\"
        post_build += f"\r\nxcopy {quoted(bundle_dir)} {quoted(install_dir)} /E /Y /H /K"

    return ExtraSettings(
        defines={"JucePlugin_AAXLibs_path": context.rebase_quoted(sdk + "/Libs")},
        pre_build=pre_build,
        post_build=post_build,
    )


def rtas_settings(
    context: ExportContext, target: TargetDescriptor, config: BuildConfiguration
) -> ExtraSettings:
    """RTAS: SDK include folders, delay-loaded DLLs and the exports file."""
    sdk = context.project.sdk_path("rtas")
    module_def = f"{context.project.plugin_client_module}/{RTAS_MODULE_DEFINITION}"
    return ExtraSettings(
        defines={"JucePlugin_WinBag_path": context.rebase_quoted(sdk + "/WinBag")},
        search_paths=tuple(context.rebase_quoted(f"{sdk}/{p}") for p in RTAS_SEARCH_PATHS),
        link_flags="/FORCE:multiple",
        delay_load_dlls="; ".join(RTAS_DELAY_LOAD_DLLS),
        module_definition_file=prepend_dot(context.rebase(module_def)),
        post_build=(
            _copy_step(config.rtas_binary_location) if config.plugin_binary_copy_step else ""
        ),
    )


def vst_settings(
    context: ExportContext, target: TargetDescriptor, config: BuildConfiguration
) -> ExtraSettings:
    if not config.plugin_binary_copy_step:
        return ExtraSettings()
    return ExtraSettings(post_build=_copy_step(config.vst_binary_location))


def vst3_settings(
    context: ExportContext, target: TargetDescriptor, config: BuildConfiguration
) -> ExtraSettings:
    if not config.plugin_binary_copy_step:
        return ExtraSettings()
    return ExtraSettings(post_build=_copy_step(config.vst3_binary_location))


def shared_code_settings(
    context: ExportContext, target: TargetDescriptor, config: BuildConfiguration
) -> ExtraSettings:
    return ExtraSettings(defines={"JUCE_SHARED_CODE": "1"})


def no_settings(
    context: ExportContext, target: TargetDescriptor, config: BuildConfiguration
) -> ExtraSettings:
    return ExtraSettings()


SETTINGS_BY_KIND: dict[str, SettingsFunction] = {
    "shared_code": shared_code_settings,
    "vst_plugin": vst_settings,
    "vst3_plugin": vst3_settings,
    "aax_plugin": aax_settings,
    "rtas_plugin": rtas_settings,
}


def extra_settings(
    context: ExportContext, target: TargetDescriptor, config: BuildConfiguration
) -> ExtraSettings:
    """Look up the extra settings for a target in one configuration."""
    return SETTINGS_BY_KIND.get(target.kind, no_settings)(context, target, config)

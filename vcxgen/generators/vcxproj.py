# SPDX-License-Identifier: MIT
"""MSBuild project (.vcxproj) emitter.

Builds the XML tree of one target's project file across all build
configurations. Emission is pure: the tree is returned and written later
by the generator, so a failure here never leaves a half-written file.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from vcxgen.core.config import OptimisationLevel
from vcxgen.core.defines import format_defines, merge_defines
from vcxgen.core.paths import prepend_dot, windows_style
from vcxgen.generators.routing import route_files
from vcxgen.generators.target_settings import ExtraSettings, extra_settings
from vcxgen.generators.xmlnode import MSBUILD_NAMESPACE, Node

if TYPE_CHECKING:
    from collections.abc import Sequence

    from vcxgen.core.config import BuildConfiguration
    from vcxgen.core.target import TargetDescriptor
    from vcxgen.generators.context import ExportContext
    from vcxgen.generators.routing import RoutedFile

logger = logging.getLogger(__name__)

PROJECT_FILE_VERSION = "10.0.30319.1"

OPTIMISATION_TOKENS: dict[OptimisationLevel, str] = {
    OptimisationLevel.OFF: "Disabled",
    OptimisationLevel.MIN_SIZE: "MinSpace",
    OptimisationLevel.MAX_SPEED: "MaxSpeed",
    OptimisationLevel.FULL: "Full",
}


def condition(config: BuildConfiguration) -> str:
    """MSBuild condition selecting one configuration."""
    return f"'$(Configuration)|$(Platform)'=='{config.msvc_name}'"


def runtime_library(use_dll: bool, is_debug: bool) -> str:
    if use_dll:
        return "MultiThreadedDebugDLL" if is_debug else "MultiThreadedDLL"
    return "MultiThreadedDebug" if is_debug else "MultiThreaded"


def _clean(items: Sequence[str]) -> list[str]:
    """Strip items, dropping blanks and duplicates but keeping order."""
    result: list[str] = []
    for item in items:
        item = item.strip()
        if item and item not in result:
            result.append(item)
    return result


def _join_steps(user: str, extra: str) -> str:
    return user + ("\r\n" if user and extra else "") + extra


def preprocessor_defines(
    context: ExportContext,
    target: TargetDescriptor,
    config: BuildConfiguration,
    extra: ExtraSettings,
) -> dict[str, str]:
    """Merge the defines for one target and configuration.

    Sources are merged in this order, later ones winning: base defines,
    module defines, target-kind defines, then the project's and the
    configuration's own defines.
    """
    base: dict[str, str] = {"_CRT_SECURE_NO_WARNINGS": ""}
    if context.project.is_console_app:
        base["_CONSOLE"] = ""
    base["WIN32"] = ""
    base["_WINDOWS"] = ""
    if config.is_debug:
        base["DEBUG"] = ""
        base["_DEBUG"] = ""
    else:
        base["NDEBUG"] = ""

    kind = dict(extra.defines)
    if target.file_type in ("static_library", "shared_library"):
        kind["_LIB"] = ""

    return merge_defines(
        base,
        context.project.all_module_defines(),
        kind,
        context.project.defines,
        config.defines,
    )


def header_search_paths(
    context: ExportContext, config: BuildConfiguration, extra: ExtraSettings
) -> list[str]:
    paths = [context.rebase(p) for p in context.project.module_paths]
    paths += context.settings.header_search_paths
    paths += config.header_search_paths
    paths = [context.replace_tokens(config, p) for p in _clean(paths)]
    return [*paths, *extra.search_paths, "%(AdditionalIncludeDirectories)"]


def library_search_paths(
    context: ExportContext, target: TargetDescriptor, config: BuildConfiguration
) -> list[str]:
    """Library folders for the LibraryPath property.

    Wrappers also search the shared-code target's output folder.
    """
    paths = _clean(config.library_search_paths)
    if target.depends_on is not None:
        paths.append(context.config_target_path(target.depends_on, config))
    return paths


def link_libraries(
    context: ExportContext, target: TargetDescriptor, config: BuildConfiguration
) -> list[str]:
    """Libraries to link: external, module, then the shared-code library."""
    libraries = context.settings.external_library_list()
    libraries += context.project.module_library_names()
    if target.depends_on is not None:
        libraries.append(context.binary_name(target.depends_on, config))
    return libraries


def _add_configurations(project: Node, context: ExportContext, target: TargetDescriptor,
                        configurations: Sequence[BuildConfiguration]) -> None:
    group = project.add("ItemGroup", Label="ProjectConfigurations")
    for config in configurations:
        item = group.add("ProjectConfiguration", Include=config.msvc_name)
        item.add("Configuration", config.name)
        item.add("Platform", config.architecture)

    globals_group = project.add("PropertyGroup", Label="Globals")
    globals_group.add("ProjectGuid", target.guid)

    project.add("Import", Project="$(VCTargetsPath)\\Microsoft.Cpp.Default.props")

    for config in configurations:
        props = project.add("PropertyGroup", Condition=condition(config), Label="Configuration")
        props.add("ConfigurationType", target.configuration_type)
        props.add("UseOfMfc", "false")
        props.add("WholeProgramOptimization", "true" if config.link_time_optimisation else "false")
        if config.character_set:
            props.add("CharacterSet", config.character_set)
        if config.link_incremental:
            props.add("LinkIncremental", "true")
        if config.is_64bit:
            props.add("PlatformToolset", context.platform_toolset)

    project.add("Import", Project="$(VCTargetsPath)\\Microsoft.Cpp.props")
    project.add("ImportGroup", Label="ExtensionSettings")
    sheets = project.add("ImportGroup", Label="PropertySheets")
    sheets.add(
        "Import",
        Project="$(UserRootDir)\\Microsoft.Cpp.$(Platform).user.props",
        Condition="exists('$(UserRootDir)\\Microsoft.Cpp.$(Platform).user.props')",
        Label="LocalAppDataPlatform",
    )
    project.add("PropertyGroup", Label="UserMacros")


def _add_global_properties(project: Node, context: ExportContext, target: TargetDescriptor,
                           configurations: Sequence[BuildConfiguration]) -> None:
    props = project.add("PropertyGroup")
    props.add("_ProjectFileVersion", PROJECT_FILE_VERSION)
    props.add("TargetExt", target.suffix)

    for config in configurations:
        cond = condition(config)
        out_dir = context.config_target_path(target, config)
        if out_dir:
            props.add("OutDir", windows_style(out_dir) + "\\", Condition=cond)
        props.add("IntDir", context.intermediates_path(target, config) + "\\", Condition=cond)
        props.add("TargetName", config.output_filename("", False), Condition=cond)
        props.add("GenerateManifest", "true" if config.generate_manifest else "false",
                  Condition=cond)
        lib_paths = library_search_paths(context, target, config)
        if lib_paths:
            props.add("LibraryPath", "$(LibraryPath);" + ";".join(lib_paths), Condition=cond)


def _add_compile(group: Node, context: ExportContext, target: TargetDescriptor,
                 config: BuildConfiguration, extra: ExtraSettings) -> None:
    cl = group.add("ClCompile")
    cl.add("Optimization", OPTIMISATION_TOKENS[config.optimisation_level])
    if config.is_debug or config.generate_debug_symbols:
        cl.add("DebugInformationFormat", config.debug_information_format or "")

    cl.add("AdditionalIncludeDirectories", ";".join(header_search_paths(context, config, extra)))
    defines = preprocessor_defines(context, target, config, extra)
    cl.add("PreprocessorDefinitions", format_defines(defines) + ";%(PreprocessorDefinitions)")
    cl.add("RuntimeLibrary", runtime_library(context.use_runtime_dll(config), config.is_debug))
    cl.add("RuntimeTypeInfo", "true")
    cl.add("PrecompiledHeader", "")
    cl.add("AssemblerListingLocation", "$(IntDir)\\")
    cl.add("ObjectFileName", "$(IntDir)\\")
    cl.add("ProgramDataBaseFileName", "$(IntDir)\\")
    cl.add("WarningLevel", f"Level{config.warning_level}")
    cl.add("SuppressStartupBanner", "true")
    cl.add("MultiProcessorCompilation", "true")
    if config.fast_math:
        cl.add("FloatingPointModel", "Fast")

    extra_flags = context.replace_tokens(config, context.settings.extra_compiler_flags).strip()
    if extra_flags:
        cl.add("AdditionalOptions", extra_flags + " %(AdditionalOptions)")
    if config.warnings_are_errors:
        cl.add("TreatWarningAsError", "true")
    cl.add("LanguageStandard", context.profile.language_standard(context.project.cpp_standard))


def _add_link(group: Node, context: ExportContext, target: TargetDescriptor,
              config: BuildConfiguration, extra: ExtraSettings) -> Node:
    libraries = link_libraries(context, target, config)
    dependencies = ""
    if libraries:
        dependencies = (
            context.replace_tokens(config, ";".join(libraries)).strip()
            + ";%(AdditionalDependencies)"
        )
    lib_dirs = _clean(config.library_search_paths)
    library_dirs = ""
    if lib_dirs:
        library_dirs = (
            context.replace_tokens(config, ";".join(lib_dirs))
            + ";%(AdditionalLibraryDirectories)"
        )

    debug_info = config.is_debug or config.generate_debug_symbols
    link = group.add("Link")
    link.add("OutputFile", context.output_file_path(target, config))
    link.add("SuppressStartupBanner", "true")
    link.add(
        "IgnoreSpecificDefaultLibraries",
        "libcmt.lib; msvcrt.lib;;%(IgnoreSpecificDefaultLibraries)"
        if config.is_debug
        else "%(IgnoreSpecificDefaultLibraries)",
    )
    link.add("GenerateDebugInformation", "true" if debug_info else "false")
    link.add("ProgramDatabaseFile", context.int_dir_file(config, config.output_filename(".pdb", True)))
    link.add("SubSystem", "Console" if target.kind == "console_app" else "Windows")
    if not config.is_64bit:
        link.add("TargetMachine", "MachineX86")
    if not config.is_debug:
        link.add("OptimizeReferences", "true")
        link.add("EnableCOMDATFolding", "true")
    if library_dirs:
        link.add("AdditionalLibraryDirectories", library_dirs)
    link.add("LargeAddressAware", "true")
    if dependencies:
        link.add("AdditionalDependencies", dependencies)

    linker_flags = " ".join(
        f for f in (context.settings.extra_linker_flags.strip(), extra.link_flags) if f
    )
    if linker_flags:
        link.add(
            "AdditionalOptions",
            context.replace_tokens(config, linker_flags).strip() + " %(AdditionalOptions)",
        )

    delay_loads = "; ".join(
        d for d in (context.settings.delay_loaded_dlls.strip(), extra.delay_load_dlls) if d
    )
    if delay_loads:
        link.add("DelayLoadDLLs", delay_loads)

    module_def = config.module_definition_file or extra.module_definition_file
    if module_def:
        link.add("ModuleDefinitionFile", module_def)

    bsc = group.add("Bscmake")
    bsc.add("SuppressStartupBanner", "true")
    bsc.add("OutputFile", context.int_dir_file(config, config.output_filename(".bsc", True)))

    lib = group.add("Lib")
    if dependencies:
        lib.add("AdditionalDependencies", dependencies)
    if library_dirs:
        lib.add("AdditionalLibraryDirectories", library_dirs)
    return lib


def _add_item_definitions(project: Node, context: ExportContext, target: TargetDescriptor,
                          config: BuildConfiguration) -> None:
    extra = extra_settings(context, target, config)
    build_define = "_DEBUG" if config.is_debug else "NDEBUG"

    group = project.add("ItemDefinitionGroup", Condition=condition(config))

    midl = group.add("Midl")
    midl.add("PreprocessorDefinitions", f"{build_define};%(PreprocessorDefinitions)")
    midl.add("MkTypLibCompatible", "true")
    midl.add("SuppressStartupBanner", "true")
    midl.add("TargetEnvironment", "Win32")
    midl.add("HeaderFileName", "")

    _add_compile(group, context, target, config, extra)

    res = group.add("ResourceCompile")
    res.add("PreprocessorDefinitions", f"{build_define};%(PreprocessorDefinitions)")

    lib = _add_link(group, context, target, config, extra)

    if context.settings.manifest_file:
        manifest = group.add("Manifest")
        manifest.add("AdditionalManifestFiles", context.rebase(context.settings.manifest_file))

    if target.file_type == "static_library" and not config.is_64bit:
        lib.add("TargetMachine", "MachineX86")

    pre_build = _join_steps(config.prebuild_command, extra.pre_build)
    if pre_build:
        group.add("PreBuildEvent").add("Command", pre_build)

    post_build = _join_steps(config.postbuild_command, extra.post_build)
    if post_build:
        group.add("PostBuildEvent").add("Command", post_build)


def _add_files(project: Node, context: ExportContext, files: Sequence[RoutedFile]) -> None:
    sources = project.add("ItemGroup")
    headers = project.add("ItemGroup")
    others = Node("ItemGroup")

    for routed in files:
        if routed.kind == "ClCompile":
            item = sources.add("ClCompile", Include=routed.include)
            if routed.stdcall:
                item.add("CallingConvention", "StdCall")
            if routed.excluded:
                item.add("ExcludedFromBuild", "true")
        elif routed.kind == "ClInclude":
            headers.add("ClInclude", Include=routed.include)
        else:
            others.add("None", Include=routed.include)

    if context.icon_file:
        others.add("None", Include=prepend_dot(context.icon_file))
    if others.children:
        project.add(others)

    if context.rc_file:
        project.add("ItemGroup").add("ResourceCompile", Include=prepend_dot(context.rc_file))


def _add_toolset_properties(project: Node, context: ExportContext) -> None:
    """Stamp toolset properties into every top-level PropertyGroup."""
    ipp = context.settings.ipp_library
    for group in list(project.find_all("PropertyGroup")):
        group.add("PlatformToolset", context.platform_toolset)
    for group in list(project.find_all("PropertyGroup")):
        group.add("WindowsTargetPlatformVersion", context.target_platform_version)
    if ipp:
        for group in list(project.find_all("PropertyGroup")):
            group.add("UseIntelIPP", ipp)


def emit_project(
    context: ExportContext,
    target: TargetDescriptor,
    configurations: Sequence[BuildConfiguration],
    files: Sequence[RoutedFile] | None = None,
) -> Node:
    """Build the project document of one target.

    Args:
        context: The export context.
        target: The target to emit.
        configurations: All build configurations, in declaration order.
        files: The target's routed files; routed here when not given.

    Returns:
        The root <Project> node.

    Raises:
        PathResolutionError: If a path cannot be expressed relative to
            the target folder.
    """
    if files is None:
        files = route_files(context, target)

    project = Node(
        "Project",
        DefaultTargets="Build",
        ToolsVersion=context.profile.tools_version,
        xmlns=MSBUILD_NAMESPACE,
    )
    _add_configurations(project, context, target, configurations)
    _add_global_properties(project, context, target, configurations)
    for config in configurations:
        _add_item_definitions(project, context, target, config)
    _add_files(project, context, files)
    project.add("Import", Project="$(VCTargetsPath)\\Microsoft.Cpp.targets")
    project.add("ImportGroup", Label="ExtensionTargets")
    _add_toolset_properties(project, context)

    logger.debug("Emitted project for %s with %d files", target.name, len(files))
    return project

# SPDX-License-Identifier: MIT
"""Tests for vcxgen.generators.vcxproj."""

from vcxgen.core.config import BuildConfiguration
from vcxgen.core.files import FileEntry, FileGroup
from vcxgen.core.project import Project
from vcxgen.generators.routing import route_files
from vcxgen.generators.vcxproj import condition, emit_project, runtime_library
from vcxgen.generators.xmlnode import MSBUILD_NAMESPACE, XmlFormatter
from vcxgen.toolsets.profiles import ExporterSettings


def emit(context, kind=None):
    target = context.graph.find(kind) if kind else context.graph[0]
    return emit_project(context, target, context.project.configurations)


def item_definitions(project_node, index):
    return list(project_node.find_all("ItemDefinitionGroup"))[index]


def properties(project_node, name):
    return [
        child
        for group in project_node.find_all("PropertyGroup")
        for child in group.children
        if child.name == name
    ]


class TestHelpers:
    def test_condition(self):
        config = BuildConfiguration("Debug", architecture="Win32")
        assert condition(config) == "'$(Configuration)|$(Platform)'=='Debug|Win32'"

    def test_runtime_library(self):
        assert runtime_library(True, True) == "MultiThreadedDebugDLL"
        assert runtime_library(True, False) == "MultiThreadedDLL"
        assert runtime_library(False, True) == "MultiThreadedDebug"
        assert runtime_library(False, False) == "MultiThreaded"


class TestProjectStructure:
    def test_root(self, plugin_project, make_context):
        root = emit(make_context(plugin_project))
        assert root.name == "Project"
        assert list(root.attrs) == ["DefaultTargets", "ToolsVersion", "xmlns"]
        assert root["ToolsVersion"] == "15.0"
        assert root["xmlns"] == MSBUILD_NAMESPACE

    def test_project_configurations(self, plugin_project, make_context):
        root = emit(make_context(plugin_project))
        group = root.find("ItemGroup")
        assert group["Label"] == "ProjectConfigurations"
        items = list(group.find_all("ProjectConfiguration"))
        assert [i["Include"] for i in items] == ["Debug|x64", "Release|x64"]
        assert items[0].find("Configuration").text == "Debug"
        assert items[0].find("Platform").text == "x64"

    def test_globals(self, plugin_project, make_context):
        context = make_context(plugin_project)
        vst3 = context.graph.find("vst3_plugin")
        root = emit_project(context, vst3, plugin_project.configurations)
        globals_group = next(
            g for g in root.find_all("PropertyGroup") if g.attrs.get("Label") == "Globals"
        )
        assert globals_group.find("ProjectGuid").text == vst3.guid

    def test_configuration_types(self, plugin_project, make_context):
        context = make_context(plugin_project)
        shared = emit(context, "shared_code")
        vst3 = emit(context, "vst3_plugin")
        assert {n.text for n in properties(shared, "ConfigurationType")} == {"StaticLibrary"}
        assert {n.text for n in properties(vst3, "ConfigurationType")} == {"DynamicLibrary"}

    def test_ends_with_targets_import(self, plugin_project, make_context):
        root = emit(make_context(plugin_project))
        assert root.children[-2]["Project"] == "$(VCTargetsPath)\\Microsoft.Cpp.targets"
        assert root.children[-1]["Label"] == "ExtensionTargets"


class TestOutputProperties:
    def test_wrapper_folders(self, plugin_project, make_context):
        root = emit(make_context(plugin_project), "vst3_plugin")
        out_dirs = properties(root, "OutDir")
        assert [n.text for n in out_dirs] == [
            "$(SolutionDir)$(Platform)\\$(Configuration)\\VST3\\",
        ] * 2
        assert out_dirs[0]["Condition"] == "'$(Configuration)|$(Platform)'=='Debug|x64'"
        assert properties(root, "IntDir")[0].text == "$(Platform)\\$(Configuration)\\VST3\\"
        assert properties(root, "TargetName")[0].text == "Gain"
        assert properties(root, "TargetExt")[0].text == ".vst3"

    def test_wrapper_searches_shared_code_output(self, plugin_project, make_context):
        root = emit(make_context(plugin_project), "vst3_plugin")
        assert properties(root, "LibraryPath")[0].text == (
            "$(LibraryPath);$(SolutionDir)$(Platform)\\$(Configuration)\\Shared Code"
        )

    def test_shared_code_has_no_library_path(self, plugin_project, make_context):
        root = emit(make_context(plugin_project), "shared_code")
        assert properties(root, "LibraryPath") == []


class TestCompileSettings:
    def test_defines_order(self, plugin_project, make_context):
        root = emit(make_context(plugin_project), "shared_code")
        cl = item_definitions(root, 0).find("ClCompile")
        defines = cl.find("PreprocessorDefinitions").text
        assert defines.startswith("_CRT_SECURE_NO_WARNINGS;WIN32;_WINDOWS;DEBUG;_DEBUG;")
        assert "JucePlugin_Build_VST3=1" in defines
        assert defines.endswith("JUCE_SHARED_CODE=1;_LIB;%(PreprocessorDefinitions)")

    def test_release_defines(self, plugin_project, make_context):
        root = emit(make_context(plugin_project), "vst3_plugin")
        defines = item_definitions(root, 1).find("ClCompile").find("PreprocessorDefinitions").text
        assert "NDEBUG" in defines.split(";")
        assert "_DEBUG" not in defines.split(";")
        assert "_LIB" not in defines.split(";")

    def test_project_defines_win(self, tmp_path, make_context):
        project = Project(
            "Viewer",
            root_dir=tmp_path,
            formats=["gui_app"],
            defines={"WIN32": "2", "VENDOR": "Acme"},
        )
        root = emit(make_context(project))
        defines = item_definitions(root, 0).find("ClCompile").find("PreprocessorDefinitions").text
        assert defines.split(";").count("WIN32=2") == 1
        assert "WIN32" not in defines.split(";")
        assert "VENDOR=Acme" in defines

    def test_console_define(self, tmp_path, make_context):
        project = Project("Tool", root_dir=tmp_path, formats=["console_app"])
        root = emit(make_context(project))
        cl = item_definitions(root, 0).find("ClCompile")
        assert "_CONSOLE" in cl.find("PreprocessorDefinitions").text.split(";")
        assert item_definitions(root, 0).find("Link").find("SubSystem").text == "Console"

    def test_runtime_library(self, plugin_project, app_project, make_context):
        plugin = emit(make_context(plugin_project), "vst3_plugin")
        app = emit(make_context(app_project))
        debug_cl = item_definitions(plugin, 0).find("ClCompile")
        assert debug_cl.find("RuntimeLibrary").text == "MultiThreadedDebugDLL"
        assert (
            item_definitions(app, 1).find("ClCompile").find("RuntimeLibrary").text
            == "MultiThreaded"
        )

    def test_optimisation_and_warnings(self, app_project, make_context):
        root = emit(make_context(app_project))
        debug_cl = item_definitions(root, 0).find("ClCompile")
        release_cl = item_definitions(root, 1).find("ClCompile")
        assert debug_cl.find("Optimization").text == "Disabled"
        assert debug_cl.find("DebugInformationFormat").text == "ProgramDatabase"
        assert release_cl.find("Optimization").text == "Full"
        assert release_cl.find("DebugInformationFormat") is None
        assert debug_cl.find("WarningLevel").text == "Level4"

    def test_language_standard_promoted(self, tmp_path, make_context):
        project = Project("Viewer", root_dir=tmp_path, formats=["gui_app"], cpp_standard="11")
        cl = item_definitions(emit(make_context(project)), 0).find("ClCompile")
        assert cl.find("LanguageStandard").text == "stdcpp14"

    def test_extra_compiler_flags_tokens(self, tmp_path, make_context):
        project = Project(
            "Viewer",
            root_dir=tmp_path,
            formats=["gui_app"],
            defines={"VENDOR": "Acme"},
            exporter=ExporterSettings(extra_compiler_flags="/DNAME=${VENDOR} /bigobj"),
        )
        cl = item_definitions(emit(make_context(project)), 0).find("ClCompile")
        assert cl.find("AdditionalOptions").text == "/DNAME=Acme /bigobj %(AdditionalOptions)"

    def test_module_paths_rebased(self, tmp_path, make_context):
        project = Project(
            "Viewer",
            root_dir=tmp_path,
            formats=["gui_app"],
            module_paths=["JuceLibraryCode"],
            exporter=ExporterSettings(header_search_paths=("C:\\SDK\\include",)),
        )
        cl = item_definitions(emit(make_context(project)), 0).find("ClCompile")
        assert cl.find("AdditionalIncludeDirectories").text == (
            "..\\..\\JuceLibraryCode;C:\\SDK\\include;%(AdditionalIncludeDirectories)"
        )


class TestLinkSettings:
    def test_wrapper_links_shared_code(self, plugin_project, make_context):
        root = emit(make_context(plugin_project), "vst3_plugin")
        link = item_definitions(root, 0).find("Link")
        assert link.find("AdditionalDependencies").text == "Gain.lib;%(AdditionalDependencies)"
        assert link.find("OutputFile").text == "$(OutDir)\\Gain.vst3"

    def test_shared_code_links_nothing(self, plugin_project, make_context):
        root = emit(make_context(plugin_project), "shared_code")
        group = item_definitions(root, 0)
        assert group.find("Link").find("AdditionalDependencies") is None
        assert group.find("Lib").children == []

    def test_debug_ignores_default_libraries(self, app_project, make_context):
        root = emit(make_context(app_project))
        debug_link = item_definitions(root, 0).find("Link")
        release_link = item_definitions(root, 1).find("Link")
        assert debug_link.find("IgnoreSpecificDefaultLibraries").text.startswith("libcmt.lib")
        assert debug_link.find("GenerateDebugInformation").text == "true"
        assert release_link.find("OptimizeReferences").text == "true"

    def test_win32_static_library(self, tmp_path, make_context):
        project = Project(
            "Lib",
            root_dir=tmp_path,
            formats=["static_library"],
            configurations=[BuildConfiguration("Release", architecture="Win32")],
        )
        root = emit(make_context(project))
        group = item_definitions(root, 0)
        assert len(list(group.find_all("Lib"))) == 1
        assert group.find("Lib").find("TargetMachine").text == "MachineX86"
        assert group.find("Link").find("TargetMachine").text == "MachineX86"

    def test_delay_loads_joined(self, tmp_path, make_context):
        project = Project(
            "Gain",
            root_dir=tmp_path,
            formats=["rtas_plugin"],
            exporter=ExporterSettings(delay_loaded_dlls="user.dll"),
        )
        link = item_definitions(emit(make_context(project)), 0).find("Link")
        assert link.find("DelayLoadDLLs").text.startswith("user.dll; DAE.dll")
        assert link.find("AdditionalOptions").text == "/FORCE:multiple %(AdditionalOptions)"
        assert link.find("ModuleDefinitionFile").text.endswith("juce_RTAS_WinExports.def")


class TestBuildEvents:
    def test_user_and_synthesized_steps_joined(self, tmp_path, make_context):
        config = BuildConfiguration(
            "Release",
            target_binary_name="Gain",
            plugin_binary_copy_step=True,
            postbuild_command="echo done",
            prebuild_command="echo start",
        )
        project = Project(
            "Gain", root_dir=tmp_path, formats=["vst3_plugin"], configurations=[config]
        )
        root = emit(make_context(project))
        group = item_definitions(root, 0)
        assert group.find("PreBuildEvent").find("Command").text == "echo start"
        post = group.find("PostBuildEvent").find("Command").text
        assert post.startswith("echo done\r\ncopy /Y ")
        assert "echo done&#13;&#10;copy /Y " in XmlFormatter().format(root)

    def test_no_events_by_default(self, app_project, make_context):
        group = item_definitions(emit(make_context(app_project)), 0)
        assert group.find("PreBuildEvent") is None
        assert group.find("PostBuildEvent") is None


class TestFileItems:
    def test_items_match_routing(self, plugin_project, make_context):
        context = make_context(plugin_project)
        shared = context.graph.shared_code
        root = emit_project(context, shared, plugin_project.configurations)
        compiled = [n["Include"] for n in root.iter() if n.name == "ClCompile" and "Include" in n.attrs]
        headers = [n["Include"] for n in root.iter() if n.name == "ClInclude"]
        routed = route_files(context, shared)
        assert compiled == [f.include for f in routed if f.kind == "ClCompile"]
        assert headers == [f.include for f in routed if f.kind == "ClInclude"]
        assert compiled[0] == "..\\..\\Source\\PluginProcessor.cpp"

    def test_resource_script_item(self, plugin_project, make_context):
        root = emit(make_context(plugin_project), "vst3_plugin")
        resources = [n["Include"] for n in root.iter() if n.name == "ResourceCompile" and n.attrs]
        assert resources == [".\\resources.rc"]

    def test_excluded_and_stdcall(self, tmp_path, make_context):
        project = Project(
            "Viewer",
            root_dir=tmp_path,
            formats=["gui_app"],
            groups=(FileGroup("Source", (FileEntry("Source/Old.cpp", compile=False),)),),
        )
        root = emit(make_context(project))
        item = next(n for n in root.iter() if n.name == "ClCompile" and n.attrs)
        assert item.find("ExcludedFromBuild").text == "true"
        assert item.find("CallingConvention") is None

    def test_static_library_has_no_resources(self, tmp_path, make_context):
        project = Project("Lib", root_dir=tmp_path, formats=["static_library"])
        root = emit(make_context(project))
        assert not any(n.name == "ResourceCompile" and n.attrs for n in root.iter())


class TestToolsetProperties:
    def test_every_property_group_stamped(self, app_project, make_context):
        root = emit(make_context(app_project))
        for group in root.find_all("PropertyGroup"):
            assert group.children[-1].name == "WindowsTargetPlatformVersion"
            assert group.children[-1].text == "10.0.16299.0"
            assert "v141" in [c.text for c in group.find_all("PlatformToolset")]

    def test_toolset_override(self, app_project, make_context):
        root = emit(make_context(app_project, TOOLSET="v140"))
        assert {n.text for n in properties(root, "PlatformToolset")} == {"v140"}

    def test_ipp(self, app_project, make_context):
        root = emit(make_context(app_project, IPP="Sequential"))
        groups = list(root.find_all("PropertyGroup"))
        assert all(g.find("UseIntelIPP").text == "Sequential" for g in groups)

    def test_no_ipp_by_default(self, app_project, make_context):
        assert properties(emit(make_context(app_project)), "UseIntelIPP") == []

    def test_win32_configuration_group_has_no_toolset_before_stamping(
        self, tmp_path, make_context
    ):
        project = Project(
            "Viewer",
            root_dir=tmp_path,
            formats=["gui_app"],
            configurations=[BuildConfiguration("Debug", architecture="Win32")],
        )
        root = emit(make_context(project))
        config_group = next(
            g for g in root.find_all("PropertyGroup") if g.attrs.get("Label") == "Configuration"
        )
        assert len(list(config_group.find_all("PlatformToolset"))) == 1

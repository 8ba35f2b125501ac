# SPDX-License-Identifier: MIT
"""Tests for vcxgen.generators.msvc."""

from __future__ import annotations

import os
import struct
from pathlib import Path

import pytest

from vcxgen.core.errors import ConfigurationError
from vcxgen.core.project import Project
from vcxgen.generators.generator import Generator
from vcxgen.generators.msvc import MsvcGenerator
from vcxgen.generators.resources import IconSet, RasterImage

PLUGIN_FILES = {
    "resources.rc",
    "Gain_SharedCode.vcxproj",
    "Gain_SharedCode.vcxproj.filters",
    "Gain_VST3.vcxproj",
    "Gain_VST3.vcxproj.filters",
    "Gain_AAX.vcxproj",
    "Gain_AAX.vcxproj.filters",
    "Gain.sln",
}


def output_dir(project: Project, folder: str = "VisualStudio2017") -> Path:
    return project.root_dir / "Builds" / folder


class TestMsvcGenerator:
    def test_is_generator(self) -> None:
        generator = MsvcGenerator()
        assert isinstance(generator, Generator)
        assert generator.name == "msvc"

    def test_writes_all_files(self, plugin_project: Project) -> None:
        result = MsvcGenerator().generate(plugin_project)
        out = output_dir(plugin_project)
        assert result.output_dir == out
        assert {p.name for p in result.written} == PLUGIN_FILES
        assert result.unchanged == []
        assert {p.name for p in out.iterdir()} == PLUGIN_FILES

    def test_second_run_leaves_files_alone(self, plugin_project: Project) -> None:
        MsvcGenerator().generate(plugin_project)
        out = output_dir(plugin_project)
        for path in out.iterdir():
            os.utime(path, (1_000_000, 1_000_000))

        result = MsvcGenerator().generate(plugin_project)
        assert not result.changed
        assert len(result.unchanged) == len(PLUGIN_FILES)
        assert all(p.stat().st_mtime == 1_000_000 for p in out.iterdir())

    def test_version_change_rewrites_resources_only(self, plugin_project: Project) -> None:
        MsvcGenerator().generate(plugin_project)
        plugin_project.version = "1.3.0"
        result = MsvcGenerator().generate(plugin_project)
        assert [p.name for p in result.written] == ["resources.rc"]
        text = (output_dir(plugin_project) / "resources.rc").read_bytes()
        assert b"FILEVERSION  1,3,0,0\r\n" in text

    def test_documents_use_crlf(self, plugin_project: Project) -> None:
        MsvcGenerator().generate(plugin_project)
        out = output_dir(plugin_project)
        for name in ("Gain_VST3.vcxproj", "Gain_VST3.vcxproj.filters", "Gain.sln"):
            data = (out / name).read_bytes()
            assert b"\r\n" in data
            assert b"\n" not in data.replace(b"\r\n", b"")
        assert (out / "Gain_VST3.vcxproj").read_bytes().startswith(
            b'<?xml version="1.0" encoding="UTF-8"?>\r\n<Project DefaultTargets="Build"'
        )

    def test_unsupported_formats_only(self, tmp_path: Path) -> None:
        project = Project("Gain", root_dir=tmp_path, formats=["au_plugin"])
        with pytest.raises(ConfigurationError):
            MsvcGenerator().generate(project)
        assert not (tmp_path / "Builds").exists()

    def test_bad_toolset_writes_nothing(self, plugin_project: Project) -> None:
        generator = MsvcGenerator(variables={"TOOLSET": "v999"})
        with pytest.raises(ConfigurationError, match="v999"):
            generator.generate(plugin_project)
        assert not (plugin_project.root_dir / "Builds").exists()

    def test_profile(self, plugin_project: Project) -> None:
        MsvcGenerator("vs2015").generate(plugin_project)
        out = output_dir(plugin_project, "VisualStudio2015")
        text = (out / "Gain_VST3.vcxproj").read_text()
        assert 'ToolsVersion="14.0"' in text
        assert "<PlatformToolset>v140</PlatformToolset>" in text
        assert (out / "Gain.sln").read_text().splitlines()[1] == "# Visual Studio 2015"

    def test_profile_variable(self, plugin_project: Project) -> None:
        result = MsvcGenerator(variables={"PROFILE": "vs2013"}).generate(plugin_project)
        assert result.output_dir == output_dir(plugin_project, "VisualStudio2013")

    def test_absolute_output_dir(self, plugin_project: Project) -> None:
        out = plugin_project.root_dir / "vs"
        result = MsvcGenerator().generate(plugin_project, out)
        assert result.output_dir == out
        text = (out / "Gain_SharedCode.vcxproj").read_text()
        assert 'Include="..\\Source\\PluginProcessor.cpp"' in text

    def test_icon(self, app_project: Project) -> None:
        app_project.icon_images = IconSet(
            [RasterImage.filled(32, 32, (0, 128, 255, 255)), RasterImage.filled(16, 16, (0, 0, 0, 255))]
        )
        result = MsvcGenerator().generate(app_project)
        out = output_dir(app_project)
        assert {p.name for p in result.written} >= {"icon.ico", "resources.rc"}

        icon = (out / "icon.ico").read_bytes()
        assert struct.unpack_from("<HHH", icon) == (0, 1, 2)
        rc = (out / "resources.rc").read_text()
        assert 'IDI_ICON1 ICON DISCARDABLE "icon.ico"' in rc
        assert 'Include=".\\icon.ico"' in (out / "Viewer_App.vcxproj").read_text()

    def test_static_library_has_no_resources(self, tmp_path: Path) -> None:
        project = Project("Lib", root_dir=tmp_path, formats=["static_library"])
        result = MsvcGenerator().generate(project)
        assert {p.name for p in result.written} == {
            "Lib_StaticLibrary.vcxproj",
            "Lib_StaticLibrary.vcxproj.filters",
            "Lib.sln",
        }


class TestCreateContext:
    def test_nothing_written(self, plugin_project: Project) -> None:
        context = MsvcGenerator().create_context(plugin_project)
        assert context.target_folder == "Builds\\VisualStudio2017"
        assert context.rc_file == "resources.rc"
        assert context.icon_file is None
        assert not (plugin_project.root_dir / "Builds").exists()

    def test_target_folder_variable(self, plugin_project: Project) -> None:
        context = MsvcGenerator(variables={"TARGET_FOLDER": "out/vs/"}).create_context(
            plugin_project
        )
        assert context.target_folder == "out\\vs"

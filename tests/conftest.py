# SPDX-License-Identifier: MIT
"""Shared fixtures for vcxgen tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from vcxgen.core.files import FileEntry, FileGroup
from vcxgen.core.project import Project
from vcxgen.generators.context import ExportContext
from vcxgen.generators.msvc import MsvcGenerator


def plugin_groups() -> tuple[FileGroup, ...]:
    return (
        FileGroup(
            "Source",
            (
                FileEntry("Source/PluginProcessor.cpp"),
                FileEntry("Source/PluginProcessor.h"),
                FileGroup("UI", (FileEntry("Source/UI/Editor.cpp"),)),
            ),
        ),
        FileGroup(
            "JUCE Library Code",
            (
                FileEntry("JuceLibraryCode/include_juce_audio_plugin_client_VST3.cpp"),
                FileEntry("JuceLibraryCode/include_juce_audio_plugin_client_AAX.cpp"),
                FileEntry("JuceLibraryCode/JuceHeader.h"),
            ),
        ),
    )


@pytest.fixture
def plugin_project(tmp_path: Path) -> Project:
    """A VST3 + AAX plugin project rooted in tmp_path."""
    return Project(
        "Gain",
        uid="GainUID",
        root_dir=tmp_path,
        version="1.2.0",
        company_name="Acme Audio",
        formats=["vst3_plugin", "aax_plugin"],
        groups=plugin_groups(),
    )


@pytest.fixture
def app_project(tmp_path: Path) -> Project:
    """A plain GUI application rooted in tmp_path."""
    return Project(
        "Viewer",
        root_dir=tmp_path,
        formats=["gui_app"],
        groups=(FileGroup("Source", (FileEntry("Source/Main.cpp"),)),),
    )


@pytest.fixture
def make_context() -> Callable[..., ExportContext]:
    """Build the export context of a project, with optional variables."""

    def make(project: Project, **variables: str) -> ExportContext:
        return MsvcGenerator(variables=variables).create_context(project)

    return make

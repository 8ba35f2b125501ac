# SPDX-License-Identifier: MIT
"""Tests for vcxgen.core.config."""

import pytest

from vcxgen.core.config import (
    BuildConfiguration,
    OptimisationLevel,
    canonical_config_name,
    default_configurations,
    legal_filename,
    validate_configurations,
)
from vcxgen.core.errors import ConfigurationError


class TestOptimisationLevel:
    def test_ordering(self):
        assert OptimisationLevel.OFF < OptimisationLevel.MIN_SIZE
        assert OptimisationLevel.MIN_SIZE < OptimisationLevel.MAX_SPEED
        assert OptimisationLevel.MAX_SPEED < OptimisationLevel.FULL

    def test_parse_names(self):
        assert OptimisationLevel.parse("MinSize") is OptimisationLevel.MIN_SIZE
        assert OptimisationLevel.parse("max_speed") is OptimisationLevel.MAX_SPEED
        assert OptimisationLevel.parse("full") is OptimisationLevel.FULL
        assert OptimisationLevel.parse("disabled") is OptimisationLevel.OFF

    def test_parse_number(self):
        assert OptimisationLevel.parse(3) is OptimisationLevel.MAX_SPEED

    def test_parse_unknown(self):
        with pytest.raises(KeyError):
            OptimisationLevel.parse("ludicrous")


class TestBuildConfiguration:
    def test_debug_defaults(self):
        config = BuildConfiguration("Debug", is_debug=True)
        assert config.architecture == "x64"
        assert config.optimisation is OptimisationLevel.OFF
        assert config.debug_information_format == "ProgramDatabase"
        assert config.warning_level == 4
        assert config.generate_manifest is True
        assert config.use_runtime_lib_dll is None

    def test_release_defaults(self):
        config = BuildConfiguration("Release")
        assert config.optimisation is OptimisationLevel.FULL
        assert config.debug_information_format == "None"

    def test_explicit_optimisation_kept(self):
        config = BuildConfiguration("Release", optimisation=OptimisationLevel.MIN_SIZE)
        assert config.optimisation is OptimisationLevel.MIN_SIZE
        assert config.optimisation_level is OptimisationLevel.MIN_SIZE
        debug = BuildConfiguration("Debug", is_debug=True)
        assert debug.optimisation_level is OptimisationLevel.OFF

    def test_msvc_name(self):
        assert BuildConfiguration("Debug", architecture="Win32").msvc_name == "Debug|Win32"
        assert canonical_config_name("Release", "x64") == "Release|x64"

    def test_invalid_architecture(self):
        with pytest.raises(ConfigurationError) as exc_info:
            BuildConfiguration("Debug", architecture="ARM64")
        assert exc_info.value.configuration == "Debug"

    @pytest.mark.parametrize("level", [1, 5])
    def test_warning_level_range(self, level):
        with pytest.raises(ConfigurationError):
            BuildConfiguration("Debug", warning_level=level)

    def test_identity_is_name_and_architecture(self):
        a = BuildConfiguration("Debug", is_debug=True, fast_math=True)
        b = BuildConfiguration("Debug", is_debug=False)
        c = BuildConfiguration("Debug", architecture="Win32")
        assert a == b
        assert a != c
        assert len({a, b, c}) == 2

    def test_is_immutable(self):
        config = BuildConfiguration("Debug")
        with pytest.raises(AttributeError):
            config.name = "Other"  # type: ignore[misc]

    def test_binary_locations_x64(self):
        config = BuildConfiguration("Release")
        assert config.vst_binary_location == "%ProgramW6432%\\Steinberg\\Vstplugins"
        assert config.vst3_binary_location == "%CommonProgramW6432%\\VST3"
        assert config.rtas_binary_location == "%CommonProgramW6432%\\Digidesign\\DAE\\Plug-Ins"
        assert config.aax_binary_location == "%CommonProgramW6432%\\Avid\\Audio\\Plug-Ins"

    def test_binary_locations_win32(self):
        config = BuildConfiguration("Release", architecture="Win32")
        assert config.vst_binary_location == "%programfiles(x86)%\\Steinberg\\Vstplugins"
        assert config.vst3_binary_location == "%CommonProgramFiles(x86)%\\VST3"

    def test_binary_location_override(self):
        config = BuildConfiguration("Release", vst3_binary_location="D:\\Plugins")
        assert config.vst3_binary_location == "D:\\Plugins"


class TestOutputFilename:
    def test_suffix_added(self):
        config = BuildConfiguration("Release", target_binary_name="Gain")
        assert config.output_filename(".vst3", False) == "Gain.vst3"
        assert config.output_filename("", False) == "Gain"

    def test_existing_extension_kept(self):
        config = BuildConfiguration("Release", target_binary_name="Gain.dll")
        assert config.output_filename(".vst3", False) == "Gain.dll"

    def test_forced_suffix_replaces_extension(self):
        config = BuildConfiguration("Release", target_binary_name="Gain.dll")
        assert config.output_filename(".vst3", True) == "Gain.vst3"

    def test_illegal_characters_removed(self):
        config = BuildConfiguration("Release", target_binary_name="My:Gain?")
        assert config.output_filename(".exe", True) == "MyGain.exe"
        assert legal_filename(' a<b>"c" ') == "abc"


class TestFromDict:
    def test_basic(self):
        config = BuildConfiguration.from_dict(
            {
                "name": "Debug",
                "debug": True,
                "architecture": "Win32",
                "optimisation": "max_speed",
                "defines": "A=1 B",
                "header_search_paths": ["inc"],
            },
            default_binary_name="Gain",
        )
        assert config.is_debug
        assert config.architecture == "Win32"
        assert config.optimisation is OptimisationLevel.MAX_SPEED
        assert config.defines == {"A": "1", "B": ""}
        assert config.header_search_paths == ("inc",)
        assert config.target_binary_name == "Gain"

    def test_defines_as_mapping(self):
        config = BuildConfiguration.from_dict({"name": "Release", "defines": {"X": "1"}})
        assert config.defines == {"X": "1"}

    def test_binary_name_overrides_default(self):
        config = BuildConfiguration.from_dict(
            {"name": "Release", "target_binary_name": "Other"}, default_binary_name="Gain"
        )
        assert config.target_binary_name == "Other"

    def test_missing_name(self):
        with pytest.raises(ConfigurationError, match="name"):
            BuildConfiguration.from_dict({"debug": True})

    def test_unknown_key(self):
        with pytest.raises(ConfigurationError, match="colour"):
            BuildConfiguration.from_dict({"name": "Debug", "colour": "blue"})

    @pytest.mark.parametrize(
        "key,value",
        [
            ("warning_level", "4"),
            ("warning_level", True),
            ("debug", "yes"),
            ("intermediates_path", 3),
            ("header_search_paths", "inc"),
            ("library_search_paths", ["lib", 2]),
        ],
    )
    def test_wrong_type(self, key, value):
        with pytest.raises(ConfigurationError, match="must be") as exc_info:
            BuildConfiguration.from_dict({"name": "Debug", key: value})
        assert exc_info.value.configuration == "Debug"

    def test_null_optional_value(self):
        config = BuildConfiguration.from_dict({"name": "Debug", "use_runtime_lib_dll": None})
        assert config.use_runtime_lib_dll is None

    def test_bad_optimisation(self):
        with pytest.raises(ConfigurationError, match="optimisation"):
            BuildConfiguration.from_dict({"name": "Debug", "optimisation": "turbo"})


class TestConfigurationLists:
    def test_default_configurations(self):
        debug, release = default_configurations("Gain")
        assert debug.msvc_name == "Debug|x64"
        assert debug.is_debug
        assert release.msvc_name == "Release|x64"
        assert not release.is_debug
        assert release.target_binary_name == "Gain"

    def test_validate_accepts_distinct(self):
        validate_configurations(
            [BuildConfiguration("Debug"), BuildConfiguration("Debug", architecture="Win32")]
        )

    def test_validate_rejects_duplicates(self):
        with pytest.raises(ConfigurationError) as exc_info:
            validate_configurations([BuildConfiguration("Debug"), BuildConfiguration("Debug")])
        assert exc_info.value.configuration == "Debug|x64"

    def test_validate_rejects_empty(self):
        with pytest.raises(ConfigurationError):
            validate_configurations([])

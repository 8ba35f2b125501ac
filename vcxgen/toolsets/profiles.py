# SPDX-License-Identifier: MIT
"""Visual Studio toolset profiles.

Each supported Visual Studio release differs from the others only in a
handful of version strings and defaults. A ToolsetProfile records those
values; everything else in the generated files is shared.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from vcxgen.core.config import expect_type, string_tuple
from vcxgen.core.errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

DEFAULT_PROFILE = "vs2017"

# IPP library choices accepted by MSBuild's UseIntelIPP property
IPP_LIBRARIES = (
    "true",
    "Parallel_Static",
    "Sequential",
    "Parallel_Dynamic",
    "Sequential_Dynamic",
)


@dataclass(frozen=True)
class ToolsetProfile:
    """Version-specific values for one Visual Studio release.

    Attributes:
        tag: Short selector, e.g. "vs2017".
        display_name: Human-readable name.
        visual_studio_version: Major version number (12, 14, 15).
        solution_comment: Second line of the .sln header.
        tools_version: MSBuild ToolsVersion attribute.
        default_toolset: PlatformToolset used when none is configured.
        default_target_platform_version: Default Windows SDK version.
        supported_toolsets: Toolsets a user may select.
        builds_folder: Default output folder name under Builds/.
        promoted_language_standards: Language standards this toolset
            family has no switch for, mapped to the one used instead.
    """

    tag: str
    display_name: str
    visual_studio_version: int
    solution_comment: str
    tools_version: str
    default_toolset: str
    default_target_platform_version: str
    supported_toolsets: tuple[str, ...]
    builds_folder: str
    promoted_language_standards: Mapping[str, str] = field(
        default_factory=lambda: {"11": "14"}
    )

    def language_standard(self, requested: str) -> str:
        """Map a requested C++ standard to the LanguageStandard token.

        Example:
            >>> get_profile("vs2017").language_standard("11")
            'stdcpp14'
        """
        std = self.promoted_language_standards.get(requested, requested)
        return f"stdcpp{std}"


PROFILES: dict[str, ToolsetProfile] = {
    "vs2013": ToolsetProfile(
        tag="vs2013",
        display_name="Visual Studio 2013",
        visual_studio_version=12,
        solution_comment="# Visual Studio 2013",
        tools_version="12.0",
        default_toolset="v120",
        default_target_platform_version="8.1",
        supported_toolsets=("v120", "v120_xp", "Windows7.1SDK", "CTP_Nov2013"),
        builds_folder="VisualStudio2013",
    ),
    "vs2015": ToolsetProfile(
        tag="vs2015",
        display_name="Visual Studio 2015",
        visual_studio_version=14,
        solution_comment="# Visual Studio 2015",
        tools_version="14.0",
        default_toolset="v140",
        default_target_platform_version="8.1",
        supported_toolsets=("v140", "v140_xp", "CTP_Nov2013"),
        builds_folder="VisualStudio2015",
    ),
    "vs2017": ToolsetProfile(
        tag="vs2017",
        display_name="Visual Studio 2017",
        visual_studio_version=15,
        solution_comment="# Visual Studio 2017",
        tools_version="15.0",
        default_toolset="v141",
        default_target_platform_version="10.0.16299.0",
        supported_toolsets=("v140", "v140_xp", "v141", "v141_xp"),
        builds_folder="VisualStudio2017",
    ),
}


def get_profile(tag: str) -> ToolsetProfile:
    """Look up a profile by tag (case-insensitive).

    Raises:
        ConfigurationError: If no profile has this tag.
    """
    profile = PROFILES.get(tag.lower())
    if profile is None:
        raise ConfigurationError(
            f"unknown Visual Studio profile {tag!r}, "
            f"expected one of {', '.join(PROFILES)}"
        )
    return profile


@dataclass(frozen=True)
class ExporterSettings:
    """User-set values that apply to a whole Visual Studio export.

    Empty strings mean "use the profile default" for platform_toolset and
    windows_target_platform_version, and "not set" elsewhere.

    Attributes:
        profile: Profile tag.
        target_folder: Output folder relative to the project root. When
            empty, "Builds/<profile builds folder>" is used.
        platform_toolset: PlatformToolset override.
        windows_target_platform_version: Windows SDK override.
        ipp_library: UseIntelIPP value, or "" to leave it out.
        manifest_file: Extra manifest to link, relative to the project root.
        extra_compiler_flags: Appended to the compiler command line.
        extra_linker_flags: Appended to the linker command line.
        external_libraries: Extra libraries to link, separated by ";"
            or newlines.
        delay_loaded_dlls: DelayLoadDLLs list.
        header_search_paths: Extra include paths, as written.
        rc_include_macro: Macro that lets a user replace the generated
            resource script.
    """

    profile: str = DEFAULT_PROFILE
    target_folder: str = ""
    platform_toolset: str = ""
    windows_target_platform_version: str = ""
    ipp_library: str = ""
    manifest_file: str = ""
    extra_compiler_flags: str = ""
    extra_linker_flags: str = ""
    external_libraries: str = ""
    delay_loaded_dlls: str = ""
    header_search_paths: tuple[str, ...] = ()
    rc_include_macro: str = "JUCE_USER_DEFINED_RC_FILE"

    def resolved_toolset(self, profile: ToolsetProfile) -> str:
        """The PlatformToolset to write for a profile.

        Raises:
            ConfigurationError: If the configured toolset is not one the
                profile supports.
        """
        if not self.platform_toolset:
            return profile.default_toolset
        if self.platform_toolset not in profile.supported_toolsets:
            raise ConfigurationError(
                f"platform toolset {self.platform_toolset!r} is not supported by "
                f"{profile.display_name} (supported: "
                f"{', '.join(profile.supported_toolsets)})"
            )
        return self.platform_toolset

    def resolved_target_platform(self, profile: ToolsetProfile) -> str:
        return (
            self.windows_target_platform_version
            or profile.default_target_platform_version
        )

    def resolved_target_folder(self, profile: ToolsetProfile) -> str:
        return self.target_folder or f"Builds/{profile.builds_folder}"

    def external_library_list(self) -> list[str]:
        """External libraries as a list, blank entries removed."""
        text = self.external_libraries.replace("\n", ";")
        return [lib.strip() for lib in text.split(";") if lib.strip()]

    def with_overrides(self, variables: Mapping[str, str]) -> ExporterSettings:
        """Return a copy with command-line variables applied.

        Recognised variables are PROFILE, TOOLSET, TARGET_PLATFORM,
        TARGET_FOLDER and IPP. Others are ignored with a debug message.

        Raises:
            ConfigurationError: If IPP is not a valid library choice.
        """
        changes: dict[str, Any] = {}
        for key, value in variables.items():
            attr = _VARIABLE_FIELDS.get(key.upper())
            if attr is None:
                logger.debug("Ignoring unknown variable %s", key)
                continue
            changes[attr] = value

        ipp = changes.get("ipp_library")
        if ipp and ipp not in IPP_LIBRARIES:
            raise ConfigurationError(
                f"invalid IPP library {ipp!r}, expected one of {', '.join(IPP_LIBRARIES)}"
            )
        return replace(self, **changes) if changes else self

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ExporterSettings:
        """Create settings from stored values (snake_case keys).

        Raises:
            ConfigurationError: On an unknown key, a value of the wrong
                type or a bad profile tag.
        """
        values = dict(data)
        unknown = set(values) - set(cls.__dataclass_fields__)
        if unknown:
            raise ConfigurationError(
                f"unknown exporter setting {sorted(unknown)[0]!r}"
            )
        for key, value in values.items():
            if key == "header_search_paths":
                values[key] = string_tuple(value, key)
            else:
                expect_type(value, str, key)
        settings = cls(**values)
        get_profile(settings.profile)
        return settings


_VARIABLE_FIELDS = {
    "PROFILE": "profile",
    "TOOLSET": "platform_toolset",
    "TARGET_PLATFORM": "windows_target_platform_version",
    "TARGET_FOLDER": "target_folder",
    "IPP": "ipp_library",
}

# SPDX-License-Identifier: MIT
"""Visual Studio toolset profiles and exporter settings."""

from vcxgen.toolsets.profiles import (
    DEFAULT_PROFILE,
    PROFILES,
    ExporterSettings,
    ToolsetProfile,
    get_profile,
)

__all__ = [
    "DEFAULT_PROFILE",
    "PROFILES",
    "ExporterSettings",
    "ToolsetProfile",
    "get_profile",
]

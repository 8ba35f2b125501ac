# SPDX-License-Identifier: MIT
"""
vcxgen: Visual Studio solution and project generator.

vcxgen reads a project description (metadata, output formats, build
configurations and a file tree) and writes a Visual Studio solution
with one MSBuild project per target. Audio-plugin projects get a shared
static library that every plugin-format wrapper links.
"""

from __future__ import annotations

__version__ = "0.1.0"

# Re-export commonly used classes for convenient imports
from vcxgen.core.config import BuildConfiguration  # noqa: E402
from vcxgen.core.errors import (  # noqa: E402
    ConfigurationError,
    DocumentWriteError,
    PathResolutionError,
    VcxgenError,
)
from vcxgen.core.files import FileEntry, FileGroup  # noqa: E402
from vcxgen.core.project import Project, load_project  # noqa: E402
from vcxgen.generators.msvc import MsvcGenerator  # noqa: E402

# Public API exports
__all__ = [
    # Version
    "__version__",
    # Project model
    "BuildConfiguration",
    "FileEntry",
    "FileGroup",
    "Project",
    "load_project",
    # Generators
    "MsvcGenerator",
    # Errors
    "ConfigurationError",
    "DocumentWriteError",
    "PathResolutionError",
    "VcxgenError",
]

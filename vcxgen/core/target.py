# SPDX-License-Identifier: MIT
"""Target descriptors.

A TargetDescriptor represents one emitted build artifact: either the
static "Shared Code" library or a wrapper binary for one output format
(an app, a library or a plugin format). Descriptors are computed fresh
on every export and carry no mutable state.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Literal, get_args

from vcxgen.core.errors import ConfigurationError

# Valid target kinds
TargetKind = Literal[
    "shared_code",
    "standalone_plugin",
    "gui_app",
    "console_app",
    "static_library",
    "dynamic_library",
    "vst_plugin",
    "vst3_plugin",
    "aax_plugin",
    "rtas_plugin",
    "au_plugin",  # macOS only
    "auv3_plugin",  # macOS only
]

TargetFileType = Literal[
    "executable",
    "static_library",
    "shared_library",
    "plugin_bundle",
]

TARGET_KINDS: tuple[str, ...] = get_args(TargetKind)

# Kinds that compile the plugin code and so share it when more than one is built
PLUGIN_KINDS: frozenset[str] = frozenset(
    {
        "standalone_plugin",
        "vst_plugin",
        "vst3_plugin",
        "aax_plugin",
        "rtas_plugin",
        "au_plugin",
        "auv3_plugin",
    }
)

# Kinds an MSBuild tree cannot produce
UNSUPPORTED_KINDS: frozenset[str] = frozenset({"au_plugin", "auv3_plugin"})

DISPLAY_NAMES: dict[str, str] = {
    "shared_code": "Shared Code",
    "gui_app": "App",
    "console_app": "ConsoleApp",
    "static_library": "Static Library",
    "dynamic_library": "Dynamic Library",
    "vst_plugin": "VST",
    "vst3_plugin": "VST3",
    "aax_plugin": "AAX",
    "rtas_plugin": "RTAS",
    "au_plugin": "AU",
    "auv3_plugin": "AUv3 AppExtension",
    "standalone_plugin": "Standalone Plugin",
}

FILE_TYPES: dict[str, TargetFileType] = {
    "gui_app": "executable",
    "console_app": "executable",
    "standalone_plugin": "executable",
    "static_library": "static_library",
    "shared_code": "static_library",
    "dynamic_library": "shared_library",
    "vst_plugin": "shared_library",
    "vst3_plugin": "plugin_bundle",
    "aax_plugin": "plugin_bundle",
    "rtas_plugin": "plugin_bundle",
    "au_plugin": "plugin_bundle",
    "auv3_plugin": "plugin_bundle",
}

_BUNDLE_SUFFIXES: dict[str, str] = {
    "vst3_plugin": ".vst3",
    "aax_plugin": ".aaxdll",
    "rtas_plugin": ".dpm",
}

_FILE_TYPE_SUFFIXES: dict[str, str] = {
    "executable": ".exe",
    "static_library": ".lib",
    "shared_library": ".dll",
}

_CONFIGURATION_TYPES: dict[str, str] = {
    "executable": "Application",
    "static_library": "StaticLibrary",
    "shared_library": "DynamicLibrary",
    "plugin_bundle": "DynamicLibrary",
}

# File name suffix that tags a source file as belonging to one plugin wrapper
FILE_TAG_SUFFIXES: dict[str, str] = {
    "_AU": "au_plugin",
    "_AUv3": "auv3_plugin",
    "_AAX": "aax_plugin",
    "_RTAS": "rtas_plugin",
    "_VST2": "vst_plugin",
    "_VST3": "vst3_plugin",
    "_Standalone": "standalone_plugin",
}

# Namespace for the stable identifiers written into the generated documents
GUID_NAMESPACE = uuid.UUID("a8e6f0c2-5b0d-4c8e-9a5e-2f6d0b7c1e43")


def make_guid(namespace: str, *parts: str) -> str:
    """Compute a deterministic, braced, upper-case GUID.

    The same inputs always produce the same identifier, so regenerating
    a project never churns the identifiers in the written files.

    Args:
        namespace: Scope of the identifier, usually the project uid.
        *parts: Further components, e.g. the target or folder name.

    Returns:
        A string like "{1F5B...-...}".

    Example:
        >>> make_guid("ABC123", "VST3") == make_guid("ABC123", "VST3")
        True
    """
    data = "/".join((namespace, *parts))
    return "{%s}" % str(uuid.uuid5(GUID_NAMESPACE, data)).upper()


def kind_for_file_tag(stem: str) -> str | None:
    """Find which wrapper kind a file name tags, if any.

    A tag is a suffix at the end of the stem ("Plugin_VST3") or followed
    by a further underscore ("juce_audio_plugin_client_RTAS_1"). The
    match is case-insensitive.
    """
    lowered = stem.lower()
    # Check longer suffixes first so "_AUv3" wins over "_AU"
    for suffix in sorted(FILE_TAG_SUFFIXES, key=len, reverse=True):
        tag = suffix.lower()
        if lowered.endswith(tag) or (tag + "_") in lowered:
            return FILE_TAG_SUFFIXES[suffix]
    return None


@dataclass(frozen=True)
class TargetDescriptor:
    """One emitted build artifact.

    Identity is the (kind, project_uid) pair. All other properties are
    derived from the kind.

    Attributes:
        kind: The target kind.
        project_uid: Identifier of the owning project.
        depends_on: The shared-code descriptor for wrapper targets,
            otherwise None.

    Example:
        shared = TargetDescriptor("shared_code", "ABC123")
        vst3 = TargetDescriptor("vst3_plugin", "ABC123", depends_on=shared)
        vst3.suffix       # ".vst3"
        vst3.is_wrapper   # True
    """

    kind: str
    project_uid: str
    depends_on: TargetDescriptor | None = None

    def __post_init__(self) -> None:
        if self.kind not in TARGET_KINDS:
            raise ConfigurationError(f"unknown target kind {self.kind!r}")

    @property
    def name(self) -> str:
        return DISPLAY_NAMES[self.kind]

    @property
    def file_type(self) -> TargetFileType:
        return FILE_TYPES[self.kind]

    @property
    def suffix(self) -> str:
        """Output file extension, including the dot."""
        if self.file_type == "plugin_bundle":
            return _BUNDLE_SUFFIXES.get(self.kind, ".dll")
        return _FILE_TYPE_SUFFIXES[self.file_type]

    @property
    def configuration_type(self) -> str:
        """MSBuild ConfigurationType for this target."""
        return _CONFIGURATION_TYPES[self.file_type]

    @property
    def guid(self) -> str:
        return make_guid(self.project_uid, self.name)

    @property
    def is_shared_code(self) -> bool:
        return self.kind == "shared_code"

    @property
    def is_wrapper(self) -> bool:
        return self.depends_on is not None

    @property
    def is_plugin(self) -> bool:
        return self.kind in PLUGIN_KINDS

    def __repr__(self) -> str:
        return f"TargetDescriptor({self.name!r})"

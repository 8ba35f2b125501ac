# SPDX-License-Identifier: MIT
"""Build configurations.

A BuildConfiguration is one named build variant (Debug, Release, ...)
for one architecture. Configurations are created from stored settings
when a project is loaded and are read-only while files are emitted.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING, Any, Literal

from vcxgen.core.defines import parse_defines
from vcxgen.core.errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

Architecture = Literal["Win32", "x64"]

ARCH_32BIT: Architecture = "Win32"
ARCH_64BIT: Architecture = "x64"
ARCHITECTURES: tuple[str, ...] = (ARCH_32BIT, ARCH_64BIT)

# Characters not allowed in Windows file names
_ILLEGAL_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|]')


class OptimisationLevel(IntEnum):
    """Compiler optimisation level, ordered from none to full."""

    OFF = 1
    MIN_SIZE = 2
    MAX_SPEED = 3
    FULL = 4

    @classmethod
    def parse(cls, value: str | int) -> OptimisationLevel:
        """Parse a level from its name ("min_size", "MinSize") or number."""
        if isinstance(value, int):
            return cls(value)
        key = value.strip().replace("-", "_").upper()
        aliases = {"MINSIZE": "MIN_SIZE", "MAXSPEED": "MAX_SPEED", "DISABLED": "OFF"}
        return cls[aliases.get(key, key)]


def expect_type(
    value: Any, kind: type | tuple[type, ...], key: str, **context: Any
) -> Any:
    """Return value if it has the expected type.

    Raises:
        ConfigurationError: Naming the key, if the type is wrong.
    """
    if not isinstance(value, kind) or (isinstance(value, bool) and bool not in _types(kind)):
        names = "/".join(k.__name__ for k in _types(kind))
        raise ConfigurationError(
            f"key {key!r} must be {names}, got {type(value).__name__}", **context
        )
    return value


def string_tuple(value: Any, key: str, **context: Any) -> tuple[str, ...]:
    """Check that a stored value is a list of strings and freeze it."""
    expect_type(value, list, key, **context)
    for item in value:
        expect_type(item, str, f"{key}[]", **context)
    return tuple(value)


def _types(kind: type | tuple[type, ...]) -> tuple[type, ...]:
    return kind if isinstance(kind, tuple) else (kind,)


def canonical_config_name(name: str, architecture: str) -> str:
    """Build the "{configuration}|{architecture}" join key.

    This is the string that ties the solution file to every project file;
    everything that needs it goes through this function.
    """
    return f"{name}|{architecture}"


def legal_filename(name: str) -> str:
    """Strip characters that cannot appear in a Windows file name."""
    return _ILLEGAL_FILENAME_CHARS.sub("", name).strip()


@dataclass(frozen=True, eq=False)
class BuildConfiguration:
    """One named build configuration for one architecture.

    Identity is the (name, architecture) pair; two configurations with
    the same pair compare equal regardless of their other settings.

    Attributes:
        name: Configuration name, e.g. "Debug".
        is_debug: Whether this is a debug build.
        architecture: "Win32" or "x64".
        optimisation: Optimisation level (defaults by is_debug).
        warning_level: Compiler warning level, 2 to 4.
        use_runtime_lib_dll: Link the DLL runtime. None means "decide
            from the targets being built".
        intermediates_path: Template for the intermediate directory.
        target_binary_name: Base name of the produced binary.
        target_binary_path: Output folder, relative to the project root.
        debug_information_format: MSBuild DebugInformationFormat token
            (defaults by is_debug).
        vst_binary_location: Install folder for the VST copy step
            (defaults by architecture); likewise for vst3/rtas/aax.
    """

    name: str
    is_debug: bool = False
    architecture: str = ARCH_64BIT
    optimisation: OptimisationLevel | None = None
    warning_level: int = 4
    warnings_are_errors: bool = False
    use_runtime_lib_dll: bool | None = None
    intermediates_path: str = ""
    target_binary_name: str = ""
    target_binary_path: str = ""
    prebuild_command: str = ""
    postbuild_command: str = ""
    generate_debug_symbols: bool = False
    generate_manifest: bool = True
    link_incremental: bool = False
    character_set: str = ""
    fast_math: bool = False
    debug_information_format: str | None = None
    link_time_optimisation: bool = False
    plugin_binary_copy_step: bool = False
    vst_binary_location: str | None = None
    vst3_binary_location: str | None = None
    rtas_binary_location: str | None = None
    aax_binary_location: str | None = None
    header_search_paths: tuple[str, ...] = ()
    library_search_paths: tuple[str, ...] = ()
    defines: Mapping[str, str] = field(default_factory=dict)
    module_definition_file: str = ""

    def __post_init__(self) -> None:
        if self.architecture not in ARCHITECTURES:
            raise ConfigurationError(
                f"unknown architecture {self.architecture!r}, "
                f"expected one of {', '.join(ARCHITECTURES)}",
                configuration=self.name,
            )
        if not 2 <= self.warning_level <= 4:
            raise ConfigurationError(
                f"warning level must be between 2 and 4, got {self.warning_level}",
                configuration=self.name,
            )

        # Fill in defaults that depend on other fields
        if self.optimisation is None:
            object.__setattr__(self, "optimisation", self.optimisation_level)
        if self.debug_information_format is None:
            fmt = "ProgramDatabase" if self.is_debug else "None"
            object.__setattr__(self, "debug_information_format", fmt)

        common = "%CommonProgramW6432%" if self.is_64bit else "%CommonProgramFiles(x86)%"
        defaults = {
            "vst_binary_location": (
                "%ProgramW6432%" if self.is_64bit else "%programfiles(x86)%"
            )
            + "\\Steinberg\\Vstplugins",
            "vst3_binary_location": common + "\\VST3",
            "rtas_binary_location": common + "\\Digidesign\\DAE\\Plug-Ins",
            "aax_binary_location": common + "\\Avid\\Audio\\Plug-Ins",
        }
        for attr, default in defaults.items():
            if getattr(self, attr) is None:
                object.__setattr__(self, attr, default)

    @property
    def optimisation_level(self) -> OptimisationLevel:
        """The optimisation level, defaulting by is_debug when unset."""
        if self.optimisation is not None:
            return self.optimisation
        return OptimisationLevel.OFF if self.is_debug else OptimisationLevel.FULL

    @property
    def is_64bit(self) -> bool:
        return self.architecture == ARCH_64BIT

    @property
    def msvc_name(self) -> str:
        """Canonical "{name}|{architecture}" name of this configuration."""
        return canonical_config_name(self.name, self.architecture)

    def output_filename(self, suffix: str, force_suffix: bool) -> str:
        """Get the binary file name for this configuration.

        Args:
            suffix: Extension to apply, including the dot (may be empty).
            force_suffix: Replace any extension already in the name.

        Returns:
            The file name, e.g. "MyPlugin.vst3".
        """
        target = legal_filename(self.target_binary_name)
        if force_suffix or "." not in target:
            base = target.rpartition(".")[0] if "." in target else target
            return base + suffix
        return target

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BuildConfiguration):
            return NotImplemented
        return (self.name, self.architecture) == (other.name, other.architecture)

    def __hash__(self) -> int:
        return hash((self.name, self.architecture))

    def __repr__(self) -> str:
        return f"BuildConfiguration({self.msvc_name!r})"

    @classmethod
    def from_dict(
        cls, data: Mapping[str, Any], default_binary_name: str = ""
    ) -> BuildConfiguration:
        """Create a configuration from stored settings.

        Keys match the field names; "debug" is accepted for is_debug and
        "optimisation" may be a level name.

        Raises:
            ConfigurationError: If the name is missing or a value is invalid.
        """
        if "name" not in data:
            raise ConfigurationError("configuration is missing a 'name'")
        config_name = str(data["name"])

        values: dict[str, Any] = {}
        for key, value in data.items():
            if key == "debug":
                key = "is_debug"
            if key not in _FIELD_NAMES:
                raise ConfigurationError(
                    f"unknown configuration setting {key!r}",
                    configuration=config_name,
                )
            if key in ("header_search_paths", "library_search_paths"):
                value = string_tuple(value, key, configuration=config_name)
            elif value is not None or key not in _OPTIONAL_FIELDS:
                expect_type(value, _FIELD_TYPES.get(key, str), key, configuration=config_name)
            values[key] = value

        if values.get("optimisation") is not None:
            try:
                values["optimisation"] = OptimisationLevel.parse(values["optimisation"])
            except (KeyError, ValueError) as e:
                raise ConfigurationError(
                    f"invalid optimisation level {values['optimisation']!r}",
                    configuration=config_name,
                ) from e

        if "defines" in values:
            raw = values["defines"]
            if isinstance(raw, dict):
                values["defines"] = {str(k): str(v) for k, v in raw.items()}
            else:
                if isinstance(raw, list):
                    string_tuple(raw, "defines", configuration=config_name)
                values["defines"] = parse_defines(raw)

        values.setdefault("target_binary_name", default_binary_name)
        return cls(**values)


_FIELD_NAMES = frozenset(BuildConfiguration.__dataclass_fields__)

# Fields that may be stored as null
_OPTIONAL_FIELDS = frozenset(
    name for name, f in BuildConfiguration.__dataclass_fields__.items() if f.default is None
)

# Stored value types for fields that are not plain strings
_FIELD_TYPES: dict[str, type | tuple[type, ...]] = {
    "is_debug": bool,
    "optimisation": (str, int),
    "warning_level": int,
    "warnings_are_errors": bool,
    "use_runtime_lib_dll": bool,
    "generate_debug_symbols": bool,
    "generate_manifest": bool,
    "link_incremental": bool,
    "fast_math": bool,
    "link_time_optimisation": bool,
    "plugin_binary_copy_step": bool,
    "defines": (str, list, dict),
}


def default_configurations(binary_name: str) -> tuple[BuildConfiguration, ...]:
    """The Debug/Release pair used when a project declares none."""
    return (
        BuildConfiguration("Debug", is_debug=True, target_binary_name=binary_name),
        BuildConfiguration("Release", is_debug=False, target_binary_name=binary_name),
    )


def validate_configurations(configs: Iterable[BuildConfiguration]) -> None:
    """Check that a configuration list is usable for export.

    Raises:
        ConfigurationError: If the list is empty or two configurations
            share the same canonical name.
    """
    seen: set[str] = set()
    count = 0
    for config in configs:
        count += 1
        if config.msvc_name in seen:
            raise ConfigurationError(
                "duplicate configuration", configuration=config.msvc_name
            )
        seen.add(config.msvc_name)
    if count == 0:
        raise ConfigurationError("project has no build configurations")

# SPDX-License-Identifier: MIT
"""Project description consumed by the exporters.

The Project is a read-only snapshot of everything an export needs:
metadata, declared output formats, build configurations, the file tree
and the exporter settings. It is usually loaded from a JSON file with
load_project(), but can be built directly in Python.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from vcxgen.core.config import (
    BuildConfiguration,
    default_configurations,
    expect_type,
    legal_filename,
    string_tuple,
    validate_configurations,
)
from vcxgen.core.defines import merge_defines, parse_defines
from vcxgen.core.errors import ConfigurationError, VcxgenError
from vcxgen.core.files import FileGroup
from vcxgen.core.target import PLUGIN_KINDS
from vcxgen.toolsets.profiles import ExporterSettings

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from vcxgen.generators.resources import IconProvider

logger = logging.getLogger(__name__)

# Preprocessor flag announcing each plugin format to the plugin client code
PLUGIN_BUILD_FLAGS: dict[str, str] = {
    "vst_plugin": "JucePlugin_Build_VST",
    "vst3_plugin": "JucePlugin_Build_VST3",
    "au_plugin": "JucePlugin_Build_AU",
    "auv3_plugin": "JucePlugin_Build_AUv3",
    "rtas_plugin": "JucePlugin_Build_RTAS",
    "aax_plugin": "JucePlugin_Build_AAX",
    "standalone_plugin": "JucePlugin_Build_Standalone",
}


class Project:
    """Everything an exporter reads about a project.

    Example:
        project = Project(
            "Gain",
            uid="x7Fq2a",
            root_dir=Path("~/src/Gain"),
            formats=["vst3_plugin", "standalone_plugin"],
            groups=[FileGroup("Source", (FileEntry("Source/Plugin.cpp"),))],
        )

    Attributes:
        name: Project name; also names the solution.
        uid: Stable project identifier used to derive target GUIDs.
        root_dir: Folder all relative paths are relative to.
        version: Dotted version string.
        formats: Declared output formats (target kinds).
        configurations: Build configurations, in declaration order.
        groups: Top-level file groups.
        defines: Project-wide preprocessor defines.
        module_defines: Defines contributed by the library modules.
        module_libraries: System libraries the modules need, without ".lib".
        cpp_standard: Requested C++ standard ("11", "14", "17", "latest").
        sdk_paths: Plugin SDK folders keyed by "aax", "rtas", relative to
            root_dir.
        plugin_client_module: Folder holding the plugin client module,
            relative to root_dir.
        module_paths: Extra include folders, relative to root_dir.
        icon_images: Source of icon images, if any.
        icon_file: A ready-made .ico to use instead of icon_images.
        exporter: Visual Studio exporter settings.
    """

    __slots__ = (
        "name",
        "uid",
        "root_dir",
        "version",
        "company_name",
        "company_copyright",
        "formats",
        "configurations",
        "groups",
        "defines",
        "module_defines",
        "module_libraries",
        "cpp_standard",
        "sdk_paths",
        "plugin_client_module",
        "module_paths",
        "icon_images",
        "icon_file",
        "exporter",
    )

    def __init__(
        self,
        name: str,
        *,
        uid: str | None = None,
        root_dir: Path | str | None = None,
        version: str = "1.0.0",
        company_name: str = "",
        company_copyright: str = "",
        formats: Iterable[str] = (),
        configurations: Iterable[BuildConfiguration] | None = None,
        groups: Iterable[FileGroup] = (),
        defines: Mapping[str, str] | None = None,
        module_defines: Mapping[str, str] | None = None,
        module_libraries: Iterable[str] = (),
        cpp_standard: str = "14",
        sdk_paths: Mapping[str, str] | None = None,
        plugin_client_module: str = "JuceLibraryCode/modules",
        module_paths: Iterable[str] = (),
        icon_images: IconProvider | None = None,
        icon_file: Path | str | None = None,
        exporter: ExporterSettings | None = None,
    ) -> None:
        self.name = name
        self.uid = uid or name
        self.root_dir = Path(root_dir) if root_dir else Path.cwd()
        self.version = version
        self.company_name = company_name
        self.company_copyright = company_copyright
        self.formats = tuple(formats)
        self.configurations = (
            tuple(configurations)
            if configurations is not None
            else default_configurations(name)
        )
        self.groups = tuple(groups)
        self.defines = dict(defines or {})
        self.module_defines = dict(module_defines or {})
        self.module_libraries = tuple(module_libraries)
        self.cpp_standard = cpp_standard
        self.sdk_paths = dict(sdk_paths or {})
        self.plugin_client_module = plugin_client_module
        self.module_paths = tuple(module_paths)
        self.icon_images = icon_images
        self.icon_file = Path(icon_file) if icon_file else None
        self.exporter = exporter or ExporterSettings()

        validate_configurations(self.configurations)

    def __repr__(self) -> str:
        return f"Project({self.name!r})"

    @property
    def filename_root(self) -> str:
        """Base name for generated files."""
        return legal_filename(self.name)

    @property
    def is_static_library(self) -> bool:
        return set(self.formats) == {"static_library"}

    @property
    def is_console_app(self) -> bool:
        return "console_app" in self.formats

    @property
    def is_audio_plugin(self) -> bool:
        return any(fmt in PLUGIN_KINDS for fmt in self.formats)

    def sdk_path(self, name: str) -> str:
        """Folder of a plugin SDK, relative to root_dir.

        Defaults to "SDKs/<NAME>" when not configured.
        """
        return self.sdk_paths.get(name, f"SDKs/{name.upper()}")

    def module_library_names(self) -> list[str]:
        """Module libraries as linker inputs ("winmm" -> "winmm.lib")."""
        return [lib if lib.endswith(".lib") else lib + ".lib" for lib in self.module_libraries]

    def all_module_defines(self) -> dict[str, str]:
        """Module defines plus the plugin format flags for plugin projects."""
        if not self.is_audio_plugin:
            return dict(self.module_defines)
        flags = {
            flag: "1" if kind in self.formats else "0"
            for kind, flag in PLUGIN_BUILD_FLAGS.items()
        }
        return merge_defines(self.module_defines, flags)


def _require(data: Mapping[str, Any], key: str, kind: type | tuple[type, ...]) -> Any:
    if key not in data:
        raise ConfigurationError(f"missing required key {key!r}")
    return expect_type(data[key], kind, key)


def _optional(
    data: Mapping[str, Any], key: str, kind: type | tuple[type, ...], default: Any
) -> Any:
    if key not in data:
        return default
    return expect_type(data[key], kind, key)


def _strings(data: Mapping[str, Any], key: str) -> tuple[str, ...]:
    if key not in data:
        return ()
    return string_tuple(data[key], key)


def _objects(data: Mapping[str, Any], key: str) -> list[Mapping[str, Any]]:
    items = _optional(data, key, list, [])
    for item in items:
        expect_type(item, dict, f"{key}[]")
    return items


def _defines(data: Mapping[str, Any], key: str) -> dict[str, str]:
    raw = _optional(data, key, (str, list, dict), {})
    if isinstance(raw, dict):
        return {str(k): str(v) for k, v in raw.items()}
    if isinstance(raw, list):
        string_tuple(raw, key)
    return parse_defines(raw)


def project_from_dict(data: Mapping[str, Any], base_dir: Path) -> Project:
    """Build a Project from a decoded JSON description.

    Args:
        data: The decoded description.
        base_dir: Folder relative paths in the description resolve against.

    Raises:
        ConfigurationError: On a missing key, a value of the wrong type or
            an invalid value. The message names the offending key.
    """
    name = _require(data, "name", str)
    _require(data, "formats", list)
    formats = _strings(data, "formats")

    root_dir = base_dir / _optional(data, "root_dir", str, ".")

    configurations: tuple[BuildConfiguration, ...] | None = None
    if "configurations" in data:
        raw_configs = _objects(data, "configurations")
        binary_name = _optional(data, "binary_name", str, name)
        configurations = tuple(
            BuildConfiguration.from_dict(c, default_binary_name=binary_name)
            for c in raw_configs
        )

    groups = tuple(FileGroup.from_dict(g) for g in _objects(data, "groups"))
    exporter = ExporterSettings.from_dict(_optional(data, "exporter", dict, {}))

    icon_images = None
    icons = _strings(data, "icons")
    if icons:
        from vcxgen.generators.resources import IconSet, RasterImage

        icon_images = IconSet(
            [RasterImage.from_png_file(root_dir / p) for p in icons],
            rescale=bool(_optional(data, "rescale_icons", bool, True)),
        )

    icon_file = _optional(data, "icon_file", str, None)

    sdk_paths = _optional(data, "sdk_paths", dict, {})
    for sdk, folder in sdk_paths.items():
        expect_type(folder, str, f"sdk_paths.{sdk}")

    return Project(
        name,
        uid=_optional(data, "uid", str, None),
        root_dir=root_dir,
        version=_optional(data, "version", str, "1.0.0"),
        company_name=_optional(data, "company_name", str, ""),
        company_copyright=_optional(data, "company_copyright", str, ""),
        formats=formats,
        configurations=configurations,
        groups=groups,
        defines=_defines(data, "defines"),
        module_defines=_defines(data, "module_defines"),
        module_libraries=_strings(data, "module_libraries"),
        cpp_standard=str(_optional(data, "cpp_standard", (str, int), "14")),
        sdk_paths=sdk_paths,
        plugin_client_module=_optional(
            data, "plugin_client_module", str, "JuceLibraryCode/modules"
        ),
        module_paths=_strings(data, "module_paths"),
        icon_images=icon_images,
        icon_file=root_dir / icon_file if icon_file else None,
        exporter=exporter,
    )


def load_project(path: Path | str) -> Project:
    """Load a project from a JSON description file.

    Relative paths in the file resolve against the file's folder.

    Raises:
        ConfigurationError: If the file cannot be read or parsed, or the
            description is invalid.
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigurationError(f"cannot read project file: {e}", path=path) from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"invalid JSON: {e}", path=path) from e

    if not isinstance(data, dict):
        raise ConfigurationError("project file must contain a JSON object", path=path)

    try:
        project = project_from_dict(data, path.parent)
    except VcxgenError as e:
        if e.path is None:
            raise ConfigurationError(
                e.message, target=e.target, configuration=e.configuration, path=path
            ) from e
        raise

    logger.debug("Loaded %r from %s", project, path)
    return project

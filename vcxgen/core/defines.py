# SPDX-License-Identifier: MIT
"""Preprocessor define handling for vcxgen.

Defines are kept as ordered name -> value mappings. An empty value means
a bare define ("NDEBUG"), anything else is written as "NAME=value".

Merging follows last-writer-wins: when several sources define the same
name, the value from the latest source is kept, but the name stays at
the position where it was first defined, so the emitted order is stable.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping


def parse_defines(text: str | Iterable[str]) -> dict[str, str]:
    """Parse defines from a string or a list of "NAME=value" items.

    Strings may separate items with whitespace, commas or semicolons.

    Examples:
        >>> parse_defines("FOO=1 BAR")
        {'FOO': '1', 'BAR': ''}
        >>> parse_defines(["A=1", "B = 2"])
        {'A': '1', 'B': '2'}
    """
    if isinstance(text, str):
        items = text.replace(";", " ").replace(",", " ").split()
    else:
        items = list(text)

    result: dict[str, str] = {}
    for item in items:
        name, _, value = item.partition("=")
        name = name.strip()
        if name:
            result[name] = value.strip()
    return result


def merge_defines(*sources: Mapping[str, str]) -> dict[str, str]:
    """Merge define mappings, later sources overriding earlier ones.

    Merging is idempotent: merging a mapping with itself or with an empty
    mapping leaves it unchanged.

    Examples:
        >>> merge_defines({"A": "1"}, {"A": "2"})
        {'A': '2'}
        >>> merge_defines({"A": "1"}, {})
        {'A': '1'}
    """
    result: dict[str, str] = {}
    for source in sources:
        for name, value in source.items():
            result[name] = value
    return result


def format_defines(defines: Mapping[str, str], separator: str = ";") -> str:
    """Format defines as MSBuild expects them.

    Example:
        >>> format_defines({"WIN32": "", "JucePlugin_Build_VST3": "1"})
        'WIN32;JucePlugin_Build_VST3=1'
    """
    items = []
    for name, value in defines.items():
        items.append(f"{name}={value}" if value else name)
    return separator.join(items)

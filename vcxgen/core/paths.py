# SPDX-License-Identifier: MIT
"""Path rebasing for generated Visual Studio files.

Every path written into a generated document is expressed relative to the
folder that holds the document. All of that goes through rebase(), which
works lexically on Windows-style paths so the output does not depend on
the host platform or on the files existing.
"""

from __future__ import annotations

from pathlib import PurePath, PureWindowsPath

from vcxgen.core.errors import PathResolutionError


def windows_path(path: str | PurePath) -> PureWindowsPath:
    """Convert a path written with either separator to a PureWindowsPath."""
    return PureWindowsPath(str(path).replace("/", "\\"))


def windows_style(path: str | PurePath) -> str:
    """Render a path with backslash separators."""
    return str(path).replace("/", "\\")


def is_absolute(path: str | PurePath) -> bool:
    """Check whether a path is absolute on either Windows or POSIX.

    Paths starting with an MSBuild macro ("$(...)") count as absolute,
    since they must not be rebased.
    """
    text = str(path)
    if text.startswith("$"):
        return True
    win = windows_path(text)
    return bool(win.drive) or text.startswith(("/", "\\"))


def _normalise(path: PureWindowsPath) -> tuple[str, list[str]]:
    """Collapse "." and ".." components, returning (anchor, parts)."""
    anchor = path.anchor
    parts: list[str] = []
    for part in path.parts[1:] if anchor else path.parts:
        if part in ("", "."):
            continue
        if part == "..":
            if parts and parts[-1] != "..":
                parts.pop()
            elif not anchor:
                parts.append("..")
            # ".." above an absolute root stays at the root
            continue
        parts.append(part)
    return anchor, parts


def relative_to(path: str | PurePath, start: str | PurePath) -> str:
    """Express path relative to start, both given in the same space.

    Both arguments must be absolute, or both relative to the same base.

    Raises:
        PathResolutionError: If the paths are on different drives, or
            start climbs above its base so the walk back down is unknown.
    """
    p_anchor, p_parts = _normalise(windows_path(path))
    s_anchor, s_parts = _normalise(windows_path(start))

    if p_anchor.lower() != s_anchor.lower():
        raise PathResolutionError(
            f"cannot express path relative to {windows_style(start)!r}",
            path=windows_style(path),
        )

    common = 0
    for a, b in zip(p_parts, s_parts):
        if a.lower() != b.lower():
            break
        common += 1

    remaining_start = s_parts[common:]
    if ".." in remaining_start:
        raise PathResolutionError(
            f"cannot walk back from {windows_style(start)!r}",
            path=windows_style(path),
        )

    rel = [".."] * len(remaining_start) + p_parts[common:]
    return "\\".join(rel) if rel else "."


def rebase(
    path: str | PurePath,
    from_dir: str | PurePath,
    to_dir: str | PurePath,
) -> str:
    """Re-base a path from one folder to another.

    Args:
        path: The path, relative to from_dir. Absolute paths and paths
            starting with an MSBuild macro are returned unchanged.
        from_dir: Folder the path is currently relative to.
        to_dir: Folder the result should be relative to.

    Returns:
        The Windows-style path relative to to_dir.

    Raises:
        PathResolutionError: If the path cannot be expressed under to_dir.

    Example:
        rebase("Source/Main.cpp", "/proj", "/proj/Builds/VisualStudio2017")
        # -> ..\\..\\Source\\Main.cpp
    """
    if is_absolute(path):
        return windows_style(path)

    joined = windows_path(from_dir) / windows_path(path)
    return relative_to(joined, to_dir)


def prepend_dot(filename: str) -> str:
    """Prefix a relative filename with ".\\" as MSBuild item paths expect."""
    if is_absolute(filename):
        return windows_style(filename)
    return ".\\" + windows_style(filename)


def prepend_if_not_absolute(file: str, prefix: str) -> str:
    """Prefix a file with an MSBuild directory macro unless it is absolute."""
    if is_absolute(file):
        prefix = ""
    return prefix + windows_style(file)


def escape_c_string(text: str) -> str:
    """Escape a string for use inside a C string literal."""
    out = []
    for ch in text:
        if ch == "\\":
            out.append("\\\\")
        elif ch == '"':
            out.append('\\"')
        elif ch == "\n":
            out.append("\\n")
        elif ch == "\r":
            out.append("\\r")
        elif ch == "\t":
            out.append("\\t")
        else:
            out.append(ch)
    return "".join(out)


def quoted(text: str) -> str:
    return f'"{text}"'

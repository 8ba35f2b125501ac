# SPDX-License-Identifier: MIT
"""Icon and version-resource generation.

Builds the two resource artifacts of a Windows target: a multi-size
.ico container and a resource script (.rc) with the VERSIONINFO block.
Images come from an IconProvider; RasterImage is the built-in provider
image, read from and written to PNG.
"""

from __future__ import annotations

import logging
import re
import struct
import zlib
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from vcxgen.core.errors import ConfigurationError
from vcxgen.core.paths import escape_c_string, quoted
from vcxgen.generators.output import EOL_WINDOWS

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from pathlib import Path

    from vcxgen.core.project import Project

logger = logging.getLogger(__name__)

ICON_SIZES = (16, 32, 48, 256)

# Pixels at or below this alpha are written as fully transparent
ALPHA_THRESHOLD = 5

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"

_COLOR_TYPE_CHANNELS = {2: 3, 6: 4}

Pixel = tuple[int, int, int, int]


class IconImage(Protocol):
    """An image an icon can be built from."""

    width: int
    height: int

    def pixel(self, x: int, y: int) -> Pixel:
        """Return (r, g, b, a) of a pixel, with (0, 0) the top-left corner."""
        ...

    def to_png(self) -> bytes: ...


class IconProvider(Protocol):
    """Supplies the icon image for a given square size."""

    def image_for_size(self, size: int) -> IconImage | None: ...


class RasterImage:
    """An RGBA image held in memory, row by row from the top.

    Example:
        image = RasterImage.from_png_file(Path("Resources/icon.png"))
        small = image.scaled(32)
        data = small.to_png()
    """

    __slots__ = ("width", "height", "_pixels")

    def __init__(self, width: int, height: int, pixels: bytes | None = None) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"invalid image size {width}x{height}")
        if pixels is None:
            pixels = bytes(width * height * 4)
        if len(pixels) != width * height * 4:
            raise ValueError("pixel data does not match the image size")
        self.width = width
        self.height = height
        self._pixels = bytes(pixels)

    def __repr__(self) -> str:
        return f"RasterImage({self.width}x{self.height})"

    @classmethod
    def filled(cls, width: int, height: int, color: Pixel) -> RasterImage:
        return cls(width, height, bytes(color) * (width * height))

    def pixel(self, x: int, y: int) -> Pixel:
        i = (y * self.width + x) * 4
        r, g, b, a = self._pixels[i : i + 4]
        return r, g, b, a

    def scaled(self, width: int, height: int | None = None) -> RasterImage:
        """Resample to a new size, nearest neighbour."""
        height = width if height is None else height
        src = self._pixels
        out = bytearray()
        for y in range(height):
            sy = y * self.height // height
            row = sy * self.width
            for x in range(width):
                i = (row + x * self.width // width) * 4
                out += src[i : i + 4]
        return RasterImage(width, height, bytes(out))

    def to_png(self) -> bytes:
        """Encode as an 8-bit RGBA PNG."""
        stride = self.width * 4
        raw = b"".join(
            b"\x00" + self._pixels[y * stride : (y + 1) * stride] for y in range(self.height)
        )
        header = struct.pack(">IIBBBBB", self.width, self.height, 8, 6, 0, 0, 0)
        return (
            PNG_SIGNATURE
            + _png_chunk(b"IHDR", header)
            + _png_chunk(b"IDAT", zlib.compress(raw, 9))
            + _png_chunk(b"IEND", b"")
        )

    @classmethod
    def from_png(cls, data: bytes) -> RasterImage:
        """Decode a non-interlaced 8-bit RGB or RGBA PNG.

        Raises:
            ValueError: If the data is not a PNG of a supported kind.
        """
        if not data.startswith(PNG_SIGNATURE):
            raise ValueError("not a PNG file")

        header = None
        idat = bytearray()
        pos = len(PNG_SIGNATURE)
        while pos < len(data):
            try:
                (length,) = struct.unpack_from(">I", data, pos)
            except struct.error as e:
                raise ValueError("truncated PNG chunk") from e
            kind = data[pos + 4 : pos + 8]
            body = data[pos + 8 : pos + 8 + length]
            if len(body) != length:
                raise ValueError("truncated PNG chunk")
            pos += 12 + length
            if kind == b"IHDR":
                header = struct.unpack(">IIBBBBB", body)
            elif kind == b"IDAT":
                idat += body
            elif kind == b"IEND":
                break

        if header is None:
            raise ValueError("PNG has no IHDR chunk")
        width, height, depth, color_type, compression, filter_method, interlace = header
        if depth != 8 or color_type not in _COLOR_TYPE_CHANNELS:
            raise ValueError("only 8-bit RGB and RGBA PNGs are supported")
        if compression or filter_method or interlace:
            raise ValueError("interlaced or non-standard PNGs are not supported")

        channels = _COLOR_TYPE_CHANNELS[color_type]
        try:
            raw = zlib.decompress(bytes(idat))
        except zlib.error as e:
            raise ValueError(f"corrupt PNG data: {e}") from e

        rows = _unfilter(raw, width, height, channels)
        if channels == 4:
            return cls(width, height, rows)
        pixels = bytearray()
        for i in range(0, len(rows), 3):
            pixels += rows[i : i + 3]
            pixels.append(255)
        return cls(width, height, bytes(pixels))

    @classmethod
    def from_png_file(cls, path: Path) -> RasterImage:
        """Read a PNG file.

        Raises:
            ConfigurationError: If the file cannot be read or decoded.
        """
        try:
            return cls.from_png(path.read_bytes())
        except OSError as e:
            raise ConfigurationError(f"cannot read icon image: {e}", path=path) from e
        except ValueError as e:
            raise ConfigurationError(f"invalid icon image: {e}", path=path) from e


def _png_chunk(kind: bytes, body: bytes) -> bytes:
    crc = zlib.crc32(kind + body) & 0xFFFFFFFF
    return struct.pack(">I", len(body)) + kind + body + struct.pack(">I", crc)


def _paeth(a: int, b: int, c: int) -> int:
    p = a + b - c
    pa, pb, pc = abs(p - a), abs(p - b), abs(p - c)
    if pa <= pb and pa <= pc:
        return a
    return b if pb <= pc else c


def _unfilter(raw: bytes, width: int, height: int, bpp: int) -> bytes:
    """Undo PNG scanline filtering."""
    stride = width * bpp
    if len(raw) < height * (stride + 1):
        raise ValueError("truncated PNG image data")

    out = bytearray()
    prev = bytearray(stride)
    pos = 0
    for _ in range(height):
        filter_type = raw[pos]
        line = bytearray(raw[pos + 1 : pos + 1 + stride])
        pos += stride + 1
        for i in range(stride):
            left = line[i - bpp] if i >= bpp else 0
            up = prev[i]
            if filter_type == 1:
                line[i] = (line[i] + left) & 0xFF
            elif filter_type == 2:
                line[i] = (line[i] + up) & 0xFF
            elif filter_type == 3:
                line[i] = (line[i] + ((left + up) >> 1)) & 0xFF
            elif filter_type == 4:
                up_left = prev[i - bpp] if i >= bpp else 0
                line[i] = (line[i] + _paeth(left, up, up_left)) & 0xFF
            elif filter_type != 0:
                raise ValueError(f"unknown PNG filter type {filter_type}")
        out += line
        prev = line
    return bytes(out)


class IconSet:
    """IconProvider over a fixed list of images.

    An image of exactly the requested size is used when there is one.
    Otherwise, with rescale enabled, the smallest larger image is scaled
    down; with it disabled the size is left out of the icon.
    """

    def __init__(self, images: Iterable[IconImage], rescale: bool = True) -> None:
        self.images = list(images)
        self.rescale = rescale

    def image_for_size(self, size: int) -> IconImage | None:
        for image in self.images:
            if image.width == size and image.height == size:
                return image
        if not self.rescale:
            return None

        larger = [i for i in self.images if i.width >= size and i.height >= size]
        if not larger:
            return None
        best = min(larger, key=lambda i: i.width * i.height)
        if isinstance(best, RasterImage):
            return best.scaled(size)
        return RasterImage.from_png(best.to_png()).scaled(size)


def bmp_icon_block(image: IconImage) -> bytes:
    """Encode an image as a 32-bit DIB with an AND mask, as stored in an ICO.

    Colour and mask rows are written bottom-up.
    """
    w, h = image.width, image.height
    mask_stride = (w + 31) // 32 * 4

    out = bytearray(
        struct.pack("<IiiHHIIiiII", 40, w, h * 2, 1, 32, 0, h * w * 4 + h * mask_stride, 0, 0, 0, 0)
    )
    for y in reversed(range(h)):
        for x in range(w):
            r, g, b, a = image.pixel(x, y)
            if a <= ALPHA_THRESHOLD:
                out += b"\x00\x00\x00\x00"
            else:
                out += bytes((b, g, r, a))

    for y in reversed(range(h)):
        row = bytearray(mask_stride)
        for x in range(w):
            if image.pixel(x, y)[3] <= ALPHA_THRESHOLD:
                row[x // 8] |= 0x80 >> (x % 8)
        out += row
    return bytes(out)


def build_icon_container(images: Sequence[IconImage]) -> bytes:
    """Pack images into an .ico file.

    Images smaller than 256 pixels are stored as DIBs, larger ones as PNG.

    Args:
        images: The images, in the order to store them.

    Returns:
        The complete .ico file.
    """
    blocks = [bmp_icon_block(i) if i.width < 256 else i.to_png() for i in images]

    data_start = 6 + 16 * len(images)
    out = bytearray(struct.pack("<HHH", 0, 1, len(images)))
    offset = data_start
    for image, block in zip(images, blocks):
        out += struct.pack(
            "<BBBBHHII",
            image.width if image.width < 256 else 0,
            image.height if image.height < 256 else 0,
            0,
            0,
            1,
            32,
            len(block),
            offset,
        )
        offset += len(block)
    for block in blocks:
        out += block
    return bytes(out)


@dataclass(frozen=True)
class ResourcePack:
    """The resource artifacts of a project.

    Attributes:
        icon: Contents of the .ico file, or None when there is no icon.
        version: Four-part comma-separated version, e.g. "1,2,0,0".
        strings: (name, value) pairs of the version string table.
    """

    icon: bytes | None
    version: str
    strings: tuple[tuple[str, str], ...]


def version_number(version: str) -> str:
    """Turn a dotted version into the four-part VERSIONINFO form.

    Example:
        >>> version_number("1.2")
        '1,2,0,0'
    """
    parts = [p.strip() for p in re.split(r"[.,]", version)]
    parts = [p for p in parts if p][:4]
    parts += ["0"] * (4 - len(parts))
    return ",".join(parts)


def _icon_bytes(project: Project) -> bytes | None:
    if project.icon_file is not None:
        try:
            return project.icon_file.read_bytes()
        except OSError as e:
            raise ConfigurationError(
                f"cannot read icon file: {e}", path=project.icon_file
            ) from e

    if project.icon_images is None:
        return None
    images = [project.icon_images.image_for_size(size) for size in ICON_SIZES]
    found = [i for i in images if i is not None]
    if not found:
        logger.warning("No icon image is large enough, building without an icon")
        return None
    return build_icon_container(found)


def build_resource_pack(project: Project) -> ResourcePack | None:
    """Build the icon and version table for a project.

    Returns:
        The pack, or None for a static library project, which has no
        resources.

    Raises:
        ConfigurationError: If a supplied icon file cannot be read.
    """
    if project.is_static_library:
        return None

    strings = (
        ("CompanyName", project.company_name),
        ("LegalCopyright", project.company_copyright),
        ("FileDescription", project.name),
        ("FileVersion", project.version),
        ("ProductName", project.name),
        ("ProductVersion", project.version),
    )
    return ResourcePack(
        icon=_icon_bytes(project),
        version=version_number(project.version),
        strings=strings,
    )


def render_rc_file(
    pack: ResourcePack,
    icon_name: str | None,
    rc_macro: str = "JUCE_USER_DEFINED_RC_FILE",
) -> str:
    """Render the resource script.

    Defining rc_macro when compiling replaces the whole script with the
    user's own file.

    Args:
        pack: The resource pack.
        icon_name: File name of the icon next to the script, or None.
        rc_macro: Macro naming a user-supplied resource script.

    Returns:
        The script text, with CRLF line endings.
    """
    lines = [
        f"#ifdef {rc_macro}",
        f" #include {rc_macro}",
        "#else",
        "",
        "#undef  WIN32_LEAN_AND_MEAN",
        "#define WIN32_LEAN_AND_MEAN",
        "#include <windows.h>",
        "",
        "VS_VERSION_INFO VERSIONINFO",
        f"FILEVERSION  {pack.version}",
        "BEGIN",
        '  BLOCK "StringFileInfo"',
        "  BEGIN",
        '    BLOCK "040904E4"',
        "    BEGIN",
    ]
    lines += [
        f'      VALUE "{name}",  "{escape_c_string(value)}\\0"'
        for name, value in pack.strings
        if value
    ]
    lines += [
        "    END",
        "  END",
        "",
        '  BLOCK "VarFileInfo"',
        "  BEGIN",
        '    VALUE "Translation", 0x409, 1252',
        "  END",
        "END",
        "",
        "#endif",
        "",
    ]
    if pack.icon is not None and icon_name:
        lines += [
            f"IDI_ICON1 ICON DISCARDABLE {quoted(icon_name)}",
            f"IDI_ICON2 ICON DISCARDABLE {quoted(icon_name)}",
        ]
    return EOL_WINDOWS.join(lines)

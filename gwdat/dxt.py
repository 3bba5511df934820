"""Decoders for DXT-family block-compressed texture data."""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass
from typing import Iterator

from PIL import Image

_F32 = struct.Struct("<f")


def _f32(value: float) -> float:
    """Round ``value`` to single precision."""
    return _F32.unpack(_F32.pack(value))[0]


_FLOAT_TO_BYTE = _f32(127.5)
_BYTE_TO_FLOAT = _f32(1.0 / _FLOAT_TO_BYTE)
# Normal component for every stored byte, as the texture stores it.
_NORMALS = tuple(_f32(_f32(v * _BYTE_TO_FLOAT) - 1.0) for v in range(256))


@dataclass
class DecodedImage:
    """Decoded pixels: packed RGB bytes and optional 8-bit alpha, row by row."""

    width: int
    height: int
    rgb: bytes
    alpha: bytes | None = None

    def pixel(self, x: int, y: int) -> tuple[int, int, int]:
        """Return the RGB colour of the pixel at ``(x, y)``."""
        start = (y * self.width + x) * 3
        r, g, b = self.rgb[start:start + 3]
        return r, g, b

    def alpha_at(self, x: int, y: int) -> int | None:
        """Return the alpha of the pixel at ``(x, y)``, or None without alpha."""
        if self.alpha is None:
            return None
        return self.alpha[y * self.width + x]

    def to_image(self) -> Image.Image:
        """Return the pixels as an RGB or RGBA image."""
        image = Image.frombytes("RGB", (self.width, self.height), self.rgb)
        if self.alpha is not None:
            image.putalpha(Image.frombytes("L", (self.width, self.height), self.alpha))
        return image


def _blocks(data: bytes, width: int, height: int, block_size: int) -> Iterator[tuple[int, bytes]]:
    """Yield the index of each block's top-left pixel together with its bytes.

    Only whole 4x4 blocks are decoded; pixels past the last whole block
    column or row are left black.
    """
    if width < 0 or height < 0:
        raise ValueError(f"invalid image size {width}x{height}")
    across, down = width >> 2, height >> 2
    needed = across * down * block_size
    if len(data) < needed:
        raise ValueError(
            f"texture data is {len(data)} bytes, {needed} needed for {width}x{height}"
        )
    data = bytes(data)
    for block_y in range(down):
        for block_x in range(across):
            start = (block_y * across + block_x) * block_size
            yield block_y * 4 * width + block_x * 4, data[start:start + block_size]


def _pixel_index(origin: int, k: int, width: int) -> int:
    return origin + (k >> 2) * width + (k & 3)


def _expand_565(color: int) -> tuple[int, int, int]:
    red = (color >> 11) & 0x1F
    green = (color >> 5) & 0x3F
    blue = color & 0x1F
    return (
        (red << 3) | (red >> 2),
        (green << 2) | (green >> 4),
        (blue << 3) | (blue >> 2),
    )


def _palette(
    color0: int, color1: int, dxt1: bool
) -> tuple[list[tuple[int, int, int]], tuple[int, int, int, int]]:
    first = _expand_565(color0)
    second = _expand_565(color1)
    if not dxt1 or color0 > color1:
        third = tuple((2 * a + b) // 3 for a, b in zip(first, second))
        fourth = tuple((a + 2 * b) // 3 for a, b in zip(first, second))
        return [first, second, third, fourth], (255, 255, 255, 255)
    third = tuple((a + b) >> 1 for a, b in zip(first, second))
    return [first, second, third, (0, 0, 0)], (255, 255, 255, 0)


def _interpolation_table(first: int, second: int) -> list[int]:
    table = [first, second]
    if first > second:
        table += [((8 - i) * first + (i - 1) * second) // 7 for i in range(2, 8)]
    else:
        table += [((6 - i) * first + (i - 1) * second) // 5 for i in range(2, 6)]
        table += [0x00, 0xFF]
    return table


def decode_dxt1(data: bytes, width: int, height: int) -> DecodedImage:
    """Decode DXT1 blocks; the alpha is 0 only for punched-out pixels."""
    rgb = bytearray(width * height * 3)
    alpha = bytearray(width * height)
    for origin, block in _blocks(data, width, height, 8):
        color0, color1, indices = struct.unpack("<HHI", block)
        colors, alphas = _palette(color0, color1, dxt1=True)
        for k in range(16):
            index = (indices >> (2 * k)) & 3
            p = _pixel_index(origin, k, width)
            rgb[3 * p:3 * p + 3] = bytes(colors[index])
            alpha[p] = alphas[index]
    return DecodedImage(width, height, bytes(rgb), bytes(alpha))


def decode_dxt3(data: bytes, width: int, height: int) -> DecodedImage:
    """Decode DXT2/DXT3 blocks with explicit 4-bit alpha."""
    rgb = bytearray(width * height * 3)
    alpha = bytearray(width * height)
    for origin, block in _blocks(data, width, height, 16):
        alpha_bits, color0, color1, indices = struct.unpack("<QHHI", block)
        colors, _ = _palette(color0, color1, dxt1=False)
        for k in range(16):
            p = _pixel_index(origin, k, width)
            rgb[3 * p:3 * p + 3] = bytes(colors[(indices >> (2 * k)) & 3])
            nibble = (alpha_bits >> (4 * k)) & 0xF
            alpha[p] = (nibble << 4) | nibble
    return DecodedImage(width, height, bytes(rgb), bytes(alpha))


def decode_dxt5(data: bytes, width: int, height: int) -> DecodedImage:
    """Decode DXT4/DXT5 blocks with interpolated alpha."""
    rgb = bytearray(width * height * 3)
    alpha = bytearray(width * height)
    for origin, block in _blocks(data, width, height, 16):
        alpha_bits, color0, color1, indices = struct.unpack("<QHHI", block)
        colors, _ = _palette(color0, color1, dxt1=False)
        table = _interpolation_table(alpha_bits & 0xFF, (alpha_bits >> 8) & 0xFF)
        selectors = alpha_bits >> 16
        for k in range(16):
            p = _pixel_index(origin, k, width)
            rgb[3 * p:3 * p + 3] = bytes(colors[(indices >> (2 * k)) & 3])
            alpha[p] = table[(selectors >> (3 * k)) & 7]
    return DecodedImage(width, height, bytes(rgb), bytes(alpha))


def decode_dxta(data: bytes, width: int, height: int) -> DecodedImage:
    """Decode single-channel DXTA blocks into a grey image without alpha."""
    rgb = bytearray(width * height * 3)
    for origin, block in _blocks(data, width, height, 8):
        (bits,) = struct.unpack("<Q", block)
        table = _interpolation_table(bits & 0xFF, (bits >> 8) & 0xFF)
        selectors = bits >> 16
        for k in range(16):
            p = _pixel_index(origin, k, width)
            rgb[3 * p:3 * p + 3] = bytes((table[(selectors >> (3 * k)) & 7],)) * 3
    return DecodedImage(width, height, bytes(rgb))


def _normal_to_byte(component: float) -> int:
    value = int(_f32(_f32(component + 1.0) * _FLOAT_TO_BYTE))
    return min(max(value, 0), 255)


def decode_3dcx(data: bytes, width: int, height: int) -> DecodedImage:
    """Decode two-channel normal-map blocks, rebuilding blue from red and green.

    The green channel is inverted in the output.
    """
    rgb = bytearray(width * height * 3)
    for origin, block in _blocks(data, width, height, 16):
        green_bits, red_bits = struct.unpack("<QQ", block)
        reds = _interpolation_table(red_bits & 0xFF, (red_bits >> 8) & 0xFF)
        greens = _interpolation_table(green_bits & 0xFF, (green_bits >> 8) & 0xFF)
        red_selectors = red_bits >> 16
        green_selectors = green_bits >> 16
        for k in range(16):
            nx = _NORMALS[reds[(red_selectors >> (3 * k)) & 7]]
            ny = _NORMALS[greens[(green_selectors >> (3 * k)) & 7]]
            rest = _f32(_f32(1.0 - _f32(nx * nx)) - _f32(ny * ny))
            nz = _f32(math.sqrt(max(rest, 0.0)))
            p = _pixel_index(origin, k, width)
            rgb[3 * p:3 * p + 3] = bytes((
                _normal_to_byte(nx),
                0xFF - _normal_to_byte(ny),
                _normal_to_byte(nz),
            ))
    return DecodedImage(width, height, bytes(rgb))
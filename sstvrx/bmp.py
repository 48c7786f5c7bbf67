"""Writing 24-bit uncompressed BMP images."""

from __future__ import annotations

import os
import struct

BYTES_PER_PIXEL = 3
FILE_HEADER_SIZE = 14
INFO_HEADER_SIZE = 40


def _padding_size(width: int) -> int:
    return (4 - (width * BYTES_PER_PIXEL) % 4) % 4


def encode_bmp(image_data: bytes, width: int, height: int) -> bytes:
    """Encode top-to-bottom BGR pixel rows as a bottom-up 24-bit BMP file."""
    row_size = width * BYTES_PER_PIXEL
    if width < 0 or height < 0:
        raise ValueError("width and height must not be negative")
    if len(image_data) != row_size * height:
        raise ValueError(
            f"expected {row_size * height} bytes of pixel data, got {len(image_data)}"
        )

    padding = bytes(_padding_size(width))
    stride = row_size + len(padding)
    offset = FILE_HEADER_SIZE + INFO_HEADER_SIZE
    file_size = offset + stride * height

    file_header = b"BM" + struct.pack("<I4xI", file_size & 0xFFFFFFFF, offset)
    info_header = struct.pack(
        "<IIIHH24x",
        INFO_HEADER_SIZE,
        width & 0xFFFFFFFF,
        height & 0xFFFFFFFF,
        1,
        BYTES_PER_PIXEL * 8,
    )

    rows = (
        bytes(image_data[y * row_size:(y + 1) * row_size]) + padding
        for y in reversed(range(height))
    )
    return file_header + info_header + b"".join(rows)


def save_bmp(
    path: str | os.PathLike[str], image_data: bytes, width: int, height: int
) -> None:
    """Write the image to ``path`` as a BMP file."""
    encoded = encode_bmp(image_data, width, height)
    with open(path, "wb") as handle:
        handle.write(encoded)
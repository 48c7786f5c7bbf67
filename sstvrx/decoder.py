"""Decoding a full SSTV image from a stream of demodulated frequencies."""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass, field

from . import dsp
from .bmp import save_bmp
from .stream import FrequencyStream
from .sync import Parity, line_sync_search, parity_sync_search, vis_sync_search

VIS_SKIP_SAMPLES = int(dsp.SSTV_TARGET_IQ_SAMPLE_RATE * 0.3)
LINE_SYNC_SKIP_SAMPLES = int(dsp.SSTV_TARGET_IQ_SAMPLE_RATE * 0.001)


class SstvState(enum.Enum):
    """Stages of the receiver's decoding state machine."""

    IDLE = enum.auto()
    VIS_SYNC_SEARCH = enum.auto()
    VIS_SYNC_FOUND = enum.auto()
    LINE_SYNC_SEARCH = enum.auto()
    LINE_SYNC_FOUND = enum.auto()
    SCAN_LINE = enum.auto()
    SCAN_LINE_DONE = enum.auto()
    PARITY_SYNC_SEARCH = enum.auto()
    EVEN_SCAN_LINE = enum.auto()
    ODD_SCAN_LINE = enum.auto()
    DONE = enum.auto()


def _blank_rows(rows: int) -> list[list[int]]:
    return [[0] * dsp.IMAGE_WIDTH for _ in range(rows)]


@dataclass
class Image:
    """Luminance rows and the colour-difference rows shared by each line pair."""

    y_lines: list[list[int]] = field(
        default_factory=lambda: _blank_rows(dsp.IMAGE_HEIGHT)
    )
    ry_lines: list[list[int]] = field(
        default_factory=lambda: _blank_rows(dsp.IMAGE_HEIGHT // 2)
    )
    by_lines: list[list[int]] = field(
        default_factory=lambda: _blank_rows(dsp.IMAGE_HEIGHT // 2)
    )

    def to_rgb(self) -> bytes:
        """Return top-to-bottom pixel data with three bytes per pixel in BGR order."""
        data = bytearray()
        for line, y_row in enumerate(self.y_lines):
            group = line // 2
            for y, ry, by in zip(y_row, self.ry_lines[group], self.by_lines[group]):
                r, g, b = dsp.yuv_to_rgb(y, ry, by)
                data += bytes((b, g, r))
        return bytes(data)

    def save(self, path: str | os.PathLike[str]) -> None:
        """Write the image to ``path`` as a 24-bit BMP file."""
        save_bmp(path, self.to_rgb(), dsp.IMAGE_WIDTH, dsp.IMAGE_HEIGHT)


class Decoder:
    """Run the SSTV state machine over a frequency stream to build images."""

    def __init__(self, stream: FrequencyStream) -> None:
        self.stream = stream
        self.state = SstvState.IDLE
        self.line_number = 0
        self.image = Image()

    def _scan(self, length: int) -> list[int]:
        levels = dsp.freq_to_yuv(self.stream.read(length))
        return dsp.map_to_pixels(levels, dsp.IMAGE_WIDTH)

    def _finish_line(self) -> None:
        self.line_number += 1
        if self.line_number >= dsp.IMAGE_HEIGHT:
            self.state = SstvState.DONE
        else:
            self.state = SstvState.LINE_SYNC_SEARCH

    def decode(self) -> Image:
        """Decode one complete image and return it.

        Raises ``EndOfStream`` if the stream ends before the image is complete.
        """
        while True:
            match self.state:
                case SstvState.IDLE:
                    self.state = SstvState.VIS_SYNC_SEARCH
                case SstvState.VIS_SYNC_SEARCH:
                    if vis_sync_search(self.stream):
                        self.state = SstvState.VIS_SYNC_FOUND
                case SstvState.VIS_SYNC_FOUND:
                    self.stream.read(VIS_SKIP_SAMPLES)
                    self.state = SstvState.LINE_SYNC_SEARCH
                case SstvState.LINE_SYNC_SEARCH:
                    if line_sync_search(self.stream):
                        self.state = SstvState.LINE_SYNC_FOUND
                case SstvState.LINE_SYNC_FOUND:
                    self.stream.read(LINE_SYNC_SKIP_SAMPLES)
                    self.state = SstvState.SCAN_LINE
                case SstvState.SCAN_LINE:
                    self.image.y_lines[self.line_number] = self._scan(
                        dsp.SCAN_LINE_LENGTH
                    )
                    self.state = SstvState.SCAN_LINE_DONE
                case SstvState.SCAN_LINE_DONE:
                    self.state = SstvState.PARITY_SYNC_SEARCH
                case SstvState.PARITY_SYNC_SEARCH:
                    parity = parity_sync_search(self.stream)
                    self.state = (
                        SstvState.EVEN_SCAN_LINE
                        if parity is Parity.EVEN
                        else SstvState.ODD_SCAN_LINE
                    )
                case SstvState.EVEN_SCAN_LINE:
                    self.image.ry_lines[self.line_number // 2] = self._scan(
                        dsp.SCAN_LINE_RY_BY_LENGTH
                    )
                    self._finish_line()
                case SstvState.ODD_SCAN_LINE:
                    row = max(self.line_number - 1, 0) // 2
                    self.image.by_lines[row] = self._scan(dsp.SCAN_LINE_RY_BY_LENGTH)
                    self._finish_line()
                case SstvState.DONE:
                    image = self.image
                    self.image = Image()
                    self.line_number = 0
                    self.state = SstvState.IDLE
                    return image
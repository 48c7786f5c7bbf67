"""Command that decodes an SSTV image from a recorded I/Q file."""

from __future__ import annotations

import argparse
import struct
import sys
from collections.abc import Iterator, Sequence

from . import dsp
from .decoder import Decoder
from .stream import EndOfStream, FrequencyStream

DEFAULT_OUTPUT = "sstv_image.bmp"

_PAIR = struct.Struct(">hh")


def read_iq_file(path: str) -> tuple[list[int], list[int]]:
    """Read interleaved big-endian signed 16-bit I/Q pairs from ``path``."""
    with open(path, "rb") as handle:
        data = handle.read()
    if len(data) % _PAIR.size:
        raise ValueError(
            f"{path}: size {len(data)} is not a whole number of I/Q pairs"
        )
    i_samples: list[int] = []
    q_samples: list[int] = []
    for i, q in _PAIR.iter_unpack(data):
        i_samples.append(i)
        q_samples.append(q)
    return i_samples, q_samples


def decimate(samples: Sequence[int], factor: int) -> list[int]:
    """Keep every ``factor``-th sample, starting with the first."""
    if factor < 1:
        raise ValueError("decimation factor must be at least 1")
    return list(samples[::factor])


def _frequency_blocks(
    i_samples: Sequence[int], q_samples: Sequence[int], sample_rate: int
) -> Iterator[list[int]]:
    """Demodulate the samples block by block, overlapping one sample per block."""
    block = dsp.PSDI_BUF_SIZE
    for start in range(0, max(len(i_samples) - 1, 0), block):
        end = min(start + block + 1, len(i_samples))
        yield dsp.fm_demodulate(
            i_samples[start:end], q_samples[start:end], sample_rate
        )


def main(argv: Sequence[str] | None = None) -> int:
    """Decode one SSTV image from an I/Q recording and save it as BMP."""
    parser = argparse.ArgumentParser(
        prog="sstvrx", description="Decode an SSTV image from an I/Q recording."
    )
    parser.add_argument("input", help="file of interleaved big-endian int16 I/Q pairs")
    parser.add_argument(
        "-o", "--output", default=DEFAULT_OUTPUT, help="BMP file to write"
    )
    parser.add_argument(
        "-d", "--decimation", type=int, default=1,
        help="keep every N-th I/Q pair before demodulating",
    )
    parser.add_argument(
        "-r", "--sample-rate", type=int, default=dsp.SSTV_TARGET_IQ_SAMPLE_RATE,
        help="I/Q sample rate after decimation, in Hz",
    )
    args = parser.parse_args(argv)

    try:
        i_samples, q_samples = read_iq_file(args.input)
        i_samples = decimate(i_samples, args.decimation)
        q_samples = decimate(q_samples, args.decimation)
    except (OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    stream = FrequencyStream(_frequency_blocks(i_samples, q_samples, args.sample_rate))
    decoder = Decoder(stream)
    try:
        image = decoder.decode()
    except EndOfStream:
        print(
            f"error: recording ended while in state {decoder.state.name}",
            file=sys.stderr,
        )
        return 1

    image.save(args.output)
    print("SSTV processing completed.")
    print(f"image saved at: {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
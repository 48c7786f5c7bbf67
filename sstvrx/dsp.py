"""Fixed-point signal helpers for SSTV demodulation and image reconstruction."""

from __future__ import annotations

import math
from collections.abc import Sequence

SSTV_TARGET_IQ_SAMPLE_RATE = 48000

SHIFT_BITS = 12
ONE_SHIFTED = 1 << SHIFT_BITS

FXATAN_MAX = 32767
FXATAN_PI_SCALE = 32767

SYNC_FREQ = 1200
BLACK_FREQ = 1500
WHITE_FREQ = 2300
FREQ_RANGE = WHITE_FREQ - BLACK_FREQ

IMAGE_WIDTH = 320
IMAGE_HEIGHT = 240

FREQ_1900 = 1900
FREQ_1200 = 1200
FREQ_1500 = 1500
FREQ_2300 = 2300
FREQ_TOLERANCE = 150

PSDI_BUF_SIZE = int(SSTV_TARGET_IQ_SAMPLE_RATE * 0.01)
WINDOW_10MS = int(SSTV_TARGET_IQ_SAMPLE_RATE * 0.01)
WINDOW_1MS = int(SSTV_TARGET_IQ_SAMPLE_RATE * 0.001)
WINDOW_250US = int(SSTV_TARGET_IQ_SAMPLE_RATE * 0.00025)
STEP_10MS = WINDOW_10MS
STEP_1MS = WINDOW_1MS
SCAN_LINE_LENGTH = int(SSTV_TARGET_IQ_SAMPLE_RATE * 0.088)
SCAN_LINE_RY_BY_LENGTH = int(SSTV_TARGET_IQ_SAMPLE_RATE * 0.044)

VIS_LEADER1_MIN_CONSECUTIVE_WINDOWS = 295
VIS_SYNC_PULSE_MIN_CONSECUTIVE_WINDOWS = 8
VIS_LEADER2_MIN_CONSECUTIVE_WINDOWS = 295
LINE_SYNC_LEADER_MIN_CONSECUTIVE_WINDOWS = 8
LINE_SYNC_PULSE_MIN_CONSECUTIVE_WINDOWS = 2
PARITY_SYNC_PULSE_MIN_CONSECUTIVE_WINDOWS = 15
PARITY_SYNC_PORCH_MIN_CONSECUTIVE_WINDOWS = 4

# Precomputed fixed-point samples-per-pixel ratios for two known line lengths.
_SPECIAL_RATIOS = {4223: 54054, 2111: 27021}


def _to_int16(value: int) -> int:
    """Wrap an integer to the signed 16-bit range."""
    return ((value + 0x8000) & 0xFFFF) - 0x8000


def _trunc_div(numerator: int, denominator: int) -> int:
    """Integer division rounding toward zero."""
    quotient = abs(numerator) // abs(denominator)
    return quotient if (numerator >= 0) == (denominator >= 0) else -quotient


def fxatan(i: int, q: int) -> int:
    """Return the phase of (i, q) scaled so that -pi..pi maps to -32768..32767."""
    angle = math.atan2(q, i)
    value = round(angle / math.pi * FXATAN_PI_SCALE)
    return max(-32768, min(32767, value))


def fm_demodulate(
    i_samples: Sequence[int], q_samples: Sequence[int], sample_rate: int
) -> list[int]:
    """Demodulate I/Q samples into instantaneous frequencies in Hz.

    Returns one value fewer than the number of samples.
    """
    if len(i_samples) != len(q_samples):
        raise ValueError("I and Q sample sequences must have the same length")
    phases = [fxatan(i, q) for i, q in zip(i_samples, q_samples)]
    if not phases:
        return []

    unwrapped = [phases[0]]
    for previous, current in zip(phases, phases[1:]):
        diff = current - previous
        if diff > FXATAN_MAX:
            diff -= 2 * FXATAN_MAX
        elif diff < -FXATAN_MAX:
            diff += 2 * FXATAN_MAX
        unwrapped.append(_to_int16(unwrapped[-1] + diff))

    return [
        _to_int16(_trunc_div((current - previous) * sample_rate, 2 * FXATAN_PI_SCALE))
        for previous, current in zip(unwrapped, unwrapped[1:])
    ]


def freq_to_yuv(freqs: Sequence[int]) -> list[int]:
    """Map frequencies to 0..255 luminance values between black and white tones."""
    levels = []
    for freq in freqs:
        if freq <= BLACK_FREQ:
            levels.append(0)
        elif freq >= WHITE_FREQ:
            levels.append(255)
        else:
            levels.append((freq - BLACK_FREQ) * 255 // FREQ_RANGE)
    return levels


def map_to_pixels(data: Sequence[int], pixel_count: int) -> list[int]:
    """Average consecutive runs of samples down to ``pixel_count`` pixels."""
    data_length = len(data)
    if data_length in _SPECIAL_RATIOS:
        ratio = _SPECIAL_RATIOS[data_length]
    elif pixel_count <= 0:
        ratio = 0
    else:
        ratio = (data_length * ONE_SHIFTED + pixel_count // 2) // pixel_count

    width = ratio >> SHIFT_BITS
    pixels = []
    for pixel in range(max(pixel_count, 0)):
        start = (pixel * ratio) >> SHIFT_BITS
        end = min(start + width - 1, data_length - 1)
        start = max(start, 0)
        if start >= data_length > 0:
            start = data_length - 1
        if start <= end and start < data_length:
            run = data[start:end + 1]
            pixels.append(_trunc_div(sum(run), len(run)))
        else:
            pixels.append(0)
    return pixels


def yuv_to_rgb(y: int, ry: int, by: int) -> tuple[int, int, int]:
    """Convert a luminance and two colour-difference values to clamped RGB."""
    r = 0.003906 * ((298.082 * (y - 16)) + (408.583 * (ry - 128)))
    g = 0.003906 * (
        (298.082 * (y - 16.0)) + (-100.291 * (by - 128.0)) + (-208.12 * (ry - 128.0))
    )
    b = 0.003906 * ((298.082 * (y - 16.0)) + (516.411 * (by - 128.0)))

    def clamp(value: float) -> int:
        if value < 0:
            return 0
        if value > 255:
            return 255
        return int(value)

    return clamp(r), clamp(g), clamp(b)


def calculate_average(data: Sequence[int]) -> int:
    """Return the truncated mean of the values as a 16-bit integer, 0 if empty."""
    if not data:
        return 0
    return _to_int16(_trunc_div(sum(data), len(data)))


def is_freq_match(freq: int, target: int, tolerance: int = FREQ_TOLERANCE) -> bool:
    """Tell whether ``freq`` lies within ``tolerance`` Hz of ``target``."""
    return abs(freq - target) <= tolerance


def get_power(i_samples: Sequence[int], q_samples: Sequence[int]) -> list[int]:
    """Return the scaled instantaneous power (I^2 + Q^2) / 256 of each sample."""
    if len(i_samples) != len(q_samples):
        raise ValueError("I and Q sample sequences must have the same length")
    return [(i * i + q * q) // 256 for i, q in zip(i_samples, q_samples)]
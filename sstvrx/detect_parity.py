"""Offline detection of the SSTV line parity pulse in recorded I/Q sample data.

After the luminance part of a line, a separator pulse tells which colour
difference follows: 1500 Hz for an even line, 2300 Hz for an odd one. A
1900 Hz porch comes after the pulse. The search walks over the samples
with 250 us windows.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from . import dsp
from .detect_vis import SAMPLE_RATE, calc_freq_avg, is_freq_match

logger = logging.getLogger(__name__)

FREQ_1500 = 1500
FREQ_2300 = 2300
FREQ_1900 = 1900
WINDOW_250US = 12
STEP_250US = 12

PULSE_CONFIRM_WINDOWS = 15
PORCH_CONFIRM_WINDOWS = 4
SEARCH_LIMIT = int(SAMPLE_RATE * 0.005)


@dataclass(frozen=True)
class ParityResult:
    """Outcome of a parity search.

    ``sync_position`` is the absolute sample index where the 1900 Hz porch
    begins, or -1 when nothing was found.
    """

    found: bool = False
    is_odd: bool = False
    sync_position: int = -1
    pulse_frequency: int = 0


class _State(enum.Enum):
    IDLE = enum.auto()
    FOUND_1500 = enum.auto()
    FOUND_2300 = enum.auto()
    SEARCHING_1900 = enum.auto()


def _trunc_div(numerator: int, denominator: int) -> int:
    quotient = abs(numerator) // abs(denominator)
    return quotient if (numerator >= 0) == (denominator >= 0) else -quotient


def _window_frequency(
    samples_i: Sequence[int], samples_q: Sequence[int], start: int
) -> int | None:
    """Return the mean frequency of one 250 us window, or None if out of range."""
    if start < 0:
        return None
    window_i = list(samples_i[start:start + WINDOW_250US])
    window_q = list(samples_q[start:start + WINDOW_250US])
    if len(window_i) < WINDOW_250US or len(window_q) < WINDOW_250US:
        return None
    phases = [dsp.fxatan(i, q) for i, q in zip(window_i, window_q)]
    freqs = []
    for previous, current in zip(phases, phases[1:]):
        diff = current - previous
        if diff > dsp.FXATAN_MAX:
            diff -= 2 * dsp.FXATAN_MAX
        elif diff < -dsp.FXATAN_MAX:
            diff += 2 * dsp.FXATAN_MAX
        freqs.append(_trunc_div(diff * SAMPLE_RATE, 2 * dsp.FXATAN_PI_SCALE))
    # One value fewer than the window; the mean leaves out that last slot.
    freqs.append(0)
    return calc_freq_avg(freqs)


def detect_line_parity(
    samples_i: Sequence[int],
    samples_q: Sequence[int],
    search_start: int,
    search_length: int,
) -> ParityResult:
    """Search ``search_length`` samples from ``search_start`` for a parity pulse."""
    state = _State.IDLE
    position = 0
    first_1500_start = -1
    first_1500_end = -1
    first_2300_start = -1
    first_2300_end = -1
    porch_position = -1
    count = 0
    is_odd = False

    logger.debug("starting line parity detection at sample %d", search_start)

    while position + WINDOW_250US < search_length:
        if state in (_State.FOUND_1500, _State.FOUND_2300):
            state = _State.SEARCHING_1900
            continue

        freq = _window_frequency(samples_i, samples_q, search_start + position)
        if freq is None:
            logger.warning(
                "failed to read I/Q data at position %d", search_start + position
            )
            return ParityResult(is_odd=is_odd)

        if state is _State.IDLE:
            if is_freq_match(freq, FREQ_1500):
                count += 1
                if count == 1:
                    first_1500_start = position
                elif count >= PULSE_CONFIRM_WINDOWS:
                    first_1500_end = position + WINDOW_250US
                    state = _State.FOUND_1500
                    count = 0
                    is_odd = False
                    continue
            elif is_freq_match(freq, FREQ_2300):
                count += 1
                if count == 1:
                    first_2300_start = position
                elif count >= PULSE_CONFIRM_WINDOWS:
                    first_2300_end = position + WINDOW_250US
                    state = _State.FOUND_2300
                    count = 0
                    is_odd = True
                    continue
            else:
                count = 0
                first_1500_start = -1
                first_2300_start = -1
            position += STEP_250US

        else:
            if is_freq_match(freq, FREQ_1900):
                count += 1
                if count == 1:
                    porch_position = position
                elif count >= PORCH_CONFIRM_WINDOWS:
                    result = ParityResult(
                        found=True,
                        is_odd=is_odd,
                        sync_position=porch_position + search_start,
                    )
                    logger.info(
                        "line parity detected: %s, porch at %d (%.3fs)",
                        "ODD" if is_odd else "EVEN",
                        result.sync_position,
                        result.sync_position / SAMPLE_RATE,
                    )
                    return result
            else:
                count = 0
            position += STEP_250US
            if first_1500_end > -1 and position > first_1500_end + SEARCH_LIMIT:
                state = _State.IDLE
                position = first_1500_start + STEP_250US
                count = 0
            elif first_2300_end > -1 and position > first_2300_end + SEARCH_LIMIT:
                state = _State.IDLE
                position = first_2300_start + STEP_250US
                count = 0

    logger.info("no complete line parity found")
    return ParityResult(is_odd=is_odd)
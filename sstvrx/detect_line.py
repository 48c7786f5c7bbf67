"""Offline detection of an SSTV line sync header in recorded I/Q sample data.

A line sync header is a 1200 Hz sync tone followed by a short 1500 Hz
pulse. The search walks over the samples with 1 ms windows.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Sequence

from . import dsp
from .detect_vis import SAMPLE_RATE, SyncResult, calc_freq_avg, is_freq_match

logger = logging.getLogger(__name__)

FREQ_1200 = 1200
FREQ_1500 = 1500
WINDOW_1MS = 48
STEP_1MS = 48

LEADER_CONFIRM_WINDOWS = 8
PULSE_CONFIRM_WINDOWS = 2
SEARCH_LIMIT = int(SAMPLE_RATE * 0.005)


class _State(enum.Enum):
    IDLE = enum.auto()
    FOUND_1200_FIRST = enum.auto()
    SEARCHING_1500 = enum.auto()


def _trunc_div(numerator: int, denominator: int) -> int:
    quotient = abs(numerator) // abs(denominator)
    return quotient if (numerator >= 0) == (denominator >= 0) else -quotient


def _window_frequency(
    samples_i: Sequence[int], samples_q: Sequence[int], start: int
) -> int | None:
    """Return the mean frequency of one 1 ms window, or None if it is out of range.

    Each frequency comes from the phase step between neighbouring samples,
    wrapped into the range -pi..pi.
    """
    if start < 0:
        return None
    window_i = list(samples_i[start:start + WINDOW_1MS])
    window_q = list(samples_q[start:start + WINDOW_1MS])
    if len(window_i) < WINDOW_1MS or len(window_q) < WINDOW_1MS:
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


def detect_line_sync(
    samples_i: Sequence[int],
    samples_q: Sequence[int],
    search_start: int,
    search_length: int,
) -> SyncResult:
    """Search ``search_length`` samples from ``search_start`` for a line sync.

    On success the start position is the beginning of the 1200 Hz tone, the
    sync position the beginning of the 1500 Hz pulse and the end position the
    end of the confirming 1500 Hz window, all as absolute sample indices.
    """
    state = _State.IDLE
    position = 0
    first_start = -1
    first_end = -1
    pulse_position = -1
    count = 0

    logger.debug("starting line sync detection at sample %d", search_start)

    while position + WINDOW_1MS < search_length:
        if state is _State.FOUND_1200_FIRST:
            state = _State.SEARCHING_1500
            continue

        freq = _window_frequency(samples_i, samples_q, search_start + position)
        if freq is None:
            logger.warning(
                "failed to read I/Q data at position %d", search_start + position
            )
            return SyncResult()

        if state is _State.IDLE:
            if is_freq_match(freq, FREQ_1200):
                count += 1
                if count == 1:
                    first_start = position
                elif count >= LEADER_CONFIRM_WINDOWS:
                    first_end = position + WINDOW_1MS
                    state = _State.FOUND_1200_FIRST
                    count = 0
                    continue
            else:
                count = 0
                first_start = -1
            position += STEP_1MS

        else:
            if is_freq_match(freq, FREQ_1500):
                count += 1
                if count == 1:
                    pulse_position = position
                elif count >= PULSE_CONFIRM_WINDOWS:
                    result = SyncResult(
                        found=True,
                        start_position=first_start + search_start,
                        sync_position=pulse_position + search_start,
                        end_position=position + WINDOW_1MS + search_start,
                    )
                    logger.info(
                        "line sync header detected: start=%d sync=%d end=%d (%.3f ms)",
                        result.start_position,
                        result.sync_position,
                        result.end_position,
                        result.duration_ms,
                    )
                    return result
            else:
                count = 0
            position += STEP_1MS
            if position > first_end + SEARCH_LIMIT:
                state = _State.IDLE
                position = first_start + STEP_1MS
                count = 0

    logger.info("no complete line sync header found")
    return SyncResult()
"""Offline detection of the SSTV VIS header in recorded I/Q sample data.

The header is a 1900 Hz leader tone, a short 1200 Hz sync pulse and a
second 1900 Hz leader. The search walks over the samples with 10 ms
windows for the leader tones and 1 ms windows for the sync pulse.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from . import dsp

logger = logging.getLogger(__name__)

SAMPLE_RATE = 48000
FREQ_1900 = 1900
FREQ_1200 = 1200
FREQ_TOLERANCE = 150
WINDOW_10MS = 480
WINDOW_1MS = 48
STEP_10MS = 480
STEP_1MS = 48
JUMP_250MS = 12000

LEADER1_CONFIRM_WINDOWS = 28
SYNC_PULSE_CONFIRM_WINDOWS = 9
LEADER2_CONFIRM_WINDOWS = 29
SEARCH_LIMIT = int(SAMPLE_RATE * 0.5)


@dataclass(frozen=True)
class SyncResult:
    """Outcome of a sync search; positions are absolute sample indices or -1."""

    found: bool = False
    start_position: int = -1
    sync_position: int = -1
    end_position: int = -1

    @property
    def duration_ms(self) -> float:
        """Length of the detected header in milliseconds."""
        return (self.end_position - self.start_position) * 1000.0 / SAMPLE_RATE


class _State(enum.Enum):
    IDLE = enum.auto()
    FOUND_1900_FIRST = enum.auto()
    SEARCHING_1200 = enum.auto()
    FOUND_1200 = enum.auto()


def calc_freq_avg(freq_data: Sequence[int]) -> int:
    """Return the truncated mean of the values, leaving out the first and last."""
    if len(freq_data) < 3:
        raise ValueError("at least three frequency values are needed")
    return dsp.calculate_average(list(freq_data[1:-1]))


def is_freq_match(freq: int, target_freq: int) -> bool:
    """Tell whether ``freq`` lies within the VIS tolerance of ``target_freq``."""
    return dsp.is_freq_match(freq, target_freq, FREQ_TOLERANCE)


def _window_frequency(
    samples_i: Sequence[int], samples_q: Sequence[int], start: int, size: int
) -> int | None:
    """Demodulate one window and return its mean frequency, or None if out of range."""
    if start < 0:
        return None
    window_i = list(samples_i[start:start + size])
    window_q = list(samples_q[start:start + size])
    if len(window_i) < size or len(window_q) < size:
        return None
    freqs = dsp.fm_demodulate(window_i, window_q, SAMPLE_RATE)
    # The demodulator yields one value fewer than the window; the mean skips that slot.
    freqs.append(0)
    return calc_freq_avg(freqs)


def detect_vis_sync(
    samples_i: Sequence[int],
    samples_q: Sequence[int],
    search_start: int,
    search_length: int,
) -> SyncResult:
    """Search ``search_length`` samples from ``search_start`` for a VIS header."""
    state = _State.IDLE
    position = 0
    first_start = -1
    first_end = -1
    pulse_position = -1
    second_start = -1
    count = 0

    logger.debug("starting VIS sync detection at sample %d", search_start)

    while position + WINDOW_10MS < search_length:
        if state is _State.FOUND_1900_FIRST:
            state = _State.SEARCHING_1200
            logger.debug(
                "searching for 1200 Hz near %.3fs",
                (position + search_start) / SAMPLE_RATE,
            )
            continue

        window = WINDOW_1MS if state is _State.SEARCHING_1200 else WINDOW_10MS
        freq = _window_frequency(samples_i, samples_q, search_start + position, window)
        if freq is None:
            logger.warning(
                "failed to read I/Q data at position %d", search_start + position
            )
            return SyncResult()

        if state is _State.IDLE:
            if is_freq_match(freq, FREQ_1900):
                count += 1
                if count == 1:
                    first_start = position
                elif count >= LEADER1_CONFIRM_WINDOWS:
                    first_end = position + WINDOW_10MS
                    logger.debug(
                        "first 1900 Hz leader confirmed: %d-%d",
                        first_start + search_start,
                        first_end + search_start,
                    )
                    state = _State.FOUND_1900_FIRST
                    position = first_end
                    count = 0
                    continue
            else:
                count = 0
                first_start = -1
            position += STEP_10MS

        elif state is _State.SEARCHING_1200:
            if is_freq_match(freq, FREQ_1200):
                count += 1
                if count == 1:
                    pulse_position = position
                elif count >= SYNC_PULSE_CONFIRM_WINDOWS:
                    logger.debug(
                        "1200 Hz pulse confirmed at %d", pulse_position + search_start
                    )
                    state = _State.FOUND_1200
                    position += WINDOW_1MS
                    count = 0
                    continue
            else:
                count = 0
            position += STEP_1MS
            if position > first_end + SEARCH_LIMIT:
                logger.debug("no 1200 Hz pulse within range, resetting")
                state = _State.IDLE
                position = first_start + STEP_10MS
                count = 0

        else:
            if is_freq_match(freq, FREQ_1900):
                count += 1
                if count == 1:
                    second_start = position
                elif count >= LEADER2_CONFIRM_WINDOWS:
                    second_end = position + WINDOW_10MS
                    result = SyncResult(
                        found=True,
                        start_position=first_start + search_start,
                        sync_position=pulse_position + search_start,
                        end_position=second_end + search_start,
                    )
                    logger.info(
                        "VIS sync header detected: start=%d sync=%d end=%d "
                        "(second leader from %d, %.3f ms)",
                        result.start_position,
                        result.sync_position,
                        result.end_position,
                        second_start + search_start,
                        result.duration_ms,
                    )
                    return result
            else:
                count = 0
            position += STEP_10MS
            if position > pulse_position + SEARCH_LIMIT:
                logger.debug("no second 1900 Hz leader within range, resetting")
                state = _State.IDLE
                position = first_start + STEP_10MS
                count = 0

    logger.info("no complete VIS sync header found")
    return SyncResult()


def detect_vis_sync_seconds(
    samples_i: Sequence[int],
    samples_q: Sequence[int],
    start_seconds: float,
    length_seconds: float,
) -> SyncResult:
    """Search for a VIS header with the search range given in seconds."""
    search_start = int(SAMPLE_RATE * start_seconds)
    search_length = int(SAMPLE_RATE * length_seconds)
    result = detect_vis_sync(samples_i, samples_q, search_start, search_length)
    if result.found:
        logger.info("sync position usable as reference: %d", result.sync_position)
    return result
"""State machines that find the VIS header, line syncs and line parity pulses."""

from __future__ import annotations

import enum
from collections.abc import Iterator

from .dsp import (
    FREQ_1200,
    FREQ_1500,
    FREQ_1900,
    FREQ_2300,
    LINE_SYNC_LEADER_MIN_CONSECUTIVE_WINDOWS,
    LINE_SYNC_PULSE_MIN_CONSECUTIVE_WINDOWS,
    PARITY_SYNC_PORCH_MIN_CONSECUTIVE_WINDOWS,
    PARITY_SYNC_PULSE_MIN_CONSECUTIVE_WINDOWS,
    VIS_LEADER1_MIN_CONSECUTIVE_WINDOWS,
    VIS_LEADER2_MIN_CONSECUTIVE_WINDOWS,
    VIS_SYNC_PULSE_MIN_CONSECUTIVE_WINDOWS,
    WINDOW_1MS,
    WINDOW_250US,
    calculate_average,
    is_freq_match,
)
from .stream import FrequencyStream


class Parity(enum.IntEnum):
    """Kind of colour line announced by a parity sync pulse."""

    EVEN = 1
    ODD = 2


class _VisState(enum.Enum):
    IDLE = enum.auto()
    LEADER1 = enum.auto()
    SYNC_PULSE = enum.auto()
    LEADER2 = enum.auto()


class _LineState(enum.Enum):
    IDLE = enum.auto()
    LEADER = enum.auto()
    PULSE = enum.auto()


class _ParityState(enum.Enum):
    IDLE = enum.auto()
    EVEN_PULSE = enum.auto()
    ODD_PULSE = enum.auto()
    PORCH = enum.auto()


def _window_averages(stream: FrequencyStream, size: int) -> Iterator[int]:
    """Yield the mean frequency of successive windows until the stream ends."""
    while True:
        yield calculate_average(stream.read(size))


def vis_sync_search(stream: FrequencyStream) -> bool:
    """Consume 1 ms windows until a 1900/1200/1900 Hz VIS header is complete.

    Returns True once found; raises ``EndOfStream`` if the stream runs out.
    """
    state = _VisState.IDLE
    count = 0

    def restart(freq: int) -> tuple[_VisState, int]:
        if is_freq_match(freq, FREQ_1900):
            return _VisState.LEADER1, 1
        return _VisState.IDLE, 0

    for freq in _window_averages(stream, WINDOW_1MS):
        if state is _VisState.IDLE:
            state, count = restart(freq)
        elif state is _VisState.LEADER1:
            if is_freq_match(freq, FREQ_1900):
                count += 1
                if count >= VIS_LEADER1_MIN_CONSECUTIVE_WINDOWS:
                    state, count = _VisState.SYNC_PULSE, 0
            else:
                state, count = restart(freq)
        elif state is _VisState.SYNC_PULSE:
            if is_freq_match(freq, FREQ_1200):
                count += 1
                if count >= VIS_SYNC_PULSE_MIN_CONSECUTIVE_WINDOWS:
                    state, count = _VisState.LEADER2, 0
            else:
                state, count = restart(freq)
        else:
            if is_freq_match(freq, FREQ_1900):
                count += 1
                if count >= VIS_LEADER2_MIN_CONSECUTIVE_WINDOWS:
                    return True
            else:
                state, count = restart(freq)
    return False


def line_sync_search(stream: FrequencyStream) -> bool:
    """Consume 1 ms windows until a 1200 Hz sync followed by 1500 Hz is seen.

    Returns True once found; raises ``EndOfStream`` if the stream runs out.
    """
    state = _LineState.IDLE
    count = 0

    def restart(freq: int) -> tuple[_LineState, int]:
        if is_freq_match(freq, FREQ_1200):
            return _LineState.LEADER, 1
        return _LineState.IDLE, 0

    for freq in _window_averages(stream, WINDOW_1MS):
        if state is _LineState.IDLE:
            state, count = restart(freq)
        elif state is _LineState.LEADER:
            if is_freq_match(freq, FREQ_1200):
                count += 1
                if count >= LINE_SYNC_LEADER_MIN_CONSECUTIVE_WINDOWS:
                    state, count = _LineState.PULSE, 0
            else:
                state, count = restart(freq)
        else:
            if is_freq_match(freq, FREQ_1500):
                count += 1
                if count >= LINE_SYNC_PULSE_MIN_CONSECUTIVE_WINDOWS:
                    return True
            else:
                state, count = restart(freq)
    return False


def parity_sync_search(stream: FrequencyStream) -> Parity:
    """Consume 250 us windows until a parity pulse and its 1900 Hz porch appear.

    A 1500 Hz pulse marks an even line, a 2300 Hz pulse an odd one.
    Raises ``EndOfStream`` if the stream runs out.
    """
    state = _ParityState.IDLE
    count = 0
    parity: Parity | None = None

    def restart(freq: int) -> tuple[_ParityState, int, Parity | None]:
        if is_freq_match(freq, FREQ_1500):
            return _ParityState.EVEN_PULSE, 1, Parity.EVEN
        if is_freq_match(freq, FREQ_2300):
            return _ParityState.ODD_PULSE, 1, Parity.ODD
        return _ParityState.IDLE, 0, None

    pulse_freqs = {
        _ParityState.EVEN_PULSE: FREQ_1500,
        _ParityState.ODD_PULSE: FREQ_2300,
    }

    for freq in _window_averages(stream, WINDOW_250US):
        if state is _ParityState.IDLE:
            state, count, parity = restart(freq)
        elif state in pulse_freqs:
            if is_freq_match(freq, pulse_freqs[state]):
                count += 1
                if count >= PARITY_SYNC_PULSE_MIN_CONSECUTIVE_WINDOWS:
                    state, count = _ParityState.PORCH, 0
            else:
                state, count, parity = restart(freq)
        else:
            if is_freq_match(freq, FREQ_1900):
                count += 1
                if count >= PARITY_SYNC_PORCH_MIN_CONSECUTIVE_WINDOWS:
                    assert parity is not None
                    return parity
            else:
                state, count, parity = restart(freq)
    raise AssertionError("unreachable")
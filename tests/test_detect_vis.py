import math

import pytest

from sstvrx.detect_vis import (
    FREQ_TOLERANCE,
    STEP_10MS,
    SyncResult,
    calc_freq_avg,
    detect_vis_sync,
    detect_vis_sync_seconds,
    is_freq_match,
)

PHASE_SCALE = 32767
AMPLITUDE = 30000
PREFIX = 4800
LEADER = 14400
PULSE = 1392
BLOCK = 48


def _iq(phases):
    angles = [p * math.pi / PHASE_SCALE for p in phases]
    i = [round(AMPLITUDE * math.cos(a)) for a in angles]
    q = [round(AMPLITUDE * math.sin(a)) for a in angles]
    return i, q


def _leader(length):
    return _iq([k * 1911 for k in range(length)])


def _pulse(length):
    offsets = [0] + [7996 + 1077 * k for k in range(BLOCK - 1)]
    return _iq([-20000 + offsets[k % BLOCK] for k in range(length)])


def _join(*parts):
    i, q = [], []
    for part_i, part_q in parts:
        i.extend(part_i)
        q.extend(part_q)
    return i, q


def _silence(length):
    return [0] * length, [0] * length


def _header_signal():
    return _join(_silence(PREFIX), _leader(LEADER), _pulse(PULSE), _leader(LEADER))


def test_calc_freq_avg_ignores_first_and_last():
    assert calc_freq_avg([30000, 1900, 1900, -30000]) == 1900


def test_calc_freq_avg_truncates_toward_zero():
    assert calc_freq_avg([0, -3, -4, 0]) == -3


def test_calc_freq_avg_needs_three_values():
    with pytest.raises(ValueError):
        calc_freq_avg([1, 2])


def test_is_freq_match_tolerance_bounds():
    assert is_freq_match(1900 + FREQ_TOLERANCE, 1900)
    assert is_freq_match(1200 - FREQ_TOLERANCE, 1200)
    assert not is_freq_match(1900 + FREQ_TOLERANCE + 1, 1900)


def test_detects_full_header():
    i, q = _header_signal()
    result = detect_vis_sync(i, q, 0, len(i))
    assert result.found
    assert result.start_position == PREFIX
    assert result.sync_position == PREFIX + LEADER
    leader2_start = PREFIX + LEADER + PULSE
    assert leader2_start < result.end_position <= len(i)
    assert (result.end_position - leader2_start) % STEP_10MS == 0


def test_search_start_offset_gives_same_absolute_positions():
    i, q = _header_signal()
    whole = detect_vis_sync(i, q, 0, len(i))
    offset = detect_vis_sync(i, q, PREFIX, len(i) - PREFIX)
    assert offset == whole


def test_seconds_variant_matches_sample_variant():
    i, q = _header_signal()
    assert detect_vis_sync_seconds(i, q, 0, 1) == detect_vis_sync(i, q, 0, len(i))


def test_silence_finds_nothing():
    i, q = _silence(9600)
    assert detect_vis_sync(i, q, 0, len(i)) == SyncResult()


def test_short_data_fails_read():
    i, q = _silence(100)
    result = detect_vis_sync(i, q, 0, 10000)
    assert not result.found
    assert result.sync_position == -1


def test_leader_without_pulse_is_not_a_header():
    i, q = _join(_leader(LEADER), _silence(30000))
    result = detect_vis_sync(i, q, 0, len(i))
    assert result == SyncResult()


def test_search_length_cuts_off_second_leader():
    i, q = _header_signal()
    result = detect_vis_sync(i, q, 0, PREFIX + LEADER + PULSE)
    assert not result.found


def test_duration_ms():
    assert SyncResult(True, 0, 10, 480).duration_ms == 10.0
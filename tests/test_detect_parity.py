import math

import pytest

from sstvrx.detect_parity import ParityResult, detect_line_parity

RATE = 48000
AMPLITUDE = 10000


def tone(segments):
    """Build phase-continuous I/Q samples from (frequency, count) segments."""
    samples_i, samples_q = [], []
    phase = 0.0
    for freq, count in segments:
        for _ in range(count):
            samples_i.append(round(AMPLITUDE * math.cos(phase)))
            samples_q.append(round(AMPLITUDE * math.sin(phase)))
            phase += 2 * math.pi * freq / RATE
    return samples_i, samples_q


def line_tail(pulse_freq, pulse_len=240, porch_len=240, lead=120, tail=240):
    return tone([(1200, lead), (pulse_freq, pulse_len), (1900, porch_len), (1200, tail)])


def test_even_pulse_detected():
    samples_i, samples_q = line_tail(1500)
    result = detect_line_parity(samples_i, samples_q, 120, 720)
    assert result.found is True
    assert result.is_odd is False
    assert result.sync_position == 120 + 240


def test_odd_pulse_detected():
    samples_i, samples_q = line_tail(2300)
    result = detect_line_parity(samples_i, samples_q, 120, 720)
    assert result.found is True
    assert result.is_odd is True
    assert result.sync_position == 120 + 240


@pytest.mark.parametrize("pulse", [1500, 2300])
def test_sync_position_is_within_porch(pulse):
    samples_i, samples_q = line_tail(pulse)
    result = detect_line_parity(samples_i, samples_q, 120, 720)
    assert 120 + 240 <= result.sync_position < 120 + 480


def test_shifting_search_start_shifts_result():
    samples_i, samples_q = line_tail(2300, lead=240)
    shifted = detect_line_parity(samples_i, samples_q, 240, 720)
    base_i, base_q = line_tail(2300, lead=120)
    base = detect_line_parity(base_i, base_q, 120, 720)
    assert shifted.found and base.found
    assert shifted.sync_position - base.sync_position == 120
    assert shifted.is_odd == base.is_odd


def test_no_pulse_in_plain_tone():
    samples_i, samples_q = tone([(1200, 960)])
    result = detect_line_parity(samples_i, samples_q, 0, 900)
    assert result == ParityResult()


def test_pulse_too_short_is_not_accepted():
    samples_i, samples_q = line_tail(1500, pulse_len=120)
    result = detect_line_parity(samples_i, samples_q, 120, 600)
    assert result.found is False
    assert result.sync_position == -1


def test_pulse_without_porch_is_not_accepted():
    samples_i, samples_q = tone([(1500, 240), (1200, 720)])
    result = detect_line_parity(samples_i, samples_q, 0, 900)
    assert result.found is False
    assert result.sync_position == -1


def test_reading_past_end_gives_no_result():
    samples_i, samples_q = tone([(1200, 100)])
    result = detect_line_parity(samples_i, samples_q, 0, 1000)
    assert result.found is False
    assert result.sync_position == -1


def test_negative_start_gives_no_result():
    samples_i, samples_q = line_tail(1500)
    result = detect_line_parity(samples_i, samples_q, -12, 720)
    assert result.found is False


def test_empty_search_range_finds_nothing():
    samples_i, samples_q = line_tail(1500)
    result = detect_line_parity(samples_i, samples_q, 120, 12)
    assert result == ParityResult()
import io
import math

import pytest

from sstvrx.shell import LineEditor, format_unsigned, linear_to_db, parse_number


@pytest.fixture
def editor():
    return LineEditor(io.StringIO())


def test_read_line_stores_cr_lf_and_echoes(editor):
    line = editor.read_line("abc\r", 256, True)
    assert line == "abc\r\n"
    assert editor.output.getvalue() == "abc\n"


def test_hidden_input_echoes_stars(editor):
    line = editor.read_line("abc\r", 256, False)
    assert line == "abc\r\n"
    assert editor.output.getvalue() == "****"


def test_backspace_removes_character(editor):
    line = editor.read_line("abx\bc\r", 256, True)
    assert line == "abc\r\n"
    assert "\b \b" in editor.output.getvalue()


def test_delete_at_start_is_ignored(editor):
    line = editor.read_line("\x7fok\r", 256, True)
    assert line == "ok\r\n"
    assert editor.output.getvalue() == "ok\n"


def test_escape_cancels(editor):
    assert editor.read_line("ab\x1bcd\r", 256, True) is None


def test_flow_control_characters_are_ignored(editor):
    assert editor.read_line("a\x11b\x13\r", 256, True) == "ab\r\n"


def test_tab_recalls_previous_line(editor):
    editor.read_line("hello\r", 256, True)
    assert editor.read_line("\t\r", 256, True) == "hello\r\n"


def test_limit_stops_reading(editor):
    assert editor.read_line("abcdefg", 5, True) == "abc"


def test_end_of_input_returns_partial_line(editor):
    assert editor.read_line("ab", 256, True) == "ab"


def test_limit_too_small_is_rejected(editor):
    with pytest.raises(ValueError):
        editor.read_line("a", 2, True)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("123", 123),
        ("0x1F", 31),
        ("0X1f", 31),
        ("h1f", 31),
        ("H10", 16),
        ("-42", -42),
        ("12a", 12),
        ("0789", 789),
        ("", 0),
        ("xyz", 0),
    ],
)
def test_parse_number(text, expected):
    assert parse_number(text) == expected


@pytest.mark.parametrize("value", [0, 7, 12345, 4000000000 // 2])
def test_format_unsigned_round_trip(value):
    assert parse_number(format_unsigned(value)) == value


def test_format_unsigned_wraps_negative():
    assert format_unsigned(-1) == "4294967295"


@pytest.mark.parametrize("value, expected", [(0, 4), (2, 4), (3, 9), (9, 9), (10, 11), (16, 11)])
def test_linear_to_db_small_values(value, expected):
    assert linear_to_db(value) == expected


def test_linear_to_db_continues_past_small_range():
    assert linear_to_db(17) == 12


def test_linear_to_db_top_of_range():
    assert linear_to_db(0xFFFFFFFF) == 97


def test_linear_to_db_is_monotonic_and_close_to_log():
    values = [17 + int(1.07 ** k) for k in range(320)]
    values = [v for v in values if v <= 0xFFFFFFFF]
    results = [linear_to_db(v) for v in values]
    assert results == sorted(results)
    for value, db in zip(values, results):
        assert abs(db - 10 * math.log10(value)) <= 2


@pytest.mark.parametrize("value", [-1, 1 << 32])
def test_linear_to_db_rejects_out_of_range(value):
    with pytest.raises(ValueError):
        linear_to_db(value)
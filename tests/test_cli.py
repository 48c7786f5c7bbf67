import struct

import pytest

from sstvrx.cli import decimate, main, read_iq_file


def _write_pairs(path, pairs):
    path.write_bytes(b"".join(struct.pack(">hh", i, q) for i, q in pairs))


def test_read_iq_file_round_trip(tmp_path):
    pairs = [(1, -1), (32767, -32768), (0, 100)]
    path = tmp_path / "iq.bin"
    _write_pairs(path, pairs)
    i_samples, q_samples = read_iq_file(str(path))
    assert list(zip(i_samples, q_samples)) == pairs


def test_read_iq_file_is_big_endian(tmp_path):
    path = tmp_path / "iq.bin"
    path.write_bytes(b"\x01\x02\xff\xfe")
    assert read_iq_file(str(path)) == ([0x0102], [-2])


def test_read_iq_file_rejects_partial_pair(tmp_path):
    path = tmp_path / "iq.bin"
    path.write_bytes(b"\x00\x01\x00")
    with pytest.raises(ValueError):
        read_iq_file(str(path))


def test_decimate_keeps_every_nth():
    samples = list(range(12))
    assert decimate(samples, 5) == samples[::5]
    assert decimate(samples, 1) == samples


def test_decimate_rejects_zero():
    with pytest.raises(ValueError):
        decimate([1, 2, 3], 0)


def test_main_missing_file_returns_error(tmp_path, capsys):
    code = main([str(tmp_path / "missing.bin")])
    assert code == 2
    assert "error" in capsys.readouterr().err


def test_main_short_recording_writes_nothing(tmp_path, capsys):
    path = tmp_path / "iq.bin"
    _write_pairs(path, [(1000, 0), (0, 1000), (-1000, 0), (0, -1000)] * 50)
    output = tmp_path / "out.bmp"
    code = main([str(path), "-o", str(output)])
    assert code == 1
    assert not output.exists()
    assert "VIS_SYNC_SEARCH" in capsys.readouterr().err


def test_main_bad_decimation_returns_error(tmp_path):
    path = tmp_path / "iq.bin"
    _write_pairs(path, [(1, 1)] * 4)
    assert main([str(path), "-d", "0"]) == 2
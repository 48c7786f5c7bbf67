import pytest

from sstvrx.stream import EndOfStream, FrequencyStream


def _recording(blocks, pulled):
    """Yield each block, noting its index in ``pulled`` as it is taken."""
    for index, block in enumerate(blocks):
        pulled.append(index)
        yield block


def test_read_within_single_block():
    stream = FrequencyStream([[1, 2, 3, 4, 5]])
    assert stream.read(2) == [1, 2]
    assert stream.read(3) == [3, 4, 5]


def test_read_spans_block_boundaries():
    stream = FrequencyStream([[1, 2], [3, 4, 5], [6]])
    assert stream.read(4) == [1, 2, 3, 4]
    assert stream.read(2) == [5, 6]


def test_read_zero_returns_empty_without_pulling():
    pulled = []
    stream = FrequencyStream(_recording([[1]], pulled))
    assert stream.read(0) == []
    assert pulled == []


def test_blocks_are_pulled_lazily():
    pulled = []
    blocks = [[index] * 4 for index in range(3)]
    stream = FrequencyStream(_recording(blocks, pulled))
    assert stream.read(3) == [0, 0, 0]
    assert pulled == [0]
    assert stream.read(2) == [0, 1]
    assert pulled == [0, 1]


def test_empty_blocks_are_skipped():
    stream = FrequencyStream([[], [7], [], [], [8, 9]])
    assert stream.read(3) == [7, 8, 9]


def test_exhaustion_raises_end_of_stream():
    stream = FrequencyStream([[1, 2, 3]])
    assert stream.read(2) == [1, 2]
    with pytest.raises(EndOfStream):
        stream.read(2)


def test_end_of_stream_is_eof_error():
    stream = FrequencyStream([])
    with pytest.raises(EOFError):
        stream.read(1)


def test_negative_length_rejected():
    stream = FrequencyStream([[1]])
    with pytest.raises(ValueError):
        stream.read(-1)


def test_total_samples_preserved_across_reads():
    blocks = [list(range(start, start + 480)) for start in range(0, 4800, 480)]
    stream = FrequencyStream(blocks)
    collected = []
    for size in (48, 12, 4224, 100, 416):
        collected.extend(stream.read(size))
    assert collected == list(range(4800))
    with pytest.raises(EndOfStream):
        stream.read(1)
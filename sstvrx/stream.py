"""A pull-based reader over blocks of demodulated frequency samples."""

from __future__ import annotations

from collections.abc import Iterable, Sequence


class EndOfStream(EOFError):
    """Raised when the underlying blocks run out before a read is satisfied."""


class FrequencyStream:
    """Serve frequency samples in requested amounts from a sequence of blocks.

    Blocks may have any length and are pulled from the iterable only when
    the samples already buffered have been used up.
    """

    def __init__(self, blocks: Iterable[Sequence[int]]) -> None:
        self._blocks = iter(blocks)
        self._current: list[int] = []
        self._position = 0

    def read(self, length: int) -> list[int]:
        """Return the next ``length`` samples.

        Raises ``EndOfStream`` if the blocks are exhausted first; the samples
        gathered for that read are discarded.
        """
        if length < 0:
            raise ValueError("length must not be negative")
        samples: list[int] = []
        while len(samples) < length:
            available = len(self._current) - self._position
            if available <= 0:
                try:
                    self._current = list(next(self._blocks))
                except StopIteration:
                    raise EndOfStream(
                        f"stream ended after {len(samples)} of {length} samples"
                    ) from None
                self._position = 0
                continue
            take = min(length - len(samples), available)
            samples.extend(self._current[self._position:self._position + take])
            self._position += take
        return samples
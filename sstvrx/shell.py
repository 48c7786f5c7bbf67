"""Console line editing and small number helpers for the receiver shell."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TextIO

CNTLQ = "\x11"
CNTLS = "\x13"
DEL = "\x7f"
BACKSPACE = "\x08"
TAB = "\t"
LF = "\n"
CR = "\r"
ESC = "\x1b"

CMDLINE_BUF = 256
TAB_RECALL_LIMIT = 60

_DB_THRESHOLDS = (
    0x00000011, 0x000000E0, 0x00000DDD, 0x0000DBAB,
    0x000D9972, 0x00D78940, 0x0D580472, 0x85702C73,
)

_DB_STEPS = (
    (0x11C9, 0x1664, 0x1C30, 0x237C, 0x2CAC, 0x383C, 0x46CC, 0x5921,
     0x7034, 0x8D41, 0xB1D4, 0xDFE0, 0xFFFF, 0xFFFF, 0xFFFF, 0xFFFF),
    (0x119E, 0x162E, 0x1BEB, 0x2326, 0x2C40, 0x37B5, 0x4621, 0x5849,
     0x6F25, 0x8BEC, 0xB027, 0xDDC3, 0xFFFF, 0xFFFF, 0xFFFF, 0xFFFF),
    (0x1173, 0x15F8, 0x1BA8, 0x22D1, 0x2BD5, 0x372E, 0x4577, 0x5774,
     0x6E18, 0x8A9A, 0xAE7D, 0xDBAB, 0xFFFF, 0xFFFF, 0xFFFF, 0xFFFF),
    (0x1149, 0x15C3, 0x1B65, 0x227D, 0x2B6B, 0x36A9, 0x44CF, 0x56A0,
     0x6D0E, 0x894B, 0xACD7, 0xD998, 0xFFFF, 0xFFFF, 0xFFFF, 0xFFFF),
    (0x111F, 0x158E, 0x1B23, 0x222A, 0x2B02, 0x3624, 0x4429, 0x55CF,
     0x6C07, 0x87FF, 0xAB35, 0xD78A, 0xFFFF, 0xFFFF, 0xFFFF, 0xFFFF),
    (0x10F6, 0x155A, 0x1AE1, 0x21D7, 0x2A9A, 0x35A2, 0x4384, 0x5500,
     0x6B02, 0x86B6, 0xA998, 0xD581, 0xFFFF, 0xFFFF, 0xFFFF, 0xFFFF),
    (0x10CD, 0x1527, 0x1AA0, 0x2185, 0x2A33, 0x3520, 0x42E1, 0x5432,
     0x69FF, 0xFFFF, 0xFFFF, 0xFFFF, 0xFFFF, 0xFFFF, 0xFFFF, 0xFFFF),
)


class LineEditor:
    """Read command lines from a character source, echoing to ``output``.

    The last completed line is kept and can be recalled with TAB.
    """

    def __init__(self, output: TextIO) -> None:
        self.output = output
        self.last_line = ""

    def read_line(
        self, chars: Iterable[str], limit: int = CMDLINE_BUF, display: bool = True
    ) -> str | None:
        """Read one line; return it, or None if ESC cancels the edit.

        A carriage return ends the line and is stored as CR LF. At most
        ``limit - 2`` characters are gathered. If ``chars`` runs out, the
        characters read so far make up the line. With ``display`` off every
        stored character is echoed as ``*``.
        """
        if limit < 3:
            raise ValueError("limit must be at least 3")

        buffer: list[str] = []

        def echo(ch: str) -> None:
            self.output.write(ch if display else "*")

        for ch in chars:
            if ch in (CNTLQ, CNTLS):
                continue
            if ch in (BACKSPACE, DEL):
                if buffer:
                    buffer.pop()
                    self.output.write("\b \b")
                continue
            if ch == ESC:
                return None
            if ch == TAB:
                for recalled in self.last_line:
                    if recalled in (CR, LF, "\0") or len(buffer) >= TAB_RECALL_LIMIT:
                        break
                    buffer.append(recalled)
                    echo(recalled)
            else:
                if ch == CR:
                    buffer.append(CR)
                    ch = LF
                buffer.append(ch)
                echo(ch)
            if len(buffer) >= limit - 2 or ch == LF:
                break

        line = "".join(buffer)
        self.last_line = line
        return line


def _wrap_int32(value: int) -> int:
    return ((value + 0x80000000) & 0xFFFFFFFF) - 0x80000000


def parse_number(text: str) -> int:
    """Parse a signed decimal or ``0x``/``h``-prefixed hexadecimal number.

    Parsing stops at the first character that is not a digit of the radix;
    an empty or non-numeric string gives 0. The result wraps to 32 bits.
    """
    radix = 10
    negative = False
    rest = text
    if rest.startswith("-"):
        negative = True
        rest = rest[1:]
    elif rest.startswith("0"):
        rest = rest[1:]
        if rest[:1] in ("x", "X"):
            rest = rest[1:]
            radix = 16
    elif rest[:1] in ("h", "H"):
        rest = rest[1:]
        radix = 16

    value = 0
    for ch in rest:
        if "0" <= ch <= "9":
            digit = ord(ch) - ord("0")
        elif "a" <= ch <= "f":
            digit = ord(ch) - ord("a") + 10
        elif "A" <= ch <= "F":
            digit = ord(ch) - ord("A") + 10
        else:
            break
        if digit >= radix:
            break
        value = _wrap_int32(value * radix + digit)
    return _wrap_int32(-value) if negative else value


def format_unsigned(value: int) -> str:
    """Format the value as an unsigned 32-bit decimal number."""
    return str(value & 0xFFFFFFFF)


def linear_to_db(value: int) -> int:
    """Convert an unsigned 32-bit linear power value to whole decibels."""
    if not 0 <= value <= 0xFFFFFFFF:
        raise ValueError("value must be an unsigned 32-bit integer")
    if value < 17:
        return 11 if value > 9 else (9 if value > 2 else 4)

    above = next(
        (index for index, limit in enumerate(_DB_THRESHOLDS) if value < limit), None
    )
    if above is None:
        return (value >> 29) + 90

    row = above - 1
    if row < 3:
        scaled = (value << ((2 - row) * 4)) & 0xFFFF
    else:
        scaled = (value >> ((row - 2) * 4)) & 0xFFFF
    steps_below = sum(1 for step in _DB_STEPS[row] if step < scaled)
    return row * 12 + 12 + steps_below
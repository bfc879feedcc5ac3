"""Lazy UTF-8 decoding that keeps original byte spans.

Malformed input never raises: every invalid or truncated sequence comes out
as a single ``recovered`` item carrying the ``?`` placeholder, and decoding
resumes right after the offending bytes.
"""

from typing import Iterator, List, NamedTuple, Tuple

__all__ = ["PLACEHOLDER", "Decoded", "iter_scalars", "decode_scalars"]

PLACEHOLDER = 0x3F  # '?'


class Decoded(NamedTuple):
    """One scalar value and the ``data[start:end]`` bytes it came from."""
    scalar: int
    start: int
    end: int
    recovered: bool = False


def _lead_info(lead: int) -> Tuple[int, int, int]:
    """Return (continuation bytes needed, initial value bits, minimum scalar)."""
    if 0xC2 <= lead <= 0xDF:
        return 1, lead & 0x1F, 0x80
    if 0xE0 <= lead <= 0xEF:
        return 2, lead & 0x0F, 0x800
    if 0xF0 <= lead <= 0xF4:
        return 3, lead & 0x07, 0x10000
    # stray continuation byte, C0/C1 overlong leads, F5..FF
    return 0, 0, 0


def iter_scalars(data: bytes) -> Iterator[Decoded]:
    """Yield a :class:`Decoded` item for every scalar value in *data*."""
    pos = 0
    size = len(data)
    while pos < size:
        lead = data[pos]
        if lead < 0x80:
            yield Decoded(lead, pos, pos + 1)
            pos += 1
            continue

        need, value, minimum = _lead_info(lead)
        if not need:
            yield Decoded(PLACEHOLDER, pos, pos + 1, True)
            pos += 1
            continue

        end = pos + 1
        while end < size and end - pos <= need and 0x80 <= data[end] <= 0xBF:
            value = (value << 6) | (data[end] & 0x3F)
            end += 1

        if end - pos - 1 < need:
            # truncated: swallow what continuation bytes there were
            yield Decoded(PLACEHOLDER, pos, end, True)
        elif value < minimum or 0xD800 <= value <= 0xDFFF or value > 0x10FFFF:
            yield Decoded(PLACEHOLDER, pos, end, True)
        else:
            yield Decoded(value, pos, end)
        pos = end


def decode_scalars(data: bytes) -> List[Decoded]:
    return list(iter_scalars(data))

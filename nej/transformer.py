"""Remove emoji graphemes from a UTF-8 byte string."""

from collections import deque
from typing import AbstractSet, Deque, NamedTuple

from .classifier import match_emoji, span_is_kept
from .decoder import PLACEHOLDER, Decoded, iter_scalars

__all__ = ["LOOKAHEAD", "ProcessingResult", "strip_emoji"]

# Longest span the classifier may see in one piece.
LOOKAHEAD = 64

_PLACEHOLDER_BYTES = bytes([PLACEHOLDER])


class ProcessingResult(NamedTuple):
    output: bytes
    removed: int


def strip_emoji(
    data: bytes,
    replacement: bytes = b"",
    keep: AbstractSet[int] = frozenset(),
) -> ProcessingResult:
    """Return *data* with every emoji grapheme elided and the number removed.

    Each removed grapheme is replaced by *replacement* once, however many
    scalar values it spans. A grapheme containing any codepoint in *keep* is
    copied whole. Bytes that do not decode as UTF-8 are written as
    ``?``; everything else is copied verbatim.
    """
    stream = iter_scalars(data)
    window: Deque[Decoded] = deque()
    scalars: Deque[int] = deque()
    out = bytearray()
    removed = 0
    exhausted = False

    while True:
        while not exhausted and len(window) < LOOKAHEAD:
            item = next(stream, None)
            if item is None:
                exhausted = True
                break
            window.append(item)
            scalars.append(item.scalar)
        if not window:
            break

        span = match_emoji(scalars, 0)
        if span:
            kept = bool(keep) and span_is_kept(scalars, 0, span, keep)
            if kept:
                out += data[window[0].start:window[span - 1].end]
            else:
                removed += 1
                out += replacement
            for _ in range(span):
                window.popleft()
                scalars.popleft()
            continue

        item = window.popleft()
        scalars.popleft()
        out += _PLACEHOLDER_BYTES if item.recovered else data[item.start:item.end]

    return ProcessingResult(bytes(out), removed)

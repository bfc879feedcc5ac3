"""Emoji grapheme classification over a window of scalar values."""

from bisect import bisect_right
from typing import AbstractSet, Iterable, List, Sequence, Tuple

import emoji

__all__ = [
    "EMOJI_RANGES",
    "is_emoji_codepoint",
    "is_regional_indicator",
    "match_emoji",
    "span_is_kept",
]

ZWJ = 0x200D
VS16 = 0xFE0F
KEYCAP = 0x20E3
TAG_CANCEL = 0xE007F
KEYCAP_BASES = frozenset(map(ord, "0123456789#*"))

# --- Static emoji blocks ---
# Blocks that are (almost) entirely pictographic. Everything else comes from
# the single-codepoint entries of emoji.EMOJI_DATA.
STATIC_EMOJI_BLOCKS: Tuple[Tuple[int, int], ...] = (
    (0x2B1B, 0x2B1C),    # Large squares
    (0x2B50, 0x2B50),    # Star
    (0x2B55, 0x2B55),    # Heavy large circle
    (0x1F000, 0x1F02F),  # Mahjong Tiles
    (0x1F0A0, 0x1F0FF),  # Playing Cards
    (0x1F170, 0x1F1FF),  # Enclosed letters, regional indicators
    (0x1F200, 0x1F2FF),  # Enclosed Ideographic Supplement
    (0x1F300, 0x1F5FF),  # Symbols and Pictographs
    (0x1F600, 0x1F64F),  # Emoticons
    (0x1F680, 0x1F6FF),  # Transport and Map
    (0x1F7E0, 0x1F7FF),  # Geometric Shapes Extended (colored)
    (0x1F900, 0x1F9FF),  # Supplemental Symbols and Pictographs
    (0x1FA70, 0x1FAFF),  # Symbols and Pictographs Extended-A
)

# Misc Symbols and Dingbats mix emoji with plain text symbols (U+2713, U+2605).
# Only codepoints emoji.EMOJI_DATA knows are taken from here, text-default
# ones included.
TEXT_SYMBOL_BLOCK = (0x2600, 0x27BF)


def _merge_ranges(ranges: Iterable[Tuple[int, int]]) -> Tuple[Tuple[int, int], ...]:
    merged: List[Tuple[int, int]] = []
    for first, last in sorted(ranges):
        if merged and first <= merged[-1][1] + 1:
            if last > merged[-1][1]:
                merged[-1] = (merged[-1][0], last)
        else:
            merged.append((first, last))
    return tuple(merged)


def _build_table() -> Tuple[Tuple[int, int], ...]:
    fully_qualified = emoji.STATUS["fully_qualified"]
    first, last = TEXT_SYMBOL_BLOCK
    singles = [
        (ord(key), ord(key))
        for key, data in emoji.EMOJI_DATA.items()
        if len(key) == 1 and (
            data.get("status") == fully_qualified or first <= ord(key) <= last
        )
    ]
    return _merge_ranges(list(STATIC_EMOJI_BLOCKS) + singles)


# Built once at import, read-only afterwards.
EMOJI_RANGES = _build_table()
_RANGE_STARTS = tuple(first for first, _ in EMOJI_RANGES)
_RANGE_ENDS = tuple(last for _, last in EMOJI_RANGES)


def is_emoji_codepoint(cp: int) -> bool:
    """True if *cp* is a single-codepoint emoji in the range table."""
    idx = bisect_right(_RANGE_STARTS, cp) - 1
    return idx >= 0 and cp <= _RANGE_ENDS[idx]


def is_regional_indicator(cp: int) -> bool:
    return 0x1F1E6 <= cp <= 0x1F1FF


def _is_skin_tone(cp: int) -> bool:
    return 0x1F3FB <= cp <= 0x1F3FF


def _is_tag(cp: int) -> bool:
    return 0xE0020 <= cp <= 0xE007F


def _is_presentation_pair(scalars: Sequence[int], pos: int) -> bool:
    """Text-default symbol turned emoji by a trailing VS16, e.g. U+00A9 U+FE0F."""
    if pos + 1 >= len(scalars) or scalars[pos + 1] != VS16:
        return False
    return emoji.is_emoji(chr(scalars[pos]) + chr(VS16))


def _joinable(cp: int) -> bool:
    return is_emoji_codepoint(cp) or emoji.is_emoji(chr(cp))


def _extend(scalars: Sequence[int], pos: int) -> int:
    """Greedily extend a span whose base ends before *pos*; return new end."""
    size = len(scalars)
    while pos < size:
        cp = scalars[pos]
        if cp == VS16 or cp == KEYCAP or _is_skin_tone(cp):
            pos += 1
        elif _is_tag(cp):
            pos += 1
            if cp == TAG_CANCEL:
                break
        elif cp == ZWJ and pos + 1 < size and _joinable(scalars[pos + 1]):
            pos += 2
        else:
            break
    return pos


def match_emoji(scalars: Sequence[int], pos: int = 0) -> int:
    """Length of the longest emoji span starting at ``scalars[pos]``, or 0.

    Never looks past ``len(scalars)``; callers hand in a bounded window.
    """
    size = len(scalars)
    if pos >= size:
        return 0
    cp = scalars[pos]

    if is_regional_indicator(cp):
        if pos + 1 < size and is_regional_indicator(scalars[pos + 1]):
            return 2
        return 1

    if cp in KEYCAP_BASES:
        nxt = pos + 1
        if nxt < size and scalars[nxt] == VS16:
            nxt += 1
        if nxt < size and scalars[nxt] == KEYCAP:
            return nxt + 1 - pos
        return 0

    if is_emoji_codepoint(cp) or _is_presentation_pair(scalars, pos):
        return _extend(scalars, pos + 1) - pos
    return 0


def span_is_kept(
    scalars: Sequence[int],
    pos: int,
    length: int,
    keep: AbstractSet[int],
) -> bool:
    """True if any codepoint of the span ``scalars[pos:pos + length]`` is in *keep*."""
    return any(scalars[idx] in keep for idx in range(pos, pos + length))

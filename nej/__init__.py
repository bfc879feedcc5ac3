"""Nej: strip emoji from text files."""

VERSION = "1.0.0"

from .classifier import is_emoji_codepoint, match_emoji  # noqa: E402
from .decoder import Decoded, iter_scalars  # noqa: E402
from .logger import SimpleLogger  # noqa: E402
from .processor import EmojiStripper, FileProcessResult, FileTask, RunStats  # noqa: E402
from .transformer import ProcessingResult, strip_emoji  # noqa: E402

__all__ = [
    "VERSION",
    "Decoded",
    "iter_scalars",
    "is_emoji_codepoint",
    "match_emoji",
    "ProcessingResult",
    "strip_emoji",
    "SimpleLogger",
    "FileTask",
    "FileProcessResult",
    "RunStats",
    "EmojiStripper",
]

###############################################################################
#  main() - thin CLI for EmojiStripper
###############################################################################

import argparse
import os
import sys
from typing import List, Optional, Set

from . import VERSION
from .logger import LOG_LEVELS, SimpleLogger
from .processor import EmojiStripper

__all__ = ["build_arg_parser", "expand_in_place_flag", "main"]


def expand_in_place_flag(argv: List[str]) -> List[str]:
    """Rewrite sed-style ``-iSUFFIX`` into ``--in-place --backup-suffix=SUFFIX``.

    argparse cannot express an option whose value must be attached, so a bare
    ``-i`` would otherwise swallow the following file name.
    """
    out: List[str] = []
    for idx, arg in enumerate(argv):
        if arg == "--":
            out.extend(argv[idx:])
            break
        if arg.startswith("-i") and len(arg) > 2:
            out.extend(["--in-place", f"--backup-suffix={arg[2:]}"])
        else:
            out.append(arg)
    return out


def _parse_keep_chars(vals: List[str], logger: SimpleLogger) -> Set[int]:
    """Convert ``--keep`` values (U+XXXX, hex, or a literal char) to codepoints."""
    out: Set[int] = set()
    for token in vals:
        tok = token.strip()
        parsed: Optional[int] = None
        if tok.upper().startswith("U+") and len(tok) > 2:
            tok = tok[2:]
        if 4 <= len(tok) <= 6:
            try:
                parsed = int(tok, 16)
            except ValueError:
                parsed = None
        elif len(tok) == 1:
            parsed = ord(tok)
        if parsed is None or parsed > 0x10FFFF:
            logger.error("%s for --keep '%s'. Use U+XXXX, plain char, or hex.",
                         logger.red("Error: Invalid format"), token)
            raise SystemExit(1)
        out.add(parsed)
        logger.debug("Keeping character U+%04X", parsed)
    return out


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nej",
        description="Remove emoji from text files.",
        formatter_class=argparse.RawTextHelpFormatter,
        epilog="""
Examples:
  %(prog)s --dry-run notes.md README.md
  %(prog)s -i notes.md
  %(prog)s -i.bak --replacement ' ' notes.md
  %(prog)s --dry-run --fail --keep U+2764 docs/*.md

Output coloring: use --no-color to disable. Respects NO_COLOR env var.
""",
    )

    parser.add_argument("files", nargs="+", metavar="FILE", help="Text file(s) to process.")

    mode_group = parser.add_mutually_exclusive_group(required=True)
    mode_group.add_argument("--dry-run", action="store_true",
                            help="Report emoji counts per file without writing.")
    mode_group.add_argument("-i", "--in-place", action="store_true", dest="in_place",
                            help="Edit files in place. -iSUFFIX keeps the original as FILE+SUFFIX.")

    parser.add_argument("--backup-suffix", metavar="SUFFIX", default=None,
                        help="Keep the pre-edit original at FILE+SUFFIX (with -i).")

    parser.add_argument("--replacement", metavar="TEXT", default="",
                        help="Text written in place of each removed emoji (default: nothing).")

    parser.add_argument("--keep", action="append", dest="keep_chars_str",
                        default=[], metavar="U+XXXX or Char",
                        help="Emoji to leave untouched. Can be used multiple times.")

    parser.add_argument("--fail", action="store_true",
                        help="Exit with status code 1 if any emoji were found.")

    parser.add_argument("--summary", action="store_true",
                        help="Print a summary of the run to stderr.")

    parser.add_argument("--report-file", metavar="FILE",
                        help="Write a run report to a file.")

    parser.add_argument("--no-color", action="store_true",
                        help="Disable colored output.")

    parser.add_argument("--log-level", choices=list(LOG_LEVELS),
                        default="INFO", help="Set the logging level.")

    parser.add_argument("--log-file", metavar="FILE",
                        help="Also write logs to a file.")

    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_arg_parser()
    args = parser.parse_args(expand_in_place_flag(sys.argv[1:] if argv is None else list(argv)))

    if args.backup_suffix is not None and not args.in_place:
        parser.error("--backup-suffix requires -i/--in-place")

    log = SimpleLogger(
        level=LOG_LEVELS[args.log_level],
        use_colors=sys.stderr.isatty() and not args.no_color and os.environ.get("NO_COLOR") is None,
        log_file=args.log_file,
    )
    log.debug("Nej v%s starting", VERSION)

    try:
        keep = _parse_keep_chars(args.keep_chars_str, log)
        stripper = EmojiStripper.from_args(args, keep=keep, logger=log)
        stats = stripper.run(args.files)

        if args.summary:
            stripper.display_summary_report(stats)

        if args.report_file:
            try:
                stripper.write_report(args.report_file, stats)
                log.info("Report written to %s", args.report_file)
            except OSError as e:
                log.error("Error writing report to %s: %s", args.report_file, e)

        exit_code = 0
        if stats.files_failed:
            exit_code = 1
        elif args.fail and stats.total_removed:
            log.warning("Exiting with status 1 due to --fail flag and emoji found.")
            exit_code = 1
    finally:
        log.close()

    raise SystemExit(exit_code)

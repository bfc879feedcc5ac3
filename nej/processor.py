"""Per-file processing: binary detection, dry-run reports, atomic rewrite."""

import os
import shutil
import stat
import sys
import tempfile
import time
from dataclasses import dataclass
from typing import AbstractSet, Iterable, List, Optional, TextIO

from .logger import SimpleLogger
from .transformer import strip_emoji

__all__ = [
    "BINARY_WINDOW",
    "NejError",
    "PathError",
    "WriteFailure",
    "FileTask",
    "FileProcessResult",
    "RunStats",
    "EmojiStripper",
    "temp_prefix",
]

BINARY_WINDOW = 8192
_READ_CHUNK = 1024

# File outcomes
STATUS_BINARY = "binary"
STATUS_REPORTED = "reported"
STATUS_WRITTEN = "written"
STATUS_UNCHANGED = "unchanged"
STATUS_FAILED = "failed"


class NejError(Exception):
    """Base class for per-file failures."""


class PathError(NejError):
    """Input path is missing, unreadable or not a regular file."""


class WriteFailure(NejError):
    """Temporary write, backup or final rename failed; original untouched."""


# --- Data Models ---
@dataclass
class FileTask:
    path: str
    dry_run: bool = True
    backup_suffix: Optional[str] = None


@dataclass
class FileProcessResult:
    """Result of processing a file."""
    filepath: str
    status: str
    removed: int = 0
    error: Optional[str] = None
    backup_path: Optional[str] = None


@dataclass
class RunStats:
    """Statistics for a run over all input paths."""
    files_processed: int = 0
    files_with_emoji: int = 0
    files_skipped: int = 0
    files_failed: int = 0
    total_removed: int = 0
    start_time: float = 0.0
    end_time: float = 0.0

    @property
    def elapsed_time(self) -> float:
        return self.end_time - self.start_time if self.end_time else 0.0

    def update_from_result(self, result: FileProcessResult) -> None:
        self.files_processed += 1
        if result.status == STATUS_BINARY:
            self.files_skipped += 1
        elif result.status == STATUS_FAILED:
            self.files_failed += 1
        if result.removed:
            self.files_with_emoji += 1
        self.total_removed += result.removed


def temp_prefix(path: str) -> str:
    """Prefix for the temporary sibling of *path*: process id plus ns clock."""
    return f".{os.path.basename(path)}.{os.getpid()}.{time.time_ns()}."


# ---------------------------------------------------------------------------
#  Core class
# ---------------------------------------------------------------------------
class EmojiStripper:
    """Strip emoji from files, either reporting counts or rewriting in place."""

    def __init__(
        self,
        *,
        dry_run: bool = True,
        backup_suffix: Optional[str] = None,
        replacement: str = "",
        keep: Optional[AbstractSet[int]] = None,
        logger: Optional[SimpleLogger] = None,
        out: Optional[TextIO] = None,
    ) -> None:
        self.dry_run = dry_run
        self.backup_suffix = backup_suffix or None
        self.replacement = replacement.encode("utf-8")
        self.keep = frozenset(keep or ())
        self.log = logger or SimpleLogger()
        self.out = out if out is not None else sys.stdout
        self._results: List[FileProcessResult] = []

    # ------------------------------------------------------------------
    #  Low-level helpers
    # ------------------------------------------------------------------
    @staticmethod
    def is_binary_file(path: str, window: int = BINARY_WINDOW) -> bool:
        """Null byte within the first *window* bytes == binary."""
        seen = 0
        with open(path, "rb") as f:
            while seen < window:
                chunk = f.read(min(_READ_CHUNK, window - seen))
                if not chunk:
                    return False
                if b"\x00" in chunk:
                    return True
                seen += len(chunk)
        return False

    @staticmethod
    def _path_error(e: OSError) -> PathError:
        if isinstance(e, FileNotFoundError):
            return PathError("File not found")
        if isinstance(e, PermissionError):
            return PathError("Permission denied")
        if isinstance(e, IsADirectoryError):
            return PathError("Is a directory")
        return PathError(e.strerror or str(e))

    def _check_regular_file(self, path: str) -> None:
        """Reject directories, FIFOs, devices and sockets before opening."""
        try:
            st = os.stat(path)
        except OSError as e:
            raise self._path_error(e) from e
        if stat.S_ISDIR(st.st_mode):
            raise PathError("Is a directory")
        if not stat.S_ISREG(st.st_mode):
            raise PathError("Not a regular file")

    def _read_bytes(self, path: str) -> bytes:
        try:
            with open(path, "rb") as f:
                return f.read()
        except OSError as e:
            raise self._path_error(e) from e

    def _write_atomically(self, path: str, data: bytes) -> Optional[str]:
        """Replace *path* with *data*; return the backup path, if one was made."""
        directory = os.path.dirname(path) or "."
        try:
            temp_obj = tempfile.NamedTemporaryFile(
                mode="wb",
                delete=False,
                dir=directory,
                prefix=temp_prefix(path),
                suffix=".tmp",
            )
        except OSError as e:
            raise WriteFailure(f"Could not create temporary file in {directory}: {e}") from e

        temp_path = temp_obj.name
        self.log.debug("Created temporary file %s for %s", temp_path, path)
        backup_path: Optional[str] = None
        try:
            with temp_obj:
                temp_obj.write(data)
                temp_obj.flush()
                os.fsync(temp_obj.fileno())
            st = os.stat(path)
            os.chmod(temp_path, stat.S_IMODE(st.st_mode))
            if self.backup_suffix:
                backup_path = path + self.backup_suffix
                shutil.copy2(path, backup_path)
                self.log.debug("Backed up %s to %s", path, backup_path)
            os.replace(temp_path, path)
        except OSError as e:
            if os.path.exists(temp_path):
                try:
                    os.remove(temp_path)
                except OSError as e_rm:
                    self.log.debug("Could not remove temporary file %s: %s", temp_path, e_rm)
            raise WriteFailure(f"Error saving changes for {path}: {e}") from e
        return backup_path

    # ------------------------------------------------------------------
    def process_file(self, task: FileTask) -> FileProcessResult:
        """Run one path through binary check, transform, report or rewrite."""
        path = task.path
        try:
            self._check_regular_file(path)
            try:
                binary = self.is_binary_file(path)
            except OSError as e:
                raise self._path_error(e) from e
            if binary:
                self.log.warning("Skipping '%s' as it does not appear to be text.", path)
                return FileProcessResult(path, STATUS_BINARY)

            data = self._read_bytes(path)
            result = strip_emoji(data, self.replacement, self.keep)

            if task.dry_run:
                print(f'File: "{path}", Emojis removed: {result.removed}', file=self.out)
                return FileProcessResult(path, STATUS_REPORTED, result.removed)

            if not result.removed:
                self.log.debug("No emoji in %s; left unchanged", path)
                return FileProcessResult(path, STATUS_UNCHANGED)

            backup_path = self._write_atomically(path, result.output)
            self.log.info("Removed %d emoji from %s", result.removed, path)
            return FileProcessResult(path, STATUS_WRITTEN, result.removed, backup_path=backup_path)

        except PathError as e:
            self.log.error("%s: %s", e, path)
            return FileProcessResult(path, STATUS_FAILED, error=str(e))
        except WriteFailure as e:
            self.log.error("%s", e)
            return FileProcessResult(path, STATUS_FAILED, error=str(e))

    # ------------------------------------------------------------------
    def run(self, paths: Iterable[str]) -> RunStats:
        """Process every path in order and return accumulated statistics."""
        stats = RunStats(start_time=time.time())
        self._results = []
        for path in paths:
            task = FileTask(path, self.dry_run, self.backup_suffix)
            res = self.process_file(task)
            self._results.append(res)
            stats.update_from_result(res)
        stats.end_time = time.time()
        return stats

    @property
    def results(self) -> List[FileProcessResult]:
        return list(self._results)

    # --- Report Generation Functions ---
    def display_summary_report(self, stats: RunStats) -> None:
        sep = "=" * 60
        self.log.info("%s", sep)
        self.log.info("%s", self.log.blue("SUMMARY"))
        self.log.info("%s", sep)
        self.log.info("Files processed: %d", stats.files_processed)
        self.log.info("Files with emoji: %d", stats.files_with_emoji)
        self.log.info("Binary files skipped: %d", stats.files_skipped)
        self.log.info("Files failed: %d", stats.files_failed)
        self.log.info("Total emoji removed: %d", stats.total_removed)
        self.log.info("Elapsed time: %.2f s", stats.elapsed_time)
        self.log.info("%s", sep)
        status = (
            self.log.red("ERRORS") if stats.files_failed
            else self.log.yellow("EMOJI FOUND") if stats.total_removed
            else self.log.green("NO EMOJI FOUND")
        )
        self.log.info("Status: %s", status)

    def write_report(self, report_path: str, stats: RunStats) -> None:
        """Write a plain-text run report; raises OSError on failure."""
        with open(report_path, "w", encoding="utf-8") as f:
            f.write("NEJ EMOJI REPORT\n")
            f.write("================\n\n")
            f.write(f"Date: {time.strftime('%Y-%m-%d %H:%M:%S')}\n")
            f.write(f"Mode: {'dry run' if self.dry_run else 'in place'}\n")
            f.write(f"Files processed: {stats.files_processed}\n")
            f.write(f"Files with emoji: {stats.files_with_emoji}\n")
            f.write(f"Binary files skipped: {stats.files_skipped}\n")
            f.write(f"Files failed: {stats.files_failed}\n")
            f.write(f"Total emoji removed: {stats.total_removed}\n")
            f.write(f"Elapsed time: {stats.elapsed_time:.2f} seconds\n\n")
            for res in self._results:
                line = f"{res.filepath}: {res.status}"
                if res.removed:
                    line += f", {res.removed} removed"
                if res.error:
                    line += f" ({res.error})"
                f.write(line + "\n")

    # ------------------------------------------------------------------
    @classmethod
    def from_args(cls, args, keep: Optional[AbstractSet[int]] = None,
                  logger: Optional[SimpleLogger] = None):
        return cls(
            dry_run=args.dry_run,
            backup_suffix=args.backup_suffix,
            replacement=args.replacement,
            keep=keep,
            logger=logger,
        )

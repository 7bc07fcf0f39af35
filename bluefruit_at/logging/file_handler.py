"""Size-rotated log file output for communication logging."""

from pathlib import Path
from threading import Lock
from typing import Optional, TextIO
import os
import sys

from bluefruit_at.logging.log_models import LogEntry


class FileHandler:
    """Thread-safe log file writer with size-based rotation.

    When the file reaches ``max_size_mb`` it is renamed to ``<name>.1``,
    older backups shift up by one, and anything beyond ``backup_count`` is
    deleted.

    Example:
        >>> handler = FileHandler("~/.bluefruit-at/logs/comm.log", max_size_mb=10, backup_count=5)
        >>> handler.write(entry)
        >>> handler.close()
    """

    def __init__(self, log_file_path: str, max_size_mb: float = 10, backup_count: int = 5):
        """Create the log directory and open the file for appending.

        Args:
            log_file_path: Path to log file (supports ~ expansion)
            max_size_mb: Size in MB that triggers rotation (default: 10)
            backup_count: Number of rotated backups to keep (default: 5)

        Raises:
            OSError: Log directory cannot be created or file cannot be opened
        """
        self.log_file_path = Path(log_file_path).expanduser().resolve()
        self.max_size_bytes = int(max_size_mb * 1024 * 1024)
        self.backup_count = backup_count
        self._lock = Lock()

        self.log_file_path.parent.mkdir(parents=True, exist_ok=True)
        self._file_handle: Optional[TextIO] = self._open_file()

    def _open_file(self) -> TextIO:
        return open(self.log_file_path, mode='a', encoding='utf-8')

    def write(self, entry: LogEntry) -> bool:
        """Append one entry, rotating first if the file is full.

        Returns:
            True if written, False if the handler is closed or the write failed
        """
        with self._lock:
            if self._file_handle is None:
                return False
            try:
                self._rotate_if_needed()
                self._file_handle.write(entry.to_string() + '\n')
                self._file_handle.flush()
                return True
            except OSError as e:
                print(f"ERROR: Failed to write log entry: {e}", file=sys.stderr)
                return False

    def _rotate_if_needed(self) -> None:
        # Caller must hold self._lock
        if self.log_file_path.stat().st_size < self.max_size_bytes:
            return

        self._file_handle.close()

        if self.backup_count > 0:
            for i in range(self.backup_count - 1, 0, -1):
                src = Path(f"{self.log_file_path}.{i}")
                if src.exists():
                    os.replace(src, f"{self.log_file_path}.{i + 1}")
            os.replace(self.log_file_path, f"{self.log_file_path}.1")
        else:
            self.log_file_path.unlink()

        self._file_handle = self._open_file()

    def flush(self) -> None:
        """Flush buffered writes to disk."""
        with self._lock:
            if self._file_handle is not None:
                self._file_handle.flush()
                os.fsync(self._file_handle.fileno())

    def close(self) -> None:
        """Flush and close the file. Safe to call multiple times."""
        with self._lock:
            if self._file_handle is not None:
                try:
                    self._file_handle.close()
                finally:
                    self._file_handle = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

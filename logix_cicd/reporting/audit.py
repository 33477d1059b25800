"""
Audit sink

Duplicates everything written to the console into a durable text report.
While the sink is active, sys.stdout is replaced by a DualWriter that writes
each chunk to both the original console stream and the report file, and a
logging handler on the report file is attached to the root logger.
"""

import io
import logging
import sys
from pathlib import Path
from typing import TextIO

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class DualWriter(io.TextIOBase):
    """Text stream that writes to the console and to a file"""

    def __init__(self, console: TextIO, file: TextIO):
        self._console = console
        self._file = file

    @property
    def encoding(self) -> str:
        return getattr(self._console, "encoding", None) or "utf-8"

    def writable(self) -> bool:
        return True

    def isatty(self) -> bool:
        # Report files must not receive ANSI escape codes
        return False

    def write(self, text: str) -> int:
        self._console.write(text)
        self._file.write(text)
        return len(text)

    def flush(self) -> None:
        self._console.flush()
        if not self._file.closed:
            self._file.flush()

    def close(self) -> None:
        # The console stream belongs to the process; only the sink closes the file
        self.flush()


class AuditSink:
    """
    Tee console output into a text report

    Example:
        with AuditSink(report_dir / f"{context.timestamp}_deployment.txt"):
            run_pipeline()
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._file: TextIO | None = None
        self._original_stdout: TextIO | None = None
        self._handler: logging.Handler | None = None

    @property
    def active(self) -> bool:
        return self._file is not None

    def start(self) -> None:
        """Open the report file and start duplicating output into it"""
        if self.active:
            return

        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._file = open(self.path, "w", encoding="utf-8", buffering=1)
        self._original_stdout = sys.stdout
        sys.stdout = DualWriter(self._original_stdout, self._file)

        self._handler = logging.StreamHandler(self._file)
        self._handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logging.getLogger().addHandler(self._handler)
        logger.debug(f"Audit report started: {self.path}")

    def stop(self) -> None:
        """Flush and close the report file and restore the original stdout"""
        if not self.active:
            return

        logger.debug(f"Audit report stopped: {self.path}")
        try:
            sys.stdout.flush()
        finally:
            sys.stdout = self._original_stdout
            if self._handler:
                logging.getLogger().removeHandler(self._handler)
                self._handler.close()
            self._file.close()
            self._file = None
            self._original_stdout = None
            self._handler = None

    def __enter__(self) -> "AuditSink":
        self.start()
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.stop()

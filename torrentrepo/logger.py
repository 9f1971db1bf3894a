"""
Minimal logging context for torrentrepo.
Single place to control all output: screen + file, with flush.
"""
import json
import os
import re
from datetime import datetime
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.text import Text

_PREFIX_STYLES = {
    "[INFO]": "cyan",
    "[WARNING]": "yellow",
    "[ERROR]": "bold red",
    "[DEBUG]": "grey50",
}
_TIMESTAMP_RE = re.compile(r"^\[\d{2}:\d{2}:\d{2}\.\d{3}\]")
_PAGE_RE = re.compile(r"^\[Page \d+\]")
_DOCUMENT_ID_RE = re.compile(r"document #\S+")
_MAX_LOGGED_PAYLOAD = 5000


class RepoLogger:
    """Minimal logger: print to screen + file, always flush"""

    def __init__(self, log_file: Optional[Path] = None, debug: bool = False):
        self.log_file = log_file
        self._file_handle = None
        self._start_time = datetime.now()
        self.debug_mode = debug
        self._pacing_note_servers: set[str] = set()
        self._status_width = 0
        self._console = Console(highlight=False, soft_wrap=True)

        if log_file:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            self._file_handle = open(log_file, "w", buffering=1, encoding="utf-8")  # Line buffered, UTF-8

        from torrentrepo.__version__ import __version__

        welcome = f"({self._start_time.strftime('%H:%M:%S')}  Started torrentrepo {__version__})"
        self.log(welcome)

    def _screen_text(self, output: str) -> Text:
        """Style known prefixes; everything else stays literal."""
        text = Text(output)
        stamp = _TIMESTAMP_RE.match(output)
        if stamp:
            text.stylize("grey50", 0, stamp.end())
        page = _PAGE_RE.match(output)
        if page:
            text.stylize("bold", 0, page.end())
        for prefix, style in _PREFIX_STYLES.items():
            start = output.find(prefix)
            if start != -1 and start <= 16:
                text.stylize(style, start, start + len(prefix))
        for match in _DOCUMENT_ID_RE.finditer(output):
            text.stylize("grey50", match.start(), match.end())
        return text

    def clear_status(self) -> None:
        if self._status_width:
            print("\r" + " " * self._status_width + "\r", end="", flush=True)
            self._status_width = 0

    def status(self, msg: str):
        """Inline progress line, overwritten by the next status or log call"""
        padding = max(0, self._status_width - len(msg))
        print("\r" + msg + " " * padding, end="", flush=True)
        self._status_width = len(msg)

    def log(self, msg: str, prefix: str = ""):
        """Log to screen and file"""
        output = f"{prefix}{msg}" if prefix else msg

        self.clear_status()
        self._console.print(self._screen_text(output))

        if self._file_handle:
            self._file_handle.write(output + "\n")
            self._file_handle.flush()
            os.fsync(self._file_handle.fileno())

    def info(self, msg: str):
        self.log(msg)

    def warning(self, msg: str):
        self.log(msg, "[WARNING] ")

    def error(self, msg: str):
        self.log(msg, "[ERROR] ")

    def debug(self, msg: str):
        """Debug message (only shown in debug mode)"""
        if self.debug_mode:
            self.log(msg, f"[{self._timestamp()}] [DEBUG] ")

    def store_wait(self, server: str, seconds: float):
        """One-time note that request pacing is active for a gateway"""
        _ = seconds
        server_key = server.lower()
        if server_key in self._pacing_note_servers:
            return
        self._pacing_note_servers.add(server_key)
        self.log(f"Request pacing active for {server_key}.", "[INFO] ")

    def store_wait_debug(self, server: str, seconds: float):
        self.debug(f"Pacing detail: waiting {seconds:.3f}s before next request to {server}")

    def store_retry(self, server: str, attempt: int, max_attempts: int, delay: int):
        self.log(
            f"{server} did not answer. Retrying in {delay}s... (attempt {attempt}/{max_attempts})",
            "[WARNING] ",
        )

    def store_failed(self, server: str, max_attempts: int):
        self.log(f"{server} not responding after {max_attempts} attempts. Aborting.", "[ERROR] ")

    def store_request(self, method: str, url: str, payload: Optional[dict] = None):
        """Log a gateway request (debug mode only). Headers are never logged."""
        if self.debug_mode:
            timestamp = self._timestamp()
            self.log(f"Store Request: {method} {url}", f"[{timestamp}] ")
            if payload:
                self.log(f"  Body: {self._dump(payload)}", f"[{timestamp}] ")

    def store_response(self, status: int, data: object, elapsed_ms: float):
        """Log a gateway response (debug mode only)"""
        if self.debug_mode:
            timestamp = self._timestamp()
            self.log(f"Store Response ({elapsed_ms:.0f}ms): Status {status}", f"[{timestamp}] ")
            if data:
                self.log(f"  Data: {self._dump(data)}", f"[{timestamp}] ")

    @staticmethod
    def _timestamp() -> str:
        return datetime.now().strftime("%H:%M:%S.%f")[:-3]

    @staticmethod
    def _dump(data: object) -> str:
        text = json.dumps(data, indent=2, default=str)
        if len(text) > _MAX_LOGGED_PAYLOAD:
            text = text[:_MAX_LOGGED_PAYLOAD] + "\n  ... (truncated)"
        return text

    def close(self):
        """Close file handle with goodbye message"""
        self.clear_status()
        if self._file_handle:
            end_time = datetime.now()
            elapsed = end_time - self._start_time
            goodbye = f"({end_time.strftime('%H:%M:%S')}  Ended session, elapsed {elapsed.total_seconds():.1f}s)"
            self.log(goodbye)
            self._file_handle.close()
            self._file_handle = None

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


# Global instance (set by the CLI)
_logger: Optional[RepoLogger] = None


def set_logger(logger: RepoLogger):
    global _logger
    _logger = logger


def get_logger() -> RepoLogger:
    global _logger
    if _logger is None:
        # Fallback: screen-only logger
        _logger = RepoLogger()
    return _logger


def log(msg: str):
    get_logger().log(msg)


def info(msg: str):
    get_logger().info(msg)


def warning(msg: str):
    get_logger().warning(msg)


def error(msg: str):
    get_logger().error(msg)


def debug(msg: str):
    get_logger().debug(msg)

"""Timestamped log of every page the browser is sent to."""

from datetime import datetime
from pathlib import Path
from typing import Union


class PageLogger:
    """Appends page fetches and browser actions to a plain text log file."""

    def __init__(self, log_file: Union[str, Path] = 'log.txt'):
        self._log_file = Path(log_file)

    @property
    def log_file(self) -> Path:
        return self._log_file

    def _write(self, entry: str):
        timestamp = datetime.now().strftime('%Y-%m-%d %H:%M:%S.%f')[:-3]
        with open(self._log_file, 'a', encoding='utf-8') as f:
            f.write(f"{timestamp} - {entry}\n")

    def log_page_get(self, url: str):
        """Log a page fetch."""
        self._write(url)

    def log_action(self, action: str, target: str = ""):
        """Log a browser action such as a click, with its target."""
        self._write(f"{action}: {target}" if target else action)

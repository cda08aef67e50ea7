"""
Render timing log.

The coordinator names one CSV file per run after the run tag and the start
time, and appends a line per completed render. The file is only created by
the first record, so an aborted run leaves no log behind.
"""

from __future__ import annotations
import time
from pathlib import Path
from typing import Union


class TimingLog:
    """Append-only CSV of render durations."""

    def __init__(self, directory: Union[str, Path] = 'Data', tag: str = 'parallel'):
        """Name the log file.

        Args:
            directory: Directory for the log (created on the first record)
            tag: Run tag, used as the file name prefix
        """
        self.directory = Path(directory)
        self.timestamp = int(time.time() * 1000)
        self.path = self.directory / f'{tag}_{self.timestamp}.csv'

    def record(self, width: int, height: int, samples: int, workers: int, elapsed_ms: int) -> None:
        """Append one render duration in milliseconds."""
        self.directory.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'a') as f:
            f.write(f'{width},{height},{samples},{workers},{elapsed_ms}\n')

    def __repr__(self) -> str:
        return f"TimingLog(path={self.path})"

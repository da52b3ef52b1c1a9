"""Scanline progress reporting for long renders.

ScanlineProgress is a renderer callback that rewrites a single status line
with the number of rows left and an estimate of the remaining time:

    Scanlines remaining: 112 | Estimated time left: 1m 4s

Updates are throttled to one per interval seconds. finish() overwrites the
line with "Done." and returns the elapsed time.
"""

import sys
import time
from collections.abc import Callable
from typing import TextIO

# Padding that blanks out the previous status line when printing "Done."
_CLEAR_WIDTH = 80


def format_eta(seconds: float) -> str:
    """Format a duration as "<minutes>m <seconds>s", truncating fractions."""
    total = max(int(seconds), 0)
    return f"{total // 60}m {total % 60}s"


class ScanlineProgress:
    """Callable progress reporter receiving (rows_done, total_rows).

    Attributes:
        stream: Text stream receiving the status line.
        interval: Minimum number of seconds between two updates.
    """

    def __init__(
        self,
        stream: TextIO | None = None,
        interval: float = 1.0,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.stream = stream if stream is not None else sys.stderr
        self.interval = interval
        self._clock = clock
        self._start = clock()
        self._last_update = self._start

    def __call__(self, rows_done: int, total_rows: int) -> None:
        now = self._clock()
        if now - self._last_update < self.interval:
            return

        elapsed = now - self._start
        remaining_rows = total_rows - rows_done
        per_row = elapsed / rows_done if rows_done > 0 else 0.0
        print(
            f"\rScanlines remaining: {remaining_rows} | "
            f"Estimated time left: {format_eta(per_row * remaining_rows)}",
            end="",
            file=self.stream,
            flush=True,
        )
        self._last_update = now

    def finish(self) -> float:
        """Print the completion line and return the elapsed seconds."""
        print(f"\r{'Done.':<{_CLEAR_WIDTH}}", file=self.stream, flush=True)
        return self._clock() - self._start

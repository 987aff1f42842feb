import sys
import threading
import time

from .config import REPORT_INTERVAL


class StreamProgress:
    """Read-only view of one stream's counters for the reporter."""

    def __init__(self, name, target, claimed, persisted):
        self.name = name
        self.target = target
        self.claimed = claimed
        self.persisted = persisted

    def render(self):
        claimed = self.claimed.value
        pct = (claimed / self.target) * 100.0 if self.target else 100.0
        return f"{claimed}/{self.target} {self.name} pts ({pct:6.2f}%, {self.persisted.value} saved)"


class ProgressReporter:
    """
    Background ticker that rewrites one status line every `interval` seconds
    until stop() is called.
    """

    def __init__(self, streams, interval=REPORT_INTERVAL, out=None, print_lock=None):
        self.streams = list(streams)
        self.interval = interval
        self.out = out
        self.print_lock = print_lock
        self._stop = threading.Event()
        self._thread = None
        self._start = None

    def status_line(self) -> str:
        elapsed = int(time.monotonic() - self._start) if self._start is not None else 0
        parts = ", ".join(s.render() for s in self.streams)
        return f"\r{parts} generated in {elapsed} seconds"

    def _emit(self, text):
        out = self.out or sys.stdout
        if self.print_lock is None:
            print(text, end="", file=out, flush=True)
            return
        with self.print_lock:
            print(text, end="", file=out, flush=True)

    def _run(self):
        while not self._stop.wait(self.interval):
            self._emit(self.status_line())

    def start(self):
        if self._thread is not None:
            raise RuntimeError("reporter already started")
        self._start = time.monotonic()
        self._thread = threading.Thread(target=self._run, name="ptau-reporter", daemon=True)
        self._thread.start()

    @property
    def running(self):
        return self._thread is not None and self._thread.is_alive()

    def stop(self):
        """Signal the ticker, wait for it to exit and print the final line."""
        if self._thread is None:
            return
        self._stop.set()
        self._thread.join()
        self._thread = None
        self._emit(self.status_line() + "\n")

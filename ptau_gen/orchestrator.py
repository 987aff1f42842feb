"""
Run orchestration
=================

Samples tau once, writes the single-value files, then runs every stream on
its own pool worker while a ProgressReporter thread watches the shared
counters. Every worker and the reporter are joined before run() returns,
on the error and cancellation paths too.

Process workers receive their shared state through the pool initializer
(shared ctypes can only cross into a child at spawn time). Thread workers
get it passed with every task, so several runs can share one process.
"""

import multiprocessing
import signal
import threading
import time
from multiprocessing.pool import ThreadPool

from py_ecc.optimized_bls12_381 import curve_order

from .chunks import write_single
from .config import FLUSH_PARTIAL_CHUNK, REPORT_INTERVAL, WORKERS
from .curves import get_group
from .errors import ConfigurationError
from .reporter import ProgressReporter, StreamProgress
from .sampler import sample_scalar
from .stream import generate_stream, validate_stream

IDLE = "idle"
SAMPLING = "sampling"
RUNNING = "running"
DRAINING = "draining"
DONE = "done"
FAILED = "failed"

# Globals for process pool workers (filled by initializer)
_shared = None


def init_worker(claimed, persisted, cancel, print_lock, quiet):
    global _shared
    _shared = (claimed, persisted, cancel, print_lock, quiet)
    # the parent turns Ctrl-C into the cancel event
    signal.signal(signal.SIGINT, signal.SIG_IGN)


def run_stream_task(slot, spec, tau, flush_partial, shared=None):
    claimed, persisted, cancel, print_lock, quiet = shared or _shared

    def announce(line):
        if quiet:
            return
        with print_lock:
            print(line, flush=True)

    result = generate_stream(
        spec,
        tau,
        claimed=claimed[slot],
        persisted=persisted[slot],
        cancel=cancel,
        announce=announce,
        flush_partial=flush_partial,
    )
    return slot, result


class SingleSpec:
    """
    One point written once, unchunked, to a fixed path.

    kind "power" writes generator * tau^power; kind "pedersen_base" writes the
    group's hash-derived base (independent of tau).
    """

    def __init__(self, name, group, path, power=1, kind="power"):
        self.name = name
        self.group = group
        self.path = path
        self.power = power
        self.kind = kind

    def __repr__(self):
        return f"SingleSpec({self.name!r}, group={self.group!r}, kind={self.kind!r}, path={self.path!r})"


class RunSummary:
    def __init__(self, results, singles, elapsed, cancelled):
        self.results = results
        self.singles = singles
        self.elapsed = elapsed
        self.cancelled = cancelled

    def __repr__(self):
        return f"RunSummary(streams={len(self.results)}, singles={len(self.singles)}, elapsed={self.elapsed:.1f}s, cancelled={self.cancelled})"


class Orchestrator:
    def __init__(
        self,
        streams,
        singles=(),
        workers=WORKERS,
        flush_partial=FLUSH_PARTIAL_CHUNK,
        sampler=sample_scalar,
        report_interval=REPORT_INTERVAL,
        quiet=False,
        out=None,
    ):
        if workers not in ("process", "thread"):
            raise ConfigurationError(f"workers must be 'process' or 'thread', not {workers!r}")
        self.streams = list(streams)
        self.singles = list(singles)
        self.workers = workers
        self.flush_partial = flush_partial
        self.sampler = sampler
        self.report_interval = report_interval
        self.quiet = quiet
        self.out = out
        self.state = IDLE

        self._ctx = multiprocessing.get_context()
        self._cancel = self._ctx.Event()
        self._print_lock = self._ctx.Lock()
        self._lock = threading.Lock()
        self._results = {}
        self._failures = []
        self.interrupted = False
        self.reporter = None

    # ------------ validation ------------
    def validate(self):
        """Check every stream and single value before any work starts."""
        seen = set()
        for spec in self.streams:
            validate_stream(spec)
            if spec.name in seen:
                raise ConfigurationError(f"duplicate stream name {spec.name!r}")
            seen.add(spec.name)
        for single in self.singles:
            group = get_group(single.group)
            if single.kind == "power" and single.power < 1:
                raise ConfigurationError(f"{single.name}: power must be at least 1")
            elif single.kind == "pedersen_base" and not group.can_hash:
                raise ConfigurationError(f"{single.name}: group {group.name} has no pedersen base")
            elif single.kind not in ("power", "pedersen_base"):
                raise ConfigurationError(f"{single.name}: unknown single value kind {single.kind!r}")

    # ------------ control ------------
    def cancel(self):
        """Ask every stream to stop at its next element. Safe from any thread."""
        self._cancel.set()

    @property
    def cancelled(self):
        return self._cancel.is_set()

    def _say(self, line):
        if self.quiet:
            return
        with self._print_lock:
            print(line, flush=True)

    def _write_single(self, single, tau):
        group = get_group(single.group)
        if single.kind == "pedersen_base":
            point = group.pedersen_base()
        else:
            point = group.multiply(group.generator, pow(tau, single.power, curve_order))
        write_single(single.path, group.encode(point), name=single.name)
        self._say(f"{single.path} written")
        return single.path

    def _collect(self, outcome):
        slot, result = outcome
        with self._lock:
            self._results[slot] = result

    def _fail(self, exc):
        with self._lock:
            self._failures.append(exc)

    def _make_pool(self, claimed, persisted):
        if self.workers == "thread":
            return ThreadPool(len(self.streams))
        initargs = (claimed, persisted, self._cancel, self._print_lock, self.quiet)
        return self._ctx.Pool(len(self.streams), initializer=init_worker, initargs=initargs)

    def _join(self, pool):
        while True:
            try:
                pool.join()
                return
            except KeyboardInterrupt:
                self.interrupted = True
                self.cancel()
                self._say("\n[!] Interrupted, waiting for streams to stop...")

    # ------------ main entry ------------
    def run(self) -> RunSummary:
        if self.state != IDLE:
            raise RuntimeError(f"orchestrator already used (state {self.state})")
        self.validate()

        self.state = SAMPLING
        tau = self.sampler()
        start = time.monotonic()
        singles = [self._write_single(single, tau) for single in self.singles]

        self.state = RUNNING
        if self.streams:
            self._run_streams(tau)
        del tau

        if self._failures:
            self.state = FAILED
            raise self._failures[0]
        self.state = DONE
        results = [self._results[slot] for slot in range(len(self.streams))]
        return RunSummary(results, singles, time.monotonic() - start, self.cancelled)

    def _run_streams(self, tau):
        claimed = [self._ctx.RawValue("Q", 0) for _ in self.streams]
        persisted = [self._ctx.RawValue("Q", 0) for _ in self.streams]
        reporter = ProgressReporter(
            [
                StreamProgress(spec.name, spec.count, c, p)
                for spec, c, p in zip(self.streams, claimed, persisted)
            ],
            interval=self.report_interval,
            out=self.out,
            print_lock=self._print_lock,
        )
        self.reporter = reporter
        shared = None
        if self.workers == "thread":
            shared = (claimed, persisted, self._cancel, self._print_lock, self.quiet)
        pool = self._make_pool(claimed, persisted)
        if not self.quiet:
            reporter.start()
        try:
            for slot, spec in enumerate(self.streams):
                pool.apply_async(
                    run_stream_task,
                    (slot, spec, tau, self.flush_partial, shared),
                    callback=self._collect,
                    error_callback=self._fail,
                )
        finally:
            pool.close()
            try:
                self._join(pool)
            finally:
                self.state = DRAINING
                reporter.stop()

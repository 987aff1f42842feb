import io
import threading
import time
from multiprocessing import RawValue

import pytest

from ptau_gen.reporter import ProgressReporter, StreamProgress


def progress(name, target, claimed, persisted):
    c = RawValue("Q", claimed)
    p = RawValue("Q", persisted)
    return StreamProgress(name, target, c, p)


def test_status_line_covers_every_stream():
    reporter = ProgressReporter([progress("G1", 8, 3, 2), progress("G2", 4, 4, 4)])
    line = reporter.status_line()
    assert line.startswith("\r")
    assert "3/8 G1 pts ( 37.50%, 2 saved)" in line
    assert "4/4 G2 pts (100.00%, 4 saved)" in line
    assert line.endswith("generated in 0 seconds")


def test_empty_target_reads_complete():
    assert "100.00%" in progress("G1", 0, 0, 0).render()


def test_ticks_until_stopped():
    out = io.StringIO()
    stream = progress("G1", 10, 0, 0)
    reporter = ProgressReporter([stream], interval=0.01, out=out, print_lock=threading.Lock())
    reporter.start()
    assert reporter.running
    stream.claimed.value = 7
    time.sleep(0.1)
    reporter.stop()

    assert not reporter.running
    text = out.getvalue()
    assert text.count("\r") >= 2
    assert text.endswith("\n")
    assert "7/10 G1 pts" in text.rsplit("\r", 1)[-1]


def test_stop_without_start_is_a_noop():
    out = io.StringIO()
    ProgressReporter([], out=out).stop()
    assert out.getvalue() == ""


def test_cannot_start_twice():
    reporter = ProgressReporter([], interval=10, out=io.StringIO())
    reporter.start()
    try:
        with pytest.raises(RuntimeError):
            reporter.start()
    finally:
        reporter.stop()

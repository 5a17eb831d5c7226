"""
Tests for utility functions.
"""
import sys
from datetime import datetime, timezone
from fleetback.util import run, run_timestamp, free_kb, write_bytes_atomic, append_text


def test_run_captures_output_and_rc():
    rc, out = run([sys.executable, "-c", "import sys; print('hi'); sys.exit(3)"])
    assert rc == 3
    assert out.strip() == "hi"


def test_run_merges_stderr():
    rc, out = run([sys.executable, "-c", "import sys; sys.stderr.write('oops\\n')"])
    assert rc == 0
    assert "oops" in out


def test_run_passes_env_and_input():
    rc, out = run(
        [sys.executable, "-c", "import os, sys; print(os.environ['FLEETBACK_T'] + sys.stdin.read())"],
        env={"FLEETBACK_T": "a"},
        input="b",
    )
    assert rc == 0
    assert out.strip() == "ab"


def test_run_missing_binary():
    rc, out = run(["fleetback-no-such-binary-xyz"])
    assert rc == 127
    assert out


def test_run_timestamp_fixed_zone():
    when = datetime(2024, 1, 15, 17, 30, 5, tzinfo=timezone.utc)
    assert run_timestamp("America/New_York", "%Y-%m-%d_%H:%M:%SZ", now=when) == "2024-01-15_12:30:05Z"
    assert run_timestamp("UTC", "%Y%m%d", now=when) == "20240115"


def test_free_kb(tmp_path):
    assert free_kb(tmp_path) > 0


def test_write_bytes_atomic_and_append(tmp_path):
    target = tmp_path / "a" / "b.txt"
    write_bytes_atomic(target, b"one")
    write_bytes_atomic(target, b"two")
    assert target.read_bytes() == b"two"
    assert not (tmp_path / "a" / "b.txt.tmp").exists()

    log = tmp_path / "c" / "d.log"
    append_text(log, "x\n")
    append_text(log, "y\n")
    assert log.read_text() == "x\ny\n"

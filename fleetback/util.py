"""
util.py
Cross-cutting utilities:
- Process execution (list-of-args only, never a shell string)
- Small helpers: directory creation, atomic writes, run timestamps, free space
"""

from __future__ import annotations
import os, shutil, subprocess
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo


def run(cmd, env=None, input=None, timeout=None):
    """
    Execute a command given as a list of args; stdout and stderr are merged.
    - env entries are added on top of the current environment.
    - input (str) is fed on stdin; otherwise stdin is /dev/null so nothing can prompt.
    - Returns (rc, output_str). A missing binary yields rc 127, a timeout rc 124.
    """
    child_env = None
    if env:
        child_env = dict(os.environ)
        child_env.update(env)
    try:
        proc = subprocess.run(
            list(cmd),
            input=input.encode("utf-8") if input is not None else None,
            stdin=None if input is not None else subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            env=child_env,
            timeout=timeout,
        )
    except FileNotFoundError as e:
        return 127, f"{e}\n"
    except subprocess.TimeoutExpired as e:
        out = e.output.decode("utf-8", "replace") if e.output else ""
        return 124, out + f"timed out after {timeout}s\n"
    return proc.returncode, proc.stdout.decode("utf-8", "replace") if proc.stdout else ""


def ensure_dir(p: Path):
    """Create directory with better error reporting."""
    try:
        p.mkdir(parents=True, exist_ok=True)
    except PermissionError:
        raise PermissionError(f"Cannot create directory {p} - insufficient permissions")
    except OSError as e:
        raise OSError(f"Cannot create directory {p}: {e}")


def write_bytes_atomic(path: Path, data: bytes):
    ensure_dir(path.parent)
    tmp = path.with_name(path.name + ".tmp")
    tmp.write_bytes(data)
    tmp.replace(path)


def append_text(path: Path, text: str):
    ensure_dir(path.parent)
    with open(path, "a", encoding="utf-8") as f:
        f.write(text)


def run_timestamp(tz: str, fmt: str, now: datetime | None = None) -> str:
    """Timestamp naming one run, rendered in a fixed zone so names are reproducible."""
    now = now or datetime.now(ZoneInfo(tz))
    return now.astimezone(ZoneInfo(tz)).strftime(fmt)


def free_kb(path: Path) -> int:
    return shutil.disk_usage(path).free // 1024

"""
drift.py
Compare a host's config file with the copy kept from its previous run.

Layout:
  <backup_root>/<host>/.last_config       last seen config (overwritten every run)
  <log_dir>/<host>-config_change.log      append-only drift history

Drift is advisory: notification failures are logged, never counted as a
backup failure.
"""

from __future__ import annotations
import difflib, logging
from dataclasses import dataclass
from pathlib import Path
from .notify import Channel, Notifier
from .runlog import drift_log_path
from .types import AuthMethod, Config, Failure
from .util import append_text, write_bytes_atomic


@dataclass
class DriftReport:
    changed: bool
    diff: str
    first_run: bool


def snapshot_path(backup_root: Path, host: str) -> Path:
    return Path(backup_root) / host / ".last_config"


def config_diff(previous: bytes, current: bytes, prev_name: str, cur_name: str) -> str:
    a = previous.decode("utf-8", "replace").splitlines(keepends=True)
    b = current.decode("utf-8", "replace").splitlines(keepends=True)
    lines = difflib.unified_diff(a, b, fromfile=prev_name, tofile=cur_name)
    # keep the output line-oriented even when a file lacks a final newline
    return "".join(l if l.endswith("\n") else l + "\n" for l in lines)


def detect_drift(
    cfg: Config,
    host: str,
    host_file: Path,
    auth: AuthMethod,
    notifier: Notifier,
    log: logging.Logger,
) -> DriftReport:
    snap = snapshot_path(cfg.backup_root, host)
    current = Path(host_file).read_bytes()
    report = DriftReport(changed=False, diff="", first_run=not snap.exists())

    if not report.first_run:
        report.diff = config_diff(snap.read_bytes(), current, str(snap), str(host_file))
        report.changed = bool(report.diff)

    if report.changed:
        _report_drift(cfg, host, report.diff, auth, notifier, log)
    elif report.first_run:
        log.info("no previous configuration for %s; recording baseline", host)

    write_bytes_atomic(snap, current)
    return report


def _report_drift(cfg, host, diff, auth, notifier, log):
    header = f"WARNING: Backup configuration changed for {host}!"
    log.warning("%s\n%s", header, diff.rstrip("\n"))
    history = drift_log_path(cfg.log_dir, host)
    append_text(history, f"{header}\n{diff}")

    if not cfg.wall_notify:
        return
    channels = [Channel.LOCAL]
    if auth is AuthMethod.KEY:
        channels.insert(0, Channel.REMOTE)
    else:
        skip = f"WARNING: Skipping remote wall notification for {host} (Key-based authentication unavailable)."
        log.warning(skip)
        append_text(history, skip + "\n")

    try:
        delivered = notifier.notify_drift(host, f"Backup configuration change detected for host {host}.", channels)
    except Exception as e:
        log.warning("%s: drift notification for %s raised: %s", Failure.DRIFT_NOTIFY_FAILED.value, host, e)
        return
    if not delivered:
        log.warning("%s: drift notification for %s was not delivered", Failure.DRIFT_NOTIFY_FAILED.value, host)

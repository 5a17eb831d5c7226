"""
worker.py
Back up one host end to end:
  log open -> disk check -> auth -> drift check -> per-path rsync -> finalize
Each step gates the next. Nothing raised in here escapes to the orchestrator;
the run log (and the failure mail) is the only failure signal.
"""

from __future__ import annotations
import time
from .auth import resolve_auth
from .drift import detect_drift
from .notify import Notifier
from .runlog import open_run_logger, flush_run_logger, close_run_logger, run_log_path
from .syncer import transfer_path
from .types import AuthMethod, BackupRun, Config, Failure, HostConfig, RunResult, TransferOutcome
from .util import free_kb, run_timestamp


def new_run(cfg: Config, host: str, timestamp: str | None = None) -> BackupRun:
    ts = timestamp or run_timestamp(cfg.timezone, cfg.time_fmt)
    return BackupRun(
        host=host,
        timestamp=ts,
        target_root=cfg.backup_root / host / ts,
        log_path=run_log_path(cfg.log_dir, host, ts),
    )


def check_disk_space(cfg: Config, log) -> None:
    try:
        avail = free_kb(cfg.backup_root)
    except OSError as e:
        log.warning("cannot query free space on %s: %s", cfg.backup_root, e)
        return
    if avail < cfg.min_free_kb:
        log.warning("%s: Low disk space on backup destination (%d KB remaining)!",
                    Failure.LOW_DISK_SPACE.value, avail)


def backup_host(cfg: Config, host_cfg: HostConfig, notifier: Notifier, timestamp: str | None = None) -> RunResult:
    run_ = new_run(cfg, host_cfg.host, timestamp)
    log = open_run_logger(run_.log_path, run_.host)
    started = time.time()
    result = RunResult(run_.host, run_.timestamp, str(run_.log_path), run_.auth.value, failed=False)
    try:
        log.info("Starting backup for %s at %s", run_.host, run_.timestamp)
        check_disk_space(cfg, log)

        run_.auth = resolve_auth(cfg, run_.host, log)
        if run_.auth is AuthMethod.NONE:
            run_.mark_failed()
        else:
            try:
                report = detect_drift(cfg, run_.host, host_cfg.source, run_.auth, notifier, log)
                result.drift = report.changed
            except OSError:
                # advisory only; the transfers still run
                log.exception("%s: drift check for %s could not complete", Failure.DRIFT_CHECK_FAILED.value, run_.host)

            log.info("Directories to backup:\n%s", "\n".join(host_cfg.paths))
            for remote_path in host_cfg.paths:
                try:
                    outcome = transfer_path(cfg, run_, remote_path, log)
                except Exception:
                    log.exception("%s: transfer of %s on %s aborted", Failure.TRANSFER_FAILED.value, remote_path, run_.host)
                    outcome = TransferOutcome.FAILED_TWICE
                result.outcomes.append((remote_path, outcome.value))
                if outcome is TransferOutcome.FAILED_TWICE:
                    run_.mark_failed()
    except Exception as e:
        log.exception("unexpected error while backing up %s", run_.host)
        run_.mark_failed()
        result.error = str(e)
    finally:
        log.info("Backup for %s completed.%s", run_.host, " (with failures)" if run_.failed else "")
        flush_run_logger(log)
        if run_.failed and cfg.alert_email:
            try:
                result.alert_sent = notifier.notify_failure(run_.host, run_.log_path)
                if result.alert_sent:
                    log.info("failure alert sent to %s", cfg.alert_email)
            except Exception as e:
                log.error("failure notification for %s raised: %s", run_.host, e)
        close_run_logger(log)

    result.auth = run_.auth.value
    result.failed = run_.failed
    result.duration_sec = round(time.time() - started, 2)
    return result

"""
syncer.py
Mirror one remote path into the run's target tree with rsync --delete.
A failed transfer gets exactly one more attempt after a short pause.
"""

from __future__ import annotations
import logging
from pathlib import Path
from .remote import rsync_cmd
from .retry import RetryPolicy, call_with_retry
from .types import AuthMethod, BackupRun, Config, Failure, TransferOutcome
from .util import run, ensure_dir


def retry_policy(cfg: Config) -> RetryPolicy:
    return RetryPolicy(max_attempts=cfg.retry_attempts, delay_sec=cfg.retry_delay_sec)


def destination_dir(target_root: Path, remote_path: str) -> tuple[str, Path]:
    """
    Return (source_path, dest_dir) such that rsync SOURCE DEST_DIR/ produces
    <target_root><remote_path>.
    """
    src = remote_path.rstrip("/") or "/"
    if src == "/":
        return "/", target_root
    return src, (target_root / src.lstrip("/")).parent


def transfer_path(
    cfg: Config,
    run_: BackupRun,
    remote_path: str,
    log: logging.Logger,
    policy: RetryPolicy | None = None,
) -> TransferOutcome:
    if run_.auth is AuthMethod.NONE:
        raise ValueError("transfer_path needs a resolved auth method")
    policy = policy or retry_policy(cfg)
    src, dest_dir = destination_dir(run_.target_root, remote_path)
    ensure_dir(dest_dir)
    cmd, env = rsync_cmd(cfg, run_.host, src, str(dest_dir), run_.auth)

    def attempt(n: int) -> bool:
        log.info("rsync %s:%s (attempt %d/%d)", run_.host, remote_path, n, policy.max_attempts)
        rc, out = run(cmd, env=env)
        if out:
            log.info("rsync output:\n%s", out.rstrip("\n"))
        if rc != 0:
            log.warning("rsync exited with %d for %s", rc, remote_path)
        return rc == 0

    def on_failure(n: int, will_retry: bool) -> None:
        if will_retry:
            log.error("rsync failed for %s on %s. Retrying...", remote_path, run_.host)
        else:
            log.error("%s: rsync attempt %d failed for %s on %s. Skipping.",
                      Failure.TRANSFER_FAILED.value, n, remote_path, run_.host)

    ok_on = call_with_retry(attempt, policy, on_failure)
    if ok_on == 1:
        outcome = TransferOutcome.SUCCESS
    elif ok_on > 1:
        outcome = TransferOutcome.RETRIED_SUCCESS
    else:
        outcome = TransferOutcome.FAILED_TWICE
    log.info("transfer %s: %s", remote_path, outcome.value)
    return outcome

"""
orchestrator.py
Run a Host Worker for every file in the Config Store with at most
cfg.max_parallel running at once:
  - Create the backup and log roots
  - Enumerate host files, load each HostConfig
  - Fan out on a thread pool (each thread spends its time blocked in ssh/rsync)
  - Collect one RunResult per host; host failures never change the return path
"""

from __future__ import annotations
import concurrent.futures, time
from pathlib import Path
from typing import List
from .config import list_host_files, load_host_config
from .notify import Notifier, SystemNotifier
from .types import Config, RunResult
from .util import ensure_dir, run_timestamp
from .worker import backup_host


def process_one(cfg: Config, host_file: Path, notifier: Notifier) -> RunResult:
    started = time.time()
    try:
        host_cfg = load_host_config(host_file)
        return backup_host(cfg, host_cfg, notifier)
    except Exception as e:
        return RunResult(
            host_file.name,
            run_timestamp(cfg.timezone, cfg.time_fmt),
            "",
            "none",
            failed=True,
            duration_sec=round(time.time() - started, 2),
            error=f"{type(e).__name__}: {e}",
        )


def list_plan(cfg: Config) -> None:
    files = list_host_files(cfg.config_dir)
    print(f"{'HOST':<32} PATHS")
    for f in files:
        try:
            hc = load_host_config(f)
        except (OSError, UnicodeDecodeError) as e:
            print(f"{f.name:<32} [unreadable: {e}]")
            continue
        print(f"{hc.host:<32} {', '.join(hc.paths) if hc.paths else '-'}")


def run_fleet(cfg: Config, notifier: Notifier | None = None) -> List[RunResult]:
    notifier = notifier or SystemNotifier(cfg)
    ensure_dir(cfg.backup_root)
    ensure_dir(cfg.log_dir)

    host_files = list_host_files(cfg.config_dir)
    print(f"[info] hosts={len(host_files)} max_parallel={cfg.max_parallel} log_dir={cfg.log_dir}")

    results: List[RunResult] = []
    with concurrent.futures.ThreadPoolExecutor(max_workers=cfg.max_parallel) as ex:
        futs = [ex.submit(process_one, cfg, f, notifier) for f in host_files]
        for f in concurrent.futures.as_completed(futs):
            results.append(f.result())

    failed = [r for r in results if r.failed]
    for r in failed:
        detail = f" ({r.error})" if r.error else ""
        print(f"[warn] backup failed for {r.host}{detail}; see {r.log_path or cfg.log_dir}")
    print(f"[ok] All backups completed: {len(results) - len(failed)} ok, {len(failed)} failed.")
    return results

"""
config.py
Load tunables from TOML (Python 3.11+ tomllib) and read the per-host Config Store.
Search order for the TOML file:
  1) explicit --config path (must exist)
  2) adjacent DEFAULT_CONFIG_PATH (project root / 'fleetback.toml')
  3) /etc/fleetback.toml
A missing auto-discovered file means every tunable keeps its default.
"""

from __future__ import annotations
import os
import tomllib
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
from .types import Config, HostConfig

DEFAULT_CONFIG_PATH = str(Path(__file__).resolve().parent.parent / "fleetback.toml")
PASSWORD_ENV = "FLEETBACK_SSH_PASSWORD"


def _gv(d: Dict[str, Any], path: list[str], default=None):
    cur = d
    for k in path:
        if not isinstance(cur, dict) or k not in cur:
            return default
        cur = cur[k]
    return cur


def _load_toml(path: Path) -> Dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def find_config(path_arg: str | None) -> Path | None:
    """Pick the best config path based on CLI arg and availability."""
    if path_arg:
        p = Path(path_arg)
        if not p.exists():
            raise FileNotFoundError(f"Specified config file does not exist: {path_arg}")
        return p
    for candidate in (Path(DEFAULT_CONFIG_PATH), Path("/etc/fleetback.toml")):
        if candidate.exists():
            return candidate
    return None


def load_config(path: Path | None, config_dir: Path, backup_root: Path, env=None) -> Config:
    cfg = _load_toml(path) if path else {}
    env = os.environ if env is None else env

    def gv(keys, default=None):
        return _gv(cfg, keys, default)

    password = env.get(PASSWORD_ENV) or gv(["ssh", "password"], "")

    config = Config(
        config_dir=Path(config_dir),
        backup_root=Path(backup_root),
        log_dir=Path(gv(["output", "log_dir"], "/var/log/cron/backup")),
        ssh_user=gv(["ssh", "user"], "back"),
        ssh_key=gv(["ssh", "key"], "~/.ssh/process_rsa"),
        ssh_password=password,
        ssh_port=int(gv(["ssh", "port"], 22)),
        connect_timeout=int(gv(["ssh", "connect_timeout"], 5)),
        strict_host_key_checking=gv(["ssh", "strict_host_key_checking"], "accept-new"),
        max_parallel=int(gv(["runtime", "max_parallel"], 4)),
        min_free_kb=int(gv(["runtime", "min_free_kb"], 1_000_000)),
        retry_attempts=int(gv(["runtime", "retry_attempts"], 2)),
        retry_delay_sec=float(gv(["runtime", "retry_delay_sec"], 5)),
        remote_sudo=bool(gv(["transfer", "remote_sudo"], False)),
        timezone=gv(["naming", "timezone"], "America/New_York"),
        time_fmt=gv(["naming", "time_fmt"], "%Y-%m-%d_%H:%M:%SZ"),
        alert_email=gv(["notify", "email"], ""),
        wall_notify=bool(gv(["notify", "wall"], True)),
    )
    validate_config(config)
    return config


def with_overrides(config: Config, workers: int | None = None, log_dir: str | None = None) -> Config:
    changes: Dict[str, Any] = {}
    if workers is not None:
        changes["max_parallel"] = workers
    if log_dir:
        changes["log_dir"] = Path(log_dir)
    if not changes:
        return config
    config = replace(config, **changes)
    validate_config(config)
    return config


def validate_config(config: Config) -> None:
    if config.max_parallel < 1:
        raise ValueError(f"runtime.max_parallel must be a positive integer, got {config.max_parallel}")
    if config.retry_attempts < 1:
        raise ValueError(f"runtime.retry_attempts must be at least 1, got {config.retry_attempts}")
    if config.retry_delay_sec < 0:
        raise ValueError(f"runtime.retry_delay_sec must not be negative, got {config.retry_delay_sec}")
    if not config.ssh_user:
        raise ValueError("ssh.user must not be empty")
    try:
        ZoneInfo(config.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"naming.timezone is not a known time zone: {config.timezone}")


def list_host_files(config_dir: Path) -> List[Path]:
    """Every regular file under the Config Store, subdirectories included, one per host."""
    return sorted(p for p in Path(config_dir).rglob("*") if p.is_file())


def load_host_config(path: Path) -> HostConfig:
    """File name is the host; each non-blank line is one remote path, in order."""
    text = path.read_text(encoding="utf-8")
    paths = tuple(line.strip() for line in text.splitlines() if line.strip())
    return HostConfig(host=path.name, paths=paths, source=path)

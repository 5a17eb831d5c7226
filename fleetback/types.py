"""
types.py
Dataclasses and enums used across modules: Config, HostConfig, BackupRun, RunResult.

Config is built once at startup and handed to every worker; nothing else is shared.
"""
from __future__ import annotations
import shlex
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, List, Tuple


class AuthMethod(str, Enum):
    KEY = "key"
    PASSWORD = "password"
    NONE = "none"


class TransferOutcome(str, Enum):
    SUCCESS = "Success"
    RETRIED_SUCCESS = "FailedOnce-RetriedSuccess"
    FAILED_TWICE = "FailedTwice"


class Failure(str, Enum):
    """Markers written into log lines; grep a run log for these."""
    CONFIG_MISSING_ARGS = "ConfigMissingArgs"
    AUTH_UNAVAILABLE = "AuthUnavailable"
    TRANSFER_FAILED = "TransferFailed"
    DRIFT_NOTIFY_FAILED = "DriftNotifyFailed"
    DRIFT_CHECK_FAILED = "DriftCheckFailed"
    LOW_DISK_SPACE = "LowDiskSpace"


@dataclass(frozen=True)
class Config:
    # roots
    config_dir: Path
    backup_root: Path
    log_dir: Path = Path("/var/log/cron/backup")
    # ssh
    ssh_user: str = "back"
    ssh_key: str = "~/.ssh/process_rsa"
    ssh_password: str = ""
    ssh_port: int = 22
    connect_timeout: int = 5
    strict_host_key_checking: str = "accept-new"
    # runtime
    max_parallel: int = 4
    min_free_kb: int = 1_000_000
    retry_attempts: int = 2
    retry_delay_sec: float = 5
    # transfer
    remote_sudo: bool = False
    # naming
    timezone: str = "America/New_York"
    time_fmt: str = "%Y-%m-%d_%H:%M:%SZ"
    # notify
    alert_email: str = ""
    wall_notify: bool = True

    @property
    def key_path(self) -> str:
        return str(Path(self.ssh_key).expanduser())


@dataclass(frozen=True)
class HostConfig:
    host: str
    paths: Tuple[str, ...]
    source: Path


@dataclass(frozen=True)
class RemoteCommand:
    """A program plus argument list, never assembled by string concatenation."""
    program: str
    args: Tuple[str, ...] = ()

    def argv(self) -> List[str]:
        return [self.program, *self.args]

    def render(self) -> str:
        """Shell-quoted form, for the places (ssh, --rsync-path) that take one string."""
        return shlex.join(self.argv())


@dataclass
class BackupRun:
    host: str
    timestamp: str
    target_root: Path
    log_path: Path
    auth: AuthMethod = AuthMethod.NONE
    failed: bool = False

    def mark_failed(self) -> None:
        # never cleared once set
        self.failed = True


@dataclass
class RunResult:
    host: str
    timestamp: str
    log_path: str
    auth: str
    failed: bool
    outcomes: List[Tuple[str, str]] = field(default_factory=list)
    drift: bool = False
    alert_sent: bool = False
    duration_sec: float = 0.0
    error: Optional[str] = None

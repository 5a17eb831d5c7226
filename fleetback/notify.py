"""
notify.py
Failure mail and drift broadcasts.

SystemNotifier shells out to mail(1) and wall(1); remote broadcasts go
through ssh with the key, never with a password. Delivery problems are logged
and reported through the return value, they never raise.
"""
from __future__ import annotations
import logging
from enum import Enum
from pathlib import Path
from typing import Iterable, Protocol
from .remote import ssh_cmd
from .types import AuthMethod, Config, RemoteCommand
from .util import run

logger = logging.getLogger(__name__)


class Channel(str, Enum):
    REMOTE = "remote"  # logged-in sessions on the backed-up host
    LOCAL = "local"  # sessions on the backup server


class Notifier(Protocol):
    def notify_failure(self, host: str, log_path: Path) -> bool: ...

    def notify_drift(self, host: str, message: str, channels: Iterable[Channel]) -> bool: ...


REMOTE_DRIFT_MESSAGE = "Backup configuration change detected on this system."


class SystemNotifier:
    def __init__(self, cfg: Config):
        self.cfg = cfg

    def notify_failure(self, host: str, log_path: Path) -> bool:
        if not self.cfg.alert_email:
            return False
        try:
            body = Path(log_path).read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.error("cannot read %s for failure mail: %s", log_path, e)
            return False
        rc, out = run(["mail", "-s", f"Backup Failure for {host}", self.cfg.alert_email], input=body)
        if rc != 0:
            logger.error("mail to %s failed (rc=%d): %s", self.cfg.alert_email, rc, out.strip())
            return False
        return True

    def notify_drift(self, host: str, message: str, channels: Iterable[Channel]) -> bool:
        ok = True
        for channel in channels:
            if channel is Channel.REMOTE:
                cmd = ssh_cmd(self.cfg, host, RemoteCommand("wall", ("-n", REMOTE_DRIFT_MESSAGE)), AuthMethod.KEY)
            else:
                cmd = ["wall", "-n", message]
            rc, out = run(cmd, timeout=self.cfg.connect_timeout * 6)
            if rc != 0:
                logger.warning("%s broadcast for %s failed (rc=%d): %s", channel.value, host, rc, out.strip())
                ok = False
        return ok

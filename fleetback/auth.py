"""
auth.py
Decide, once per run, how to reach a host: key, password fallback, or not at all.
"""

from __future__ import annotations
import logging
from pathlib import Path
from .remote import probe_cmd
from .types import AuthMethod, Config, Failure
from .util import run


def resolve_auth(cfg: Config, host: str, log: logging.Logger) -> AuthMethod:
    """
    Probe the key with a short-timeout, non-interactive `ssh ... exit`.
    A configured password is assumed usable without checking; the first
    transfer proves it.
    """
    rc, out = run(probe_cmd(cfg, host))
    if rc == 0:
        log.info("Authentication: SSH Key (%s)", Path(cfg.key_path).name)
        return AuthMethod.KEY
    log.debug("key probe for %s failed (rc=%d): %s", host, rc, out.strip())
    if cfg.ssh_password:
        log.info("Authentication: Password-based login")
        return AuthMethod.PASSWORD
    log.error("%s: Cannot connect to %s via SSH. Skipping backup.", Failure.AUTH_UNAVAILABLE.value, host)
    return AuthMethod.NONE

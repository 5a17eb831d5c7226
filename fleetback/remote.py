"""
remote.py
Builders for the ssh and rsync invocations. Everything is an argv list or a
RemoteCommand; host names and paths are never spliced into shell strings.

Auth handling:
  - KEY: ssh -i <key> -o BatchMode=yes (never prompts)
  - PASSWORD: sshpass -e ssh ... with SSHPASS in the child env, so the
    password never shows up in process listings
"""

from __future__ import annotations
import shlex
from typing import Dict, List, Tuple
from .types import AuthMethod, Config, RemoteCommand

SSHPASS_ENV = "SSHPASS"


def ssh_options(cfg: Config, auth: AuthMethod) -> List[str]:
    opts = [
        "-o", f"ConnectTimeout={cfg.connect_timeout}",
        "-o", f"StrictHostKeyChecking={cfg.strict_host_key_checking}",
        "-p", str(cfg.ssh_port),
    ]
    if auth is AuthMethod.PASSWORD:
        opts += ["-o", "BatchMode=no", "-o", "PubkeyAuthentication=no",
                 "-o", "PreferredAuthentications=password,keyboard-interactive"]
    else:
        opts += ["-i", cfg.key_path, "-o", "BatchMode=yes"]
    return opts


def login(cfg: Config, host: str) -> str:
    return f"{cfg.ssh_user}@{host}"


def password_env(cfg: Config, auth: AuthMethod) -> Dict[str, str] | None:
    if auth is AuthMethod.PASSWORD:
        return {SSHPASS_ENV: cfg.ssh_password}
    return None


def _wrap(cmd: List[str], auth: AuthMethod) -> List[str]:
    if auth is AuthMethod.PASSWORD:
        return ["sshpass", "-e", *cmd]
    return cmd


def ssh_cmd(cfg: Config, host: str, remote: RemoteCommand, auth: AuthMethod = AuthMethod.KEY) -> List[str]:
    """ssh argv running one remote command; the command is quoted as a single word list."""
    return _wrap(["ssh", *ssh_options(cfg, auth), login(cfg, host), remote.render()], auth)


def probe_cmd(cfg: Config, host: str) -> List[str]:
    return ssh_cmd(cfg, host, RemoteCommand("exit"), AuthMethod.KEY)


def remote_rsync(cfg: Config) -> RemoteCommand:
    if cfg.remote_sudo:
        return RemoteCommand("sudo", ("-n", "rsync"))
    return RemoteCommand("rsync")


def rsync_cmd(cfg: Config, host: str, remote_path: str, dest_dir: str, auth: AuthMethod) -> Tuple[List[str], Dict[str, str] | None]:
    """
    Mirror remote_path (no trailing slash) into dest_dir/, so the last path
    component lands as dest_dir/<name>. Returns (argv, extra_env).
    """
    # rsync splits -e on whitespace honoring quotes
    transport = shlex.join(["ssh", *ssh_options(cfg, auth)])
    cmd = [
        "rsync", "-a", "-v", "-z", "--stats", "--delete",
        "-e", transport,
    ]
    if cfg.remote_sudo:
        cmd.append(f"--rsync-path={remote_rsync(cfg).render()}")
    cmd += [f"{login(cfg, host)}:{remote_path}", dest_dir.rstrip("/") + "/"]
    return _wrap(cmd, auth), password_env(cfg, auth)

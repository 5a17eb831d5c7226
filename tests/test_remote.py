"""
Tests for ssh/rsync command construction.
"""
import shlex
from dataclasses import replace

from fleetback.remote import probe_cmd, rsync_cmd, ssh_cmd, remote_rsync, SSHPASS_ENV
from fleetback.types import AuthMethod, RemoteCommand


def test_probe_is_batch_mode_with_timeout(cfg):
    cmd = probe_cmd(cfg, "10.0.0.5")
    assert cmd[0] == "ssh"
    assert "BatchMode=yes" in cmd
    assert "ConnectTimeout=5" in cmd
    assert cmd[cmd.index("-i") + 1] == cfg.key_path
    assert cmd[-2:] == ["back@10.0.0.5", "exit"]


def test_rsync_key_auth(cfg):
    cmd, env = rsync_cmd(cfg, "web01", "/var/www", "/b/web01/ts/var", AuthMethod.KEY)
    assert env is None
    assert cmd[0] == "rsync"
    assert "--delete" in cmd
    assert "-a" in cmd
    assert cmd[-2:] == ["back@web01:/var/www", "/b/web01/ts/var/"]
    transport = shlex.split(cmd[cmd.index("-e") + 1])
    assert transport[0] == "ssh"
    assert "BatchMode=yes" in transport
    assert not any(a.startswith("--rsync-path") for a in cmd)


def test_rsync_password_stays_off_argv(cfg):
    cfg = replace(cfg, ssh_password="hunter2")
    cmd, env = rsync_cmd(cfg, "web01", "/etc", "/b", AuthMethod.PASSWORD)
    assert cmd[:2] == ["sshpass", "-e"]
    assert env == {SSHPASS_ENV: "hunter2"}
    assert not any("hunter2" in a for a in cmd)
    transport = shlex.split(cmd[cmd.index("-e", 2) + 1])
    assert "PubkeyAuthentication=no" in transport
    assert "-i" not in transport


def test_rsync_remote_sudo(cfg):
    cfg = replace(cfg, remote_sudo=True)
    cmd, _ = rsync_cmd(cfg, "web01", "/root", "/b", AuthMethod.KEY)
    assert "--rsync-path=sudo -n rsync" in cmd
    assert remote_rsync(cfg).argv() == ["sudo", "-n", "rsync"]


def test_remote_command_quotes_special_characters(cfg):
    rc = RemoteCommand("wall", ("-n", "it's; rm -rf /"))
    assert shlex.split(rc.render()) == ["wall", "-n", "it's; rm -rf /"]

    cmd = ssh_cmd(cfg, "host", rc)
    assert shlex.split(cmd[-1]) == rc.argv()

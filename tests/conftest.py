"""
Pytest configuration and shared fixtures.
"""
import pytest
from pathlib import Path
from fleetback.types import Config


class FakeNotifier:
    """Records notifications instead of running mail/wall."""

    def __init__(self, deliver=True):
        self.deliver = deliver
        self.failures = []
        self.drifts = []

    def notify_failure(self, host, log_path):
        self.failures.append((host, Path(log_path).read_text()))
        return self.deliver

    def notify_drift(self, host, message, channels):
        self.drifts.append((host, message, [c.value for c in channels]))
        return self.deliver


class FakeRunner:
    """
    Stand-in for util.run. ssh probes succeed when probe_ok; rsync fails for
    every source listed in fail_paths (as many times as given, or always).
    Successful rsyncs create the destination directory like the real tool.
    """

    def __init__(self, probe_ok=True, fail_paths=None):
        self.probe_ok = probe_ok
        self.fail_paths = dict(fail_paths or {})
        self.calls = []

    def __call__(self, cmd, env=None, input=None, timeout=None):
        cmd = list(cmd)
        self.calls.append((cmd, env))
        argv = cmd[2:] if cmd[0] == "sshpass" else cmd
        if argv[0] == "ssh":
            return (0, "") if self.probe_ok else (255, "Permission denied (publickey).\n")
        if argv[0] == "rsync":
            src = argv[-2].split(":", 1)[1]
            dest = Path(argv[-1])
            left = self.fail_paths.get(src, 0)
            if left:
                self.fail_paths[src] = left - 1
                return 23, f"rsync error: some files could not be transferred ({src})\n"
            (dest / Path(src).name).mkdir(parents=True, exist_ok=True)
            return 0, f"sending incremental file list\nNumber of files: 3\n"
        return 0, ""

    def rsync_calls(self):
        return [c for c, _ in self.calls if "rsync" in c[:3]]


@pytest.fixture
def cfg(tmp_path):
    config_dir = tmp_path / "hosts"
    config_dir.mkdir()
    return Config(
        config_dir=config_dir,
        backup_root=tmp_path / "backups",
        log_dir=tmp_path / "logs",
        ssh_key=str(tmp_path / "id_test"),
        retry_delay_sec=0,
        min_free_kb=0,
    )


@pytest.fixture
def host_file(cfg):
    def _write(host, lines):
        p = cfg.config_dir / host
        p.write_text("".join(f"{l}\n" for l in lines))
        return p
    return _write


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def runner(monkeypatch):
    """Install a FakeRunner for every module that shells out."""
    def _install(**kw):
        fake = FakeRunner(**kw)
        for mod in ("fleetback.auth", "fleetback.syncer", "fleetback.notify"):
            monkeypatch.setattr(f"{mod}.run", fake)
        return fake
    return _install

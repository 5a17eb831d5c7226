"""
fleetback package
- Bounded-parallel rsync backups of a fleet of hosts into timestamped per-host snapshots.
"""
__all__ = ["cli", "config", "orchestrator", "worker", "auth", "drift", "syncer", "retry", "remote", "notify", "runlog", "util", "types"]
__version__ = "0.1.0"

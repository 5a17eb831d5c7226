#!/usr/bin/env python3
"""
cli.py
Command-line interface for fleetback.
Parses arguments, loads config, and invokes the orchestrator.
"""
from __future__ import annotations
import argparse, sys
from .config import DEFAULT_CONFIG_PATH, find_config, load_config, with_overrides
from .orchestrator import list_plan, run_fleet
from .types import Failure

USAGE_HINT = "Usage: fleetback <config_directory> <backup_directory>"


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="fleetback",
        description="fleetback: mirror configured remote directories of every host into timestamped snapshots",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="\nOne file per host in CONFIG_DIR: file name = host, one absolute remote path per line.",
    )
    ap.add_argument("config_dir", nargs="?", help="directory of per-host configuration files")
    ap.add_argument("backup_dir", nargs="?", help="root directory for snapshots")
    ap.add_argument(
        "--config",
        default=None,
        help=f"path to fleetback.toml (default: {DEFAULT_CONFIG_PATH} then /etc/fleetback.toml)",
    )
    ap.add_argument("--workers", type=int, default=None, help="override max parallel hosts (must be positive)")
    ap.add_argument("--log-dir", default=None, help="override the log directory")
    ap.add_argument("--list", action="store_true", help="show hosts and paths that would be backed up")
    return ap


def main(argv=None) -> int:
    try:
        args = build_parser().parse_args(argv)

        if not args.config_dir or not args.backup_dir:
            print(USAGE_HINT, file=sys.stderr)
            print(f"({Failure.CONFIG_MISSING_ARGS.value})", file=sys.stderr)
            return 1

        if args.workers is not None and args.workers < 1:
            print(f"❌ Error: --workers must be a positive integer, got {args.workers}", file=sys.stderr)
            return 1

        try:
            cfg_path = find_config(args.config)
            cfg = load_config(cfg_path, args.config_dir, args.backup_dir)
            cfg = with_overrides(cfg, workers=args.workers, log_dir=args.log_dir)
        except FileNotFoundError as e:
            print(f"❌ Error: {e}", file=sys.stderr)
            return 1
        except Exception as e:
            print(f"❌ Error: Invalid configuration: {e}", file=sys.stderr)
            return 1

        if not cfg.config_dir.is_dir():
            print(f"❌ Error: config directory does not exist: {cfg.config_dir}", file=sys.stderr)
            return 1

        if args.list:
            list_plan(cfg)
            return 0

        run_fleet(cfg)
        return 0

    except KeyboardInterrupt:
        print("\n\n⚡ Interrupted by user.")
        return 130
    except Exception as e:
        print(f"❌ Unexpected error: {e}", file=sys.stderr)
        print("💡 Hint: check that the backup and log directories are writable", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

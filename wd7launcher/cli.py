"""Command-line entry point for the Win-Debloat7 launcher."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from wd7launcher.config import MODES, LauncherConfig, load_launcher_config
from wd7launcher.models import Outcome
from wd7launcher.pipeline import Bootstrap
from wd7launcher.report import Reporter

log = logging.getLogger(__name__)

EXIT_LAUNCHER_FAILURE = 1
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="wd7-launcher",
        description="Make sure PowerShell 7 is available, stage Win-Debloat7 and run it.",
    )
    ap.add_argument("--config", default=None, help="path to a JSON config file")
    ap.add_argument("--mode", choices=sorted(MODES), default=None)
    ap.add_argument("--no-install", action="store_true", help="never install PowerShell 7")
    ap.add_argument("--no-pause", action="store_true", help="do not wait for a key on errors")
    ap.add_argument("--dry-run", action="store_true", help="print the command instead of running it")
    ap.add_argument("-v", "--verbose", action="store_true")
    return ap


def apply_args(cfg: LauncherConfig, args: argparse.Namespace) -> LauncherConfig:
    return cfg.with_overrides(
        mode=args.mode,
        install_enabled=False if args.no_install else None,
        pause_on_error=False if args.no_pause else None,
        log_level="DEBUG" if args.verbose else None,
    )


def exit_code_for(outcome: Outcome) -> int:
    if outcome.ok:
        return int(outcome.exit_code or 0)
    return EXIT_LAUNCHER_FAILURE


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        cfg = apply_args(load_launcher_config(args.config), args)
    except (FileNotFoundError, ValueError) as e:
        print(f"Launcher configuration error: {e}", file=sys.stderr)
        return EXIT_LAUNCHER_FAILURE

    logging.basicConfig(
        level=getattr(logging, cfg.log_level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    reporter = Reporter(cfg)
    bootstrap = Bootstrap(cfg, reporter=reporter, dry_run=args.dry_run)
    try:
        outcome = bootstrap.run()
        reporter.finish(outcome)
    except KeyboardInterrupt:
        log.info("Interrupted")
        return EXIT_INTERRUPTED
    return exit_code_for(outcome)

"""
main.py — Live Sales Dashboard — CLI Entry Point.

Bootstraps a simulated company (historical months, quarterly reports,
seeded profit stream), then either fast-forwards the live stream on a
simulated clock or runs it in real time with an interactive console.

Usage:
    python main.py --ticks 120                   # 2 simulated minutes, headless
    python main.py --ticks 60 --export-csv --excel
    python main.py --live                        # real time, console controls
    python main.py --live --config custom.yaml --log-level DEBUG

Outputs (data/output/):
    {company}_dashboard.html            — auto-refreshing Plotly dashboard
    {company}_profit_stream.csv         — data point window export
    {company}_snapshot.xlsx             — 3-tab Excel snapshot
"""

import argparse
import logging
import logging.handlers
import os
import sys
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Optional

from live_dashboard.config import CompanyProfile, SimulationSettings, load_config
from live_dashboard.controls import DashboardSession, export_filename
from live_dashboard.dashboard import HtmlDashboardSink
from live_dashboard.formatting import fmt_currency, fmt_pct, slugify
from live_dashboard.live_driver import SimulatedClock

CONSOLE_HELP = """Commands:
  p | pause         toggle pause / resume
  r | reset         reset simulation (asks for confirmation)
  i | intensity X   set live intensity multiplier
  e | export [PATH] write CSV export
  x | excel         write Excel snapshot
  s | status        print KPIs
  q | quit          stop the stream"""


def _configure_logging(log_dir: str = "logs", level: str = "INFO") -> None:
    """Configure rotating file handler + stream handler.

    Args:
        log_dir: Directory for log files.
        level: Log level string.
    """
    effective_level = os.environ.get("LOG_LEVEL", level).upper()
    numeric = getattr(logging, effective_level, logging.INFO)

    Path(log_dir).mkdir(parents=True, exist_ok=True)
    log_file = Path(log_dir) / f"dashboard_{datetime.today().strftime('%Y%m%d')}.log"

    fmt = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)-35s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    fh = logging.handlers.RotatingFileHandler(
        log_file, maxBytes=10 * 1024 * 1024, backupCount=7, encoding="utf-8"
    )
    fh.setFormatter(fmt)
    sh = logging.StreamHandler(sys.stdout)
    sh.setFormatter(fmt)

    root = logging.getLogger()
    root.setLevel(numeric)
    root.addHandler(fh)
    root.addHandler(sh)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)


def _parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="live-sales-dashboard",
        description="Simulated live sales dashboard — HTML + CSV + Excel.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --ticks 120
  python main.py --ticks 60 --export-csv --excel
  python main.py --live
  python main.py --live --config custom.yaml --log-level DEBUG
        """,
    )
    parser.add_argument("--config", default="config.yaml",
                        help="Path to config.yaml (default: config.yaml)")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--seed", type=int, default=None,
                        help="Random seed (overrides data_simulation.seed)")
    parser.add_argument("--intensity", type=float, default=None,
                        help="Live intensity multiplier (overrides live.intensity)")

    modes = parser.add_argument_group("Run Modes").add_mutually_exclusive_group()
    modes.add_argument("--ticks", type=int, default=None, metavar="N",
                       help="Fast-forward N simulated seconds, then exit")
    modes.add_argument("--live", action="store_true",
                       help="Run the stream in real time with console controls")

    outputs = parser.add_argument_group("Exports")
    outputs.add_argument("--export-csv", nargs="?", const="", default=None, metavar="PATH",
                         help="Write the profit stream CSV (default path under output_dir)")
    outputs.add_argument("--excel", action="store_true",
                         help="Write the Excel snapshot")
    return parser.parse_args(argv)


def build_session(
    config_path: str,
    seed: Optional[int] = None,
    intensity: Optional[float] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> tuple[DashboardSession, dict[str, Any]]:
    """Load config and assemble a session with the HTML dashboard sink.

    Args:
        config_path: Path to configuration YAML.
        seed: Optional seed overriding the config.
        intensity: Optional intensity overriding the config.
        clock: Time source for the live driver; defaults to wall-clock time.

    Returns:
        (unstarted session, parsed config dict)
    """
    cfg = load_config(config_path)
    profile = CompanyProfile.from_config(cfg)
    settings = SimulationSettings.from_config(cfg)
    if seed is not None:
        settings = replace(settings, seed=seed)
    if intensity is not None:
        settings = replace(settings, intensity=intensity)

    report = cfg.get("report", {}) or {}
    sink = HtmlDashboardSink(
        _output_path(cfg, "dashboard_filename", "{company}_dashboard.html", profile),
        brand=report.get("brand"),
        refresh_seconds=int(report.get("refresh_seconds", 2)),
    )
    session = DashboardSession(
        profile, settings, sinks=[sink], clock=clock or datetime.now,
    )
    return session, cfg


def _output_path(cfg: dict[str, Any], key: str, default: str,
                 profile: CompanyProfile) -> Path:
    paths = cfg.get("paths", {}) or {}
    output_dir = Path(paths.get("output_dir", "data/output"))
    return output_dir / paths.get(key, default).format(company=slugify(profile.name))


def _print_status(session: DashboardSession) -> None:
    kpis = session.state.kpis
    print(
        f"Revenue {fmt_currency(kpis.revenue)} | Profit {fmt_currency(kpis.profit)} | "
        f"Margin {fmt_pct(kpis.margin)} | Points {len(session.state.data_points)} | "
        f"Feed {len(session.state.feed)} | Intensity {session.driver.intensity:.2f}x | "
        f"{'Live' if session.state.running else 'Paused'}"
    )


def _confirm(prompt: str) -> bool:
    return input(f"{prompt} [y/N] ").strip().lower() in ("y", "yes")


def _console(session: DashboardSession, cfg: dict[str, Any], logger: logging.Logger) -> None:
    """Read console commands until 'quit' or EOF."""
    print(CONSOLE_HELP)
    while True:
        try:
            line = input("> ").strip()
        except EOFError:
            return
        if not line:
            continue
        cmd, _, arg = line.partition(" ")
        cmd = cmd.lower()
        try:
            if cmd in ("q", "quit", "exit"):
                return
            elif cmd in ("p", "pause", "resume"):
                print(f"[{session.toggle_pause()}]")
            elif cmd in ("r", "reset"):
                print("Reset complete" if session.reset(_confirm) else "Reset cancelled")
            elif cmd in ("i", "intensity"):
                print(f"Intensity {session.set_intensity(float(arg)):.2f}x")
            elif cmd in ("e", "export"):
                path = Path(arg) if arg else _output_path(
                    cfg, "csv_filename", export_filename(session.profile), session.profile)
                session.export_csv(path)
                print(f"Exported CSV to {path}")
            elif cmd in ("x", "excel"):
                path = _output_path(cfg, "excel_filename", "{company}_snapshot.xlsx",
                                    session.profile)
                session.export_excel(path, (cfg.get("report", {}) or {}).get("brand"))
                print(f"Excel snapshot written to {path}")
            elif cmd in ("s", "status"):
                _print_status(session)
            else:
                print(CONSOLE_HELP)
        except ValueError as exc:
            logger.warning("Invalid command '%s': %s", line, exc)
            print(f"Invalid input: {exc}")


def run(args: argparse.Namespace, logger: logging.Logger) -> int:
    """Execute the requested run mode and exports.

    Args:
        args: Parsed CLI arguments.
        logger: Configured logger.

    Returns:
        0 on success, 1 on error.
    """
    from scheduler import build_scheduler, run_simulated

    clock = SimulatedClock() if not args.live else None

    # -------------------------------------------------------------------------
    # Stage 1: Bootstrap
    # -------------------------------------------------------------------------
    logger.info("=" * 65)
    logger.info("STAGE 1: Bootstrap")
    logger.info("=" * 65)
    try:
        session, cfg = build_session(args.config, args.seed, args.intensity, clock)
        session.start()
    except FileNotFoundError as exc:
        logger.error("Configuration missing: %s", exc)
        return 1
    except Exception as exc:
        logger.error("Bootstrap failed: %s", exc, exc_info=True)
        return 1

    # -------------------------------------------------------------------------
    # Stage 2: Live stream (simulated or real time)
    # -------------------------------------------------------------------------
    if args.live:
        logger.info("=" * 65)
        logger.info("STAGE 2: Live Stream (real time)")
        logger.info("=" * 65)
        scheduler = build_scheduler(session)
        scheduler.start()
        try:
            _console(session, cfg, logger)
        except KeyboardInterrupt:
            logger.info("Interrupted -- stopping stream")
        finally:
            scheduler.shutdown(wait=False)
    elif args.ticks:
        logger.info("=" * 65)
        logger.info("STAGE 2: Live Stream (%d simulated seconds)", args.ticks)
        logger.info("=" * 65)
        try:
            run_simulated(session, args.ticks, clock)
        except Exception as exc:
            logger.error("Simulation failed: %s", exc, exc_info=True)
            return 1

    # -------------------------------------------------------------------------
    # Stage 3: Exports
    # -------------------------------------------------------------------------
    if args.export_csv is not None or args.excel:
        logger.info("=" * 65)
        logger.info("STAGE 3: Exports")
        logger.info("=" * 65)
        try:
            if args.export_csv is not None:
                csv_path = Path(args.export_csv) if args.export_csv else _output_path(
                    cfg, "csv_filename", export_filename(session.profile), session.profile)
                session.export_csv(csv_path)
            if args.excel:
                session.export_excel(
                    _output_path(cfg, "excel_filename", "{company}_snapshot.xlsx",
                                 session.profile),
                    (cfg.get("report", {}) or {}).get("brand"),
                )
        except Exception as exc:
            logger.error("Export failed: %s", exc, exc_info=True)
            return 1

    kpis = session.state.kpis
    logger.info("=" * 65)
    logger.info("RUN COMPLETE")
    logger.info("  Revenue:  %s", fmt_currency(kpis.revenue))
    logger.info("  Profit:   %s", fmt_currency(kpis.profit))
    logger.info("  Margin:   %s", fmt_pct(kpis.margin))
    logger.info("  Points:   %d | Feed: %d", len(session.state.data_points),
                len(session.state.feed))
    logger.info("=" * 65)
    return 0


def main() -> None:
    """Parse args, configure logging, and run."""
    args = _parse_args()

    try:
        cfg = load_config(args.config)
        log_dir = cfg.get("paths", {}).get("log_dir", "logs")
    except Exception:
        log_dir = "logs"

    _configure_logging(log_dir=log_dir, level=args.log_level)
    logger = logging.getLogger(__name__)

    logger.info(
        "Live Sales Dashboard v1.0 | %s",
        datetime.today().strftime("%Y-%m-%d %H:%M:%S"),
    )
    sys.exit(run(args, logger))


if __name__ == "__main__":
    main()

"""Inspect and prune the simulation history file.

Subcommands:
  list    print an owner's results, most recent first, with a summary
  show    export the daily series of one result as CSV (and optionally a plot)
  delete  remove a result by id (no-op when the id is unknown)
Typical usage:
  python scripts/manage_history.py list --owner ana@example.com
  python scripts/manage_history.py delete --id 1735000000000
"""


from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

from src.sird.config import DEFAULTS
from src.sird.exceptions import RecordFormatError
from src.sird.history import JsonHistoryStore, summarize_history
from src.sird.io import ensure_dir, load_json, save_csv
from src.sird.logging_utils import setup_logging
from src.sird.results import display_series, from_record, peak_fraction, series_rows
from src.sird.service import SimulationService


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Manage stored SIRD simulations.")
    parser.add_argument("--history", type=str, default=str(DEFAULTS.history_path))
    parser.add_argument("--log-level", type=str, default="INFO")
    parser.add_argument("--log-file", type=str, default=None)
    sub = parser.add_subparsers(dest="command", required=True)

    p_list = sub.add_parser("list")
    p_list.add_argument("--owner", type=str, default=DEFAULTS.owner)

    p_show = sub.add_parser("show")
    p_show.add_argument("--id", type=int, required=True)
    p_show.add_argument("--out-dir", type=str, default=None)
    p_show.add_argument("--save-plot", action="store_true")

    p_delete = sub.add_parser("delete")
    p_delete.add_argument("--id", type=int, required=True)
    return parser.parse_args()


def _list(service: SimulationService, owner: str) -> None:
    results = service.list(owner)
    for result in results:
        print(
            f"{result.id}  {result.created:>10}  {result.config.name:<30} "
            f"pico={round(result.peak.value):>8} ({100.0 * peak_fraction(result):.2f}%) "
            f"dia={result.peak.day:<4} obitos={result.total_deaths}"
        )
    summary = summarize_history(results)
    print(f"total={summary.total} media_obitos={summary.mean_deaths}")


def _show(history: Path, result_id: int, out_dir: Path, save_plot: bool) -> int:
    logger = logging.getLogger(__name__)
    records = load_json(history, default=[])
    matches = [rec for rec in records if rec.get("id") == result_id]
    if not matches:
        logger.error("No record with id %s in %s", result_id, history)
        return 1

    record = matches[0]
    series = display_series(record)
    ensure_dir(out_dir)
    save_csv(out_dir / f"series_{result_id}.csv", series_rows(series))

    if save_plot:
        from src.visualization.visualize import plot_compartments, save_figure
        import matplotlib.pyplot as plt

        result = from_record(record)
        fig, ax = plt.subplots(figsize=(9, 5))
        plot_compartments(series, peak=result.peak, title=result.config.name, ax=ax)
        save_figure(fig, out_dir / f"curves_{result_id}.png")

    logger.info("Exported %d days of result %s to %s", len(series), result_id, out_dir)
    return 0


def main() -> int:
    args = _parse_args()
    setup_logging(level=args.log_level, log_file=args.log_file)
    logger = logging.getLogger(__name__)
    service = SimulationService(JsonHistoryStore(args.history))

    try:
        if args.command == "list":
            _list(service, args.owner)
        elif args.command == "show":
            out_dir = Path(args.out_dir) if args.out_dir else DEFAULTS.runs_dir
            return _show(Path(args.history), args.id, out_dir, args.save_plot)
        elif args.command == "delete":
            service.delete(args.id)
    except RecordFormatError as exc:
        logger.error("Corrupt history file %s: %s", args.history, exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

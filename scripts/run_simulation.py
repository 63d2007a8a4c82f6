"""Run one SIRD simulation and store it in the owner's history.

Validates the parameters, integrates the model, appends the result to the
JSON history file and writes a run folder with config.json, series.csv and
result.json (plus curves.png with --save-plot) under runs/.
Typical usage:
  python scripts/run_simulation.py --population 1000 --initial-infected 10 \
      --beta 0.5 --gamma 0.1 --mu 0.02 --days 50 --owner ana@example.com
"""


from __future__ import annotations

import argparse
from datetime import datetime
import logging
from pathlib import Path
import sys

from src.sird.config import DEFAULTS
from src.sird.exceptions import ValidationError
from src.sird.history import JsonHistoryStore
from src.sird.io import ensure_dir, save_csv, save_json
from src.sird.logging_utils import setup_logging
from src.sird.results import peak_fraction, series_rows, to_record
from src.sird.service import SimulationService
from src.sird.simulate import discretization_error


def _parse_args() -> argparse.Namespace:
    # Values stay strings so the validator sees exactly what was typed.
    parser = argparse.ArgumentParser(description="Run a SIRD simulation.")
    parser.add_argument("--name", type=str, default=DEFAULTS.name)
    parser.add_argument("--population", type=str, default=str(DEFAULTS.total_population))
    parser.add_argument("--initial-infected", type=str, default=str(DEFAULTS.initial_infected))
    parser.add_argument("--beta", type=str, default=str(DEFAULTS.transmission_rate))
    parser.add_argument("--gamma", type=str, default=str(DEFAULTS.recovery_rate))
    parser.add_argument("--mu", type=str, default=str(DEFAULTS.mortality_rate))
    parser.add_argument("--days", type=str, default=str(DEFAULTS.duration_days))
    parser.add_argument("--owner", type=str, default=DEFAULTS.owner)
    parser.add_argument("--history", type=str, default=str(DEFAULTS.history_path))
    parser.add_argument("--stop-when-extinct", action="store_true")
    parser.add_argument("--extinction-threshold", type=float, default=DEFAULTS.extinction_threshold)
    parser.add_argument("--out-dir", type=str, default=None)
    parser.add_argument("--no-artifacts", action="store_true")
    parser.add_argument("--save-plot", action="store_true")
    parser.add_argument("--check-reference", action="store_true")
    parser.add_argument("--log-level", type=str, default="INFO")
    parser.add_argument("--log-file", type=str, default=None)
    parser.add_argument("--no-console-log", action="store_true")
    return parser.parse_args()


def _raw_config(args: argparse.Namespace) -> dict:
    return {
        "name": args.name,
        "totalPopulation": args.population,
        "initialInfected": args.initial_infected,
        "transmissionRate": args.beta,
        "recoveryRate": args.gamma,
        "mortalityRate": args.mu,
        "durationDays": args.days,
    }


def main() -> int:
    args = _parse_args()
    setup_logging(level=args.log_level, log_file=args.log_file, console=not args.no_console_log)
    logger = logging.getLogger(__name__)

    threshold = args.extinction_threshold if args.stop_when_extinct else None
    service = SimulationService(JsonHistoryStore(args.history), extinction_threshold=threshold)

    try:
        result, trajectory = service.run_with_trajectory(_raw_config(args), owner=args.owner)
    except ValidationError as exc:
        logger.error("Invalid parameters: %s", exc)
        return 2

    logger.info(
        "Peak %d (%.2f%% of population) on day %d; deaths=%d recovered=%d susceptible=%d",
        round(result.peak.value),
        100.0 * peak_fraction(result),
        result.peak.day,
        result.total_deaths,
        result.total_recovered,
        result.final_susceptible,
    )

    if args.check_reference:
        error = discretization_error(trajectory)
        logger.info("Max |I_euler - I_odeint| over the horizon: %.3f", error)

    if args.no_artifacts:
        return 0

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    out_dir = Path(args.out_dir) if args.out_dir else DEFAULTS.runs_dir / f"sird_{timestamp}"
    ensure_dir(out_dir)
    save_json(out_dir / "config.json", result.config.to_dict())
    save_json(out_dir / "result.json", to_record(result))
    save_csv(out_dir / "series.csv", series_rows(result.series))

    if args.save_plot:
        # Imported lazily so runs without plots skip Matplotlib.
        from src.visualization.visualize import plot_compartments, save_figure
        import matplotlib.pyplot as plt

        fig, ax = plt.subplots(figsize=(9, 5))
        plot_compartments(result.series, peak=result.peak, title=result.config.name, ax=ax)
        save_figure(fig, out_dir / "curves.png")

    logger.info("Artifacts written to %s", out_dir)
    return 0


if __name__ == "__main__":
    sys.exit(main())

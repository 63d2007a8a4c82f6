"""Simulation results and their persisted record shape.

`assemble_result` packages a finished trajectory into an immutable
SimulationResult. `to_record`/`from_record` convert results to and from
the JSON record layout used by the history store (Portuguese field names,
one chart row per day), including legacy records saved without chart
data or parameters.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
import threading
import time
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from .config import DEFAULTS
from .exceptions import RecordFormatError
from .params import SimulationConfig
from .simulate import DailySnapshot, PeakRecord, Trajectory, round_half_up, simulate_sird


DATE_FORMAT = "%d/%m/%Y"

# Chart row keys in the persisted layout.
SERIES_KEYS = {
    "day": "dia",
    "S": "Suscetíveis",
    "I": "Infetados",
    "R": "Recuperados",
    "D": "Óbitos",
}
# Older records spell the infected label differently.
LEGACY_INFECTED_KEY = "Infectados"


@dataclass(frozen=True)
class SimulationResult:
    id: int
    config: SimulationConfig
    series: Tuple[DailySnapshot, ...]
    peak: PeakRecord
    total_deaths: int
    total_recovered: int
    final_susceptible: int
    owner: str
    created: str = ""


_id_lock = threading.Lock()
_last_id = 0


def next_result_id() -> int:
    """Return a millisecond timestamp id, strictly greater than the last one."""
    global _last_id
    with _id_lock:
        candidate = time.time_ns() // 1_000_000
        if candidate <= _last_id:
            candidate = _last_id + 1
        _last_id = candidate
        return candidate


def assemble_result(
    trajectory: Trajectory,
    owner: str,
    created: Optional[str] = None,
) -> SimulationResult:
    """Package a completed trajectory into a SimulationResult."""
    susceptible, _, recovered, deceased = trajectory.final_state
    return SimulationResult(
        id=next_result_id(),
        config=trajectory.config,
        series=trajectory.series,
        peak=trajectory.peak,
        total_deaths=round_half_up(deceased),
        total_recovered=round_half_up(recovered),
        final_susceptible=round_half_up(susceptible),
        owner=owner,
        created=created if created is not None else date.today().strftime(DATE_FORMAT),
    )


def peak_fraction(result: SimulationResult) -> float:
    """Peak infected level as a fraction of the total population."""
    return result.peak.value / result.config.total_population


def attack_rate(result: SimulationResult) -> float:
    """Fraction of the population that left the susceptible compartment."""
    n = result.config.total_population
    return (n - result.final_susceptible) / n


def case_fatality(result: SimulationResult) -> float:
    """Deaths over resolved cases (recovered + deceased)."""
    resolved = result.total_deaths + result.total_recovered
    if resolved == 0:
        return 0.0
    return result.total_deaths / resolved


def _snapshot_to_row(snap: DailySnapshot) -> Dict[str, int]:
    return {key: getattr(snap, attr) for attr, key in SERIES_KEYS.items()}


def _row_to_snapshot(row: Mapping[str, Any]) -> DailySnapshot:
    infected = row.get(SERIES_KEYS["I"], row.get(LEGACY_INFECTED_KEY))
    if infected is None:
        raise KeyError(SERIES_KEYS["I"])
    return DailySnapshot(
        day=int(row[SERIES_KEYS["day"]]),
        S=int(row[SERIES_KEYS["S"]]),
        I=int(infected),
        R=int(row[SERIES_KEYS["R"]]),
        D=int(row[SERIES_KEYS["D"]]),
    )


def to_record(result: SimulationResult) -> Dict[str, Any]:
    """Serialize a result into the persisted record layout."""
    config = result.config
    return {
        "id": result.id,
        "nome": config.name,
        "data": result.created,
        "obitos": result.total_deaths,
        "pico": round_half_up(result.peak.value),
        "diaPico": result.peak.day,
        "recuperados": result.total_recovered,
        "suscetiveisFinais": result.final_susceptible,
        "duracao": config.duration_days,
        "populacaoTotal": config.total_population,
        "utilizador": result.owner,
        "dadosGrafico": [_snapshot_to_row(snap) for snap in result.series],
        "parametros": config.to_dict(),
    }


def legacy_config(record: Mapping[str, Any]) -> SimulationConfig:
    """Config for records saved without parameters: default rates.

    The default initial infected count is capped at the record's population
    so that small legacy populations replay without a negative S.
    """
    population = float(record.get("populacaoTotal") or DEFAULTS.total_population)
    if population <= 0:
        raise RecordFormatError(f"record {record.get('id')!r} has no positive population")
    return SimulationConfig(
        name=str(record.get("nome") or DEFAULTS.name),
        total_population=population,
        initial_infected=min(DEFAULTS.initial_infected, population),
        transmission_rate=DEFAULTS.transmission_rate,
        recovery_rate=DEFAULTS.recovery_rate,
        mortality_rate=DEFAULTS.mortality_rate,
        duration_days=int(record.get("duracao") or DEFAULTS.duration_days),
    )


def _record_config(record: Mapping[str, Any]) -> SimulationConfig:
    params = record.get("parametros")
    if not params:
        return legacy_config(record)
    return SimulationConfig(
        name=str(params["name"]),
        total_population=float(params["totalPopulation"]),
        initial_infected=float(params["initialInfected"]),
        transmission_rate=float(params["transmissionRate"]),
        recovery_rate=float(params["recoveryRate"]),
        mortality_rate=float(params["mortalityRate"]),
        duration_days=int(params["durationDays"]),
    )


def _stored_series(record: Mapping[str, Any]) -> Tuple[DailySnapshot, ...]:
    """Chart rows of a record; empty when it was saved without them."""
    rows = record.get("dadosGrafico") or []
    try:
        return tuple(_row_to_snapshot(row) for row in rows)
    except (KeyError, TypeError, ValueError) as exc:
        raise RecordFormatError(f"bad chart row in record {record.get('id')!r}") from exc


def display_series(
    record: Union[SimulationResult, Mapping[str, Any]],
) -> Tuple[DailySnapshot, ...]:
    """Daily series to show for a stored result.

    Results without chart rows are replayed from their stored parameters;
    legacy records without parameters use the default rates with the
    record's population and duration. Decoding never replays, so the
    integrator only runs here, when a series is actually displayed.
    """
    if isinstance(record, SimulationResult):
        if record.series:
            return record.series
        return simulate_sird(record.config).series
    series = _stored_series(record)
    if series:
        return series
    return simulate_sird(_record_config(record)).series


def from_record(record: Mapping[str, Any]) -> SimulationResult:
    """Decode a persisted record.

    Legacy records without chart rows decode with an empty series; use
    `display_series` to replay them.
    """
    try:
        return SimulationResult(
            id=int(record["id"]),
            config=_record_config(record),
            series=_stored_series(record),
            peak=PeakRecord(value=float(record["pico"]), day=int(record["diaPico"])),
            total_deaths=int(record["obitos"]),
            total_recovered=int(record["recuperados"]),
            final_susceptible=int(record["suscetiveisFinais"]),
            owner=str(record["utilizador"]),
            created=str(record.get("data", "")),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise RecordFormatError(f"cannot decode record {record.get('id')!r}: {exc}") from exc


def series_rows(series: Tuple[DailySnapshot, ...]) -> List[Dict[str, int]]:
    """Chart rows for a series, e.g. for CSV export."""
    return [_snapshot_to_row(snap) for snap in series]

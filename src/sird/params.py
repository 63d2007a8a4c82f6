"""Simulation parameters and their validation.

Turns raw user-supplied values (form strings, CLI arguments, JSON numbers)
into a frozen SimulationConfig. Checks run in a fixed order and the first
violation is raised, so a config either comes back fully valid or the
simulation never starts.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
import math
from typing import Any, Dict, Mapping

from .exceptions import InvalidRelation, MissingField, OutOfRange


# Semantic (external) key -> SimulationConfig attribute.
FIELD_NAMES = {
    "name": "name",
    "totalPopulation": "total_population",
    "initialInfected": "initial_infected",
    "transmissionRate": "transmission_rate",
    "recoveryRate": "recovery_rate",
    "mortalityRate": "mortality_rate",
    "durationDays": "duration_days",
}


@dataclass(frozen=True)
class SimulationConfig:
    name: str
    total_population: float
    initial_infected: float
    transmission_rate: float
    recovery_rate: float
    mortality_rate: float
    duration_days: int

    @property
    def basic_reproduction_number(self) -> float:
        """R0 = beta / gamma for the SIRD system."""
        return self.transmission_rate / self.recovery_rate

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the external (camelCase) key names."""
        values = asdict(self)
        return {key: values[attr] for key, attr in FIELD_NAMES.items()}


def _lookup(raw: Mapping[str, Any], key: str) -> Any:
    # Accept both external names and attribute names.
    if key in raw:
        return raw[key]
    return raw.get(FIELD_NAMES[key])


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_number(raw: Mapping[str, Any], key: str) -> float:
    value = _lookup(raw, key)
    if _is_blank(value):
        raise MissingField(key)
    if isinstance(value, bool):
        raise MissingField(key, "must be a number")
    if isinstance(value, str):
        # Form inputs may use a decimal comma ("0,5").
        value = value.strip().replace(",", ".")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise MissingField(key, "must be a number") from None
    if not math.isfinite(number):
        raise MissingField(key, "must be a finite number")
    return number


def _parse_days(raw: Mapping[str, Any], key: str) -> int:
    number = _parse_number(raw, key)
    if not number.is_integer():
        raise MissingField(key, "must be a whole number of days")
    return int(number)


def validate_config(raw: Mapping[str, Any]) -> SimulationConfig:
    """Validate raw parameters and build a SimulationConfig.

    Raises MissingField, OutOfRange or InvalidRelation for the first
    violated constraint, in this order: presence/parsing of every field,
    N > 0, 0 < I0 <= N, beta > 0, gamma > 0, 0 <= mu <= 1, duration > 0.
    """
    name = _lookup(raw, "name")
    if _is_blank(name):
        raise MissingField("name")
    name = str(name).strip()

    n = _parse_number(raw, "totalPopulation")
    i0 = _parse_number(raw, "initialInfected")
    beta = _parse_number(raw, "transmissionRate")
    gamma = _parse_number(raw, "recoveryRate")
    mu = _parse_number(raw, "mortalityRate")
    days = _parse_days(raw, "durationDays")

    if n <= 0:
        raise OutOfRange("totalPopulation", "> 0", n)
    if i0 <= 0:
        raise OutOfRange("initialInfected", "> 0", i0)
    if i0 > n:
        raise InvalidRelation(
            "initialInfected",
            "totalPopulation",
            f"initialInfected ({i0:g}) cannot exceed totalPopulation ({n:g})",
        )
    if beta <= 0:
        raise OutOfRange("transmissionRate", "> 0", beta)
    if gamma <= 0:
        raise OutOfRange("recoveryRate", "> 0", gamma)
    if not 0.0 <= mu <= 1.0:
        raise OutOfRange("mortalityRate", "within [0, 1]", mu)
    if days <= 0:
        raise OutOfRange("durationDays", "> 0", days)

    return SimulationConfig(
        name=name,
        total_population=n,
        initial_infected=i0,
        transmission_rate=beta,
        recovery_rate=gamma,
        mortality_rate=mu,
        duration_days=days,
    )

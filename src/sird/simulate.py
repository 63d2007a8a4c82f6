"""SIRD simulation with fixed-step forward Euler.

Provides the numerical core: the compartment state of one run, the
per-day snapshots it emits, the peak tracker observing the infected
compartment, and `simulate_sird` which drives them. A continuous-time
reference solution (scipy odeint) is available to measure the
discretization error of the Euler scheme.
"""


from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import List, Optional, Tuple

import numpy as np
import scipy.integrate as spi

from .config import DEFAULTS
from .params import SimulationConfig


logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for value >= 0."""
    return int(math.floor(value + 0.5))


@dataclass
class CompartmentState:
    """Continuous compartment sizes owned by a single run."""

    susceptible: float
    infected: float
    recovered: float = 0.0
    deceased: float = 0.0

    @classmethod
    def initial(cls, config: SimulationConfig) -> "CompartmentState":
        return cls(
            susceptible=config.total_population - config.initial_infected,
            infected=config.initial_infected,
        )

    @property
    def total(self) -> float:
        return self.susceptible + self.infected + self.recovered + self.deceased

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.susceptible, self.infected, self.recovered, self.deceased)

    def step(self, config: SimulationConfig, dt: float) -> None:
        """Advance the state by one Euler sub-step of length dt."""
        s, i = self.susceptible, self.infected
        n = config.total_population
        mu = config.mortality_rate

        new_infections = config.transmission_rate * s * i / n * dt
        new_recoveries = config.recovery_rate * i * (1.0 - mu) * dt
        new_deaths = config.recovery_rate * i * mu * dt

        # Flows never exceed what their source compartment holds, so large
        # rates clamp at zero without creating population.
        new_infections = min(new_infections, s)
        available = i + new_infections
        outflow = new_recoveries + new_deaths
        if outflow > available:
            scale = available / outflow
            new_recoveries *= scale
            new_deaths *= scale

        self.susceptible = max(0.0, s - new_infections)
        self.infected = max(0.0, available - new_recoveries - new_deaths)
        self.recovered += new_recoveries
        self.deceased += new_deaths


@dataclass(frozen=True)
class DailySnapshot:
    day: int
    S: int
    I: int  # noqa: E741
    R: int
    D: int

    @classmethod
    def from_state(cls, day: int, state: CompartmentState) -> "DailySnapshot":
        s, i, r, d = (round_half_up(v) for v in state.as_tuple())
        return cls(day=day, S=s, I=i, R=r, D=d)


@dataclass(frozen=True)
class PeakRecord:
    value: float
    day: int


class PeakTracker:
    """Track the maximum infected level and the first day it is reached.

    Only a strict increase replaces the current peak, so ties keep the
    earliest day.
    """

    def __init__(self, initial_infected: float) -> None:
        self.value = initial_infected
        self.day = 0

    def observe(self, day: int, infected: float) -> None:
        if infected > self.value:
            self.value = infected
            self.day = day

    @property
    def peak(self) -> PeakRecord:
        return PeakRecord(value=self.value, day=self.day)


@dataclass(frozen=True, eq=False)
class Trajectory:
    """Everything one integration run produces.

    `series` holds the rounded snapshots; `states` holds the continuous
    daily states with shape (len(series), 4) in S, I, R, D order.
    """

    config: SimulationConfig
    series: Tuple[DailySnapshot, ...]
    states: np.ndarray
    final_state: Tuple[float, float, float, float]
    peak: PeakRecord
    stopped_early: bool = False

    @property
    def days(self) -> np.ndarray:
        return np.array([snap.day for snap in self.series], dtype=int)


def simulate_sird(
    config: SimulationConfig,
    extinction_threshold: Optional[float] = None,
) -> Trajectory:
    """Simulate a validated config from day 0 through config.duration_days.

    The loop runs the full horizon unless `extinction_threshold` is given,
    in which case it stops after the first day whose infected level falls
    below the threshold. The day is still recorded before stopping.
    """
    dt = DEFAULTS.dt
    steps_per_day = DEFAULTS.steps_per_day

    state = CompartmentState.initial(config)
    tracker = PeakTracker(state.infected)
    series: List[DailySnapshot] = [DailySnapshot.from_state(0, state)]
    states: List[Tuple[float, float, float, float]] = [state.as_tuple()]
    stopped_early = False

    for day in range(1, config.duration_days + 1):
        for _ in range(steps_per_day):
            state.step(config, dt)
        series.append(DailySnapshot.from_state(day, state))
        states.append(state.as_tuple())
        tracker.observe(day, state.infected)

        if extinction_threshold is not None and state.infected < extinction_threshold:
            stopped_early = day < config.duration_days
            break

    if stopped_early:
        logger.debug("Infection extinct on day %d of %d", series[-1].day, config.duration_days)

    return Trajectory(
        config=config,
        series=tuple(series),
        states=np.asarray(states, dtype=float),
        final_state=state.as_tuple(),
        peak=tracker.peak,
        stopped_early=stopped_early,
    )


def _sird_eqs(y, t, beta, gamma, mu, n):
    """Right-hand side of the SIRD equations."""
    s, i, _, _ = y
    infections = beta * s * i / n
    return [
        -infections,
        infections - gamma * i,
        gamma * (1.0 - mu) * i,
        gamma * mu * i,
    ]


def reference_solution(
    config: SimulationConfig,
    times: Optional[np.ndarray] = None,
) -> np.ndarray:
    """Solve the continuous SIRD system with scipy odeint.

    Returns an array of shape (len(times), 4) in S, I, R, D order. Defaults
    to one sample per day over the config's horizon.
    """
    if times is None:
        times = np.arange(config.duration_days + 1, dtype=float)
    y0 = [
        config.total_population - config.initial_infected,
        config.initial_infected,
        0.0,
        0.0,
    ]
    args = (
        config.transmission_rate,
        config.recovery_rate,
        config.mortality_rate,
        config.total_population,
    )
    return spi.odeint(_sird_eqs, y0, times, args=args)


def discretization_error(trajectory: Trajectory) -> float:
    """Max absolute deviation of the Euler I(t) from the ODE reference."""
    reference = reference_solution(trajectory.config, trajectory.days.astype(float))
    return float(np.max(np.abs(trajectory.states[:, 1] - reference[:, 1])))

"""Shared fixtures for the SIRD test suite."""

import pytest

from src.sird.params import SimulationConfig, validate_config


@pytest.fixture
def raw_scenario():
    """Raw form values for the reference N=1000 scenario."""
    return {
        "name": "Cenário de teste",
        "totalPopulation": "1000",
        "initialInfected": "10",
        "transmissionRate": "0.5",
        "recoveryRate": "0.1",
        "mortalityRate": "0.02",
        "durationDays": "50",
    }


@pytest.fixture
def scenario(raw_scenario) -> SimulationConfig:
    return validate_config(raw_scenario)


@pytest.fixture
def make_config():
    """Build a SimulationConfig directly, bypassing validation."""

    def _make(**overrides) -> SimulationConfig:
        values = dict(
            name="test",
            total_population=1000.0,
            initial_infected=10.0,
            transmission_rate=0.5,
            recovery_rate=0.1,
            mortality_rate=0.02,
            duration_days=50,
        )
        values.update(overrides)
        return SimulationConfig(**values)

    return _make

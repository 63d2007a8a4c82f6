"""Tests for src.sird.params: parameter validation order and parsing."""

import pytest

from src.sird.exceptions import InvalidRelation, MissingField, OutOfRange, ValidationError
from src.sird.params import SimulationConfig, validate_config


def test_valid_strings_become_typed_config(raw_scenario):
    config = validate_config(raw_scenario)
    assert config == SimulationConfig(
        name="Cenário de teste",
        total_population=1000.0,
        initial_infected=10.0,
        transmission_rate=0.5,
        recovery_rate=0.1,
        mortality_rate=0.02,
        duration_days=50,
    )
    assert isinstance(config.duration_days, int)


def test_numbers_and_attribute_names_are_accepted():
    config = validate_config({
        "name": "x",
        "total_population": 500,
        "initial_infected": 5,
        "transmission_rate": 0.3,
        "recovery_rate": 0.1,
        "mortality_rate": 0,
        "duration_days": 10,
    })
    assert config.total_population == 500.0
    assert config.mortality_rate == 0.0


def test_decimal_comma(raw_scenario):
    raw_scenario["transmissionRate"] = "0,5"
    assert validate_config(raw_scenario).transmission_rate == 0.5


def test_integral_float_duration(raw_scenario):
    raw_scenario["durationDays"] = "365.0"
    assert validate_config(raw_scenario).duration_days == 365


def test_config_is_frozen(scenario):
    with pytest.raises(AttributeError):
        scenario.total_population = 5


def test_to_dict_uses_external_names(scenario):
    assert scenario.to_dict() == {
        "name": "Cenário de teste",
        "totalPopulation": 1000.0,
        "initialInfected": 10.0,
        "transmissionRate": 0.5,
        "recoveryRate": 0.1,
        "mortalityRate": 0.02,
        "durationDays": 50,
    }
    assert scenario.basic_reproduction_number == pytest.approx(5.0)


@pytest.mark.parametrize(
    "field, value",
    [
        ("name", ""),
        ("name", None),
        ("totalPopulation", "   "),
        ("initialInfected", None),
        ("transmissionRate", "abc"),
        ("recoveryRate", "nan"),
        ("mortalityRate", "inf"),
        ("durationDays", "36.5"),
        ("durationDays", True),
    ],
)
def test_missing_or_unparseable(raw_scenario, field, value):
    raw_scenario[field] = value
    with pytest.raises(MissingField) as excinfo:
        validate_config(raw_scenario)
    assert excinfo.value.field == field


def test_absent_key(raw_scenario):
    del raw_scenario["recoveryRate"]
    with pytest.raises(MissingField) as excinfo:
        validate_config(raw_scenario)
    assert excinfo.value.field == "recoveryRate"


@pytest.mark.parametrize(
    "field, value",
    [
        ("totalPopulation", "0"),
        ("totalPopulation", "-5"),
        ("initialInfected", "0"),
        ("transmissionRate", "0"),
        ("recoveryRate", "-0.1"),
        ("mortalityRate", "-0.01"),
        ("mortalityRate", "1.5"),
        ("durationDays", "0"),
    ],
)
def test_out_of_range(raw_scenario, field, value):
    raw_scenario[field] = value
    with pytest.raises(OutOfRange) as excinfo:
        validate_config(raw_scenario)
    assert excinfo.value.field == field


@pytest.mark.parametrize("mu", ["0", "1"])
def test_mortality_bounds_inclusive(raw_scenario, mu):
    raw_scenario["mortalityRate"] = mu
    assert validate_config(raw_scenario).mortality_rate == float(mu)


def test_initial_infected_above_population():
    raw = {
        "name": "x",
        "totalPopulation": 100,
        "initialInfected": 150,
        "transmissionRate": 0.5,
        "recoveryRate": 0.1,
        "mortalityRate": 0.02,
        "durationDays": 10,
    }
    with pytest.raises(InvalidRelation) as excinfo:
        validate_config(raw)
    assert excinfo.value.field == "initialInfected"
    assert excinfo.value.other == "totalPopulation"
    assert "150" in str(excinfo.value)


def test_initial_infected_equal_population(raw_scenario):
    raw_scenario["initialInfected"] = "1000"
    assert validate_config(raw_scenario).initial_infected == 1000.0


def test_first_violation_wins(raw_scenario):
    # Presence is checked for every field before any range check.
    raw_scenario["totalPopulation"] = "-1"
    raw_scenario["durationDays"] = ""
    with pytest.raises(MissingField):
        validate_config(raw_scenario)

    raw_scenario["durationDays"] = "0"
    raw_scenario["mortalityRate"] = "3"
    with pytest.raises(OutOfRange) as excinfo:
        validate_config(raw_scenario)
    assert excinfo.value.field == "totalPopulation"


def test_validation_errors_are_value_errors(raw_scenario):
    raw_scenario["recoveryRate"] = "0"
    with pytest.raises(ValueError):
        validate_config(raw_scenario)
    assert issubclass(OutOfRange, ValidationError)

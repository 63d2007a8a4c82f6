"""Central defaults for SIRD simulations.

Defines the Defaults dataclass with shared settings (integration step,
form defaults, legacy replay parameters, storage paths). Imported by the
simulator, the history store and the scripts to keep runs consistent.
"""


from dataclasses import dataclass
from pathlib import Path


# Central defaults shared by the library and scripts.
@dataclass(frozen=True)
class Defaults:
    dt: float = 0.1
    name: str = "COVID-19 Cenário Base"
    total_population: float = 100000.0
    initial_infected: float = 10.0
    transmission_rate: float = 0.5
    recovery_rate: float = 0.1
    mortality_rate: float = 0.02
    duration_days: int = 365
    owner: str = "utilizador@exemplo.com"
    # Original charts stopped once fewer than half a person stayed infected.
    extinction_threshold: float = 0.5
    history_path: Path = Path("data/history/simulacoes.json")
    runs_dir: Path = Path("runs")

    @property
    def steps_per_day(self) -> int:
        return int(round(1.0 / self.dt))


# Shared defaults instance used across modules and scripts.
DEFAULTS = Defaults()

"""Run, list and delete simulations against a history store.

`SimulationService` is the operational surface used by the scripts:
validate raw parameters, integrate, assemble the result and append it to
the owner's history in one call.
"""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Tuple

from .exceptions import ValidationError
from .history import HistoryStore, InMemoryHistoryStore
from .params import validate_config
from .results import SimulationResult, assemble_result
from .simulate import Trajectory, simulate_sird


logger = logging.getLogger(__name__)


class SimulationService:
    def __init__(
        self,
        store: Optional[HistoryStore] = None,
        extinction_threshold: Optional[float] = None,
    ) -> None:
        self.store = store if store is not None else InMemoryHistoryStore()
        self.extinction_threshold = extinction_threshold

    def run(self, raw_config: Mapping[str, Any], owner: str) -> SimulationResult:
        """Validate, simulate and store one run.

        Raises ValidationError (nothing is stored) when the parameters are
        rejected.
        """
        result, _ = self.run_with_trajectory(raw_config, owner)
        return result

    def run_with_trajectory(
        self, raw_config: Mapping[str, Any], owner: str
    ) -> Tuple[SimulationResult, Trajectory]:
        """Like `run`, also returning the trajectory the result came from."""
        try:
            config = validate_config(raw_config)
        except ValidationError as exc:
            logger.warning("Rejected simulation request from %s: %s", owner, exc)
            raise

        logger.info(
            "Simulating %r: N=%g I0=%g beta=%g gamma=%g mu=%g days=%d",
            config.name,
            config.total_population,
            config.initial_infected,
            config.transmission_rate,
            config.recovery_rate,
            config.mortality_rate,
            config.duration_days,
        )
        trajectory = simulate_sird(config, extinction_threshold=self.extinction_threshold)
        result = assemble_result(trajectory, owner=owner)
        self.store.append(result, owner)

        logger.info(
            "Stored result %s: peak=%d on day %d, deaths=%d, recovered=%d",
            result.id,
            round(result.peak.value),
            result.peak.day,
            result.total_deaths,
            result.total_recovered,
        )
        return result, trajectory

    def list(self, owner: str) -> List[SimulationResult]:
        return self.store.list_by_owner(owner)

    def delete(self, result_id: int) -> None:
        self.store.delete_by_id(result_id)
        logger.info("Deleted result %s", result_id)

"""Owner-scoped history of simulation results.

`HistoryStore` defines the three operations the simulator relies on:
append a result, list an owner's results (most recent first) and delete a
result by id. Two backends are provided: an in-memory store for tests and
embedding, and a JSON file store that keeps every record in one list
using the persisted record layout.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, replace
import logging
from pathlib import Path
import threading
from typing import Dict, Iterable, Iterator, List, Union

from filelock import FileLock

from .exceptions import DuplicateRecordError, RecordFormatError
from .io import ensure_dir, load_json, write_json_atomic
from .results import SimulationResult, from_record, to_record
from .simulate import round_half_up


logger = logging.getLogger(__name__)


class HistoryStore(ABC):
    """Append-only result store with explicit delete."""

    @abstractmethod
    def append(self, result: SimulationResult, owner: str) -> None:
        """Add a result under owner; never overwrites an existing id."""

    @abstractmethod
    def list_by_owner(self, owner: str) -> List[SimulationResult]:
        """Results of owner, most recent first."""

    @abstractmethod
    def delete_by_id(self, result_id: int) -> None:
        """Remove a result; unknown ids are ignored."""


def _owned(result: SimulationResult, owner: str) -> SimulationResult:
    if result.owner == owner:
        return result
    # The owner key given to append wins over the one in the result.
    return replace(result, owner=owner)


class InMemoryHistoryStore(HistoryStore):
    def __init__(self) -> None:
        self._records: Dict[int, SimulationResult] = {}
        self._lock = threading.Lock()

    def append(self, result: SimulationResult, owner: str) -> None:
        with self._lock:
            if result.id in self._records:
                raise DuplicateRecordError(f"record {result.id} already exists")
            self._records[result.id] = _owned(result, owner)

    def list_by_owner(self, owner: str) -> List[SimulationResult]:
        with self._lock:
            results = [r for r in self._records.values() if r.owner == owner]
        return sorted(results, key=lambda r: r.id, reverse=True)

    def delete_by_id(self, result_id: int) -> None:
        with self._lock:
            self._records.pop(result_id, None)


# Stores on the same file share one thread lock, keyed by resolved path.
_path_locks: Dict[Path, threading.Lock] = {}
_registry_lock = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    with _registry_lock:
        return _path_locks.setdefault(path.resolve(), threading.Lock())


class JsonHistoryStore(HistoryStore):
    """History kept as a JSON list of records in a single file.

    Every operation re-reads the file, so several store instances pointing
    at the same path see each other's writes. Read-modify-write cycles hold
    a per-path thread lock and a `.lock` file next to the history, which
    serializes writers across threads and processes.
    """

    def __init__(self, path: Union[Path, str]) -> None:
        self.path = Path(path)
        self.lock_path = self.path.with_name(self.path.name + ".lock")
        self._lock = _lock_for(self.path)

    @contextmanager
    def _locked(self) -> Iterator[None]:
        with self._lock:
            ensure_dir(self.path.parent)
            with FileLock(str(self.lock_path)):
                yield

    def _load(self) -> List[dict]:
        records = load_json(self.path, default=[])
        if not isinstance(records, list):
            raise RecordFormatError(f"{self.path} does not hold a list of records")
        return records

    def append(self, result: SimulationResult, owner: str) -> None:
        with self._locked():
            records = self._load()
            if any(rec.get("id") == result.id for rec in records):
                raise DuplicateRecordError(f"record {result.id} already exists")
            records.append(to_record(_owned(result, owner)))
            write_json_atomic(self.path, records)
        logger.debug("Appended record %s for %s to %s", result.id, owner, self.path)

    def list_by_owner(self, owner: str) -> List[SimulationResult]:
        with self._locked():
            records = [rec for rec in self._load() if rec.get("utilizador") == owner]
        results = [from_record(rec) for rec in records]
        return sorted(results, key=lambda r: r.id, reverse=True)

    def delete_by_id(self, result_id: int) -> None:
        with self._locked():
            records = self._load()
            kept = [rec for rec in records if rec.get("id") != result_id]
            if len(kept) == len(records):
                return
            write_json_atomic(self.path, kept)
        logger.debug("Deleted record %s from %s", result_id, self.path)


@dataclass(frozen=True)
class HistorySummary:
    total: int
    mean_deaths: int


def summarize_history(results: Iterable[SimulationResult]) -> HistorySummary:
    """Count results and average their deaths (rounded)."""
    results = list(results)
    if not results:
        return HistorySummary(total=0, mean_deaths=0)
    deaths = sum(r.total_deaths for r in results)
    return HistorySummary(total=len(results), mean_deaths=round_half_up(deaths / len(results)))

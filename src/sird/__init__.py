"""SIRD epidemic simulator.

Re-exports the common entry points so scripts and notebooks can import
from src.sird without deep module paths.
"""


from .config import DEFAULTS  # noqa: F401
from .exceptions import (  # noqa: F401
    SIRDError,
    ValidationError,
    MissingField,
    OutOfRange,
    InvalidRelation,
    DuplicateRecordError,
    RecordFormatError,
)
from .params import SimulationConfig, validate_config  # noqa: F401
from .simulate import (  # noqa: F401
    CompartmentState,
    DailySnapshot,
    PeakRecord,
    PeakTracker,
    Trajectory,
    simulate_sird,
    reference_solution,
)
from .results import (  # noqa: F401
    SimulationResult,
    assemble_result,
    to_record,
    from_record,
    display_series,
    peak_fraction,
)
from .history import HistoryStore, InMemoryHistoryStore, JsonHistoryStore, summarize_history  # noqa: F401
from .service import SimulationService  # noqa: F401

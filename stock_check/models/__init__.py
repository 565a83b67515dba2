"""
Domain models: universe entities (input side) and the locked run result
contract (output side).  All models are frozen pydantic v2 models.
"""

from stock_check.models.run import (
    CANONICAL_COLUMNS,
    MODEL_VERSION,
    DataMode,
    ResultRow,
    RunResult,
)
from stock_check.models.universe import ScoredEntity, TrailingReturns, UniverseEntity

__all__ = [
    "CANONICAL_COLUMNS",
    "MODEL_VERSION",
    "DataMode",
    "ResultRow",
    "RunResult",
    "ScoredEntity",
    "TrailingReturns",
    "UniverseEntity",
]

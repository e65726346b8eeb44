"""Question answering over the corpus."""

from .orchestrator import (
    IndexSelectStrategy,
    MapReduceStrategy,
    QueryOrchestrator,
    RetrievalStrategy,
    build_strategy,
)

__all__ = [
    "IndexSelectStrategy",
    "MapReduceStrategy",
    "QueryOrchestrator",
    "RetrievalStrategy",
    "build_strategy",
]

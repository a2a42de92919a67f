"""Production pipeline package.

This package contains the orchestrator status machine, its mutable state
record, and stage telemetry helpers.
"""

from .orchestrator import ProductionOrchestrator
from .state import ProductionState

__all__ = ["ProductionOrchestrator", "ProductionState"]

from .dsl import unit, plan
from .errors import BuildError, ConfigurationError, ContractViolation, StallError, ExecutionError, CommandFailure
from .executor import PoolExecutor
from .graph import DependencyGraph
from .model import Unit, UnitState
from .scheduler import BuildReport, Scheduler, run_schedule

__all__ = [
    "unit", "plan",
    "BuildError", "ConfigurationError", "ContractViolation", "StallError", "ExecutionError", "CommandFailure",
    "PoolExecutor", "DependencyGraph", "Unit", "UnitState",
    "BuildReport", "Scheduler", "run_schedule",
]

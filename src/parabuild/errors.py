# errors.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(eq=False)
class BuildError(Exception):
    """
    Structured build error with enough context for:
      - clean CLI output
      - identifying the offending unit without a full traceback
    """
    message: str
    unit: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    kind = "BuildError"

    def __str__(self) -> str:
        lines = [f"{self.kind}: {self.message}"]
        if self.unit:
            lines.append(f"unit={self.unit}")
        for k, v in self.details.items():
            lines.append(f"{k}={v}")
        return "\n".join(lines)


class ConfigurationError(BuildError):
    """The graph is structurally wrong (dangling dependency, duplicate key, bad source)."""
    kind = "ConfigurationError"


class ContractViolation(BuildError):
    """An illegal state transition. Always a scheduler bug."""
    kind = "ContractViolation"


class StallError(BuildError):
    """Nothing is ready or running but the graph is not complete (cycle)."""
    kind = "StallError"


class ExecutionError(BuildError):
    """A unit's work failed; the whole run stops."""
    kind = "ExecutionError"


@dataclass(eq=False)
class CommandFailure(Exception):
    unit: str
    cmd: str
    exit_code: int
    output: str = ""

    def __str__(self) -> str:
        return f"[{self.unit}] command failed (exit={self.exit_code}): {self.cmd}"

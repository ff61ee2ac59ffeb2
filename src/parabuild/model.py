# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional


class UnitState(Enum):
    """Lifecycle of a unit. Only ever moves forward, in declaration order."""
    WAITING_ON_DEPENDENCIES = "waiting"
    READY = "ready"
    RUNNING = "running"
    COMPLETED = "completed"


@dataclass
class Unit:
    """
    A build unit: a key, the units it needs, and an optional shell command.

    `needs` is kept as given; duplicates and self references are not cleaned up.
    """
    key: str
    needs: list[str] = field(default_factory=list)

    run: Optional[str] = None
    cwd: Optional[str] = None
    env: Dict[str, str] = field(default_factory=dict)

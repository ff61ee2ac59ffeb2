# graph.py
from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Tuple

from .errors import ConfigurationError, ContractViolation, StallError
from .model import UnitState


class DependencyGraph:
    """
    Readiness state machine over a set of build units.

    Units live in an ordered table: position i holds the key, the dependency
    keys and the current state of one unit. `_index` maps a key back to its
    position. Everything is plain lists, so a snapshot is a list copy.

    All mutation happens through register / claim_ready_units / mark_completed
    and is expected to come from a single control loop (no locking here).
    """

    def __init__(self) -> None:
        self._keys: List[str] = []
        self._deps: List[Tuple[str, ...]] = []
        self._states: List[UnitState] = []
        self._index: Dict[str, int] = {}
        self._started = False

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def register(self, key: str, dependencies: Iterable[str]) -> None:
        if key in self._index:
            raise ConfigurationError(f"Duplicate unit key: {key}", unit=key)
        if self._started:
            raise ContractViolation(
                f"Cannot register '{key}' after scheduling has started", unit=key
            )

        self._index[key] = len(self._keys)
        self._keys.append(key)
        self._deps.append(tuple(dependencies))
        self._states.append(UnitState.WAITING_ON_DEPENDENCIES)
        # a new unit is never completed, so only its own readiness can change
        self._refresh_one(len(self._keys) - 1)

    def validate(self) -> None:
        """
        Check that every unit has a state and every dependency is registered.

        Raises ConfigurationError naming the first dangling (unit, dependency)
        pair; all dangling pairs are listed in `details["dangling"]`.
        """
        if not (len(self._keys) == len(self._deps) == len(self._states) == len(self._index)):
            raise ConfigurationError(
                "Unit table is inconsistent",
                details={
                    "keys": len(self._keys),
                    "states": len(self._states),
                    "dependencies": len(self._deps),
                },
            )

        dangling: List[Tuple[str, str]] = []
        for key, deps in zip(self._keys, self._deps):
            if self._index.get(key) is None:
                raise ConfigurationError(f"Cannot find state for {key}", unit=key)
            for dep in deps:
                if dep not in self._index:
                    dangling.append((key, dep))

        if dangling:
            key, dep = dangling[0]
            raise ConfigurationError(
                f"Unit '{key}' depends on unknown unit '{dep}'",
                unit=key,
                details={"dependency": dep, "dangling": dangling},
            )

    # ------------------------------------------------------------------
    # State transitions
    # ------------------------------------------------------------------

    def claim_ready_units(self) -> List[str]:
        """Move every READY unit to RUNNING and return their keys."""
        self._started = True
        self._refresh()
        claimed = [i for i, s in enumerate(self._states) if s is UnitState.READY]
        for i in claimed:
            self._states[i] = UnitState.RUNNING
        return [self._keys[i] for i in claimed]

    def mark_completed(self, key: str) -> None:
        i = self._position(key)
        state = self._states[i]
        if state is not UnitState.RUNNING:
            raise ContractViolation(
                f"State of {key} is not running",
                unit=key,
                details={"expected": UnitState.RUNNING.value, "actual": state.value},
            )
        self._states[i] = UnitState.COMPLETED
        self._refresh()

    def all_completed(self) -> bool:
        return all(s is UnitState.COMPLETED for s in self._states)

    # ------------------------------------------------------------------
    # Dry-run planning
    # ------------------------------------------------------------------

    def snapshot(self) -> DependencyGraph:
        copy = DependencyGraph()
        copy._keys = list(self._keys)
        copy._deps = list(self._deps)  # tuples, immutable
        copy._states = list(self._states)
        copy._index = dict(self._index)
        copy._started = self._started
        return copy

    def plan_waves(self) -> List[List[str]]:
        """
        Simulate the whole schedule on a snapshot, assuming every claimed unit
        succeeds at once. Returns the keys claimed in each wave.

        Units already RUNNING in the live graph count as finishing first; they
        are not reported in any wave.
        """
        copy = self.snapshot()
        for i, s in enumerate(copy._states):
            if s is UnitState.RUNNING:
                copy._states[i] = UnitState.COMPLETED

        waves: List[List[str]] = []
        while not copy.all_completed():
            wave = copy.claim_ready_units()
            if not wave:
                raise StallError(
                    "Dependency graph can never complete",
                    details={"pending": copy.pending()},
                )
            waves.append(wave)
            for key in wave:
                copy.mark_completed(key)
        return waves

    def simulate_schedule(self) -> List[int]:
        """Best-case parallelism profile, e.g. [3, 5, 1]."""
        return [len(wave) for wave in self.plan_waves()]

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def state_of(self, key: str) -> UnitState:
        return self._states[self._position(key)]

    def dependencies_of(self, key: str) -> List[str]:
        return list(self._deps[self._position(key)])

    def keys(self) -> List[str]:
        return list(self._keys)

    def pending(self) -> List[str]:
        return [k for k, s in zip(self._keys, self._states) if s is not UnitState.COMPLETED]

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, key: object) -> bool:
        return key in self._index

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._keys))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _position(self, key: str) -> int:
        try:
            return self._index[key]
        except KeyError:
            raise ContractViolation(f"Unknown unit: {key}", unit=key) from None

    def _refresh(self) -> None:
        for i in range(len(self._keys)):
            self._refresh_one(i)

    def _refresh_one(self, i: int) -> None:
        state = self._states[i]
        if state in (UnitState.RUNNING, UnitState.COMPLETED):
            return

        ready = all(self._is_completed(dep) for dep in self._deps[i])
        self._states[i] = UnitState.READY if ready else UnitState.WAITING_ON_DEPENDENCIES

    def _is_completed(self, key: str) -> bool:
        j = self._index.get(key)
        return j is not None and self._states[j] is UnitState.COMPLETED

# scheduler.py
from __future__ import annotations

import time
from concurrent.futures import FIRST_COMPLETED, Future, wait
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from .errors import ExecutionError, StallError
from .executor import Executor
from .graph import DependencyGraph
from .ui.console import Console, get_console


@dataclass
class BuildReport:
    """Outcome of one successful run. Durations are in seconds."""
    durations: Dict[str, float] = field(default_factory=dict)
    waves: List[int] = field(default_factory=list)
    elapsed: float = 0.0

    @property
    def unit_count(self) -> int:
        return len(self.durations)


class Scheduler:
    """
    Drives a DependencyGraph to completion on a bounded executor.

    - Claims every ready unit and submits it.
    - Waits for the next completion, marks it completed, claims again.
    - On the first failure, cancels queued submissions and raises
      ExecutionError without waiting for running siblings.

    Only this loop touches the graph; worker threads just return futures.
    """

    def __init__(
        self,
        graph: DependencyGraph,
        executor: Executor,
        payloads: Optional[Mapping[str, Any]] = None,
        *,
        console: Optional[Console] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.graph = graph
        self.executor = executor
        self.payloads = payloads or {}
        self.console = console or get_console()
        self.clock = clock

    def run(self) -> BuildReport:
        start = self.clock()
        report = BuildReport()
        in_flight: Dict[Future, Tuple[str, float]] = {}

        while not self.graph.all_completed():
            for key in self.graph.claim_ready_units():
                self.console.print_unit_started(key)
                fut = self.executor.submit(key, self.payloads.get(key, key))
                in_flight[fut] = (key, self.clock())

            if not in_flight:
                raise StallError(
                    "No unit is ready and none is running",
                    details={"pending": self.graph.pending()},
                )

            self.console.print_debug(f"in flight: {len(in_flight)}")
            done, _ = wait(list(in_flight), return_when=FIRST_COMPLETED)

            for fut in done:
                key, started = in_flight.pop(fut)
                exc = fut.exception()
                if exc is not None:
                    self._abort(in_flight)
                    raise ExecutionError(
                        f"Cannot build {key}",
                        unit=key,
                        details={"cause": str(exc)},
                    ) from exc

                duration = self.clock() - started
                self.graph.mark_completed(key)
                report.durations[key] = duration
                self.console.print_unit_built(key, duration)

        report.elapsed = self.clock() - start
        self.console.print_summary(len(self.graph), report.elapsed)
        return report

    def _abort(self, in_flight: Dict[Future, Tuple[str, float]]) -> None:
        # queued work never starts; running siblings are left to finish
        for fut in in_flight:
            fut.cancel()


def run_schedule(
    graph: DependencyGraph,
    executor: Executor,
    payloads: Optional[Mapping[str, Any]] = None,
    *,
    console: Optional[Console] = None,
) -> BuildReport:
    """Print the planned build flow, then run the whole graph."""
    console = console or get_console()
    waves = graph.simulate_schedule()
    console.print_build_flow(waves)

    report = Scheduler(graph, executor, payloads, console=console).run()
    report.waves = waves
    return report

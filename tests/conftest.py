from __future__ import annotations

from concurrent.futures import Future
from typing import Any, Callable, Dict, List, Tuple

import pytest

from parabuild.graph import DependencyGraph
from parabuild.ui.console import Console, set_console


def graph_from(spec: Dict[str, List[str]]) -> DependencyGraph:
    graph = DependencyGraph()
    for key, deps in spec.items():
        graph.register(key, deps)
    return graph


class SyncExecutor:
    """Runs work inline and hands back an already-resolved Future."""

    def __init__(self, work_fn: Callable[[str, Any], Any] | None = None):
        self.work_fn = work_fn or (lambda key, payload: None)
        self.submitted: List[Tuple[str, Any]] = []

    def submit(self, key: str, payload: Any) -> Future:
        self.submitted.append((key, payload))
        fut: Future = Future()
        try:
            fut.set_result(self.work_fn(key, payload))
        except Exception as e:
            fut.set_exception(e)
        return fut


@pytest.fixture(autouse=True)
def quiet_console():
    console = Console(debug=False)
    set_console(console)
    return console


@pytest.fixture
def diamond() -> DependencyGraph:
    return graph_from({"A": [], "B": ["A"], "C": ["A"], "D": ["B", "C"]})

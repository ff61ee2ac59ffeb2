# src/parabuild/dsl.py
from __future__ import annotations

from typing import Dict, List, Optional

from .model import Unit


def unit(
    key: str,
    run: str | None = None,
    *,
    needs: Optional[List[str]] = None,
    cwd: str | None = None,
    env: Optional[Dict[str, str]] = None,
) -> Unit:
    """Create a build unit: unit("app", "tsc -b app", needs=["core"])."""
    if not key:
        raise ValueError("unit() needs a non-empty key")

    return Unit(
        key=key,
        needs=list(needs or []),
        run=run,
        cwd=cwd,
        # force values to str for subprocess env compatibility
        env={k: str(v) for k, v in (env or {}).items()},
    )


def plan(*units: Unit) -> List[Unit]:
    """
    Plan definition helper.

    Users can write:
        from parabuild import plan, unit

        def units():
            return plan(
                unit("core", "make -C core"),
                unit("app", "make -C app", needs=["core"]),
            )

    Or use UNITS directly:
        UNITS = plan(unit(...), unit(...))
    """
    return list(units)

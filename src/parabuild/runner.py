# runner.py
from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import Callable, Dict, Optional

from . import settings
from .errors import CommandFailure, ConfigurationError
from .model import Unit


def run_unit(
    u: Unit,
    root: Path,
    base_env: Optional[Dict[str, str]] = None,
    tail: Optional[int] = None,
) -> None:
    """Run one unit's shell command. A unit without a command does nothing."""
    if not u.run:
        return

    cwd = (root / (u.cwd or ".")).resolve()
    if not cwd.exists():
        raise ConfigurationError(f"[{u.key}] cwd not found: {cwd}", unit=u.key)

    env = dict(base_env if base_env is not None else os.environ)
    env.update(u.env or {})

    proc = subprocess.run(
        u.run,
        shell=True,
        cwd=str(cwd),
        env=env,
        text=True,
        capture_output=True,   # so you can show output on failure
    )

    if proc.returncode != 0:
        if tail is None:
            tail = settings.output_tail()
        raise CommandFailure(
            unit=u.key,
            cmd=u.run,
            exit_code=proc.returncode,
            output=(proc.stdout + proc.stderr)[-tail:],
        )


def make_command_runner(
    root: str | Path = ".",
    base_env: Optional[Dict[str, str]] = None,
) -> Callable[[str, Unit], None]:
    """Work function for PoolExecutor: (key, Unit) -> None, raises on failure."""
    root_p = Path(root).resolve()
    tail = settings.output_tail()

    def _work(key: str, payload: Unit) -> None:
        run_unit(payload, root_p, base_env, tail)

    return _work

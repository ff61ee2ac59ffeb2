# sources.py
from __future__ import annotations

import json
import runpy
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import json5

from . import settings
from .errors import BuildError, ConfigurationError
from .graph import DependencyGraph
from .model import Unit


# ----------------------------------------------------------------------
# Plan files (.py / .json)
# ----------------------------------------------------------------------

def load_plan(path: str | Path) -> List[Unit]:
    """
    Load build units from a plan file.

    A .py file must define either:
      - units() -> List[Unit]
      - UNITS = [Unit, ...]

    A .json file must look like:
      {"units": [{"key": "app", "needs": ["core"], "run": "make app"}]}
    """
    plan_path = Path(path).expanduser().resolve()
    if not plan_path.exists():
        raise ConfigurationError(f"Plan file not found: {plan_path}")

    if plan_path.suffix == ".py":
        return _load_python_plan(plan_path)
    if plan_path.suffix == ".json":
        return _load_json_plan(plan_path)

    raise ConfigurationError(
        f"Plan must be a .py or .json file, got: {plan_path.name}"
    )


def _load_python_plan(plan_path: Path) -> List[Unit]:
    module_name = f"parabuild_plan_{plan_path.stem}"
    try:
        globals_dict = runpy.run_path(str(plan_path), run_name=module_name)

        units = None
        if "units" in globals_dict and callable(globals_dict["units"]):
            units = globals_dict["units"]()
        elif "UNITS" in globals_dict:
            units = globals_dict["UNITS"]
    except BuildError:
        raise
    except Exception as e:
        raise ConfigurationError(
            f"Plan file raised {type(e).__name__}: {e}",
            details={"path": str(plan_path)},
        ) from e

    if not isinstance(units, list) or not all(isinstance(u, Unit) for u in units):
        raise ConfigurationError(
            "Plan must return/define a List[Unit]. "
            "Define units() -> List[Unit] or UNITS = [Unit, ...].",
            details={"path": str(plan_path)},
        )
    return units


def _load_json_plan(plan_path: Path) -> List[Unit]:
    try:
        data = json.loads(plan_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            f"Invalid JSON in plan file: {e}", details={"path": str(plan_path)}
        ) from e

    entries = data.get("units") if isinstance(data, dict) else None
    if not isinstance(entries, list):
        raise ConfigurationError(
            'JSON plan must be an object with a "units" list',
            details={"path": str(plan_path)},
        )

    return [_unit_from_dict(entry, plan_path) for entry in entries]


def _unit_from_dict(entry: Any, plan_path: Path) -> Unit:
    if not isinstance(entry, dict) or not isinstance(entry.get("key"), str):
        raise ConfigurationError(
            f"Every unit needs a string 'key', got: {entry!r}",
            details={"path": str(plan_path)},
        )
    needs = entry.get("needs") or []
    if not isinstance(needs, list):
        raise ConfigurationError(
            "'needs' must be a list", unit=entry["key"], details={"path": str(plan_path)}
        )
    env = entry.get("env") or {}
    if not isinstance(env, dict):
        raise ConfigurationError(
            "'env' must be an object", unit=entry["key"], details={"path": str(plan_path)}
        )
    for field_name in ("run", "cwd"):
        if entry.get(field_name) is not None and not isinstance(entry[field_name], str):
            raise ConfigurationError(
                f"'{field_name}' must be a string",
                unit=entry["key"],
                details={"path": str(plan_path)},
            )
    return Unit(
        key=entry["key"],
        needs=[str(n) for n in needs],
        run=entry.get("run"),
        cwd=entry.get("cwd"),
        env={k: str(v) for k, v in env.items()},
    )


# ----------------------------------------------------------------------
# TypeScript project references
# ----------------------------------------------------------------------

def _resolve_reference(base_dir: Path, ref_path: str) -> Path:
    target = (base_dir / ref_path).resolve()
    if target.is_dir():
        return target / "tsconfig.json"
    return target


def _read_config(config_path: Path) -> Dict[str, Any]:
    """Read a tsconfig. Comments and trailing commas are allowed, as tsc allows them."""
    try:
        text = config_path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ConfigurationError(f"Project config not found: {config_path}") from e

    try:
        config = json5.loads(text)
    except ValueError as e:
        raise ConfigurationError(
            f"Project config is not valid JSON: {e}",
            unit=str(config_path),
        ) from e

    if not isinstance(config, dict):
        raise ConfigurationError(
            "Project config must be a JSON object",
            unit=str(config_path),
        )
    return config


def discover_projects(tsconfig: str | Path, tsc: Optional[str] = None) -> List[Unit]:
    """
    Walk TypeScript project references starting at `tsconfig`.

    Every config reached becomes one unit keyed by its absolute path; its
    references become `needs`. Reference targets that do not exist are kept
    as dependency keys so validation reports them.
    """
    tsc = tsc or settings.tsc_command()
    root = Path(tsconfig).expanduser().resolve()

    units: Dict[Path, Unit] = {}
    stack = [root]
    while stack:
        config_path = stack.pop()
        if config_path in units:
            continue

        config = _read_config(config_path)
        needs: List[str] = []
        for ref in config.get("references") or []:
            if not isinstance(ref, dict) or not isinstance(ref.get("path"), str):
                raise ConfigurationError(
                    f"Malformed reference in {config_path}: {ref!r}", unit=str(config_path)
                )
            dep = _resolve_reference(config_path.parent, ref["path"])
            needs.append(str(dep))
            if dep.exists() and dep not in units:
                stack.append(dep)

        units[config_path] = Unit(
            key=str(config_path),
            needs=needs,
            run=f"{tsc} -b {config_path}",
        )

    return list(units.values())


# ----------------------------------------------------------------------
# Graph assembly
# ----------------------------------------------------------------------

def build_graph(units: List[Unit]) -> Tuple[DependencyGraph, Dict[str, Unit]]:
    """Register every unit, validate, and return the graph plus key -> Unit payloads."""
    graph = DependencyGraph()
    by_key: Dict[str, Unit] = {}
    for u in units:
        graph.register(u.key, u.needs)
        by_key[u.key] = u

    graph.validate()
    return graph, by_key

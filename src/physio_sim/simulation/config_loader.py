"""YAML scenario loader: simulation settings plus scheduled interventions."""

from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Union

import yaml

from physio_sim.core.types import SimulationConfig
from physio_sim.simulation.time_controller import ScheduledIntervention


def load_config(path: Union[str, Path]) -> dict[str, Any]:
    """Load a scenario file.

    Args:
        path: Path to YAML scenario file

    Returns:
        Parsed configuration dictionary (empty for an empty file)
    """
    path = Path(path)
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def config_from_dict(config: dict[str, Any]) -> SimulationConfig:
    """Build a SimulationConfig from the ``simulation`` section.

    Unknown keys are rejected so typos do not silently fall back to defaults.

    Args:
        config: Scenario dictionary (or the bare ``simulation`` section)

    Returns:
        Simulation configuration

    Raises:
        ValueError: If the section names an unknown setting
    """
    section = config.get("simulation", config) or {}
    allowed = {f.name for f in fields(SimulationConfig)}
    unknown = set(section) - allowed - {"interventions"}
    if unknown:
        raise ValueError(
            f"Unknown simulation settings {sorted(unknown)}. Available: {sorted(allowed)}"
        )
    return SimulationConfig(**{k: v for k, v in section.items() if k in allowed})


def interventions_from_config(config: dict[str, Any]) -> list[ScheduledIntervention]:
    """Build the intervention schedule from the ``interventions`` list.

    Each entry has ``time`` and ``action``; remaining keys are the action's
    arguments.

    Args:
        config: Scenario dictionary

    Returns:
        Interventions sorted by time

    Raises:
        ValueError: If an entry names an unknown action
    """
    interventions = []
    for entry in config.get("interventions") or []:
        params = {k: v for k, v in entry.items() if k not in ("time", "action")}
        interventions.append(
            ScheduledIntervention(
                time=float(entry.get("time", 0.0)),
                action=entry["action"],
                params=params,
            )
        )
    return sorted(interventions, key=lambda i: i.time)


def save_config(
    config: SimulationConfig,
    path: Union[str, Path],
    interventions: Union[list[ScheduledIntervention], None] = None,
) -> None:
    """Save a scenario to YAML.

    Args:
        config: Simulation configuration
        path: Output file path
        interventions: Optional intervention schedule
    """
    data: dict[str, Any] = {"simulation": asdict(config)}
    if interventions:
        data["interventions"] = [
            {"time": i.time, "action": i.action, **i.params} for i in interventions
        ]

    path = Path(path)
    with open(path, "w") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)

"""Simulation module for driving patients through time."""

from physio_sim.simulation.simulator import PhysiologySimulator
from physio_sim.simulation.time_controller import (
    INTERVENTION_ACTIONS,
    ScheduledIntervention,
    TimeController,
)
from physio_sim.simulation.config_loader import (
    config_from_dict,
    interventions_from_config,
    load_config,
    save_config,
)

__all__ = [
    "PhysiologySimulator",
    "TimeController",
    "ScheduledIntervention",
    "INTERVENTION_ACTIONS",
    "load_config",
    "config_from_dict",
    "interventions_from_config",
    "save_config",
]

"""Tissue viability models: generic perfusion states and myocardium."""

from physio_sim.tissue.tissue_state import (
    Healthy,
    Hypoperfused,
    Ischemic,
    Injured,
    Necrotic,
    TissueCondition,
    TissueState,
    TissuePerfusion,
    advance_condition,
    supply_ratio,
)
from physio_sim.tissue.myocardium import (
    HealthyCell,
    IschemicCell,
    InjuredCell,
    NecroticCell,
    CellCondition,
    CellularState,
    MyocardialSegment,
    advance_cell,
)

__all__ = [
    # Generic tissue
    "Healthy",
    "Hypoperfused",
    "Ischemic",
    "Injured",
    "Necrotic",
    "TissueCondition",
    "TissueState",
    "TissuePerfusion",
    "advance_condition",
    "supply_ratio",
    # Myocardium
    "HealthyCell",
    "IschemicCell",
    "InjuredCell",
    "NecroticCell",
    "CellCondition",
    "CellularState",
    "MyocardialSegment",
    "advance_cell",
]

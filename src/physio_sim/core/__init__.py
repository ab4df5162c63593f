"""Core types, constants, shared blood medium and organ contract."""

from physio_sim.core.constants import (
    CORONARY_ARTERIES,
    CORONARY_FLOW_RESERVE,
    DEFAULT_CORONARY_FLOWS,
    DEFAULT_LEAD_COUNT,
    SEGMENT_MASS_GRAMS,
    VALID_LEAD_COUNTS,
)
from physio_sim.core.types import (
    ChamberState,
    MyocardialRegion,
    OrganKind,
    Rhythm,
    SimulationConfig,
    VesselType,
    VitalSigns,
)
from physio_sim.core.blood import (
    BloodCells,
    BloodChemistry,
    BloodComposition,
    BloodGases,
)
from physio_sim.core.organ import Organ

__all__ = [
    # Constants
    "CORONARY_ARTERIES",
    "CORONARY_FLOW_RESERVE",
    "DEFAULT_CORONARY_FLOWS",
    "DEFAULT_LEAD_COUNT",
    "SEGMENT_MASS_GRAMS",
    "VALID_LEAD_COUNTS",
    # Types
    "ChamberState",
    "MyocardialRegion",
    "OrganKind",
    "Rhythm",
    "SimulationConfig",
    "VesselType",
    "VitalSigns",
    # Blood medium
    "BloodCells",
    "BloodChemistry",
    "BloodComposition",
    "BloodGases",
    # Organ contract
    "Organ",
]

"""Single blood vessel with Poiseuille-style resistance."""

import math
from dataclasses import dataclass, field

from physio_sim.core.constants import (
    CRITICAL_STENOSIS,
    MIN_RADIUS_MM,
    PLAQUE_LUMEN_FACTOR,
    POISEUILLE_FLOW_SCALE,
    TONE_DIAMETER_FACTOR,
)
from physio_sim.core.types import VesselType


@dataclass
class Vessel:
    """A named vessel segment (or an aggregate of many small ones).

    Attributes:
        name: Unique vessel name
        vessel_type: Vessel class
        diameter_mm: Current lumen diameter without plaque
        length_cm: Vessel length
        baseline_diameter_mm: Reference diameter for tone changes
        plaque_buildup: Atherosclerotic burden (0-0.99)
        smooth_muscle_tone: Vasoconstriction level (0-1)
        endothelial_health: Lining integrity (0-1)
        inflammation: Wall inflammation (0-1)
        elasticity: Wall compliance (0.2-1)
        flow_rate_ml_per_min: Current flow through the vessel
        pressure_mmhg: Intraluminal pressure
    """

    name: str
    vessel_type: VesselType
    diameter_mm: float
    length_cm: float
    baseline_diameter_mm: float = field(init=False)
    plaque_buildup: float = 0.0
    smooth_muscle_tone: float = 0.5
    endothelial_health: float = 1.0
    inflammation: float = 0.0
    elasticity: float = 0.8
    flow_rate_ml_per_min: float = 0.0
    pressure_mmhg: float = field(init=False)

    def __post_init__(self):
        self.baseline_diameter_mm = self.diameter_mm
        self.pressure_mmhg = self.vessel_type.typical_pressure

    @property
    def effective_diameter_mm(self) -> float:
        """Lumen diameter left open by plaque."""
        return self.diameter_mm * (1.0 - self.plaque_buildup * PLAQUE_LUMEN_FACTOR)

    @property
    def effective_radius_mm(self) -> float:
        return max(self.effective_diameter_mm / 2.0, MIN_RADIUS_MM)

    @property
    def wall_thickness_mm(self) -> float:
        return self.diameter_mm * self.vessel_type.wall_thickness_ratio

    @property
    def cross_section_cm2(self) -> float:
        radius_cm = self.effective_radius_mm / 10.0
        return math.pi * radius_cm**2

    @property
    def blood_volume_ml(self) -> float:
        """Volume held by the vessel: π r² L (cm³ = mL)."""
        return self.cross_section_cm2 * self.length_cm

    @property
    def velocity_cm_per_s(self) -> float:
        area = self.cross_section_cm2
        if area <= 0.0:
            return 0.0
        return self.flow_rate_ml_per_min / 60.0 / area

    def flow_resistance(self) -> float:
        """Simplified Poiseuille resistance: length / r⁴ (no viscosity term)."""
        return self.length_cm / self.effective_radius_mm**4

    def conductance(self) -> float:
        resistance = self.flow_resistance()
        return 1.0 / resistance if resistance > 0.0 else 0.0

    def calculate_flow_rate(self, upstream_pressure: float, downstream_pressure: float) -> float:
        """Set and return the pressure-driven flow through the vessel.

        Args:
            upstream_pressure: Inlet pressure (mmHg)
            downstream_pressure: Outlet pressure (mmHg)

        Returns:
            Flow in mL/min (0 for a non-positive pressure gradient)
        """
        delta_p = upstream_pressure - downstream_pressure
        resistance = self.flow_resistance()
        if resistance > 0.0 and delta_p > 0.0:
            self.flow_rate_ml_per_min = delta_p / resistance * POISEUILLE_FLOW_SCALE
        else:
            self.flow_rate_ml_per_min = 0.0
        return self.flow_rate_ml_per_min

    def _apply_tone(self) -> None:
        self.diameter_mm = self.baseline_diameter_mm * (
            1.0 - self.smooth_muscle_tone * TONE_DIAMETER_FACTOR
        )

    def constrict(self, amount: float) -> None:
        self.smooth_muscle_tone = min(max(self.smooth_muscle_tone + amount, 0.0), 1.0)
        self._apply_tone()

    def dilate(self, amount: float) -> None:
        self.smooth_muscle_tone = min(max(self.smooth_muscle_tone - amount, 0.0), 1.0)
        self._apply_tone()

    def is_critically_stenosed(self) -> bool:
        return self.plaque_buildup > CRITICAL_STENOSIS

"""Vascular network organ: vessel collection, resistance and flow solver."""

import logging
from typing import Optional

import numpy as np

from physio_sim.core.blood import BloodComposition
from physio_sim.core.constants import (
    ARTERIAL_FLOW_FRACTION,
    DEFAULT_CARDIAC_OUTPUT_L_MIN,
    MAX_PLAQUE,
    MAX_THROMBOTIC_PLAQUE,
    THROMBUS_BURDEN,
    TPR_RANGE,
    VENOUS_FLOW_FRACTION,
    VULNERABLE_PLAQUE,
)
from physio_sim.core.organ import Organ
from physio_sim.core.types import OrganKind, VesselType
from physio_sim.vascular.vessel import Vessel

logger = logging.getLogger(__name__)

# (name, type, diameter mm, length cm); small vessels are network aggregates
DEFAULT_VESSELS: list[tuple[str, VesselType, float, float]] = [
    ("Aorta", VesselType.ARTERY, 25.0, 40.0),
    ("Left Main Coronary", VesselType.ARTERY, 4.5, 1.0),
    ("LAD", VesselType.ARTERY, 3.5, 12.0),
    ("LCx", VesselType.ARTERY, 3.0, 8.0),
    ("RCA", VesselType.ARTERY, 3.5, 15.0),
    ("Carotid Artery (L)", VesselType.ARTERY, 8.0, 20.0),
    ("Carotid Artery (R)", VesselType.ARTERY, 8.0, 20.0),
    ("Subclavian Artery (L)", VesselType.ARTERY, 9.0, 15.0),
    ("Subclavian Artery (R)", VesselType.ARTERY, 9.0, 15.0),
    ("Brachial Artery (L)", VesselType.ARTERY, 5.0, 30.0),
    ("Brachial Artery (R)", VesselType.ARTERY, 5.0, 30.0),
    ("Radial Artery (L)", VesselType.ARTERY, 3.0, 25.0),
    ("Radial Artery (R)", VesselType.ARTERY, 3.0, 25.0),
    ("Celiac Artery", VesselType.ARTERY, 7.0, 10.0),
    ("Renal Artery (L)", VesselType.ARTERY, 5.0, 8.0),
    ("Renal Artery (R)", VesselType.ARTERY, 5.0, 8.0),
    ("Iliac Artery (L)", VesselType.ARTERY, 10.0, 15.0),
    ("Iliac Artery (R)", VesselType.ARTERY, 10.0, 15.0),
    ("Femoral Artery (L)", VesselType.ARTERY, 8.0, 40.0),
    ("Femoral Artery (R)", VesselType.ARTERY, 8.0, 40.0),
    ("Superior Vena Cava", VesselType.VEIN, 20.0, 15.0),
    ("Inferior Vena Cava", VesselType.VEIN, 22.0, 35.0),
    ("Jugular Vein (L)", VesselType.VEIN, 10.0, 20.0),
    ("Jugular Vein (R)", VesselType.VEIN, 10.0, 20.0),
    ("Subclavian Vein (L)", VesselType.VEIN, 12.0, 15.0),
    ("Subclavian Vein (R)", VesselType.VEIN, 12.0, 15.0),
    ("Femoral Vein (L)", VesselType.VEIN, 10.0, 40.0),
    ("Femoral Vein (R)", VesselType.VEIN, 10.0, 40.0),
    ("Renal Vein (L)", VesselType.VEIN, 6.0, 8.0),
    ("Renal Vein (R)", VesselType.VEIN, 6.0, 8.0),
    ("Systemic Arterioles", VesselType.ARTERIOLE, 0.5, 1000.0),
    ("Systemic Capillaries", VesselType.CAPILLARY, 1.6, 10000.0),
    ("Systemic Venules", VesselType.VENULE, 0.5, 1000.0),
]


class VascularNetwork(Organ):
    """Named vessel collection with per-tick hemodynamic bookkeeping.

    Arterial flow is the cardiac output split among arteries in proportion to
    conductance (a parallel circuit), so narrowing one artery starves it
    while its neighbours gain a little.

    Attributes:
        vessels: Vessels keyed by name
        total_blood_volume_l: Circulating volume
        arterial_blood_volume_ml: Volume in arteries and arterioles
        venous_blood_volume_ml: Volume in veins and venules
        capillary_blood_volume_ml: Volume in capillaries
        arterial_compliance: Mean arterial elasticity × endothelial health
        venous_compliance: Venous compliance
        total_peripheral_resistance: Normalized TPR (0.5-3.0)
        capillary_permeability: Capillary leakiness (0.3-0.9)
        nitric_oxide_level: Endothelial vasodilator (0.2-2.0)
        endothelin_level: Endothelial vasoconstrictor (0.5-2.5)
        atherosclerosis_progression: Current plaque risk composite
        cardiac_output_l_per_min: Output driving the flows
        venous_return_l_per_min: Blood returning to the heart
        mean_arterial_pressure: Last MAP read from the blood
        central_venous_pressure: CVP (mmHg)
    """

    kind = OrganKind.VASCULAR

    def __init__(
        self,
        organ_id: int,
        vessels: Optional[list[Vessel]] = None,
    ):
        """Initialize the network.

        Args:
            organ_id: Organ identifier
            vessels: Vessels to use (defaults to the standard adult tree)
        """
        super().__init__(organ_id)
        if vessels is None:
            vessels = [Vessel(*spec) for spec in DEFAULT_VESSELS]
        self.vessels: dict[str, Vessel] = {v.name: v for v in vessels}

        self.total_blood_volume_l = 5.0
        self.arterial_blood_volume_ml = 0.0
        self.venous_blood_volume_ml = 0.0
        self.capillary_blood_volume_ml = 0.0
        self.arterial_compliance = 0.8
        self.venous_compliance = 0.9
        self.total_peripheral_resistance = 1.0
        self.capillary_permeability = 0.5
        self.nitric_oxide_level = 1.0
        self.endothelin_level = 1.0
        self.atherosclerosis_progression = 0.0
        self.mean_arterial_pressure = 93.0
        self.central_venous_pressure = 5.0

        self.calculate_blood_distribution()
        self._reference_venous_volume_ml = max(self.venous_blood_volume_ml, 1.0)
        self.venous_return_l_per_min = DEFAULT_CARDIAC_OUTPUT_L_MIN
        self.calculate_venous_return()
        self.cardiac_output_l_per_min = self.venous_return_l_per_min
        self.calculate_flow_rates(self.cardiac_output_l_per_min * 1000.0)

        # Flows of the untouched network; perfusion ratios are taken against these
        self.reference_flows: dict[str, float] = {
            name: v.flow_rate_ml_per_min for name, v in self.vessels.items()
        }

    def _resistance_vessels(self) -> list[Vessel]:
        return [v for v in self.vessels.values() if v.vessel_type.is_resistance_vessel]

    def _of_type(self, *types: VesselType) -> list[Vessel]:
        return [v for v in self.vessels.values() if v.vessel_type in types]

    def get_vessel(self, name: str) -> Optional[Vessel]:
        return self.vessels.get(name)

    def _require(self, name: str, action: str) -> Optional[Vessel]:
        vessel = self.vessels.get(name)
        if vessel is None:
            logger.warning(
                "Cannot %s unknown vessel '%s'. Available: %s",
                action,
                name,
                sorted(self.vessels),
            )
        return vessel

    def flow_resistance(self, name: str) -> Optional[float]:
        vessel = self.get_vessel(name)
        return vessel.flow_resistance() if vessel is not None else None

    def calculate_total_resistance(self) -> float:
        """Summed artery and arteriole resistance, normalized and clamped."""
        total = sum(v.flow_resistance() for v in self._resistance_vessels())
        return float(np.clip(total / 1000.0, *TPR_RANGE))

    def critically_stenosed_count(self) -> int:
        return sum(1 for v in self.vessels.values() if v.is_critically_stenosed())

    def average_vessel_health(self) -> float:
        if not self.vessels:
            return 0.0
        return float(np.mean([v.endothelial_health for v in self.vessels.values()]))

    def average_plaque_burden(self) -> float:
        if not self.vessels:
            return 0.0
        return float(np.mean([v.plaque_buildup for v in self.vessels.values()]))

    def average_inflammation(self) -> float:
        if not self.vessels:
            return 0.0
        return float(np.mean([v.inflammation for v in self.vessels.values()]))

    def calculate_blood_distribution(self) -> None:
        self.arterial_blood_volume_ml = sum(v.blood_volume_ml for v in self._resistance_vessels())
        self.venous_blood_volume_ml = sum(
            v.blood_volume_ml for v in self._of_type(VesselType.VEIN, VesselType.VENULE)
        )
        self.capillary_blood_volume_ml = sum(
            v.blood_volume_ml for v in self._of_type(VesselType.CAPILLARY)
        )

    def calculate_flow_rates(self, cardiac_output_ml_per_min: float) -> None:
        """Distribute cardiac output through every vessel.

        Args:
            cardiac_output_ml_per_min: Total output entering the arterial tree
        """
        cardiac_output_ml_per_min = max(cardiac_output_ml_per_min, 0.0)
        arteries = self._of_type(VesselType.ARTERY)
        total_conductance = sum(v.conductance() for v in arteries)
        venous_volume = max(self.venous_blood_volume_ml, 1.0)

        for vessel in self.vessels.values():
            if vessel.vessel_type == VesselType.ARTERY:
                if total_conductance > 0.0:
                    share = vessel.conductance() / total_conductance
                    vessel.flow_rate_ml_per_min = (
                        cardiac_output_ml_per_min * share * ARTERIAL_FLOW_FRACTION
                    )
                else:
                    vessel.flow_rate_ml_per_min = 0.0
            elif vessel.vessel_type in (VesselType.ARTERIOLE, VesselType.CAPILLARY):
                vessel.calculate_flow_rate(vessel.pressure_mmhg, vessel.pressure_mmhg - 20.0)
            else:
                fraction = vessel.blood_volume_ml / venous_volume
                vessel.flow_rate_ml_per_min = (
                    cardiac_output_ml_per_min * fraction * VENOUS_FLOW_FRACTION
                )

    def calculate_venous_return(self) -> None:
        volume_factor = self.venous_blood_volume_ml / self._reference_venous_volume_ml
        self.venous_return_l_per_min = float(
            np.clip(
                DEFAULT_CARDIAC_OUTPUT_L_MIN
                * volume_factor
                * (self.total_blood_volume_l / 5.0)
                * self.venous_compliance,
                2.0,
                10.0,
            )
        )

    def total_arterial_flow(self) -> float:
        return sum(v.flow_rate_ml_per_min for v in self._of_type(VesselType.ARTERY))

    def total_venous_flow(self) -> float:
        return sum(v.flow_rate_ml_per_min for v in self._of_type(VesselType.VEIN))

    def add_plaque(self, name: str, amount: float) -> bool:
        """Increase plaque burden of a vessel (capped at 0.99).

        Args:
            name: Vessel name
            amount: Plaque fraction to add

        Returns:
            False if the vessel does not exist
        """
        vessel = self._require(name, "add plaque to")
        if vessel is None:
            return False
        vessel.plaque_buildup = min(max(vessel.plaque_buildup + amount, 0.0), MAX_PLAQUE)
        return True

    def rupture_plaque(self, name: str) -> bool:
        """Rupture a vulnerable plaque, forming an occlusive thrombus.

        Only plaque above 0.3 can rupture; smaller burdens are left unchanged.

        Args:
            name: Vessel name

        Returns:
            True if a thrombus formed
        """
        vessel = self._require(name, "rupture plaque in")
        if vessel is None:
            return False
        if vessel.plaque_buildup <= VULNERABLE_PLAQUE:
            logger.warning(
                "Plaque in %s (%.2f) is not vulnerable; no rupture", name, vessel.plaque_buildup
            )
            return False
        vessel.plaque_buildup = min(vessel.plaque_buildup + THROMBUS_BURDEN, MAX_THROMBOTIC_PLAQUE)
        vessel.inflammation = 1.0
        logger.info("Plaque rupture in %s: stenosis now %.0f%%", name, vessel.plaque_buildup * 100)
        return True

    def constrict(self, name: str, amount: float) -> bool:
        vessel = self._require(name, "constrict")
        if vessel is None:
            return False
        vessel.constrict(amount)
        return True

    def dilate(self, name: str, amount: float) -> bool:
        vessel = self._require(name, "dilate")
        if vessel is None:
            return False
        vessel.dilate(amount)
        return True

    def get_coronary_flow(self, artery: str) -> float:
        """Current flow through an artery (0.0 if not found)."""
        vessel = self.get_vessel(artery)
        return vessel.flow_rate_ml_per_min if vessel is not None else 0.0

    def get_coronary_perfusion_ratio(self, artery: str) -> Optional[float]:
        """Current flow relative to the untouched network's flow.

        Returns:
            Ratio, or None if the artery is unknown
        """
        vessel = self.get_vessel(artery)
        if vessel is None:
            return None
        reference = self.reference_flows.get(artery, 0.0)
        if reference <= 0.0:
            return 0.0
        return vessel.flow_rate_ml_per_min / reference

    def update(self, blood: BloodComposition, dt: float) -> None:
        self.mean_arterial_pressure = blood.mean_arterial_pressure

        # Pressure follows resistance and volume
        self.total_peripheral_resistance = self.calculate_total_resistance()
        resistance_effect = (self.total_peripheral_resistance - 1.0) * 20.0
        volume_effect = (self.total_blood_volume_l - 5.0) * 5.0
        blood.systolic_bp += (resistance_effect + volume_effect) * 0.01
        blood.diastolic_bp += (resistance_effect + volume_effect) * 0.007

        # Endothelial signalling
        o2_sat = blood.gases.sao2_percent / 100.0
        inflammation = self.average_inflammation()
        self.nitric_oxide_level = float(
            np.clip(
                self.nitric_oxide_level * 0.95 + self.average_vessel_health() * o2_sat * 0.05,
                0.2,
                2.0,
            )
        )
        endothelin_target = 1.0 + inflammation * 0.5 + (1.0 - o2_sat) * 0.5
        self.endothelin_level = float(
            np.clip(self.endothelin_level * 0.96 + endothelin_target * 0.04, 0.5, 2.5)
        )

        angiotensin_signal = (blood.chemistry.angiotensin_ii_au - 1.0) * 0.5
        net_tone_change = (
            (self.endothelin_level - 1.0) + angiotensin_signal - (self.nitric_oxide_level - 1.0)
        ) * 0.01 * dt
        for vessel in self._resistance_vessels():
            if net_tone_change > 0.0:
                vessel.constrict(net_tone_change)
            else:
                vessel.dilate(-net_tone_change)

        self._progress_atherosclerosis(blood, dt)

        arteries = self._of_type(VesselType.ARTERY)
        if arteries:
            self.arterial_compliance = float(
                np.mean([v.elasticity * v.endothelial_health for v in arteries])
            )
        else:
            self.arterial_compliance = 0.5
        self.capillary_permeability = float(np.clip(0.5 + inflammation * 0.3, 0.3, 0.9))

        sodium_effect = (blood.chemistry.sodium_meq_l - 140.0) / 140.0
        self.total_blood_volume_l = float(
            np.clip(self.total_blood_volume_l + sodium_effect * 0.001 * dt, 3.0, 7.0)
        )

        elasticity_loss = blood.chemistry.toxin_level_au * 1e-5 * dt
        if blood.chemistry.glucose_mg_dl > 180.0:
            elasticity_loss += 1e-5 * dt
        for vessel in self.vessels.values():
            vessel.elasticity = max(vessel.elasticity - elasticity_loss, 0.2)

        self.calculate_blood_distribution()
        self.calculate_venous_return()
        # The heart cannot pump more than returns to it
        self.cardiac_output_l_per_min = min(
            self.venous_return_l_per_min, max(blood.cardiac_output_l_per_min, 0.0)
        )
        self.calculate_flow_rates(self.cardiac_output_l_per_min * 1000.0)

        volume_ratio = self.venous_blood_volume_ml / self._reference_venous_volume_ml
        self.central_venous_pressure = float(np.clip(5.0 * volume_ratio, 0.0, 15.0))

    def _progress_atherosclerosis(self, blood: BloodComposition, dt: float) -> None:
        chem = blood.chemistry
        ldl_risk = max(chem.ldl_cholesterol_mg_dl - 100.0, 0.0) / 100.0
        hdl_risk = max(60.0 - chem.hdl_cholesterol_mg_dl, 0.0) / 60.0
        glucose_risk = max(chem.glucose_mg_dl - 100.0, 0.0) / 100.0
        self.atherosclerosis_progression = (ldl_risk + hdl_risk + glucose_risk) / 3.0

        growth = self.atherosclerosis_progression * 1e-5 * dt
        for vessel in self._of_type(VesselType.ARTERY):
            vessel.plaque_buildup = min(vessel.plaque_buildup + growth, MAX_THROMBOTIC_PLAQUE)
            if vessel.plaque_buildup > VULNERABLE_PLAQUE:
                vessel.inflammation = min(vessel.inflammation + 0.001 * dt, 1.0)
            if vessel.inflammation > 0.3:
                vessel.endothelial_health = max(vessel.endothelial_health - 1e-4 * dt, 0.1)

    def summary(self) -> str:
        return (
            f"Vascular: TPR={self.total_peripheral_resistance:.2f}, "
            f"MAP={self.mean_arterial_pressure:.0f} mmHg, CVP={self.central_venous_pressure:.1f} mmHg, "
            f"Vol={self.total_blood_volume_l:.2f} L, CO={self.cardiac_output_l_per_min:.2f} L/min, "
            f"VR={self.venous_return_l_per_min:.2f} L/min, "
            f"Health={self.average_vessel_health() * 100:.1f}%, "
            f"Plaque={self.average_plaque_burden() * 100:.1f}%, "
            f"Stenoses={self.critically_stenosed_count()}, "
            f"NO={self.nitric_oxide_level:.2f}, ET-1={self.endothelin_level:.2f}"
        )

"""Shared blood medium read and written by every organ each tick."""

from dataclasses import dataclass, field
from typing import Any

from physio_sim.core.constants import (
    CORONARY_ARTERIES,
    DEFAULT_CARDIAC_OUTPUT_L_MIN,
    DEFAULT_CORONARY_FLOWS,
)


@dataclass
class BloodCells:
    """Complete blood count, normal adult values."""

    rbc_count_million_per_ul: float = 5.0
    hemoglobin_g_dl: float = 14.5
    hematocrit_percent: float = 42.0
    wbc_count_per_ul: float = 7250.0
    platelet_count_thousand_per_ul: float = 250.0


@dataclass
class BloodChemistry:
    """Metabolic panel and circulating signalling molecules."""

    glucose_mg_dl: float = 90.0
    sodium_meq_l: float = 140.0
    potassium_meq_l: float = 4.0
    creatinine_mg_dl: float = 0.9
    hdl_cholesterol_mg_dl: float = 55.0
    ldl_cholesterol_mg_dl: float = 100.0
    lactate_mmol_l: float = 1.0
    toxin_level_au: float = 0.0
    angiotensin_ii_au: float = 1.0  # normal RAAS activity


@dataclass
class BloodGases:
    """Arterial blood gas."""

    ph: float = 7.4
    pao2_mmhg: float = 95.0
    paco2_mmhg: float = 40.0
    hco3_meq_l: float = 24.0
    sao2_percent: float = 98.0

    def acid_base_status(self) -> str:
        if self.ph < 7.35:
            if self.paco2_mmhg > 45.0:
                return "Respiratory Acidosis"
            if self.hco3_meq_l < 22.0:
                return "Metabolic Acidosis"
            return "Mixed Acidosis"
        if self.ph > 7.45:
            if self.paco2_mmhg < 35.0:
                return "Respiratory Alkalosis"
            if self.hco3_meq_l > 26.0:
                return "Metabolic Alkalosis"
            return "Mixed Alkalosis"
        return "Normal"


@dataclass
class BloodComposition:
    """The patient's single shared blood record.

    Organs receive it for the duration of their own update and see writes made
    earlier in the same tick.

    Attributes:
        cells: Blood cell counts
        chemistry: Chemistry panel
        gases: Arterial blood gas
        systolic_bp: Aortic systolic pressure (mmHg)
        diastolic_bp: Aortic diastolic pressure (mmHg)
        cardiac_output_l_per_min: Output published by the heart
        coronary_flows: Flow per coronary artery (mL/min)
    """

    cells: BloodCells = field(default_factory=BloodCells)
    chemistry: BloodChemistry = field(default_factory=BloodChemistry)
    gases: BloodGases = field(default_factory=BloodGases)
    systolic_bp: float = 120.0
    diastolic_bp: float = 80.0
    cardiac_output_l_per_min: float = DEFAULT_CARDIAC_OUTPUT_L_MIN
    coronary_flows: dict[str, float] = field(
        default_factory=lambda: dict(DEFAULT_CORONARY_FLOWS)
    )

    @property
    def mean_arterial_pressure(self) -> float:
        return self.diastolic_bp + (self.systolic_bp - self.diastolic_bp) / 3.0

    def oxygen_content(self) -> float:
        """Arterial O2 content in mL O2/dL: Hb × 1.34 × SaO2 + 0.003 × PaO2."""
        return (
            self.cells.hemoglobin_g_dl * 1.34 * self.gases.sao2_percent / 100.0
            + 0.003 * self.gases.pao2_mmhg
        )

    def coronary_flow(self, artery: str) -> float:
        """Flow in a coronary artery, falling back to its resting default."""
        return self.coronary_flows.get(artery, DEFAULT_CORONARY_FLOWS.get(artery, 0.0))

    def set_value(self, path: str, value: Any) -> None:
        """Set a field by dotted path, e.g. ``"chemistry.toxin_level_au"``.

        ``coronary_flows.<artery>`` addresses a single coronary artery.

        Args:
            path: Dotted attribute path
            value: New value

        Raises:
            ValueError: If the path does not name an existing field
        """
        parts = path.split(".")
        if len(parts) == 2 and parts[0] == "coronary_flows":
            if parts[1] not in CORONARY_ARTERIES:
                raise ValueError(
                    f"Unknown coronary artery '{parts[1]}'. Available: {list(CORONARY_ARTERIES)}"
                )
            self.coronary_flows[parts[1]] = float(value)
            return

        target: Any = self
        for part in parts[:-1]:
            if not hasattr(target, part):
                raise ValueError(f"Unknown blood field '{path}'")
            target = getattr(target, part)
        # Only numeric leaves are settable
        if not isinstance(getattr(target, parts[-1], None), (int, float)):
            raise ValueError(f"Unknown blood field '{path}'")
        setattr(target, parts[-1], float(value))

    def summary(self) -> str:
        return (
            f"Hgb: {self.cells.hemoglobin_g_dl:.1f} g/dL | Plt: "
            f"{self.cells.platelet_count_thousand_per_ul:.0f}K/uL\n"
            f"pH: {self.gases.ph:.2f} | PaO2: {self.gases.pao2_mmhg:.0f} mmHg | "
            f"SaO2: {self.gases.sao2_percent:.1f}%\n"
            f"Na: {self.chemistry.sodium_meq_l:.1f} | K: {self.chemistry.potassium_meq_l:.1f} | "
            f"Glucose: {self.chemistry.glucose_mg_dl:.0f} mg/dL\n"
            f"BP: {self.systolic_bp:.0f}/{self.diastolic_bp:.0f} mmHg | "
            f"MAP: {self.mean_arterial_pressure:.0f} mmHg"
        )

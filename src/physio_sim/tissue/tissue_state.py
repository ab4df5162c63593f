"""Generic tissue viability state machine driven by oxygen supply and demand.

A tissue unit is always in exactly one condition:

    Healthy → Hypoperfused → Ischemic → Injured → Necrotic

Reversible conditions may fall back to Healthy (or from Ischemic to Injured
on late reperfusion). Necrotic is terminal and only ages. Recovery and
progression use different supply-ratio thresholds, giving the machine
hysteresis around the 0.8-0.9 band.
"""

from dataclasses import dataclass, field, replace
from typing import Optional, Union

from physio_sim.core.constants import (
    SECONDS_PER_DAY,
    TISSUE_HEALED_SEVERITY,
    TISSUE_HYPOPERFUSION_LIMIT_S,
    TISSUE_HYPOPERFUSION_RATIO,
    TISSUE_INJURY_HEAL_RATE,
    TISSUE_INJURY_WORSEN_RATE,
    TISSUE_ISCHEMIA_LIMIT_S,
    TISSUE_ISCHEMIA_RATIO,
    TISSUE_NECROSIS_DURATION_S,
    TISSUE_NECROSIS_SEVERITY,
    TISSUE_O2_PER_GRAM,
    TISSUE_REPERFUSION_RATIO,
    TISSUE_REVERSIBLE_ISCHEMIA_S,
)


def _clamp_unit(value: float) -> float:
    return min(max(value, 0.0), 1.0)


@dataclass(frozen=True)
class Healthy:
    """Well-perfused tissue."""


@dataclass(frozen=True)
class Hypoperfused:
    """Reduced but viable perfusion."""

    duration_seconds: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "duration_seconds", max(self.duration_seconds, 0.0))


@dataclass(frozen=True)
class Ischemic:
    """O2 delivery critically low; still reversible."""

    duration_seconds: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "duration_seconds", max(self.duration_seconds, 0.0))


@dataclass(frozen=True)
class Injured:
    """Cellular damage in progress.

    Attributes:
        duration_seconds: Time spent under-perfused while injured
        severity: Fraction of the unit that is damaged (0-1)
    """

    duration_seconds: float = 0.0
    severity: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "duration_seconds", max(self.duration_seconds, 0.0))
        object.__setattr__(self, "severity", _clamp_unit(self.severity))


@dataclass(frozen=True)
class Necrotic:
    """Dead tissue.

    Attributes:
        days_old: Age of the infarct in days
        extent: Fraction of the unit that is dead (0-1), fixed at onset
    """

    days_old: float = 0.0
    extent: float = 1.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "days_old", max(self.days_old, 0.0))
        object.__setattr__(self, "extent", _clamp_unit(self.extent))


TissueCondition = Union[Healthy, Hypoperfused, Ischemic, Injured, Necrotic]


def supply_ratio(oxygen_delivery: float, oxygen_demand: float) -> float:
    """O2 delivery / demand; 1.0 when there is no demand."""
    if oxygen_demand > 0.0:
        return oxygen_delivery / oxygen_demand
    return 1.0


def advance_condition(condition: TissueCondition, ratio: float, dt: float) -> TissueCondition:
    """Return the condition reached after ``dt`` seconds at supply ``ratio``.

    Args:
        condition: Current tissue condition
        ratio: O2 delivery / O2 demand
        dt: Time step in seconds

    Returns:
        The next condition (may be the same object when nothing changes)

    Raises:
        TypeError: If ``condition`` is not a tissue condition
    """
    dt = max(dt, 0.0)

    if isinstance(condition, Healthy):
        if ratio < TISSUE_HYPOPERFUSION_RATIO:
            return Hypoperfused()
        return condition

    if isinstance(condition, Hypoperfused):
        if ratio >= TISSUE_HYPOPERFUSION_RATIO:
            return Healthy()
        if ratio < TISSUE_ISCHEMIA_RATIO:
            return Ischemic()
        elapsed = condition.duration_seconds + dt
        if elapsed > TISSUE_HYPOPERFUSION_LIMIT_S:
            return Ischemic()
        return Hypoperfused(elapsed)

    if isinstance(condition, Ischemic):
        if ratio >= TISSUE_REPERFUSION_RATIO:
            if condition.duration_seconds < TISSUE_REVERSIBLE_ISCHEMIA_S:
                return Healthy()
            return Injured(severity=min(condition.duration_seconds / TISSUE_ISCHEMIA_LIMIT_S, 0.5))
        elapsed = condition.duration_seconds + dt
        if elapsed > TISSUE_ISCHEMIA_LIMIT_S:
            return Injured(severity=min(elapsed / 3600.0, 1.0))
        return Ischemic(elapsed)

    if isinstance(condition, Injured):
        if ratio >= TISSUE_REPERFUSION_RATIO:
            severity = max(condition.severity - TISSUE_INJURY_HEAL_RATE * dt, 0.0)
            if severity < TISSUE_HEALED_SEVERITY:
                return Healthy()
            return replace(condition, severity=severity)
        elapsed = condition.duration_seconds + dt
        severity = min(condition.severity + TISSUE_INJURY_WORSEN_RATE * dt, 1.0)
        if elapsed > TISSUE_NECROSIS_DURATION_S and severity > TISSUE_NECROSIS_SEVERITY:
            return Necrotic(extent=severity)
        return Injured(elapsed, severity)

    if isinstance(condition, Necrotic):
        return replace(condition, days_old=condition.days_old + dt / SECONDS_PER_DAY)

    raise TypeError(f"Unknown tissue condition: {condition!r}")


def functional_capacity(condition: TissueCondition) -> float:
    """Fraction of normal function the tissue still provides (0-1)."""
    if isinstance(condition, Healthy):
        return 1.0
    if isinstance(condition, Hypoperfused):
        return max(1.0 - condition.duration_seconds / 600.0 * 0.2, 0.7)
    if isinstance(condition, Ischemic):
        return max(0.7 - condition.duration_seconds / 1800.0 * 0.5, 0.2)
    if isinstance(condition, Injured):
        return 1.0 - condition.severity
    if isinstance(condition, Necrotic):
        return 1.0 - condition.extent
    raise TypeError(f"Unknown tissue condition: {condition!r}")


def inflammation_level(condition: TissueCondition) -> float:
    """Inflammatory cytokine output of the tissue."""
    if isinstance(condition, (Healthy, Hypoperfused)):
        return 0.0
    if isinstance(condition, Ischemic):
        return min(condition.duration_seconds / 1800.0, 0.5)
    if isinstance(condition, Injured):
        return condition.severity
    if isinstance(condition, Necrotic):
        # Acute necrosis is highly inflammatory for the first three days
        if condition.days_old < 3.0:
            return condition.extent * (1.0 - condition.days_old / 3.0)
        return 0.1 * condition.extent
    raise TypeError(f"Unknown tissue condition: {condition!r}")


def oxygen_consumption_rate(condition: TissueCondition) -> float:
    """O2 consumption relative to healthy baseline."""
    if isinstance(condition, Healthy):
        return 1.0
    if isinstance(condition, Hypoperfused):
        return 0.9
    if isinstance(condition, Ischemic):
        return 0.3  # anaerobic
    if isinstance(condition, Injured):
        return 0.8 - condition.severity * 0.5
    if isinstance(condition, Necrotic):
        return 1.0 - condition.extent
    raise TypeError(f"Unknown tissue condition: {condition!r}")


def lactate_production_rate(condition: TissueCondition) -> float:
    """Lactic acid production from anaerobic metabolism."""
    if isinstance(condition, (Healthy, Hypoperfused, Necrotic)):
        return 0.0
    if isinstance(condition, Ischemic):
        return min(condition.duration_seconds / 600.0, 2.0)
    if isinstance(condition, Injured):
        return condition.severity * 0.5
    raise TypeError(f"Unknown tissue condition: {condition!r}")


class TissueState:
    """Mutable viability state of one tissue unit.

    Created Healthy and advanced once per tick with :meth:`progress`.

    Attributes:
        condition: Current tagged condition
    """

    def __init__(self, condition: Optional[TissueCondition] = None):
        self.condition: TissueCondition = condition if condition is not None else Healthy()

    def __repr__(self) -> str:
        return f"TissueState({self.condition!r})"

    @property
    def name(self) -> str:
        """Condition name, e.g. "Ischemic"."""
        return type(self.condition).__name__

    def progress(self, oxygen_delivery: float, oxygen_demand: float, dt: float) -> TissueCondition:
        """Advance the state by one tick.

        Args:
            oxygen_delivery: O2 delivered (mL/min)
            oxygen_demand: O2 required (mL/min)
            dt: Time step in seconds

        Returns:
            The new condition
        """
        ratio = supply_ratio(oxygen_delivery, oxygen_demand)
        self.condition = advance_condition(self.condition, ratio, dt)
        return self.condition

    def functional_capacity(self) -> float:
        return functional_capacity(self.condition)

    def inflammation_level(self) -> float:
        return inflammation_level(self.condition)

    def oxygen_consumption_rate(self) -> float:
        return oxygen_consumption_rate(self.condition)

    def lactate_production_rate(self) -> float:
        return lactate_production_rate(self.condition)


@dataclass
class TissuePerfusion:
    """Perfusion bookkeeping for a generic organ tissue mass.

    Consumption scales with the organ-wide metabolic rate and the tissue's
    own condition.

    Attributes:
        tissue_mass_grams: Tissue mass
        baseline_flow_ml_per_min: Normal blood flow
        blood_flow_ml_per_min: Current blood flow
        oxygen_delivery_ml_per_min: Current O2 delivery
        oxygen_consumption_ml_per_min: Current O2 demand
        state: Viability state machine
    """

    tissue_mass_grams: float
    baseline_flow_ml_per_min: float
    blood_flow_ml_per_min: float = 0.0
    oxygen_delivery_ml_per_min: float = 0.0
    oxygen_consumption_ml_per_min: float = 0.0
    state: TissueState = field(default_factory=TissueState)

    @classmethod
    def from_mass(cls, tissue_mass_grams: float, flow_per_gram: float) -> "TissuePerfusion":
        """Create a healthy, normally perfused tissue.

        Args:
            tissue_mass_grams: Tissue mass in grams
            flow_per_gram: Baseline flow in mL/min per gram

        Returns:
            Configured TissuePerfusion
        """
        baseline = tissue_mass_grams * flow_per_gram
        return cls(
            tissue_mass_grams=tissue_mass_grams,
            baseline_flow_ml_per_min=baseline,
            blood_flow_ml_per_min=baseline,
            oxygen_consumption_ml_per_min=tissue_mass_grams * TISSUE_O2_PER_GRAM,
        )

    def update(
        self,
        blood_flow_ml_per_min: float,
        arterial_o2_content_ml_per_dl: float,
        metabolic_rate: float,
        dt: float,
    ) -> None:
        """Recompute O2 balance and advance the tissue state.

        Args:
            blood_flow_ml_per_min: Current blood flow
            arterial_o2_content_ml_per_dl: Arterial O2 content (mL O2/dL)
            metabolic_rate: Organ metabolic rate relative to baseline
            dt: Time step in seconds
        """
        self.blood_flow_ml_per_min = max(blood_flow_ml_per_min, 0.0)
        self.oxygen_delivery_ml_per_min = (
            self.blood_flow_ml_per_min / 100.0 * arterial_o2_content_ml_per_dl
        )
        self.oxygen_consumption_ml_per_min = (
            self.tissue_mass_grams
            * TISSUE_O2_PER_GRAM
            * metabolic_rate
            * self.state.oxygen_consumption_rate()
        )
        self.state.progress(
            self.oxygen_delivery_ml_per_min, self.oxygen_consumption_ml_per_min, dt
        )

    def perfusion_ratio(self) -> float:
        """Current flow relative to baseline (1.0 when baseline is zero)."""
        if self.baseline_flow_ml_per_min > 0.0:
            return self.blood_flow_ml_per_min / self.baseline_flow_ml_per_min
        return 1.0

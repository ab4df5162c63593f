"""Myocardial tissue: cellular state machine and perfused wall segments.

Each ``MyocardialSegment`` is one coronary territory of the heart wall. It
tracks oxygen balance, metabolite pools and biomarker release, and derives
the mechanical and electrical properties the rhythm and ECG models read.
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Optional, Union

import numpy as np

from physio_sim.core.constants import (
    ADENOSINE_PER_O2_DEFICIT,
    ADENOSINE_WASHOUT,
    AUTOMATICITY_ONSET_S,
    AUTOMATICITY_RAMP_S,
    ECTOPIC_BEAT_WINDOW_S,
    LACTATE_PER_O2_DEFICIT,
    LACTATE_WASHOUT,
    MAX_AUTOMATICITY_PER_MIN,
    MYOCARDIAL_FLOW_PER_GRAM,
    MYOCARDIAL_INJURY_ONSET_S,
    MYOCARDIAL_INJURY_RECOVERY_S,
    MYOCARDIAL_NECROSIS_ONSET_S,
    MYOCARDIAL_O2_PER_GRAM,
    MYOCARDIAL_REVERSIBLE_ISCHEMIA_S,
    Q_WAVE_ONSET_DAYS,
    SECONDS_PER_DAY,
    SECONDS_PER_MINUTE,
    TROPONIN_DECAY,
    TROPONIN_INJURY_DELAY_S,
    TROPONIN_INJURY_RATE,
    TROPONIN_NECROSIS_RATE,
    TROPONIN_PEAK_DAYS,
)
from physio_sim.core.types import MyocardialRegion

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HealthyCell:
    """Normally perfused, normally contracting myocytes."""


@dataclass(frozen=True)
class IschemicCell:
    """Myocytes starved of oxygen; reversible."""

    duration_seconds: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "duration_seconds", max(self.duration_seconds, 0.0))


@dataclass(frozen=True)
class InjuredCell:
    """Myocytes with membrane damage; electrically unstable."""

    duration_seconds: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "duration_seconds", max(self.duration_seconds, 0.0))


@dataclass(frozen=True)
class NecroticCell:
    """Infarcted myocardium."""

    days_old: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "days_old", max(self.days_old, 0.0))


CellCondition = Union[HealthyCell, IschemicCell, InjuredCell, NecroticCell]


def advance_cell(condition: CellCondition, is_ischemic: bool, dt: float) -> CellCondition:
    """Return the cellular condition after ``dt`` seconds.

    Duration counters restart from zero whenever the condition changes.

    Args:
        condition: Current cellular condition
        is_ischemic: Whether O2 delivery is below consumption this tick
        dt: Time step in seconds

    Returns:
        The next condition

    Raises:
        TypeError: If ``condition`` is not a cellular condition
    """
    dt = max(dt, 0.0)

    if isinstance(condition, HealthyCell):
        return IschemicCell() if is_ischemic else condition

    if isinstance(condition, IschemicCell):
        if is_ischemic:
            elapsed = condition.duration_seconds + dt
            if elapsed > MYOCARDIAL_INJURY_ONSET_S:
                return InjuredCell()
            return IschemicCell(elapsed)
        if condition.duration_seconds < MYOCARDIAL_REVERSIBLE_ISCHEMIA_S:
            return HealthyCell()
        return InjuredCell()

    if isinstance(condition, InjuredCell):
        elapsed = condition.duration_seconds + dt
        if is_ischemic:
            if elapsed > MYOCARDIAL_NECROSIS_ONSET_S:
                return NecroticCell()
        elif elapsed > MYOCARDIAL_INJURY_RECOVERY_S:
            return HealthyCell()
        return InjuredCell(elapsed)

    if isinstance(condition, NecroticCell):
        return NecroticCell(condition.days_old + dt / SECONDS_PER_DAY)

    raise TypeError(f"Unknown cellular condition: {condition!r}")


class CellularState:
    """Mutable cellular state of one myocardial segment.

    Attributes:
        condition: Current tagged condition
    """

    def __init__(self, condition: Optional[CellCondition] = None):
        self.condition: CellCondition = condition if condition is not None else HealthyCell()

    def __repr__(self) -> str:
        return f"CellularState({self.condition!r})"

    @property
    def name(self) -> str:
        """Short state name: Healthy, Ischemic, Injured or Necrotic."""
        return type(self.condition).__name__.removesuffix("Cell")

    def progress(self, is_ischemic: bool, dt: float) -> CellCondition:
        self.condition = advance_cell(self.condition, is_ischemic, dt)
        return self.condition

    def is_unstable(self) -> bool:
        """Injured myocytes can fire ectopic beats."""
        return isinstance(self.condition, InjuredCell)

    def resting_potential_mv(self) -> float:
        c = self.condition
        if isinstance(c, HealthyCell):
            return -90.0
        if isinstance(c, IschemicCell):
            return -90.0 + c.duration_seconds / MYOCARDIAL_INJURY_ONSET_S * 10.0
        if isinstance(c, InjuredCell):
            return -60.0 + c.duration_seconds / MYOCARDIAL_NECROSIS_ONSET_S * 20.0
        if isinstance(c, NecroticCell):
            return 0.0
        raise TypeError(f"Unknown cellular condition: {c!r}")

    def action_potential_duration_ms(self) -> float:
        c = self.condition
        if isinstance(c, HealthyCell):
            return 250.0
        if isinstance(c, IschemicCell):
            return 250.0 - c.duration_seconds / MYOCARDIAL_INJURY_ONSET_S * 100.0
        if isinstance(c, InjuredCell):
            return 180.0
        if isinstance(c, NecroticCell):
            return 0.0
        raise TypeError(f"Unknown cellular condition: {c!r}")

    def contractility(self) -> float:
        """Fraction of normal contractile force (0-1)."""
        c = self.condition
        if isinstance(c, HealthyCell):
            return 1.0
        if isinstance(c, IschemicCell):
            return max(1.0 - c.duration_seconds / MYOCARDIAL_INJURY_ONSET_S, 0.3)
        if isinstance(c, InjuredCell):
            return max(0.3 - c.duration_seconds / MYOCARDIAL_NECROSIS_ONSET_S * 0.3, 0.0)
        if isinstance(c, NecroticCell):
            return 0.0
        raise TypeError(f"Unknown cellular condition: {c!r}")

    def automaticity_rate(self) -> float:
        """Spontaneous depolarizations per minute."""
        c = self.condition
        if isinstance(c, InjuredCell) and c.duration_seconds > AUTOMATICITY_ONSET_S:
            rate = (c.duration_seconds - AUTOMATICITY_ONSET_S) / AUTOMATICITY_RAMP_S
            return min(rate * MAX_AUTOMATICITY_PER_MIN, MAX_AUTOMATICITY_PER_MIN)
        return 0.0

    def conduction_velocity(self) -> float:
        """Conduction velocity in m/s."""
        c = self.condition
        if isinstance(c, HealthyCell):
            return 0.5
        if isinstance(c, IschemicCell):
            return max(0.5 - c.duration_seconds / MYOCARDIAL_INJURY_ONSET_S * 0.2, 0.2)
        if isinstance(c, InjuredCell):
            return 0.15
        if isinstance(c, NecroticCell):
            return 0.0
        raise TypeError(f"Unknown cellular condition: {c!r}")


class MyocardialSegment:
    """One perfusion territory of the ventricular wall.

    Oxygen consumption is tied to mass alone and does not follow any
    organ-wide metabolic modifier.

    Attributes:
        region: Anatomical region
        mass_grams: Segment mass
        baseline_flow_ml_per_min: Normal coronary flow into the segment
        blood_flow_ml_per_min: Current flow
        oxygen_delivery_ml_per_min: Current O2 delivery
        oxygen_consumption_ml_per_min: O2 demand
        lactate: Accumulated lactate (arbitrary units)
        adenosine: Accumulated adenosine (arbitrary units)
        troponin_release: Cumulative troponin released (ng/mL)
        total_ischemia_time_s: Total time spent ischemic
        ectopic_beats: Ages in seconds of recent ectopic beats
        state: Cellular state machine
    """

    def __init__(
        self,
        region: MyocardialRegion,
        mass_grams: Optional[float] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        """Initialize a healthy, normally perfused segment.

        Args:
            region: Anatomical region
            mass_grams: Segment mass (defaults to the region's typical mass)
            rng: Random generator for ectopic-beat trials
        """
        self.region = region
        self.mass_grams = mass_grams if mass_grams is not None else region.default_mass_grams
        self.rng = rng if rng is not None else np.random.default_rng()

        self.baseline_flow_ml_per_min = self.mass_grams * MYOCARDIAL_FLOW_PER_GRAM
        self.blood_flow_ml_per_min = self.baseline_flow_ml_per_min
        self.oxygen_consumption_ml_per_min = self.mass_grams * MYOCARDIAL_O2_PER_GRAM
        self.oxygen_delivery_ml_per_min = self.oxygen_consumption_ml_per_min

        self.lactate = 0.0
        self.adenosine = 0.0
        self.troponin_release = 0.0
        self.total_ischemia_time_s = 0.0
        self.ectopic_beats: deque[float] = deque()
        self.state = CellularState()

    def __repr__(self) -> str:
        return f"MyocardialSegment({self.region.value}, {self.state.name})"

    @property
    def ectopic_beat_count(self) -> int:
        return len(self.ectopic_beats)

    def is_ischemic(self) -> bool:
        return self.oxygen_delivery_ml_per_min < self.oxygen_consumption_ml_per_min

    def update(self, blood_flow: float, arterial_o2_content: float, dt: float) -> None:
        """Advance the segment by one tick.

        Args:
            blood_flow: Coronary flow into the segment (mL/min)
            arterial_o2_content: Arterial O2 content (mL O2/dL)
            dt: Time step in seconds
        """
        dt = max(dt, 0.0)
        self.blood_flow_ml_per_min = max(blood_flow, 0.0)
        self.oxygen_delivery_ml_per_min = self.blood_flow_ml_per_min / 100.0 * arterial_o2_content

        ischemic = self.is_ischemic()
        previous = self.state.name
        self.state.progress(ischemic, dt)
        if self.state.name != previous:
            logger.info(
                "%s segment: %s -> %s", self.region.value, previous, self.state.name
            )

        if ischemic:
            deficit = self.oxygen_consumption_ml_per_min - self.oxygen_delivery_ml_per_min
            self.lactate += deficit * dt * LACTATE_PER_O2_DEFICIT
            self.adenosine += deficit * dt * ADENOSINE_PER_O2_DEFICIT
            self.total_ischemia_time_s += dt
        else:
            self.lactate *= LACTATE_WASHOUT**dt
            self.adenosine *= ADENOSINE_WASHOUT**dt

        self._update_troponin(dt)
        self._update_ectopy(dt)

    def _update_troponin(self, dt: float) -> None:
        c = self.state.condition
        if isinstance(c, InjuredCell) and c.duration_seconds > TROPONIN_INJURY_DELAY_S:
            self.troponin_release += dt * TROPONIN_INJURY_RATE
        elif isinstance(c, NecroticCell):
            if c.days_old < TROPONIN_PEAK_DAYS:
                self.troponin_release += dt * TROPONIN_NECROSIS_RATE
            else:
                self.troponin_release *= TROPONIN_DECAY**dt

    def _update_ectopy(self, dt: float) -> None:
        if self.state.is_unstable():
            # Rate approximation; only meaningful while dt is small
            probability = self.state.automaticity_rate() / SECONDS_PER_MINUTE * dt
            if self.rng.random() < probability:
                self.ectopic_beats.append(0.0)

        # A new beat ages with this tick and may expire in it
        aged = [age + dt for age in self.ectopic_beats]
        self.ectopic_beats = deque(age for age in aged if age <= ECTOPIC_BEAT_WINDOW_S)

    def contractility(self) -> float:
        return self.state.contractility()

    def wall_motion_score(self) -> int:
        """Echo wall-motion score: 1 normal, 2 hypokinetic, 3 severely hypokinetic, 4 akinetic."""
        contractility = self.contractility()
        if contractility > 0.8:
            return 1
        if contractility > 0.5:
            return 2
        if contractility > 0.2:
            return 3
        return 4

    def st_segment_deviation_mv(self) -> float:
        """ST elevation in mm above baseline."""
        c = self.state.condition
        if isinstance(c, HealthyCell):
            return 0.0
        if isinstance(c, IschemicCell):
            return min(c.duration_seconds / MYOCARDIAL_INJURY_ONSET_S, 1.0) * 3.0
        if isinstance(c, InjuredCell):
            return 2.0 + min(c.duration_seconds / MYOCARDIAL_NECROSIS_ONSET_S, 1.0) * 2.0
        if isinstance(c, NecroticCell):
            if c.days_old < 7.0:
                return max(2.0 - c.days_old * 0.3, 0.0)
            return 0.0
        raise TypeError(f"Unknown cellular condition: {c!r}")

    def t_wave_inversion_mv(self) -> float:
        c = self.state.condition
        if isinstance(c, InjuredCell):
            return -0.5 if c.duration_seconds > MYOCARDIAL_INJURY_RECOVERY_S else 0.0
        if isinstance(c, NecroticCell):
            return -0.8 if c.days_old < 30.0 else -0.3
        return 0.0

    def has_pathologic_q_wave(self) -> bool:
        c = self.state.condition
        return isinstance(c, NecroticCell) and c.days_old > Q_WAVE_ONSET_DAYS

    def viability_percent(self) -> float:
        c = self.state.condition
        if isinstance(c, HealthyCell):
            return 100.0
        if isinstance(c, IschemicCell):
            return 100.0 - min(c.duration_seconds / MYOCARDIAL_INJURY_ONSET_S * 20.0, 20.0)
        if isinstance(c, InjuredCell):
            return 80.0 - min(c.duration_seconds / MYOCARDIAL_NECROSIS_ONSET_S * 80.0, 80.0)
        if isinstance(c, NecroticCell):
            return 0.0
        raise TypeError(f"Unknown cellular condition: {c!r}")

    def chest_pain_contribution(self) -> float:
        return self.lactate * 0.1 + self.adenosine * 0.2

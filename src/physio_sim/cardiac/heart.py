"""Heart organ: myocardial segments, rhythm, mechanics and ECG."""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from physio_sim.cardiac.ecg import ECGSynthesizer
from physio_sim.cardiac.rhythm import CardiacRhythm
from physio_sim.core.blood import BloodComposition
from physio_sim.core.constants import (
    BASELINE_EJECTION_FRACTION,
    CORONARY_FLOW_RESERVE,
    DEFAULT_CORONARY_FLOWS,
    DEFAULT_ECG_BUFFER,
    DEFAULT_LEAD_COUNT,
    END_DIASTOLIC_VOLUME_ML,
    MAX_CHEST_PAIN,
    MAX_SINUS_RATE_BPM,
    MIN_HEART_RATE_BPM,
    RESTING_HEART_RATE_BPM,
    TOXIN_CARDIODEPRESSION_AU,
)
from physio_sim.core.organ import Organ
from physio_sim.core.types import ChamberState, MyocardialRegion, OrganKind, Rhythm
from physio_sim.tissue.myocardium import InjuredCell, MyocardialSegment, NecroticCell

logger = logging.getLogger(__name__)


@dataclass
class Chamber:
    """A heart chamber."""

    state: ChamberState
    volume_ml: float
    pressure_mmhg: float


@dataclass
class Valve:
    is_open: bool


def coronary_supply_fraction(blood: BloodComposition, region: MyocardialRegion) -> float:
    """Fraction of baseline flow a region receives after autoregulation.

    Resting myocardium can recruit up to ``CORONARY_FLOW_RESERVE`` times its
    flow by dilating distal beds, so moderate stenoses are compensated.

    Args:
        blood: Blood medium carrying coronary artery flows
        region: Myocardial region

    Returns:
        Supply fraction (0-1)
    """
    ratios = [
        blood.coronary_flow(artery) / DEFAULT_CORONARY_FLOWS[artery]
        for artery in region.supplying_arteries
    ]
    return min(max(float(np.mean(ratios)) * CORONARY_FLOW_RESERVE, 0.0), 1.0)


class Heart(Organ):
    """Four-chamber heart built from six perfused myocardial segments.

    Attributes:
        heart_rate_bpm: Current rate
        ejection_fraction_percent: Left ventricular EF
        aortic_systolic: Aortic systolic pressure
        aortic_diastolic: Aortic diastolic pressure
        chambers: Chambers keyed by name (LA, RA, LV, RV)
        valves: Valves keyed by name
        segments: Myocardial segments keyed by region
        rhythm: Rhythm state machine
        ecg: ECG synthesizer
    """

    kind = OrganKind.HEART

    def __init__(
        self,
        organ_id: int,
        num_ecg_leads: int = DEFAULT_LEAD_COUNT,
        ecg_buffer_size: int = DEFAULT_ECG_BUFFER,
        rng: Optional[np.random.Generator] = None,
    ):
        """Initialize a healthy heart in sinus rhythm.

        Args:
            organ_id: Organ identifier
            num_ecg_leads: ECG lead count (3, 5 or 12; others become 12)
            ecg_buffer_size: Samples kept per ECG lead
            rng: Random generator shared by segments, rhythm and ECG
        """
        super().__init__(organ_id)
        self.rng = rng if rng is not None else np.random.default_rng()

        self.heart_rate_bpm = RESTING_HEART_RATE_BPM
        self.ejection_fraction_percent = BASELINE_EJECTION_FRACTION
        self.aortic_systolic = 120.0
        self.aortic_diastolic = 80.0

        self.chambers = {
            "LA": Chamber(ChamberState.DIASTOLE, 50.0, 8.0),
            "RA": Chamber(ChamberState.DIASTOLE, 50.0, 4.0),
            "LV": Chamber(ChamberState.DIASTOLE, END_DIASTOLIC_VOLUME_ML, 8.0),
            "RV": Chamber(ChamberState.DIASTOLE, END_DIASTOLIC_VOLUME_ML, 4.0),
        }
        self.valves = {
            "mitral": Valve(True),
            "tricuspid": Valve(True),
            "aortic": Valve(False),
            "pulmonary": Valve(False),
        }

        self.segments: dict[MyocardialRegion, MyocardialSegment] = {
            region: MyocardialSegment(region, rng=self.rng) for region in MyocardialRegion
        }
        self.rhythm = CardiacRhythm(rng=self.rng)
        self.ecg = ECGSynthesizer(num_ecg_leads, ecg_buffer_size, rng=self.rng)

    @property
    def current_rhythm(self) -> Rhythm:
        return self.rhythm.rhythm

    @property
    def cardiac_output_l_per_min(self) -> float:
        """HR × stroke volume, with stroke volume = EDV × EF."""
        stroke_volume = END_DIASTOLIC_VOLUME_ML * self.ejection_fraction_percent / 100.0
        return self.heart_rate_bpm * stroke_volume / 1000.0

    def count_segments(self, state: type) -> int:
        return sum(1 for s in self.segments.values() if isinstance(s.state.condition, state))

    def total_ectopic_beats(self) -> int:
        return sum(s.ectopic_beat_count for s in self.segments.values())

    def chest_pain_level(self) -> float:
        pain = sum(s.chest_pain_contribution() for s in self.segments.values())
        return min(pain, MAX_CHEST_PAIN)

    def troponin_level(self) -> float:
        return sum(s.troponin_release for s in self.segments.values())

    def is_cardiac_arrest(self) -> bool:
        return self.rhythm.is_cardiac_arrest()

    def defibrillate(self) -> bool:
        """Shock the heart.

        Returns:
            True if the rhythm converted to sinus
        """
        rhythm = self.current_rhythm
        converted = self.rhythm.reset()
        if not converted:
            logger.info("Shock delivered in %s: no conversion", rhythm.value)
        return converted

    def tissue_ejection_fraction(self) -> float:
        """EF from the contractility of the left-ventricular segments."""
        lv = [
            s.contractility()
            for region, s in self.segments.items()
            if region != MyocardialRegion.RIGHT_VENTRICULAR
        ]
        return max(BASELINE_EJECTION_FRACTION * float(np.mean(lv)), 0.0)

    def sinus_rate(self, blood: BloodComposition) -> float:
        """Rate the sinus node drives given pain, pump failure and toxins."""
        rate = (
            RESTING_HEART_RATE_BPM
            + self.chest_pain_level() * 3.0
            + max(BASELINE_EJECTION_FRACTION - self.ejection_fraction_percent, 0.0) * 0.5
        )
        rate = min(rate, MAX_SINUS_RATE_BPM)
        toxin = blood.chemistry.toxin_level_au
        if toxin > TOXIN_CARDIODEPRESSION_AU:
            rate = min(rate, max(RESTING_HEART_RATE_BPM - toxin * 0.1, MIN_HEART_RATE_BPM))
        return rate

    def update(self, blood: BloodComposition, dt: float) -> None:
        o2_content = blood.oxygen_content()
        for region, segment in self.segments.items():
            flow = segment.baseline_flow_ml_per_min * coronary_supply_fraction(blood, region)
            segment.update(flow, o2_content, dt)

        sinus_rate = self.sinus_rate(blood)
        rhythm = self.rhythm.update(
            self.total_ectopic_beats(),
            self.count_segments(InjuredCell),
            self.count_segments(NecroticCell),
            sinus_rate,
            dt,
        )

        if rhythm == Rhythm.ASYSTOLE:
            self.heart_rate_bpm = 0.0
            self.ejection_fraction_percent = 0.0
        elif rhythm == Rhythm.VENTRICULAR_FIBRILLATION:
            self.heart_rate_bpm = self.rhythm.ventricular_rate_bpm or 0.0
            self.ejection_fraction_percent = 0.0
        else:
            ef = self.tissue_ejection_fraction()
            toxin = blood.chemistry.toxin_level_au
            if toxin > TOXIN_CARDIODEPRESSION_AU:
                ef = min(ef, max(BASELINE_EJECTION_FRACTION - toxin * 0.05, 30.0))
            self.ejection_fraction_percent = ef
            if rhythm == Rhythm.VENTRICULAR_TACHYCARDIA:
                self.heart_rate_bpm = self.rhythm.ventricular_rate_bpm or sinus_rate
            else:
                self.heart_rate_bpm = sinus_rate

        # Mechanics read the beat clock after the ECG has advanced it
        self.ecg.update(self.heart_rate_bpm, rhythm, self.segments.values(), dt)

        self._update_mechanics()
        blood.systolic_bp = self.aortic_systolic
        blood.diastolic_bp = self.aortic_diastolic
        blood.cardiac_output_l_per_min = self.cardiac_output_l_per_min

    def _update_mechanics(self) -> None:
        if self.is_cardiac_arrest() or self.heart_rate_bpm <= 0.0:
            self.aortic_systolic = 0.0
            self.aortic_diastolic = 0.0
            for chamber in self.chambers.values():
                chamber.state = ChamberState.DIASTOLE
            return

        self.aortic_systolic = 100.0 + self.ejection_fraction_percent * 0.5
        self.aortic_diastolic = 70.0 + self.ejection_fraction_percent * 0.2

        la, ra, lv, rv = (self.chambers[k] for k in ("LA", "RA", "LV", "RV"))
        progress = self.ecg.cycle_progress(self.heart_rate_bpm)
        if progress < 0.2:
            la.state = ra.state = ChamberState.SYSTOLE
            lv.state = rv.state = ChamberState.DIASTOLE
            ventricular_systole = False
        elif progress < 0.5:
            la.state = ra.state = ChamberState.DIASTOLE
            lv.state = rv.state = ChamberState.SYSTOLE
            ventricular_systole = True
        else:
            la.state = ra.state = ChamberState.DIASTOLE
            lv.state = rv.state = ChamberState.DIASTOLE
            ventricular_systole = False

        self.valves["mitral"].is_open = not ventricular_systole
        self.valves["tricuspid"].is_open = not ventricular_systole
        self.valves["aortic"].is_open = ventricular_systole
        self.valves["pulmonary"].is_open = ventricular_systole

        if ventricular_systole:
            end_systolic = END_DIASTOLIC_VOLUME_ML * (1.0 - self.ejection_fraction_percent / 100.0)
            lv.volume_ml = rv.volume_ml = end_systolic
            lv.pressure_mmhg = self.aortic_systolic
            rv.pressure_mmhg = self.aortic_systolic * 0.2
        else:
            lv.volume_ml = rv.volume_ml = END_DIASTOLIC_VOLUME_ML
            lv.pressure_mmhg = 8.0
            rv.pressure_mmhg = 4.0

    def summary(self) -> str:
        return (
            f"Heart: HR={self.heart_rate_bpm:.0f} bpm, EF={self.ejection_fraction_percent:.0f}%, "
            f"BP={self.aortic_systolic:.0f}/{self.aortic_diastolic:.0f} mmHg, "
            f"Rhythm={self.current_rhythm.value}, Troponin={self.troponin_level():.2f}"
        )

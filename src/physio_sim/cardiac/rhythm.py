"""Cardiac rhythm state machine.

The rhythm is derived each tick from the state of the myocardial segments:

    Sinus (normal / tachy / brady) → PVCs → VT → VF → Asystole

At most one transition happens per tick, so VT can never be skipped on the way
to VF. Asystole is terminal.
"""

import logging
from typing import Optional

import numpy as np

from physio_sim.core.constants import (
    PVC_TO_VT_ECTOPIC_BEATS,
    PVC_TO_VT_INJURED_SEGMENTS,
    SINUS_BRADY_BPM,
    SINUS_TACHY_BPM,
    VF_RATE_RANGE_BPM,
    VF_TO_ASYSTOLE_DURATION_S,
    VF_TO_ASYSTOLE_NECROTIC_SEGMENTS,
    VT_RATE_RANGE_BPM,
    VT_TO_VF_DURATION_S,
    VT_TO_VF_INJURED_SEGMENTS,
)
from physio_sim.core.types import Rhythm

logger = logging.getLogger(__name__)


def sinus_rhythm_for_rate(heart_rate_bpm: float) -> Rhythm:
    """Classify a sinus-node rate."""
    if heart_rate_bpm > SINUS_TACHY_BPM:
        return Rhythm.SINUS_TACHYCARDIA
    if heart_rate_bpm < SINUS_BRADY_BPM:
        return Rhythm.SINUS_BRADYCARDIA
    return Rhythm.SINUS


class CardiacRhythm:
    """Discrete rhythm driven by aggregate tissue instability.

    Attributes:
        rhythm: Current rhythm
        vt_duration_s: Time spent in the current VT episode
        vf_duration_s: Time spent in the current VF episode
        ventricular_rate_bpm: Rate drawn on entry to VT/VF (None otherwise)
    """

    def __init__(self, rng: Optional[np.random.Generator] = None):
        self.rng = rng if rng is not None else np.random.default_rng()
        self.rhythm = Rhythm.SINUS
        self.vt_duration_s = 0.0
        self.vf_duration_s = 0.0
        self.ventricular_rate_bpm: Optional[float] = None

    def __repr__(self) -> str:
        return f"CardiacRhythm({self.rhythm.value})"

    def _enter(self, rhythm: Rhythm) -> None:
        if rhythm == self.rhythm:
            return
        logger.info("Rhythm change: %s -> %s", self.rhythm.value, rhythm.value)
        self.rhythm = rhythm

        if rhythm == Rhythm.VENTRICULAR_TACHYCARDIA:
            self.vt_duration_s = 0.0
            self.ventricular_rate_bpm = float(self.rng.uniform(*VT_RATE_RANGE_BPM))
        elif rhythm == Rhythm.VENTRICULAR_FIBRILLATION:
            self.vf_duration_s = 0.0
            self.ventricular_rate_bpm = float(self.rng.uniform(*VF_RATE_RANGE_BPM))
        elif rhythm == Rhythm.ASYSTOLE:
            self.ventricular_rate_bpm = 0.0
        else:
            self.ventricular_rate_bpm = None

    def update(
        self,
        ectopic_beats: int,
        injured_segments: int,
        necrotic_segments: int,
        sinus_rate_bpm: float,
        dt: float,
    ) -> Rhythm:
        """Apply at most one rhythm transition.

        Args:
            ectopic_beats: Recent ectopic beats summed over all segments
            injured_segments: Number of segments in the Injured state
            necrotic_segments: Number of segments in the Necrotic state
            sinus_rate_bpm: Rate the sinus node would drive
            dt: Time step in seconds

        Returns:
            The rhythm after this tick
        """
        dt = max(dt, 0.0)
        current = self.rhythm

        if current == Rhythm.ASYSTOLE:
            return current

        if current.is_sinus:
            if ectopic_beats > 0:
                self._enter(Rhythm.PVCS)
            else:
                self._enter(sinus_rhythm_for_rate(sinus_rate_bpm))

        elif current == Rhythm.PVCS:
            if (
                injured_segments >= PVC_TO_VT_INJURED_SEGMENTS
                and ectopic_beats > PVC_TO_VT_ECTOPIC_BEATS
            ):
                self._enter(Rhythm.VENTRICULAR_TACHYCARDIA)
            elif ectopic_beats == 0:
                self._enter(sinus_rhythm_for_rate(sinus_rate_bpm))

        elif current == Rhythm.VENTRICULAR_TACHYCARDIA:
            self.vt_duration_s += dt
            if (
                self.vt_duration_s > VT_TO_VF_DURATION_S
                or injured_segments >= VT_TO_VF_INJURED_SEGMENTS
            ):
                self._enter(Rhythm.VENTRICULAR_FIBRILLATION)

        elif current == Rhythm.VENTRICULAR_FIBRILLATION:
            self.vf_duration_s += dt
            if (
                self.vf_duration_s > VF_TO_ASYSTOLE_DURATION_S
                or necrotic_segments >= VF_TO_ASYSTOLE_NECROTIC_SEGMENTS
            ):
                self._enter(Rhythm.ASYSTOLE)

        return self.rhythm

    def reset(self) -> bool:
        """Defibrillate: return an ectopic or ventricular rhythm to sinus.

        Returns:
            True if the rhythm was converted; asystole cannot be shocked
        """
        if self.rhythm.is_sinus or self.rhythm == Rhythm.ASYSTOLE:
            return False
        self._enter(Rhythm.SINUS)
        self.vt_duration_s = 0.0
        self.vf_duration_s = 0.0
        return True

    def is_cardiac_arrest(self) -> bool:
        return self.rhythm.is_arrest

"""Multi-lead ECG synthesis from rhythm and myocardial electrical state."""

import logging
import math
from collections import deque
from typing import Iterable, Optional

import numpy as np

from physio_sim.core.constants import (
    ASYSTOLE_NOISE_AMPLITUDE,
    DEFAULT_ECG_BUFFER,
    DEFAULT_LEAD_COUNT,
    MM_TO_MV,
    SECONDS_PER_MINUTE,
    VALID_LEAD_COUNTS,
    VF_NOISE_AMPLITUDE,
)
from physio_sim.core.types import Rhythm
from physio_sim.tissue.myocardium import MyocardialSegment

logger = logging.getLogger(__name__)

# Cycle-progress windows (fraction of one beat)
P_WAVE = (0.0, 0.2)
QRS = (0.3, 0.4)
ST_SEGMENT = (0.4, 0.5)
T_WAVE = (0.5, 0.7)
PVC_COMPLEX = (0.25, 0.55)
VT_COMPLEX = (0.0, 0.6)


def _in_window(progress: float, window: tuple[float, float]) -> bool:
    return window[0] <= progress < window[1]


def wide_complex(progress: float, window: tuple[float, float], amplitude: float = 1.5) -> float:
    """Broad biphasic complex of an ectopic ventricular beat."""
    start, end = window
    fraction = (progress - start) / (end - start)
    return -amplitude * math.sin(2.0 * math.pi * fraction) * (1.0 - fraction)


def lead_amplitude(lead: int) -> float:
    """Relative gain of a lead."""
    if lead == 0:
        return 1.0
    if lead == 1:
        return 0.8
    if lead == 2:
        return 0.9
    return 0.7 + lead * 0.05


class ECGSynthesizer:
    """Generates one sample per lead per tick and keeps a rolling buffer.

    Attributes:
        num_leads: Lead count (3, 5 or 12)
        buffer_size: Samples kept per lead
        cycle_time: Elapsed time in the current beat (s)
        leads: Rolling sample buffer per lead
    """

    def __init__(
        self,
        num_leads: int = DEFAULT_LEAD_COUNT,
        buffer_size: int = DEFAULT_ECG_BUFFER,
        rng: Optional[np.random.Generator] = None,
    ):
        if num_leads not in VALID_LEAD_COUNTS:
            logger.debug(
                "Unsupported lead count %s; using %d leads", num_leads, DEFAULT_LEAD_COUNT
            )
            num_leads = DEFAULT_LEAD_COUNT
        self.num_leads = num_leads
        self.buffer_size = buffer_size
        self.rng = rng if rng is not None else np.random.default_rng()
        self.cycle_time = 0.0
        self.leads: list[deque[float]] = [deque(maxlen=buffer_size) for _ in range(num_leads)]

    def cycle_progress(self, heart_rate_bpm: float) -> float:
        """Position within the current beat (0-1); 0 when there is no beat."""
        if heart_rate_bpm <= 0.0:
            return 0.0
        duration = SECONDS_PER_MINUTE / heart_rate_bpm
        return min(self.cycle_time / duration, 1.0)

    def advance(self, heart_rate_bpm: float, dt: float) -> None:
        """Move the beat clock forward, wrapping at the end of each beat."""
        if heart_rate_bpm <= 0.0:
            self.cycle_time = 0.0
            return
        duration = SECONDS_PER_MINUTE / heart_rate_bpm
        self.cycle_time = (self.cycle_time + max(dt, 0.0)) % duration

    def sample(
        self,
        lead: int,
        progress: float,
        rhythm: Rhythm,
        segments: Iterable[MyocardialSegment],
    ) -> float:
        """Voltage of one lead at a given cycle progress.

        Args:
            lead: Lead index
            progress: Position within the beat (0-1)
            rhythm: Current rhythm
            segments: Myocardial segments contributing to the signal

        Returns:
            Lead voltage in mV
        """
        if rhythm == Rhythm.VENTRICULAR_FIBRILLATION:
            return float(self.rng.uniform(-VF_NOISE_AMPLITUDE, VF_NOISE_AMPLITUDE))
        if rhythm == Rhythm.ASYSTOLE:
            return float(self.rng.uniform(-ASYSTOLE_NOISE_AMPLITUDE, ASYSTOLE_NOISE_AMPLITUDE))

        gain = lead_amplitude(lead)
        if rhythm == Rhythm.VENTRICULAR_TACHYCARDIA:
            if _in_window(progress, VT_COMPLEX):
                return gain * wide_complex(progress, VT_COMPLEX)
            return 0.0
        if rhythm == Rhythm.PVCS and _in_window(progress, PVC_COMPLEX):
            return gain * wide_complex(progress, PVC_COMPLEX)

        visible = [s for s in segments if lead in s.region.primary_leads]
        phase = progress * 2.0 * math.pi
        value = 0.0

        if _in_window(progress, P_WAVE):
            value += 0.2 * math.sin(phase * 5.0)
        elif _in_window(progress, QRS):
            if any(s.has_pathologic_q_wave() for s in visible):
                fraction = (progress - QRS[0]) / (QRS[1] - QRS[0])
                value -= 0.4 * math.sin(math.pi * fraction)
            else:
                value += 1.0 * math.sin((phase - 2.0) * 10.0)
        elif _in_window(progress, ST_SEGMENT):
            value += sum(s.st_segment_deviation_mv() for s in visible) * MM_TO_MV
        elif _in_window(progress, T_WAVE):
            value += 0.3 * math.sin((phase - 3.5) * 5.0)
            value += sum(s.t_wave_inversion_mv() for s in visible) * MM_TO_MV

        return gain * value

    def update(
        self,
        heart_rate_bpm: float,
        rhythm: Rhythm,
        segments: Iterable[MyocardialSegment],
        dt: float,
    ) -> np.ndarray:
        """Advance the beat clock and append one sample to every lead.

        Returns:
            Array of the new samples, one per lead
        """
        segments = list(segments)
        self.advance(heart_rate_bpm, dt)
        progress = self.cycle_progress(heart_rate_bpm)
        samples = np.array(
            [self.sample(lead, progress, rhythm, segments) for lead in range(self.num_leads)]
        )
        for buffer, value in zip(self.leads, samples):
            buffer.append(float(value))
        return samples

    def get_lead(self, lead: int) -> np.ndarray:
        """Buffered samples of one lead, oldest first."""
        return np.array(self.leads[lead])

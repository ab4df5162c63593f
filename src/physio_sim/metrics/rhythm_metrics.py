"""Temporal analysis of recorded vital signs."""

from dataclasses import dataclass
from typing import Optional

import numpy as np
from scipy import stats

from physio_sim.core.types import Rhythm, VitalSigns


@dataclass
class RhythmEpisode:
    """A continuous run of one rhythm."""

    rhythm: Rhythm
    start_time: float
    end_time: float

    @property
    def duration(self) -> float:
        """Duration of the episode in seconds."""
        return self.end_time - self.start_time


class RhythmAnalyzer:
    """Analyzes rhythm, biomarker and symptom trends over a run."""

    def __init__(self, history: Optional[list[VitalSigns]] = None):
        """Initialize rhythm analyzer.

        Args:
            history: Vital signs in time order
        """
        self.history = history or []

    def add_vitals(self, vitals: VitalSigns) -> None:
        self.history.append(vitals)

    def clear_history(self) -> None:
        self.history.clear()

    @property
    def duration(self) -> float:
        """Total duration of recorded history."""
        if len(self.history) < 2:
            return 0.0
        return self.history[-1].time - self.history[0].time

    @property
    def time_step(self) -> float:
        """Estimated time step between samples."""
        if len(self.history) < 2:
            return 0.0
        return self.history[1].time - self.history[0].time

    def find_episodes(self) -> list[RhythmEpisode]:
        """Split the history into continuous single-rhythm episodes.

        An episode ends at the time of the first sample of the next rhythm.

        Returns:
            Episodes in time order
        """
        episodes: list[RhythmEpisode] = []
        current: Optional[RhythmEpisode] = None

        for vitals in self.history:
            if vitals.rhythm is None:
                continue
            if current is None or vitals.rhythm != current.rhythm:
                if current is not None:
                    current.end_time = vitals.time
                current = RhythmEpisode(vitals.rhythm, vitals.time, vitals.time)
                episodes.append(current)
            else:
                current.end_time = vitals.time

        return episodes

    def rhythm_sequence(self) -> list[Rhythm]:
        """Distinct rhythms in the order they were entered."""
        return [episode.rhythm for episode in self.find_episodes()]

    def time_in_rhythm(self) -> dict[Rhythm, float]:
        """Total seconds spent in each rhythm."""
        totals: dict[Rhythm, float] = {}
        for episode in self.find_episodes():
            totals[episode.rhythm] = totals.get(episode.rhythm, 0.0) + episode.duration
        return totals

    def time_to_first(self, rhythm: Rhythm) -> Optional[float]:
        """Time of the first sample in ``rhythm``, or None if never reached."""
        for vitals in self.history:
            if vitals.rhythm == rhythm:
                return vitals.time
        return None

    def arrest_duration(self) -> float:
        """Seconds spent in VF or asystole."""
        return sum(
            episode.duration
            for episode in self.find_episodes()
            if episode.rhythm.is_arrest
        )

    def peak_troponin(self) -> float:
        return max((v.troponin_ng_ml for v in self.history), default=0.0)

    def chest_pain_trend(self) -> float:
        """Slope of chest pain over time (points/s), positive = worsening."""
        if len(self.history) < 2:
            return 0.0
        times = np.array([v.time for v in self.history])
        pain = np.array([v.chest_pain for v in self.history])
        if np.ptp(times) == 0.0:
            return 0.0
        result = stats.linregress(times, pain)
        return float(result.slope)

    def get_summary(self) -> dict[str, float]:
        """Get summary of rhythm metrics.

        Returns:
            Dictionary of metric names to values
        """
        episodes = self.find_episodes()
        heart_rates = [v.heart_rate_bpm for v in self.history]
        return {
            "duration": self.duration,
            "num_episodes": len(episodes),
            "num_rhythm_changes": max(len(episodes) - 1, 0),
            "arrest_duration": self.arrest_duration(),
            "peak_troponin": self.peak_troponin(),
            "max_chest_pain": max((v.chest_pain for v in self.history), default=0.0),
            "chest_pain_trend": self.chest_pain_trend(),
            "mean_heart_rate": float(np.mean(heart_rates)) if heart_rates else 0.0,
        }

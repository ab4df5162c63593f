"""Metrics module for rhythm and biomarker analysis."""

from physio_sim.metrics.rhythm_metrics import RhythmAnalyzer, RhythmEpisode

__all__ = [
    "RhythmAnalyzer",
    "RhythmEpisode",
]

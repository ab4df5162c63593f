"""Cardiac core: rhythm emergence, ECG synthesis and the heart organ."""

from physio_sim.cardiac.rhythm import CardiacRhythm, sinus_rhythm_for_rate
from physio_sim.cardiac.ecg import ECGSynthesizer, lead_amplitude
from physio_sim.cardiac.heart import Chamber, Heart, Valve, coronary_supply_fraction

__all__ = [
    # Rhythm
    "CardiacRhythm",
    "sinus_rhythm_for_rate",
    # ECG
    "ECGSynthesizer",
    "lead_amplitude",
    # Heart
    "Chamber",
    "Heart",
    "Valve",
    "coronary_supply_fraction",
]

"""Shared fixtures for the physiology simulator tests."""

import numpy as np
import pytest

from physio_sim.core.blood import BloodComposition
from physio_sim.patient import initialize_patient


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def blood():
    return BloodComposition()


@pytest.fixture
def o2_content(blood):
    """Arterial O2 content of normal blood (~19.3 mL/dL)."""
    return blood.oxygen_content()


@pytest.fixture
def patient():
    return initialize_patient(patient_id=1, seed=42)

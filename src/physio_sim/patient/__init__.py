"""Patient orchestration."""

from physio_sim.patient.patient import Patient, initialize_patient

__all__ = [
    "Patient",
    "initialize_patient",
]

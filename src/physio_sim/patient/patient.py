"""Patient: the organ registry and per-tick orchestration loop."""

import logging
from typing import Optional, Union

import numpy as np

from physio_sim.cardiac.heart import Heart
from physio_sim.core.blood import BloodComposition
from physio_sim.core.constants import (
    CORONARY_ARTERIES,
    DEFAULT_CORONARY_FLOWS,
    DEFAULT_ECG_BUFFER,
    DEFAULT_LEAD_COUNT,
)
from physio_sim.core.organ import Organ
from physio_sim.core.types import OrganKind
from physio_sim.vascular.network import VascularNetwork

logger = logging.getLogger(__name__)


class Patient:
    """One simulated patient.

    Organs are updated one at a time in registration order, each seeing the
    blood writes of the organs before it in the same tick.

    Attributes:
        patient_id: Patient identifier
        blood: Shared blood medium
        time: Simulated time in seconds
    """

    def __init__(self, patient_id: int, blood: Optional[BloodComposition] = None):
        self.patient_id = patient_id
        self.blood = blood if blood is not None else BloodComposition()
        self.time = 0.0
        self._organs: dict[OrganKind, Organ] = {}

    def __repr__(self) -> str:
        kinds = [kind.value for kind in self._organs]
        return f"Patient(id={self.patient_id}, organs={kinds})"

    @property
    def organs(self) -> list[Organ]:
        return list(self._organs.values())

    def add_organ(self, organ: Organ) -> None:
        """Register an organ.

        Args:
            organ: Organ to add

        Raises:
            ValueError: If an organ of the same kind is already registered
        """
        if organ.kind in self._organs:
            raise ValueError(
                f"Patient {self.patient_id} already has a {organ.kind.value} organ"
            )
        self._organs[organ.kind] = organ
        logger.info("Patient %d: registered %s", self.patient_id, organ.kind.value)

    def get_organ(self, kind: Union[OrganKind, str]) -> Optional[Organ]:
        """Look up an organ by kind; None if absent or the kind is unknown."""
        try:
            kind = OrganKind(kind)
        except ValueError:
            return None
        return self._organs.get(kind)

    @property
    def heart(self) -> Optional[Heart]:
        organ = self._organs.get(OrganKind.HEART)
        return organ if isinstance(organ, Heart) else None

    @property
    def vascular(self) -> Optional[VascularNetwork]:
        organ = self._organs.get(OrganKind.VASCULAR)
        return organ if isinstance(organ, VascularNetwork) else None

    def sync_coronary_flows(self) -> None:
        """Publish the vascular network's coronary perfusion to the blood.

        Without a vascular network the blood keeps its resting defaults.
        """
        network = self.vascular
        if network is None:
            return
        for artery in CORONARY_ARTERIES:
            ratio = network.get_coronary_perfusion_ratio(artery)
            if ratio is not None:
                self.blood.coronary_flows[artery] = DEFAULT_CORONARY_FLOWS[artery] * ratio

    def update(self, dt: float) -> None:
        """Advance every organ by one tick."""
        for organ in self._organs.values():
            if organ.kind == OrganKind.HEART:
                self.sync_coronary_flows()
            organ.update(self.blood, dt)
        self.time += dt

    def summary(self) -> str:
        lines = [f"Patient {self.patient_id} (t={self.time:.1f}s)"]
        lines.extend(organ.summary() for organ in self._organs.values())
        lines.append(self.blood.summary())
        return "\n".join(lines)


def initialize_patient(
    patient_id: int = 1,
    num_ecg_leads: int = DEFAULT_LEAD_COUNT,
    ecg_buffer_size: int = DEFAULT_ECG_BUFFER,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None,
) -> Patient:
    """Create a patient with a vascular network and a heart.

    Args:
        patient_id: Patient identifier
        num_ecg_leads: ECG lead count (3, 5 or 12)
        ecg_buffer_size: Samples kept per ECG lead
        rng: Random generator (created from ``seed`` when omitted)
        seed: Seed used when no generator is given

    Returns:
        Initialized patient
    """
    if rng is None:
        rng = np.random.default_rng(seed)
    patient = Patient(patient_id)
    # Vascular first so the heart reads this tick's coronary flows
    patient.add_organ(VascularNetwork(organ_id=0))
    patient.add_organ(
        Heart(organ_id=1, num_ecg_leads=num_ecg_leads, ecg_buffer_size=ecg_buffer_size, rng=rng)
    )
    return patient

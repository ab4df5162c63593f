"""Uniform update contract shared by every organ."""

from abc import ABC, abstractmethod

from physio_sim.core.blood import BloodComposition
from physio_sim.core.types import OrganKind


class Organ(ABC):
    """Base class for organs driven by the patient's update loop.

    Attributes:
        organ_id: Integer identifier
    """

    kind: OrganKind

    def __init__(self, organ_id: int):
        self.organ_id = organ_id

    def __repr__(self) -> str:
        return f"{type(self).__name__}(organ_id={self.organ_id})"

    @abstractmethod
    def update(self, blood: BloodComposition, dt: float) -> None:
        """Advance the organ by ``dt`` seconds, reading and writing ``blood``."""

    @abstractmethod
    def summary(self) -> str:
        """One-line status of the organ."""

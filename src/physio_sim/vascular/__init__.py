"""Vascular network: vessels, resistance and coronary flow."""

from physio_sim.vascular.vessel import Vessel
from physio_sim.vascular.network import DEFAULT_VESSELS, VascularNetwork

__all__ = [
    "Vessel",
    "VascularNetwork",
    "DEFAULT_VESSELS",
]

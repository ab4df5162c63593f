"""
Physiology Simulator

A simulator for coupled human physiology in which organs are state machines
sharing one blood medium. Coronary stenosis, myocardial ischemia, arrhythmia
and cardiac arrest emerge from tissue oxygen balance rather than scripted
cascades.

Main components:
- core: constants, enums, the blood medium and the organ contract
- tissue: generic tissue viability and myocardial segment models
- vascular: vessel network with stenosis-dependent resistance
- cardiac: rhythm state machine, ECG synthesis and the heart organ
- patient: organ registry and update loop
- simulation: simulator driver, intervention schedule and YAML scenarios
- metrics: rhythm and biomarker analysis

Quick start:
    from physio_sim.simulation import PhysiologySimulator
    from physio_sim.core.types import SimulationConfig

    sim = PhysiologySimulator(SimulationConfig(time_step=1.0, seed=42))
    sim.schedule(0.0, "add_plaque", vessel="LAD", amount=0.4)
    sim.schedule(60.0, "rupture_plaque", vessel="LAD")
    vitals = sim.run(duration=1800.0)
"""

__version__ = "0.1.0"
__author__ = "Jasper Metz"

# Core types
from physio_sim.core.types import (
    MyocardialRegion,
    OrganKind,
    Rhythm,
    SimulationConfig,
    VesselType,
    VitalSigns,
)
from physio_sim.core.blood import BloodComposition

# Organs
from physio_sim.cardiac import Heart
from physio_sim.vascular import VascularNetwork

# Patient and simulation
from physio_sim.patient import Patient, initialize_patient
from physio_sim.simulation import PhysiologySimulator

__all__ = [
    # Version
    "__version__",
    # Core types
    "MyocardialRegion",
    "OrganKind",
    "Rhythm",
    "SimulationConfig",
    "VesselType",
    "VitalSigns",
    "BloodComposition",
    # Organs
    "Heart",
    "VascularNetwork",
    # Patient
    "Patient",
    "initialize_patient",
    # Simulator
    "PhysiologySimulator",
]

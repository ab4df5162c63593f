"""Core type definitions for the physiology simulator."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from physio_sim.core.constants import (
    DEFAULT_ECG_BUFFER,
    DEFAULT_LEAD_COUNT,
    SEGMENT_MASS_GRAMS,
)


class VesselType(str, Enum):
    """Blood vessel classes."""

    ARTERY = "artery"
    ARTERIOLE = "arteriole"
    CAPILLARY = "capillary"
    VENULE = "venule"
    VEIN = "vein"

    @property
    def wall_thickness_ratio(self) -> float:
        """Typical wall thickness as a proportion of diameter."""
        return {
            VesselType.ARTERY: 0.25,
            VesselType.ARTERIOLE: 0.20,
            VesselType.CAPILLARY: 0.02,
            VesselType.VENULE: 0.10,
            VesselType.VEIN: 0.15,
        }[self]

    @property
    def typical_pressure(self) -> float:
        """Typical intraluminal pressure in mmHg."""
        return {
            VesselType.ARTERY: 100.0,
            VesselType.ARTERIOLE: 60.0,
            VesselType.CAPILLARY: 25.0,
            VesselType.VENULE: 15.0,
            VesselType.VEIN: 5.0,
        }[self]

    @property
    def is_resistance_vessel(self) -> bool:
        """Arteries and arterioles set peripheral resistance and vasomotor tone."""
        return self in (VesselType.ARTERY, VesselType.ARTERIOLE)


class MyocardialRegion(str, Enum):
    """Myocardial wall regions, each fed by one coronary territory."""

    ANTERIOR = "anterior"
    SEPTAL = "septal"
    LATERAL = "lateral"
    INFERIOR = "inferior"
    POSTERIOR = "posterior"
    RIGHT_VENTRICULAR = "right_ventricular"

    @property
    def primary_leads(self) -> tuple[int, ...]:
        """ECG lead indices that best visualize this region."""
        return _PRIMARY_LEADS[self]

    @property
    def supplying_artery(self) -> str:
        """Name of the supplying coronary artery ("RCA/LCx" for dual supply)."""
        return _SUPPLYING_ARTERY[self]

    @property
    def supplying_arteries(self) -> tuple[str, ...]:
        """Individual artery names that perfuse this region."""
        return tuple(self.supplying_artery.split("/"))

    @property
    def default_mass_grams(self) -> float:
        """Typical adult segment mass."""
        return SEGMENT_MASS_GRAMS[self.value]


_PRIMARY_LEADS = {
    MyocardialRegion.ANTERIOR: (2, 3, 4),  # V1-V3
    MyocardialRegion.SEPTAL: (1, 2),  # V1-V2
    MyocardialRegion.LATERAL: (0, 5, 6),  # I, aVL, V5-V6
    MyocardialRegion.INFERIOR: (7, 8, 9),  # II, III, aVF
    MyocardialRegion.POSTERIOR: (10, 11),  # V7-V8
    MyocardialRegion.RIGHT_VENTRICULAR: (10,),  # V4R
}

_SUPPLYING_ARTERY = {
    MyocardialRegion.ANTERIOR: "LAD",
    MyocardialRegion.SEPTAL: "LAD",
    MyocardialRegion.LATERAL: "LCx",
    MyocardialRegion.INFERIOR: "RCA",
    MyocardialRegion.POSTERIOR: "RCA/LCx",
    MyocardialRegion.RIGHT_VENTRICULAR: "RCA",
}


class Rhythm(str, Enum):
    """Cardiac rhythms in order of progression."""

    SINUS = "sinus"
    SINUS_TACHYCARDIA = "sinus_tachycardia"
    SINUS_BRADYCARDIA = "sinus_bradycardia"
    PVCS = "pvcs"
    VENTRICULAR_TACHYCARDIA = "ventricular_tachycardia"
    VENTRICULAR_FIBRILLATION = "ventricular_fibrillation"
    ASYSTOLE = "asystole"

    @property
    def is_sinus(self) -> bool:
        """Sinus-node driven rhythm (normal, fast or slow)."""
        return self in (Rhythm.SINUS, Rhythm.SINUS_TACHYCARDIA, Rhythm.SINUS_BRADYCARDIA)

    @property
    def is_arrest(self) -> bool:
        """Rhythm without effective cardiac output."""
        return self in (Rhythm.VENTRICULAR_FIBRILLATION, Rhythm.ASYSTOLE)


class ChamberState(str, Enum):
    """Mechanical phase of a heart chamber."""

    SYSTOLE = "systole"
    DIASTOLE = "diastole"


class OrganKind(str, Enum):
    """Stable identifiers used to register and look up organs on a patient."""

    HEART = "heart"
    VASCULAR = "vascular"
    LUNGS = "lungs"
    BRAIN = "brain"
    SPINAL_CORD = "spinal_cord"
    STOMACH = "stomach"
    ESOPHAGUS = "esophagus"
    INTESTINES = "intestines"
    PANCREAS = "pancreas"
    LIVER = "liver"
    GALLBLADDER = "gallbladder"
    KIDNEYS = "kidneys"
    BLADDER = "bladder"
    SPLEEN = "spleen"


@dataclass
class SimulationConfig:
    """Complete simulation configuration.

    Attributes:
        time_step: Simulation time step in seconds
        num_ecg_leads: ECG lead count (3, 5 or 12; anything else becomes 12)
        ecg_buffer_size: Samples retained per ECG lead
        seed: Seed for the simulation's random generator (None = entropy)
        patient_id: Identifier of the simulated patient
        record_history: Whether the simulator keeps a vital-sign history
    """

    time_step: float = 0.5
    num_ecg_leads: int = DEFAULT_LEAD_COUNT
    ecg_buffer_size: int = DEFAULT_ECG_BUFFER
    seed: Optional[int] = None
    patient_id: int = 1
    record_history: bool = True


@dataclass
class VitalSigns:
    """Snapshot of the patient's observable state at one point in time.

    Attributes:
        time: Simulation time in seconds
        rhythm: Cardiac rhythm (None when the patient has no heart)
        heart_rate_bpm: Heart rate
        ejection_fraction_percent: Left ventricular ejection fraction
        systolic_bp: Aortic systolic pressure (mmHg)
        diastolic_bp: Aortic diastolic pressure (mmHg)
        chest_pain: Chest pain score (0-10)
        troponin_ng_ml: Summed troponin release
        segment_states: Cellular state name per myocardial region
        coronary_flows: Coronary artery flows in the blood medium (mL/min)
    """

    time: float
    rhythm: Optional[Rhythm]
    heart_rate_bpm: float
    ejection_fraction_percent: float
    systolic_bp: float
    diastolic_bp: float
    chest_pain: float = 0.0
    troponin_ng_ml: float = 0.0
    segment_states: dict[str, str] = field(default_factory=dict)
    coronary_flows: dict[str, float] = field(default_factory=dict)

    @property
    def mean_arterial_pressure(self) -> float:
        """MAP = DBP + (SBP - DBP) / 3."""
        return self.diastolic_bp + (self.systolic_bp - self.diastolic_bp) / 3.0

    @property
    def is_cardiac_arrest(self) -> bool:
        """Whether the snapshot was taken during VF or asystole."""
        return self.rhythm is not None and self.rhythm.is_arrest

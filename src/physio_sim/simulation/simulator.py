"""Main simulation driver for the coupled physiology model."""

from pathlib import Path
from typing import Callable, Optional, Union

import numpy as np

from physio_sim.core.types import SimulationConfig, VitalSigns
from physio_sim.patient.patient import Patient, initialize_patient
from physio_sim.simulation.config_loader import (
    config_from_dict,
    interventions_from_config,
    load_config,
)
from physio_sim.simulation.time_controller import ScheduledIntervention, TimeController


class PhysiologySimulator:
    """Steps a patient through time and records vital signs.

    Attributes:
        config: Simulation configuration
        patient: Simulated patient
        rng: Random generator shared by every stochastic component
        time_controller: Clock and intervention schedule
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        patient: Optional[Patient] = None,
        patient_factory: Optional[Callable[[np.random.Generator], Patient]] = None,
    ):
        """Initialize the simulator.

        Args:
            config: Simulation configuration (uses defaults if None)
            patient: Patient to simulate. Without a factory, `reset` cannot
                rebuild it and raises
            patient_factory: Builds a fresh patient from the shared generator;
                used at construction when `patient` is None and on every reset
        """
        self.config = config or SimulationConfig()
        self.rng = np.random.default_rng(self.config.seed)
        if patient_factory is None and patient is None:
            patient_factory = self._create_patient
        self._patient_factory = patient_factory
        self.patient = patient if patient is not None else patient_factory(self.rng)
        self.time_controller = TimeController(self.config.time_step)
        self._history: list[VitalSigns] = []

    @classmethod
    def from_scenario(cls, path: Union[str, Path]) -> "PhysiologySimulator":
        """Create a simulator from a YAML scenario file.

        Args:
            path: Scenario with `simulation` settings and `interventions`

        Returns:
            Simulator with the scenario's interventions scheduled
        """
        data = load_config(path)
        simulator = cls(config_from_dict(data))
        for intervention in interventions_from_config(data):
            simulator.time_controller.schedule_intervention(intervention)
        return simulator

    def _create_patient(self, rng: np.random.Generator) -> Patient:
        return initialize_patient(
            patient_id=self.config.patient_id,
            num_ecg_leads=self.config.num_ecg_leads,
            ecg_buffer_size=self.config.ecg_buffer_size,
            rng=rng,
        )

    @property
    def simulation_time(self) -> float:
        return self.time_controller.current_time

    @property
    def history(self) -> list[VitalSigns]:
        return self._history.copy()

    def schedule(self, time: float, action: str, **params) -> ScheduledIntervention:
        """Schedule an intervention.

        Args:
            time: Simulation time at which to apply it
            action: Intervention name
            **params: Action arguments

        Returns:
            The scheduled intervention
        """
        intervention = ScheduledIntervention(time=time, action=action, params=params)
        self.time_controller.schedule_intervention(intervention)
        return intervention

    def apply_intervention(self, intervention: ScheduledIntervention) -> bool:
        """Apply an intervention to the patient immediately.

        Returns:
            Whether the intervention took effect
        """
        params = intervention.params
        network = self.patient.vascular
        heart = self.patient.heart

        if intervention.action == "set_blood_value":
            self.patient.blood.set_value(params["field"], params["value"])
            return True
        if intervention.action == "defibrillate":
            return heart.defibrillate() if heart is not None else False
        if network is None:
            return False
        if intervention.action == "add_plaque":
            return network.add_plaque(params["vessel"], params.get("amount", 0.0))
        if intervention.action == "rupture_plaque":
            return network.rupture_plaque(params["vessel"])
        if intervention.action == "constrict":
            return network.constrict(params["vessel"], params.get("amount", 0.0))
        if intervention.action == "dilate":
            return network.dilate(params["vessel"], params.get("amount", 0.0))
        raise ValueError(f"Unknown intervention '{intervention.action}'")

    def vital_signs(self) -> VitalSigns:
        """Snapshot of the patient's current state."""
        blood = self.patient.blood
        heart = self.patient.heart
        if heart is None:
            return VitalSigns(
                time=self.simulation_time,
                rhythm=None,
                heart_rate_bpm=0.0,
                ejection_fraction_percent=0.0,
                systolic_bp=blood.systolic_bp,
                diastolic_bp=blood.diastolic_bp,
                coronary_flows=dict(blood.coronary_flows),
            )
        return VitalSigns(
            time=self.simulation_time,
            rhythm=heart.current_rhythm,
            heart_rate_bpm=heart.heart_rate_bpm,
            ejection_fraction_percent=heart.ejection_fraction_percent,
            systolic_bp=blood.systolic_bp,
            diastolic_bp=blood.diastolic_bp,
            chest_pain=heart.chest_pain_level(),
            troponin_ng_ml=heart.troponin_level(),
            segment_states={
                region.value: segment.state.name for region, segment in heart.segments.items()
            },
            coronary_flows=dict(blood.coronary_flows),
        )

    def step(self) -> VitalSigns:
        """Advance the simulation by one time step.

        Due interventions are applied before the organs update.

        Returns:
            Vital signs at the end of the step
        """
        if self.time_controller.paused:
            return self.vital_signs()

        for intervention in self.time_controller.pop_due_interventions():
            self.apply_intervention(intervention)

        self.patient.update(self.time_controller.time_step)
        self.time_controller.tick()

        vitals = self.vital_signs()
        if self.config.record_history:
            self._history.append(vitals)
        return vitals

    def run(
        self,
        duration: float,
        callback: Optional[Callable[[VitalSigns], None]] = None,
        progress_callback: Optional[Callable[[float], None]] = None,
    ) -> list[VitalSigns]:
        """Run simulation for specified duration.

        Args:
            duration: Simulation duration in seconds
            callback: Optional callback for each step
            progress_callback: Optional progress callback (0-1)

        Returns:
            Vital signs for every step of the run
        """
        results = []
        start_time = self.simulation_time
        end_time = start_time + duration

        # Paused runs would never reach end_time
        if self.time_controller.paused:
            return results

        while self.simulation_time < end_time:
            vitals = self.step()
            results.append(vitals)

            if callback:
                callback(vitals)

            if progress_callback:
                progress = (self.simulation_time - start_time) / duration
                progress_callback(min(1.0, progress))

        return results

    def reset(self, clear_history: bool = True) -> None:
        """Restart from a fresh patient with the configured seed.

        Args:
            clear_history: Whether to clear the vital-sign history

        Raises:
            RuntimeError: If the simulator was given a patient but no factory
        """
        if self._patient_factory is None:
            raise RuntimeError("Cannot reset a supplied patient without a patient_factory")
        self.rng = np.random.default_rng(self.config.seed)
        self.patient = self._patient_factory(self.rng)
        self.time_controller.reset()
        if clear_history:
            self._history.clear()

    def get_summary(self) -> dict:
        """Get summary statistics from the recorded history.

        Returns:
            Dictionary with summary statistics
        """
        if not self._history:
            return {
                "num_steps": 0,
                "duration": 0.0,
                "final_rhythm": None,
                "max_heart_rate": 0.0,
                "min_ejection_fraction": 0.0,
                "peak_troponin": 0.0,
                "max_chest_pain": 0.0,
                "cardiac_arrest": False,
            }

        final = self._history[-1]
        return {
            "num_steps": len(self._history),
            "duration": self.simulation_time,
            "final_rhythm": final.rhythm.value if final.rhythm is not None else None,
            "max_heart_rate": max(v.heart_rate_bpm for v in self._history),
            "min_ejection_fraction": min(v.ejection_fraction_percent for v in self._history),
            "peak_troponin": max(v.troponin_ng_ml for v in self._history),
            "max_chest_pain": max(v.chest_pain for v in self._history),
            "cardiac_arrest": any(v.is_cardiac_arrest for v in self._history),
        }

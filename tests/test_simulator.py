"""
Tests for the simulation driver and time controller.
"""

import numpy as np
import pytest

from physio_sim.core.types import Rhythm, SimulationConfig
from physio_sim.patient import Patient
from physio_sim.simulation import PhysiologySimulator, ScheduledIntervention, TimeController
from physio_sim.vascular import VascularNetwork


@pytest.fixture
def simulator():
    return PhysiologySimulator(SimulationConfig(time_step=1.0, seed=42))


class TestTimeController:
    """Tests for the clock and schedule."""

    def test_tick(self):
        controller = TimeController(time_step=0.5)
        controller.tick()
        controller.tick()
        assert controller.current_time == pytest.approx(1.0)

    def test_pause_stops_clock(self):
        controller = TimeController(time_step=0.5)
        controller.pause()
        controller.tick()
        assert controller.current_time == 0.0
        assert not controller.toggle_pause()

    def test_tick_callback(self):
        controller = TimeController(time_step=2.0)
        times = []
        controller.set_time_tick_callback(times.append)
        controller.tick()
        controller.tick()
        assert times == [2.0, 4.0]

    def test_set_time_not_negative(self):
        controller = TimeController()
        controller.set_time(-5.0)
        assert controller.current_time == 0.0

    def test_due_interventions_fire_once(self):
        controller = TimeController(time_step=1.0)
        late = ScheduledIntervention(time=2.0, action="defibrillate")
        early = ScheduledIntervention(time=0.0, action="defibrillate")
        controller.schedule_intervention(late)
        controller.schedule_intervention(early)
        assert controller.schedule == [early, late]

        assert controller.pop_due_interventions() == [early]
        assert controller.pop_due_interventions() == []
        controller.set_time(3.0)
        assert controller.pop_due_interventions() == [late]

    def test_reset_rearms(self):
        controller = TimeController(time_step=1.0)
        intervention = ScheduledIntervention(time=0.0, action="defibrillate")
        controller.schedule_intervention(intervention)
        controller.pop_due_interventions()
        controller.tick()
        controller.reset()
        assert controller.current_time == 0.0
        assert not intervention.fired

    def test_unknown_action(self):
        with pytest.raises(ValueError, match="Available"):
            ScheduledIntervention(time=0.0, action="amputate")


class TestStepping:
    """Tests for stepping and running."""

    def test_step(self, simulator):
        vitals = simulator.step()
        assert vitals.time == pytest.approx(1.0)
        assert vitals.rhythm == Rhythm.SINUS
        assert vitals.systolic_bp == pytest.approx(130.0)
        assert len(vitals.segment_states) == 6
        assert len(simulator.history) == 1

    def test_run(self, simulator):
        seen = []
        progress = []
        results = simulator.run(10.0, callback=seen.append, progress_callback=progress.append)
        assert len(results) == 10
        assert seen == results
        assert progress[-1] == pytest.approx(1.0)
        assert simulator.simulation_time == pytest.approx(10.0)

    def test_history_is_a_copy(self, simulator):
        simulator.step()
        simulator.history.clear()
        assert len(simulator.history) == 1

    def test_history_can_be_disabled(self):
        simulator = PhysiologySimulator(SimulationConfig(time_step=1.0, record_history=False))
        simulator.run(5.0)
        assert simulator.history == []

    def test_paused_simulator_does_not_advance(self, simulator):
        simulator.time_controller.pause()
        vitals = simulator.step()
        assert vitals.time == 0.0
        assert simulator.history == []
        assert simulator.run(10.0) == []

    def test_vascular_only_patient(self):
        patient = Patient(patient_id=5)
        patient.add_organ(VascularNetwork(organ_id=0))
        simulator = PhysiologySimulator(SimulationConfig(time_step=1.0), patient=patient)
        vitals = simulator.step()
        assert vitals.rhythm is None
        assert not vitals.is_cardiac_arrest
        assert simulator.get_summary()["final_rhythm"] is None


class TestInterventions:
    """Tests for scheduled interventions."""

    def test_immediate_intervention(self, simulator):
        simulator.schedule(0.0, "add_plaque", vessel="LAD", amount=0.4)
        simulator.step()
        plaque = simulator.patient.vascular.get_vessel("LAD").plaque_buildup
        assert plaque == pytest.approx(0.4, abs=1e-3)

    def test_intervention_fires_at_its_time(self, simulator):
        simulator.schedule(5.0, "add_plaque", vessel="LAD", amount=0.4)
        simulator.run(5.0)
        assert simulator.patient.vascular.get_vessel("LAD").plaque_buildup < 0.01
        simulator.step()
        assert simulator.patient.vascular.get_vessel("LAD").plaque_buildup > 0.39

    def test_set_blood_value(self, simulator):
        simulator.schedule(0.0, "set_blood_value", field="chemistry.toxin_level_au", value=200.0)
        simulator.step()
        assert simulator.patient.blood.chemistry.toxin_level_au == 200.0
        assert simulator.patient.heart.current_rhythm == Rhythm.SINUS_BRADYCARDIA

    def test_unknown_blood_field(self, simulator):
        simulator.schedule(0.0, "set_blood_value", field="chemistry.unobtainium", value=1.0)
        with pytest.raises(ValueError, match="Unknown blood field"):
            simulator.step()

    def test_unknown_vessel_is_ignored(self, simulator):
        intervention = simulator.schedule(0.0, "rupture_plaque", vessel="Nope")
        simulator.step()
        assert intervention.fired

    def test_defibrillation(self, simulator):
        heart = simulator.patient.heart
        heart.rhythm.rhythm = Rhythm.VENTRICULAR_FIBRILLATION
        heart.rhythm.ventricular_rate_bpm = 300.0
        simulator.schedule(0.0, "defibrillate")
        vitals = simulator.step()
        assert not vitals.is_cardiac_arrest

    def test_rupture_scenario(self):
        simulator = PhysiologySimulator(SimulationConfig(time_step=10.0, seed=3))
        simulator.schedule(0.0, "add_plaque", vessel="LAD", amount=0.4)
        simulator.schedule(0.0, "rupture_plaque", vessel="LAD")
        vitals = simulator.run(1500.0)

        assert vitals[0].coronary_flows["LAD"] < 1.0
        assert vitals[-1].segment_states["anterior"] == "Injured"
        assert vitals[-1].chest_pain > 0.0
        assert vitals[-1].ejection_fraction_percent < 60.0


class TestResetAndSummary:
    """Tests for reproducibility and summaries."""

    def test_reset(self, simulator):
        simulator.schedule(0.0, "add_plaque", vessel="LAD", amount=0.4)
        simulator.run(5.0)
        old_patient = simulator.patient

        simulator.reset()
        assert simulator.simulation_time == 0.0
        assert simulator.history == []
        assert simulator.patient is not old_patient

        simulator.step()
        plaque = simulator.patient.vascular.get_vessel("LAD").plaque_buildup
        assert plaque == pytest.approx(0.4, abs=1e-3)

    def test_reset_rebuilds_with_factory(self):
        def vascular_only(rng):
            patient = Patient(patient_id=9)
            patient.add_organ(VascularNetwork(organ_id=0))
            return patient

        simulator = PhysiologySimulator(
            SimulationConfig(time_step=1.0), patient_factory=vascular_only
        )
        first = simulator.patient
        simulator.run(3.0)
        simulator.reset()

        assert simulator.patient is not first
        assert simulator.patient.patient_id == 9
        assert simulator.patient.heart is None
        assert simulator.patient.vascular is not None

    def test_reset_without_factory_raises(self):
        patient = Patient(patient_id=5)
        patient.add_organ(VascularNetwork(organ_id=0))
        simulator = PhysiologySimulator(SimulationConfig(time_step=1.0), patient=patient)
        with pytest.raises(RuntimeError, match="patient_factory"):
            simulator.reset()
        assert simulator.patient is patient

    def test_same_seed_same_run(self):
        runs = []
        for _ in range(2):
            simulator = PhysiologySimulator(SimulationConfig(time_step=5.0, seed=7))
            simulator.schedule(0.0, "add_plaque", vessel="LAD", amount=0.4)
            simulator.schedule(0.0, "rupture_plaque", vessel="LAD")
            history = simulator.run(3000.0)
            runs.append((history, simulator.patient.heart.ecg.get_lead(2)))

        (history_a, ecg_a), (history_b, ecg_b) = runs
        assert [v.rhythm for v in history_a] == [v.rhythm for v in history_b]
        assert [v.heart_rate_bpm for v in history_a] == [v.heart_rate_bpm for v in history_b]
        np.testing.assert_array_equal(ecg_a, ecg_b)

    def test_empty_summary(self, simulator):
        summary = simulator.get_summary()
        assert summary["num_steps"] == 0
        assert summary["final_rhythm"] is None

    def test_summary(self, simulator):
        simulator.run(10.0)
        summary = simulator.get_summary()
        assert summary["num_steps"] == 10
        assert summary["duration"] == pytest.approx(10.0)
        assert summary["final_rhythm"] == "sinus"
        assert summary["max_heart_rate"] == pytest.approx(75.0)
        assert summary["min_ejection_fraction"] == pytest.approx(60.0)
        assert summary["peak_troponin"] == 0.0
        assert summary["cardiac_arrest"] is False

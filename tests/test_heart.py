"""
Tests for the heart organ.
"""

import pytest

from physio_sim.cardiac.heart import Heart, coronary_supply_fraction
from physio_sim.core.types import ChamberState, MyocardialRegion, Rhythm
from physio_sim.tissue.myocardium import InjuredCell


@pytest.fixture
def heart(rng):
    return Heart(organ_id=1, rng=rng)


class TestCoronarySupply:
    """Tests for per-region supply with flow reserve."""

    def test_resting_flow_fully_supplies(self, blood):
        for region in MyocardialRegion:
            assert coronary_supply_fraction(blood, region) == 1.0

    def test_reserve_compensates_partially(self, blood):
        blood.coronary_flows["LAD"] = 4.0
        assert coronary_supply_fraction(blood, MyocardialRegion.ANTERIOR) == pytest.approx(0.4)
        assert coronary_supply_fraction(blood, MyocardialRegion.LATERAL) == 1.0

    def test_dual_supply_averages(self, blood):
        blood.coronary_flows["LCx"] = 0.0
        assert coronary_supply_fraction(blood, MyocardialRegion.POSTERIOR) == 1.0
        blood.coronary_flows["RCA"] = 3.5
        assert coronary_supply_fraction(blood, MyocardialRegion.POSTERIOR) == pytest.approx(0.2)

    def test_missing_artery_uses_default(self, blood):
        del blood.coronary_flows["RCA"]
        assert coronary_supply_fraction(blood, MyocardialRegion.INFERIOR) == 1.0


class TestBaseline:
    """Tests for the healthy resting heart."""

    def test_initial_state(self, heart):
        assert heart.current_rhythm == Rhythm.SINUS
        assert len(heart.segments) == 6
        assert heart.ecg.num_leads == 12

    def test_healthy_steady_state(self, heart, blood):
        for _ in range(10):
            heart.update(blood, 1.0)

        assert heart.current_rhythm == Rhythm.SINUS
        assert heart.heart_rate_bpm == pytest.approx(75.0)
        assert heart.ejection_fraction_percent == pytest.approx(60.0)
        assert heart.chest_pain_level() == 0.0
        assert heart.troponin_level() == 0.0
        assert all(s.state.name == "Healthy" for s in heart.segments.values())

    def test_publishes_pressure_and_output(self, heart, blood):
        heart.update(blood, 1.0)
        assert blood.systolic_bp == pytest.approx(130.0)
        assert blood.diastolic_bp == pytest.approx(82.0)
        assert blood.cardiac_output_l_per_min == pytest.approx(5.4)

    def test_valves_follow_ventricular_phase(self, heart, blood):
        for _ in range(40):
            heart.update(blood, 0.05)
            systole = heart.chambers["LV"].state == ChamberState.SYSTOLE
            assert heart.valves["aortic"].is_open == systole
            assert heart.valves["pulmonary"].is_open == systole
            assert heart.valves["mitral"].is_open != systole
            if systole:
                assert heart.chambers["LV"].volume_ml == pytest.approx(48.0)

    def test_chambers_share_the_ecg_beat_clock(self, heart, blood):
        for _ in range(40):
            heart.update(blood, 0.05)
            progress = heart.ecg.cycle_progress(heart.heart_rate_bpm)
            assert (heart.chambers["LA"].state == ChamberState.SYSTOLE) == (progress < 0.2)
            assert (heart.chambers["LV"].state == ChamberState.SYSTOLE) == (0.2 <= progress < 0.5)

    def test_lead_count(self, rng, blood):
        heart = Heart(organ_id=1, num_ecg_leads=3, ecg_buffer_size=5, rng=rng)
        heart.update(blood, 0.1)
        assert heart.ecg.num_leads == 3
        assert len(heart.ecg.leads[0]) == 1

    def test_summary(self, heart):
        assert heart.summary().startswith("Heart: HR=75 bpm, EF=60%")


class TestIschemia:
    """Tests for ischemia emerging from coronary flow."""

    def test_lad_occlusion_injures_anterior_wall(self, heart, blood):
        blood.coronary_flows["LAD"] = 0.0
        for _ in range(130):
            heart.update(blood, 10.0)

        assert heart.count_segments(InjuredCell) == 2
        assert heart.segments[MyocardialRegion.ANTERIOR].state.name == "Injured"
        assert heart.segments[MyocardialRegion.SEPTAL].state.name == "Injured"
        assert heart.segments[MyocardialRegion.INFERIOR].state.name == "Healthy"
        assert heart.chest_pain_level() == pytest.approx(10.0)
        assert 0.0 < heart.ejection_fraction_percent < 60.0
        assert heart.current_rhythm == Rhythm.SINUS_TACHYCARDIA
        assert heart.heart_rate_bpm > 100.0

    def test_toxin_depresses_rate_and_contraction(self, heart, blood):
        blood.chemistry.toxin_level_au = 200.0
        heart.update(blood, 1.0)
        heart.update(blood, 1.0)
        assert heart.heart_rate_bpm == pytest.approx(55.0)
        assert heart.ejection_fraction_percent == pytest.approx(50.0)
        assert heart.current_rhythm == Rhythm.SINUS_BRADYCARDIA


class TestArrest:
    """Tests for pump failure in arrest rhythms."""

    def test_vf_has_no_output(self, heart, blood):
        heart.rhythm.rhythm = Rhythm.VENTRICULAR_FIBRILLATION
        heart.rhythm.ventricular_rate_bpm = 300.0
        heart.update(blood, 1.0)

        assert heart.is_cardiac_arrest()
        assert heart.heart_rate_bpm == 300.0
        assert heart.ejection_fraction_percent == 0.0
        assert heart.cardiac_output_l_per_min == 0.0
        assert blood.systolic_bp == 0.0
        assert blood.cardiac_output_l_per_min == 0.0

    def test_defibrillation_restores_sinus(self, heart, blood):
        heart.rhythm.rhythm = Rhythm.VENTRICULAR_FIBRILLATION
        heart.rhythm.ventricular_rate_bpm = 300.0
        heart.update(blood, 1.0)

        assert heart.defibrillate()
        heart.update(blood, 1.0)
        assert not heart.is_cardiac_arrest()
        assert heart.current_rhythm.is_sinus
        assert heart.ejection_fraction_percent == pytest.approx(60.0)

    def test_asystole(self, heart, blood):
        heart.rhythm.rhythm = Rhythm.ASYSTOLE
        heart.update(blood, 1.0)
        assert heart.heart_rate_bpm == 0.0
        assert heart.ejection_fraction_percent == 0.0
        assert blood.diastolic_bp == 0.0
        assert not heart.defibrillate()

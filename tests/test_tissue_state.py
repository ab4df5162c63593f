"""
Tests for the generic tissue viability state machine.
"""

import pytest

from physio_sim.tissue.tissue_state import (
    Healthy,
    Hypoperfused,
    Injured,
    Ischemic,
    Necrotic,
    TissuePerfusion,
    TissueState,
    advance_condition,
    functional_capacity,
    inflammation_level,
    lactate_production_rate,
    oxygen_consumption_rate,
    supply_ratio,
)


class TestSupplyRatio:
    """Tests for O2 delivery / demand."""

    def test_ratio(self):
        assert supply_ratio(8.0, 10.0) == pytest.approx(0.8)

    def test_zero_demand_is_fully_supplied(self):
        """No demand means no deficit, whatever the delivery."""
        assert supply_ratio(0.0, 0.0) == 1.0
        assert supply_ratio(5.0, 0.0) == 1.0


class TestHealthyAndHypoperfused:
    """Tests for the reversible low-flow states."""

    def test_healthy_is_fixed_point_at_full_supply(self):
        condition = Healthy()
        for _ in range(1000):
            condition = advance_condition(condition, 1.0, 10.0)
        assert isinstance(condition, Healthy)

    def test_healthy_to_hypoperfused(self):
        condition = advance_condition(Healthy(), 0.85, 1.0)
        assert condition == Hypoperfused(0.0)

    def test_healthy_never_jumps_past_hypoperfused(self):
        """Even zero supply over a huge step moves only one state."""
        condition = advance_condition(Healthy(), 0.0, 1e6)
        assert isinstance(condition, Hypoperfused)

    def test_hypoperfused_recovers(self):
        assert isinstance(advance_condition(Hypoperfused(300.0), 0.95, 1.0), Healthy)

    def test_hypoperfused_to_ischemic_on_low_ratio(self):
        assert advance_condition(Hypoperfused(10.0), 0.5, 1.0) == Ischemic(0.0)

    def test_prolonged_hypoperfusion_becomes_ischemic(self):
        condition = Hypoperfused()
        for _ in range(6):
            condition = advance_condition(condition, 0.7, 100.0)
        assert condition == Hypoperfused(600.0)

        condition = advance_condition(condition, 0.7, 100.0)
        assert condition == Ischemic(0.0)


class TestIschemicAndInjured:
    """Tests for ischemia, injury and necrosis."""

    def test_early_reperfusion_fully_recovers(self):
        assert isinstance(advance_condition(Ischemic(250.0), 0.85, 1.0), Healthy)

    def test_late_reperfusion_leaves_injury(self):
        condition = advance_condition(Ischemic(600.0), 0.85, 1.0)
        assert isinstance(condition, Injured)
        assert condition.duration_seconds == 0.0
        assert condition.severity == pytest.approx(600.0 / 1800.0)

    def test_reperfusion_injury_severity_capped(self):
        condition = advance_condition(Ischemic(1700.0), 1.0, 1.0)
        assert condition.severity == pytest.approx(0.5)

    def test_prolonged_ischemia_becomes_injury(self):
        condition = advance_condition(Ischemic(1750.0), 0.5, 100.0)
        assert isinstance(condition, Injured)
        assert condition.duration_seconds == 0.0
        assert condition.severity == pytest.approx(1850.0 / 3600.0)

    def test_ischemia_accumulates(self):
        assert advance_condition(Ischemic(100.0), 0.5, 50.0) == Ischemic(150.0)

    def test_injury_heals_when_perfused(self):
        condition = advance_condition(Injured(0.0, 0.5), 1.0, 1000.0)
        assert isinstance(condition, Injured)
        assert condition.duration_seconds == 0.0
        assert condition.severity == pytest.approx(0.4)

    def test_mild_injury_heals_completely(self):
        assert isinstance(advance_condition(Injured(0.0, 0.15), 1.0, 1000.0), Healthy)

    def test_injury_worsens_without_necrosis_below_severity(self):
        condition = advance_condition(Injured(3590.0, 0.79), 0.5, 20.0)
        assert isinstance(condition, Injured)
        assert condition.duration_seconds == pytest.approx(3610.0)
        assert condition.severity == pytest.approx(0.794)

    def test_severe_prolonged_injury_becomes_necrotic(self):
        condition = advance_condition(Injured(3590.0, 0.81), 0.5, 20.0)
        assert isinstance(condition, Necrotic)
        assert condition.days_old == 0.0
        assert condition.extent == pytest.approx(0.814)

    def test_necrosis_is_terminal_and_ages(self):
        condition = Necrotic(1.0, 0.7)
        condition = advance_condition(condition, 1.0, 86400.0)
        assert isinstance(condition, Necrotic)
        assert condition.days_old == pytest.approx(2.0)
        assert condition.extent == pytest.approx(0.7)

    def test_unknown_condition_raises(self):
        with pytest.raises(TypeError):
            advance_condition("ischemic", 1.0, 1.0)


class TestConditionInvariants:
    """Tests for field clamping on construction."""

    def test_severity_clamped(self):
        assert Injured(severity=1.5).severity == 1.0
        assert Injured(severity=-0.5).severity == 0.0

    def test_extent_clamped(self):
        assert Necrotic(extent=-0.2).extent == 0.0

    def test_durations_non_negative(self):
        assert Ischemic(-5.0).duration_seconds == 0.0
        assert Hypoperfused(-1.0).duration_seconds == 0.0
        assert Necrotic(days_old=-1.0).days_old == 0.0


class TestConditionQueries:
    """Tests for derived tissue properties."""

    def test_functional_capacity(self):
        assert functional_capacity(Healthy()) == 1.0
        assert functional_capacity(Hypoperfused(300.0)) == pytest.approx(0.9)
        assert functional_capacity(Hypoperfused(6000.0)) == pytest.approx(0.7)
        assert functional_capacity(Ischemic(1800.0)) == pytest.approx(0.2)
        assert functional_capacity(Injured(0.0, 0.4)) == pytest.approx(0.6)
        assert functional_capacity(Necrotic(0.0, 0.7)) == pytest.approx(0.3)

    def test_acute_necrosis_is_inflammatory(self):
        assert inflammation_level(Necrotic(1.5, 0.9)) == pytest.approx(0.45)
        assert inflammation_level(Necrotic(5.0, 0.9)) == pytest.approx(0.09)
        assert inflammation_level(Healthy()) == 0.0

    def test_oxygen_consumption(self):
        assert oxygen_consumption_rate(Ischemic(10.0)) == pytest.approx(0.3)
        assert oxygen_consumption_rate(Injured(0.0, 0.4)) == pytest.approx(0.6)

    def test_lactate_production(self):
        assert lactate_production_rate(Ischemic(300.0)) == pytest.approx(0.5)
        assert lactate_production_rate(Ischemic(1800.0)) == pytest.approx(2.0)
        assert lactate_production_rate(Necrotic()) == 0.0


class TestTissueState:
    """Tests for the mutable state wrapper."""

    def test_starts_healthy(self):
        state = TissueState()
        assert state.name == "Healthy"
        assert state.functional_capacity() == 1.0

    def test_progress_uses_supply_ratio(self):
        state = TissueState()
        state.progress(oxygen_delivery=4.0, oxygen_demand=10.0, dt=1.0)
        assert state.name == "Hypoperfused"
        state.progress(oxygen_delivery=4.0, oxygen_demand=10.0, dt=1.0)
        assert state.name == "Ischemic"


class TestTissuePerfusion:
    """Tests for generic organ perfusion bookkeeping."""

    def test_from_mass(self):
        tissue = TissuePerfusion.from_mass(100.0, 0.5)
        assert tissue.baseline_flow_ml_per_min == pytest.approx(50.0)
        assert tissue.blood_flow_ml_per_min == pytest.approx(50.0)
        assert tissue.oxygen_consumption_ml_per_min == pytest.approx(5.0)
        assert tissue.perfusion_ratio() == pytest.approx(1.0)

    def test_normal_flow_stays_healthy(self):
        tissue = TissuePerfusion.from_mass(100.0, 0.5)
        tissue.update(50.0, 20.0, 1.0, 1.0)
        assert tissue.oxygen_delivery_ml_per_min == pytest.approx(10.0)
        assert tissue.state.name == "Healthy"

    def test_low_flow_degrades_one_state_per_tick(self):
        tissue = TissuePerfusion.from_mass(100.0, 0.5)
        tissue.update(10.0, 20.0, 1.0, 1.0)
        assert tissue.state.name == "Hypoperfused"
        assert tissue.perfusion_ratio() == pytest.approx(0.2)

        tissue.update(10.0, 20.0, 1.0, 1.0)
        assert tissue.state.name == "Ischemic"

    def test_zero_metabolic_rate_has_no_demand(self):
        tissue = TissuePerfusion.from_mass(100.0, 0.5)
        tissue.update(0.0, 20.0, 0.0, 1.0)
        assert tissue.state.name == "Healthy"

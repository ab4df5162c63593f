"""
Tests for rhythm episode and biomarker analysis.
"""

import pytest

from physio_sim.core.types import Rhythm, VitalSigns
from physio_sim.metrics import RhythmAnalyzer, RhythmEpisode

SEQUENCE = (
    [Rhythm.SINUS] * 3
    + [Rhythm.PVCS] * 2
    + [Rhythm.VENTRICULAR_TACHYCARDIA] * 2
    + [Rhythm.VENTRICULAR_FIBRILLATION] * 3
)


def make_history() -> list[VitalSigns]:
    return [
        VitalSigns(
            time=float(t),
            rhythm=rhythm,
            heart_rate_bpm=75.0 + 10.0 * t,
            ejection_fraction_percent=60.0,
            systolic_bp=120.0,
            diastolic_bp=80.0,
            chest_pain=0.5 * t,
            troponin_ng_ml=0.1 * t,
        )
        for t, rhythm in enumerate(SEQUENCE)
    ]


@pytest.fixture
def analyzer():
    return RhythmAnalyzer(make_history())


class TestEpisodes:
    """Tests for splitting history into rhythm episodes."""

    def test_find_episodes(self, analyzer):
        episodes = analyzer.find_episodes()
        assert episodes[0] == RhythmEpisode(Rhythm.SINUS, 0.0, 3.0)
        assert episodes[-1] == RhythmEpisode(Rhythm.VENTRICULAR_FIBRILLATION, 7.0, 9.0)
        assert len(episodes) == 4

    def test_rhythm_sequence(self, analyzer):
        assert analyzer.rhythm_sequence() == [
            Rhythm.SINUS,
            Rhythm.PVCS,
            Rhythm.VENTRICULAR_TACHYCARDIA,
            Rhythm.VENTRICULAR_FIBRILLATION,
        ]

    def test_time_in_rhythm(self, analyzer):
        totals = analyzer.time_in_rhythm()
        assert totals[Rhythm.SINUS] == pytest.approx(3.0)
        assert totals[Rhythm.PVCS] == pytest.approx(2.0)
        assert totals[Rhythm.VENTRICULAR_TACHYCARDIA] == pytest.approx(2.0)
        assert totals[Rhythm.VENTRICULAR_FIBRILLATION] == pytest.approx(2.0)

    def test_time_to_first(self, analyzer):
        assert analyzer.time_to_first(Rhythm.VENTRICULAR_FIBRILLATION) == 7.0
        assert analyzer.time_to_first(Rhythm.ASYSTOLE) is None

    def test_arrest_duration(self, analyzer):
        assert analyzer.arrest_duration() == pytest.approx(2.0)

    def test_samples_without_rhythm_skipped(self):
        history = make_history()
        history.insert(0, VitalSigns(-1.0, None, 0.0, 0.0, 120.0, 80.0))
        analyzer = RhythmAnalyzer(history)
        assert analyzer.find_episodes()[0].start_time == 0.0


class TestTrends:
    """Tests for biomarker and symptom summaries."""

    def test_peak_troponin(self, analyzer):
        assert analyzer.peak_troponin() == pytest.approx(0.9)

    def test_chest_pain_trend(self, analyzer):
        assert analyzer.chest_pain_trend() == pytest.approx(0.5)

    def test_too_short_history(self):
        analyzer = RhythmAnalyzer()
        assert analyzer.duration == 0.0
        assert analyzer.chest_pain_trend() == 0.0
        assert analyzer.find_episodes() == []

    def test_add_and_clear(self):
        analyzer = RhythmAnalyzer()
        for vitals in make_history():
            analyzer.add_vitals(vitals)
        assert analyzer.duration == pytest.approx(9.0)
        assert analyzer.time_step == pytest.approx(1.0)
        analyzer.clear_history()
        assert analyzer.history == []

    def test_summary(self, analyzer):
        summary = analyzer.get_summary()
        assert summary["num_episodes"] == 4
        assert summary["num_rhythm_changes"] == 3
        assert summary["arrest_duration"] == pytest.approx(2.0)
        assert summary["max_chest_pain"] == pytest.approx(4.5)
        assert summary["mean_heart_rate"] == pytest.approx(120.0)

"""Tests for the heuristic word scores."""

import pytest

from apollyo.scoring import heuristics

SAMPLE_WORDS = ['cat', 'rocket', 'strengths', 'jukebox', 'aaaa', 'zzzzqx', 'banana', 'x', '', 'Balloon']


class TestRarity:
    def test_short_common_word_scores_zero(self):
        assert heuristics.rarity('cat') == 0.0

    def test_rare_letter_density_adds_bonus(self):
        # length 5 -> 0.1, two of five letters rare -> 0.16
        assert heuristics.rarity('kayak') == pytest.approx(0.26)

    def test_unnatural_consonant_run_is_penalised(self):
        # length 9 -> 0.3, "ngths" run -> -0.2
        assert heuristics.rarity('strengths') == pytest.approx(0.1)

    def test_never_negative(self):
        assert heuristics.rarity('bcdfg') == 0.0


class TestComponentScores:
    def test_pronounceability_balanced_word(self):
        assert heuristics.pronounceability('rocket') == pytest.approx(1.0)

    def test_pronounceability_cluster_heavy_word(self):
        assert heuristics.pronounceability('strengths') == pytest.approx(0.5)

    def test_memorability_all_bonuses(self):
        assert heuristics.memorability('balloon') == pytest.approx(1.0)

    def test_professionalism_penalises_childish_runs(self):
        assert heuristics.professionalism('zzzx') < heuristics.professionalism('zeno')


class TestMarketPotential:
    def test_weighted_sum_is_clamped(self):
        # Unclamped: 0.5 + 0.3 + 0.21 + 0.2 + 0.06 = 1.27
        assert heuristics.market_potential('rocket') == 1.0

    def test_base_is_at_least_half(self):
        assert heuristics.market_potential('bcdfghjk') >= 0.5


class TestProperties:
    @pytest.mark.parametrize('word', SAMPLE_WORDS)
    def test_scores_are_in_unit_interval(self, word):
        scores = heuristics.score_word(word)
        for value in (
            scores.rarity,
            scores.pronounceability,
            scores.memorability,
            scores.professionalism,
            scores.linguistic_flexibility,
            scores.market_potential,
        ):
            assert 0.0 <= value <= 1.0

    @pytest.mark.parametrize('word', SAMPLE_WORDS)
    def test_deterministic(self, word):
        assert heuristics.score_word(word) == heuristics.score_word(word)

    def test_to_dict_rounds_breakdown(self):
        data = heuristics.score_word('rocket').to_dict()
        assert data['word'] == 'rocket'
        assert data['market_potential'] == 1.0
        assert set(data['breakdown']) == {
            'rarity', 'pronounceability', 'memorability', 'professionalism', 'linguistic_flexibility',
        }

"""Tests for ranking and the pattern diversity cap."""

from apollyo.filters.learning import LearningSnapshot
from apollyo.scoring.ranking import diversify, rank


class TestRank:
    def test_descending_by_overall(self, make_result):
        results = [make_result('a', 0.2), make_result('b', 0.9), make_result('c', 0.5)]
        assert [r.word for r in rank(results)] == ['b', 'c', 'a']

    def test_stable_for_ties(self, make_result):
        results = [make_result('first', 0.5), make_result('second', 0.5)]
        assert [r.word for r in rank(results)] == ['first', 'second']

    def test_preferred_pattern_breaks_ties(self, make_result):
        results = [make_result('plain', 0.5, 'CVC'), make_result('liked', 0.5, 'CVCVC')]
        learning = LearningSnapshot(preferred_patterns=frozenset({'CVCVC'}))
        assert [r.word for r in rank(results, learning)] == ['liked', 'plain']

    def test_preference_never_beats_score(self, make_result):
        results = [make_result('plain', 0.6, 'CVC'), make_result('liked', 0.5, 'CVCVC')]
        learning = LearningSnapshot(preferred_patterns=frozenset({'CVCVC'}))
        assert rank(results, learning)[0].word == 'plain'


class TestDiversify:
    def test_caps_each_pattern_bucket(self, make_result):
        results = [
            make_result('a1', 0.9, 'CVCV'),
            make_result('a2', 0.8, 'CVCV'),
            make_result('a3', 0.7, 'CVCV'),
            make_result('a4', 0.6, 'CVCV'),
            make_result('b1', 0.5, 'CVC'),
            make_result('b2', 0.4, 'CVC'),
        ]
        # ceil(6 / 2) = 3 per bucket
        diverse = diversify(results, by_pattern=True)
        assert [r.word for r in diverse] == ['a1', 'a2', 'a3', 'b1', 'b2']

    def test_without_pattern_flag_only_ranks(self, make_result):
        results = [make_result('a', 0.1, 'CVC'), make_result('b', 0.2, 'CVC')]
        assert [r.word for r in diversify(results, by_pattern=False)] == ['b', 'a']

    def test_empty(self):
        assert diversify([], by_pattern=True) == []

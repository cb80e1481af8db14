"""Tests for PatternGenerator."""

import random

from apollyo.generators.pattern_generator import PatternGenerator
from apollyo.utils.word_validator import is_likely_english


class TestBuildWord:
    def test_pads_up_to_min_length(self, rng):
        generator = PatternGenerator(rng=rng)
        assert len(generator.build_word('CV', min_length=5, max_length=8)) == 5

    def test_cuts_at_max_length(self, rng):
        generator = PatternGenerator(rng=rng)
        assert len(generator.build_word('CCVCC', min_length=1, max_length=3)) == 3

    def test_only_letters_from_the_alphabets(self, rng):
        generator = PatternGenerator(rng=rng)
        word = generator.build_word('CVCVC')
        assert set(word) <= set(PatternGenerator.CONSONANTS + PatternGenerator.VOWELS)


class TestTemplates:
    def test_draw_returns_known_template(self, rng):
        generator = PatternGenerator(rng=rng)
        for _ in range(50):
            assert generator.select_weighted_template() in PatternGenerator.TEMPLATES

    def test_overshooting_bias_falls_back_to_cvc(self, rng):
        generator = PatternGenerator(rng=rng)
        assert generator.select_weighted_template(bias_factor=10) == 'CVC'


class TestGenerate:
    def test_words_fit_bounds_and_look_english(self, rng):
        generator = PatternGenerator(min_length=4, max_length=6, rng=rng)
        words = generator.generate(30)
        assert len(words) <= 30
        for word in words:
            assert 4 <= len(word) <= 6
            assert is_likely_english(word)

    def test_seeded_generators_agree(self):
        first = PatternGenerator(rng=random.Random(7)).generate(20)
        second = PatternGenerator(rng=random.Random(7)).generate(20)
        assert first == second

"""Tests for EnglishValidator."""

import pytest

from apollyo.scoring.english_validator import EnglishValidator


@pytest.fixture
def validator():
    return EnglishValidator(known_words=[])


class TestValidate:
    def test_rare_english_looking_word_is_valid(self, validator):
        result = validator.validate('jukebox')
        assert result.is_valid
        assert result.confidence == pytest.approx(1.0)
        assert result.rarity_score == pytest.approx(0.2 + 3 / 7 * 0.4)
        assert result.issues == ()

    def test_common_word_is_not_rare_enough(self, validator):
        result = validator.validate('cat')
        assert not result.is_valid
        assert "Too common - not rare enough" in result.issues
        assert "Unnatural sound flow" in result.issues
        assert result.confidence == pytest.approx(0.85)

    def test_non_letters(self, validator):
        result = validator.validate('héllo')
        assert not result.is_valid
        assert "Contains non-English characters" in result.issues
        assert result.confidence == 0.0

    def test_garbage_never_raises(self, validator):
        result = validator.validate(None)
        assert not result.is_valid
        assert 0.0 <= result.confidence <= 1.0

    def test_deterministic(self, validator):
        assert validator.validate('zigzag') == validator.validate('zigzag')


class TestKnownWords:
    def test_known_word_gets_fixed_confidence(self):
        validator = EnglishValidator(known_words=['Jukebox'])
        result = validator.validate('jukebox')
        assert validator.is_known('JUKEBOX')
        assert result.is_valid
        assert result.confidence == pytest.approx(0.95)

    def test_known_word_issues_carry_no_penalty(self):
        validator = EnglishValidator(known_words=['cat'])
        result = validator.validate('cat')
        assert "Unnatural sound flow" in result.issues
        assert result.confidence == pytest.approx(0.95)
        # Still too common
        assert not result.is_valid

    def test_bundled_list_is_loaded_by_default(self):
        assert EnglishValidator().is_known('apple')

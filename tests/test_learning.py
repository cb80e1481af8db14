"""Tests for the learning state."""

import pytest

from apollyo.errors import ValidationError
from apollyo.filters.learning import LearningState


class TestLearningState:
    def test_rejected_words_are_excluded(self):
        state = LearningState()
        state.learn(rejected=['Wizard'])
        snapshot = state.snapshot()
        assert not snapshot.allows('wizard')
        assert snapshot.allows('zigzag')

    def test_selecting_a_word_unrejects_it(self):
        state = LearningState()
        state.learn(rejected=['wizard'])
        state.learn(selected=['wizard'])
        assert 'wizard' not in state.rejected_words

    def test_selected_words_add_shape_and_ending(self):
        state = LearningState()
        state.learn(selected=['wizard'])
        assert state.preferred_patterns == {'CVCVCC', 'end:rd'}

    def test_blacklist_is_case_insensitive(self):
        state = LearningState()
        state.add_blacklist('^zig')
        snapshot = state.snapshot()
        assert not snapshot.allows('ZIGZAG')
        assert snapshot.allows('wizard')

    def test_invalid_blacklist_pattern(self):
        state = LearningState()
        with pytest.raises(ValidationError):
            state.add_blacklist('(unclosed')
        assert state.blacklist == []

    def test_snapshot_is_isolated_from_later_feedback(self):
        state = LearningState()
        snapshot = state.snapshot()
        state.learn(rejected=['wizard'], selected=['zigzag'])
        assert snapshot.allows('wizard')
        assert snapshot.preferred(['CVCCVC']) == 0

    def test_preferred_counts_matching_tags(self):
        state = LearningState()
        state.learn(selected=['wizard'])
        assert state.snapshot().preferred(['CVCVCC', 'start:li', 'end:rd']) == 2

    def test_round_trip(self):
        state = LearningState()
        state.learn(selected=['wizard'], rejected=['kayak'])
        state.add_blacklist('q$')

        restored = LearningState.from_dict(state.to_dict())
        assert restored.rejected_words == {'kayak'}
        assert restored.blacklist == ['q$']
        assert restored.preferred_patterns == state.preferred_patterns

    def test_clear(self):
        state = LearningState()
        state.learn(selected=['wizard'], rejected=['kayak'])
        state.clear()
        assert state.to_dict() == {'rejectedWords': [], 'blacklist': [], 'preferredPatterns': []}

"""Tests for SessionStore."""

import pytest

from apollyo.core.session_store import LEARNING_KEY, SESSION_KEY, SessionStore


class TestLifecycle:
    def test_new_session_id_format(self, session, clock):
        session_id = session.memory.session_id
        assert session_id.startswith(f"session_{int(clock() * 1000)}_")
        assert len(session_id.rsplit('_', 1)[1]) == 9

    def test_restores_fresh_snapshot(self, session, snapshot_store, clock):
        session.record_search('speed', {}, ['wizard'], ['internal-generation'])
        clock.advance(3600)

        restored = SessionStore(snapshot_store, clock=clock)
        assert restored.memory.session_id == session.memory.session_id
        assert restored.is_word_returned('wizard')
        assert restored.memory.used_sources == {'internal-generation': 1}

    def test_stale_snapshot_starts_new_session(self, session, snapshot_store, clock):
        session.save()
        clock.advance(25 * 3600)
        assert SessionStore(snapshot_store, clock=clock).memory.session_id != session.memory.session_id

    def test_malformed_snapshot_starts_new_session(self, snapshot_store, clock):
        snapshot_store.save(SESSION_KEY, {'sessionId': 'broken'})
        snapshot_store.save(LEARNING_KEY, {'blacklist': ['(']})
        session = SessionStore(snapshot_store, clock=clock)
        assert session.memory.session_id != 'broken'
        assert session.learning.blacklist == []

    def test_reset_keeps_learning(self, session, snapshot_store, clock):
        session.learning.learn(rejected=['kayak'])
        session.save_learning()
        session.record_search('speed', {}, ['wizard'], [])
        old_id = session.memory.session_id

        clock.advance(1)
        session.reset()
        assert session.memory.session_id != old_id
        assert session.memory.returned_words == set()
        assert session.memory.adaptive_strategies[0].success_rate == 0.8
        assert SessionStore(snapshot_store, clock=clock).learning.rejected_words == {'kayak'}


class TestStrategies:
    def test_fresh_session_picks_by_success_rate(self, session):
        assert session.pick_strategy().name == 'source_rotation'
        assert session.pick_strategy().name == 'pattern_variation'

    def test_pick_stamps_and_persists(self, session, snapshot_store, clock):
        session.pick_strategy()
        saved = snapshot_store.load(SESSION_KEY)['adaptiveStrategies'][0]
        assert saved['name'] == 'source_rotation'
        assert saved['lastUsed'] == clock()

    def test_recent_use_within_window_is_a_tie(self, session, clock):
        for strategy in session.memory.adaptive_strategies:
            strategy.last_used = clock()
        session.get_strategy('filter_relaxation').last_used = clock() - 30
        assert session.pick_strategy().name == 'source_rotation'

    def test_use_outside_window_goes_first(self, session, clock):
        for strategy in session.memory.adaptive_strategies:
            strategy.last_used = clock()
        session.get_strategy('filter_relaxation').last_used = clock() - 120
        assert session.pick_strategy().name == 'filter_relaxation'

    @pytest.mark.parametrize('success,expected', [(True, 0.84), (False, 0.64)])
    def test_success_rate_moving_average(self, session, success, expected):
        session.update_strategy_success('source_rotation', success)
        assert session.get_strategy('source_rotation').success_rate == pytest.approx(expected)

    def test_unknown_strategy_is_ignored(self, session):
        session.update_strategy_success('nope', True)
        assert session.get_strategy('nope') is None


class TestHistory:
    def test_record_search(self, session):
        session.record_search('hyper', {'length': {'min': 3, 'max': 8}}, ['wizard', 'zigzag'], ['a', 'b'])
        session.record_search('hyper', {}, ['jukebox'], ['a'])

        assert session.memory.returned_words == {'wizard', 'zigzag', 'jukebox'}
        assert session.memory.used_sources == {'a': 2, 'b': 1}
        assert [s.results_count for s in session.memory.searches] == [2, 1]

    def test_filter_duplicates(self, session):
        session.record_search('speed', {}, ['wizard'], [])
        assert session.filter_duplicates(['wizard', 'zigzag']) == ['zigzag']

    def test_returned_words_is_a_copy(self, session):
        words = session.returned_words()
        words.add('wizard')
        assert not session.is_word_returned('wizard')

    def test_least_used_sources(self, session):
        session.record_search('hyper', {}, [], ['a', 'a2'])
        session.record_search('hyper', {}, [], ['a'])
        assert session.least_used_sources(['a', 'a2', 'fresh'], 2) == ['fresh', 'a2']

    def test_session_stats(self, session, clock):
        session.record_search('speed', {}, ['wizard'], ['internal-generation'])
        clock.advance(90)
        stats = session.session_stats()
        assert stats['totalSearches'] == 1
        assert stats['uniqueWords'] == 1
        assert stats['sourcesUsed'] == 1
        assert stats['duration'] == pytest.approx(90)
        assert len(stats['strategies']) == 5

"""
test_journal.py - Unit tests for journal.py

Tests:
- Writes outside a mark are not journaled
- rollback() restores overwritten values and removes new keys
- Nested marks roll back independently
- release() drops the journal when the outermost mark closes
"""

import pytest

from accrual.journal import JournaledDict


class TestJournaledDict:

    def test_behaves_like_a_dict(self):
        d = JournaledDict({'a': 1})
        d['b'] = 2
        assert d['a'] == 1
        assert d.get('c', 0) == 0
        assert 'b' in d
        assert sorted(d) == ['a', 'b']
        assert len(d) == 2
        assert d.copy() == {'a': 1, 'b': 2}

    def test_no_journal_without_mark(self):
        d = JournaledDict()
        d['a'] = 1
        assert d.pending == 0

    def test_rollback_restores_and_removes(self):
        d = JournaledDict({'a': 1})
        mark = d.mark()
        d['a'] = 5
        d['b'] = 7
        d.pop('a')
        d.rollback(mark)
        d.release()
        assert d.copy() == {'a': 1}

    def test_setdefault_on_existing_key_not_journaled(self):
        d = JournaledDict({'a': 1})
        d.mark()
        d.setdefault('a', 0)
        assert d.pending == 0
        d.setdefault('b', 0)
        assert d.pending == 1

    def test_nested_marks(self):
        d = JournaledDict()
        outer = d.mark()
        d['a'] = 1
        inner = d.mark()
        d['b'] = 2
        d.rollback(inner)
        d.release()
        assert d.copy() == {'a': 1}
        d.rollback(outer)
        d.release()
        assert d.copy() == {}

    def test_release_drops_journal(self):
        d = JournaledDict()
        d.mark()
        d['a'] = 1
        d.release()
        assert d.pending == 0
        with pytest.raises(ValueError):
            d.rollback(0)

    def test_release_without_mark(self):
        with pytest.raises(ValueError):
            JournaledDict().release()

    def test_journal_size_tracks_writes_not_size(self):
        d = JournaledDict({i: i for i in range(10_000)})
        d.mark()
        d[3] = 0
        d[4] = 0
        assert d.pending == 2

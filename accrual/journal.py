"""
journal.py - Undo Journal for Keyed State

A JournaledDict records the previous value of every key it writes while a
mark is open, and can roll those writes back in reverse order. Rolling
back costs the number of keys an operation touched, not the size of the
dict, so an all-or-nothing unit on a ledger with many accounts stays cheap.

Pattern:
    mark = d.mark()          # open a mark (marks nest)
    try:
        d[key] = value       # old value journaled
    except Exception:
        d.rollback(mark)     # undo writes made since the mark
        raise
    finally:
        d.release()          # journal dropped when the outermost mark closes
"""

from __future__ import annotations
from typing import Any, Dict, Generic, Hashable, Iterator, List, Optional, Tuple, TypeVar


K = TypeVar('K', bound=Hashable)
V = TypeVar('V')

# Marks a key that did not exist before the journaled write.
_ABSENT = object()


class JournaledDict(Generic[K, V]):

    def __init__(self, data: Optional[Dict[K, V]] = None):
        self._data: Dict[K, V] = dict(data or {})
        self._undo: Optional[List[Tuple[K, Any]]] = None
        self._depth = 0

    # ========================================================================
    # READS
    # ========================================================================

    def get(self, key: K, default: Any = None) -> Any:
        return self._data.get(key, default)

    def __getitem__(self, key: K) -> V:
        return self._data[key]

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[K]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def items(self):
        return self._data.items()

    def copy(self) -> Dict[K, V]:
        return dict(self._data)

    @property
    def pending(self) -> int:
        """Writes journaled since the outermost open mark."""
        return 0 if self._undo is None else len(self._undo)

    # ========================================================================
    # WRITES
    # ========================================================================

    def _record(self, key: K) -> None:
        if self._undo is not None:
            self._undo.append((key, self._data.get(key, _ABSENT)))

    def __setitem__(self, key: K, value: V) -> None:
        self._record(key)
        self._data[key] = value

    def pop(self, key: K, default: Any = None) -> Any:
        if key not in self._data:
            return default
        self._record(key)
        return self._data.pop(key)

    def setdefault(self, key: K, default: V) -> V:
        if key not in self._data:
            self[key] = default
        return self._data[key]

    # ========================================================================
    # MARKS
    # ========================================================================

    def mark(self) -> int:
        if self._depth == 0:
            self._undo = []
        self._depth += 1
        return len(self._undo)

    def rollback(self, mark: int) -> None:
        """
        Undo every write made since mark, newest first.

        Raises:
            ValueError: If no mark is open.
        """
        if self._undo is None:
            raise ValueError("rollback() without an open mark")
        while len(self._undo) > mark:
            key, old = self._undo.pop()
            if old is _ABSENT:
                self._data.pop(key, None)
            else:
                self._data[key] = old

    def release(self) -> None:
        if self._depth == 0:
            raise ValueError("release() without an open mark")
        self._depth -= 1
        if self._depth == 0:
            self._undo = None

    def __repr__(self) -> str:
        return f"JournaledDict({self._data!r}, pending={self.pending})"

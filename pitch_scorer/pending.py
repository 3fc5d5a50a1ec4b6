"""Pending notes for the current beat."""

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Union


@dataclass(frozen=True)
class Independent:
    """A single note that must be hit ``remaining`` more times."""

    remaining: int


@dataclass(frozen=True)
class ChordMember:
    """Member of a chord; hitting any one member satisfies the whole chord."""


PendingEntry = Union[Independent, ChordMember]


class PendingSet:
    """Mapping of pitch -> PendingEntry for a single beat.

    Iteration is always in ascending pitch order.
    """

    def __init__(self, entries: Optional[Dict[int, PendingEntry]] = None):
        self._entries: Dict[int, PendingEntry] = dict(entries or {})

    @classmethod
    def from_chords(cls, chords: Iterable[Sequence[int]]) -> "PendingSet":
        """Build the pending set for a beat.

        Multi-note chords insert every member as ChordMember. Single notes
        insert or increment an Independent counter, so the same pitch
        appearing as two separate single notes needs two hits.
        """
        entries: Dict[int, PendingEntry] = {}
        for chord in chords:
            if len(chord) > 1:
                for pitch in chord:
                    entries[int(pitch)] = ChordMember()
            elif len(chord) == 1:
                pitch = int(chord[0])
                existing = entries.get(pitch)
                count = existing.remaining if isinstance(existing, Independent) else 0
                entries[pitch] = Independent(count + 1)
        return cls(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def __contains__(self, pitch: int) -> bool:
        return pitch in self._entries

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._entries))

    def get(self, pitch: int) -> Optional[PendingEntry]:
        return self._entries.get(pitch)

    def pitches(self) -> List[int]:
        return sorted(self._entries)

    def consume(self, pitch: int) -> List[int]:
        """Satisfy the entry for ``pitch``.

        Returns the pitches that became satisfied: every chord member for a
        ChordMember entry, or ``[pitch]`` for an Independent one. Returns an
        empty list if ``pitch`` is not pending.
        """
        entry = self._entries.get(pitch)
        if entry is None:
            return []

        if isinstance(entry, ChordMember):
            members = [
                p for p in sorted(self._entries)
                if isinstance(self._entries[p], ChordMember)
            ]
            for p in members:
                del self._entries[p]
            return members

        if entry.remaining <= 1:
            del self._entries[pitch]
        else:
            self._entries[pitch] = Independent(entry.remaining - 1)
        return [pitch]

    def clear(self) -> None:
        self._entries.clear()

    def as_dict(self) -> Dict[int, PendingEntry]:
        return dict(self._entries)

    def __repr__(self):
        return f"PendingSet({self._entries!r})"

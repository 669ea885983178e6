"""Index-stable name dictionaries.

A header owns one ``Dictionary`` per domain (contigs, samples, field
definitions). Records refer to entries by their integer id only, so ids are
dense, 0-based and never renumbered: removing an entry leaves a tombstone and
the id is not handed out again.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Set

from ..exceptions import DuplicateNameError


@dataclass
class DictEntry:
    """One dictionary slot.

    Attributes
    ----------
    id : int
        Position of the entry in its dictionary.
    name : str
        Unique name within the domain.
    attrs : dict
        Domain payload (contig length, per-kind field definitions, ...).
    """

    id: int
    name: str
    attrs: Dict[str, Any] = field(default_factory=dict)


class Dictionary:
    """Append-only id <-> name arena for one domain."""

    def __init__(self, domain: str):
        self.domain = domain
        self._entries: List[Optional[DictEntry]] = []
        self._ids: Dict[str, int] = {}
        # ids of removed entries; gaps never handed out are not in here
        self._retired: Set[int] = set()

    @classmethod
    def from_names(cls, domain: str, names: Iterable[str]) -> "Dictionary":
        """Build a dictionary with ids 0..n-1 in the order of ``names``."""
        out = cls(domain)
        for name in names:
            out.add(name)
        return out

    # -- mutation ---------------------------------------------------------
    def add(self, name: str, entry_id: Optional[int] = None, attrs: Optional[Dict[str, Any]] = None) -> DictEntry:
        """Insert ``name`` at the next free id (or at ``entry_id``)."""
        if not name:
            raise ValueError(f"Empty name in {self.domain} dictionary")
        if name in self._ids:
            raise DuplicateNameError(f"{self.domain} {name!r} already present")
        if entry_id is None:
            entry_id = len(self._entries)
        elif entry_id in self._retired:
            raise DuplicateNameError(f"{self.domain} id {entry_id} was removed and cannot be reused")
        elif entry_id < len(self._entries):
            if self._entries[entry_id] is not None:
                raise DuplicateNameError(
                    f"{self.domain} id {entry_id} already taken by {self._entries[entry_id].name!r}"
                )
        else:
            # explicit ids may skip ahead; the gap stays unassigned
            self._entries.extend([None] * (entry_id - len(self._entries) + 1))
        entry = DictEntry(entry_id, name, dict(attrs or {}))
        if entry_id == len(self._entries):
            self._entries.append(entry)
        else:
            self._entries[entry_id] = entry
        self._ids[name] = entry_id
        return entry

    def remove(self, name: str) -> bool:
        """Tombstone ``name``; returns False when it was not present."""
        entry_id = self._ids.pop(name, None)
        if entry_id is None:
            return False
        self._entries[entry_id] = None
        self._retired.add(entry_id)
        return True

    # -- lookups ----------------------------------------------------------
    def id_of(self, name: str) -> Optional[int]:
        return self._ids.get(name)

    def get(self, name: str) -> Optional[DictEntry]:
        entry_id = self._ids.get(name)
        return None if entry_id is None else self._entries[entry_id]

    def entry(self, entry_id: int) -> Optional[DictEntry]:
        if 0 <= entry_id < len(self._entries):
            return self._entries[entry_id]
        return None

    def name_of(self, entry_id: int) -> Optional[str]:
        entry = self.entry(entry_id)
        return None if entry is None else entry.name

    def names(self) -> List[str]:
        return [e.name for e in self]

    @property
    def capacity(self) -> int:
        """Number of ids handed out so far, tombstones included."""
        return len(self._entries)

    @property
    def has_holes(self) -> bool:
        return len(self._ids) != len(self._entries)

    def copy(self) -> "Dictionary":
        """Independent copy with identical ids (tombstones preserved)."""
        out = Dictionary(self.domain)
        out._entries = [
            None if e is None else DictEntry(e.id, e.name, _copy_attrs(e.attrs))
            for e in self._entries
        ]
        out._ids = dict(self._ids)
        out._retired = set(self._retired)
        return out

    def __contains__(self, name: object) -> bool:
        return name in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[DictEntry]:
        return (e for e in self._entries if e is not None)

    def __repr__(self) -> str:
        return f"Dictionary({self.domain!r}, {self.names()!r})"


def _copy_attrs(attrs: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key, value in attrs.items():
        out[key] = value.copy() if hasattr(value, "copy") else value
    return out

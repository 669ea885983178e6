"""Variant record bound to one header at a time.

Every integer in a record (contig id, FILTER ids, INFO/FORMAT keys) is an
index into the dictionaries of ``record.header``. Moving a record to another
header is done by ``translate`` only.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Optional

from ..config import FILTER, FORMAT, INFO
from ..exceptions import UnknownContigError, UnknownFieldError
from .header import Header


class Record:
    """Container for a single variant call.

    Attributes
    ----------
    contig_id : int
        Id in the bound header's contig dictionary.
    pos : int
        0-based position.
    alleles : List[str]
        Reference allele first, then alternates.
    qual : float | None
        None is the missing quality.
    id : str | None
        Variant identifier column.
    filters : List[int]
        FILTER ids.
    info : Dict[int, Any]
        Field id -> value (scalar for Number=1 / Flag, list otherwise).
    format : Dict[int, List[Any]]
        Field id -> one value per sample slot.
    n_sample : int
        Number of per-sample slots currently held.
    """

    def __init__(
        self,
        header: Header,
        contig_id: int = 0,
        pos: int = 0,
        alleles: Optional[List[str]] = None,
        qual: Optional[float] = None,
        id: Optional[str] = None,
        filters: Optional[List[int]] = None,
        info: Optional[Dict[int, Any]] = None,
        format: Optional[Dict[int, List[Any]]] = None,
        n_sample: Optional[int] = None,
    ):
        if pos < 0:
            raise ValueError(f"Negative position {pos}")
        self._header = header
        self.contig_id = contig_id
        self.pos = pos
        self.alleles: List[str] = list(alleles) if alleles else []
        self.qual = qual
        self.id = id
        self.filters: List[int] = list(filters) if filters else []
        self.info: Dict[int, Any] = dict(info) if info else {}
        self.format: Dict[int, List[Any]] = dict(format) if format else {}
        self.n_sample = header.sample_count() if n_sample is None else n_sample

    @classmethod
    def from_names(
        cls,
        header: Header,
        contig: str,
        pos: int,
        alleles: List[str],
        qual: Optional[float] = None,
        info: Optional[Dict[str, Any]] = None,
        format: Optional[Dict[str, List[Any]]] = None,
        filters: Optional[List[str]] = None,
        id: Optional[str] = None,
    ) -> "Record":
        """Build a record addressing contig and keys by name."""
        contig_id = header.contigs.id_of(contig)
        if contig_id is None:
            raise UnknownContigError(f"Contig {contig!r} not in header")
        rec = cls(header, contig_id, pos, alleles, qual, id)
        for name in filters or []:
            rec.filters.append(rec._field_id(FILTER, name))
        for name, value in (info or {}).items():
            rec.set_info(name, value)
        for name, values in (format or {}).items():
            rec.set_format(name, values)
        return rec

    # -- binding ----------------------------------------------------------
    @property
    def header(self) -> Header:
        return self._header

    def _rebind(self, header: Header) -> None:
        self._header = header

    # -- convenience accessors --------------------------------------------
    @property
    def contig(self) -> str:
        name = self._header.contigs.name_of(self.contig_id)
        if name is None:
            raise UnknownContigError(f"Contig id {self.contig_id} not in bound header")
        return name

    @property
    def ref(self) -> Optional[str]:
        return self.alleles[0] if self.alleles else None

    @property
    def alts(self) -> List[str]:
        return self.alleles[1:]

    def sample_count(self) -> int:
        return self.n_sample

    def _field_id(self, kind: str, name: str) -> int:
        if self._header.field_definition(kind, name) is None:
            raise UnknownFieldError(f"{kind}/{name} not defined in bound header")
        return self._header.fields.id_of(name)

    def info_value(self, name: str, default: Any = None) -> Any:
        key = self._header.fields.id_of(name)
        if key is None:
            return default
        return self.info.get(key, default)

    def set_info(self, name: str, value: Any) -> None:
        self.info[self._field_id(INFO, name)] = value

    def format_values(self, name: str) -> Optional[List[Any]]:
        key = self._header.fields.id_of(name)
        if key is None:
            return None
        return self.format.get(key)

    def set_format(self, name: str, values: List[Any]) -> None:
        if len(values) != self.n_sample:
            raise ValueError(f"FORMAT/{name} has {len(values)} values for {self.n_sample} samples")
        self.format[self._field_id(FORMAT, name)] = list(values)

    def genotypes(self) -> Optional[List[Optional[str]]]:
        return self.format_values("GT")

    def filter_names(self) -> List[str]:
        return [self._header.fields.name_of(f) for f in self.filters]

    def copy(self) -> "Record":
        """Independent copy bound to the same header."""
        out = copy.copy(self)
        out.alleles = list(self.alleles)
        out.filters = list(self.filters)
        out.info = copy.deepcopy(self.info)
        out.format = copy.deepcopy(self.format)
        return out

    def as_named(self) -> Dict[str, Any]:
        """Header-independent view (keys by name) used for comparisons."""
        names = self._header.fields
        return {
            "contig": self.contig,
            "pos": self.pos,
            "id": self.id,
            "qual": self.qual,
            "alleles": list(self.alleles),
            "filters": self.filter_names(),
            "info": {names.name_of(k): v for k, v in self.info.items()},
            "format": {names.name_of(k): list(v) for k, v in self.format.items()},
        }

    def __repr__(self) -> str:
        contig = self._header.contigs.name_of(self.contig_id)
        return f"Record({contig}:{self.pos + 1} {','.join(self.alleles)} n_sample={self.n_sample})"

"""Header model: contig, sample and field-definition dictionaries.

A ``Header`` is mutable until a writer uses it for a stream prologue, after
which it is locked. ``HeaderView`` is the read-only projection handed out by
readers and writers.

Example::

    hdr = Header.derive_subset(reader.header, ["NA12878"])
    hdr.subset            # -> [3], index of NA12878 in the reader's header
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence, Union

from ..config import CONTIG, FIELD, FIELD_KINDS, FILEFORMAT_LINE, FILTER, FORMAT, INFO, PASS_DESCRIPTION, SAMPLE
from ..exceptions import DuplicateNameError, HeaderLockedError, UnknownSampleError
from .dictionary import Dictionary

# Position i holds the source-header sample index of subset sample i.
SampleSubsetMap = List[int]


@dataclass
class FieldDefinition:
    """Typed declaration of a FILTER / INFO / FORMAT key."""

    kind: str
    name: str
    number: str = "."
    type: str = "String"
    description: str = ""
    extra: Dict[str, str] = field(default_factory=dict)

    @property
    def is_scalar(self) -> bool:
        return self.number == "1" or self.type == "Flag"

    def copy(self) -> "FieldDefinition":
        return replace(self, extra=dict(self.extra))


class Header:
    """Owns the three dictionaries of one file plus an optional subset map."""

    def __init__(self):
        self.contigs = Dictionary(CONTIG)
        self.samples = Dictionary(SAMPLE)
        self.fields = Dictionary(FIELD)
        self.meta_lines: List[str] = [FILEFORMAT_LINE]
        self.subset: Optional[SampleSubsetMap] = None
        self._locked = False
        self.fields.add("PASS", attrs={FILTER: FieldDefinition(FILTER, "PASS", description=PASS_DESCRIPTION)})

    # -- construction -----------------------------------------------------
    @classmethod
    def create_empty(cls) -> "Header":
        return cls()

    @classmethod
    def duplicate(cls, template: Union["Header", "HeaderView"]) -> "Header":
        """Deep copy of ``template``'s dictionaries with the same ids.

        The copy is unlocked and carries no subset map.
        """
        src = _unwrap(template)
        out = cls.__new__(cls)
        out.contigs = src.contigs.copy()
        out.samples = src.samples.copy()
        out.fields = src.fields.copy()
        out.meta_lines = list(src.meta_lines)
        out.subset = None
        out._locked = False
        return out

    @classmethod
    def derive_subset(cls, template: Union["Header", "HeaderView"], samples: Sequence[str]) -> "Header":
        """New header keeping only ``samples``, in the requested order.

        Raises UnknownSampleError for a name absent from ``template`` and
        SubsetConstructionError when the sample dictionary cannot be built.
        """
        from ..header_text import build_dictionary_from_names

        src = _unwrap(template)
        missing = [s for s in samples if s not in src.samples]
        if missing:
            raise UnknownSampleError(f"Samples not in header: {', '.join(missing)}")
        sample_dict = build_dictionary_from_names(samples)
        out = cls.duplicate(src)
        out.samples = sample_dict
        out.subset = [src.samples.id_of(s) for s in samples]
        return out

    # -- mutation ---------------------------------------------------------
    @property
    def locked(self) -> bool:
        return self._locked

    def lock(self) -> None:
        """Freeze the header; called once a stream prologue was written."""
        self._locked = True

    def _check_mutable(self) -> None:
        if self._locked:
            raise HeaderLockedError("Header is not mutable after opening a writer with it")

    def add_sample(self, name: str) -> "Header":
        self._check_mutable()
        self.samples.add(name)
        return self

    def append_field_definition(self, definition_text: str) -> "Header":
        """Parse one ``##...`` meta line and insert it."""
        from ..header_text import parse_and_append

        self._check_mutable()
        parse_and_append(self, definition_text)
        return self

    def remove_field_definition(self, kind: str, tag: str) -> "Header":
        """Drop the ``kind`` definition of ``tag``; absent tags are ignored."""
        self._check_mutable()
        if kind not in FIELD_KINDS:
            raise ValueError(f"Unknown field kind {kind!r}")
        entry = self.fields.get(tag)
        if entry is None or kind not in entry.attrs:
            return self
        del entry.attrs[kind]
        if not entry.attrs:
            self.fields.remove(tag)
        return self

    def remove_info(self, tag: str) -> "Header":
        return self.remove_field_definition(INFO, tag)

    def remove_format(self, tag: str) -> "Header":
        return self.remove_field_definition(FORMAT, tag)

    def remove_filter(self, tag: str) -> "Header":
        return self.remove_field_definition(FILTER, tag)

    # used by the header-text service; callers go through append_field_definition
    def _add_contig(self, name: str, entry_id: Optional[int] = None, attrs: Optional[Dict[str, str]] = None) -> None:
        if name in self.contigs:
            return
        self.contigs.add(name, entry_id, attrs)

    def _add_field(self, definition: FieldDefinition, entry_id: Optional[int] = None) -> None:
        entry = self.fields.get(definition.name)
        if entry is None:
            self.fields.add(definition.name, entry_id, {definition.kind: definition})
            return
        if entry_id is not None and entry_id != entry.id:
            raise DuplicateNameError(
                f"{definition.name!r} declared with IDX={entry_id} but already has id {entry.id}"
            )
        # first declaration of a kind wins
        entry.attrs.setdefault(definition.kind, definition)

    # -- accessors --------------------------------------------------------
    def sample_count(self) -> int:
        return len(self.samples)

    def sample_names(self) -> List[str]:
        return self.samples.names()

    def contig_names(self) -> List[str]:
        return self.contigs.names()

    def field_definition(self, kind: str, name: str) -> Optional[FieldDefinition]:
        entry = self.fields.get(name)
        if entry is None:
            return None
        return entry.attrs.get(kind)

    def field_definition_by_id(self, kind: str, entry_id: int) -> Optional[FieldDefinition]:
        entry = self.fields.entry(entry_id)
        if entry is None:
            return None
        return entry.attrs.get(kind)

    def definitions(self, kind: str) -> List[FieldDefinition]:
        return [e.attrs[kind] for e in self.fields if kind in e.attrs]

    def view(self) -> "HeaderView":
        return HeaderView(self)

    def to_text(self, with_idx: bool = False) -> str:
        from ..header_text import format_header

        return format_header(self, with_idx=with_idx)

    def __repr__(self) -> str:
        return (
            f"Header(contigs={len(self.contigs)}, samples={self.sample_count()}, "
            f"fields={len(self.fields)}, subset={self.subset!r})"
        )


class HeaderView:
    """Read-only projection of a header."""

    def __init__(self, header: Header):
        self._header = header

    def sample_count(self) -> int:
        return self._header.sample_count()

    def samples(self) -> List[str]:
        return self._header.sample_names()

    def contig_names(self) -> List[str]:
        return self._header.contig_names()

    def field_definition(self, kind: str, name: str) -> Optional[FieldDefinition]:
        return self._header.field_definition(kind, name)

    @property
    def subset(self) -> Optional[SampleSubsetMap]:
        subset = self._header.subset
        return None if subset is None else list(subset)

    def to_text(self, with_idx: bool = False) -> str:
        return self._header.to_text(with_idx=with_idx)

    def is_view_of(self, header: Header) -> bool:
        return self._header is header

    def __repr__(self) -> str:
        return f"HeaderView({self._header!r})"


def _unwrap(template: Union[Header, HeaderView]) -> Header:
    if isinstance(template, HeaderView):
        return template._header
    return template

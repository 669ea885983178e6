"""Record translation between headers and per-sample subsetting.

``translate`` moves a record's dictionary references from its bound header
to another header's numbering. ``subset`` then keeps only the samples listed
in a SampleSubsetMap. Run them in that order.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..config import FILTER, FORMAT, INFO
from ..exceptions import IndexOutOfRangeError, UnknownContigError
from .header import Header, SampleSubsetMap
from .record import Record


def _remap_keys(src: Header, dst: Header, kind: str, keys, dropped: Optional[Dict[str, int]]) -> Dict[int, int]:
    """Map field ids of ``kind`` from ``src`` to ``dst``; unmappable keys are left out."""
    out: Dict[int, int] = {}
    for key in keys:
        name = src.fields.name_of(key)
        new_key = None
        if name is not None and dst.field_definition(kind, name) is not None:
            new_key = dst.fields.id_of(name)
        if new_key is None:
            if dropped is not None:
                label = f"{kind}/{name if name is not None else key}"
                dropped[label] = dropped.get(label, 0) + 1
            continue
        out[key] = new_key
    return out


def translate(record: Record, destination: Header, dropped: Optional[Dict[str, int]] = None) -> Record:
    """Rebind ``record`` to ``destination``, rewriting every dictionary id.

    Fields unknown to ``destination`` are dropped (and counted in
    ``dropped`` when given). A contig unknown to ``destination`` raises
    UnknownContigError and leaves the record untouched.
    """
    src = record.header
    if src is destination:
        return record

    contig = src.contigs.name_of(record.contig_id)
    contig_id = None if contig is None else destination.contigs.id_of(contig)
    if contig_id is None:
        raise UnknownContigError(
            f"Contig {contig if contig is not None else record.contig_id!r} not in destination header"
        )

    filter_map = _remap_keys(src, destination, FILTER, record.filters, dropped)
    info_map = _remap_keys(src, destination, INFO, record.info, dropped)
    format_map = _remap_keys(src, destination, FORMAT, record.format, dropped)

    # nothing is assigned until every lookup succeeded
    record.contig_id = contig_id
    record.filters = [filter_map[f] for f in record.filters if f in filter_map]
    record.info = {info_map[k]: v for k, v in record.info.items() if k in info_map}
    record.format = {format_map[k]: v for k, v in record.format.items() if k in format_map}
    record._rebind(destination)
    return record


def subset(record: Record, subset_map: SampleSubsetMap) -> Record:
    """Keep the samples at ``subset_map`` positions, in map order.

    INFO is per-record and untouched. Raises IndexOutOfRangeError when the
    map points past the record's sample slots.
    """
    bad = [i for i in subset_map if i < 0 or i >= record.n_sample]
    if bad:
        raise IndexOutOfRangeError(
            f"Subset indices {bad} out of range for record with {record.n_sample} samples"
        )
    new_format: Dict[int, List[Any]] = {}
    for key, values in record.format.items():
        if len(values) != record.n_sample:
            raise IndexOutOfRangeError(
                f"FORMAT key {key} holds {len(values)} values for {record.n_sample} samples"
            )
        new_format[key] = [values[i] for i in subset_map]
    record.format = new_format
    record.n_sample = len(subset_map)
    return record


__all__ = ["translate", "subset"]

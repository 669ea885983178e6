"""Removal of alternate alleles that no genotype calls.

Run after subsetting: alleles are judged on the samples still present.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..config import FORMAT, INFO
from ..exceptions import IndexOutOfRangeError, NoGenotypeDataError
from ..utils import called_alleles, renumber_genotype
from .header import FieldDefinition
from .record import Record


def _genotype_order(n_allele: int) -> List[tuple]:
    """Diploid genotypes in VCF order: (j, k) with j <= k, index k*(k+1)/2 + j."""
    return [(j, k) for k in range(n_allele) for j in range(k + 1)]


def _cut(values: Any, defn: FieldDefinition, keep: List[int], n_allele: int, where: str) -> Any:
    if values is None or not isinstance(values, list):
        return values
    if defn.number == "A":
        expected, positions = n_allele - 1, [i - 1 for i in keep[1:]]
    elif defn.number == "R":
        expected, positions = n_allele, keep
    elif defn.number == "G":
        diploid = _genotype_order(n_allele)
        if len(values) == n_allele:
            expected, positions = n_allele, keep
        elif len(values) == len(diploid):
            kept = set(keep)
            expected = len(diploid)
            positions = [i for i, (j, k) in enumerate(diploid) if j in kept and k in kept]
        else:
            raise IndexOutOfRangeError(
                f"{where} has {len(values)} values, expected {n_allele} or {len(diploid)}"
            )
    else:
        return values
    if len(values) != expected:
        raise IndexOutOfRangeError(f"{where} has {len(values)} values, expected {expected}")
    return [values[i] for i in positions]


def trim_unobserved_alleles(record: Record) -> List[int]:
    """Drop alternate alleles absent from every GT call of ``record``.

    Genotype indices are renumbered and Number=A/R/G values cut to match.
    Returns the removed allele indices in the original numbering. Raises
    NoGenotypeDataError when the record has no GT field.
    """
    header = record.header
    gt_key = header.fields.id_of("GT")
    if gt_key is None or gt_key not in record.format:
        raise NoGenotypeDataError(f"{record!r} carries no GT field")

    n_allele = len(record.alleles)
    observed = set()
    for gt in record.format[gt_key]:
        observed.update(called_alleles(gt))
    out_of_range = [a for a in observed if a >= n_allele]
    if out_of_range:
        raise IndexOutOfRangeError(f"GT references allele {max(out_of_range)} of {n_allele}")

    keep = [0] + [i for i in range(1, n_allele) if i in observed]
    removed = [i for i in range(1, n_allele) if i not in observed]
    if not removed:
        return []

    mapping: Dict[int, int] = {old: new for new, old in enumerate(keep)}
    new_info: Dict[int, Any] = {}
    for key, value in record.info.items():
        defn: Optional[FieldDefinition] = header.field_definition_by_id(INFO, key)
        new_info[key] = value if defn is None else _cut(value, defn, keep, n_allele, f"INFO/{defn.name}")
    new_format: Dict[int, List[Any]] = {}
    for key, values in record.format.items():
        if key == gt_key:
            new_format[key] = [renumber_genotype(gt, mapping) for gt in values]
            continue
        defn = header.field_definition_by_id(FORMAT, key)
        if defn is None:
            new_format[key] = values
        else:
            new_format[key] = [_cut(v, defn, keep, n_allele, f"FORMAT/{defn.name}") for v in values]

    record.alleles = [record.alleles[i] for i in keep]
    record.info = new_info
    record.format = new_format
    return removed


__all__ = ["trim_unobserved_alleles"]

"""Tabular summaries of a record stream.

Consumes records from a ``Reader`` (or any iterable of records sharing one
header) and returns pandas DataFrames, ready to be written as TSV.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

import pandas as pd

from ..core.record import Record
from ..io import Reader
from ..utils import called_alleles, gt_is_missing

__all__ = [
	"site_table",
	"sample_table",
]


def site_table(records: Iterable[Record], limit: Optional[int] = None) -> pd.DataFrame:
	"""Return DataFrame with columns: Chrom, Pos, ID, REF, ALT, QUAL, AlleleCount, MissingRate."""
	rows = []
	for i, rec in enumerate(records):
		gts = rec.genotypes()
		if gts:
			missing = sum(1 for gt in gts if gt_is_missing(gt)) / len(gts)
		else:
			missing = float('nan')
		rows.append({
			"Chrom": rec.contig,
			"Pos": rec.pos + 1,
			"ID": rec.id,
			"REF": rec.ref,
			"ALT": ",".join(rec.alts) or ".",
			"QUAL": rec.qual,
			"AlleleCount": len(rec.alleles),
			"MissingRate": missing,
		})
		if limit and i + 1 >= limit:
			break
	df = pd.DataFrame(rows, columns=["Chrom", "Pos", "ID", "REF", "ALT", "QUAL", "AlleleCount", "MissingRate"])
	for col in ["QUAL", "MissingRate"]:
		df[col] = pd.to_numeric(df[col], errors="coerce")
	return df


def sample_table(reader: Reader) -> pd.DataFrame:
	"""Per-sample call counts.

	Columns returned:
		Sample, Called, Missing, MissingRate, Het, HomAlt

	Het counts calls with differing alleles, HomAlt calls whose alleles are
	all the same non-reference allele.
	"""
	samples: List[str] = reader.header.samples()
	called: Dict[str, int] = {s: 0 for s in samples}
	missing: Dict[str, int] = {s: 0 for s in samples}
	het: Dict[str, int] = {s: 0 for s in samples}
	hom_alt: Dict[str, int] = {s: 0 for s in samples}
	for rec in reader:
		gts = rec.genotypes()
		if not gts:
			continue
		for sample, gt in zip(samples, gts):
			if gt_is_missing(gt):
				missing[sample] += 1
				continue
			called[sample] += 1
			alleles = called_alleles(gt)
			if len(set(alleles)) > 1:
				het[sample] += 1
			elif alleles and alleles[0] != 0:
				hom_alt[sample] += 1
	rows = []
	for s in samples:
		tot = called[s] + missing[s]
		rows.append({
			"Sample": s,
			"Called": called[s],
			"Missing": missing[s],
			"MissingRate": missing[s] / tot if tot else 0.0,
			"Het": het[s],
			"HomAlt": hom_alt[s],
		})
	return pd.DataFrame(rows, columns=["Sample", "Called", "Missing", "MissingRate", "Het", "HomAlt"])

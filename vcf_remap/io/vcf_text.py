"""Text VCF record codec.

Parses tab-delimited VCF lines into records bound to a header and formats
them back. Keys missing from the header (contigs, INFO, FORMAT, FILTER) are
declared on the fly with a warning so a sloppy file can still be read.
"""

from __future__ import annotations

from typing import IO, Any, List, Optional

from ..config import FILTER, FORMAT, INFO
from ..core.header import FieldDefinition, Header
from ..core.record import Record
from ..exceptions import ReadFault, WriteError
from ..header_text import parse_header_text
from ..utils import format_float, log_warn, parse_info_field, to_float32


def _convert(token: str, type_: str) -> Any:
	if token == '.' or token == '':
		return None
	if type_ == 'Integer':
		return int(token)
	if type_ == 'Float':
		return to_float32(float(token))
	return token


def parse_value(raw: Optional[str], defn: FieldDefinition) -> Any:
	"""Typed value for ``raw`` according to its definition.

	Flag -> True, Number=1 -> scalar, anything else -> list. A lone '.'
	is the missing value (None) whatever the Number.
	"""
	if defn.type == 'Flag':
		return True
	if raw is None or raw == '.' or raw == '':
		return None
	if defn.is_scalar:
		return _convert(raw, defn.type)
	return [_convert(tok, defn.type) for tok in raw.split(',')]


def _format_scalar(value: Any) -> str:
	if value is None:
		return '.'
	if isinstance(value, float):
		return format_float(value)
	return str(value)


def format_value(value: Any) -> str:
	if isinstance(value, list):
		return ','.join(_format_scalar(v) for v in value) if value else '.'
	return _format_scalar(value)


class VcfTextCodec:
	"""Reads / writes records as VCF text lines."""

	binary = False

	# -- reading ----------------------------------------------------------
	def read_header(self, fh: IO[str]) -> Header:
		lines: List[str] = []
		while True:
			line = fh.readline()
			if not line:
				break
			if not line.startswith('#'):
				raise ReadFault(f"Record line before #CHROM: {line[:80]!r}")
			lines.append(line)
			if line.startswith('#CHROM'):
				break
		if not lines:
			raise ReadFault("Empty input: no VCF header")
		return parse_header_text(lines)

	def _declare(self, header: Header, kind: str, name: str, flag: bool = False) -> FieldDefinition:
		if flag or kind == FILTER:
			number, type_ = '0', 'Flag'
		else:
			number, type_ = '1', 'String'
		log_warn(f"{kind}/{name} is not defined in the header, assuming Number={number},Type={type_}")
		defn = FieldDefinition(kind, name, number, type_, "Dummy")
		header._add_field(defn)
		return header.field_definition(kind, name)

	def read_next(self, fh: IO[str], header: Header) -> Optional[Record]:
		"""Next record bound to ``header``, or None at end of stream."""
		line = fh.readline()
		while line and not line.strip():
			line = fh.readline()
		if not line:
			return None
		parts = line.rstrip('\r\n').split('\t')
		if len(parts) < 8:
			raise ReadFault(f"Expected at least 8 columns, got {len(parts)}: {line[:80]!r}")
		chrom, pos, vid, ref, alts, qual, flt, info = parts[:8]
		try:
			return self._build(header, parts, chrom, pos, vid, ref, alts, qual, flt, info)
		except ValueError as e:
			raise ReadFault(f"Malformed record at {chrom}:{pos}: {e}") from e

	def _build(self, header, parts, chrom, pos, vid, ref, alts, qual, flt, info) -> Record:
		contig_id = header.contigs.id_of(chrom)
		if contig_id is None:
			log_warn(f"Contig '{chrom}' is not defined in the header")
			header._add_contig(chrom)
			contig_id = header.contigs.id_of(chrom)
		rec = Record(
			header,
			contig_id=contig_id,
			pos=int(pos) - 1,
			alleles=[ref] + ([] if alts == '.' else alts.split(',')),
			qual=None if qual == '.' else to_float32(float(qual)),
			id=None if vid == '.' else vid,
		)
		if flt != '.':
			for name in flt.split(';'):
				if header.field_definition(FILTER, name) is None:
					self._declare(header, FILTER, name)
				rec.filters.append(header.fields.id_of(name))
		for key, raw in parse_info_field(info).items():
			defn = header.field_definition(INFO, key)
			if defn is None:
				defn = self._declare(header, INFO, key, flag=raw is None)
			rec.info[header.fields.id_of(key)] = parse_value(raw, defn)
		if len(parts) > 8:
			samples = parts[9:]
			if len(samples) != header.sample_count():
				raise ReadFault(
					f"{chrom}:{pos} has {len(samples)} sample columns, header declares {header.sample_count()}"
				)
			keys = parts[8].split(':')
			columns = [s.split(':') for s in samples]
			for i, key in enumerate(keys):
				defn = header.field_definition(FORMAT, key)
				if defn is None:
					defn = self._declare(header, FORMAT, key)
				rec.format[header.fields.id_of(key)] = [
					parse_value(col[i] if i < len(col) else None, defn) for col in columns
				]
		return rec

	# -- writing ----------------------------------------------------------
	def write_header(self, fh: IO[str], header: Header) -> None:
		fh.write(header.to_text())

	def format_record(self, header: Header, record: Record) -> str:
		names = header.fields
		cols = [
			record.contig,
			str(record.pos + 1),
			record.id or '.',
			record.alleles[0] if record.alleles else '.',
			','.join(record.alleles[1:]) or '.',
			_format_scalar(record.qual),
			';'.join(names.name_of(f) for f in record.filters) or '.',
		]
		info: List[str] = []
		for key, value in record.info.items():
			if value is True:
				info.append(names.name_of(key))
			elif value is not False:
				info.append(f"{names.name_of(key)}={format_value(value)}")
		cols.append(';'.join(info) or '.')
		if record.format and header.sample_count():
			keys = list(record.format)
			cols.append(':'.join(names.name_of(k) for k in keys))
			for i in range(record.n_sample):
				cols.append(':'.join(format_value(record.format[k][i]) for k in keys))
		return '\t'.join(cols) + '\n'

	def write(self, fh: IO[str], header: Header, record: Record) -> None:
		if record.n_sample != header.sample_count():
			raise WriteError(
				f"{record!r} holds {record.n_sample} samples, header declares {header.sample_count()}"
			)
		fh.write(self.format_record(header, record))

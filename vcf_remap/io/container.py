"""Compact binary record codec.

Layout (little endian)::

	prologue : magic "VRB\\1" | uint32 l_text | header text with IDX=, NUL
	record   : uint32 l_block | block
	block    : int32 contig | int32 pos | uint32 qual bits | uint32 n_allele
	           | uint32 n_filter | uint32 n_info | uint32 n_fmt | uint32 n_sample
	           | typed id | n_allele typed strings | typed filter ids
	           | n_info x (int32 key, typed value)
	           | n_fmt x (int32 key, n_sample typed values)
	typed    : uint8 type | uint32 count | payload

Contigs and keys are stored as dictionary ids, never as names, so a file is
only meaningful together with its own header. Integer and float arrays are
32-bit; missing elements use the INT32_MISSING / 0x7F800001 sentinels.

The format is not BCF and carries its own magic (conventional suffix
``.vrb``). Compressed output is plain gzip, not BGZF.
"""

from __future__ import annotations

import struct
from typing import IO, Any, List, Optional, Tuple

import numpy as np

from ..config import CONTAINER_MAGIC, FLOAT32_MISSING_BITS, FORMAT, INFO, INT32_MISSING
from ..core.header import FieldDefinition, Header
from ..core.record import Record
from ..exceptions import ReadFault, WriteError
from ..header_text import parse_header_text

T_MISSING, T_INT, T_FLOAT, T_STR, T_FLAG = range(5)

_FIXED = struct.Struct('<iiIIIIII')
_TYPED = struct.Struct('<BI')
_U32 = struct.Struct('<I')
_I32 = struct.Struct('<i')
_INT32_MAX = 2 ** 31 - 1


def _qual_bits(qual: Optional[float]) -> int:
	if qual is None:
		return FLOAT32_MISSING_BITS
	return int(np.array([qual], dtype='<f4').view('<u4')[0])


def _qual_value(bits: int) -> Optional[float]:
	if bits == FLOAT32_MISSING_BITS:
		return None
	return float(np.array([bits], dtype='<u4').view('<f4')[0])


def encode_typed(value: Any) -> bytes:
	"""Serialise one INFO value or one sample's FORMAT value."""
	if value is None:
		return _TYPED.pack(T_MISSING, 0)
	if value is True:
		return _TYPED.pack(T_FLAG, 0)
	items = value if isinstance(value, list) else [value]
	present = [x for x in items if x is not None]
	if any(isinstance(x, str) for x in present):
		data = ','.join('.' if x is None else str(x) for x in items).encode('utf-8')
		return _TYPED.pack(T_STR, len(data)) + data
	if any(isinstance(x, float) for x in present):
		arr = np.array([np.nan if x is None else x for x in items], dtype='<f4')
		bits = arr.view('<u4').copy()
		bits[[x is None for x in items]] = FLOAT32_MISSING_BITS
		return _TYPED.pack(T_FLOAT, len(items)) + bits.tobytes()
	arr = np.array([INT32_MISSING if x is None else x for x in items], dtype='<i8')
	if len(arr) and (arr.max() > _INT32_MAX or arr.min() < INT32_MISSING):
		raise WriteError(f"Integer value out of 32-bit range: {value!r}")
	return _TYPED.pack(T_INT, len(items)) + arr.astype('<i4').tobytes()


class _Cursor:
	def __init__(self, buf: bytes):
		self.buf = buf
		self.off = 0

	def unpack(self, st: struct.Struct) -> Tuple:
		out = st.unpack_from(self.buf, self.off)
		self.off += st.size
		return out

	def take(self, n: int) -> bytes:
		if self.off + n > len(self.buf):
			raise ReadFault("Record block truncated")
		out = self.buf[self.off:self.off + n]
		self.off += n
		return out

	def array(self, dtype: str, count: int) -> np.ndarray:
		return np.frombuffer(self.take(4 * count), dtype=dtype, count=count)

	def typed(self) -> Tuple[int, Any]:
		type_, count = self.unpack(_TYPED)
		if type_ in (T_MISSING, T_FLAG):
			return type_, None
		if type_ == T_STR:
			return type_, self.take(count).decode('utf-8')
		if type_ == T_INT:
			return type_, [None if v == INT32_MISSING else int(v) for v in self.array('<i4', count)]
		if type_ == T_FLOAT:
			bits = self.array('<u4', count)
			vals = bits.view('<f4')
			return type_, [None if b == FLOAT32_MISSING_BITS else float(v) for b, v in zip(bits, vals)]
		raise ReadFault(f"Unknown value type code {type_}")


def shape_typed(type_: int, raw: Any, defn: Optional[FieldDefinition]) -> Any:
	"""Turn a decoded payload back into the scalar/list form of ``defn``."""
	if type_ == T_FLAG:
		return True
	if type_ == T_MISSING:
		return None
	scalar = defn is not None and defn.is_scalar
	if type_ == T_STR:
		if scalar:
			return raw
		return [None if t == '.' else t for t in raw.split(',')]
	if scalar and len(raw) == 1:
		return raw[0]
	return raw


class ContainerCodec:
	"""Reads / writes the binary container."""

	binary = True

	# -- reading ----------------------------------------------------------
	def read_header(self, fh: IO[bytes]) -> Header:
		if fh.read(len(CONTAINER_MAGIC)) != CONTAINER_MAGIC:
			raise ReadFault("Not a binary variant container (bad magic)")
		head = fh.read(_U32.size)
		if len(head) != _U32.size:
			raise ReadFault("Truncated container prologue")
		(l_text,) = _U32.unpack(head)
		text = fh.read(l_text)
		if len(text) != l_text:
			raise ReadFault("Truncated header text")
		return parse_header_text(text.rstrip(b'\0').decode('utf-8').splitlines())

	def read_next(self, fh: IO[bytes], header: Header) -> Optional[Record]:
		"""Next record bound to ``header``, or None at end of stream."""
		head = fh.read(_U32.size)
		if not head:
			return None
		if len(head) != _U32.size:
			raise ReadFault("Truncated record length")
		(l_block,) = _U32.unpack(head)
		block = fh.read(l_block)
		if len(block) != l_block:
			raise ReadFault("Truncated record block")
		try:
			return self._decode(_Cursor(block), header)
		except (struct.error, UnicodeDecodeError, ValueError) as e:
			raise ReadFault(f"Corrupt record block: {e}") from e

	def _decode(self, cur: _Cursor, header: Header) -> Record:
		contig_id, pos, qual, n_allele, n_filter, n_info, n_fmt, n_sample = cur.unpack(_FIXED)
		if header.contigs.entry(contig_id) is None:
			raise ReadFault(f"Record references unknown contig id {contig_id}")
		if n_sample != header.sample_count():
			raise ReadFault(f"Record holds {n_sample} samples, header declares {header.sample_count()}")
		_, vid = cur.typed()
		alleles = [cur.typed()[1] or '' for _ in range(n_allele)]
		_, filters = cur.typed()
		filters = filters or []
		if len(filters) != n_filter:
			raise ReadFault("FILTER count mismatch")
		rec = Record(header, contig_id, pos, alleles, _qual_value(qual), vid, filters, n_sample=n_sample)
		for _ in range(n_info):
			(key,) = cur.unpack(_I32)
			defn = header.field_definition_by_id(INFO, key)
			if defn is None:
				raise ReadFault(f"Record references undefined INFO id {key}")
			rec.info[key] = shape_typed(*cur.typed(), defn)
		for _ in range(n_fmt):
			(key,) = cur.unpack(_I32)
			defn = header.field_definition_by_id(FORMAT, key)
			if defn is None:
				raise ReadFault(f"Record references undefined FORMAT id {key}")
			rec.format[key] = [shape_typed(*cur.typed(), defn) for _ in range(n_sample)]
		return rec

	# -- writing ----------------------------------------------------------
	def write_header(self, fh: IO[bytes], header: Header) -> None:
		text = header.to_text(with_idx=True).encode('utf-8') + b'\0'
		fh.write(CONTAINER_MAGIC + _U32.pack(len(text)) + text)

	def encode_record(self, header: Header, record: Record) -> bytes:
		if record.n_sample != header.sample_count():
			raise WriteError(
				f"{record!r} holds {record.n_sample} samples, header declares {header.sample_count()}"
			)
		parts: List[bytes] = [
			_FIXED.pack(
				record.contig_id, record.pos, _qual_bits(record.qual), len(record.alleles),
				len(record.filters), len(record.info), len(record.format), record.n_sample,
			),
			encode_typed(record.id),
		]
		parts.extend(encode_typed(a) for a in record.alleles)
		parts.append(encode_typed(list(record.filters)))
		for key, value in record.info.items():
			parts.append(_I32.pack(key))
			parts.append(encode_typed(value))
		for key, values in record.format.items():
			parts.append(_I32.pack(key))
			parts.extend(encode_typed(v) for v in values)
		return b''.join(parts)

	def write(self, fh: IO[bytes], header: Header, record: Record) -> None:
		try:
			block = self.encode_record(header, record)
		except (struct.error, OverflowError, ValueError, TypeError) as e:
			raise WriteError(f"Cannot encode {record!r}: {e}") from e
		fh.write(_U32.pack(len(block)) + block)

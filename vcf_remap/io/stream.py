"""Sequential record streams.

``Reader`` yields records bound to its own header; ``Writer`` owns a private
duplicate of the header it is given and only accepts records bound to that
duplicate. The usual pipeline is::

	with Reader(src) as reader:
		header = Header.derive_subset(reader.header, ["NA12878"])
		with Writer(dst, header, uncompressed=False, vcf=False) as writer:
			for record in reader:
				writer.pipe(record, trim=True)
"""

from __future__ import annotations

from typing import Dict, Iterator, Optional, Union

from ..core.header import Header, HeaderView
from ..core.record import Record
from ..core.translate import subset as subset_record
from ..core.translate import translate as translate_record
from ..core.trim import trim_unobserved_alleles
from ..exceptions import ReadFault, WriteError
from ..utils import log_warn
from .storage import OpenMode, mode_for, open_read, open_write


class Reader:
	"""Streaming reader over a text or binary variant file.

	Parameters
	----------
	path : str
		Path to a VCF (plain / gzip) or binary container file.
	max_records : int | None
		Optional limit for testing / faster prototyping.
	prescan : bool
		Text input only: read the records once up front so contigs and keys
		missing from the header are declared before anyone copies it.
	"""

	def __init__(self, path: str, max_records: Optional[int] = None, prescan: bool = False):
		self.path = str(path)
		self.max_records = max_records
		self.count = 0
		self._fh, self._codec = open_read(self.path)
		try:
			self._header = self._codec.read_header(self._fh)
			if prescan and not self._codec.binary:
				self._prescan()
		except BaseException:
			self._fh.close()
			raise
		self.header = HeaderView(self._header)

	def _prescan(self) -> int:
		"""Parse the body on a second handle, keeping only header declarations."""
		fh, codec = open_read(self.path)
		n = 0
		try:
			codec.read_header(fh)
			while self.max_records is None or n < self.max_records:
				if codec.read_next(fh, self._header) is None:
					break
				n += 1
		except (OSError, EOFError) as e:
			raise ReadFault(f"Read failed on {self.path}: {e}") from e
		finally:
			fh.close()
		return n

	@property
	def is_binary(self) -> bool:
		return self._codec.binary

	def read(self) -> Optional[Record]:
		"""Next record, or None once the stream is exhausted."""
		if self._fh is None:
			raise ReadFault(f"Reader for {self.path} is closed")
		if self.max_records is not None and self.count >= self.max_records:
			return None
		try:
			record = self._codec.read_next(self._fh, self._header)
		except (OSError, EOFError) as e:
			raise ReadFault(f"Read failed on {self.path}: {e}") from e
		if record is not None:
			self.count += 1
		return record

	def records(self) -> Iterator[Record]:
		while True:
			record = self.read()
			if record is None:
				return
			yield record

	def __iter__(self) -> Iterator[Record]:
		return self.records()

	def close(self) -> None:
		if self._fh is not None:
			self._fh.close()
			self._fh = None

	def __enter__(self) -> "Reader":
		return self

	def __exit__(self, *exc) -> None:
		self.close()


class Writer:
	"""Streaming writer.

	The header passed in is locked (its prologue is on disk) and a private
	duplicate becomes the writer's own header. A subset map on the given
	header is carried over and applied by ``subset``. A HeaderView (such as
	``reader.header``) is copied first and left untouched.
	"""

	def __init__(
		self,
		path: str,
		header: Union[Header, HeaderView],
		uncompressed: bool = False,
		vcf: bool = False,
		mode: Optional[Union[OpenMode, str]] = None,
	):
		self.path = str(path)
		self.mode = OpenMode(mode) if mode is not None else mode_for(uncompressed, vcf)
		self.count = 0
		self.dropped_fields: Dict[str, int] = {}
		if isinstance(header, HeaderView):
			# views are read-only; write from a copy
			view = header
			header = Header.duplicate(view)
			header.subset = view.subset
		self._fh, self._codec = open_write(self.path, self.mode)
		try:
			self._codec.write_header(self._fh, header)
			header.lock()
		except OSError as e:
			self._fh.close()
			raise WriteError(f"Cannot write header to {self.path}: {e}") from e
		except BaseException:
			self._fh.close()
			raise
		self._header = Header.duplicate(header)
		self._header.lock()
		self.subset_map = list(header.subset) if header.subset is not None else None
		self.header = HeaderView(self._header)

	def owns(self, record: Record) -> bool:
		return record.header is self._header

	def translate(self, record: Record) -> Record:
		"""Rebind ``record`` to this writer's header."""
		return translate_record(record, self._header, self.dropped_fields)

	def subset(self, record: Record) -> Record:
		"""Drop samples not in this writer's subset map (no-op without one)."""
		if self.subset_map is None:
			return record
		return subset_record(record, self.subset_map)

	def write(self, record: Record) -> None:
		if self._fh is None:
			raise WriteError(f"Writer for {self.path} is closed")
		if not self.owns(record):
			raise WriteError("Record is not bound to this writer's header; translate() it first")
		try:
			self._codec.write(self._fh, self._header, record)
		except OSError as e:
			raise WriteError(f"Write failed on {self.path}: {e}") from e
		self.count += 1

	def pipe(self, record: Record, trim: bool = False) -> Record:
		"""translate -> subset -> (trim) -> write, skipping stages that do not apply."""
		if not self.owns(record):
			self.translate(record)
			self.subset(record)
		if trim:
			trim_unobserved_alleles(record)
		self.write(record)
		return record

	def close(self) -> None:
		if self._fh is None:
			return
		try:
			self._fh.close()
		finally:
			self._fh = None
		if self.dropped_fields:
			summary = ', '.join(f"{k} x{v}" for k, v in sorted(self.dropped_fields.items()))
			log_warn(f"Fields absent from the output header were dropped: {summary}")

	def __enter__(self) -> "Writer":
		return self

	def __exit__(self, *exc) -> None:
		self.close()


def copy_records(reader: Reader, writer: Writer, trim: bool = False) -> int:
	"""Pipe every record of ``reader`` into ``writer``; returns the count.

	The writer's header is fixed when it is built, so a text reader whose
	file may use undeclared contigs or keys should be opened with
	``prescan=True`` before that header is derived.
	"""
	n = 0
	for record in reader:
		writer.pipe(record, trim=trim)
		n += 1
	return n

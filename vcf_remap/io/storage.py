"""Opening and closing of record storage.

Text output is plain VCF (optionally gzip-compressed); binary output is the
compact container handled by ``container``. Readers sniff the gzip magic
bytes and then the container magic, so file suffixes are not required.
"""

from __future__ import annotations

import gzip
from enum import Enum
from typing import IO, Tuple, Union

from ..config import CONTAINER_MAGIC, GZIP_MAGIC
from ..exceptions import ReadFault, WriteError
from .container import ContainerCodec
from .vcf_text import VcfTextCodec

Codec = Union[ContainerCodec, VcfTextCodec]


class OpenMode(str, Enum):
	READ = "r"
	WRITE_TEXT = "w"
	WRITE_TEXT_COMPRESSED = "wz"
	WRITE_BINARY_UNCOMPRESSED = "wu"
	WRITE_BINARY = "wb"

	@property
	def is_text(self) -> bool:
		return self in (OpenMode.WRITE_TEXT, OpenMode.WRITE_TEXT_COMPRESSED)

	@property
	def is_compressed(self) -> bool:
		return self in (OpenMode.WRITE_TEXT_COMPRESSED, OpenMode.WRITE_BINARY)


OUTPUT_TYPES = {
	"v": OpenMode.WRITE_TEXT,
	"z": OpenMode.WRITE_TEXT_COMPRESSED,
	"u": OpenMode.WRITE_BINARY_UNCOMPRESSED,
	"b": OpenMode.WRITE_BINARY,
}


def mode_for(uncompressed: bool, vcf: bool) -> OpenMode:
	"""Pick the write mode from the (uncompressed, text) flag pair."""
	if vcf:
		return OpenMode.WRITE_TEXT if uncompressed else OpenMode.WRITE_TEXT_COMPRESSED
	return OpenMode.WRITE_BINARY_UNCOMPRESSED if uncompressed else OpenMode.WRITE_BINARY


def _is_gzip(path: str) -> bool:
	with open(path, 'rb') as fh:
		return fh.read(2) == GZIP_MAGIC


def open_read(path: str) -> Tuple[IO, Codec]:
	"""Open ``path`` for reading and return (handle, codec)."""
	try:
		gz = _is_gzip(path)
		opener = gzip.open if gz else open
		with opener(path, 'rb') as fh:
			binary = fh.read(len(CONTAINER_MAGIC)) == CONTAINER_MAGIC
		if binary:
			return opener(path, 'rb'), ContainerCodec()
		if gz:
			return gzip.open(path, 'rt', encoding='utf-8'), VcfTextCodec()
		return open(path, 'r', encoding='utf-8'), VcfTextCodec()
	except OSError as e:
		raise ReadFault(f"Cannot open {path} for reading: {e}") from e


def open_write(path: str, mode: OpenMode) -> Tuple[IO, Codec]:
	"""Open ``path`` for writing in ``mode`` and return (handle, codec)."""
	mode = OpenMode(mode)
	if mode is OpenMode.READ:
		raise ValueError("open_write() needs a write mode")
	try:
		if mode.is_text:
			if mode.is_compressed:
				return gzip.open(path, 'wt', encoding='utf-8'), VcfTextCodec()
			return open(path, 'w', encoding='utf-8'), VcfTextCodec()
		if mode.is_compressed:
			return gzip.open(path, 'wb'), ContainerCodec()
		return open(path, 'wb'), ContainerCodec()
	except OSError as e:
		raise WriteError(f"Cannot open {path} for writing: {e}") from e

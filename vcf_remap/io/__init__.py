"""I/O subpackage.

Exposes the streaming Reader / Writer plus the storage modes. The text and
binary codecs are internal collaborators selected by ``storage``.
"""

from .storage import OpenMode, OUTPUT_TYPES, mode_for  # noqa: F401
from .stream import Reader, Writer, copy_records  # noqa: F401

__all__ = ["OpenMode", "OUTPUT_TYPES", "mode_for", "Reader", "Writer", "copy_records"]

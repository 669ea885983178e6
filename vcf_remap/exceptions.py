"""Exception hierarchy for vcf_remap.

Header and dictionary errors signal a schema mismatch and are always
surfaced to the caller. End-of-stream is *not* an exception: readers
return ``None`` / stop iterating instead.
"""


class VcfRemapError(Exception):
    """Base class for every error raised by this package."""


class HeaderError(VcfRemapError):
    """Problem building or mutating a header."""


class UnknownSampleError(HeaderError, KeyError):
    """A requested sample name is not present in the template header."""


class DuplicateNameError(HeaderError):
    """A name (or explicit id) is already taken in a dictionary."""


class MalformedDefinitionError(HeaderError, ValueError):
    """A header meta line could not be parsed."""


class SubsetConstructionError(HeaderError):
    """The sample dictionary of a subset header could not be built."""


class HeaderLockedError(HeaderError):
    """The header was already used to write a stream prologue."""


class UnknownContigError(VcfRemapError, KeyError):
    """A contig name has no entry in the destination header."""


class UnknownFieldError(VcfRemapError, KeyError):
    """An INFO/FORMAT/FILTER key is not defined in the bound header."""


class IndexOutOfRangeError(VcfRemapError, IndexError):
    """A sample or allele index does not fit the record's data."""


class NoGenotypeDataError(VcfRemapError):
    """Allele trimming was requested on a record without GT data."""


class ReadFault(VcfRemapError):
    """Storage-level read failure other than a clean end of stream."""


class WriteError(VcfRemapError):
    """The storage layer (or the writer's own checks) rejected a record."""


__all__ = [
    "VcfRemapError",
    "HeaderError",
    "UnknownSampleError",
    "DuplicateNameError",
    "MalformedDefinitionError",
    "SubsetConstructionError",
    "HeaderLockedError",
    "UnknownContigError",
    "UnknownFieldError",
    "IndexOutOfRangeError",
    "NoGenotypeDataError",
    "ReadFault",
    "WriteError",
]

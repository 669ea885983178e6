"""vcf_remap – header dictionaries and cross-header record translation.

Subpackages:
	core      – dictionaries, headers, records, translate / subset / trim
	io        – streaming Reader / Writer over text or binary storage
	metrics   – tabular summaries of record streams

The most common entry points are re-exported so users can simply::

	from vcf_remap import Reader, Writer, Header
"""

from .core import Header, HeaderView, Record, translate, subset, trim_unobserved_alleles  # noqa: F401
from .io import Reader, Writer, OpenMode  # noqa: F401

__version__ = "0.1.0"
__all__ = [
	"Header",
	"HeaderView",
	"Record",
	"translate",
	"subset",
	"trim_unobserved_alleles",
	"Reader",
	"Writer",
	"OpenMode",
	"__version__",
]

"""Core header model and record transforms.

	dictionary – index-stable id <-> name arenas
	header     – Header / HeaderView / SampleSubsetMap
	record     – Record bound to one header at a time
	translate  – header-to-header translation and sample subsetting
	trim       – removal of uncalled alternate alleles
"""

from .dictionary import Dictionary, DictEntry  # noqa: F401
from .header import Header, HeaderView, FieldDefinition, SampleSubsetMap  # noqa: F401
from .record import Record  # noqa: F401
from .translate import translate, subset  # noqa: F401
from .trim import trim_unobserved_alleles  # noqa: F401

__all__ = [
	"Dictionary",
	"DictEntry",
	"Header",
	"HeaderView",
	"FieldDefinition",
	"SampleSubsetMap",
	"Record",
	"translate",
	"subset",
	"trim_unobserved_alleles",
]

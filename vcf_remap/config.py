"""Constants shared by the header model, the codecs and the CLI."""

# Dictionary domains
CONTIG = "contig"
SAMPLE = "sample"
FIELD = "field"

# Field-definition kinds (all share the FIELD dictionary)
FILTER = "FILTER"
INFO = "INFO"
FORMAT = "FORMAT"
FIELD_KINDS = (FILTER, INFO, FORMAT)

VALID_TYPES = ("Integer", "Float", "Flag", "Character", "String")
SPECIAL_NUMBERS = ("A", "R", "G", ".")

FILEFORMAT_LINE = "##fileformat=VCFv4.2"
PASS_DESCRIPTION = "All filters passed"
FIXED_COLUMNS = ["#CHROM", "POS", "ID", "REF", "ALT", "QUAL", "FILTER", "INFO"]

# Binary container
CONTAINER_MAGIC = b"VRB\x01"
GZIP_MAGIC = b"\x1f\x8b"
INT32_MISSING = -(2 ** 31)
FLOAT32_MISSING_BITS = 0x7F800001

# CLI defaults
DEFAULT_OUTPUT_TYPE = "v"
PROGRESS_STEPS = ((10000, 1000), (100000, 10000), (None, 50000))

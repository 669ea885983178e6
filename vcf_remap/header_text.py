"""Header-text service: VCF meta lines <-> header dictionaries.

Structured lines (``##contig``, ``##FILTER``, ``##INFO``, ``##FORMAT``) are
parsed into dictionary entries; any other ``##key=value`` line is kept
verbatim. An ``IDX=n`` attribute pins the dictionary id, which is how the
binary container preserves ids across a round trip.
"""
from typing import Dict, Iterable, List, Optional, Tuple

from .config import CONTIG, FIELD_KINDS, FILEFORMAT_LINE, FIXED_COLUMNS, FORMAT, SAMPLE, SPECIAL_NUMBERS, VALID_TYPES
from .core.dictionary import Dictionary
from .core.header import FieldDefinition, Header
from .exceptions import DuplicateNameError, MalformedDefinitionError, ReadFault, SubsetConstructionError

_KNOWN_KEYS = ("ID", "Number", "Type", "Description", "IDX")


def split_structured(body: str) -> Dict[str, str]:
    """Split ``ID=DP,Number=1,Description="a, b"`` into an ordered dict.

    Commas inside double quotes do not separate pairs; surrounding quotes
    are stripped and ``\\"`` unescaped.
    """
    out: Dict[str, str] = {}
    key: List[str] = []
    val: List[str] = []
    in_key = True
    in_quotes = False
    i = 0
    while i < len(body):
        ch = body[i]
        if in_quotes:
            if ch == "\\" and i + 1 < len(body):
                val.append(body[i + 1])
                i += 2
                continue
            if ch == '"':
                in_quotes = False
            else:
                val.append(ch)
        elif in_key:
            if ch == "=":
                in_key = False
            elif ch == ",":
                raise MalformedDefinitionError(f"Missing '=' after {''.join(key)!r}")
            else:
                key.append(ch)
        elif ch == '"' and not val:
            in_quotes = True
        elif ch == ",":
            _store_pair(out, key, val)
            key, val, in_key = [], [], True
        else:
            val.append(ch)
        i += 1
    if in_quotes:
        raise MalformedDefinitionError(f"Unterminated quote in <{body}>")
    if key or val:
        if in_key:
            raise MalformedDefinitionError(f"Missing '=' after {''.join(key)!r}")
        _store_pair(out, key, val)
    return out


def _store_pair(out: Dict[str, str], key: List[str], val: List[str]) -> None:
    k = "".join(key).strip()
    if not k:
        raise MalformedDefinitionError("Empty attribute name")
    out[k] = "".join(val)


def parse_meta_line(line: str) -> Tuple[str, Optional[Dict[str, str]], str]:
    """Return (key, structured attrs or None, raw value) for a ``##`` line."""
    line = line.rstrip("\r\n")
    if not line.startswith("##") or "=" not in line:
        raise MalformedDefinitionError(f"Not a header meta line: {line!r}")
    key, value = line[2:].split("=", 1)
    if not key:
        raise MalformedDefinitionError(f"Empty meta key: {line!r}")
    if key in (CONTIG,) + FIELD_KINDS:
        if not (value.startswith("<") and value.endswith(">")):
            raise MalformedDefinitionError(f"Expected <...> value for ##{key}: {line!r}")
        return key, split_structured(value[1:-1]), value
    return key, None, value


def _parse_idx(attrs: Dict[str, str]) -> Optional[int]:
    idx = attrs.get("IDX")
    if idx is None:
        return None
    if not idx.isdigit():
        raise MalformedDefinitionError(f"Invalid IDX={idx!r}")
    return int(idx)


def _field_definition(kind: str, attrs: Dict[str, str]) -> FieldDefinition:
    name = attrs.get("ID")
    if not name:
        raise MalformedDefinitionError(f"##{kind} line without ID")
    if kind == "FILTER":
        number, type_ = "0", "Flag"
    else:
        number = attrs.get("Number")
        type_ = attrs.get("Type")
        if number is None or type_ is None:
            raise MalformedDefinitionError(f"##{kind}=<ID={name}> needs Number and Type")
        if type_ not in VALID_TYPES:
            raise MalformedDefinitionError(f"##{kind}=<ID={name}> has invalid Type={type_}")
        if not (number.isdigit() or number in SPECIAL_NUMBERS):
            raise MalformedDefinitionError(f"##{kind}=<ID={name}> has invalid Number={number}")
        if kind == FORMAT and type_ == "Flag":
            raise MalformedDefinitionError(f"##FORMAT=<ID={name}> cannot be a Flag")
    extra = {k: v for k, v in attrs.items() if k not in _KNOWN_KEYS}
    return FieldDefinition(kind, name, number, type_, attrs.get("Description", ""), extra)


def parse_and_append(header: Header, definition_text: str) -> None:
    """Insert one meta line into ``header``; raises MalformedDefinitionError."""
    key, attrs, value = parse_meta_line(definition_text)
    try:
        if key == CONTIG:
            name = attrs.get("ID")
            if not name:
                raise MalformedDefinitionError("##contig line without ID")
            extra = {k: v for k, v in attrs.items() if k not in ("ID", "IDX")}
            header._add_contig(name, _parse_idx(attrs), extra)
        elif key in FIELD_KINDS:
            header._add_field(_field_definition(key, attrs), _parse_idx(attrs))
        elif key == "fileformat":
            header.meta_lines = [f"##fileformat={value}"] + [
                m for m in header.meta_lines if not m.startswith("##fileformat=")
            ]
        else:
            line = f"##{key}={value}"
            if line not in header.meta_lines:
                header.meta_lines.append(line)
    except DuplicateNameError as e:
        raise MalformedDefinitionError(str(e)) from e


def build_dictionary_from_names(names: Iterable[str]) -> Dictionary:
    """Sample dictionary with ids 0..n-1; SubsetConstructionError on failure."""
    try:
        return Dictionary.from_names(SAMPLE, names)
    except (DuplicateNameError, ValueError) as e:
        raise SubsetConstructionError(f"Cannot build sample dictionary: {e}") from e


def parse_header_text(lines: Iterable[str]) -> Header:
    """Build a header from ``##`` lines followed by the ``#CHROM`` line."""
    header = Header.create_empty()
    seen_chrom = False
    for raw in lines:
        line = raw.rstrip("\r\n")
        if not line:
            continue
        if line.startswith("##"):
            parse_and_append(header, line)
        elif line.startswith("#CHROM"):
            cols = line.split("\t")
            if cols[:len(FIXED_COLUMNS)] != FIXED_COLUMNS:
                raise ReadFault(f"Malformed #CHROM line: {line!r}")
            for sample in cols[len(FIXED_COLUMNS) + 1:]:
                try:
                    header.add_sample(sample)
                except DuplicateNameError as e:
                    raise ReadFault(str(e)) from e
            seen_chrom = True
            break
        else:
            raise ReadFault(f"Unexpected line in header: {line[:80]!r}")
    if not seen_chrom:
        raise ReadFault("Header has no #CHROM line")
    return header


def _quote(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def format_definition(defn: FieldDefinition, idx: Optional[int] = None) -> str:
    parts = [f"ID={defn.name}"]
    if defn.kind != "FILTER":
        parts.append(f"Number={defn.number}")
        parts.append(f"Type={defn.type}")
    parts.append(f"Description={_quote(defn.description)}")
    for k, v in defn.extra.items():
        parts.append(f"{k}={_quote(v) if ',' in v or ' ' in v else v}")
    if idx is not None:
        parts.append(f"IDX={idx}")
    return f"##{defn.kind}=<{','.join(parts)}>"


def format_header(header: Header, with_idx: bool = False) -> str:
    """Render ``header`` as VCF text, ending with the ``#CHROM`` line."""
    lines: List[str] = []
    meta = header.meta_lines or [FILEFORMAT_LINE]
    lines.extend(meta)
    for kind in FIELD_KINDS:
        for entry in header.fields:
            defn = entry.attrs.get(kind)
            if defn is not None:
                lines.append(format_definition(defn, entry.id if with_idx else None))
    for entry in header.contigs:
        parts = [f"ID={entry.name}"] + [f"{k}={v}" for k, v in entry.attrs.items()]
        if with_idx:
            parts.append(f"IDX={entry.id}")
        lines.append(f"##contig=<{','.join(parts)}>")
    cols = list(FIXED_COLUMNS)
    if header.sample_count():
        cols.append("FORMAT")
        cols.extend(header.sample_names())
    lines.append("\t".join(cols))
    return "\n".join(lines) + "\n"

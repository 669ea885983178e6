"""Small utility helpers used across the vcf_remap package.

Pure-Python genotype/INFO helpers plus the timestamped log helpers used by
the reader, writer and CLI.
"""
import re
import sys
from datetime import datetime
from typing import Dict, List, Mapping, Optional, Tuple

import numpy as np

from .config import PROGRESS_STEPS

_GT_SPLIT = re.compile(r"([/|])")


def _stamp() -> str:
    return datetime.now().strftime("%H:%M:%S")


def log_info(msg: str) -> None:
    """Print info log message."""
    print(f"[{_stamp()}] [INFO] {msg}")


def log_warn(msg: str) -> None:
    """Print warning log message."""
    print(f"[{_stamp()}] [WARN] {msg}", file=sys.stderr)


def log_error(msg: str) -> None:
    """Print error log message (callers decide whether to exit)."""
    print(f"[{_stamp()}] [ERROR] {msg}", file=sys.stderr)


def progress_interval(count: int) -> int:
    """Adaptive progress interval: 1K steps first, then coarser."""
    for limit, interval in PROGRESS_STEPS:
        if limit is None or count <= limit:
            return interval
    return PROGRESS_STEPS[-1][1]


def parse_info_field(info: str) -> Dict[str, Optional[str]]:
    """Parse a VCF INFO column (key[=value];... ) into a dict.

    Values are returned as strings; flag keys (no value) map to None.
    An INFO field of '.' returns an empty dict.
    """
    out: Dict[str, Optional[str]] = {}
    if not info or info == ".":
        return out
    for token in info.split(";"):
        if not token:
            continue
        if "=" in token:
            k, v = token.split("=", 1)
            out[k] = v
        else:
            out[token] = None
    return out


def gt_is_missing(gt: Optional[str]) -> bool:
    """Check if a genotype is missing or half-missing.

    Treat '.', './.', '.|.', '0/.', './1', '0|.' etc. as missing.
    """
    if gt is None:
        return True
    if gt == '.':
        return True
    return '.' in gt


def split_genotype(gt: str) -> Tuple[List[Optional[int]], List[str]]:
    """Split 'a/b|c' into allele indices (None for '.') and separators."""
    tokens = _GT_SPLIT.split(gt)
    alleles: List[Optional[int]] = []
    for tok in tokens[0::2]:
        if tok == "." or tok == "":
            alleles.append(None)
        elif tok.isdigit():
            alleles.append(int(tok))
        else:
            raise ValueError(f"Invalid genotype allele {tok!r} in {gt!r}")
    return alleles, tokens[1::2]


def join_genotype(alleles: List[Optional[int]], seps: List[str]) -> str:
    out = ["." if alleles[0] is None else str(alleles[0])]
    for sep, allele in zip(seps, alleles[1:]):
        out.append(sep)
        out.append("." if allele is None else str(allele))
    return "".join(out)


def called_alleles(gt: Optional[str]) -> List[int]:
    """Allele indices referenced by a genotype, ignoring missing calls."""
    if gt is None or gt == ".":
        return []
    alleles, _ = split_genotype(gt)
    return [a for a in alleles if a is not None]


def renumber_genotype(gt: Optional[str], mapping: Mapping[int, int]) -> Optional[str]:
    """Rewrite allele indices of ``gt`` through ``mapping`` (old -> new)."""
    if gt is None or gt == ".":
        return gt
    alleles, seps = split_genotype(gt)
    return join_genotype([None if a is None else mapping[a] for a in alleles], seps)


def to_float32(value: float) -> float:
    """Round a float to 32-bit precision (the container stores float32)."""
    return float(np.float32(value))


def format_float(value: float) -> str:
    return "%g" % value


__all__ = [
    "log_info",
    "log_warn",
    "log_error",
    "progress_interval",
    "parse_info_field",
    "gt_is_missing",
    "split_genotype",
    "join_genotype",
    "called_alleles",
    "renumber_genotype",
    "to_float32",
    "format_float",
]

"""Keep a few samples of a VCF, trim uncalled ALT alleles and write a binary file.

Usage (adjust paths):
    PYTHONPATH=.. python3 examples/subset_samples.py \
        --vcf tests/data/test_multi.vcf \
        --out subset.vrb --samples NA12878.subsample-0.25-0
"""
from __future__ import annotations

import argparse

from vcf_remap import Header, Reader, Writer


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--vcf", required=True, help="Input VCF(.gz) or binary file")
    ap.add_argument("--out", required=True, help="Output binary file")
    ap.add_argument("--samples", required=True, help="Comma separated sample names")
    args = ap.parse_args()

    with Reader(args.vcf, prescan=True) as reader:
        header = Header.derive_subset(reader.header, args.samples.split(","))
        print(f"Subset map (output position -> input sample index): {header.subset}")
        with Writer(args.out, header) as writer:
            for record in reader:
                writer.translate(record)
                writer.subset(record)
                before = record.alleles[:]
                writer.pipe(record, trim=True)
                if len(record.alleles) != len(before):
                    print(f"{record.contig}:{record.pos + 1} trimmed {','.join(before)} -> {','.join(record.alleles)}")

    print(f"Records written to: {args.out}")


if __name__ == "__main__":
    main()

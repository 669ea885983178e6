"""Command line interface for vcf_remap.

Current subcommands:
	view     – convert / subset samples / trim alleles / drop header fields
	samples  – list sample names of a file
	stats    – write site-level and sample-level summary tables

Example:
	python -m vcf_remap.cli view -i input.vcf.gz -o out.vrb -O b -s NA12878 --trim-alt-alleles
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Optional

from .config import DEFAULT_OUTPUT_TYPE
from .core.header import Header
from .exceptions import VcfRemapError
from .io import OUTPUT_TYPES, Reader, Writer
from .metrics import sample_table, site_table
from .utils import log_error, log_info, progress_interval


def _requested_samples(args: argparse.Namespace) -> Optional[List[str]]:
	names: List[str] = []
	if args.samples:
		names.extend(s for s in args.samples.split(',') if s)
	if args.samples_file:
		with open(args.samples_file, 'rt') as fh:
			names.extend(line.strip() for line in fh if line.strip())
	return names or None


def cmd_view(args: argparse.Namespace) -> int:
	samples = _requested_samples(args)
	with Reader(args.input, max_records=args.max_records, prescan=True) as reader:
		if samples is not None:
			header = Header.derive_subset(reader.header, samples)
			log_info(f"Keeping {len(samples)} of {reader.header.sample_count()} samples")
		else:
			header = Header.duplicate(reader.header)
		for tag in args.remove_info:
			header.remove_info(tag)
		for tag in args.remove_format:
			header.remove_format(tag)

		trimmed = 0
		with Writer(args.output, header, mode=OUTPUT_TYPES[args.output_type]) as writer:
			for record in reader:
				n_allele = len(record.alleles)
				writer.pipe(record, trim=args.trim_alt_alleles)
				trimmed += n_allele - len(record.alleles)
				if writer.count % progress_interval(writer.count) == 0:
					log_info(f"Processed {writer.count:,} records...")
			count = writer.count
	log_info(f"Wrote {count:,} records to {args.output}")
	if args.trim_alt_alleles:
		log_info(f"Removed {trimmed:,} unobserved alternate alleles")
	return 0


def cmd_samples(args: argparse.Namespace) -> int:
	with Reader(args.input) as reader:
		for name in reader.header.samples():
			print(name)
	return 0


def cmd_stats(args: argparse.Namespace) -> int:
	outdir = Path(args.out)
	outdir.mkdir(parents=True, exist_ok=True)

	# two passes, each with a fresh reader
	with Reader(args.input, max_records=args.max_records) as reader:
		site_df = site_table(reader)
	with Reader(args.input, max_records=args.max_records) as reader:
		sample_df = sample_table(reader)

	site_df.to_csv(outdir / 'site_metrics.tsv', sep='\t', index=False)
	sample_df.to_csv(outdir / 'sample_metrics.tsv', sep='\t', index=False)
	log_info(f"{len(site_df):,} sites, {len(sample_df):,} samples summarised in {outdir}")
	return 0


def build_parser() -> argparse.ArgumentParser:
	p = argparse.ArgumentParser(prog="vcf_remap", description="Variant header translation and sample subsetting")
	sub = p.add_subparsers(dest="command")

	sp = sub.add_parser("view", help="Convert, subset samples and trim alleles")
	sp.add_argument("-i", "--input", required=True, help="Input VCF, VCF.GZ or binary container")
	sp.add_argument("-o", "--output", required=True, help="Output path")
	sp.add_argument("-O", "--output-type", choices=sorted(OUTPUT_TYPES), default=DEFAULT_OUTPUT_TYPE,
		help="v: VCF, z: gzip VCF, u: uncompressed .vrb container, b: gzipped .vrb container (not BCF)")
	sp.add_argument("-s", "--samples", default=None, help="Comma separated samples to keep, in output order")
	sp.add_argument("-S", "--samples-file", default=None, help="File with one sample name per line")
	sp.add_argument("--trim-alt-alleles", action="store_true", help="Remove ALT alleles not called by any kept sample")
	sp.add_argument("--remove-info", nargs='*', default=[], help="INFO tags to drop from the output header")
	sp.add_argument("--remove-format", nargs='*', default=[], help="FORMAT tags to drop from the output header")
	sp.add_argument("--max-records", type=int, default=None, help="Limit number of records processed (debug)")
	sp.set_defaults(func=cmd_view)

	sp2 = sub.add_parser("samples", help="Print sample names")
	sp2.add_argument("-i", "--input", required=True, help="Input file")
	sp2.set_defaults(func=cmd_samples)

	sp3 = sub.add_parser("stats", help="Site and sample summary tables")
	sp3.add_argument("-i", "--input", required=True, help="Input file")
	sp3.add_argument("--out", required=True, help="Output directory for TSV tables")
	sp3.add_argument("--max-records", type=int, default=None, help="Limit number of records parsed (debug)")
	sp3.set_defaults(func=cmd_stats)
	return p


def main(argv=None) -> int:
	parser = build_parser()
	args = parser.parse_args(argv)
	if not hasattr(args, 'func'):
		parser.print_help()
		return 1
	try:
		return args.func(args)
	except VcfRemapError as e:
		log_error(f"{type(e).__name__}: {e}")
		return 2


if __name__ == "__main__":  # pragma: no cover
	raise SystemExit(main())

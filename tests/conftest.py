"""Shared test fixtures for vcf_remap tests."""

from pathlib import Path

import pytest

from vcf_remap.core.header import Header

DATA = Path(__file__).parent / "data"


@pytest.fixture
def test_vcf():
    """60 records, one sample."""
    return str(DATA / "test.vcf")


@pytest.fixture
def multi_vcf():
    """Same 60 sites, two samples, different header ordering and an extra AC INFO."""
    return str(DATA / "test_multi.vcf")


@pytest.fixture
def make_header():
    """Factory: make_header(contigs, info=[(id, number, type)], format=[...], samples=[...])."""

    def _make(contigs=(), info=(), format=(), samples=()):
        header = Header.create_empty()
        for name in contigs:
            header.append_field_definition(f"##contig=<ID={name}>")
        for name, number, type_ in info:
            header.append_field_definition(
                f'##INFO=<ID={name},Number={number},Type={type_},Description="{name} info">'
            )
        for name, number, type_ in format:
            header.append_field_definition(
                f'##FORMAT=<ID={name},Number={number},Type={type_},Description="{name} format">'
            )
        for sample in samples:
            header.add_sample(sample)
        return header

    return _make

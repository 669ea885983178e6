import pytest

from vcf_remap.core.record import Record
from vcf_remap.core.trim import trim_unobserved_alleles
from vcf_remap.exceptions import IndexOutOfRangeError, NoGenotypeDataError


@pytest.fixture
def header(make_header):
    return make_header(
        contigs=["1"],
        info=[("AF", "A", "Float"), ("DP", "1", "Integer")],
        format=[("GT", "1", "String"), ("PL", "G", "Integer"), ("AD", "R", "Integer")],
        samples=["a", "b", "c"],
    )


def test_unobserved_allele_removed_and_genotypes_renumbered(header):
    rec = Record.from_names(
        header, "1", 100, ["A", "C", "G", "<X>"],
        info={"AF": [0.1, 0.2, 0.3], "DP": 7},
        format={
            "GT": ["0/1", "1|3", "3/3"],
            "PL": [list(range(10))] * 3,
            "AD": [[10, 11, 12, 13], None, [1, 2, 3, 4]],
        },
    )
    removed = trim_unobserved_alleles(rec)
    assert removed == [2]
    assert rec.alleles == ["A", "C", "<X>"]
    assert rec.genotypes() == ["0/1", "1|2", "2/2"]
    assert rec.info_value("AF") == [0.1, 0.3]
    assert rec.info_value("DP") == 7
    assert rec.format_values("PL") == [[0, 1, 2, 6, 7, 9]] * 3
    assert rec.format_values("AD") == [[10, 11, 13], None, [1, 2, 4]]


def test_nothing_to_trim(header):
    rec = Record.from_names(header, "1", 1, ["A", "T"], format={"GT": ["0/1", "./.", "0/0"]})
    assert trim_unobserved_alleles(rec) == []
    assert rec.alleles == ["A", "T"]


def test_all_missing_calls_remove_every_alt(header):
    rec = Record.from_names(
        header, "1", 1, ["A", "T", "<X>"],
        format={"GT": ["./.", None, "0/."], "PL": [None, None, [0, 1, 2, 3, 4, 5]]},
    )
    assert trim_unobserved_alleles(rec) == [1, 2]
    assert rec.alleles == ["A"]
    assert rec.format_values("PL") == [None, None, [0]]


def test_haploid_number_g(header):
    rec = Record.from_names(
        header, "1", 1, ["A", "T", "<X>"],
        format={"GT": ["2", "0", "."], "PL": [[5, 9, 0], [0, 9, 5], None]},
    )
    trim_unobserved_alleles(rec)
    assert rec.alleles == ["A", "<X>"]
    assert rec.genotypes() == ["1", "0", "."]
    assert rec.format_values("PL") == [[5, 0], [0, 5], None]


def test_requires_genotypes(header):
    rec = Record.from_names(header, "1", 1, ["A", "T"], format={"PL": [[0, 1, 2]] * 3})
    with pytest.raises(NoGenotypeDataError):
        trim_unobserved_alleles(rec)
    assert rec.alleles == ["A", "T"]


def test_requires_gt_definition(make_header):
    h = make_header(contigs=["1"], samples=["a"])
    rec = Record.from_names(h, "1", 1, ["A", "T"])
    with pytest.raises(NoGenotypeDataError):
        trim_unobserved_alleles(rec)


def test_bad_number_g_length(header):
    rec = Record.from_names(
        header, "1", 1, ["A", "T", "G"],
        format={"GT": ["0/1", "0/1", "0/1"], "PL": [[1, 2], [1, 2], [1, 2]]},
    )
    with pytest.raises(IndexOutOfRangeError):
        trim_unobserved_alleles(rec)

import pytest

from vcf_remap.config import FORMAT, INFO
from vcf_remap.core.header import Header
from vcf_remap.exceptions import (
    DuplicateNameError,
    HeaderLockedError,
    SubsetConstructionError,
    UnknownSampleError,
)


@pytest.fixture
def header(make_header):
    return make_header(
        contigs=["1", "2"],
        info=[("DP", "1", "Integer"), ("AF", "A", "Float")],
        format=[("GT", "1", "String"), ("DP", "1", "Integer")],
        samples=["s0", "s1", "s2", "s3"],
    )


def test_create_empty_has_pass_filter_only():
    h = Header.create_empty()
    assert h.sample_count() == 0
    assert h.contig_names() == []
    assert h.fields.id_of("PASS") == 0


def test_shared_field_namespace(header):
    assert header.fields.id_of("DP") == 1
    assert header.field_definition(INFO, "DP").type == "Integer"
    assert header.field_definition(FORMAT, "DP").number == "1"
    assert header.fields.id_of("GT") == 3


def test_duplicate_preserves_samples_and_ids(header):
    dup = Header.duplicate(header)
    assert dup.sample_names() == header.sample_names()
    assert dup.fields.id_of("AF") == header.fields.id_of("AF")
    assert dup.subset is None
    dup.add_sample("s4")
    dup.remove_info("AF")
    assert header.sample_count() == 4
    assert header.field_definition(INFO, "AF") is not None


def test_derive_subset_keeps_requested_order(header):
    sub = Header.derive_subset(header, ["s3", "s0", "s2"])
    assert sub.sample_names() == ["s3", "s0", "s2"]
    assert sub.subset == [3, 0, 2]
    assert sub.samples.id_of("s0") == 1
    assert sub.contig_names() == header.contig_names()


def test_derive_subset_from_view(header):
    sub = Header.derive_subset(header.view(), ["s1"])
    assert sub.subset == [1]


def test_derive_subset_unknown_sample(header):
    with pytest.raises(UnknownSampleError):
        Header.derive_subset(header, ["s0", "nope"])


def test_derive_subset_duplicate_request(header):
    with pytest.raises(SubsetConstructionError):
        Header.derive_subset(header, ["s0", "s0"])


def test_add_sample_duplicate(header):
    with pytest.raises(DuplicateNameError):
        header.add_sample("s1")
    assert header.add_sample("s9").samples.id_of("s9") == 4


def test_remove_field_definition_is_idempotent(header):
    header.remove_format("DP")
    assert header.field_definition(FORMAT, "DP") is None
    # INFO/DP keeps the shared id
    assert header.fields.id_of("DP") == 1
    header.remove_format("DP")
    header.remove_info("NOPE")
    header.remove_info("DP")
    assert "DP" not in header.fields
    header.append_field_definition('##INFO=<ID=DP,Number=1,Type=Integer,Description="again">')
    assert header.fields.id_of("DP") == 4


def test_redeclaration_keeps_first_definition(header):
    header.append_field_definition('##INFO=<ID=DP,Number=.,Type=String,Description="other">')
    assert header.field_definition(INFO, "DP").type == "Integer"


def test_locked_header_rejects_mutation(header):
    header.lock()
    with pytest.raises(HeaderLockedError):
        header.add_sample("late")
    with pytest.raises(HeaderLockedError):
        header.remove_info("DP")
    with pytest.raises(HeaderLockedError):
        header.append_field_definition("##source=test")
    assert not Header.duplicate(header).locked


def test_view_is_read_only_projection(header):
    view = header.view()
    assert view.sample_count() == 4
    assert view.samples() == ["s0", "s1", "s2", "s3"]
    assert view.is_view_of(header)
    assert not hasattr(view, "add_sample")

import gzip

import pytest

from vcf_remap.config import CONTAINER_MAGIC, INFO
from vcf_remap.core.header import Header
from vcf_remap.core.record import Record
from vcf_remap.exceptions import HeaderLockedError, ReadFault, WriteError
from vcf_remap.io import OpenMode, Reader, Writer, copy_records, mode_for

SAMPLE0 = "NA12878.subsample-0.25-0"
SAMPLE1 = "NA12878.subsample-0.25-1"


def _check_test_records(path):
    """Content checks for the 60-record single-sample fixture."""
    with Reader(path) as reader:
        assert reader.header.samples() == [SAMPLE0]
        n = 0
        for i, record in enumerate(reader):
            assert record.sample_count() == 1
            assert record.contig_id == 0 and record.contig == "1"
            assert record.pos == 10021 + i
            assert record.qual == 0.0
            assert record.info_value("MQ0F") == 1.0
            if i == 59:
                assert record.info_value("SGB") == pytest.approx(-0.379885)
            assert record.alleles[-1] == "<X>"
            pl = record.format_values("PL")
            assert len(pl) == 1
            assert len(pl[0]) == (6 if i == 59 else 3)
            n += 1
        assert n == 60


def _named(path):
    with Reader(path) as reader:
        return [r.as_named() for r in reader]


def test_read_text(test_vcf):
    _check_test_records(test_vcf)


def test_mode_for_flags():
    assert mode_for(True, True) is OpenMode.WRITE_TEXT
    assert mode_for(False, True) is OpenMode.WRITE_TEXT_COMPRESSED
    assert mode_for(True, False) is OpenMode.WRITE_BINARY_UNCOMPRESSED
    assert mode_for(False, False) is OpenMode.WRITE_BINARY


@pytest.mark.parametrize("mode", ["w", "wz", "wu", "wb"])
def test_round_trip_through_duplicate_header(test_vcf, tmp_path, mode):
    out = tmp_path / "out.dat"
    with Reader(test_vcf) as reader:
        with Writer(out, Header.duplicate(reader.header), mode=mode) as writer:
            assert copy_records(reader, writer) == 60
    with Reader(out) as back:
        assert back.is_binary == (mode in ("wu", "wb"))
    assert _named(out) == _named(test_vcf)
    _check_test_records(out)


def test_compressed_outputs_are_gzip(test_vcf, tmp_path):
    for mode in ("wz", "wb"):
        out = tmp_path / f"out.{mode}"
        with Reader(test_vcf) as reader, Writer(out, Header.duplicate(reader.header), mode=mode) as writer:
            copy_records(reader, writer)
        with gzip.open(out, "rb") as fh:
            assert fh.read(1)


def test_subset_to_full_sample_set_end_to_end(test_vcf, tmp_path):
    out = tmp_path / "subset.vrb"
    with Reader(test_vcf) as reader:
        header = Header.derive_subset(reader.header, [SAMPLE0])
        assert header.subset == [0]
        with Writer(out, header, uncompressed=False, vcf=False) as writer:
            for record in reader:
                writer.translate(record)
                writer.subset(record)
                writer.write(record)
    assert _named(out) == _named(test_vcf)
    _check_test_records(out)


def test_multi_sample_subset_matches_single_sample_file(multi_vcf, test_vcf, tmp_path):
    out = tmp_path / "subset.vrb"
    with Reader(multi_vcf) as reader:
        assert reader.header.samples() == [SAMPLE1, SAMPLE0]
        header = Header.derive_subset(reader.header, [SAMPLE0])
        assert header.subset == [1]
        header.remove_info("AC")
        with Writer(out, header) as writer:
            copy_records(reader, writer)
            assert writer.header.samples() == [SAMPLE0]
        assert writer.dropped_fields == {"INFO/AC": 60}
    assert _named(out) == _named(test_vcf)


def test_subset_then_trim(multi_vcf, tmp_path):
    out = tmp_path / "trimmed.vcf"
    with Reader(multi_vcf) as reader:
        header = Header.derive_subset(reader.header, [SAMPLE0])
        with Writer(out, header, uncompressed=True, vcf=True) as writer:
            copy_records(reader, writer, trim=True)
    records = _named(out)
    assert len(records) == 60
    for rec in records[:59]:
        assert len(rec["alleles"]) == 1
        assert rec["format"]["PL"] == [[0]]
        assert rec["format"]["GT"] == ["0/0"]
    last = records[59]
    assert last["alleles"] == ["T", "C"]
    assert last["format"]["PL"] == [[25, 0, 40]]
    assert last["info"]["AC"] == [1]


def test_read_returns_none_when_exhausted(test_vcf):
    with Reader(test_vcf, max_records=2) as reader:
        assert reader.read() is not None
        assert reader.read() is not None
        assert reader.read() is None
        assert reader.read() is None
    with pytest.raises(ReadFault):
        reader.read()


def test_records_outlive_next_read(test_vcf):
    with Reader(test_vcf) as reader:
        first = reader.read()
        second = reader.read()
    assert first.pos == 10021 and second.pos == 10022
    assert first is not second


def test_writer_locks_given_header(test_vcf, tmp_path):
    with Reader(test_vcf) as reader:
        header = Header.duplicate(reader.header)
        with Writer(tmp_path / "x.vcf", header, mode="w"):
            pass
    with pytest.raises(HeaderLockedError):
        header.add_sample("late")


def test_write_requires_own_header(test_vcf, tmp_path):
    with Reader(test_vcf) as reader, Writer(tmp_path / "x.vrb", Header.duplicate(reader.header)) as writer:
        record = reader.read()
        with pytest.raises(WriteError):
            writer.write(record)
        writer.translate(record)
        writer.write(record)
        assert writer.count == 1


def test_write_rejects_unsubsetted_record(multi_vcf, tmp_path):
    with Reader(multi_vcf) as reader:
        header = Header.derive_subset(reader.header, [SAMPLE0])
        with Writer(tmp_path / "x.vrb", header) as writer:
            record = reader.read()
            writer.translate(record)
            with pytest.raises(WriteError):
                writer.write(record)


def test_binary_round_trip_keeps_holes(make_header, tmp_path):
    header = make_header(
        contigs=["1"],
        info=[("DP", "1", "Integer"), ("AF", "A", "Float"), ("FL", "0", "Flag"), ("NM", ".", "String")],
        format=[("GT", "1", "String"), ("GL", "G", "Float")],
        samples=["a", "b"],
    )
    header.remove_info("AF")
    record = Record.from_names(
        header, "1", 41, ["A", "G"], qual=None,
        info={"DP": 12, "FL": True, "NM": ["x", None, "z"]},
        format={"GT": ["0/1", None], "GL": [[-0.5, None, -2.0], None]},
    )
    record.id = "rs1"
    out = tmp_path / "holes.vrb"
    with Writer(out, header) as writer:
        writer.translate(record)
        writer.write(record)
    with Reader(out) as reader:
        assert reader._header.fields.id_of("GT") == header.fields.id_of("GT")
        assert reader._header.field_definition(INFO, "AF") is None
        back = reader.read()
    assert back.as_named() == record.as_named()
    assert back.qual is None


def test_undeclared_keys_are_added_with_warning(tmp_path, capsys):
    path = tmp_path / "sloppy.vcf"
    path.write_text(
        "##fileformat=VCFv4.2\n"
        "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\tFORMAT\ts1\n"
        "chr9\t5\t.\tA\tT\t.\tlowq\tFOO=bar;SOMATIC\tGT\t0/1\n"
    )
    with Reader(path) as reader:
        rec = reader.read()
    assert rec.contig == "chr9"
    assert rec.info_value("FOO") == "bar"
    assert rec.info_value("SOMATIC") is True
    assert rec.filter_names() == ["lowq"]
    assert rec.genotypes() == ["0/1"]
    assert "not defined in the header" in capsys.readouterr().err


@pytest.mark.parametrize("line", [
    "1\tx\t.\tA\tT\t.\t.\t.\n",
    "1\t5\t.\tA\tT\t.\n",
    "1\t5\t.\tA\tT\t.\t.\t.\tGT\t0/1\t1/1\n",
])
def test_malformed_text_record(tmp_path, line):
    path = tmp_path / "bad.vcf"
    path.write_text(
        "##fileformat=VCFv4.2\n##contig=<ID=1>\n"
        "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\tFORMAT\ts1\n" + line
    )
    with Reader(path) as reader:
        with pytest.raises(ReadFault):
            reader.read()


def test_truncated_binary_is_a_fault(test_vcf, tmp_path):
    out = tmp_path / "t.vrb"
    with Reader(test_vcf) as reader, Writer(out, Header.duplicate(reader.header), mode="wu") as writer:
        copy_records(reader, writer)
    data = out.read_bytes()
    out.write_bytes(data[:-5])
    with Reader(out) as reader:
        with pytest.raises(ReadFault):
            for _ in reader:
                pass


def test_missing_file_is_a_fault(tmp_path):
    with pytest.raises(ReadFault):
        Reader(tmp_path / "nope.vcf")


SLOPPY = (
    "##fileformat=VCFv4.2\n"
    "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\tFORMAT\ts1\n"
    "chr9\t5\t.\tA\tT\t.\tlowq\tFOO=bar;SOMATIC\tGT\t0/1\n"
    "chr9\t8\t.\tC\tG\t.\t.\tBAZ=1\tGT\t1/1\n"
)


@pytest.mark.parametrize("mode", ["w", "wb"])
def test_prescan_declares_before_header_is_copied(tmp_path, mode):
    path = tmp_path / "sloppy.vcf"
    path.write_text(SLOPPY)
    out = tmp_path / "copy.out"
    with Reader(path, prescan=True) as reader:
        assert reader.header.contig_names() == ["chr9"]
        assert reader.header.field_definition(INFO, "BAZ") is not None
        with Writer(out, Header.duplicate(reader.header), mode=mode) as writer:
            assert copy_records(reader, writer) == 2
        assert writer.dropped_fields == {}
    with Reader(out) as back:
        first, second = list(back)
    assert first.contig == "chr9"
    assert first.info_value("FOO") == "bar"
    assert first.info_value("SOMATIC") is True
    assert first.filter_names() == ["lowq"]
    assert second.info_value("BAZ") == "1"
    assert second.genotypes() == ["1/1"]


def test_prescan_respects_max_records(tmp_path):
    path = tmp_path / "sloppy.vcf"
    path.write_text(SLOPPY)
    with Reader(path, max_records=1, prescan=True) as reader:
        assert reader.header.field_definition(INFO, "FOO") is not None
        assert reader.header.field_definition(INFO, "BAZ") is None
        assert reader.read().pos == 4


def test_binary_container_has_own_magic(test_vcf, tmp_path):
    out = tmp_path / "x.vrb"
    with Reader(test_vcf, max_records=1) as reader, Writer(out, reader.header, mode="wu") as writer:
        copy_records(reader, writer)
    data = out.read_bytes()
    assert data.startswith(CONTAINER_MAGIC)
    assert not data.startswith(b"BCF")


@pytest.mark.parametrize("mode", ["w", "wu", "wb"])
def test_writer_accepts_reader_header_view(test_vcf, tmp_path, mode):
    out = tmp_path / "view.out"
    with Reader(test_vcf) as reader:
        with Writer(out, reader.header, mode=mode) as writer:
            assert copy_records(reader, writer) == 60
        assert not reader._header.locked
    assert _named(out) == _named(test_vcf)


def test_writer_keeps_subset_map_of_a_view(multi_vcf, tmp_path):
    out = tmp_path / "view.vcf"
    with Reader(multi_vcf) as reader:
        header = Header.derive_subset(reader.header, [SAMPLE0])
        with Writer(out, header.view(), mode="w") as writer:
            assert writer.subset_map == [1]
            copy_records(reader, writer)
        assert not header.locked
    with Reader(out) as back:
        assert back.header.samples() == [SAMPLE0]

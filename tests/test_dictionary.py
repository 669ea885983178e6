import pytest

from vcf_remap.core.dictionary import Dictionary
from vcf_remap.exceptions import DuplicateNameError


def test_ids_are_dense_in_insertion_order():
    d = Dictionary.from_names("sample", ["a", "b", "c"])
    assert [e.id for e in d] == [0, 1, 2]
    assert d.id_of("c") == 2
    assert d.name_of(1) == "b"


def test_duplicate_name_rejected():
    d = Dictionary.from_names("sample", ["a"])
    with pytest.raises(DuplicateNameError):
        d.add("a")


def test_removed_id_is_never_reused():
    d = Dictionary.from_names("field", ["PASS", "DP", "AF"])
    assert d.remove("DP")
    assert not d.remove("DP")
    assert d.name_of(1) is None
    assert d.add("MQ").id == 3
    assert d.id_of("AF") == 2
    assert d.has_holes and len(d) == 3 and d.capacity == 4


def test_explicit_id_leaves_gap():
    d = Dictionary("field")
    d.add("PASS")
    d.add("GT", entry_id=4)
    assert d.capacity == 5
    assert d.entry(2) is None
    with pytest.raises(DuplicateNameError):
        d.add("XX", entry_id=4)
    assert d.add("YY", entry_id=2).id == 2


def test_copy_is_independent_and_keeps_ids():
    d = Dictionary.from_names("contig", ["1", "2"])
    d.remove("1")
    c = d.copy()
    c.add("3")
    assert c.id_of("2") == 1 and c.id_of("3") == 2
    assert "3" not in d


def test_explicit_id_cannot_land_on_removed_slot():
    d = Dictionary.from_names("field", ["PASS", "DP"])
    d.remove("DP")
    with pytest.raises(DuplicateNameError):
        d.add("XX", entry_id=1)
    assert "XX" not in d
    c = d.copy()
    with pytest.raises(DuplicateNameError):
        c.add("XX", entry_id=1)

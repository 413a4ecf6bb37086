import pytest

from sfoedit.common.editor import set_numeric_by_name, write_numeric
from sfoedit.common.exceptions import (
    EntryNotFoundError,
    NotANumericEntryError,
    UnsupportedDataFormatError,
    ValueOutOfRangeError,
)
from sfoedit.common.sfo import Number, Text, decode
from tests.helpers import RawEntry, build_sfo, int_entry, sample_param_sfo, scenario_a, scenario_b


def _diff(a: bytes, b: bytes) -> list:
    assert len(a) == len(b)
    return [i for i, (x, y) in enumerate(zip(a, b)) if x != y]


def test_scenario_c_text_entry_rejected():
    buf = bytearray(scenario_b())
    before = bytes(buf)
    header, table = decode(buf)
    with pytest.raises(NotANumericEntryError) as exc:
        write_numeric(buf, header, table.lookup("CATEGORY"), 1)
    assert exc.value.name == "CATEGORY"
    assert bytes(buf) == before


def test_scenario_d_write_then_decode():
    buf = bytearray(scenario_a())
    header, table = decode(buf)
    key_table_before = bytes(buf[header.key_table_start:header.data_table_start])

    write_numeric(buf, header, table.lookup("CATEGORY"), 0x00000002)

    header2, table2 = decode(buf)
    assert table2.lookup("CATEGORY").value == Number(2)
    assert bytes(buf[header2.key_table_start:header2.data_table_start]) == key_table_before
    assert buf[0x30:0x34] == b"\x02\x00\x00\x00"


def test_edit_changes_only_the_value_slot():
    original = sample_param_sfo()
    buf = bytearray(original)
    header, table = decode(buf)
    entry = table.lookup("ATTRIBUTE")

    write_numeric(buf, header, entry, 0xFFFFFFFF)

    start = header.data_table_start + entry.raw_index_entry.data_offset
    changed = _diff(original, bytes(buf))
    assert changed
    assert all(start <= i < start + 4 for i in changed)
    assert len(buf) == len(original)


def test_edit_leaves_other_entries_untouched():
    buf = bytearray(sample_param_sfo())
    _, before = decode(buf)
    set_numeric_by_name(buf, "RESOLUTION", 0x01)
    _, after = decode(buf)
    for old, new in zip(before, after):
        if old.name == "RESOLUTION":
            assert new.value == Number(1)
        else:
            assert new == old


def test_edit_is_idempotent():
    buf = bytearray(sample_param_sfo())
    set_numeric_by_name(buf, "PARENTAL_LEVEL", 0x0B)
    first = bytes(buf)
    set_numeric_by_name(buf, "PARENTAL_LEVEL", 0x0B)
    assert bytes(buf) == first


def test_decoded_entry_is_not_resynced():
    buf = bytearray(scenario_a())
    header, table = decode(buf)
    entry = table.lookup("CATEGORY")
    write_numeric(buf, header, entry, 7)
    assert entry.value == Number(1)


def test_set_numeric_by_name_returns_previous_entry():
    buf = bytearray(sample_param_sfo())
    before = set_numeric_by_name(buf, "PARENTAL_LEVEL", 3)
    assert before.name == "PARENTAL_LEVEL"
    assert before.value == Number(5)


def test_set_numeric_by_name_missing_key():
    buf = bytearray(sample_param_sfo())
    before = bytes(buf)
    with pytest.raises(EntryNotFoundError):
        set_numeric_by_name(buf, "NOPE", 1)
    assert bytes(buf) == before


def test_set_numeric_by_name_text_key():
    buf = bytearray(sample_param_sfo())
    with pytest.raises(NotANumericEntryError):
        set_numeric_by_name(buf, "TITLE", 1)
    assert decode(buf)[1].lookup("TITLE").value == Text("Test Game")


def test_corrupt_file_rejected_before_any_write():
    buf = bytearray(
        build_sfo([int_entry("ATTRIBUTE", 1), RawEntry("ODD", 0x0304, b"\x00" * 4, 4, 4)])
    )
    before = bytes(buf)
    with pytest.raises(UnsupportedDataFormatError):
        set_numeric_by_name(buf, "ATTRIBUTE", 2)
    assert bytes(buf) == before


@pytest.mark.parametrize("value", [-1, 0x1_0000_0000])
def test_value_out_of_range(value):
    buf = bytearray(scenario_a())
    header, table = decode(buf)
    with pytest.raises(ValueOutOfRangeError):
        write_numeric(buf, header, table.lookup("CATEGORY"), value)
    assert bytes(buf) == scenario_a()


def test_immutable_buffer_rejected():
    buf = scenario_a()
    header, table = decode(buf)
    with pytest.raises(TypeError):
        write_numeric(buf, header, table.lookup("CATEGORY"), 2)


@pytest.mark.parametrize("value", [True, 2.0, "0x2", None])
def test_non_int_value_rejected(value):
    buf = bytearray(scenario_a())
    header, table = decode(buf)
    with pytest.raises(TypeError):
        write_numeric(buf, header, table.lookup("CATEGORY"), value)
    assert bytes(buf) == scenario_a()

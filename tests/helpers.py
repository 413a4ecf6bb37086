import struct
from dataclasses import dataclass
from typing import List, Optional, Union

MAGIC = 0x46535000
VERSION = 0x00000101


@dataclass
class RawEntry:
    name: Union[str, bytes]
    data_fmt: int
    data: bytes
    data_len: Optional[int] = None
    data_max_len: Optional[int] = None


def int_entry(name, value: int) -> RawEntry:
    return RawEntry(name, 0x0404, struct.pack("<I", value), 4, 4)


def text_entry(name, text: str, max_len: Optional[int] = None, fmt: int = 0x0204) -> RawEntry:
    data = text.encode("utf-8") + b"\x00"
    return RawEntry(name, fmt, data, len(data), max_len or len(data))


def _align(buf: bytearray, n: int = 4) -> None:
    while len(buf) % n:
        buf.append(0)


def build_sfo(
    entries: List[RawEntry],
    magic: int = MAGIC,
    version: int = VERSION,
    table_entries: Optional[int] = None,
) -> bytes:
    """Lay out header, index table, key table and data table back to back."""
    keys = bytearray()
    key_offsets = []
    for e in entries:
        key_offsets.append(len(keys))
        name = e.name.encode("utf-8") if isinstance(e.name, str) else e.name
        keys += name + b"\x00"
    _align(keys)

    data = bytearray()
    data_offsets = []
    for e in entries:
        data_offsets.append(len(data))
        slot = e.data_max_len if e.data_max_len is not None else len(e.data)
        data += e.data.ljust(slot, b"\x00")
        _align(data)

    key_table_start = 0x14 + 0x10 * len(entries)
    data_table_start = key_table_start + len(keys)

    out = bytearray(
        struct.pack(
            "<IIIII",
            magic,
            version,
            key_table_start,
            data_table_start,
            len(entries) if table_entries is None else table_entries,
        )
    )
    for e, k_off, d_off in zip(entries, key_offsets, data_offsets):
        out += struct.pack(
            "<HHIII",
            k_off,
            e.data_fmt,
            len(e.data) if e.data_len is None else e.data_len,
            e.data_max_len if e.data_max_len is not None else len(e.data),
            d_off,
        )
    out += keys
    out += data
    return bytes(out)


def scenario_a() -> bytes:
    """One int32 entry CATEGORY = 1; keys at 0x24, data at 0x30."""
    return build_sfo([int_entry("CATEGORY", 1)])


def scenario_b() -> bytes:
    """One utf8 entry CATEGORY = "test"."""
    return build_sfo([text_entry("CATEGORY", "test")])


def sample_param_sfo() -> bytes:
    return build_sfo(
        [
            text_entry("APP_VER", "01.00", max_len=8),
            int_entry("ATTRIBUTE", 0x00000020),
            text_entry("CATEGORY", "gd", max_len=4),
            int_entry("PARENTAL_LEVEL", 5),
            text_entry("TITLE", "Test Game", max_len=128),
            text_entry("TITLE_ID", "ABCD12345", max_len=16),
            int_entry("RESOLUTION", 0x3F),
        ]
    )

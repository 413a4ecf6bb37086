"""PARAM.SFO decoding.

Layout (all little-endian)::

    0x00  header      magic, version, key_table_start, data_table_start, table_entries
    0x14  index table table_entries * 16 bytes
    ...   key table   NUL-terminated UTF-8 names, addressed by key_offset
    ...   data table  values, addressed by data_offset

Decoding is a pure pass over the buffer: nothing here mutates it, so the
identity encoding of a decoded file is simply ``bytes(buf)``. Every bounds or
format violation raises a typed :class:`~sfoedit.common.exceptions.SfoError`.
"""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional, Tuple, Union

from sfoedit.config import (
    FMT_INT32,
    FMT_UTF8,
    FMT_UTF8_SPECIAL,
    HEADER_SIZE,
    INDEX_ENTRY_SIZE,
    SFO_MAGIC_U32,
)

from .exceptions import (
    BufferTooShortError,
    CorruptEntryError,
    EntryNotFoundError,
    InvalidKeyEncodingError,
    InvalidValueEncodingError,
    TruncatedIndexTableError,
    UnsupportedDataFormatError,
    UnterminatedKeyError,
    ZeroLengthTextValueError,
)

logger = logging.getLogger(__name__)

_HEADER_FMT = struct.Struct("<IIIII")
_INDEX_FMT = struct.Struct("<HHIII")
_U32 = struct.Struct("<I")

Buffer = Union[bytes, bytearray, memoryview]


@dataclass(frozen=True)
class Header:
    magic: int
    version: int
    key_table_start: int
    data_table_start: int
    table_entries: int

    @property
    def has_valid_magic(self) -> bool:
        return self.magic == SFO_MAGIC_U32


@dataclass(frozen=True)
class IndexEntry:
    key_offset: int
    data_fmt: int
    data_len: int
    data_max_len: int
    data_offset: int


@dataclass(frozen=True)
class Text:
    text: str


@dataclass(frozen=True)
class Number:
    value: int


EntryValue = Union[Text, Number]


@dataclass(frozen=True)
class Entry:
    name: str
    ordinal: int
    raw_index_entry: IndexEntry
    value: EntryValue

    @property
    def is_numeric(self) -> bool:
        return isinstance(self.value, Number)

    @property
    def python_value(self) -> Union[str, int]:
        if isinstance(self.value, Number):
            return self.value.value
        return self.value.text


@dataclass
class SfoTable:
    """Decoded entries in table order plus a name lookup.

    ``by_name`` is folded over ``entries`` so a duplicated name resolves to
    the entry with the highest ordinal; every entry stays reachable through
    ``entries``.
    """

    entries: Tuple[Entry, ...] = ()
    by_name: Dict[str, Entry] = field(default_factory=dict)

    @classmethod
    def from_entries(cls, entries) -> "SfoTable":
        entries = tuple(entries)
        by_name: Dict[str, Entry] = {}
        for entry in entries:
            if entry.name in by_name:
                logger.debug(
                    "Duplicate key %s at ordinal %d replaces ordinal %d",
                    entry.name,
                    entry.ordinal,
                    by_name[entry.name].ordinal,
                )
            by_name[entry.name] = entry
        return cls(entries=entries, by_name=by_name)

    def lookup(self, key: str) -> Entry:
        try:
            return self.by_name[key]
        except KeyError:
            raise EntryNotFoundError(key) from None

    def get(self, key: str, default=None) -> Optional[Entry]:
        return self.by_name.get(key, default)

    def __contains__(self, key: object) -> bool:
        return key in self.by_name

    def __iter__(self) -> Iterator[Entry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


def decode_header(buf: Buffer) -> Header:
    """Read the fixed 20-byte header. The magic is not checked here."""
    if len(buf) < HEADER_SIZE:
        raise BufferTooShortError(HEADER_SIZE, len(buf))
    return Header(*_HEADER_FMT.unpack_from(buf, 0))


def decode_index_entry(buf: Buffer, ordinal: int) -> IndexEntry:
    offset = HEADER_SIZE + ordinal * INDEX_ENTRY_SIZE
    if offset + INDEX_ENTRY_SIZE > len(buf):
        raise TruncatedIndexTableError(ordinal, offset, len(buf))
    return IndexEntry(*_INDEX_FMT.unpack_from(buf, offset))


def read_key(buf: Buffer, header: Header, index_entry: IndexEntry, ordinal: int = 0) -> str:
    start = header.key_table_start + index_entry.key_offset
    if start >= len(buf):
        raise UnterminatedKeyError(ordinal, start)
    data = buf if isinstance(buf, (bytes, bytearray)) else bytes(buf)
    end = data.find(b"\x00", start)
    if end == -1:
        raise UnterminatedKeyError(ordinal, start)
    try:
        return data[start:end].decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidKeyEncodingError(ordinal, start, e.reason) from e


def value_offset(header: Header, index_entry: IndexEntry) -> int:
    """Absolute offset of an entry's value bytes."""
    return header.data_table_start + index_entry.data_offset


def read_value(buf: Buffer, header: Header, index_entry: IndexEntry, name: str = "") -> EntryValue:
    offset = value_offset(header, index_entry)
    fmt = index_entry.data_fmt

    if fmt == FMT_INT32:
        if offset + 4 > len(buf):
            raise CorruptEntryError(
                name,
                "valor numérico fora do buffer",
                {"offset": f"0x{offset:x}", "buffer_len": len(buf)},
            )
        return Number(_U32.unpack_from(buf, offset)[0])

    if fmt in (FMT_UTF8_SPECIAL, FMT_UTF8):
        if index_entry.data_len == 0:
            raise ZeroLengthTextValueError(name, fmt)
        # data_len counts the trailing NUL, which is not part of the text
        end = offset + index_entry.data_len - 1
        if end > len(buf):
            raise CorruptEntryError(
                name,
                "valor de texto fora do buffer",
                {"offset": f"0x{offset:x}", "data_len": index_entry.data_len, "buffer_len": len(buf)},
            )
        try:
            return Text(bytes(buf[offset:end]).decode("utf-8"))
        except UnicodeDecodeError as e:
            raise InvalidValueEncodingError(name, offset, e.reason) from e

    raise UnsupportedDataFormatError(name, fmt)


def decode_entry(buf: Buffer, header: Header, ordinal: int) -> Entry:
    index_entry = decode_index_entry(buf, ordinal)
    name = read_key(buf, header, index_entry, ordinal)
    if index_entry.data_len > index_entry.data_max_len:
        raise CorruptEntryError(
            name,
            "data_len excede a capacidade declarada",
            {"data_len": index_entry.data_len, "data_max_len": index_entry.data_max_len},
        )
    value = read_value(buf, header, index_entry, name)
    return Entry(name=name, ordinal=ordinal, raw_index_entry=index_entry, value=value)


def decode_entries(buf: Buffer, header: Header) -> SfoTable:
    """Decode every index entry in ``[0, table_entries)``."""
    table = SfoTable.from_entries(
        decode_entry(buf, header, i) for i in range(header.table_entries)
    )
    logger.debug("Decoded %d SFO entries", len(table))
    return table


def decode(buf: Buffer) -> Tuple[Header, SfoTable]:
    header = decode_header(buf)
    return header, decode_entries(buf, header)


class SfoParser:
    """Eagerly decoded PARAM.SFO with name based access.

    Keeps its own mutable copy of the input so numeric edits can be applied
    and re-decoded; ``to_bytes()`` returns the current contents.
    """

    def __init__(self, data: Buffer):
        self.data = bytearray(data)
        self.header: Header
        self.table: SfoTable
        self.entries: Dict[str, Union[str, int]] = {}
        self._parse()

    def _parse(self):
        self.header, self.table = decode(self.data)
        self.entries = {name: e.python_value for name, e in self.table.by_name.items()}

    def get(self, key: str, default=None):
        return self.entries.get(key, default)

    def lookup(self, key: str) -> Entry:
        return self.table.lookup(key)

    def set_number(self, key: str, value: int) -> Entry:
        """Overwrite a numeric entry in place and refresh the decoded view.

        Returns the entry as it was before the edit.
        """
        from .editor import write_numeric

        entry = self.table.lookup(key)
        write_numeric(self.data, self.header, entry, value)
        self._parse()
        return entry

    def to_bytes(self) -> bytes:
        return bytes(self.data)

    def __contains__(self, key: object) -> bool:
        return key in self.table

    def __iter__(self) -> Iterator[Entry]:
        return iter(self.table)

    def __len__(self) -> int:
        return len(self.table)

from __future__ import annotations

from typing import List, Tuple

from sfoedit.config import FMT_NAMES

from .sfo import Entry, EntryValue, Header, Number

_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\0": "\\0",
}


def quote_text(text: str) -> str:
    """Double-quote a string, escaping quotes, backslashes and control chars.

    Examples:
    - 'test' -> '"test"'
    - 'a"b' -> '"a\\"b"'
    - '1\\n2' -> '"1\\\\n2"'
    """
    out = []
    for ch in text:
        if ch in _ESCAPES:
            out.append(_ESCAPES[ch])
        elif ord(ch) < 0x20 or ord(ch) == 0x7F:
            out.append(f"\\u{{{ord(ch):x}}}")
        else:
            out.append(ch)
    return '"' + "".join(out) + '"'


def format_value(value: EntryValue) -> str:
    if isinstance(value, Number):
        return f"0x{value.value:08x}"
    return quote_text(value.text)


def format_fmt(data_fmt: int) -> str:
    name = FMT_NAMES.get(data_fmt)
    if name:
        return name
    return f"0x{data_fmt:04x}"


def format_header(header: Header) -> List[Tuple[str, str]]:
    return [
        ("magic", f"0x{header.magic:08x}"),
        ("version", f"0x{header.version:08x}"),
        ("key_table_start", f"0x{header.key_table_start:x}"),
        ("data_table_start", f"0x{header.data_table_start:x}"),
        ("table_entries", str(header.table_entries)),
    ]


def format_entry_row(entry: Entry) -> Tuple[str, str, str, str, str]:
    """Columns shown by ``sfoedit read``: ordinal, name, format, len/max, value."""
    raw = entry.raw_index_entry
    return (
        str(entry.ordinal),
        entry.name,
        format_fmt(raw.data_fmt),
        f"{raw.data_len}/{raw.data_max_len}",
        format_value(entry.value),
    )


def entry_to_dict(entry: Entry) -> dict:
    raw = entry.raw_index_entry
    return {
        "ordinal": entry.ordinal,
        "name": entry.name,
        "type": "number" if entry.is_numeric else "text",
        "value": entry.python_value,
        "data_fmt": raw.data_fmt,
        "data_len": raw.data_len,
        "data_max_len": raw.data_max_len,
        "data_offset": raw.data_offset,
        "key_offset": raw.key_offset,
    }

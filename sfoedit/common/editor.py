"""In-place editing of numeric PARAM.SFO entries.

Only the 4-byte slot of an ``int32`` entry is ever rewritten. Table layout,
file length and every index-table field stay untouched.
"""

from __future__ import annotations

import logging
import struct

from sfoedit.config import U32_MAX

from .exceptions import NotANumericEntryError, ValueOutOfRangeError
from .sfo import Entry, Header, Number, decode, value_offset

logger = logging.getLogger(__name__)

_U32 = struct.Struct("<I")


def write_numeric(buf: bytearray, header: Header, entry: Entry, new_value: int) -> None:
    """Overwrite the value of ``entry`` inside ``buf`` with ``new_value``.

    Raises:
        NotANumericEntryError: the entry holds text
        ValueOutOfRangeError: ``new_value`` does not fit in an unsigned 32-bit slot
        TypeError: ``new_value`` is not an int, or ``buf`` is not mutable
    """
    if not isinstance(entry.value, Number):
        raise NotANumericEntryError(entry.name)
    if isinstance(new_value, bool) or not isinstance(new_value, int):
        raise TypeError(f"write_numeric needs an int value, got {type(new_value).__name__}")
    if not 0 <= new_value <= U32_MAX:
        raise ValueOutOfRangeError(new_value)
    if not isinstance(buf, bytearray):
        raise TypeError(f"write_numeric needs a bytearray, got {type(buf).__name__}")

    offset = value_offset(header, entry.raw_index_entry)
    _U32.pack_into(buf, offset, new_value)
    logger.info(
        "Set %s: 0x%08x -> 0x%08x (offset 0x%x)",
        entry.name,
        entry.value.value,
        new_value,
        offset,
    )


def set_numeric_by_name(buf: bytearray, key: str, new_value: int) -> Entry:
    """Decode ``buf``, resolve ``key`` and overwrite its numeric value.

    The whole buffer is decoded first, so a corrupt file is rejected before
    any byte changes. Returns the entry as decoded before the edit.
    """
    header, table = decode(buf)
    entry = table.lookup(key)
    write_numeric(buf, header, entry, new_value)
    return entry

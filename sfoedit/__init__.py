"""sfoedit package root.

Decode PARAM.SFO metadata files and patch their numeric fields in place.
Keep this file small so that `import sfoedit` stays lightweight.
"""

from .common.sfo import Entry, Header, IndexEntry, Number, SfoParser, SfoTable, Text, decode

__version__ = "0.1.0"

__all__ = [
    "Entry",
    "Header",
    "IndexEntry",
    "Number",
    "SfoParser",
    "SfoTable",
    "Text",
    "decode",
]

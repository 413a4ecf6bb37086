"""Configuration and constants for the sfoedit package."""
from __future__ import annotations

from typing import Dict

# Default file the tool operates on when no path is given
DEFAULT_SFO_PATH = "./PARAM.SFO"

# Environment variable overriding the log output format (auto | json | human)
LOG_FORMAT_ENV = "SFOEDIT_LOG_FORMAT"

SFO_MAGIC = b"\x00PSF"
SFO_MAGIC_U32 = int.from_bytes(SFO_MAGIC, "little")  # 0x46535000

HEADER_SIZE = 0x14
INDEX_ENTRY_SIZE = 0x10

# data_fmt tags
FMT_UTF8_SPECIAL = 0x0004
FMT_UTF8 = 0x0204
FMT_INT32 = 0x0404

FMT_NAMES: Dict[int, str] = {
    FMT_UTF8_SPECIAL: "utf8-s",
    FMT_UTF8: "utf8",
    FMT_INT32: "int32",
}

U32_MAX = 0xFFFFFFFF

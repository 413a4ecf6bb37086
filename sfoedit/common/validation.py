"""Validação da entrada do utilizador.

Erros aqui são sempre de invocação (``UserInputError``) ou de I/O, nunca
de formato: indicam um pedido mal formado e não um ficheiro corrompido.
"""

from __future__ import annotations

import re
from pathlib import Path

from sfoedit.config import SFO_MAGIC_U32

from .exceptions import FileReadError, InvalidHexLiteralError, InvalidMagicError
from .sfo import Header


_HEX_U32_RE = re.compile(r"^0[xX]([0-9a-fA-F]{1,8})$")


# ============================================================================
# PATH VALIDATION
# ============================================================================

def validate_path_exists(path: Path | str, must_be_file: bool = True) -> Path:
    """Valida que um caminho existe.

    Args:
        path: Caminho a validar
        must_be_file: Se True, valida que é um ficheiro

    Returns:
        Path validado

    Raises:
        FileReadError: Se o caminho não existe ou não é um ficheiro
    """
    p = Path(path)

    if not p.exists():
        raise FileReadError(str(p), f"Ficheiro não encontrado: {p}")

    if must_be_file and not p.is_file():
        raise FileReadError(str(p), f"Não é um ficheiro: {p}")

    return p


# ============================================================================
# NUMERIC VALIDATION
# ============================================================================

def parse_hex_u32(text: str) -> int:
    """Converte um literal ``0x``-prefixado num inteiro de 32 bits sem sinal.

    Args:
        text: Literal, ex. ``0x00000002``

    Returns:
        Valor inteiro

    Raises:
        InvalidHexLiteralError: Sem prefixo, dígitos inválidos ou mais de 8 dígitos
    """
    value = text.strip()
    if not value.lower().startswith("0x"):
        raise InvalidHexLiteralError(text, "falta o prefixo 0x")
    match = _HEX_U32_RE.match(value)
    if not match:
        raise InvalidHexLiteralError(text, "esperados 1 a 8 dígitos hexadecimais")
    return int(match.group(1), 16)


# ============================================================================
# FORMAT VALIDATION
# ============================================================================

def validate_magic(header: Header) -> Header:
    """Verificação opcional do magic, usada apenas em modo estrito."""
    if not header.has_valid_magic:
        raise InvalidMagicError(header.magic, SFO_MAGIC_U32)
    return header

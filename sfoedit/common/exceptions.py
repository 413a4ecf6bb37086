"""Hierarquia de exceções customizadas do sfoedit.

Todas as falhas de descodificação e edição de um PARAM.SFO são reportadas
através desta hierarquia, agrupada por categoria: erros estruturais (os
metadados do próprio ficheiro são inconsistentes), erros de codificação,
erros semânticos (funcionalidade não suportada), erros de entrada do
utilizador e erros de I/O.
"""

from __future__ import annotations
from typing import Optional, Any


# ============================================================================
# BASE EXCEPTIONS
# ============================================================================

class SfoError(Exception):
    """Exceção base para todos os erros do sfoedit.

    Os detalhes (offset, tag, chave) são anexados à mensagem para que o
    erro seja diagnosticável sem voltar a correr em modo debug.
    """

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


def _hex(value: int) -> str:
    return f"0x{value:x}"


# ============================================================================
# STRUCTURAL ERRORS
# ============================================================================

class StructuralError(SfoError):
    """Os metadados do ficheiro são inconsistentes entre si."""
    pass


class BufferTooShortError(StructuralError):
    """O buffer é menor do que o cabeçalho fixo."""

    def __init__(self, required: int, available: int):
        super().__init__(
            f"Buffer demasiado curto: necessário {required} bytes, disponível {available}",
            {"required": required, "available": available},
        )
        self.required = required
        self.available = available


class TruncatedIndexTableError(StructuralError):
    """A tabela de índices termina antes de todas as entradas declaradas."""

    def __init__(self, ordinal: int, offset: int, buffer_len: int):
        super().__init__(
            f"Tabela de índices truncada na entrada {ordinal}",
            {"ordinal": ordinal, "offset": _hex(offset), "buffer_len": buffer_len},
        )
        self.ordinal = ordinal
        self.offset = offset


class CorruptEntryError(StructuralError):
    """Entrada com metadados impossíveis (data_len > data_max_len, fora do buffer)."""

    def __init__(self, name: str, reason: str, details: Optional[dict] = None):
        details = dict(details or {})
        details["key"] = name
        super().__init__(f"Entrada corrompida: {reason}", details)
        self.name = name
        self.reason = reason


class ZeroLengthTextValueError(StructuralError):
    """Valor de texto com data_len 0 (falta o terminador NUL obrigatório)."""

    def __init__(self, name: str, data_fmt: int):
        super().__init__(
            f"Valor de texto com comprimento zero: {name}",
            {"key": name, "data_fmt": f"0x{data_fmt:04x}"},
        )
        self.name = name


# ============================================================================
# ENCODING ERRORS
# ============================================================================

class EncodingError(SfoError):
    """Bytes declarados como texto não são UTF-8 válido ou não terminam."""
    pass


class InvalidKeyEncodingError(EncodingError):
    def __init__(self, ordinal: int, offset: int, reason: str = ""):
        msg = f"Nome da chave {ordinal} não é UTF-8 válido"
        if reason:
            msg += f": {reason}"
        super().__init__(msg, {"ordinal": ordinal, "offset": _hex(offset)})
        self.ordinal = ordinal
        self.offset = offset


class InvalidValueEncodingError(EncodingError):
    def __init__(self, name: str, offset: int, reason: str = ""):
        msg = f"Valor de {name} não é UTF-8 válido"
        if reason:
            msg += f": {reason}"
        super().__init__(msg, {"key": name, "offset": _hex(offset)})
        self.name = name
        self.offset = offset


class UnterminatedKeyError(EncodingError):
    """Nenhum byte NUL encontrado antes do fim do buffer."""

    def __init__(self, ordinal: int, offset: int):
        super().__init__(
            f"Nome da chave {ordinal} sem terminador NUL",
            {"ordinal": ordinal, "offset": _hex(offset)},
        )
        self.ordinal = ordinal
        self.offset = offset


# ============================================================================
# SEMANTIC ERRORS
# ============================================================================

class SemanticError(SfoError):
    """O ficheiro ou o pedido usa algo que este modelo não implementa."""
    pass


class UnsupportedDataFormatError(SemanticError):
    def __init__(self, name: str, tag: int):
        super().__init__(
            f"Formato de dados não suportado em {name}",
            {"key": name, "data_fmt": f"0x{tag:04x}"},
        )
        self.name = name
        self.tag = tag


class NotANumericEntryError(SemanticError):
    """Só entradas numéricas podem ser reescritas no lugar."""

    def __init__(self, name: str):
        super().__init__(f"A entrada {name} não é numérica", {"key": name})
        self.name = name


class InvalidMagicError(SemanticError):
    """Magic inesperado (apenas levantado por chamadores em modo estrito)."""

    def __init__(self, magic: int, expected: int):
        super().__init__(
            "Magic inválido",
            {"magic": f"0x{magic:08x}", "expected": f"0x{expected:08x}"},
        )
        self.magic = magic


# ============================================================================
# USER INPUT ERRORS
# ============================================================================

class UserInputError(SfoError):
    """Invocação inválida; o ficheiro em si não está em causa."""
    pass


class EntryNotFoundError(UserInputError):
    def __init__(self, key: str):
        super().__init__(f"Entrada não encontrada: {key}", {"key": key})
        self.key = key


class InvalidHexLiteralError(UserInputError):
    def __init__(self, text: str, reason: str = ""):
        msg = f"Literal hexadecimal inválido: {text!r}"
        if reason:
            msg += f" - {reason}"
        super().__init__(msg, {"value": text})
        self.text = text


class ValueOutOfRangeError(UserInputError):
    def __init__(self, value: int):
        super().__init__(
            f"Valor fora do intervalo de 32 bits sem sinal: {value}",
            {"value": value},
        )
        self.value = value


# ============================================================================
# FILE OPERATION ERRORS
# ============================================================================

class IoError(SfoError):
    """Erro base para operações com ficheiros."""

    def __init__(self, path: str, message: str, details: Optional[dict] = None):
        details = details or {}
        details["path"] = path
        super().__init__(message, details)
        self.path = path


class FileReadError(IoError):
    """Erro ao ler ficheiro."""
    pass


class FileWriteError(IoError):
    """Erro ao escrever ficheiro."""
    pass


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def format_exception_chain(exc: Exception, include_traceback: bool = False) -> str:
    """Formata uma exceção com toda a cadeia de causas.

    Args:
        exc: Exceção a formatar
        include_traceback: Se deve incluir o traceback completo

    Returns:
        String formatada com a exceção e suas causas
    """
    import traceback

    if include_traceback:
        return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))

    messages = []
    current = exc
    while current is not None:
        if isinstance(current, SfoError):
            messages.append(str(current))
        else:
            messages.append(f"{type(current).__name__}: {current}")
        current = getattr(current, "__cause__", None)

    return " → ".join(messages)

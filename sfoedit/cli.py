"""
sfoedit CLI - inspect PARAM.SFO files and patch numeric fields in place.
"""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Optional, Tuple

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .common.editor import write_numeric
from .common.exceptions import IoError, SfoError, UserInputError, format_exception_chain
from .common.fileops import read_sfo_bytes, write_sfo_bytes
from .common.formatting import entry_to_dict, format_entry_row, format_header, format_value
from .common.sfo import Header, SfoTable, decode, decode_header
from .common.validation import parse_hex_u32, validate_magic, validate_path_exists
from .config import DEFAULT_SFO_PATH
from .logging_cfg import configure_logging, log_call

app = typer.Typer(
    help="sfoedit: leitura e edição de ficheiros PARAM.SFO.",
    rich_markup_mode="rich",
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)

EXIT_FORMAT_ERROR = 1
EXIT_USER_ERROR = 2
EXIT_IO_ERROR = 3

HELP_SFO_PATH = "Caminho do ficheiro PARAM.SFO."
HELP_STRICT = "Rejeita ficheiros cujo magic não seja \\0PSF."


@app.callback()
def global_options(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Ativa logs de debug."),
    log_format: Optional[str] = typer.Option(
        None, "--log-format", help="Formato dos logs: auto, json ou human."
    ),
):
    configure_logging(log_format, level=logging.DEBUG if verbose else logging.WARNING)


def _exit_code_for(exc: SfoError) -> int:
    if isinstance(exc, UserInputError):
        return EXIT_USER_ERROR
    if isinstance(exc, IoError):
        return EXIT_IO_ERROR
    return EXIT_FORMAT_ERROR


@contextmanager
def _handle_errors():
    try:
        yield
    except SfoError as e:
        logger.debug("Command failed: %s", format_exception_chain(e))
        err_console.print(f"[bold red]✘[/bold red] {escape(str(e))}")
        raise typer.Exit(_exit_code_for(e))


@log_call()
def _load(path: Path, strict: bool) -> Tuple[bytearray, Header, SfoTable]:
    path = validate_path_exists(path)
    buf = read_sfo_bytes(path)
    header, table = decode(buf)
    if strict:
        validate_magic(header)
    return buf, header, table


def _header_table(header: Header) -> Table:
    table = Table(show_header=True, header_style="bold cyan", title="Header")
    table.add_column("Campo", style="dim")
    table.add_column("Valor", justify="right")
    for name, value in format_header(header):
        table.add_row(name, value)
    return table


def _entries_table(sfo: SfoTable) -> Table:
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Chave", style="bold")
    table.add_column("Formato")
    table.add_column("Len/Max", justify="right")
    table.add_column("Valor")
    for entry in sfo:
        table.add_row(*(escape(col) for col in format_entry_row(entry)))
    return table


@app.command("read")
def cmd_read(
    path: Path = typer.Argument(Path(DEFAULT_SFO_PATH), help=HELP_SFO_PATH),
    as_json: bool = typer.Option(False, "--json", help="Emite as entradas em JSON."),
    show_header: bool = typer.Option(False, "--header", help="Mostra também o cabeçalho."),
    strict: bool = typer.Option(False, "--strict", help=HELP_STRICT),
):
    """
    [bold green]Listar entradas[/bold green]

    Descodifica o ficheiro e lista todas as entradas pela ordem da tabela
    de índices, com o nome e o valor formatado.
    """
    with _handle_errors():
        _, header, sfo = _load(path, strict)

    if as_json:
        payload = [entry_to_dict(e) for e in sfo]
        if show_header:
            payload = {
                "header": {k: getattr(header, k) for k, _ in format_header(header)},
                "entries": payload,
            }
        typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))
        return

    if show_header:
        console.print(_header_table(header))
    console.print(_entries_table(sfo))


@app.command("header")
def cmd_header(
    path: Path = typer.Argument(Path(DEFAULT_SFO_PATH), help=HELP_SFO_PATH),
):
    """
    [bold blue]Mostrar cabeçalho[/bold blue]

    Lê apenas os 20 bytes do cabeçalho, sem descodificar as entradas.
    """
    with _handle_errors():
        header = decode_header(read_sfo_bytes(validate_path_exists(path)))
    console.print(_header_table(header))


@app.command("write")
def cmd_write(
    key: str = typer.Argument(..., help="Nome da entrada numérica, ex. PARENTAL_LEVEL."),
    value: str = typer.Argument(..., help="Novo valor em hexadecimal, ex. 0x00000002."),
    path: Path = typer.Option(Path(DEFAULT_SFO_PATH), "--path", "-p", help=HELP_SFO_PATH),
    dry_run: bool = typer.Option(False, "--dry-run", help="Mostra a alteração sem gravar."),
    backup: bool = typer.Option(False, "--backup", help="Guarda uma cópia .bak antes de gravar."),
    strict: bool = typer.Option(False, "--strict", help=HELP_STRICT),
):
    """
    [bold yellow]Alterar entrada numérica[/bold yellow]

    Reescreve no lugar os 4 bytes do valor de uma entrada int32. O tamanho
    do ficheiro e as tabelas não mudam. Nada é gravado se ocorrer um erro.
    """
    with _handle_errors():
        new_value = parse_hex_u32(value)
        buf, header, sfo = _load(path, strict)
        before = sfo.lookup(key)
        write_numeric(buf, header, before, new_value)
        if not dry_run:
            write_sfo_bytes(path, bytes(buf), backup=backup)

    prefix = escape("[DRY-RUN] ") if dry_run else ""
    console.print(
        f"{prefix}[bold]{escape(key)}[/bold]: {format_value(before.value)} → 0x{new_value:08x}"
    )


def main():
    app()


if __name__ == "__main__":
    main()

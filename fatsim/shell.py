"""Interactive command shell for the simulated FAT file system."""

from __future__ import annotations

import codecs
import io
import os
import sys
from typing import Callable, Optional

from .disk import Disk, DiskError
from .fat import FatError, FileSystem

CHUNK_SIZE = 16384
PROMPT = " sys> "

HELP_TEXT = (
    "Comandos:\n"
    "    formatar\n"
    "    montar\n"
    "    depurar\n"
    "    criar\t<arquivo>\n"
    "    deletar <arquivo>\n"
    "    ver     <arquivo>\n"
    "    medir   <arquivo>\n"
    "    importar <nome no linux> <nome fat-sys>\n"
    "    exportar <nome fat-sys> <nome no linux>\n"
    "    help\n"
    "    sair"
)


def _say(stdout, text: str) -> None:
    print(text, file=stdout)


def copy_in(fs, os_path, name, stdout=None) -> bool:
    """Copy the host file ``os_path`` into the file system file ``name``.

    Returns False only when the host file cannot be opened.
    """
    stdout = stdout if stdout is not None else sys.stdout
    try:
        source = open(os_path, "rb")
    except OSError as exc:
        _say(stdout, f"falha ao acessar {os_path}: {exc.strerror}")
        return False

    offset = 0
    with source:
        while chunk := source.read(CHUNK_SIZE):
            try:
                written = fs.write(name, chunk, offset)
            except FatError as exc:
                _say(stdout, f"ERRO: fat_write falhou: {exc}")
                break
            offset += written
            if written != len(chunk):
                _say(
                    stdout,
                    f"ATENCAO: fat_write escreveu apenas {written} bytes, "
                    f"em vez de {len(chunk)} bytes",
                )
                break

    _say(stdout, f"copia de {offset} bytes")
    return True


def _pump(fs, name, stream, stdout) -> int:
    decoder = None
    if isinstance(stream, io.TextIOBase):
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    offset = 0
    while True:
        try:
            data = fs.read(name, CHUNK_SIZE, offset)
        except FatError as exc:
            _say(stdout, str(exc))
            break
        if not data:
            break
        stream.write(decoder.decode(data) if decoder else data)
        offset += len(data)
    if decoder:
        stream.write(decoder.decode(b"", final=True))
    stream.flush()
    return offset


def copy_out(fs, name, stream, stdout=None) -> bool:
    """Copy the file system file ``name`` to ``stream``.

    ``stream`` is either an open stream (text or binary) or a host path to
    create. Returns False only when the host path cannot be opened.
    """
    stdout = stdout if stdout is not None else sys.stdout
    if isinstance(stream, (str, bytes, os.PathLike)):
        try:
            target = open(stream, "wb")
        except OSError as exc:
            _say(stdout, f"nao deu para abrir {os.fsdecode(stream)}: {exc.strerror}")
            return False
        with target:
            copied = _pump(fs, name, target, stdout)
    else:
        copied = _pump(fs, name, stream, stdout)
    _say(stdout, f"copia de {copied} bytes")
    return True


class Shell:
    """Reads commands and applies them to a file system."""

    def __init__(self, fs, stdout=None):
        self.fs = fs
        self.stdout = stdout if stdout is not None else sys.stdout
        self._commands: dict[str, tuple[int, str, Callable[..., None]]] = {
            "formatar": (1, "uso: formatar", self._format),
            "montar": (1, "uso: montar", self._mount),
            "depurar": (1, "uso: depurar", self._debug),
            "medir": (2, "uso: medir <arquivo>", self._getsize),
            "criar": (2, "uso: criar <arquivo>", self._create),
            "deletar": (2, "uso: deletar <arquivo>", self._delete),
            "ver": (2, "uso: ver <nome>", self._show),
            "importar": (
                3,
                "uso: importar <nome no linux> <nome fat-sys>",
                self._import,
            ),
            "exportar": (
                3,
                "uso: exportar <nome fat-sys> <nome linux>",
                self._export,
            ),
            "help": (1, "uso: help", self._help),
        }

    def _say(self, text: str) -> None:
        _say(self.stdout, text)

    def _attempt(self, action: Callable[[], object], ok: str, failed: str) -> None:
        try:
            action()
        except FatError as exc:
            self._say(str(exc))
            self._say(failed)
        else:
            self._say(ok)

    def _format(self) -> None:
        self._attempt(self.fs.format, "formatou", "falhou na formatacao!")

    def _mount(self) -> None:
        self._attempt(self.fs.mount, "montagem ok", "falha de montagem!")

    def _debug(self) -> None:
        try:
            self.stdout.write(self.fs.debug())
        except FatError as exc:
            self._say(str(exc))

    def _getsize(self, name: str) -> None:
        try:
            size = self.fs.getsize(name)
        except FatError as exc:
            self._say(str(exc))
            self._say("falha na medida!")
        else:
            self._say(f"o arquivo {name} mede {size}")

    def _create(self, name: str) -> None:
        self._attempt(
            lambda: self.fs.create(name),
            f"novo arquivo {name}",
            "falha ao criar arquivo!",
        )

    def _delete(self, name: str) -> None:
        self._attempt(
            lambda: self.fs.delete(name),
            f"arquivo {name} deletado",
            "falha na delecao!",
        )

    def _show(self, name: str) -> None:
        if not copy_out(self.fs, name, self.stdout, self.stdout):
            self._say("falha em ver arquivo!")

    def _import(self, os_path: str, name: str) -> None:
        if copy_in(self.fs, os_path, name, self.stdout):
            self._say(f"arquivo linux {os_path} copiado para {name}")
        else:
            self._say("falha ao copiar!")

    def _export(self, name: str, os_path: str) -> None:
        if copy_out(self.fs, name, os_path, self.stdout):
            self._say(f"fat-sys {name} copiado para arquivo {os_path}")
        else:
            self._say("falha ao copiar!")

    def _help(self) -> None:
        self._say(HELP_TEXT)

    def execute(self, line) -> bool:
        """Run one command line; return False when the shell should stop."""
        tokens = line.split()
        if not tokens:
            return True
        args = tokens[:3]
        command = args[0]
        if command == "sair":
            return False
        spec = self._commands.get(command)
        if spec is None:
            self._say(f"comando desconhecido: {command}")
            self._say("digite 'help'.")
            return True
        arity, usage, handler = spec
        if len(args) != arity:
            self._say(usage)
        else:
            handler(*args[1:])
        return True

    def run(self, stdin) -> None:
        """Prompt for and execute commands until ``sair`` or end of input."""
        while True:
            self.stdout.write(PROMPT)
            self.stdout.flush()
            line = stdin.readline()
            if not line:
                break
            if not self.execute(line):
                break


def main(argv=None) -> int:
    """Open a simulated disk and run the shell on standard input."""
    args = sys.argv[1:] if argv is None else list(argv)
    stdout = sys.stdout
    if len(args) != 2:
        _say(stdout, "uso: fatsim <arquivo> <quantosblocos>")
        return 1
    path, count = args
    try:
        number_blocks = int(count)
    except ValueError:
        _say(stdout, "uso: fatsim <arquivo> <quantosblocos>")
        return 1

    try:
        disk = Disk(path, number_blocks)
    except (OSError, ValueError) as exc:
        reason: Optional[str] = getattr(exc, "strerror", None) or str(exc)
        _say(stdout, f"falha {path}: {reason}")
        return 1

    _say(stdout, f"simulacao de disco {path} com {disk.number_blocks} blocos")
    status = 0
    try:
        Shell(FileSystem(disk), stdout).run(sys.stdin)
    except DiskError as exc:
        _say(stdout, f"ERROR: {exc}")
        status = 1
    finally:
        _say(stdout, "fechando o disco simulado")
        _say(stdout, f"{disk.reads} reads")
        _say(stdout, f"{disk.writes} writes")
        disk.close()
    return status


if __name__ == "__main__":
    sys.exit(main())
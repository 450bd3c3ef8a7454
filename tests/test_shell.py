import io

import pytest

from fatsim.disk import BLOCK_SIZE, Disk
from fatsim.fat import FileSystem
from fatsim.shell import Shell, copy_in, copy_out, main


@pytest.fixture
def disk(tmp_path):
    d = Disk(tmp_path / "image", 20)
    yield d
    d.close()


@pytest.fixture
def fs(disk):
    return FileSystem(disk)


@pytest.fixture
def out():
    return io.StringIO()


@pytest.fixture
def shell(fs, out):
    return Shell(fs, out)


@pytest.fixture
def mounted(shell):
    shell.execute("formatar")
    shell.execute("montar")
    return shell


def test_help_lists_commands(shell, out):
    assert shell.execute("help") is True
    text = out.getvalue()
    assert text.startswith("Comandos:\n")
    for name in ("formatar", "montar", "importar", "exportar", "sair"):
        assert name in text


def test_unknown_command(shell, out):
    assert shell.execute("foo") is True
    assert out.getvalue() == "comando desconhecido: foo\ndigite 'help'.\n"


def test_sair_stops(shell, out):
    assert shell.execute("sair") is False
    assert out.getvalue() == ""


def test_blank_line_ignored(shell, out):
    assert shell.execute("   \n") is True
    assert out.getvalue() == ""


def test_format_and_mount(shell, out):
    assert shell.execute("formatar") is True
    assert shell.execute("montar") is True
    assert out.getvalue() == "formatou\nmontagem ok\n"


def test_mount_unformatted_fails(shell, out):
    assert shell.execute("montar") is True
    assert out.getvalue().endswith("falha de montagem!\n")


def test_usage_on_wrong_arity(mounted, out):
    out.truncate(0)
    out.seek(0)
    assert mounted.execute("criar") is True
    assert mounted.execute("formatar extra") is True
    assert out.getvalue() == "uso: criar <arquivo>\nuso: formatar\n"


def test_create_and_measure(mounted, fs, out):
    assert mounted.execute("criar a") is True
    assert mounted.execute("medir a") is True
    text = out.getvalue()
    assert "novo arquivo a\n" in text
    assert "o arquivo a mede 0\n" in text
    assert fs.getsize("a") == 0


def test_create_unmounted_fails(shell, out):
    assert shell.execute("criar a") is True
    assert out.getvalue().endswith("falha ao criar arquivo!\n")


def test_delete_then_measure_fails(mounted, fs, out):
    assert mounted.execute("criar a") is True
    assert mounted.execute("deletar a") is True
    assert mounted.execute("medir a") is True
    text = out.getvalue()
    assert "arquivo a deletado\n" in text
    assert text.endswith("falha na medida!\n")
    assert fs.find_file("a") is None


def test_import_export_round_trip(mounted, fs, out, tmp_path):
    payload = bytes(range(256)) * 160
    source = tmp_path / "source.bin"
    source.write_bytes(payload)
    target = tmp_path / "target.bin"

    mounted.execute("criar f")
    mounted.execute(f"importar {source} f")
    mounted.execute(f"exportar f {target}")

    assert target.read_bytes() == payload
    assert fs.getsize("f") == len(payload)
    assert f"copia de {len(payload)} bytes" in out.getvalue()


def test_ver_shows_contents(mounted, fs, tmp_path, out):
    source = tmp_path / "hello.txt"
    source.write_text("hello world\n")
    assert mounted.execute("criar h") is True
    assert mounted.execute(f"importar {source} h") is True
    out.truncate(0)
    out.seek(0)
    assert mounted.execute("ver h") is True
    assert out.getvalue() == "hello world\ncopia de 12 bytes\n"
    assert fs.read("h", 100, 0) == b"hello world\n"


def test_copy_in_missing_host_file(mounted, fs, out, tmp_path):
    mounted.execute("criar a")
    assert copy_in(fs, tmp_path / "missing", "a", out) is False
    assert "falha ao acessar" in out.getvalue()


def test_copy_out_unopenable_path(mounted, fs, out, tmp_path):
    mounted.execute("criar a")
    assert copy_out(fs, "a", tmp_path, out) is False
    assert "nao deu para abrir" in out.getvalue()


def test_copy_out_binary_stream(mounted, fs, out):
    mounted.execute("criar a")
    fs.write("a", b"\x00\xffdata", 0)
    sink = io.BytesIO()
    assert copy_out(fs, "a", sink, out) is True
    assert sink.getvalue() == b"\x00\xffdata"


def test_copy_in_short_write_when_disk_full(tmp_path):
    out = io.StringIO()
    with Disk(tmp_path / "small", 5) as small:
        fs = FileSystem(small)
        fs.format()
        fs.mount()
        fs.create("big")
        source = tmp_path / "big.bin"
        source.write_bytes(b"x" * (3 * BLOCK_SIZE))
        assert copy_in(fs, source, "big", out) is True
        assert fs.getsize("big") == 2 * BLOCK_SIZE
    assert "ATENCAO" in out.getvalue()


def test_run_stops_at_sair(shell, fs, out):
    script = io.StringIO("formatar\nsair\nmontar\n")
    shell.run(script)
    text = out.getvalue()
    assert "formatou" in text
    assert "montagem ok" not in text
    # The disk was formatted but not mounted, so mounting now succeeds.
    fs.mount()
    fs.create("a")
    assert fs.getsize("a") == 0


def test_run_stops_at_eof(shell, fs, out):
    shell.run(io.StringIO("formatar\nmontar\ncriar a\n"))
    text = out.getvalue()
    assert text.count(" sys> ") == 4
    assert "novo arquivo a" in text
    assert fs.getsize("a") == 0
    assert fs.find_file("b") is None


def test_main_requires_two_arguments(capsys):
    assert main(["only-one"]) == 1
    assert "uso:" in capsys.readouterr().out


def test_main_runs_session(tmp_path, monkeypatch, capsys):
    image = tmp_path / "disk.img"
    monkeypatch.setattr("sys.stdin", io.StringIO("formatar\nmontar\ncriar x\nsair\n"))
    assert main([str(image), "20"]) == 0
    text = capsys.readouterr().out
    assert f"simulacao de disco {image} com 20 blocos" in text
    assert "novo arquivo x" in text
    assert "fechando o disco simulado" in text
    assert image.stat().st_size == 20 * BLOCK_SIZE
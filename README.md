# fatsim

fatsim is a small file system built on a File Allocation Table, sized for
teaching. It runs on a simulated disk, which is an ordinary file split into
4096-byte blocks. An interactive shell lets you format the disk, create files,
copy data in and out, and look at the on-disk structures.

## Installing

    pip install .

To run the tests:

    pip install ".[test]"
    pytest

## The shell

    fat-sys <image-file> <number-of-blocks>

The same entry point is `fatsim.shell.main`, so `python -m fatsim.shell
<image-file> <number-of-blocks>` works as well.

If the image file does not exist, it is created. The file is always resized to
`number-of-blocks × 4096` bytes. The shell reads commands from standard input
at the ` sys> ` prompt. The command names and messages are in Portuguese.

| command | what it does |
|---|---|
| `formatar` | write a fresh superblock, an empty directory and the FAT |
| `montar` | mount the file system from the disk |
| `depurar` | print the superblock as stored on disk, then each file with its size and block chain |
| `criar <arquivo>` | create an empty file; a name is at most 6 bytes |
| `deletar <arquivo>` | delete a file and free its blocks |
| `ver <arquivo>` | print a file's contents, then the number of bytes copied |
| `medir <arquivo>` | print a file's size in bytes |
| `importar <host path> <name>` | copy a host file into a file on the disk that already exists and is empty |
| `exportar <name> <host path>` | copy a file from the disk out to a host file |
| `help` | list the commands |
| `sair` | leave the shell |

A command given the wrong number of arguments prints its usage line. An unknown
command prints a hint to type `help`. When the shell ends, whether through `sair`
or the end of input, it reports how many blocks it read and wrote and closes the
disk. If a block access falls outside the disk, the shell stops with exit
status 1. This happens, for example, when you format a disk that is too small to
hold the superblock, the directory and the FAT.

A typical session:

    $ fat-sys disk.img 20
     sys> formatar
     sys> montar
     sys> criar notes
     sys> importar /etc/hostname notes
     sys> ver notes
     sys> sair

## Using it from Python

```python
from fatsim.disk import Disk
from fatsim.fat import FileSystem

with Disk("disk.img", 20) as disk:
    fs = FileSystem(disk)
    fs.format()
    fs.mount()
    fs.create("hello")
    fs.write("hello", b"hello, world", 0)
    print(fs.getsize("hello"))       # 12
    print(fs.read("hello", 5, 0))    # b'hello'
```

- `fatsim.disk.Disk(filename, number_blocks)` has `read(number)` and
  `write(number, data)`, which work on whole blocks. It also has `close()` and
  the counters `reads` and `writes`. It raises `DiskError` when a block number
  is out of range or the data is not exactly one block long. It raises
  `ValueError` for a negative block count.
- `fatsim.fat.FileSystem(disk)` has `format()`, `mount()`, `create(name)`,
  `delete(name)`, `getsize(name)`, `read(name, length, offset)`,
  `write(name, data, offset)` and `find_file(name)`. `find_file` returns a
  directory index or `None`. `debug()` returns the text that `depurar` prints.
  It reads straight from the disk and does not need a mounted file system.
- `FileSystem` raises `FatError` when an operation cannot be carried out. This
  covers a file system that is not mounted or is mounted twice, a bad
  superblock, a missing or existing file, a name that is too long, a full
  directory and an invalid length or offset.
- `write` returns the number of bytes written. It writes fewer than were asked
  for if the disk runs out of free blocks. It does not raise in that case.
- `fatsim.shell` provides `copy_in`, `copy_out` and `Shell`, which the command
  is built on. Use `Shell.execute(line)` to run a single command line.

`FileSystem.write` logs its progress at debug level. It logs a warning when the
disk is full. Both go through the standard `logging` module under the logger
name `fatsim.fat`.

## Disk layout

- block 0: the superblock, holding the magic number, the block count and the
  number of FAT blocks
- block 1: the directory, with 256 slots of 16 bytes each
- blocks 2 and on: the FAT, one block per 1024 disk blocks, followed by the
  data blocks

Every file occupies at least one block, even when it is empty.

## What it does not do

- There is a single flat directory. There are no subdirectories.
- Once a file has content, it cannot be written again from offset 0. Data can
  only be added by writing at the current end of the file.
- Files cannot be truncated or renamed. To replace a file's content, delete it
  and create it again.
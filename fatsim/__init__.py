"""A FAT-style file system on a simulated block disk, with a command shell."""

__version__ = "0.1.0"
__all__ = ["disk", "fat", "shell"]
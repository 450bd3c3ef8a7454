[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fatsim"
version = "0.1.0"
description = "A small FAT-style file system on a simulated block disk, with an interactive shell"
requires-python = ">=3.10"
dependencies = []
keywords = ["fat", "filesystem", "file allocation table", "disk simulation", "education"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Education",
    "Topic :: System :: Filesystems",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
fat-sys = "fatsim.shell:main"

[tool.hatch.build.targets.wheel]
packages = ["fatsim"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

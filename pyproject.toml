[build-system]
requires = ["setuptools>=61"]
build-backend = "setuptools.build_meta"

[project]
name = "lc3sim"
version = "0.1.0"
description = "Assembler and phase-by-phase simulator for the LC-3 educational computer"
requires-python = ">=3.10"
dependencies = []
keywords = ["lc3", "lc-3", "assembler", "simulator", "emulator", "education", "computer-architecture"]
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
    "Topic :: System :: Emulators",
    "Topic :: Education",
    "Topic :: Software Development :: Assemblers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
lc3sim = "lc3sim.cli:main"

[tool.setuptools.packages.find]
include = ["lc3sim*"]

[tool.pytest.ini_options]
addopts = "-ra"

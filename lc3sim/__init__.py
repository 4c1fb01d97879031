"""Assembler and phase-by-phase simulator for the LC-3 computer."""

__version__ = "0.1.0"
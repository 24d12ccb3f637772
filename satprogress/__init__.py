"""Literals, DIMACS CNF headers and progress reporting of statistics for a CDCL SAT solver."""

__version__ = "0.1.0"
__all__ = ["types", "record", "state"]
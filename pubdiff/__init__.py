"""pubdiff: compare the externally visible surface of two versions of a unit."""

__version__ = "0.3.0"

"""Build-time generation of C/C++ version-info libraries."""

__version__ = "0.3.0"

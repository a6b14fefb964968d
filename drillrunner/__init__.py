"""Run, verify, watch and grade small Rust programming exercises."""

__version__ = "5.5.1"
__all__ = ["__version__"]
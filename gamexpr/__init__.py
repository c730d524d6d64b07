"""gamexpr — lazy evaluation of user-authored game formulas."""

__version__ = "0.1.0"

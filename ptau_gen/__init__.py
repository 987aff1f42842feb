"""Powers-of-tau parameter stream generator for BLS12-381."""

__version__ = "0.1.0"

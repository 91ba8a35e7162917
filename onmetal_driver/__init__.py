"""onmetal machine driver for the machine controller manager."""

__version__ = "0.1.0"

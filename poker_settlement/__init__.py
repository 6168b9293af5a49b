"""Settlement engine for recurring poker nights."""

__version__ = "0.1.0"

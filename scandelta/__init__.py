"""scandelta: diff and aggregate security scanner reports across runs."""

__version__ = "0.1.0"

"""Score Library - composer/work/recording library with remote push/pull."""

__version__ = "0.1.0"

"""Multi-provider README generation and comparison."""

__version__ = "0.1.0"

"""Local search index and query engine for skill registries."""

__version__ = "0.1.0"

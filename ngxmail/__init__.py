"""Core building blocks for a multi-tenant email platform for agents."""

__version__ = "0.1.0"

__all__ = [
    "auth",
    "crypto",
    "db",
    "embedder",
    "mime",
    "models",
    "pagination",
    "resources",
    "validate",
]
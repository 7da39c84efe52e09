"""peernet — community structure, null-model significance and peer exposure for relation graphs."""

from peernet.version import __version__

__all__ = ["__version__"]

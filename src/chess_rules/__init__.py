"""Chess rules engine with an HTTP session service."""

__version__ = "0.1.0"

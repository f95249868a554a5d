"""Request-mediation backend for a content-managed portfolio website."""

__version__ = "0.1.0"

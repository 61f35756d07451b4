from __future__ import annotations


class ConfigurationError(ValueError):
    """Raised for programmer errors such as an unknown range filter."""

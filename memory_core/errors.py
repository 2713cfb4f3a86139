from __future__ import annotations


class ConfigurationError(ValueError):
    """Raised when a game cannot be set up (unknown difficulty, catalog too small, bad settings)."""

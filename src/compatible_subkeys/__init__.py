"""Sort vanity PGP subkey candidates by creation timestamp."""

__version__ = "0.1.0"

"""Discord bot bridging chat commands to ModelScope Z-Image generation."""

__version__ = "1.0.0"

"""Custom exceptions for Glow Maze."""


class GlowMazeError(Exception):
    """Base exception for the game core."""


class ConfigurationError(GlowMazeError):
    """Raised when a session or level cannot be set up from its configuration."""

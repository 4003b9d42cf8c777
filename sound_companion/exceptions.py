"""
Exception classes for Sound Companion.

Exception Hierarchy:
    SoundCompanionError (base)
        ConfigError - Configuration file issues
        DownloadError - A single sound could not be downloaded
        GameStateError - Game state payload could not be parsed
"""


class SoundCompanionError(Exception):
    """
    Base exception for all Sound Companion errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (e.g. file name, URL).
    """

    def __init__(self, message: str, details: dict = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigError(SoundCompanionError):
    """
    Raised when there's an issue with the configuration file.

    Common causes:
        - config.yaml has invalid YAML syntax
        - Invalid field values (e.g. negative concurrency, chance above 1.0)
    """
    pass


class DownloadError(SoundCompanionError):
    """
    Raised when a single sound fails to download.

    NON-CRITICAL: the synchroniser counts it, reports it and moves on.

    Attributes:
        file_name: Name of the sound that failed.
    """

    def __init__(self, message: str, file_name: str = "", details: dict = None) -> None:
        super().__init__(message, details)
        self.file_name = file_name


class GameStateError(SoundCompanionError):
    """Raised when a game state payload is not a JSON object we can read."""
    pass

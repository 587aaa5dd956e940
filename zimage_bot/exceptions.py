"""
Custom exceptions for the bot, providing a structured error hierarchy.
"""


class BotBaseException(Exception):
    """Base exception for all custom exceptions in this bot."""

    pass


class ConfigurationError(BotBaseException):
    """Raised for errors in bot configuration, like missing keys or invalid values."""

    pass

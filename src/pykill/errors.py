"""Exceptions raised by pykill."""


class PykillError(Exception):
    """Base class for pykill errors."""


class NotificationError(PykillError):
    """The summary notification could not be delivered."""

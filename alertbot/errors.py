"""Exception types raised by the reminder core."""


class AlertBotError(Exception):
    """Base class for all bot errors."""


class ParseError(AlertBotError):
    """Text does not look like a reminder or its date/time is unrecognized."""


class PersistenceError(AlertBotError):
    """The state snapshot could not be written.

    The in-memory change has already been applied when this is raised.
    """


class CorruptStateError(AlertBotError):
    """The state snapshot exists but cannot be read or decoded."""


class DeliveryError(AlertBotError):
    """A Telegram call needed to deliver a message failed."""

"""
Exceptions raised by the Flashdeck engine
"""


class FlashdeckError(Exception):
    """Base class for Flashdeck errors"""


class SessionError(FlashdeckError):
    """An answer or card does not belong to the running session"""


class SnapshotFormatError(FlashdeckError):
    """A stored snapshot cannot be interpreted"""

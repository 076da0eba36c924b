"""
Exception types raised by speedreader.
"""


class SpeedReaderError(Exception):
    """Base class for all speedreader errors."""


class MalformedDocument(SpeedReaderError):
    """The document could not be read or a required structural file is missing."""


class EmptyResult(SpeedReaderError):
    """The document was read successfully but contained no text."""


class InvalidConfiguration(SpeedReaderError, ValueError):
    """A configuration object holds a value that cannot be used."""

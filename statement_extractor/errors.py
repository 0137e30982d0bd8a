"""Exception types raised by the extractor."""


class ExtractorError(Exception):
    """Base class for extractor failures."""


class TextServiceUnavailableError(ExtractorError):
    """The text acquisition service is missing or cannot run at all."""


class DocumentReadError(ExtractorError):
    """The document bytes could not be opened or read (corrupt, encrypted, not a PDF)."""


class UnsupportedFormatError(ExtractorError):
    """The statement does not carry the marker of the requested layout."""

class HighlighterError(Exception):
    """Base class for errors raised by the highlighter core."""


class InvalidPosition(HighlighterError, ValueError):
    """A position descriptor is present but cannot be placed on a page.

    `field` names the descriptor key at fault ("page_number", "left", ...).
    """

    def __init__(self, message: str, field: str = ""):
        super().__init__(message)
        self.field = field


class HighlightDataError(HighlighterError):
    """Highlight JSON is malformed or lacks the expected field container."""


class DocumentLoadError(HighlighterError):
    """The document could not be decoded by the rendering backend."""


class NoDocumentError(HighlighterError):
    """An operation needs a loaded document but none is open."""

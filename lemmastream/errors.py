class LemmastreamError(Exception):
    """Base class for errors raised by lemmastream."""


class ResourceLoadError(LemmastreamError):
    """A stop-word list, lexicon or config file could not be read."""

    def __init__(self, message: str, source=None):
        super().__init__(message)
        self.source = source


class ConfigurationError(LemmastreamError, ValueError):
    """Analyzer settings are invalid (e.g. a non-positive max token length)."""
